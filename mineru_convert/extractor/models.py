"""Pydantic models for conversion output."""

from __future__ import annotations

import base64
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class ExtractedImage(BaseModel):
    """An image found in a result container. data is the base64 of the raw bytes."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    mime_type: str
    data: str
    page_number: int | None = None

    @property
    def raw_bytes(self) -> bytes:
        return base64.b64decode(self.data)


class ConversionMetadata(BaseModel):
    model_config = ConfigDict(frozen=True)

    page_count: int = Field(default=1, ge=1)
    title: str | None = None
    processing_timestamp: datetime


class ConversionResult(BaseModel):
    """Normalized output of one conversion: markdown, images, metadata."""

    model_config = ConfigDict(frozen=True)

    markdown: str
    images: tuple[ExtractedImage, ...] = ()
    metadata: ConversionMetadata

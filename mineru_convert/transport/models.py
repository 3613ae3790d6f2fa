"""Pydantic models for the MinerU batch API wire format."""

from __future__ import annotations

from pydantic import BaseModel, Field


class UploadUrlData(BaseModel):
    batch_id: str
    file_urls: list[str] = Field(default_factory=list)


class UploadUrlResponse(BaseModel):
    """Envelope returned by POST /file-urls/batch."""

    code: int
    msg: str = ""
    trace_id: str = ""
    data: UploadUrlData | None = None


class UploadLocation(BaseModel):
    batch_id: str
    upload_url: str


class ExtractProgress(BaseModel):
    extracted_pages: int = 0
    total_pages: int = 0
    start_time: str | None = None


class ExtractResult(BaseModel):
    """Per-file entry of a batch status response."""

    file_name: str = ""
    state: str
    full_zip_url: str | None = None
    err_msg: str | None = None
    data_id: str | None = None
    extract_progress: ExtractProgress | None = None


class BatchResultData(BaseModel):
    batch_id: str
    extract_result: list[ExtractResult] = Field(default_factory=list)


class BatchResultResponse(BaseModel):
    """Envelope returned by GET /extract-results/batch/{batch_id}."""

    code: int
    msg: str = ""
    trace_id: str = ""
    data: BatchResultData | None = None

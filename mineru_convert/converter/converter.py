"""DocumentConverter — bytes in, ConversionResult out."""

from __future__ import annotations

import asyncio
import base64
import binascii
import logging
import re
import time

import httpx

from mineru_convert.config.models import ConversionConfig
from mineru_convert.errors import (
    DownloadFailed,
    JobCancelled,
    MalformedContainer,
    TransportError,
)
from mineru_convert.extractor import ContainerExtractor, ConversionResult, error_result
from mineru_convert.jobs import JobController
from mineru_convert.transport import TransportClient, create_transport

logger = logging.getLogger(__name__)

_DATA_URL_PREFIX = re.compile(r"^data:.*?;base64,")


def clean_base64(value: str) -> bytes:
    """Decode a base64 string, tolerating a ``data:...;base64,`` prefix."""
    try:
        return base64.b64decode(_DATA_URL_PREFIX.sub("", value.strip()), validate=True)
    except binascii.Error as e:
        raise ValueError(f"Invalid base64 document: {e}") from e


def synthetic_file_name() -> str:
    return f"document_{int(time.time() * 1000)}.pdf"


class DocumentConverter:
    """Composes job submission, polling, download, and container extraction.

    Job-level failures propagate as ConversionError subclasses. A result
    container that cannot be parsed degrades into an error-document result
    instead of raising, since the remote job itself succeeded.
    """

    def __init__(
        self,
        transport: TransportClient,
        config: ConversionConfig | None = None,
        extractor: ContainerExtractor | None = None,
    ) -> None:
        self.config = config or ConversionConfig()
        self.transport = transport
        self.controller = JobController(transport, self.config.polling)
        self.extractor = extractor or ContainerExtractor()

    @classmethod
    def from_config(cls, config: ConversionConfig) -> DocumentConverter:
        return cls(create_transport(config.mineru), config)

    def is_enabled(self) -> bool:
        return self.transport.is_enabled()

    async def convert(
        self,
        file_bytes: bytes | str,
        *,
        file_name: str | None = None,
        cancel: asyncio.Event | None = None,
    ) -> ConversionResult:
        """Convert a document. ``str`` input is treated as base64."""
        if isinstance(file_bytes, str):
            file_bytes = clean_base64(file_bytes)
        file_name = file_name or synthetic_file_name()

        job = await self.controller.submit(file_bytes, file_name)
        locator = await self.controller.await_completion(job, cancel=cancel)
        if cancel is not None and cancel.is_set():
            raise JobCancelled("Conversion cancelled before download", batch_id=job.batch_id)
        container = await self._download(locator, job.batch_id)
        return self.extract(container)

    def extract(self, container: bytes) -> ConversionResult:
        """Run the container extractor, degrading unreadable archives to an error document."""
        try:
            return self.extractor.extract(container)
        except MalformedContainer as e:
            logger.error("Error parsing ZIP content: %s", e)
            return error_result(str(e))
        except Exception as e:
            logger.error("Error parsing ZIP content", exc_info=True)
            return error_result(str(e) or type(e).__name__)

    async def _download(self, locator: str, batch_id: str) -> bytes:
        try:
            data = await self.transport.download_result(locator)
        except httpx.HTTPStatusError as e:
            raise DownloadFailed(
                f"Failed to download result from {locator}",
                batch_id=batch_id,
                status_code=e.response.status_code,
            ) from e
        except httpx.HTTPError as e:
            raise TransportError(
                f"Failed to download result: {e}", batch_id=batch_id
            ) from e
        logger.info("downloaded %d bytes for batch %s", len(data), batch_id)
        return data

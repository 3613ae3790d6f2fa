"""MinerU batch API transport over httpx."""

from __future__ import annotations

import logging
import time

import httpx

from mineru_convert.config.models import MineruConfig
from mineru_convert.errors import ServiceUnavailable
from mineru_convert.transport.base import TransportClient
from mineru_convert.transport.models import BatchResultResponse, UploadUrlResponse

logger = logging.getLogger(__name__)


class MineruTransport(TransportClient):
    """MinerU v4 batch API adapter using httpx.AsyncClient.

    A fresh client is opened per request, so one instance can be shared
    by concurrent conversions.
    """

    def __init__(self, config: MineruConfig) -> None:
        self.config = config
        self._base_url = config.api_url.rstrip("/")
        self._token = config.resolve_token()

    def is_enabled(self) -> bool:
        return self.config.enabled and bool(self._base_url) and bool(self._token)

    def _auth_headers(self) -> dict[str, str]:
        return {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self._token}",
        }

    def _ensure_enabled(self) -> None:
        if not self.is_enabled():
            raise ServiceUnavailable(
                "MinerU service is not enabled or not configured properly"
            )

    async def request_upload_location(self, file_name: str) -> UploadUrlResponse:
        self._ensure_enabled()
        payload = {
            "enable_formula": self.config.enable_formula,
            "enable_table": self.config.enable_table,
            "language": self.config.language,
            "files": [
                {
                    "name": file_name,
                    "is_ocr": self.config.is_ocr,
                    "data_id": f"doc_{int(time.time() * 1000)}",
                }
            ],
        }
        async with httpx.AsyncClient() as client:
            resp = await client.post(
                f"{self._base_url}/file-urls/batch",
                json=payload,
                headers=self._auth_headers(),
                timeout=self.config.request_timeout,
            )
            resp.raise_for_status()
            return UploadUrlResponse.model_validate(resp.json())

    async def upload_bytes(self, upload_url: str, data: bytes) -> None:
        # Presigned URL: no auth header, and no content type so the
        # signature computed by the server still matches.
        async with httpx.AsyncClient() as client:
            resp = await client.put(
                upload_url, content=data, timeout=self.config.request_timeout
            )
            resp.raise_for_status()
        logger.debug("uploaded %d bytes", len(data))

    async def query_status(self, batch_id: str) -> BatchResultResponse:
        self._ensure_enabled()
        async with httpx.AsyncClient() as client:
            resp = await client.get(
                f"{self._base_url}/extract-results/batch/{batch_id}",
                headers=self._auth_headers(),
                timeout=self.config.request_timeout,
            )
            resp.raise_for_status()
            return BatchResultResponse.model_validate(resp.json())

    async def download_result(self, locator: str) -> bytes:
        async with httpx.AsyncClient(follow_redirects=True) as client:
            resp = await client.get(locator, timeout=self.config.request_timeout)
            resp.raise_for_status()
            return resp.content

"""Abstract transport interface to the remote conversion API."""

from __future__ import annotations

from abc import ABC, abstractmethod

from mineru_convert.transport.models import BatchResultResponse, UploadUrlResponse


class TransportClient(ABC):
    """Stateless request/response contract with the remote batch API.

    Implementations parse response bodies into the wire models and let
    failures surface as raised exceptions:

    - ``ServiceUnavailable`` when disabled, before any network call
    - ``httpx.HTTPStatusError`` for non-2xx responses
    - ``httpx.HTTPError`` for network faults
    - ``pydantic.ValidationError`` for malformed bodies

    Classification into the conversion error taxonomy happens in the
    job controller and facade, not here.
    """

    @abstractmethod
    def is_enabled(self) -> bool:
        """True when the service is switched on and has an endpoint and credential."""
        ...

    @abstractmethod
    async def request_upload_location(self, file_name: str) -> UploadUrlResponse:
        ...

    @abstractmethod
    async def upload_bytes(self, upload_url: str, data: bytes) -> None:
        ...

    @abstractmethod
    async def query_status(self, batch_id: str) -> BatchResultResponse:
        ...

    @abstractmethod
    async def download_result(self, locator: str) -> bytes:
        ...

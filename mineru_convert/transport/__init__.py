"""Transport layer for the remote conversion API."""

from mineru_convert.config.models import MineruConfig
from mineru_convert.transport.base import TransportClient
from mineru_convert.transport.mineru import MineruTransport
from mineru_convert.transport.models import (
    BatchResultResponse,
    ExtractProgress,
    ExtractResult,
    UploadLocation,
    UploadUrlResponse,
)


def create_transport(config: MineruConfig) -> TransportClient:
    """Create the HTTP transport from config.

    The API token is resolved from config.api_token or the environment
    variable named in config.api_token_env.
    """
    return MineruTransport(config)


__all__ = [
    "BatchResultResponse",
    "ExtractProgress",
    "ExtractResult",
    "MineruTransport",
    "TransportClient",
    "UploadLocation",
    "UploadUrlResponse",
    "create_transport",
]

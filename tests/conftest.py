"""Shared test fixtures for mineru-convert."""

import io
import logging
import zipfile
from unittest.mock import AsyncMock, MagicMock

import pytest

from mineru_convert.config.models import AppConfig, MineruConfig
from mineru_convert.transport.base import TransportClient
from mineru_convert.transport.models import (
    BatchResultData,
    BatchResultResponse,
    ExtractResult,
    UploadUrlData,
    UploadUrlResponse,
)

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 16


def make_zip(entries: list[tuple[str, bytes | str]]) -> bytes:
    """Build an in-memory ZIP. Names ending in '/' become directory entries."""
    buf = io.BytesIO()
    with zipfile.ZipFile(buf, "w") as zf:
        for name, content in entries:
            if name.endswith("/"):
                zf.writestr(zipfile.ZipInfo(name), "")
            else:
                zf.writestr(name, content)
    return buf.getvalue()


def upload_response(batch_id="batch-123", urls=None, code=0, msg="ok"):
    return UploadUrlResponse(
        code=code,
        msg=msg,
        trace_id="trace-1",
        data=UploadUrlData(
            batch_id=batch_id,
            file_urls=["https://upload.example/put"] if urls is None else urls,
        ),
    )


def batch_response(state, batch_id="batch-123", zip_url=None, err_msg=None, code=0):
    return BatchResultResponse(
        code=code,
        msg="ok",
        trace_id="trace-2",
        data=BatchResultData(
            batch_id=batch_id,
            extract_result=[
                ExtractResult(
                    file_name="doc.pdf",
                    state=state,
                    full_zip_url=zip_url,
                    err_msg=err_msg,
                )
            ],
        ),
    )


@pytest.fixture
def sample_zip():
    return make_zip([
        ("doc/", ""),
        ("doc/full.md", "# Sample Title\n\nBody text."),
        ("doc/images/page_2_fig.png", PNG_BYTES),
        ("doc/layout.json", '{"pdf_info": []}'),
    ])


@pytest.fixture
def mock_transport():
    transport = MagicMock(spec=TransportClient)
    transport.is_enabled = MagicMock(return_value=True)
    transport.request_upload_location = AsyncMock(return_value=upload_response())
    transport.upload_bytes = AsyncMock(return_value=None)
    transport.query_status = AsyncMock(
        return_value=batch_response("done", zip_url="https://cdn.example/result.zip")
    )
    transport.download_result = AsyncMock(return_value=b"")
    return transport


@pytest.fixture
def sample_config():
    return AppConfig()


@pytest.fixture
def enabled_mineru_config():
    return MineruConfig(
        api_url="https://mineru.example/api/v4",
        api_token="tok-123",
        enabled=True,
    )


@pytest.fixture(autouse=True)
def restore_package_logger():
    """Undo handlers installed by configure_logging (CLI runs, logging tests)."""
    logger = logging.getLogger("mineru_convert")
    handlers, level = list(logger.handlers), logger.level
    yield
    logger.handlers = handlers
    logger.setLevel(level)

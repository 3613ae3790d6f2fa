"""Extract markdown and images from a conversion result container (ZIP)."""

from __future__ import annotations

import base64
import io
import json
import logging
import re
import uuid
import zipfile
from datetime import datetime, timezone
from pathlib import PurePosixPath

from mineru_convert.errors import MalformedContainer
from mineru_convert.extractor.models import (
    ConversionMetadata,
    ConversionResult,
    ExtractedImage,
)

logger = logging.getLogger(__name__)

MARKDOWN_EXTENSIONS: set[str] = {".md", ".markdown"}

IMAGE_MIME_TYPES: dict[str, str] = {
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".gif": "image/gif",
    ".webp": "image/webp",
    ".bmp": "image/bmp",
}

_DEFAULT_IMAGE_MIME = "image/jpeg"

_PAGE_RE = re.compile(r"page[_-]?(\d+)|(\d+)[_-]?page", re.IGNORECASE)
_TITLE_RE = re.compile(r"^#[ \t]+(.+)$", re.MULTILINE)

_FRAGMENT_SEPARATOR = "\n\n"

NO_CONTENT_MARKDOWN = (
    "# Document Content\n\nNo readable content found in this document."
)


def _suffix(name: str) -> str:
    return PurePosixPath(name).suffix.lower()


def mime_type_for(name: str) -> str:
    """Map an image file name to its MIME type, defaulting to image/jpeg."""
    return IMAGE_MIME_TYPES.get(_suffix(name), _DEFAULT_IMAGE_MIME)


def page_number_from_name(name: str) -> int | None:
    """Best-effort page number from names like ``page_3.png`` or ``12-page.jpg``."""
    match = _PAGE_RE.search(name)
    if match is None:
        return None
    return int(match.group(1) or match.group(2))


def title_from_markdown(markdown: str) -> str | None:
    """Return the text of the first top-level heading, if any."""
    match = _TITLE_RE.search(markdown)
    return match.group(1).strip() if match else None


def _fallback_markdown(images: list[ExtractedImage]) -> str:
    if not images:
        return NO_CONTENT_MARKDOWN
    lines = [
        "# Document Content\n",
        f"\nThis document contains {len(images)} image(s). The images have been "
        "extracted and can be processed by vision-capable models.\n",
    ]
    for index, image in enumerate(images, start=1):
        lines.append(f"\n## Image {index}: {image.name}\n")
        if image.page_number is not None:
            lines.append(f"- Page: {image.page_number}\n")
    return "".join(lines)


def _build_result(markdown: str, images: list[ExtractedImage]) -> ConversionResult:
    page_numbers = [img.page_number for img in images if img.page_number is not None]
    return ConversionResult(
        markdown=markdown,
        images=tuple(images),
        metadata=ConversionMetadata(
            page_count=max([1, *page_numbers]),
            title=title_from_markdown(markdown),
            processing_timestamp=datetime.now(timezone.utc),
        ),
    )


def error_result(reason: str) -> ConversionResult:
    """A degraded result whose markdown explains why the container was unreadable."""
    markdown = (
        "# Document Processing Error\n\n"
        f"Failed to parse document content: {reason}\n\n"
        "This may be due to an unsupported document format or a corrupted file."
    )
    return ConversionResult(
        markdown=markdown,
        images=(),
        metadata=ConversionMetadata(
            page_count=1,
            processing_timestamp=datetime.now(timezone.utc),
        ),
    )


class ContainerExtractor:
    """Classifies ZIP entries into markdown and images without assuming a layout.

    Extraction is best effort per entry and total over the container: an
    entry that cannot be read or decoded is logged and skipped, while an
    archive that cannot be opened at all raises MalformedContainer.
    """

    def extract(self, data: bytes) -> ConversionResult:
        fragments: list[str] = []
        images: list[ExtractedImage] = []

        try:
            archive = zipfile.ZipFile(io.BytesIO(data))
        except (zipfile.BadZipFile, OSError, ValueError, EOFError) as e:
            raise MalformedContainer(f"Failed to open ZIP file: {e}") from e

        with archive:
            entries = archive.infolist()
            if not entries:
                logger.info("ZIP file is empty")
            for info in entries:
                if info.is_dir():
                    continue
                try:
                    self._process_entry(archive, info, fragments, images)
                except Exception:
                    logger.warning("Error processing %s", info.filename, exc_info=True)

        markdown = _FRAGMENT_SEPARATOR.join(fragments)
        if not markdown.strip():
            markdown = _fallback_markdown(images)

        result = _build_result(markdown, images)
        logger.info(
            "ZIP parsing complete: %d chars markdown, %d images",
            len(result.markdown),
            len(result.images),
        )
        return result

    def _process_entry(
        self,
        archive: zipfile.ZipFile,
        info: zipfile.ZipInfo,
        fragments: list[str],
        images: list[ExtractedImage],
    ) -> None:
        name = info.filename
        ext = _suffix(name)

        if ext in MARKDOWN_EXTENSIONS:
            text = archive.read(info).decode("utf-8")
            fragments.append(text)
            logger.debug("Found markdown file: %s, length: %d", name, len(text))
        elif ext in IMAGE_MIME_TYPES:
            content = archive.read(info)
            images.append(
                ExtractedImage(
                    id=f"img_{uuid.uuid4().hex[:12]}",
                    name=name,
                    mime_type=mime_type_for(name),
                    data=base64.b64encode(content).decode("ascii"),
                    page_number=page_number_from_name(name),
                )
            )
            logger.debug("Found image: %s, size: %d bytes", name, len(content))
        elif ext == ".json":
            try:
                payload = json.loads(archive.read(info).decode("utf-8"))
            except (UnicodeDecodeError, json.JSONDecodeError) as e:
                logger.warning("Failed to parse JSON %s: %s", name, e)
                return
            keys = list(payload) if isinstance(payload, dict) else type(payload).__name__
            logger.debug("Found metadata JSON: %s %s", name, keys)
        else:
            logger.debug("Skipping unknown file type: %s", name)

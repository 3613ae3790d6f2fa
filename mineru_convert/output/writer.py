"""ResultWriter — writes ConversionResult models to disk."""

from __future__ import annotations

import logging
import re
from pathlib import Path, PurePosixPath

import yaml

from mineru_convert.config.models import OutputConfig
from mineru_convert.extractor.models import ConversionResult

logger = logging.getLogger(__name__)


def _sanitize_name(name: str) -> str:
    """Make a container entry name or stem safe for use as a filename.

    Nested entry paths are flattened with ``--`` and ``..`` segments are
    removed so nothing can be written outside the output directory.
    """
    name = "--".join(p for p in PurePosixPath(name).parts if p not in ("", "/"))
    name = name.replace("..", "")
    name = re.sub(r"[^\w\-\.@]", "", name)
    name = re.sub(r"-{3,}", "--", name)
    if not name or name.strip(".") == "":
        name = "_unnamed"
    return name


def _unique_name(name: str, used: set[str]) -> str:
    """Return name, or name with a ``-N`` suffix before the extension if already taken."""
    candidate = name
    stem, dot, suffix = name.rpartition(".")
    if not dot:
        stem, suffix = name, ""
    counter = 1
    while candidate in used:
        candidate = f"{stem}-{counter}{dot}{suffix}"
        counter += 1
    used.add(candidate)
    return candidate


class ResultWriter:
    """Writes a conversion's markdown, decoded images, and a YAML metadata sidecar.

    Layout under base_dir::

        {stem}.md
        {stem}.meta.yaml
        {stem}_images/{entry name}
    """

    def __init__(self, config: OutputConfig) -> None:
        self.config = config
        self.base_dir = Path(config.base_dir)

    def write(self, result: ConversionResult, stem: str, *, dry_run: bool = False) -> Path:
        """Write a result to disk and return the markdown file's path."""
        safe_stem = _sanitize_name(stem)
        dest = self.base_dir / f"{safe_stem}.md"

        if dry_run:
            logger.debug("dry-run: would write %s", dest)
            return dest

        dest.parent.mkdir(parents=True, exist_ok=True)
        dest.write_text(result.markdown, encoding="utf-8")
        logger.info("wrote %s (%d chars)", dest, len(result.markdown))

        image_files: list[dict] = []
        if result.images:
            image_dir = self.base_dir / f"{safe_stem}_images"
            image_dir.mkdir(parents=True, exist_ok=True)
            used: set[str] = set()
            for image in result.images:
                path = image_dir / _unique_name(_sanitize_name(image.name), used)
                path.write_bytes(image.raw_bytes)
                image_files.append({
                    "id": image.id,
                    "name": image.name,
                    "mime_type": image.mime_type,
                    "page_number": image.page_number,
                    "path": str(path),
                })
            logger.debug("wrote %d images to %s", len(result.images), image_dir)

        self._write_sidecar(safe_stem, result, image_files)
        return dest

    def _write_sidecar(
        self, stem: str, result: ConversionResult, image_files: list[dict]
    ) -> None:
        meta_path = self.base_dir / f"{stem}.meta.yaml"
        meta = {
            "page_count": result.metadata.page_count,
            "title": result.metadata.title,
            "processing_timestamp": result.metadata.processing_timestamp.isoformat(),
            "images": image_files,
        }
        meta_path.write_text(
            yaml.safe_dump(meta, default_flow_style=False, sort_keys=False),
            encoding="utf-8",
        )
        logger.debug("wrote metadata %s", meta_path)

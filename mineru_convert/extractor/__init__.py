"""Result container extraction: ZIP entries to markdown and images."""

from mineru_convert.extractor.extractor import (
    IMAGE_MIME_TYPES,
    MARKDOWN_EXTENSIONS,
    ContainerExtractor,
    error_result,
    mime_type_for,
    page_number_from_name,
    title_from_markdown,
)
from mineru_convert.extractor.models import (
    ConversionMetadata,
    ConversionResult,
    ExtractedImage,
)

__all__ = [
    "ContainerExtractor",
    "ConversionMetadata",
    "ConversionResult",
    "ExtractedImage",
    "IMAGE_MIME_TYPES",
    "MARKDOWN_EXTENSIONS",
    "error_result",
    "mime_type_for",
    "page_number_from_name",
    "title_from_markdown",
]

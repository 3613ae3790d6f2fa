"""Conversion facade: submit a document and return its normalized result."""

from mineru_convert.converter.converter import (
    DocumentConverter,
    clean_base64,
    synthetic_file_name,
)

__all__ = [
    "DocumentConverter",
    "clean_base64",
    "synthetic_file_name",
]

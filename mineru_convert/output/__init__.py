"""Output subsystem — writes conversion results to disk."""

from mineru_convert.output.writer import ResultWriter

__all__ = [
    "ResultWriter",
]

"""mineru-convert — convert documents to markdown through the MinerU batch API."""

from mineru_convert.config import AppConfig, ConversionConfig, load_config
from mineru_convert.converter import DocumentConverter
from mineru_convert.extractor import (
    ContainerExtractor,
    ConversionMetadata,
    ConversionResult,
    ExtractedImage,
)
from mineru_convert.jobs import ConversionJob, JobController, JobState, JobStatus
from mineru_convert.output import ResultWriter
from mineru_convert.transport import MineruTransport, TransportClient

__version__ = "0.1.0"

__all__ = [
    "AppConfig",
    "ContainerExtractor",
    "ConversionConfig",
    "ConversionJob",
    "ConversionMetadata",
    "ConversionResult",
    "DocumentConverter",
    "ExtractedImage",
    "JobController",
    "JobState",
    "JobStatus",
    "MineruTransport",
    "ResultWriter",
    "TransportClient",
    "load_config",
]

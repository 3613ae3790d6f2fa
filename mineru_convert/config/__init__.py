from .loader import load_config
from .models import (
    AppConfig,
    ConversionConfig,
    MineruConfig,
    OutputConfig,
    PollingConfig,
)

__all__ = [
    "AppConfig",
    "ConversionConfig",
    "MineruConfig",
    "OutputConfig",
    "PollingConfig",
    "load_config",
]

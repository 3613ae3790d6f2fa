import os
from typing import Literal

from pydantic import BaseModel, Field


class MineruConfig(BaseModel):
    api_url: str = "https://mineru.net/api/v4"
    api_token_env: str = "MINERU_API_TOKEN"
    api_token: str | None = None
    enabled: bool = False
    request_timeout: float = Field(default=60.0, gt=0)
    enable_formula: bool = True
    enable_table: bool = True
    language: str = "auto"
    is_ocr: bool = True

    def resolve_token(self) -> str:
        """Return the explicit token, falling back to the env var named in api_token_env."""
        if self.api_token:
            return self.api_token
        return os.environ.get(self.api_token_env, "")


class PollingConfig(BaseModel):
    max_wait: float = Field(default=300.0, gt=0)
    poll_interval: float = Field(default=5.0, gt=0)


class ConversionConfig(BaseModel):
    mineru: MineruConfig = Field(default_factory=MineruConfig)
    polling: PollingConfig = Field(default_factory=PollingConfig)


class OutputConfig(BaseModel):
    base_dir: str = "converted"


class AppConfig(BaseModel):
    conversion: ConversionConfig = Field(default_factory=ConversionConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
    log_level: Literal["debug", "info", "warn", "error"] = "info"
    log_format: Literal["text", "json"] = "text"

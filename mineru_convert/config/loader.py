"""Loads mineru-convert.yaml, expanding ${VAR} and ${VAR:-default} references."""

import os
import re
from pathlib import Path

import yaml
from pydantic import ValidationError

from .models import AppConfig

CONFIG_FILENAME = "mineru-convert.yaml"

_ENV_REF = re.compile(r"\$\{(\w+)(?::-([^}]*))?\}")


def config_search_paths(cli_path: str | None = None) -> list[Path]:
    """Candidate config files, highest precedence first."""
    paths = [Path.cwd() / CONFIG_FILENAME, Path.home() / ".mineru-convert" / "config.yaml"]
    if cli_path:
        paths.insert(0, Path(cli_path))
    return paths


def load_config(cli_path: str | None = None) -> AppConfig:
    """Build an AppConfig from the first non-empty config file found.

    Falls back to built-in defaults when no file exists. A file that is not
    valid YAML or fails validation raises ValueError naming the file.
    """
    for path in config_search_paths(cli_path):
        if not path.is_file():
            continue
        raw = _read_yaml(path)
        if not raw:
            continue
        try:
            return AppConfig.model_validate(_expand_env_vars(raw))
        except ValidationError as e:
            raise ValueError(f"Invalid config in {path}: {e}") from e
    return AppConfig()


def _read_yaml(path: Path) -> object:
    try:
        return yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML in {path}: {e}") from e


def _expand_env_vars(obj: object) -> object:
    """Substitute environment references in every string of a parsed YAML tree.

    Unset variables expand to their ``:-`` default, or to an empty string.
    """
    if isinstance(obj, str):
        return _ENV_REF.sub(lambda m: os.environ.get(m.group(1), m.group(2) or ""), obj)
    if isinstance(obj, dict):
        return {key: _expand_env_vars(value) for key, value in obj.items()}
    if isinstance(obj, list):
        return [_expand_env_vars(item) for item in obj]
    return obj


# Written by `mineru-convert config init`
DEFAULT_CONFIG_TEMPLATE = """\
# mineru-convert.yaml

conversion:
  mineru:
    api_url: "https://mineru.net/api/v4"
    api_token_env: "MINERU_API_TOKEN"   # or api_token: "${MINERU_API_TOKEN}"
    enabled: true
    request_timeout: 60
    enable_formula: true
    enable_table: true
    language: "auto"           # auto | en | ch | ...
    is_ocr: true
  polling:
    max_wait: 300              # seconds
    poll_interval: 5           # seconds

# Output
output:
  base_dir: "converted"

# Logging
log_level: "info"              # debug | info | warn | error
log_format: "text"             # text | json
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import jsonschema
import yaml
from jsonschema.exceptions import ValidationError

"""Config loader.

Responsibilities:
- Locate the YAML config (``RFQ_RECAP_CONFIG`` env var, else config/recap.yml)
- Validate it against the packaged JSON schema (unknown keys rejected)
- Apply defaults; a missing config file means "all defaults"
"""

__all__ = [
    "ConfigError",
    "RecapConfig",
    "DEFAULT_CONFIG_PATH",
    "SCHEMA_PATH",
    "config_path_from_env",
    "load_config",
]

SCHEMA_PATH = Path(__file__).parent / "config_schema.json"
DEFAULT_CONFIG_PATH = Path("config/recap.yml")
CONFIG_ENV_VAR = "RFQ_RECAP_CONFIG"


class ConfigError(Exception):
    pass


@dataclass(frozen=True)
class RecapConfig:
    source_file: str = "RECAP PENAWARAN 2025.csv"  # loaded when no file is given
    top_n: int = 10
    type_sample_size: int = 100
    preview_rows: int = 10
    encoding: str = "utf-8-sig"


def _validate_config_schema(data: dict[str, Any]) -> None:
    """Validate config data against the JSON schema.

    Raises:
        ConfigError: schema file missing or invalid, or config data fails validation
    """
    if not SCHEMA_PATH.exists():
        raise ConfigError(f"config schema not found: {SCHEMA_PATH}")
    try:
        schema = json.loads(SCHEMA_PATH.read_text(encoding="utf-8"))
        jsonschema.validate(data, schema)
    except json.JSONDecodeError as e:
        raise ConfigError(f"invalid schema file: {e}") from e
    except ValidationError as e:
        raise ConfigError(f"config validation failed: {e.message}") from e


def config_path_from_env() -> Path:
    value = os.getenv(CONFIG_ENV_VAR)
    return Path(value) if value else DEFAULT_CONFIG_PATH


def load_config(path: Path | None = None) -> RecapConfig:
    path = path if path is not None else config_path_from_env()
    if not path.exists():
        return RecapConfig()
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid yaml: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"config root must be a mapping: {path}")

    _validate_config_schema(data)

    defaults = RecapConfig()
    return RecapConfig(
        source_file=data.get("source_file", defaults.source_file),
        top_n=data.get("top_n", defaults.top_n),
        type_sample_size=data.get("type_sample_size", defaults.type_sample_size),
        preview_rows=data.get("preview_rows", defaults.preview_rows),
        encoding=data.get("encoding", defaults.encoding),
    )

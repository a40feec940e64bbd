from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import jsonschema
import yaml
from jsonschema.exceptions import ValidationError

from ..services.locator import DEFAULT_MAX_STEPS

"""Run configuration loader.

Responsibilities:
- Load the YAML run config (default ``config/rows.yml``)
- Validate it against ``config_schema.json``
- Apply defaults (sheet 0, drop failing rows, 1000 locator steps, ./logs)
"""

__all__ = [
    "ConfigError",
    "RunConfig",
    "SCHEMA_PATH",
    "load_config",
]

SCHEMA_PATH = Path(__file__).parent / "config_schema.json"


class ConfigError(Exception):
    pass


@dataclass(frozen=True)
class RunConfig:
    source: str
    sheet: int | str = 0
    skip_first_row: bool = False
    header_anchor: str | None = None
    max_steps: int = DEFAULT_MAX_STEPS
    required_columns: list[str] = field(default_factory=list)
    on_error: str = "drop"
    placeholder: dict[str, Any] | None = None
    keep_na_strings: list[str] | None = None
    output: str | None = None
    error_log_dir: str = "./logs"

    @property
    def source_path(self) -> Path:
        return Path(self.source)


def _validate_config_schema(data: dict[str, Any]) -> None:
    """Validate config data against the bundled JSON schema.

    Raises:
        ConfigError: the schema file is missing or malformed, or the data
            violates it (missing required keys, wrong types, unknown keys)
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


def load_config(path: Path) -> RunConfig:
    if not path.exists():
        raise ConfigError(f"config file not found: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid yaml: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"config root must be a mapping, got {type(data).__name__}")

    _validate_config_schema(data)

    return RunConfig(
        source=data["source"],
        sheet=data.get("sheet", 0),
        skip_first_row=data.get("skip_first_row", False),
        header_anchor=data.get("header_anchor"),
        max_steps=data.get("max_steps", DEFAULT_MAX_STEPS),
        required_columns=list(data.get("required_columns", [])),
        on_error=data.get("on_error", "drop"),
        placeholder=data.get("placeholder"),
        keep_na_strings=data.get("keep_na_strings"),
        output=data.get("output"),
        error_log_dir=data.get("error_log_dir", "./logs"),
    )

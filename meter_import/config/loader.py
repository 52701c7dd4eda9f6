from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import jsonschema
import yaml
from jsonschema.exceptions import ValidationError

from ..models.config_models import (
    IMPORT_TYPES,
    DatabaseConfig,
    DuplicateNamePolicy,
    ImportSettings,
    ImportTypeConfig,
)

"""Config loader.

Responsibilities:
- Load YAML config (default config/import.yml)
- Validate against the packaged JSON schema (config_schema.json)
- Apply defaults (delimiter ",", encoding utf-8, duplicate_names reject)
"""

SCHEMA_PATH = Path(__file__).with_name("config_schema.json")
DEFAULT_CONFIG_PATH = Path("config/import.yml")


class ConfigError(Exception):
    pass


def _validate_config_schema(data: dict[str, Any]) -> None:
    """Validate config data against JSON schema.

    Raises:
        ConfigError: the schema file is missing or broken, or the data
            violates the schema (unknown keys, wrong types, bad enum values).
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


def settings_from_dict(data: dict[str, Any]) -> ImportSettings:
    """Build ImportSettings from already validated config data."""
    types_raw = data.get("import_types") or {}
    import_types = {}
    for name in IMPORT_TYPES:
        raw = types_raw.get(name) or {}
        import_types[name] = ImportTypeConfig(
            import_type=name,
            delimiter=raw.get("delimiter", ","),
            encoding=raw.get("encoding", "utf-8"),
        )

    db_raw = data.get("database") or {}
    db = DatabaseConfig(
        host=db_raw.get("host"),
        port=db_raw.get("port"),
        user=db_raw.get("user"),
        password=db_raw.get("password"),
        database=db_raw.get("database"),
        dsn=db_raw.get("dsn"),
    )
    return ImportSettings(
        import_types=import_types,
        duplicate_names=DuplicateNamePolicy(data.get("duplicate_names", "reject")),
        error_log_dir=data.get("error_log_dir", "./logs"),
        database=db,
    )


def load_config(path: Path = DEFAULT_CONFIG_PATH) -> ImportSettings:
    if not path.exists():
        raise ConfigError(f"config file not found: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid yaml: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"config root must be a mapping, got {type(data).__name__}")

    _validate_config_schema(data)
    return settings_from_dict(data)

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

"""Config dataclasses for the customer / meter-reading import tool.

These are filled by ``meter_import.config.loader`` from config/import.yml and
passed down to the pipeline. The field rule sets themselves are not
configurable; only the CSV convention per import type and the roster matching
policy are.
"""

IMPORT_TYPES = ("customers", "readings")


class DuplicateNamePolicy(Enum):
    """What to do when several roster customers share the referenced full name.

    - REJECT: the reading row is rejected as ambiguous
    - FIRST_MATCH: the first customer in roster order is used
    """
    REJECT = "reject"
    FIRST_MATCH = "first_match"


@dataclass(frozen=True)
class DatabaseConfig:
    """Database connection configuration.

    Used as fallback when environment variables are not set.
    Environment variables take precedence over these values.
    """
    host: str | None = None
    port: int | None = None
    user: str | None = None
    password: str | None = None
    database: str | None = None
    dsn: str | None = None


@dataclass(frozen=True)
class ImportTypeConfig:
    """CSV convention for one import type (one delimiter, one header row)."""
    import_type: str
    delimiter: str = ","
    encoding: str = "utf-8"


@dataclass(frozen=True)
class ImportSettings:
    """Root configuration object for the import process."""
    import_types: dict[str, ImportTypeConfig] = field(
        default_factory=lambda: {name: ImportTypeConfig(name) for name in IMPORT_TYPES}
    )
    duplicate_names: DuplicateNamePolicy = DuplicateNamePolicy.REJECT
    error_log_dir: str = "./logs"
    database: DatabaseConfig = field(default_factory=DatabaseConfig)

    def for_type(self, import_type: str) -> ImportTypeConfig:
        return self.import_types.get(import_type) or ImportTypeConfig(import_type)

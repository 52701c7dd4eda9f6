from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from .entities import Customer, Reading

"""Row models for the CSV import pipeline.

RawRow is what the parser produces: header name -> raw text, plus the 0-based
index of the data row in the source (blank lines do not count).
ValidatedRow is the same row after rule checking and normalization.
"""

__all__ = [
    "RawRow",
    "RowIssue",
    "ValidatedRow",
]


@dataclass(frozen=True)
class RawRow:
    """One parsed data row, before any validation."""
    row_index: int  # 0-based, blank lines skipped
    values: dict[str, str]  # header field -> raw text ("" when absent)

    def get(self, field: str) -> str | None:
        return self.values.get(field)


@dataclass(frozen=True)
class RowIssue:
    """A single violated rule on a row."""
    code: str  # UPPER_SNAKE, e.g. LAST_NAME_REQUIRED
    field: str
    message: str  # human readable, shown to the user


@dataclass(frozen=True)
class ValidatedRow:
    """A RawRow after validation.

    ``values`` holds the normalized field values and is filled even when the
    row is invalid so a preview can show best-effort values. ``entity`` is only
    set for rows without issues.
    """
    row_index: int
    raw: RawRow
    values: dict[str, Any]
    issues: tuple[RowIssue, ...] = ()
    entity: Customer | Reading | None = None

    @property
    def errors(self) -> list[str]:
        return [issue.message for issue in self.issues]

    @property
    def is_valid(self) -> bool:
        return not self.issues

from __future__ import annotations

from dataclasses import dataclass, field

from .entities import Customer, Reading
from .row_data import ValidatedRow

"""Result models for one import call.

ImportOutcome is what the core hands back to the caller: the importable
entities and the rejected rows, both in source order. SubmissionResult is the
caller-side tally of handing those entities to persistence.
"""

__all__ = [
    "ImportOutcome",
    "SubmissionFailure",
    "SubmissionResult",
]


@dataclass(frozen=True)
class ImportOutcome:
    """Partitioned outcome of validating every row of one import.

    Constructed once per import call, returned to the caller, not retained.
    """
    import_type: str  # customers / readings
    valid_rows: tuple[Customer | Reading, ...]
    rejected_rows: tuple[ValidatedRow, ...]
    # source row index of each valid_rows entry
    valid_row_indices: tuple[int, ...] = ()

    @property
    def total(self) -> int:
        return len(self.valid_rows) + len(self.rejected_rows)

    @property
    def valid_count(self) -> int:
        return len(self.valid_rows)

    @property
    def error_count(self) -> int:
        return self.total - self.valid_count


@dataclass(frozen=True)
class SubmissionFailure:
    """An entity the persistence layer refused."""
    row: int  # source row index of the entity
    entity_id: str
    message: str


@dataclass(frozen=True)
class SubmissionResult:
    """Tally of submitting valid entities one at a time."""
    submitted: int
    failures: tuple[SubmissionFailure, ...] = field(default_factory=tuple)

    @property
    def failed(self) -> int:
        return len(self.failures)

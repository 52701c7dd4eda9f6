from __future__ import annotations

from collections.abc import Iterable

from ..models.processing_result import ImportOutcome
from ..models.row_data import ValidatedRow

"""Result aggregation: split validated rows into importable and rejected."""


def aggregate(import_type: str, rows: Iterable[ValidatedRow]) -> ImportOutcome:
    """Partition rows by validity, keeping source order within each side.

    Every row lands in exactly one partition, so
    ``valid_count + error_count == total`` always holds.
    """
    valid = []
    valid_indices = []
    rejected = []
    for row in rows:
        if row.is_valid and row.entity is not None:
            valid.append(row.entity)
            valid_indices.append(row.row_index)
        else:
            rejected.append(row)
    return ImportOutcome(
        import_type=import_type,
        valid_rows=tuple(valid),
        rejected_rows=tuple(rejected),
        valid_row_indices=tuple(valid_indices),
    )

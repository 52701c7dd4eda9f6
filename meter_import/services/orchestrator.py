from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from pathlib import Path
from uuid import uuid4

from ..csvfile.reader import missing_columns, parse_table
from ..logging.error_log import ErrorLogBuffer
from ..models.config_models import IMPORT_TYPES, ImportSettings
from ..models.entities import Customer, Reading
from ..models.error_record import ErrorRecord
from ..models.processing_result import ImportOutcome, SubmissionFailure, SubmissionResult
from .aggregator import aggregate
from .progress import SubmissionProgress
from .roster import RosterIndex
from .templates import required_fields
from .validator import IdFactory, validate_rows

logger = logging.getLogger(__name__)

"""Service orchestration for the CSV import.

run_import is the pure core: text (+ roster) in, ImportOutcome out, no I/O.
import_file adds reading the CSV from disk. submit_entities hands the valid
entities of an outcome to a create callable one at a time; record_rejections
turns rejected rows into error report records.
"""

SUBMISSION_ERROR_TYPE = "DATABASE_INSERT_ERROR"


class ProcessingError(Exception):
    """Base exception for processing errors (unreadable input, unknown type)."""
    pass


def run_import(
    import_type: str,
    text: str,
    roster: Iterable[Customer] = (),
    settings: ImportSettings | None = None,
    id_factory: IdFactory = uuid4,
) -> ImportOutcome:
    """Parse, validate and aggregate one import.

    Args:
        import_type: "customers" or "readings"
        text: decoded CSV content
        roster: current customers, used to resolve reading rows
        settings: CSV convention and duplicate-name policy (defaults if None)
        id_factory: id generator for new entities

    Returns:
        ImportOutcome with importable entities and rejected rows in source order

    Raises:
        ProcessingError: unknown import type
        RowParseError: the text cannot be tokenized
    """
    if import_type not in IMPORT_TYPES:
        raise ProcessingError(f"unknown import type: {import_type!r}")
    settings = settings or ImportSettings()
    type_cfg = settings.for_type(import_type)

    parsed = parse_table(text, delimiter=type_cfg.delimiter)
    if parsed.columns:
        missing = missing_columns(parsed.columns, required_fields(import_type))
        if missing:
            logger.warning("import_type=%s header lacks fields %s", import_type, missing)

    index = None
    if import_type == "readings":
        index = RosterIndex(roster, settings.duplicate_names)
        duplicates = index.duplicate_names()
        if duplicates:
            logger.warning(
                "roster has %d duplicated full name(s); policy=%s",
                len(duplicates),
                settings.duplicate_names.value,
            )

    validated = validate_rows(import_type, parsed.rows, index, id_factory)
    return aggregate(import_type, validated)


def import_file(
    path: Path,
    import_type: str,
    roster: Iterable[Customer] = (),
    settings: ImportSettings | None = None,
) -> ImportOutcome:
    """Read a CSV file with the configured encoding and run the import.

    Raises:
        ProcessingError: file missing, unreadable or not decodable
    """
    settings = settings or ImportSettings()
    encoding = settings.for_type(import_type).encoding
    if not path.exists():
        raise ProcessingError(f"input file not found: {path}")
    if not path.is_file():
        raise ProcessingError(f"input path is not a file: {path}")
    try:
        text = path.read_text(encoding=encoding)
    except (OSError, UnicodeDecodeError, LookupError) as e:
        raise ProcessingError(f"cannot read {path}: {e}") from e
    # A BOM written by spreadsheet tools would end up in the first header name
    text = text.lstrip("\ufeff")
    logger.debug("read file=%s encoding=%s chars=%d", path, encoding, len(text))
    return run_import(import_type, text, roster, settings)


def record_rejections(outcome: ImportOutcome, error_log: ErrorLogBuffer, source: str = "") -> int:
    """Append one ErrorRecord per violated rule of every rejected row.

    Returns:
        Number of records appended
    """
    records = [
        ErrorRecord.create(
            file=source,
            import_type=outcome.import_type,
            row=row.row_index,
            error_type=issue.code,
            message=issue.message,
        )
        for row in outcome.rejected_rows
        for issue in row.issues
    ]
    error_log.extend(records)
    return len(records)


def submit_entities(
    outcome: ImportOutcome,
    create: Callable[[Customer | Reading], None],
    error_log: ErrorLogBuffer | None = None,
    source: str = "",
) -> SubmissionResult:
    """Submit every valid entity independently.

    A failing entity is recorded and the remaining ones are still submitted;
    there is no batching, rollback or retry here.
    """
    failures: list[SubmissionFailure] = []
    submitted = 0
    rows = outcome.valid_row_indices or tuple(range(outcome.valid_count))
    with SubmissionProgress(outcome.valid_count, description=f"Importing {outcome.import_type}") as progress:
        for row, entity in zip(rows, outcome.valid_rows):
            try:
                create(entity)
            except Exception as e:
                logger.error("row=%d id=%s submission failed: %s", row, entity.id, e)
                failures.append(SubmissionFailure(row=row, entity_id=str(entity.id), message=str(e)))
                if error_log is not None:
                    error_log.append(
                        ErrorRecord.create(
                            file=source,
                            import_type=outcome.import_type,
                            row=row,
                            error_type=SUBMISSION_ERROR_TYPE,
                            message=str(e),
                        )
                    )
                progress.advance(success=False)
                continue
            submitted += 1
            progress.advance()
    return SubmissionResult(submitted=submitted, failures=tuple(failures))

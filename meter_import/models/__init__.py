"""Domain models for the CSV customer / meter-reading import tool."""

from .config_models import DatabaseConfig, DuplicateNamePolicy, ImportSettings, ImportTypeConfig
from .entities import Customer, Gender, KindOfMeter, Reading
from .error_record import ErrorRecord
from .processing_result import ImportOutcome, SubmissionFailure, SubmissionResult
from .row_data import RawRow, RowIssue, ValidatedRow

__all__ = [
    # Configuration models
    "DatabaseConfig",
    "DuplicateNamePolicy",
    "ImportSettings",
    "ImportTypeConfig",
    # Entities
    "Customer",
    "Gender",
    "KindOfMeter",
    "Reading",
    # Processing models
    "ErrorRecord",
    "ImportOutcome",
    "RawRow",
    "RowIssue",
    "SubmissionFailure",
    "SubmissionResult",
    "ValidatedRow",
]

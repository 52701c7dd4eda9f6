from __future__ import annotations

from ..models.processing_result import ImportOutcome, SubmissionResult

"""Summary line rendering.

Format:
SUMMARY type={type} rows={total} valid={valid} rejected={rejected}
submitted={submitted} failed={failed} elapsed_sec={elapsed}

``submitted`` / ``failed`` are 0 when nothing was handed to persistence
(dry run or mock mode).
"""


def _format_seconds(value: float) -> str:
    # Avoid scientific notation and trailing zeros
    if value == 0:
        return "0"
    if value == int(value):
        return str(int(value))
    if value < 0.01:
        return f"{value:.6f}".rstrip("0").rstrip(".")
    return f"{value:.3f}".rstrip("0").rstrip(".")


def render_summary_line(
    outcome: ImportOutcome,
    submission: SubmissionResult | None = None,
    elapsed_seconds: float = 0.0,
) -> str:
    """Render the SUMMARY line for one import.

    Examples:
        >>> outcome = ImportOutcome("customers", valid_rows=(), rejected_rows=())
        >>> render_summary_line(outcome, elapsed_seconds=2.0)
        'SUMMARY type=customers rows=0 valid=0 rejected=0 submitted=0 failed=0 elapsed_sec=2'
    """
    submitted = submission.submitted if submission is not None else 0
    failed = submission.failed if submission is not None else 0
    return (
        f"SUMMARY type={outcome.import_type} "
        f"rows={outcome.total} "
        f"valid={outcome.valid_count} "
        f"rejected={outcome.error_count} "
        f"submitted={submitted} "
        f"failed={failed} "
        f"elapsed_sec={_format_seconds(elapsed_seconds)}"
    )

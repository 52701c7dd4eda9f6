from __future__ import annotations

import io
import logging
import warnings
from collections.abc import Iterable
from dataclasses import dataclass

import pandas as pd
from pandas.errors import EmptyDataError, ParserError, ParserWarning

from ..models.row_data import RawRow

"""CSV row parser.

The first non-blank line supplies the field names; every later non-blank line
becomes one RawRow, zipped positionally against those names. Rows shorter than
the header are filled with "" for the absent trailing fields; fields beyond the
header are dropped and reported at WARN. Every cell is kept as text (no NA / number inference), so
"NA", "0" or "false" reach the validator unchanged.
"""

__all__ = [
    "RowParseError",
    "ParsedCsv",
    "parse_table",
    "parse_rows",
    "read_header",
    "missing_columns",
]

logger = logging.getLogger(__name__)

# never a real header name (NUL cannot be typed into a spreadsheet cell)
SURPLUS_COLUMN = "\x00surplus"


class RowParseError(Exception):
    """Raised when the text cannot be split into a header and rows."""


@dataclass
class ParsedCsv:
    columns: list[str]  # stripped header names
    rows: list[RawRow]


def _read_csv(text: str, delimiter: str, **kwargs) -> pd.DataFrame:
    try:
        with warnings.catch_warnings():
            # surplus fields are reported through the logger instead
            warnings.simplefilter("ignore", ParserWarning)
            return pd.read_csv(
                io.StringIO(text),
                sep=delimiter,
                dtype=object,
                keep_default_na=False,
                skip_blank_lines=True,
                index_col=False,
                engine="python",
                **kwargs,
            )
    except EmptyDataError:
        return pd.DataFrame()
    except (ParserError, ValueError, UnicodeError) as e:
        raise RowParseError(f"unparsable CSV input: {e}") from e


def _present(value: object) -> bool:
    # short rows are padded by pandas with missing markers
    return value is not None and not pd.isna(value)


def _cell(value: object) -> str:
    return str(value) if _present(value) else ""


def read_header(text: str, delimiter: str = ",") -> list[str]:
    """Return the stripped field names of the first non-blank line ([] if none)."""
    df = _read_csv(text, delimiter, header=None, nrows=1)
    if df.empty:
        return []
    return [_cell(c).strip() for c in df.iloc[0].tolist()]


def parse_table(text: str, delimiter: str = ",") -> ParsedCsv:
    """Parse delimited text into its header and RawRows in source order.

    Parameters
    ----------
    text: decoded CSV content
    delimiter: single field separator character

    Raises
    ------
    RowParseError: duplicate header names or text the tokenizer rejects
    """
    columns = read_header(text, delimiter)
    if not columns:
        return ParsedCsv(columns=[], rows=[])
    duplicates = sorted({c for c in columns if columns.count(c) > 1})
    if duplicates:
        raise RowParseError(f"duplicate header fields: {duplicates}")

    # One spare column past the header: it is only filled on rows carrying
    # surplus fields. index_col=False truncates anything beyond it.
    df = _read_csv(text, delimiter, header=0, names=[*columns, SURPLUS_COLUMN])
    rows: list[RawRow] = []
    if df.empty:
        return ParsedCsv(columns=columns, rows=rows)

    surplus: list[int] = []
    for raw in df.itertuples(index=False, name=None):
        values = {col: _cell(val) for col, val in zip(columns, raw)}
        if _present(raw[len(columns)]):
            surplus.append(len(rows))
        rows.append(RawRow(row_index=len(rows), values=values))
    if surplus:
        logger.warning(
            "%d row(s) have more fields than the header (%d); extra fields dropped: rows=%s",
            len(surplus),
            len(columns),
            surplus,
        )
    logger.debug("parsed columns=%d rows=%d", len(columns), len(rows))
    return ParsedCsv(columns=columns, rows=rows)


def parse_rows(text: str, delimiter: str = ",", has_header: bool = True) -> list[RawRow]:
    """Parse delimited text into RawRows in source order.

    ``has_header`` must be True: the header row is the only source of field
    names. Empty or header-only text yields [].
    """
    if not has_header:
        raise RowParseError("a header row is required to name the fields")
    return parse_table(text, delimiter).rows


def missing_columns(columns: Iterable[str], expected: Iterable[str]) -> list[str]:
    """Expected field names absent from the header, in expected order."""
    present = set(columns)
    return [c for c in expected if c not in present]

from __future__ import annotations

from .rules import CUSTOMER_FIELDS, READING_FIELDS

"""CSV templates users can download and fill in.

Header row plus a few example rows per import type.
"""

EXPECTED_FIELDS: dict[str, tuple[str, ...]] = {
    "customers": CUSTOMER_FIELDS,
    "readings": READING_FIELDS,
}

# comment is the only optional reading column
OPTIONAL_FIELDS: dict[str, frozenset[str]] = {
    "customers": frozenset(),
    "readings": frozenset({"comment"}),
}

_EXAMPLES: dict[str, list[str]] = {
    "customers": [
        "John,Doe,1990-01-15,M",
        "Jane,Smith,1985-07-22,W",
        "Alex,Johnson,1992-03-10,D",
    ],
    "readings": [
        "John Doe,2024-01-15,METER001,STROM,150.5,false,Regular reading",
        "Jane Smith,2024-01-15,METER002,WASSER,75.2,true,Estimated reading",
    ],
}


def required_fields(import_type: str) -> list[str]:
    return [f for f in EXPECTED_FIELDS[import_type] if f not in OPTIONAL_FIELDS[import_type]]


def render_template(import_type: str, delimiter: str = ",") -> str:
    """Return the template CSV text for an import type.

    Raises:
        KeyError: unknown import type
    """
    header = delimiter.join(EXPECTED_FIELDS[import_type])
    rows = [line.replace(",", delimiter) for line in _EXAMPLES[import_type]]
    return "\n".join([header, *rows]) + "\n"

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Sequence
from types import MappingProxyType
from typing import Any
from uuid import UUID, uuid4

from ..models.entities import Customer, Gender, KindOfMeter, Reading
from ..models.row_data import RawRow, RowIssue, ValidatedRow
from .roster import RosterIndex
from .rules import CUSTOMER_RULES, READING_RULES, FieldRule, RuleInput

"""Row validation and transformation.

Every row is first normalized (strings trimmed, codes upper-cased) and then
checked against the full rule set for its import type. All failing rules are
reported together. Rows without issues are turned into Customer / Reading
entities carrying a freshly generated id; ids are never read from the input.
"""

__all__ = [
    "normalize_customer_values",
    "normalize_reading_values",
    "validate_customer_row",
    "validate_reading_row",
    "validate_rows",
]

logger = logging.getLogger(__name__)

IdFactory = Callable[[], UUID]

SUBSTITUTE_TRUE = frozenset({"true", "1"})


def _trim(value: str | None) -> str:
    return (value or "").strip()


def _collect_issues(rules: Sequence[FieldRule], row: RuleInput) -> tuple[RowIssue, ...]:
    return tuple(RowIssue(r.code, r.field, r.message) for r in rules if not r.check(row))


def normalize_customer_values(raw: RawRow) -> dict[str, Any]:
    return {
        "firstName": _trim(raw.get("firstName")),
        "lastName": _trim(raw.get("lastName")),
        "birthDate": _trim(raw.get("birthDate")),
        "gender": _trim(raw.get("gender")).upper(),
    }


def normalize_reading_values(raw: RawRow) -> dict[str, Any]:
    return {
        "customerName": _trim(raw.get("customerName")),
        "dateOfReading": _trim(raw.get("dateOfReading")),
        "meterId": _trim(raw.get("meterId")),
        "kindOfMeter": _trim(raw.get("kindOfMeter")).upper(),
        "meterCount": _trim(raw.get("meterCount")),
        "substitute": _trim(raw.get("substitute")).lower(),
        "comment": _trim(raw.get("comment")) or None,
    }


def validate_customer_row(raw: RawRow, id_factory: IdFactory = uuid4) -> ValidatedRow:
    values = normalize_customer_values(raw)
    issues = _collect_issues(
        CUSTOMER_RULES,
        RuleInput(values=MappingProxyType(values), raw=MappingProxyType(raw.values)),
    )
    entity = None
    if not issues:
        entity = Customer(
            id=id_factory(),
            first_name=values["firstName"],
            last_name=values["lastName"],
            birth_date=values["birthDate"],
            gender=Gender(values["gender"]),
        )
    return ValidatedRow(row_index=raw.row_index, raw=raw, values=values, issues=issues, entity=entity)


def validate_reading_row(raw: RawRow, roster: RosterIndex, id_factory: IdFactory = uuid4) -> ValidatedRow:
    """Validate one reading row and resolve its customer against the roster.

    The resolved customer is embedded by value; the roster entry itself is
    shared, never copied into or changed by the row.
    """
    values = normalize_reading_values(raw)
    resolution = roster.resolve(values["customerName"])
    issues = _collect_issues(
        READING_RULES,
        RuleInput(
            values=MappingProxyType(values),
            raw=MappingProxyType(raw.values),
            resolved=resolution.customer,
            candidates=resolution.candidates,
        ),
    )
    entity = None
    if not issues and resolution.customer is not None:
        entity = Reading(
            id=id_factory(),
            customer=resolution.customer,
            date_of_reading=values["dateOfReading"],
            meter_id=values["meterId"],
            kind_of_meter=KindOfMeter(values["kindOfMeter"]),
            meter_count=float(values["meterCount"]) + 0.0,  # "-0" is stored as 0.0
            substitute=values["substitute"] in SUBSTITUTE_TRUE,
            comment=values["comment"],
        )
    return ValidatedRow(row_index=raw.row_index, raw=raw, values=values, issues=issues, entity=entity)


def validate_rows(
    import_type: str,
    rows: Iterable[RawRow],
    roster: RosterIndex | None = None,
    id_factory: IdFactory = uuid4,
) -> list[ValidatedRow]:
    """Validate every row of one import, preserving source order.

    Raises:
        ValueError: unknown import type
    """
    if import_type == "customers":
        validated = [validate_customer_row(r, id_factory) for r in rows]
    elif import_type == "readings":
        index = roster if roster is not None else RosterIndex(())
        validated = [validate_reading_row(r, index, id_factory) for r in rows]
    else:
        raise ValueError(f"unknown import type: {import_type!r}")
    logger.debug(
        "validated import_type=%s rows=%d invalid=%d",
        import_type,
        len(validated),
        sum(1 for v in validated if not v.is_valid),
    )
    return validated

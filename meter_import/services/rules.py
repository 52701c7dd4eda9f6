from __future__ import annotations

import math
import re
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from ..models.entities import Customer, Gender, KindOfMeter

"""Field rule sets for customer and reading rows.

Each rule is an independent predicate over an immutable snapshot of one row.
The validator runs every rule of a set in order and collects the message of
each one that fails; no rule depends on another having passed. Rules that test
a field's format treat an empty field as "not applicable" so a missing value is
reported once, by its "required" rule.
"""

__all__ = [
    "RuleInput",
    "FieldRule",
    "CUSTOMER_RULES",
    "READING_RULES",
    "CUSTOMER_FIELDS",
    "READING_FIELDS",
    "is_iso_date",
    "parse_meter_count",
]

CUSTOMER_FIELDS = ("firstName", "lastName", "birthDate", "gender")
READING_FIELDS = (
    "customerName",
    "dateOfReading",
    "meterId",
    "kindOfMeter",
    "meterCount",
    "substitute",
    "comment",
)

DATE_PATTERN = re.compile(r"^[0-9]{4}-[0-9]{2}-[0-9]{2}$")
NUMBER_PATTERN = re.compile(r"^[+-]?(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)(?:[eE][+-]?[0-9]+)?$")

GENDER_CODES = frozenset(g.value for g in Gender)
METER_KINDS = frozenset(k.value for k in KindOfMeter)


@dataclass(frozen=True)
class RuleInput:
    """What a rule may look at: normalized values, raw values, roster matches."""
    values: Mapping[str, Any]
    raw: Mapping[str, str]
    resolved: Customer | None = None
    candidates: int = 0  # roster entries whose full name matched


@dataclass(frozen=True)
class FieldRule:
    code: str  # UPPER_SNAKE, used as error_type in the error report
    field: str
    message: str
    check: Callable[[RuleInput], bool]  # True when the row satisfies the rule


def is_iso_date(value: str) -> bool:
    """YYYY-MM-DD and an existing calendar day (2024-02-30 is rejected)."""
    if not DATE_PATTERN.match(value):
        return False
    try:
        datetime.strptime(value, "%Y-%m-%d")
    except ValueError:
        return False
    return True


def parse_meter_count(value: str) -> float | None:
    """Parse a plain decimal meter count; None unless finite and >= 0."""
    if not NUMBER_PATTERN.match(value):
        return None
    number = float(value)
    if not math.isfinite(number) or number < 0:
        return None
    return number + 0.0  # "-0" -> 0.0


def _required(field: str) -> Callable[[RuleInput], bool]:
    return lambda row: bool(row.values.get(field))


def _when_present(field: str, predicate: Callable[[str], bool]) -> Callable[[RuleInput], bool]:
    def check(row: RuleInput) -> bool:
        value = row.values.get(field) or ""
        return not value or predicate(value)
    return check


def _substitute_present(row: RuleInput) -> bool:
    # "false" and "0" are values; only a missing column or an empty cell is absent.
    raw = row.raw.get("substitute")
    return raw is not None and raw != ""


def _customer_found(row: RuleInput) -> bool:
    return not row.values.get("customerName") or row.candidates > 0


def _customer_unambiguous(row: RuleInput) -> bool:
    return row.candidates <= 1 or row.resolved is not None


INVALID_DATE = "Invalid date format (use YYYY-MM-DD)"

CUSTOMER_RULES: tuple[FieldRule, ...] = (
    FieldRule("FIRST_NAME_REQUIRED", "firstName", "First name is required", _required("firstName")),
    FieldRule("LAST_NAME_REQUIRED", "lastName", "Last name is required", _required("lastName")),
    FieldRule("BIRTH_DATE_REQUIRED", "birthDate", "Birth date is required", _required("birthDate")),
    FieldRule("GENDER_REQUIRED", "gender", "Gender is required", _required("gender")),
    FieldRule("INVALID_DATE_FORMAT", "birthDate", INVALID_DATE, _when_present("birthDate", is_iso_date)),
    FieldRule(
        "INVALID_GENDER",
        "gender",
        "Gender must be M, W, D, or U",
        _when_present("gender", lambda v: v in GENDER_CODES),
    ),
)

READING_RULES: tuple[FieldRule, ...] = (
    FieldRule("CUSTOMER_NAME_REQUIRED", "customerName", "Customer name is required", _required("customerName")),
    FieldRule("DATE_OF_READING_REQUIRED", "dateOfReading", "Date of reading is required", _required("dateOfReading")),
    FieldRule("METER_ID_REQUIRED", "meterId", "Meter ID is required", _required("meterId")),
    FieldRule("KIND_OF_METER_REQUIRED", "kindOfMeter", "Kind of meter is required", _required("kindOfMeter")),
    FieldRule("METER_COUNT_REQUIRED", "meterCount", "Meter count is required", _required("meterCount")),
    FieldRule("SUBSTITUTE_REQUIRED", "substitute", "Substitute field is required", _substitute_present),
    FieldRule("INVALID_DATE_FORMAT", "dateOfReading", INVALID_DATE, _when_present("dateOfReading", is_iso_date)),
    FieldRule(
        "INVALID_KIND_OF_METER",
        "kindOfMeter",
        "Kind of meter must be STROM, WASSER, HEIZUNG, or UNBEKANNT",
        _when_present("kindOfMeter", lambda v: v in METER_KINDS),
    ),
    FieldRule(
        "INVALID_METER_COUNT",
        "meterCount",
        "Meter count must be a positive number",
        _when_present("meterCount", lambda v: parse_meter_count(v) is not None),
    ),
    FieldRule(
        "CUSTOMER_NOT_FOUND",
        "customerName",
        "Customer not found (check spelling and case)",
        _customer_found,
    ),
    FieldRule(
        "CUSTOMER_AMBIGUOUS",
        "customerName",
        "Customer name is ambiguous (multiple customers match)",
        _customer_unambiguous,
    ),
)

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any
from uuid import UUID

"""Import-ready entities for the customer / meter-reading import tool.

Customer and Reading are the values handed to the persistence layer once a row
passed validation. ``to_dict`` / ``from_dict`` use the camelCase names of the
REST payloads (``firstName``, ``dateOfReading`` ...).
"""

__all__ = [
    "Gender",
    "KindOfMeter",
    "Customer",
    "Reading",
]


class Gender(Enum):
    """Customer gender codes.

    - M: male
    - W: female
    - D: diverse
    - U: unknown / not specified
    """
    M = "M"
    W = "W"
    D = "D"
    U = "U"


class KindOfMeter(Enum):
    """Utility meter kinds."""
    STROM = "STROM"
    WASSER = "WASSER"
    HEIZUNG = "HEIZUNG"
    UNBEKANNT = "UNBEKANNT"


@dataclass(frozen=True)
class Customer:
    """A customer record.

    For customer imports the id is always freshly generated; for reading
    imports customers are read-only roster entries supplied by the caller.
    """
    id: UUID
    first_name: str
    last_name: str
    birth_date: str  # ISO date YYYY-MM-DD
    gender: Gender

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": str(self.id),
            "firstName": self.first_name,
            "lastName": self.last_name,
            "birthDate": self.birth_date,
            "gender": self.gender.value,
        }

    @staticmethod
    def from_dict(data: dict[str, Any]) -> Customer:
        """Build a Customer from a REST-shaped mapping.

        Raises:
            KeyError: a required key is missing
            ValueError: id is not a UUID or gender is not a known code
        """
        gender = str(data.get("gender") or "U").strip().upper()
        return Customer(
            id=UUID(str(data["id"])),
            first_name=str(data["firstName"]),
            last_name=str(data["lastName"]),
            birth_date=str(data.get("birthDate") or ""),
            gender=Gender(gender),
        )


@dataclass(frozen=True)
class Reading:
    """A meter reading with its customer embedded by value."""
    id: UUID
    customer: Customer  # snapshot of the resolved roster entry
    date_of_reading: str  # ISO date YYYY-MM-DD
    meter_id: str
    kind_of_meter: KindOfMeter
    meter_count: float
    substitute: bool  # estimated rather than observed
    comment: str | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "id": str(self.id),
            "customer": self.customer.to_dict(),
            "dateOfReading": self.date_of_reading,
            "meterId": self.meter_id,
            "kindOfMeter": self.kind_of_meter.value,
            "meterCount": self.meter_count,
            "substitute": self.substitute,
        }
        if self.comment is not None:
            data["comment"] = self.comment
        return data

from __future__ import annotations

import json
import logging
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path

from ..models.config_models import DuplicateNamePolicy
from ..models.entities import Customer

"""Customer roster lookup for reading imports.

A reading row names its customer as free text ("First Last"). The roster index
maps the trimmed, casefolded full name of every roster customer to the
customers carrying it, built once per import. Matching is exact after
casefolding; there is no partial or fuzzy matching.

When several customers share a full name the DuplicateNamePolicy decides:
REJECT leaves the row unresolved (the validator reports it as ambiguous),
FIRST_MATCH takes the first of them in roster order.
"""

__all__ = [
    "RosterError",
    "Resolution",
    "RosterIndex",
    "name_key",
    "load_roster_file",
]

logger = logging.getLogger(__name__)


class RosterError(Exception):
    """Raised when a roster file cannot be read or decoded."""


def name_key(name: str) -> str:
    return name.strip().casefold()


@dataclass(frozen=True)
class Resolution:
    """Result of looking up one customer name."""
    customer: Customer | None
    candidates: int  # number of roster entries with that full name


class RosterIndex:
    """Full-name index over a roster. The roster itself is not modified."""

    def __init__(
        self,
        roster: Iterable[Customer],
        policy: DuplicateNamePolicy = DuplicateNamePolicy.REJECT,
    ) -> None:
        self.policy = policy
        self._by_name: dict[str, list[Customer]] = {}
        for customer in roster:
            self._by_name.setdefault(name_key(customer.full_name), []).append(customer)

    def __len__(self) -> int:
        return sum(len(v) for v in self._by_name.values())

    def duplicate_names(self) -> dict[str, int]:
        """Casefolded full names held by more than one customer."""
        return {k: len(v) for k, v in self._by_name.items() if len(v) > 1}

    def resolve(self, customer_name: str) -> Resolution:
        if not customer_name.strip():
            return Resolution(customer=None, candidates=0)
        matches = self._by_name.get(name_key(customer_name), [])
        if not matches:
            return Resolution(customer=None, candidates=0)
        if len(matches) == 1 or self.policy is DuplicateNamePolicy.FIRST_MATCH:
            return Resolution(customer=matches[0], candidates=len(matches))
        return Resolution(customer=None, candidates=len(matches))


def load_roster_file(path: Path) -> list[Customer]:
    """Load customers from JSON.

    Accepts the REST list payload ``{"customers": [...]}`` or a bare list of
    customer objects with camelCase keys.

    Raises:
        RosterError: file missing, not JSON, or an entry is not a customer
    """
    if not path.exists():
        raise RosterError(f"roster file not found: {path}")
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise RosterError(f"invalid roster file {path}: {e}") from e

    entries = data.get("customers") if isinstance(data, dict) else data
    if not isinstance(entries, list):
        raise RosterError(f"roster file {path} holds no customer list")

    customers: list[Customer] = []
    for i, entry in enumerate(entries):
        if not isinstance(entry, dict):
            raise RosterError(f"roster entry {i} is not an object")
        try:
            customers.append(Customer.from_dict(entry))
        except (KeyError, ValueError) as e:
            raise RosterError(f"roster entry {i} is invalid: {e}") from e
    logger.debug("loaded roster path=%s customers=%d", path, len(customers))
    return customers

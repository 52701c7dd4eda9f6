from __future__ import annotations

from datetime import date
from unittest.mock import MagicMock
from uuid import UUID

import pytest

from meter_import.db.entity_writer import (
    CUSTOMER_INSERT_SQL,
    READING_INSERT_SQL,
    SubmissionError,
    create_entity,
    fetch_customers,
)
from meter_import.models.entities import Gender, KindOfMeter, Reading


def _reading(customer) -> Reading:
    return Reading(
        id=UUID(int=20),
        customer=customer,
        date_of_reading="2024-01-15",
        meter_id="METER001",
        kind_of_meter=KindOfMeter.WASSER,
        meter_count=75.2,
        substitute=True,
    )


def test_create_customer_executes_single_insert(john):
    cur = MagicMock()
    create_entity(cur, john)
    cur.execute.assert_called_once_with(
        CUSTOMER_INSERT_SQL, (str(UUID(int=1)), "John", "Doe", "1990-01-15", "M")
    )


def test_create_reading_references_customer_id(john):
    cur = MagicMock()
    create_entity(cur, _reading(john))
    sql, params = cur.execute.call_args[0]
    assert sql == READING_INSERT_SQL
    assert params == (str(UUID(int=20)), str(UUID(int=1)), None, "2024-01-15", "WASSER", 75.2, "METER001", True)


def test_database_error_wrapped(john):
    cur = MagicMock()
    cur.execute.side_effect = RuntimeError("duplicate key value violates unique constraint")
    with pytest.raises(SubmissionError, match="duplicate key"):
        create_entity(cur, john)


def test_create_entity_rejects_other_types():
    with pytest.raises(TypeError):
        create_entity(MagicMock(), {"firstName": "John"})  # type: ignore[arg-type]


def test_fetch_customers_maps_rows():
    cur = MagicMock()
    cur.fetchall.return_value = [
        (UUID(int=1), "John", "Doe", date(1990, 1, 15), "M"),
        (str(UUID(int=2)), "Jane", "Smith", None, "Q"),
    ]
    customers = fetch_customers(cur)
    assert [c.full_name for c in customers] == ["John Doe", "Jane Smith"]
    assert customers[0].birth_date == "1990-01-15"
    assert customers[1].id == UUID(int=2)
    assert customers[1].birth_date == ""
    assert customers[1].gender is Gender.U

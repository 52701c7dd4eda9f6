from __future__ import annotations

import logging
from typing import Any
from uuid import UUID

from ..models.entities import Customer, Gender, Reading

"""Persistence of imported entities (PostgreSQL via a psycopg2 cursor).

Each entity is written with its own INSERT. Nothing is batched and no
transaction spans several entities: the connection runs in autocommit mode, so
one refused row never takes the others down with it.

Tables:
    customers(id, first_name, last_name, birth_date, gender)
    readings(id, customer_id, comment, date_of_reading, kind_of_meter,
             meter_count, meter_id, substitute)
"""

__all__ = [
    "SubmissionError",
    "create_customer",
    "create_reading",
    "create_entity",
    "fetch_customers",
]

logger = logging.getLogger(__name__)

CUSTOMER_INSERT_SQL = (
    "INSERT INTO customers (id, first_name, last_name, birth_date, gender) "
    "VALUES (%s, %s, %s, %s, %s)"
)
READING_INSERT_SQL = (
    "INSERT INTO readings (id, customer_id, comment, date_of_reading, kind_of_meter, "
    "meter_count, meter_id, substitute) VALUES (%s, %s, %s, %s, %s, %s, %s, %s)"
)
CUSTOMER_SELECT_SQL = "SELECT id, first_name, last_name, birth_date, gender FROM customers"


class SubmissionError(Exception):
    pass


def _execute(cursor: Any, sql: str, params: tuple[Any, ...]) -> None:
    try:
        cursor.execute(sql, params)
    except Exception as e:
        raise SubmissionError(str(e)) from e


def create_customer(cursor: Any, customer: Customer) -> None:
    _execute(
        cursor,
        CUSTOMER_INSERT_SQL,
        (
            str(customer.id),
            customer.first_name,
            customer.last_name,
            customer.birth_date or None,
            customer.gender.value,
        ),
    )


def create_reading(cursor: Any, reading: Reading) -> None:
    _execute(
        cursor,
        READING_INSERT_SQL,
        (
            str(reading.id),
            str(reading.customer.id),
            reading.comment,
            reading.date_of_reading,
            reading.kind_of_meter.value,
            reading.meter_count,
            reading.meter_id,
            reading.substitute,
        ),
    )


def create_entity(cursor: Any, entity: Customer | Reading) -> None:
    """Insert one Customer or Reading.

    Raises:
        SubmissionError: the database refused the row
        TypeError: entity is neither a Customer nor a Reading
    """
    if isinstance(entity, Customer):
        create_customer(cursor, entity)
    elif isinstance(entity, Reading):
        create_reading(cursor, entity)
    else:
        raise TypeError(f"cannot persist {type(entity).__name__}")


def fetch_customers(cursor: Any) -> list[Customer]:
    """Read the current customer roster.

    Raises:
        SubmissionError: the query failed
    """
    _execute(cursor, CUSTOMER_SELECT_SQL, ())
    customers = []
    for cid, first, last, birth, gender in cursor.fetchall():
        # birth_date comes back as datetime.date (or NULL)
        birth_str = birth.isoformat() if hasattr(birth, "isoformat") else (birth or "")
        customers.append(
            Customer(
                id=cid if isinstance(cid, UUID) else UUID(str(cid)),
                first_name=first or "",
                last_name=last or "",
                birth_date=birth_str,
                gender=Gender(gender) if gender in Gender._value2member_map_ else Gender.U,
            )
        )
    logger.debug("fetched roster customers=%d", len(customers))
    return customers

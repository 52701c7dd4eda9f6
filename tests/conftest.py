# Shared pytest fixtures
from __future__ import annotations

import json
import tempfile
from pathlib import Path
from uuid import UUID

import pytest

from meter_import.logging.init import reset_logging
from meter_import.models.entities import Customer, Gender


@pytest.fixture()
def temp_workdir(monkeypatch) -> Path:
    with tempfile.TemporaryDirectory() as d:
        p = Path(d)
        (p / "config").mkdir()
        (p / "data").mkdir()
        (p / "logs").mkdir()
        monkeypatch.chdir(p)
        # keep a developer's .env / DB settings out of the tests
        for var in ("DISABLE_DB_CONNECT", "DATABASE_URL", "PGDSN", "PGHOST", "PGPORT", "PGUSER", "PGPASSWORD", "PGDATABASE"):
            monkeypatch.delenv(var, raising=False)
        yield p


@pytest.fixture()
def sample_config_yaml() -> str:
    return """import_types:
  customers:
    delimiter: ","
    encoding: utf-8
  readings:
    delimiter: ","
    encoding: utf-8
duplicate_names: reject
error_log_dir: ./logs
database:
  host: localhost
  port: 5432
  user: appuser
  password: secret
  database: appdb
"""


@pytest.fixture()
def write_config(temp_workdir: Path, sample_config_yaml: str) -> Path:
    cfg = temp_workdir / "config" / "import.yml"
    cfg.write_text(sample_config_yaml, encoding="utf-8")
    return cfg


@pytest.fixture()
def customers_csv() -> str:
    return (
        "firstName,lastName,birthDate,gender\n"
        "John,Doe,1990-01-15,M\n"
        "Jane,Smith,1985-07-22,W\n"
    )


@pytest.fixture()
def readings_csv() -> str:
    return (
        "customerName,dateOfReading,meterId,kindOfMeter,meterCount,substitute,comment\n"
        "John Doe,2024-01-15,METER001,STROM,150.5,false,Regular reading\n"
        "Jane Smith,2024-01-15,METER002,WASSER,75.2,true,\n"
    )


@pytest.fixture()
def john() -> Customer:
    return Customer(UUID(int=1), "John", "Doe", "1990-01-15", Gender.M)


@pytest.fixture()
def jane() -> Customer:
    return Customer(UUID(int=2), "Jane", "Smith", "1985-07-22", Gender.W)


@pytest.fixture()
def roster(john: Customer, jane: Customer) -> list[Customer]:
    return [john, jane]


@pytest.fixture()
def write_roster(temp_workdir: Path, roster: list[Customer]) -> Path:
    path = temp_workdir / "data" / "roster.json"
    path.write_text(json.dumps({"customers": [c.to_dict() for c in roster]}), encoding="utf-8")
    return path


@pytest.fixture()
def fixed_ids():
    """Deterministic id factory: UUID(int=1000), UUID(int=1001), ..."""
    counter = iter(range(1000, 100_000))
    return lambda: UUID(int=next(counter))


@pytest.fixture(autouse=True)
def clean_logging():
    # the CLI logger binds sys.stdout on setup; capsys swaps it per test
    reset_logging()
    yield
    reset_logging()

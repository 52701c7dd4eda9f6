from __future__ import annotations

import json
from pathlib import Path

from meter_import.logging.error_log import ErrorLogBuffer, ErrorRecord
from meter_import.models.error_record import FILE_LEVEL_ROW

KEYS = {"timestamp", "file", "import_type", "row", "error_type", "message"}


def test_error_record_creation_and_json_line():
    rec = ErrorRecord.create(
        file="customers.csv",
        import_type="customers",
        row=3,
        error_type="LAST_NAME_REQUIRED",
        message="Last name is required",
    )
    data = json.loads(rec.to_json_line())
    assert data["file"] == "customers.csv"
    assert data["import_type"] == "customers"
    assert data["row"] == 3
    assert data["error_type"] == "LAST_NAME_REQUIRED"
    assert data["timestamp"].endswith("Z")
    assert set(data.keys()) == KEYS


def test_error_record_keeps_non_ascii():
    rec = ErrorRecord.create("k.csv", "readings", FILE_LEVEL_ROW, "X", "Zählerstand ungültig")
    assert "Zählerstand" in rec.to_json_line()


def test_error_log_buffer_flush(temp_workdir: Path):
    buf = ErrorLogBuffer()
    buf.append(ErrorRecord.create("c.csv", "customers", 1, "LAST_NAME_REQUIRED", "Last name is required"))
    buf.extend([ErrorRecord.create("c.csv", "customers", 2, "INVALID_GENDER", "Gender must be M, W, D, or U")])
    assert len(buf) == 2
    path = buf.flush()
    assert path.exists()
    assert path.parent == Path("logs")
    assert path.name.startswith("errors-") and path.suffix == ".log"
    lines = path.read_text(encoding="utf-8").strip().splitlines()
    assert len(lines) == 2
    for raw in lines:
        assert set(json.loads(raw).keys()) == KEYS
    assert len(buf) == 0


def test_error_log_buffer_multiple_flushes_append(temp_workdir: Path):
    buf = ErrorLogBuffer(temp_workdir / "reports")
    buf.append(ErrorRecord.create("c.csv", "customers", 1, "X", "one"))
    path = buf.flush()
    size1 = path.stat().st_size
    buf.append(ErrorRecord.create("c.csv", "customers", 2, "X", "two"))
    path2 = buf.flush()
    assert path == path2
    assert path2.stat().st_size > size1


def test_empty_buffer_writes_nothing(temp_workdir: Path):
    buf = ErrorLogBuffer(temp_workdir / "never")
    assert buf.flush() is None
    assert not (temp_workdir / "never").exists()


def test_records_returns_copy():
    buf = ErrorLogBuffer()
    buf.append(ErrorRecord.create("c.csv", "customers", 1, "X", "one"))
    buf.records.clear()
    assert len(buf) == 1

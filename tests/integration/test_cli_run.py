from __future__ import annotations

import json
from contextlib import contextmanager
from pathlib import Path
from unittest.mock import MagicMock, patch
from uuid import UUID

from meter_import.cli import main as cli_main
from meter_import.db.connection import ConnectionFailed

"""End-to-end CLI runs against files in a temp working directory."""


def _write(temp_workdir: Path, name: str, text: str) -> Path:
    path = temp_workdir / "data" / name
    path.write_text(text, encoding="utf-8")
    return path


@contextmanager
def _fake_cursor(cursor):
    yield cursor


def test_dry_run_customers_success(write_config, temp_workdir: Path, customers_csv, capsys):
    csv_path = _write(temp_workdir, "customers.csv", customers_csv)
    code = cli_main(["customers", str(csv_path), "--dry-run"])
    out = capsys.readouterr().out
    assert code == 0
    assert "INFO Importing customers from:" in out
    assert "SUMMARY type=customers rows=2 valid=2 rejected=0 submitted=0 failed=0" in out
    assert not list((temp_workdir / "logs").iterdir())


def test_dry_run_readings_with_roster_and_output(write_config, temp_workdir: Path, readings_csv, write_roster, capsys):
    csv_path = _write(temp_workdir, "readings.csv", readings_csv)
    out_path = temp_workdir / "out" / "readings.json"
    code = cli_main(["readings", str(csv_path), "--roster", str(write_roster), "--dry-run", "--output", str(out_path)])
    out = capsys.readouterr().out
    assert code == 0
    assert "INFO roster customers=2" in out
    payload = json.loads(out_path.read_text(encoding="utf-8"))
    assert [r["customer"]["lastName"] for r in payload["readings"]] == ["Doe", "Smith"]
    assert payload["readings"][0]["meterCount"] == 150.5


def test_partial_rejection_writes_report(write_config, temp_workdir: Path, capsys):
    csv_path = _write(
        temp_workdir,
        "customers.csv",
        "firstName,lastName,birthDate,gender\nJohn,Doe,1990-01-15,M\nJohn,,1990-01-15,M\n",
    )
    code = cli_main(["customers", str(csv_path), "--dry-run"])
    out = capsys.readouterr().out
    assert code == 2
    assert "WARN row=1 rejected: Last name is required" in out
    assert "valid=1 rejected=1" in out

    reports = list((temp_workdir / "logs").glob("errors-*.log"))
    assert len(reports) == 1
    record = json.loads(reports[0].read_text(encoding="utf-8").splitlines()[0])
    assert record["file"] == "customers.csv"
    assert record["row"] == 1
    assert record["error_type"] == "LAST_NAME_REQUIRED"


def test_unparsable_file_writes_file_level_report(write_config, temp_workdir: Path, capsys):
    csv_path = _write(temp_workdir, "broken.csv", 'firstName,lastName,birthDate,gender\n"John,Doe,1990-01-15,M\n')
    code = cli_main(["customers", str(csv_path), "--dry-run"])
    out = capsys.readouterr().out
    assert code == 1
    assert "ERROR input: unparsable CSV input" in out
    assert "INFO error report:" in out

    reports = list((temp_workdir / "logs").glob("errors-*.log"))
    assert len(reports) == 1
    lines = reports[0].read_text(encoding="utf-8").splitlines()
    assert len(lines) == 1
    record = json.loads(lines[0])
    assert record["file"] == "broken.csv"
    assert record["import_type"] == "customers"
    assert record["row"] == -1
    assert record["error_type"] == "PARSE_ERROR"


def test_missing_file_writes_file_level_report(write_config, temp_workdir: Path, capsys):
    code = cli_main(["readings", "data/absent.csv", "--dry-run"])
    assert code == 1
    assert "ERROR input: input file not found" in capsys.readouterr().out

    reports = list((temp_workdir / "logs").glob("errors-*.log"))
    record = json.loads(reports[0].read_text(encoding="utf-8").splitlines()[0])
    assert (record["file"], record["row"], record["error_type"]) == ("absent.csv", -1, "READ_ERROR")
    assert record["import_type"] == "readings"


def test_rejected_rows_listing_is_capped(write_config, temp_workdir: Path, capsys):
    lines = "".join(f"Name{i},,2000-01-01,M\n" for i in range(13))
    csv_path = _write(temp_workdir, "customers.csv", "firstName,lastName,birthDate,gender\n" + lines)
    code = cli_main(["customers", str(csv_path), "--dry-run"])
    out = capsys.readouterr().out
    assert code == 2
    assert out.count("rejected: Last name is required") == 10
    assert "... and 3 more rejected rows" in out


def test_readings_without_roster_rejected(write_config, temp_workdir: Path, readings_csv, capsys, monkeypatch):
    monkeypatch.setenv("DISABLE_DB_CONNECT", "1")
    csv_path = _write(temp_workdir, "readings.csv", readings_csv)
    code = cli_main(["readings", str(csv_path)])
    out = capsys.readouterr().out
    assert code == 2
    assert "WARN no roster available" in out
    assert "Customer not found (check spelling and case)" in out


def test_live_mode_submits_each_entity(write_config, temp_workdir: Path, customers_csv, capsys):
    csv_path = _write(temp_workdir, "customers.csv", customers_csv)
    cursor = MagicMock()
    with patch("meter_import.cli.app.db_cursor", return_value=_fake_cursor(cursor)):
        code = cli_main(["customers", str(csv_path)])
    out = capsys.readouterr().out
    assert code == 0
    assert "INFO mode=live" in out
    assert cursor.execute.call_count == 2
    assert "submitted=2 failed=0" in out


def test_live_mode_insert_failure_is_partial(write_config, temp_workdir: Path, customers_csv, capsys):
    csv_path = _write(temp_workdir, "customers.csv", customers_csv)
    cursor = MagicMock()
    cursor.execute.side_effect = [RuntimeError("duplicate key value"), None]
    with patch("meter_import.cli.app.db_cursor", return_value=_fake_cursor(cursor)):
        code = cli_main(["customers", str(csv_path)])
    out = capsys.readouterr().out
    assert code == 2
    assert "ERROR row=0" in out
    assert "submitted=1 failed=1" in out
    report = next((temp_workdir / "logs").glob("errors-*.log"))
    assert json.loads(report.read_text(encoding="utf-8"))["error_type"] == "DATABASE_INSERT_ERROR"


def test_live_mode_reads_roster_from_database(write_config, temp_workdir: Path, readings_csv, capsys):
    csv_path = _write(temp_workdir, "readings.csv", readings_csv)
    cursor = MagicMock()
    cursor.fetchall.return_value = [
        (UUID(int=1), "John", "Doe", "1990-01-15", "M"),
        (UUID(int=2), "Jane", "Smith", "1985-07-22", "W"),
    ]
    with patch("meter_import.cli.app.db_cursor", return_value=_fake_cursor(cursor)):
        code = cli_main(["readings", str(csv_path)])
    out = capsys.readouterr().out
    assert code == 0
    # one SELECT for the roster plus one INSERT per reading
    assert cursor.execute.call_count == 3


def test_connection_failure_falls_back_to_validation(write_config, temp_workdir: Path, customers_csv, capsys):
    csv_path = _write(temp_workdir, "customers.csv", customers_csv)
    with patch("meter_import.cli.app.db_cursor", side_effect=ConnectionFailed("connection refused")):
        code = cli_main(["customers", str(csv_path)])
    out = capsys.readouterr().out
    assert code == 0
    assert "WARN DB connection failed" in out
    assert "submitted=0" in out


def test_env_file_disables_database(write_config, temp_workdir: Path, customers_csv, capsys, monkeypatch):
    # recorded so the value loaded from .env is undone after the test
    monkeypatch.setenv("DISABLE_DB_CONNECT", "0")
    (temp_workdir / ".env").write_text("DISABLE_DB_CONNECT=1\n", encoding="utf-8")
    csv_path = _write(temp_workdir, "customers.csv", customers_csv)
    with patch("meter_import.cli.app.db_cursor") as mock_cursor:
        code = cli_main(["customers", str(csv_path)])
        mock_cursor.assert_not_called()
    assert code == 0

from __future__ import annotations

import argparse
import json
import os
import sys
import time
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

from ..config.loader import DEFAULT_CONFIG_PATH, ConfigError, load_config
from ..csvfile.reader import RowParseError, missing_columns, parse_table
from ..db.connection import ConnectionFailed, db_cursor
from ..db.entity_writer import SubmissionError, create_entity, fetch_customers
from ..logging.error_log import ErrorLogBuffer
from ..logging.init import log_summary, set_debug, setup_logging
from ..models.config_models import IMPORT_TYPES, ImportSettings
from ..models.entities import Customer
from ..models.error_record import FILE_LEVEL_ROW, ErrorRecord
from ..models.processing_result import ImportOutcome, SubmissionResult
from ..services.orchestrator import ProcessingError, import_file, record_rejections, submit_entities
from ..services.roster import RosterError, load_roster_file
from ..services.summary import render_summary_line
from ..services.templates import render_template, required_fields

"""CLI entrypoint.

    python -m meter_import.cli customers data/customers.csv
    python -m meter_import.cli readings data/readings.csv --roster roster.json
    python -m meter_import.cli readings --template > readings_template.csv

Flow: load .env and config -> (readings) load roster -> validate the file ->
report rejected rows -> submit valid entities one by one -> SUMMARY line.

Exit codes: 0 everything imported, 2 some rows rejected or refused, 1 fatal.
"""

EXIT_SUCCESS_ALL = 0
EXIT_PARTIAL_FAILURE = 2
EXIT_FATAL = 1

# rejected rows printed in full; the rest only go to the error report
MAX_REPORTED_ROWS = 10


def _load_env_file(path: Path, override: bool = True) -> None:
    """Load .env so its connection settings win over the process environment."""
    if path.exists():
        load_dotenv(dotenv_path=path, override=override)


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        prog="meter_import", description="Validate and import customer / meter reading CSV files"
    )
    p.add_argument("import_type", choices=IMPORT_TYPES, help="Kind of records in the file")
    p.add_argument("file", nargs="?", type=Path, help="CSV file to import")
    p.add_argument("--config", type=Path, default=DEFAULT_CONFIG_PATH, help="Config YAML path")
    p.add_argument("--roster", type=Path, help="Customers JSON used to resolve reading rows")
    p.add_argument("--output", type=Path, help="Write the valid entities as JSON")
    p.add_argument("--dry-run", action="store_true", help="Validate only, submit nothing")
    p.add_argument("--template", action="store_true", help="Print the CSV template and exit")
    p.add_argument("--inspect-data", action="store_true", help="Print header & first rows then exit")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    return p.parse_args(argv)


def _inspect_data(path: Path, import_type: str, settings: ImportSettings) -> int:
    type_cfg = settings.for_type(import_type)
    try:
        parsed = parse_table(path.read_text(encoding=type_cfg.encoding).lstrip("\ufeff"), type_cfg.delimiter)
    except (OSError, UnicodeDecodeError, LookupError, RowParseError) as e:
        print(f"inspect: read_error: {e}")
        return EXIT_FATAL
    print(f"FILE: {path.name} cols={parsed.columns} rows={len(parsed.rows)}")
    missing = missing_columns(parsed.columns, required_fields(import_type))
    if missing:
        print(f"  missing_fields={missing}")
    for row in parsed.rows[:3]:
        print(f"  row={row.row_index} values={row.values}")
    return EXIT_SUCCESS_ALL


def _report_rejections(logger: Any, outcome: ImportOutcome) -> None:
    for row in outcome.rejected_rows[:MAX_REPORTED_ROWS]:
        logger.warning(f"row={row.row_index} rejected: {'; '.join(row.errors)}")
    hidden = outcome.error_count - MAX_REPORTED_ROWS
    if hidden > 0:
        logger.warning(f"... and {hidden} more rejected rows (see error report)")


def _write_output(path: Path, outcome: ImportOutcome) -> None:
    payload = {outcome.import_type: [e.to_dict() for e in outcome.valid_rows]}
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(payload, ensure_ascii=False, indent=2), encoding="utf-8")


def _load_roster(logger: Any, args: argparse.Namespace, cursor: Any) -> list[Customer]:
    if args.roster is not None:
        return load_roster_file(args.roster)
    if cursor is not None:
        return fetch_customers(cursor)
    logger.warning("no roster available (use --roster or a database); every reading will be rejected")
    return []


def _run(logger: Any, args: argparse.Namespace, settings: ImportSettings, cursor: Any) -> int:
    start = time.perf_counter()
    roster: list[Customer] = []
    if args.import_type == "readings":
        try:
            roster = _load_roster(logger, args, cursor)
        except (RosterError, SubmissionError) as e:
            logger.error(f"roster: {e}")
            return EXIT_FATAL
        logger.info(f"roster customers={len(roster)}")

    error_log = ErrorLogBuffer(settings.error_log_dir)
    try:
        outcome = import_file(args.file, args.import_type, roster, settings)
    except (ProcessingError, RowParseError) as e:
        logger.error(f"input: {e}")
        error_type = "PARSE_ERROR" if isinstance(e, RowParseError) else "READ_ERROR"
        error_log.append(ErrorRecord.create(args.file.name, args.import_type, FILE_LEVEL_ROW, error_type, str(e)))
        logger.info(f"error report: {error_log.flush()}")
        return EXIT_FATAL

    record_rejections(outcome, error_log, args.file.name)
    _report_rejections(logger, outcome)

    submission: SubmissionResult | None = None
    if cursor is not None and outcome.valid_count:
        submission = submit_entities(
            outcome, lambda entity: create_entity(cursor, entity), error_log, args.file.name
        )

    if args.output is not None:
        _write_output(args.output, outcome)
        logger.info(f"wrote {outcome.valid_count} {args.import_type} to {args.output}")

    report = error_log.flush()
    if report is not None:
        logger.info(f"error report: {report}")

    log_summary(render_summary_line(outcome, submission, time.perf_counter() - start)[len("SUMMARY "):])

    if outcome.error_count > 0 or (submission is not None and submission.failed > 0):
        return EXIT_PARTIAL_FAILURE
    return EXIT_SUCCESS_ALL


def main(argv: list[str] | None = None) -> int:
    logger = setup_logging()

    # None only: an explicit [] must not fall back to sys.argv (pytest args)
    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)
    _load_env_file(Path(".env"), override=True)

    try:
        settings = load_config(args.config)
    except ConfigError as e:
        logger.error(f"config: {e}")
        return EXIT_FATAL

    if args.debug:
        set_debug(logger)
        logger.debug("debug mode enabled")

    if args.template:
        sys.stdout.write(render_template(args.import_type, settings.for_type(args.import_type).delimiter))
        return EXIT_SUCCESS_ALL

    if args.file is None:
        logger.error("input: no CSV file given")
        return EXIT_FATAL

    if args.inspect_data:
        return _inspect_data(args.file, args.import_type, settings)

    logger.info(f"Importing {args.import_type} from: {args.file}")

    # DISABLE_DB_CONNECT=1 (or --dry-run) validates without touching the database
    if args.dry_run or os.getenv("DISABLE_DB_CONNECT") == "1":
        logger.debug("database disabled -> validation only")
        return _run(logger, args, settings, cursor=None)

    try:
        with db_cursor(settings.database) as cur:
            logger.info("mode=live")
            return _run(logger, args, settings, cursor=cur)
    except ConnectionFailed as e:
        logger.warning(f"DB connection failed -> validation only, nothing submitted: {e}")
        return _run(logger, args, settings, cursor=None)

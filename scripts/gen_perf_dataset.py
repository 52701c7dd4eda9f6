#!/usr/bin/env python3
"""Dataset generation script for performance testing.

Generates a synthetic customer roster and matching customer / reading CSV
files in the import format:
- customers.csv: firstName,lastName,birthDate,gender
- readings.csv: customerName,dateOfReading,meterId,kindOfMeter,meterCount,substitute,comment
- roster.json: the customers as {"customers": [...]} with ids, for --roster

A configurable share of rows is deliberately broken (empty names, bad dates,
negative counts, unknown customers) so the rejection path is exercised too.
"""
from __future__ import annotations

import argparse
import json
import sys
import uuid
from pathlib import Path

import numpy as np
import pandas as pd

FIRST_NAMES = ["John", "Jane", "Alex", "Maria", "Lukas", "Anna", "Jonas", "Lea", "Paul", "Mia"]
LAST_NAMES = ["Doe", "Smith", "Johnson", "Muller", "Schmidt", "Weber", "Wagner", "Becker"]
GENDERS = ["M", "W", "D", "U"]
METER_KINDS = ["STROM", "WASSER", "HEIZUNG", "UNBEKANNT"]


def generate_customers(rows: int, seed: int = 42) -> pd.DataFrame:
    """Customers with unique full names (a numeric suffix keeps them apart)."""
    rng = np.random.default_rng(seed)
    first = rng.choice(FIRST_NAMES, rows)
    last = [f"{name}{i}" for i, name in enumerate(rng.choice(LAST_NAMES, rows))]
    births = pd.to_datetime("1940-01-01") + pd.to_timedelta(rng.integers(0, 365 * 60, rows), unit="D")
    return pd.DataFrame(
        {
            "firstName": first,
            "lastName": last,
            "birthDate": births.strftime("%Y-%m-%d"),
            "gender": rng.choice(GENDERS, rows),
        }
    )


def generate_readings(customers: pd.DataFrame, rows: int, seed: int = 42) -> pd.DataFrame:
    rng = np.random.default_rng(seed + 1)
    picks = rng.integers(0, len(customers), rows)
    names = (customers["firstName"] + " " + customers["lastName"]).to_numpy()[picks]
    dates = pd.to_datetime("2023-01-01") + pd.to_timedelta(rng.integers(0, 730, rows), unit="D")
    return pd.DataFrame(
        {
            "customerName": names,
            "dateOfReading": dates.strftime("%Y-%m-%d"),
            "meterId": [f"METER{n:06d}" for n in picks],
            "kindOfMeter": rng.choice(METER_KINDS, rows),
            "meterCount": np.round(rng.uniform(0, 99999, rows), 1),
            "substitute": rng.choice(["true", "false"], rows),
            "comment": rng.choice(["", "Regular reading", "Estimated reading"], rows),
        }
    )


def break_rows(df: pd.DataFrame, ratio: float, kind: str, seed: int = 42) -> pd.DataFrame:
    """Corrupt roughly ``ratio`` of the rows with one typical defect each."""
    if ratio <= 0:
        return df
    rng = np.random.default_rng(seed + 2)
    df = df.astype(str).copy()
    targets = np.flatnonzero(rng.random(len(df)) < ratio)
    for n, i in enumerate(targets):
        if kind == "customers":
            col, value = [("lastName", ""), ("birthDate", "2024-02-30"), ("gender", "X")][n % 3]
        else:
            col, value = [("customerName", "Nobody Known"), ("meterCount", "-5"), ("dateOfReading", "15.01.2024")][n % 3]
        df.iat[i, df.columns.get_loc(col)] = value
    return df


def write_dataset(output_dir: Path, customers: int, readings: int, error_ratio: float, seed: int) -> None:
    output_dir.mkdir(parents=True, exist_ok=True)
    cust_df = generate_customers(customers, seed)
    read_df = generate_readings(cust_df, readings, seed)

    roster = [
        {"id": str(uuid.UUID(int=int(i) + 1)), **rec}
        for i, rec in enumerate(cust_df.astype(str).to_dict(orient="records"))
    ]
    (output_dir / "roster.json").write_text(json.dumps({"customers": roster}, indent=1), encoding="utf-8")

    break_rows(cust_df, error_ratio, "customers", seed).to_csv(output_dir / "customers.csv", index=False)
    break_rows(read_df, error_ratio, "readings", seed).to_csv(output_dir / "readings.csv", index=False)

    print(f"Created dataset in: {output_dir}")
    print(f"  customers.csv: {customers:,} rows")
    print(f"  readings.csv: {readings:,} rows")
    print(f"  roster.json: {customers:,} customers")
    print(f"  defective share: ~{error_ratio:.0%}")


def main() -> int:
    """Main CLI interface for dataset generation."""
    parser = argparse.ArgumentParser(
        description="Generate synthetic customer / reading CSV files for performance testing",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # 1k customers, 50k readings, 5%% defective rows
  %(prog)s data/perf

  # Larger set without defects
  %(prog)s data/perf --customers 10000 --readings 500000 --error-ratio 0
        """,
    )
    parser.add_argument("output_dir", type=Path, help="Directory for the generated files")
    parser.add_argument("--customers", type=int, default=1_000, help="Customer rows (default: 1,000)")
    parser.add_argument("--readings", type=int, default=50_000, help="Reading rows (default: 50,000)")
    parser.add_argument("--error-ratio", type=float, default=0.05, help="Share of broken rows (default: 0.05)")
    parser.add_argument("--seed", type=int, default=42, help="Random seed for reproducible data (default: 42)")
    args = parser.parse_args()

    if args.customers <= 0 or args.readings < 0:
        print("Error: --customers must be positive and --readings non-negative", file=sys.stderr)
        return 1
    if not 0 <= args.error_ratio < 1:
        print("Error: --error-ratio must be in [0, 1)", file=sys.stderr)
        return 1

    try:
        write_dataset(args.output_dir, args.customers, args.readings, args.error_ratio, args.seed)
    except OSError as e:
        print(f"\nError generating dataset: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())

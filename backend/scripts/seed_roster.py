#!/usr/bin/env python3
"""Seed the roster table from a CSV file.

The CSV needs a header row with ``name`` and ``position`` columns. Rows with
an unknown position are skipped. Existing roster entries are kept, so running
the script twice adds the players twice.

Usage:
    uv run python scripts/seed_roster.py players.csv [--database data/faceoff.duckdb]
"""
import argparse
import csv
import sys
from pathlib import Path

from faceoff.models.participant import Position
from faceoff.repositories.session_repository import SessionRepository


def read_roster_csv(csv_path: Path) -> tuple[list[tuple[str, Position]], list[str]]:
    """Parse roster rows.

    Returns:
        (valid (name, position) pairs, human-readable problems for skipped rows)
    """
    rows: list[tuple[str, Position]] = []
    problems: list[str] = []
    with open(csv_path, newline="", encoding="utf-8") as f:
        reader = csv.DictReader(f)
        for line_number, record in enumerate(reader, start=2):
            name = (record.get("name") or "").strip()
            raw_position = (record.get("position") or "").strip().lower()
            if not name:
                problems.append(f"line {line_number}: missing name")
                continue
            try:
                position = Position(raw_position)
            except ValueError:
                problems.append(f"line {line_number}: unknown position '{raw_position}' for {name}")
                continue
            rows.append((name, position))
    return rows, problems


def seed_roster(csv_path: Path, database_path: Path) -> int:
    """Insert roster rows from ``csv_path``. Returns the number inserted."""
    rows, problems = read_roster_csv(csv_path)
    for problem in problems:
        print(f"  ✗ {problem}")

    repository = SessionRepository(database_path)
    try:
        for name, position in rows:
            repository.add_roster_entry(name, position)
            print(f"  ✓ {name} ({position.value})")
    finally:
        repository.close()
    return len(rows)


def main():
    repo_root = Path(__file__).parent.parent.parent  # backend/scripts -> backend -> repo root
    parser = argparse.ArgumentParser(description="Seed the Faceoff roster from a CSV file")
    parser.add_argument("csv_path", type=Path, help="CSV file with name,position columns")
    parser.add_argument("--database", type=Path, default=repo_root / "data" / "faceoff.duckdb",
                        help="DuckDB database file")
    args = parser.parse_args()

    if not args.csv_path.exists():
        print(f"Error: {args.csv_path} does not exist")
        sys.exit(1)

    count = seed_roster(args.csv_path, args.database)
    print(f"\nAdded {count} players to {args.database}")


if __name__ == "__main__":
    main()

#!/usr/bin/env python3
"""Create the attendance SQLite3 database, optionally seeding roster and holidays."""

import argparse
import csv
import sys
from datetime import datetime
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from core.config import DB_PATH
from core.database import add_employee, add_holiday, create_schema, get_connection


def create_database(roster_csv: Path | None = None, holidays_csv: Path | None = None):
    """
    Create the database and tables if they don't exist.

    roster_csv columns: name, location
    holidays_csv columns: date (YYYY-MM-DD), name, locations (';'-separated, blank = all)
    """
    DB_PATH.parent.mkdir(parents=True, exist_ok=True)

    conn = get_connection(DB_PATH)
    try:
        create_schema(conn)

        if roster_csv:
            with roster_csv.open(newline="") as f:
                count = 0
                for row in csv.DictReader(f):
                    add_employee(conn, row["name"].strip(), (row.get("location") or "").strip() or None)
                    count += 1
            print(f"Loaded {count} employees from {roster_csv}")

        if holidays_csv:
            with holidays_csv.open(newline="") as f:
                count = 0
                for row in csv.DictReader(f):
                    holiday_date = datetime.strptime(row["date"].strip(), "%Y-%m-%d").date()
                    locations = [
                        loc.strip() for loc in (row.get("locations") or "").split(";") if loc.strip()
                    ]
                    add_holiday(conn, holiday_date, row["name"].strip(), locations)
                    count += 1
            print(f"Loaded {count} holidays from {holidays_csv}")
    finally:
        conn.close()

    print(f"Database created successfully at: {DB_PATH}")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Create the attendance database")
    parser.add_argument("--roster", type=Path, help="CSV with name,location columns")
    parser.add_argument("--holidays", type=Path, help="CSV with date,name,locations columns")
    args = parser.parse_args()

    create_database(args.roster, args.holidays)

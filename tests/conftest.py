"""
Pytest configuration and shared fixtures.
"""

import sqlite3
import sys
from datetime import date
from pathlib import Path

import pytest

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from core.database import add_employee, add_holiday, create_schema  # noqa: E402
from models.attendance import DayRecord, Employee, Holiday  # noqa: E402


SAMPLE_TRANSCRIPT = """\
6 Mar, 2025
John Doe, 9:05 AM?
CI RO
John Doe, 6:10 PM?
CO RO
"""


@pytest.fixture
def sample_transcript():
    """Minimal CI/CO pair for one employee."""
    return SAMPLE_TRANSCRIPT


@pytest.fixture
def sample_record():
    """Complete office day, on time, full hours (Thursday)."""
    return DayRecord(
        employee_name="John Doe",
        date="2025-03-06",
        in_time="2025-03-06 9:00 AM",
        out_time="2025-03-06 6:00 PM",
        work_hours=9.0,
        location_code="RO",
    )


@pytest.fixture
def holidays():
    """March 2025 holidays: Holi everywhere, a Mumbai-only local holiday."""
    return [
        Holiday(date=date(2025, 3, 14), name="Holi"),
        Holiday(date=date(2025, 3, 20), name="Local Fair", locations=frozenset({"Mumbai"})),
    ]


@pytest.fixture
def roster():
    return [
        Employee(name="Jane Roe", id=2, location="Mumbai"),
        Employee(name="John Doe", id=1, location="Pune"),
    ]


@pytest.fixture
def db_conn():
    """In-memory database with schema, roster and holidays."""
    conn = sqlite3.connect(":memory:", check_same_thread=False)
    create_schema(conn)
    add_employee(conn, "John Doe", "Pune")
    add_employee(conn, "Jane Roe", "Mumbai")
    add_employee(conn, "Ravi Kumar", "Pune")
    add_holiday(conn, date(2025, 3, 14), "Holi")
    add_holiday(conn, date(2025, 3, 20), "Local Fair", ["Mumbai"])
    yield conn
    conn.close()

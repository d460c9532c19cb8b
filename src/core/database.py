"""
SQLite database operations for attendance, holidays and the roster.
"""

import sqlite3
from datetime import date
from pathlib import Path

from core.config import DB_PATH
from core.timestamps import hours_between, parse_record_date, parse_timestamp
from models.attendance import DayRecord, Employee, Holiday, OtherMessage, StatusLabel

SCHEMA_STATEMENTS = [
    """
    CREATE TABLE IF NOT EXISTS employees (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        name TEXT UNIQUE NOT NULL,
        location TEXT,
        disabled INTEGER NOT NULL DEFAULT 0
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS holidays (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        holiday_date TEXT NOT NULL,
        holiday_name TEXT NOT NULL,
        location TEXT
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS attendance (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        emp_name TEXT NOT NULL,
        in_time TEXT,
        out_time TEXT,
        location TEXT,
        date TEXT NOT NULL,
        work_hour REAL NOT NULL DEFAULT 0,
        day TEXT,
        is_absent INTEGER NOT NULL DEFAULT 0
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS other_messages (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        sender_name TEXT,
        message TEXT,
        message_time TEXT,
        message_date TEXT
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS api_requests (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        request_id TEXT UNIQUE NOT NULL,
        timestamp TEXT NOT NULL,
        endpoint TEXT NOT NULL,
        method TEXT NOT NULL,
        client_ip TEXT,
        payload_size_bytes INTEGER,
        status_code INTEGER NOT NULL,
        error_code TEXT,
        error_message TEXT,
        processing_time_ms INTEGER NOT NULL,
        events_parsed INTEGER,
        records_saved INTEGER
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS api_request_details (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        request_id TEXT NOT NULL,
        detail_type TEXT NOT NULL CHECK(detail_type IN ('validation_error', 'warning')),
        message TEXT NOT NULL,
        FOREIGN KEY (request_id) REFERENCES api_requests(request_id)
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_attendance_date ON attendance(date)",
    "CREATE INDEX IF NOT EXISTS idx_attendance_emp ON attendance(emp_name)",
    "CREATE INDEX IF NOT EXISTS idx_api_requests_timestamp ON api_requests(timestamp)",
]


def get_connection(db_path: Path = DB_PATH) -> sqlite3.Connection:
    """Get a database connection."""
    return sqlite3.connect(db_path, check_same_thread=False)


def create_schema(conn: sqlite3.Connection) -> None:
    """Create all tables and indexes if they don't exist."""
    conn.execute("PRAGMA foreign_keys = ON")
    cursor = conn.cursor()
    for statement in SCHEMA_STATEMENTS:
        cursor.execute(statement)
    conn.commit()


# =============================================================================
# ROSTER & HOLIDAYS
# =============================================================================


def get_employees(conn: sqlite3.Connection) -> list[Employee]:
    """Active employees sorted by name."""
    cursor = conn.cursor()
    cursor.execute(
        "SELECT id, name, location FROM employees WHERE disabled = 0 ORDER BY name ASC"
    )
    return [Employee(name=name, id=emp_id, location=location) for emp_id, name, location in cursor]


def add_employee(conn: sqlite3.Connection, name: str, location: str | None = None) -> int:
    """Insert a roster entry and return its id."""
    cursor = conn.cursor()
    cursor.execute("INSERT INTO employees (name, location) VALUES (?, ?)", (name, location))
    conn.commit()
    return cursor.lastrowid


def get_holidays(conn: sqlite3.Connection, location: str | None = None) -> list[Holiday]:
    """
    Holidays grouped by (date, name), one Holiday per group.

    Rows are stored one per location; a NULL/empty location means all
    locations. With a location filter only holidays applying there are returned.
    """
    cursor = conn.cursor()
    cursor.execute(
        "SELECT holiday_date, holiday_name, location FROM holidays ORDER BY holiday_date ASC"
    )

    grouped: dict[tuple[date, str], set[str]] = {}
    universal: set[tuple[date, str]] = set()
    for holiday_date, holiday_name, loc in cursor:
        parsed = parse_record_date(holiday_date)
        if parsed is None:
            continue
        key = (parsed, holiday_name)
        locs = grouped.setdefault(key, set())
        if loc and loc.strip():
            locs.add(loc.strip())
        else:
            universal.add(key)

    holidays = [
        Holiday(date=d, name=name, locations=frozenset() if (d, name) in universal else frozenset(locs))
        for (d, name), locs in grouped.items()
    ]
    if location is not None:
        holidays = [h for h in holidays if h.applies_to(location)]
    return sorted(holidays, key=lambda h: (h.date, h.name))


def add_holiday(
    conn: sqlite3.Connection, holiday_date: date, name: str, locations: list[str] | None = None
) -> None:
    """Store a holiday, one row per location (a single NULL row for all locations)."""
    cursor = conn.cursor()
    for loc in locations or [None]:
        cursor.execute(
            "INSERT INTO holidays (holiday_date, holiday_name, location) VALUES (?, ?, ?)",
            (holiday_date.isoformat(), name, loc),
        )
    conn.commit()


# =============================================================================
# ATTENDANCE
# =============================================================================


ATTENDANCE_COLUMNS = "id, emp_name, in_time, out_time, location, date, work_hour, day"


def _row_to_record(row: tuple) -> DayRecord:
    row_id, emp_name, in_time, out_time, location, record_date, work_hour, day = row
    return DayRecord(
        id=row_id,
        employee_name=emp_name,
        date=record_date,
        in_time=in_time or "",
        out_time=out_time or "",
        work_hours=float(work_hour or 0.0),
        location_code=location or "",
        status=day or "",
    )


def get_attendance_rows(
    conn: sqlite3.Connection,
    emp_name: str | None = None,
    on_date: str | None = None,
    year: int | None = None,
    month: int | None = None,
) -> list[DayRecord]:
    """
    Fetch stored attendance rows as DayRecords.

    Filters combine with AND: exact date, year+month, employee name.
    """
    query = f"SELECT {ATTENDANCE_COLUMNS} FROM attendance"
    conditions = []
    params: list = []

    if on_date:
        conditions.append("date = ?")
        params.append(on_date)
    if year is not None and month is not None:
        conditions.append("date LIKE ?")
        params.append(f"{year:04d}-{month:02d}-%")
    if emp_name and emp_name.strip():
        conditions.append("emp_name = ?")
        params.append(emp_name)

    if conditions:
        query += " WHERE " + " AND ".join(conditions)
    query += " ORDER BY emp_name ASC, id ASC"

    cursor = conn.cursor()
    cursor.execute(query, params)
    return [_row_to_record(row) for row in cursor.fetchall()]


def attendance_exists(conn: sqlite3.Connection, on_date: str) -> bool:
    """True if any attendance row is stored for the date."""
    cursor = conn.cursor()
    cursor.execute("SELECT COUNT(*) FROM attendance WHERE date = ?", (on_date,))
    return cursor.fetchone()[0] > 0


def get_attendance_row(conn: sqlite3.Connection, record_id: int) -> DayRecord | None:
    """One stored row by id, or None."""
    cursor = conn.cursor()
    cursor.execute(f"SELECT {ATTENDANCE_COLUMNS} FROM attendance WHERE id = ?", (record_id,))
    row = cursor.fetchone()
    return _row_to_record(row) if row else None


def _qualify_time(value: str, on_date: str) -> str:
    """'6:00 PM' -> '<on_date> 6:00 PM'; full timestamps pass through unchanged."""
    if parse_timestamp(value) is None and parse_timestamp(f"{on_date} {value}") is not None:
        return f"{on_date} {value}"
    return value


def update_day_record(
    conn: sqlite3.Connection,
    record_id: int,
    in_time: str | None = None,
    out_time: str | None = None,
    location: str | None = None,
) -> DayRecord | None:
    """
    Correct a stored row's punches or location and recompute its hours.

    Blank in/out times keep the stored value, and so does location=None.
    A row still missing a punch is marked Absent (is_absent = 1, zero hours);
    a complete row gets its status cleared so the next classification
    decides it from the new hours.

    Returns:
        The updated record, or None if no row has that id
    """
    existing = get_attendance_row(conn, record_id)
    if existing is None:
        return None

    new_in = (
        _qualify_time(in_time.strip(), existing.date)
        if in_time and in_time.strip()
        else existing.in_time
    )
    new_out = (
        _qualify_time(out_time.strip(), existing.date)
        if out_time and out_time.strip()
        else existing.out_time
    )
    new_location = existing.location_code if location is None else location.strip()
    is_absent = not (new_in and new_out)

    cursor = conn.cursor()
    cursor.execute(
        """
        UPDATE attendance
        SET in_time = ?, out_time = ?, location = ?, work_hour = ?, day = ?, is_absent = ?
        WHERE id = ?
        """,
        (
            new_in,
            new_out,
            new_location,
            hours_between(new_in, new_out),
            StatusLabel.ABSENT if is_absent else "",
            int(is_absent),
            record_id,
        ),
    )
    conn.commit()
    return get_attendance_row(conn, record_id)


def insert_day_records(
    conn: sqlite3.Connection,
    records: list[DayRecord],
    absent_names: list[str] | None = None,
    on_date: str | None = None,
) -> int:
    """
    Insert merged records plus synthesized Absent rows. Returns rows written.

    Absent rows are dated on_date (falling back to the first record's date).
    """
    cursor = conn.cursor()
    for record in records:
        cursor.execute(
            """
            INSERT INTO attendance (
                emp_name, in_time, out_time, location, date, work_hour, day, is_absent
            ) VALUES (?, ?, ?, ?, ?, ?, ?, 0)
            """,
            (
                record.employee_name,
                record.in_time,
                record.out_time,
                record.location_code,
                record.date,
                record.work_hours,
                record.status,
            ),
        )

    absent_date = on_date or (records[0].date if records else None)
    for name in absent_names or []:
        cursor.execute(
            """
            INSERT INTO attendance (
                emp_name, in_time, out_time, location, date, work_hour, day, is_absent
            ) VALUES (?, '', '', '', ?, 0, ?, 1)
            """,
            (name, absent_date, StatusLabel.ABSENT),
        )

    conn.commit()
    return len(records) + len(absent_names or [])


def insert_messages(conn: sqlite3.Connection, messages: list[OtherMessage]) -> None:
    """Store chat messages kept by the parser."""
    cursor = conn.cursor()
    for message in messages:
        cursor.execute(
            """
            INSERT INTO other_messages (sender_name, message, message_time, message_date)
            VALUES (?, ?, ?, ?)
            """,
            (message.sender_name, message.text, message.time, message.date),
        )
    conn.commit()

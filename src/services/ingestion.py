"""
Transcript ingestion: parse, merge, validate against the roster, persist.
"""

import sqlite3
from dataclasses import dataclass, field

from core.database import (
    attendance_exists,
    get_employees,
    get_holidays,
    insert_day_records,
    insert_messages,
)
from core.timestamps import parse_record_date
from core.validation import find_anomalies, validate_roster
from models.attendance import DayRecord, Employee, OtherMessage, RawEvent
from services.aggregator import merge_events
from services.classifier import SUNDAY, holiday_dates, holidays_for_location
from services.parser import parse_transcript


class DuplicateAttendanceError(ValueError):
    """Attendance for the transcript date is already stored."""


@dataclass
class IngestResult:
    """Outcome of parsing (and optionally saving) one transcript."""

    date: str
    events: list[RawEvent] = field(default_factory=list)
    records: list[DayRecord] = field(default_factory=list)
    messages: list[OtherMessage] = field(default_factory=list)
    absent_names: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    rows_saved: int = 0


def preview_transcript(text: str) -> IngestResult:
    """Parse and merge without touching storage."""
    parsed = parse_transcript(text)
    return IngestResult(
        date=parsed.date,
        events=parsed.events,
        records=merge_events(parsed.events),
        messages=parsed.messages,
        warnings=find_anomalies(parsed),
    )


def find_absentees(
    roster: list[Employee], records: list[DayRecord], on_date: str, holidays: list
) -> list[str]:
    """
    Rostered employees with no record on a working day.

    Nobody is absent on a Sunday, on an unparseable date, or on a holiday
    for their own location.
    """
    day = parse_record_date(on_date)
    if day is None or day.weekday() == SUNDAY:
        return []

    recorded = {record.employee_name for record in records}
    absentees = []
    for employee in roster:
        if employee.name in recorded:
            continue
        if day in holiday_dates(holidays_for_location(holidays, employee.location)):
            continue
        absentees.append(employee.name)
    return absentees


def ingest_transcript(conn: sqlite3.Connection, text: str, silent: bool = False) -> IngestResult:
    """
    Parse a transcript and store its day records, absentees and messages.

    Args:
        conn: Open database connection
        text: Pasted transcript
        silent: If True, suppress print statements (for API usage)

    Raises:
        ValueError: No attendance entries, or employees missing from the roster
        DuplicateAttendanceError: Rows for this date already exist
    """
    result = preview_transcript(text)

    if not silent:
        print(
            f"Parsed {len(result.events)} events into {len(result.records)} records "
            f"for {result.date or '(no date)'}"
        )
        for warning in result.warnings:
            print(f"  Warning: {warning}")

    if not result.records:
        raise ValueError("Transcript contains no attendance entries")

    roster = get_employees(conn)
    errors = validate_roster(result.records, {employee.name for employee in roster})
    if errors:
        if not silent:
            print("\nERROR: Unknown employees found:")
            for error in errors:
                print(f"  - {error}")
        raise ValueError("\n".join(errors))

    if attendance_exists(conn, result.date):
        raise DuplicateAttendanceError(f"Attendance records for {result.date} already exist")

    result.absent_names = find_absentees(roster, result.records, result.date, get_holidays(conn))
    result.rows_saved = insert_day_records(
        conn, result.records, result.absent_names, on_date=result.date
    )
    insert_messages(conn, result.messages)

    if not silent:
        print(
            f"Saved {result.rows_saved} rows "
            f"({len(result.absent_names)} absent, {len(result.messages)} messages kept)"
        )

    return result

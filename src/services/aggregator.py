"""
Merge raw check-in/check-out legs into one DayRecord per employee and date.
"""

from dataclasses import replace

from core.timestamps import hours_between, parse_record_date, parse_timestamp
from models.attendance import DayRecord, RawEvent, StatusLabel


def event_work_hours(event: RawEvent) -> float:
    """Hours contributed by one leg: the supplied value, else out - in."""
    if event.work_hours is not None:
        return float(event.work_hours)
    if event.in_time and event.out_time:
        return hours_between(event.in_time, event.out_time)
    return 0.0


def earliest(current: str, candidate: str) -> str:
    """Chronologically earlier of two timestamps, ignoring empties."""
    if not candidate:
        return current
    if not current:
        return candidate
    current_dt = parse_timestamp(current)
    candidate_dt = parse_timestamp(candidate)
    if current_dt is not None and candidate_dt is not None and candidate_dt < current_dt:
        return candidate
    return current


def latest(current: str, candidate: str) -> str:
    """Chronologically later of two timestamps, ignoring empties."""
    if not candidate:
        return current
    if not current:
        return candidate
    current_dt = parse_timestamp(current)
    candidate_dt = parse_timestamp(candidate)
    if current_dt is not None and candidate_dt is not None and candidate_dt > current_dt:
        return candidate
    return current


def merge_into(record: DayRecord, other: DayRecord) -> None:
    """
    Fold other into record in place.

    in_time keeps the earliest, out_time the latest, work_hours add up,
    the first non-empty location sticks and a Late Mark is never
    downgraded by a plain merge.
    """
    record.in_time = earliest(record.in_time, other.in_time)
    record.out_time = latest(record.out_time, other.out_time)
    record.work_hours += other.work_hours
    if not record.location_code and other.location_code:
        record.location_code = other.location_code
    if other.status == StatusLabel.LATE_MARK:
        record.status = StatusLabel.LATE_MARK
    elif not record.status and other.status:
        record.status = other.status


def merge_key(record: DayRecord) -> tuple[str, str]:
    """(employee_name, date) with the date normalized to YYYY-MM-DD when it parses."""
    parsed = parse_record_date(record.date)
    return (record.employee_name, parsed.isoformat() if parsed else record.date)


def merge_day_records(records: list[DayRecord]) -> list[DayRecord]:
    """
    Collapse records sharing (employee_name, date) into one.

    Dates are compared after normalization, so "2025-03-06" and
    "2025-03-06 00:00:00" are the same day. The first record's date string
    is kept. Input records are not modified. Order follows first appearance
    of each key.
    """
    merged: dict[tuple[str, str], DayRecord] = {}
    for record in records:
        key = merge_key(record)
        existing = merged.get(key)
        if existing is None:
            merged[key] = replace(record)
        else:
            merge_into(existing, record)
    return list(merged.values())


def merge_events(events: list[RawEvent]) -> list[DayRecord]:
    """
    Build one DayRecord per (employee_name, date) from raw legs.

    Open check-ins and orphan check-outs are kept as partial contributions
    (zero hours) instead of being paired with each other.
    """
    legs = [
        DayRecord(
            employee_name=event.employee_name,
            date=event.date,
            in_time=event.in_time,
            out_time=event.out_time,
            work_hours=event_work_hours(event),
            location_code=event.location_code,
        )
        for event in events
    ]
    return merge_day_records(legs)

"""
Date and time helpers shared by the aggregator, classifier and reports.
"""

from datetime import date, datetime, timedelta

from core.config import STORAGE_DATE_FORMAT, TIMESTAMP_FORMATS


def parse_timestamp(value: str | None) -> datetime | None:
    """Parse a 'YYYY-MM-DD <time>' string, or None if it matches no known format."""
    if not value:
        return None
    text = " ".join(value.split())
    for fmt in TIMESTAMP_FORMATS:
        try:
            return datetime.strptime(text, fmt)
        except ValueError:
            continue
    return None


def parse_record_date(value: str | date | None) -> date | None:
    """Parse a stored record date (YYYY-MM-DD). Literal fallback dates give None."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return datetime.strptime(value.strip()[:10], STORAGE_DATE_FORMAT).date()
    except ValueError:
        return None


def hours_between(in_time: str | None, out_time: str | None) -> float:
    """
    Decimal hours from check-in to check-out.

    A check-out earlier than the check-in is treated as next-day (overnight).
    Missing or unparseable timestamps give 0.
    """
    start = parse_timestamp(in_time)
    end = parse_timestamp(out_time)
    if start is None or end is None:
        return 0.0
    if end < start:
        end += timedelta(days=1)
    return (end - start).total_seconds() / 3600


def format_work_hours(decimal_hours: float | None) -> str:
    """Render decimal hours as 'H.MM' so minutes never reach 60 (8.5 -> '8.30')."""
    if not decimal_hours:
        return "0.00"
    total_minutes = round(decimal_hours * 60)
    hours, minutes = divmod(total_minutes, 60)
    return f"{hours}.{minutes:02d}"

"""
Day classification.

Rules are evaluated in priority order and the first match wins:

1. Holiday for the employee's location
2. Incomplete: office/remote record with enough hours but a missing punch
3. Site visit (weekday, location outside the office codes)
4. Low hours (some hours logged, below the threshold) -> AB
5. Sunday: hours decide Absent / Half Day / Full Day, never Late Mark
6. Weekday: hours decide Absent / Half Day / Full Day, late check-in -> Late Mark

classify_day is pure: it never touches the record it is given.
"""

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date, time

from core.config import FULL_DAY_THRESHOLD, LATE_CUTOFF, LOW_HOURS_THRESHOLD, OFFICE_CODES
from core.timestamps import parse_record_date, parse_timestamp
from models.attendance import ClassifiedCell, DayRecord, Holiday, StatusLabel

SUNDAY = 6  # date.weekday()


@dataclass(frozen=True)
class ClassificationRules:
    """Thresholds and codes the classifier runs with."""

    low_hours_threshold: float = LOW_HOURS_THRESHOLD
    full_day_threshold: float = FULL_DAY_THRESHOLD
    late_cutoff: time = LATE_CUTOFF
    office_codes: frozenset[str] = frozenset(OFFICE_CODES)


DEFAULT_RULES = ClassificationRules()

CELLS = {
    StatusLabel.HOLIDAY: ClassifiedCell(StatusLabel.HOLIDAY, "P", "holiday", "Holiday"),
    StatusLabel.INCOMPLETE: ClassifiedCell(
        StatusLabel.INCOMPLETE, "I", "incomplete", "Incomplete Attendance"
    ),
    StatusLabel.SITE_VISIT_INCOMPLETE: ClassifiedCell(
        StatusLabel.SITE_VISIT_INCOMPLETE, "SV.I", "site_visit", "Site Visit Incomplete"
    ),
    StatusLabel.SITE_VISIT_PRESENT: ClassifiedCell(
        StatusLabel.SITE_VISIT_PRESENT, "SV.P", "site_visit", "Site Visit Present"
    ),
    StatusLabel.LOW_HOURS: ClassifiedCell(StatusLabel.LOW_HOURS, "AB", "low_hours", "AB"),
    StatusLabel.ABSENT: ClassifiedCell(StatusLabel.ABSENT, "", "absent", "Absent"),
    StatusLabel.HALF_DAY: ClassifiedCell(StatusLabel.HALF_DAY, "H", "half_day", "Half Day"),
    StatusLabel.FULL_DAY: ClassifiedCell(StatusLabel.FULL_DAY, "P", "present", "Full Day"),
    StatusLabel.LATE_MARK: ClassifiedCell(
        StatusLabel.LATE_MARK, "P", "late_mark", "Full Day (Late Mark)"
    ),
    StatusLabel.BLANK: ClassifiedCell(StatusLabel.BLANK, "", "none", ""),
}


# =============================================================================
# PREDICATES
# =============================================================================


def holiday_dates(holidays: Iterable[Holiday | date]) -> set[date]:
    """Dates covered by a holiday list (Holiday objects or bare dates)."""
    return {h.date if isinstance(h, Holiday) else h for h in holidays}


def holidays_for_location(holidays: Iterable[Holiday], location: str | None) -> list[Holiday]:
    """Holidays that apply to the given location."""
    return [h for h in holidays if h.applies_to(location)]


def is_site_visit(location_code: str | None, rules: ClassificationRules = DEFAULT_RULES) -> bool:
    """A location is a site visit when none of its tokens is an office code."""
    if not location_code or not location_code.strip():
        return False
    tokens = set(location_code.lower().split())
    return not tokens & rules.office_codes


def is_late(in_time: str | None, rules: ClassificationRules = DEFAULT_RULES) -> bool:
    """Check-in strictly after the cutoff. Unparseable times are never late."""
    checked_in = parse_timestamp(in_time)
    if checked_in is None:
        return False
    return checked_in.time() > rules.late_cutoff


def label_by_hours(
    work_hours: float, in_time: str, weekday: int, rules: ClassificationRules = DEFAULT_RULES
) -> str:
    """Absent / Half Day / Full Day by hours, Late Mark on late weekday check-ins."""
    if work_hours < rules.low_hours_threshold:
        return StatusLabel.ABSENT
    if work_hours < rules.full_day_threshold:
        return StatusLabel.HALF_DAY
    if weekday != SUNDAY and is_late(in_time, rules):
        return StatusLabel.LATE_MARK
    return StatusLabel.FULL_DAY


# =============================================================================
# CLASSIFICATION
# =============================================================================


def classify_label(
    record: DayRecord,
    holidays: Iterable[Holiday | date],
    weekday: int,
    rules: ClassificationRules = DEFAULT_RULES,
) -> str:
    """Status label for a record; see module docstring for rule order."""
    if not isinstance(weekday, int) or not 0 <= weekday <= 6:
        raise ValueError(f"weekday must be 0 (Monday) .. 6 (Sunday), got {weekday!r}")

    record_date = parse_record_date(record.date)
    if record.status == StatusLabel.HOLIDAY or (
        record_date is not None and record_date in holiday_dates(holidays)
    ):
        return StatusLabel.HOLIDAY

    hours = record.work_hours or 0.0
    site_visit = is_site_visit(record.location_code, rules)
    missing_punch = not record.in_time or not record.out_time
    marked_absent = record.status == StatusLabel.ABSENT

    if (
        not site_visit
        and not marked_absent
        and hours >= rules.low_hours_threshold
        and missing_punch
    ):
        return StatusLabel.INCOMPLETE

    if weekday != SUNDAY and site_visit:
        if missing_punch:
            return StatusLabel.SITE_VISIT_INCOMPLETE
        return StatusLabel.SITE_VISIT_PRESENT

    if not marked_absent and hours < rules.low_hours_threshold:
        return StatusLabel.LOW_HOURS

    return label_by_hours(hours, record.in_time, weekday, rules)


def classify_day(
    record: DayRecord,
    holidays: Iterable[Holiday | date],
    weekday: int,
    rules: ClassificationRules = DEFAULT_RULES,
) -> ClassifiedCell:
    """
    Classify one merged day record.

    Args:
        record: Merged record; not modified
        holidays: Holidays for the employee's location
        weekday: date.weekday() of the record date (Monday=0, Sunday=6)
        rules: Thresholds and office codes

    Returns:
        ClassifiedCell with label, short display text, color key and long text
    """
    return CELLS[classify_label(record, holidays, weekday, rules)]


def classify_missing_day(
    day: date, holidays: Iterable[Holiday | date], today: date
) -> ClassifiedCell:
    """Cell for a day with no record: past working days are Absent, the rest blank."""
    if day < today and day.weekday() != SUNDAY and day not in holiday_dates(holidays):
        return CELLS[StatusLabel.ABSENT]
    return CELLS[StatusLabel.BLANK]

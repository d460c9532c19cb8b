"""
Monthly grid and date-wise listing built on top of the classifier.

Both views are recomputed from scratch on every call; nothing is patched
incrementally.
"""

import calendar
from dataclasses import replace
from datetime import date

from core.timestamps import format_work_hours, parse_record_date
from models.attendance import (
    ClassifiedCell,
    DatewiseRow,
    DayRecord,
    Employee,
    Holiday,
    MonthlySummary,
    StatusLabel,
)
from services.aggregator import merge_day_records
from services.classifier import (
    DEFAULT_RULES,
    SUNDAY,
    ClassificationRules,
    classify_day,
    classify_missing_day,
    holiday_dates,
    holidays_for_location,
)

# label -> presence credit (present_days and days_worked)
PRESENCE_CREDIT = {
    StatusLabel.FULL_DAY: 1.0,
    StatusLabel.LATE_MARK: 1.0,
    StatusLabel.SITE_VISIT_PRESENT: 1.0,
    StatusLabel.HALF_DAY: 0.5,
}

# labels whose hours count toward total_hours
HOURS_LABELS = {
    StatusLabel.FULL_DAY,
    StatusLabel.LATE_MARK,
    StatusLabel.HALF_DAY,
    StatusLabel.SITE_VISIT_PRESENT,
    StatusLabel.SITE_VISIT_INCOMPLETE,
}


def _roster_locations(employees: list[Employee | str] | None) -> dict[str, str | None]:
    locations: dict[str, str | None] = {}
    for employee in employees or []:
        if isinstance(employee, Employee):
            locations[employee.name] = employee.location
        else:
            locations[employee] = None
    return locations


def apply_background(cell: ClassifiedCell, day: date, holidays: list[Holiday]) -> ClassifiedCell:
    """Holiday and Sunday backgrounds win over the label's own color."""
    if day in holiday_dates(holidays):
        return replace(cell, color_key="holiday")
    if day.weekday() == SUNDAY:
        return replace(cell, color_key="sunday")
    return cell


def tally(summary: MonthlySummary, cell: ClassifiedCell, record: DayRecord | None) -> None:
    """Add one classified day to the running aggregates."""
    credit = PRESENCE_CREDIT.get(cell.label, 0.0)
    summary.present_days += credit
    summary.days_worked += credit
    if record is not None and cell.label in HOURS_LABELS:
        summary.total_hours += record.work_hours or 0.0
    if cell.label == StatusLabel.LATE_MARK:
        summary.late_mark_count += 1


def build_monthly_pivot(
    records: list[DayRecord],
    holidays: list[Holiday],
    year: int,
    month: int,
    employees: list[Employee | str] | None,
    today: date | None = None,
    rules: ClassificationRules = DEFAULT_RULES,
) -> list[MonthlySummary]:
    """
    Build the per-employee monthly grid.

    Args:
        records: Day records for the month; duplicates per key are merged again
        holidays: Full holiday calendar, filtered per employee location
        year, month: Month to build
        employees: Roster (Employee or bare names). When empty, the
            employees found in records are used.
        today: Reference date for synthesizing Absent on past days
        rules: Classifier thresholds

    Returns:
        One MonthlySummary per employee, sorted by name
    """
    if not 1 <= month <= 12:
        raise ValueError(f"month must be 1..12, got {month!r}")
    today = today or date.today()
    _, days_in_month = calendar.monthrange(year, month)

    by_key: dict[tuple[str, int], DayRecord] = {}
    for record in merge_day_records(records):
        record_date = parse_record_date(record.date)
        if record_date is None or (record_date.year, record_date.month) != (year, month):
            continue
        by_key[(record.employee_name, record_date.day)] = record

    locations = _roster_locations(employees)
    if not locations:
        locations = {name: None for name, _ in by_key}

    summaries = []
    for name in sorted(locations):
        location_holidays = holidays_for_location(holidays, locations[name])
        summary = MonthlySummary(employee_name=name)

        for day_num in range(1, days_in_month + 1):
            cell_date = date(year, month, day_num)
            record = by_key.get((name, day_num))
            if record is None:
                cell = classify_missing_day(cell_date, location_holidays, today)
            else:
                cell = classify_day(record, location_holidays, cell_date.weekday(), rules)
            tally(summary, cell, record)
            summary.cells[day_num] = apply_background(cell, cell_date, location_holidays)

        summaries.append(summary)

    return summaries


def build_datewise_view(
    records: list[DayRecord],
    holidays: list[Holiday],
    employees: list[Employee | str] | None = None,
    rules: ClassificationRules = DEFAULT_RULES,
) -> list[DatewiseRow]:
    """
    Classify each record for direct listing, no aggregation.

    Records with an unparseable date are still listed, classified as a
    weekday against no holidays.
    """
    locations = _roster_locations(employees)
    rows = []
    for record in sorted(records, key=lambda r: (r.employee_name, r.date)):
        record_date = parse_record_date(record.date)
        location_holidays = holidays_for_location(holidays, locations.get(record.employee_name))
        if record_date is None:
            cell = classify_day(record, [], 0, rules)
        else:
            cell = classify_day(record, location_holidays, record_date.weekday(), rules)
        rows.append(
            DatewiseRow(
                record=record,
                cell=cell,
                work_hours_display=format_work_hours(record.work_hours),
            )
        )
    return rows

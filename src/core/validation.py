"""
Ingestion checks: roster membership (errors) and parse anomalies (warnings).
"""

from collections import defaultdict

from core.config import CHECK_OUT_MARKER
from models.attendance import DayRecord, ParseResult


def validate_roster(records: list[DayRecord], roster_names: set[str]) -> list[str]:
    """
    Check every merged record belongs to a rostered employee.

    Returns one error per unknown employee name, in first-seen order.
    """
    errors = []
    seen = set()
    for record in records:
        name = record.employee_name
        if name in roster_names or name in seen:
            continue
        seen.add(name)
        if not name:
            errors.append("Attendance entry without an employee name")
        else:
            errors.append(f"Employee '{name}' is not on the roster")
    return errors


def find_anomalies(result: ParseResult) -> list[str]:
    """
    Describe recoverable oddities in a parsed transcript.

    Checks:
    1. First line did not parse as a date
    2. Check-outs with no open check-in (orphans)
    3. Check-ins never closed by a check-out
    """
    warnings = []

    if result.events and not result.date_parsed:
        warnings.append(f"Unrecognized date header '{result.date}', kept as-is")

    orphans: dict[str, int] = defaultdict(int)
    open_legs: dict[str, int] = defaultdict(int)
    for event in result.events:
        if event.kind == CHECK_OUT_MARKER and not event.in_time:
            orphans[event.employee_name] += 1
        elif event.is_open:
            open_legs[event.employee_name] += 1

    for name in sorted(orphans):
        warnings.append(f"{name}: {orphans[name]} check-out(s) without a check-in")
    for name in sorted(open_legs):
        warnings.append(f"{name}: {open_legs[name]} check-in(s) without a check-out")

    return warnings

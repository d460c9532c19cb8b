"""
Data models for attendance events, day records and monthly summaries.

Records coming out of the parser and aggregator are plain mutable
dataclasses. Everything the classifier and pivot builder hand back is
frozen or freshly built, so callers can cache results without copying.
"""

from dataclasses import dataclass, field
from datetime import date


class StatusLabel:
    """Status label constants assigned by the day classifier."""

    HOLIDAY = "Holiday"
    INCOMPLETE = "Incomplete"
    SITE_VISIT_INCOMPLETE = "Site Visit Incomplete"
    SITE_VISIT_PRESENT = "Site Visit Present"
    LOW_HOURS = "AB"
    ABSENT = "Absent"
    HALF_DAY = "Half Day"
    FULL_DAY = "Full Day"
    LATE_MARK = "Late Mark"
    BLANK = ""


@dataclass
class RawEvent:
    """One check-in/check-out leg lifted from a transcript."""

    employee_name: str
    kind: str  # "CI" or "CO"
    date: str
    in_time: str = ""
    out_time: str = ""
    location_code: str = ""
    work_hours: float | None = None  # None means derive from in/out

    @property
    def is_open(self) -> bool:
        return bool(self.in_time) and not self.out_time


@dataclass
class OtherMessage:
    """Non-attendance chatter kept for audit."""

    sender_name: str
    text: str
    time: str
    date: str


@dataclass
class DayRecord:
    """Merged attendance for one employee on one date."""

    employee_name: str
    date: str
    in_time: str = ""
    out_time: str = ""
    work_hours: float = 0.0
    location_code: str = ""
    status: str = ""
    id: int | None = field(default=None, compare=False)  # attendance row id once stored


@dataclass(frozen=True)
class Holiday:
    """A holiday; an empty location set applies everywhere."""

    date: date
    name: str
    locations: frozenset[str] = frozenset()

    def applies_to(self, location: str | None) -> bool:
        if not self.locations or location is None:
            return True
        wanted = location.strip().lower()
        return any(loc.strip().lower() == wanted for loc in self.locations)


@dataclass(frozen=True)
class Employee:
    """Roster entry."""

    name: str
    id: int | None = None
    location: str | None = None


@dataclass(frozen=True)
class ClassifiedCell:
    """Classifier output for one day."""

    label: str
    display_text: str
    color_key: str
    full_text: str = ""


@dataclass
class MonthlySummary:
    """One employee row of the monthly grid."""

    employee_name: str
    cells: dict[int, ClassifiedCell] = field(default_factory=dict)
    present_days: float = 0.0
    late_mark_count: int = 0
    total_hours: float = 0.0
    days_worked: float = 0.0

    @property
    def average_hours(self) -> float:
        if self.days_worked > 0:
            return self.total_hours / self.days_worked
        return 0.0


@dataclass(frozen=True)
class DatewiseRow:
    """One line of the date-wise listing."""

    record: DayRecord
    cell: ClassifiedCell
    work_hours_display: str


@dataclass
class ParseResult:
    """Output of parse_transcript."""

    date: str
    date_parsed: bool
    events: list[RawEvent] = field(default_factory=list)
    messages: list[OtherMessage] = field(default_factory=list)

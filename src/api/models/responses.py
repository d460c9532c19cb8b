"""Pydantic request/response models for API endpoints."""

from datetime import date

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """Health check response."""

    status: str  # "healthy" or "unhealthy"
    version: str
    database_available: bool
    timestamp: str  # ISO 8601 UTC
    error: str | None = None


class ErrorResponse(BaseModel):
    """Standard error response."""

    error: str
    code: str
    details: list[str] = []


class ErrorCodes:
    """Error code constants."""

    INVALID_REQUEST = "INVALID_REQUEST"
    UNAUTHORIZED = "UNAUTHORIZED"
    PAYLOAD_TOO_LARGE = "PAYLOAD_TOO_LARGE"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    DUPLICATE_DATE = "DUPLICATE_DATE"
    NOT_FOUND = "NOT_FOUND"
    INTERNAL_ERROR = "INTERNAL_ERROR"


# =============================================================================
# ATTENDANCE PAYLOADS
# =============================================================================


class TranscriptRequest(BaseModel):
    """Pasted chat transcript."""

    text: str


class RawEventModel(BaseModel):
    employee_name: str
    kind: str
    date: str
    in_time: str = ""
    out_time: str = ""
    location_code: str = ""


class OtherMessageModel(BaseModel):
    sender_name: str
    text: str
    time: str
    date: str


class DayRecordModel(BaseModel):
    employee_name: str
    date: str
    in_time: str = ""
    out_time: str = ""
    work_hours: float = 0.0
    location_code: str = ""
    status: str = ""
    id: int | None = None


class HolidayModel(BaseModel):
    date: date
    name: str = ""
    locations: list[str] = []


class ClassifiedCellModel(BaseModel):
    label: str
    display_text: str
    color_key: str
    full_text: str = ""


class ParseResponse(BaseModel):
    """Preview of a transcript: nothing is stored."""

    date: str
    events: list[RawEventModel]
    records: list[DayRecordModel]
    messages: list[OtherMessageModel]
    warnings: list[str] = []


class IngestResponse(ParseResponse):
    """Result of storing a transcript."""

    absent_names: list[str] = []
    rows_saved: int = 0


class AttendanceUpdateRequest(BaseModel):
    """Correction to a stored row; omitted fields keep their stored value."""

    in_time: str | None = None
    out_time: str | None = None
    location: str | None = None


class ClassifyRequest(BaseModel):
    """Classify one record; weekday defaults to the record date's weekday."""

    record: DayRecordModel
    holidays: list[HolidayModel] = []
    weekday: int | None = Field(default=None, ge=0, le=6)


class MonthlyRowModel(BaseModel):
    employee_name: str
    cells: dict[int, ClassifiedCellModel]
    present_days: float
    late_mark_count: int
    total_hours: float
    days_worked: float
    average_hours: float
    average_hours_display: str


class MonthlyResponse(BaseModel):
    year: int
    month: int
    rows: list[MonthlyRowModel]


class DatewiseRowModel(BaseModel):
    record: DayRecordModel
    cell: ClassifiedCellModel
    work_hours_display: str


class DatewiseResponse(BaseModel):
    date: str
    rows: list[DatewiseRowModel]

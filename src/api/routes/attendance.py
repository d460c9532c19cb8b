"""Attendance ingestion, classification and reporting endpoints."""

import asyncio
import sqlite3
from dataclasses import asdict
from datetime import datetime
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from fastapi.responses import Response

from api.dependencies import get_db, verify_api_key
from api.logging import RequestLog, log_request
from api.models.responses import (
    AttendanceUpdateRequest,
    ClassifiedCellModel,
    ClassifyRequest,
    DatewiseResponse,
    DatewiseRowModel,
    DayRecordModel,
    ErrorCodes,
    IngestResponse,
    MonthlyResponse,
    MonthlyRowModel,
    ParseResponse,
    TranscriptRequest,
)
from core.config import MAX_TRANSCRIPT_SIZE_BYTES
from core.database import (
    get_attendance_rows,
    get_employees,
    get_holidays,
    update_day_record,
)
from core.timestamps import format_work_hours, parse_record_date
from models.attendance import DatewiseRow, DayRecord, Employee, Holiday, MonthlySummary
from services.classifier import classify_day
from services.ingestion import (
    DuplicateAttendanceError,
    IngestResult,
    ingest_transcript,
    preview_transcript,
)
from services.pivot import build_datewise_view, build_monthly_pivot
from services.reports import monthly_report_filename, monthly_report_to_bytes

router = APIRouter(prefix="/v1/attendance", dependencies=[Depends(verify_api_key)])


def get_client_ip(request: Request) -> str:
    """Extract client IP from request, handling proxies."""
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


def check_transcript_size(text: str) -> int:
    """Return payload size in bytes, raising 413 when over the limit."""
    size = len(text.encode("utf-8"))
    if size > MAX_TRANSCRIPT_SIZE_BYTES:
        max_kb = MAX_TRANSCRIPT_SIZE_BYTES // 1024
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail={
                "error": f"Transcript exceeds maximum size of {max_kb} KB",
                "code": ErrorCodes.PAYLOAD_TOO_LARGE,
                "details": [f"Transcript size: {size / 1024:.1f} KB"],
            },
        )
    return size


def roster_for(conn: sqlite3.Connection, emp_name: str | None) -> list[Employee]:
    """Roster, narrowed to one employee when a name is given."""
    roster = get_employees(conn)
    if not emp_name:
        return roster
    matching = [employee for employee in roster if employee.name == emp_name]
    return matching or [Employee(name=emp_name)]


def build_month_views(
    conn: sqlite3.Connection, year: int, month: int, emp_name: str | None
) -> tuple[list[MonthlySummary], list[DatewiseRow]]:
    """Fetch a month's rows and build both the grid and the date-wise listing."""
    records = get_attendance_rows(conn, emp_name=emp_name, year=year, month=month)
    holidays = get_holidays(conn)
    roster = roster_for(conn, emp_name)
    summaries = build_monthly_pivot(records, holidays, year, month, roster)
    return summaries, build_datewise_view(records, holidays, roster)


def build_day_view(
    conn: sqlite3.Connection, on_date: str, emp_name: str | None
) -> list[DatewiseRow]:
    records = get_attendance_rows(conn, emp_name=emp_name, on_date=on_date)
    return build_datewise_view(records, get_holidays(conn), get_employees(conn))


def summary_to_model(summary: MonthlySummary) -> MonthlyRowModel:
    return MonthlyRowModel(
        employee_name=summary.employee_name,
        cells={day: ClassifiedCellModel(**asdict(cell)) for day, cell in summary.cells.items()},
        present_days=summary.present_days,
        late_mark_count=summary.late_mark_count,
        total_hours=summary.total_hours,
        days_worked=summary.days_worked,
        average_hours=summary.average_hours,
        average_hours_display=format_work_hours(summary.average_hours),
    )


def result_payload(result: IngestResult) -> dict:
    return {
        "date": result.date,
        "events": [asdict(event) for event in result.events],
        "records": [asdict(record) for record in result.records],
        "messages": [asdict(message) for message in result.messages],
        "warnings": result.warnings,
    }


# =============================================================================
# INGESTION
# =============================================================================


@router.post("/parse", response_model=ParseResponse)
async def parse_transcript_endpoint(payload: TranscriptRequest):
    """Parse and merge a transcript without saving anything."""
    check_transcript_size(payload.text)
    result = preview_transcript(payload.text)
    return ParseResponse(**result_payload(result))


@router.post("/ingest", response_model=IngestResponse)
async def ingest_transcript_endpoint(
    request: Request,
    payload: TranscriptRequest,
    conn: sqlite3.Connection = Depends(get_db),
):
    """Parse a transcript and store its attendance."""
    request_log = RequestLog(endpoint="/v1/attendance/ingest", client_ip=get_client_ip(request))

    try:
        request_log.payload_size_bytes = check_transcript_size(payload.text)

        result = await asyncio.to_thread(ingest_transcript, conn, payload.text, True)

        request_log.events_parsed = len(result.events)
        request_log.records_saved = result.rows_saved
        request_log.add_details("warning", result.warnings)
        request_log.finish(200)

        return IngestResponse(
            **result_payload(result),
            absent_names=result.absent_names,
            rows_saved=result.rows_saved,
        )

    except HTTPException as e:
        if isinstance(e.detail, dict):
            request_log.finish(e.status_code, e.detail.get("code"), e.detail.get("error"))
        else:
            request_log.finish(e.status_code, error_message=str(e.detail))
        raise

    except DuplicateAttendanceError as e:
        request_log.finish(409, ErrorCodes.DUPLICATE_DATE, str(e))
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail={
                "error": str(e),
                "code": ErrorCodes.DUPLICATE_DATE,
                "details": [],
            },
        )

    except ValueError as e:
        details = [d.strip() for d in str(e).split("\n") if d.strip()]
        request_log.finish(422, ErrorCodes.VALIDATION_ERROR, str(e))
        request_log.add_details("validation_error", details)
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail={
                "error": "Transcript validation failed",
                "code": ErrorCodes.VALIDATION_ERROR,
                "details": details,
            },
        )

    finally:
        # Always log the request
        try:
            log_request(request_log, conn)
        except sqlite3.Error:
            # Don't fail the request if logging fails
            pass


# =============================================================================
# CLASSIFICATION & VIEWS
# =============================================================================


@router.post("/classify", response_model=ClassifiedCellModel)
async def classify_endpoint(payload: ClassifyRequest):
    """Classify a single day record."""
    record = DayRecord(**payload.record.model_dump())
    holidays = [
        Holiday(date=h.date, name=h.name, locations=frozenset(h.locations))
        for h in payload.holidays
    ]

    weekday = payload.weekday
    if weekday is None:
        record_date = parse_record_date(record.date)
        if record_date is None:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail={
                    "error": "weekday is required when the record date is not YYYY-MM-DD",
                    "code": ErrorCodes.INVALID_REQUEST,
                    "details": [f"Received date: {record.date}"],
                },
            )
        weekday = record_date.weekday()

    cell = classify_day(record, holidays, weekday)
    return ClassifiedCellModel(**asdict(cell))


@router.get("/monthly", response_model=MonthlyResponse)
async def monthly_endpoint(
    year: Annotated[int, Query(ge=2000, le=2100)],
    month: Annotated[int, Query(ge=1, le=12)],
    emp_name: str | None = None,
    conn: sqlite3.Connection = Depends(get_db),
):
    """Monthly grid with per-employee aggregates."""
    summaries, _ = await asyncio.to_thread(build_month_views, conn, year, month, emp_name)
    return MonthlyResponse(
        year=year, month=month, rows=[summary_to_model(s) for s in summaries]
    )


@router.get("/monthly/export")
async def monthly_export_endpoint(
    year: Annotated[int, Query(ge=2000, le=2100)],
    month: Annotated[int, Query(ge=1, le=12)],
    emp_name: str | None = None,
    conn: sqlite3.Connection = Depends(get_db),
):
    """Monthly grid as an Excel workbook (grid sheet plus date-wise sheet)."""
    summaries, datewise_rows = await asyncio.to_thread(
        build_month_views, conn, year, month, emp_name
    )
    excel_bytes = await asyncio.to_thread(
        monthly_report_to_bytes, summaries, year, month, datewise_rows
    )

    return Response(
        content=excel_bytes,
        media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        headers={
            "Content-Disposition": f'attachment; filename="{monthly_report_filename(year, month)}"'
        },
    )


@router.get("/datewise", response_model=DatewiseResponse)
async def datewise_endpoint(
    date: str,
    emp_name: str | None = None,
    conn: sqlite3.Connection = Depends(get_db),
):
    """Classified records for one date."""
    try:
        datetime.strptime(date, "%Y-%m-%d")
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={
                "error": "Invalid date format",
                "code": ErrorCodes.INVALID_REQUEST,
                "details": ["Expected format: YYYY-MM-DD"],
            },
        )

    rows = await asyncio.to_thread(build_day_view, conn, date, emp_name)
    return DatewiseResponse(
        date=date,
        rows=[
            DatewiseRowModel(
                record=asdict(row.record),
                cell=asdict(row.cell),
                work_hours_display=row.work_hours_display,
            )
            for row in rows
        ],
    )


# =============================================================================
# CORRECTIONS
# =============================================================================


@router.put("/{record_id}", response_model=DayRecordModel)
async def update_attendance_endpoint(
    record_id: int,
    payload: AttendanceUpdateRequest,
    conn: sqlite3.Connection = Depends(get_db),
):
    """Correct a stored row's punches or location; hours are recomputed."""
    record = await asyncio.to_thread(
        update_day_record,
        conn,
        record_id,
        payload.in_time,
        payload.out_time,
        payload.location,
    )
    if record is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={
                "error": f"Attendance record {record_id} not found",
                "code": ErrorCodes.NOT_FOUND,
                "details": [],
            },
        )
    return DayRecordModel(**asdict(record))

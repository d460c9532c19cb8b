"""
Excel report generation for the monthly attendance grid.
"""

import calendar
from io import BytesIO
from pathlib import Path

from openpyxl import Workbook
from openpyxl.styles import Alignment, Font, PatternFill
from openpyxl.utils import get_column_letter

from core.config import CELL_COLORS, DATEWISE_HEADERS, MONTHLY_HEADERS
from core.timestamps import format_work_hours
from models.attendance import ClassifiedCell, DatewiseRow, MonthlySummary, StatusLabel

MONTHLY_SHEET_TITLE = "Monthly Attendance"
DATEWISE_SHEET_TITLE = "Datewise Attendance"


def format_present_days(value: float) -> int | float:
    """12.0 -> 12, 12.5 stays 12.5."""
    return int(value) if float(value).is_integer() else value


def monthly_report_filename(year: int, month: int) -> str:
    """e.g. attendance_2025_03.xlsx"""
    return f"attendance_{year:04d}_{month:02d}.xlsx"


def style_cell(ws_cell, cell: ClassifiedCell) -> None:
    """Apply fill and font for a classified cell."""
    color = CELL_COLORS.get(cell.color_key)
    if color:
        ws_cell.fill = PatternFill(start_color=color, end_color=color, fill_type="solid")

    if cell.color_key == "holiday":
        ws_cell.font = Font(color="FFFFFF")
    elif cell.label == StatusLabel.LOW_HOURS:
        ws_cell.font = Font(bold=True)
    elif cell.label == StatusLabel.LATE_MARK:
        ws_cell.font = Font(underline="single")
    ws_cell.alignment = Alignment(horizontal="center")


# =============================================================================
# SHEETS
# =============================================================================


def write_monthly_sheet(ws, summaries: list[MonthlySummary], year: int, month: int):
    """
    Write the monthly grid.

    Row 1: Employee Name | Present | Late | AvgHr | 1 | 2 | ... | N
    One row per employee, day cells filled by color key.
    """
    _, days_in_month = calendar.monthrange(year, month)
    headers = MONTHLY_HEADERS + [str(day) for day in range(1, days_in_month + 1)]
    first_day_col = len(MONTHLY_HEADERS) + 1

    for col_idx, header in enumerate(headers, start=1):
        cell = ws.cell(row=1, column=col_idx, value=header)
        cell.font = Font(bold=True)

    for row_idx, summary in enumerate(summaries, start=2):
        ws.cell(row=row_idx, column=1, value=summary.employee_name)
        ws.cell(row=row_idx, column=2, value=format_present_days(summary.present_days))
        ws.cell(row=row_idx, column=3, value=summary.late_mark_count)
        ws.cell(row=row_idx, column=4, value=format_work_hours(summary.average_hours))

        for day in range(1, days_in_month + 1):
            classified = summary.cells.get(day)
            ws_cell = ws.cell(row=row_idx, column=first_day_col + day - 1)
            if classified is None:
                continue
            ws_cell.value = classified.display_text or None
            style_cell(ws_cell, classified)

    # Narrow day columns
    ws.column_dimensions["A"].width = 24
    for day in range(1, days_in_month + 1):
        ws.column_dimensions[get_column_letter(first_day_col + day - 1)].width = 5


def write_datewise_sheet(ws, rows: list[DatewiseRow]):
    """Write the date-wise listing (one line per record)."""
    for col_idx, header in enumerate(DATEWISE_HEADERS, start=1):
        cell = ws.cell(row=1, column=col_idx, value=header)
        cell.font = Font(bold=True)

    for row_idx, row in enumerate(rows, start=2):
        record = row.record
        row_data = [
            record.employee_name,
            record.date,
            record.in_time,
            record.out_time,
            row.work_hours_display,
            row.cell.full_text,
            record.location_code,
        ]
        for col_idx, value in enumerate(row_data, start=1):
            ws.cell(row=row_idx, column=col_idx, value=value)
        style_cell(ws.cell(row=row_idx, column=6), row.cell)


def build_monthly_workbook(
    summaries: list[MonthlySummary],
    year: int,
    month: int,
    datewise_rows: list[DatewiseRow] | None = None,
) -> Workbook:
    """Workbook with the monthly grid and, if given, the date-wise listing."""
    wb = Workbook()
    ws_monthly = wb.active
    ws_monthly.title = MONTHLY_SHEET_TITLE
    write_monthly_sheet(ws_monthly, summaries, year, month)

    if datewise_rows is not None:
        ws_datewise = wb.create_sheet(title=DATEWISE_SHEET_TITLE)
        write_datewise_sheet(ws_datewise, datewise_rows)

    return wb


def monthly_report_to_bytes(
    summaries: list[MonthlySummary],
    year: int,
    month: int,
    datewise_rows: list[DatewiseRow] | None = None,
) -> bytes:
    """Serialize the monthly workbook for an HTTP response."""
    buffer = BytesIO()
    build_monthly_workbook(summaries, year, month, datewise_rows).save(buffer)
    return buffer.getvalue()


def create_monthly_excel_report(
    summaries: list[MonthlySummary],
    year: int,
    month: int,
    output_path: Path,
    datewise_rows: list[DatewiseRow] | None = None,
):
    """Save the monthly workbook to output_path."""
    wb = build_monthly_workbook(summaries, year, month, datewise_rows)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    wb.save(str(output_path))
    print(f"Saved Excel report to: {output_path}")

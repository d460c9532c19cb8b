#!/usr/bin/env python3
"""
Create the monthly attendance report from stored attendance rows.

Generates an Excel workbook with two sheets:
- Monthly Attendance: per-employee day grid with Present / Late / AvgHr columns
- Datewise Attendance: every stored record with its classified status

Usage:
    uv run python src/scripts/create_monthly_report.py --month 2025-03
"""

import argparse
import sys
import traceback
from datetime import date
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from core.config import DB_PATH, OUTPUT_DIR
from core.database import get_attendance_rows, get_connection, get_employees, get_holidays
from core.timestamps import format_work_hours
from services.pivot import build_datewise_view, build_monthly_pivot
from services.reports import create_monthly_excel_report, monthly_report_filename


# =============================================================================
# DATE UTILITIES
# =============================================================================


def get_report_month(month_str: str | None) -> tuple[int, int]:
    """
    Resolve the report month.

    Args:
        month_str: Optional month string (YYYY-MM). Uses previous month if None.

    Returns:
        Tuple of (year, month)
    """
    if month_str:
        year, month = map(int, month_str.split("-"))
        return year, month

    today = date.today()
    if today.month == 1:
        return today.year - 1, 12
    return today.year, today.month - 1


# =============================================================================
# MAIN
# =============================================================================


def main(month_str: str | None = None, emp_name: str | None = None):
    """Main entry point for monthly report."""
    try:
        year, month = get_report_month(month_str)
        print(f"Generating monthly attendance report for {year}-{month:02d}")

        conn = get_connection(DB_PATH)
        try:
            records = get_attendance_rows(conn, emp_name=emp_name, year=year, month=month)
            holidays = get_holidays(conn)
            roster = get_employees(conn)
        finally:
            conn.close()

        if emp_name:
            roster = [employee for employee in roster if employee.name == emp_name] or [emp_name]

        print(f"  {len(records)} stored rows, {len(roster)} employees, {len(holidays)} holidays")

        summaries = build_monthly_pivot(records, holidays, year, month, roster)
        datewise_rows = build_datewise_view(records, holidays, roster)

        for summary in summaries:
            print(
                f"  {summary.employee_name:<24} present={summary.present_days:<5} "
                f"late={summary.late_mark_count:<3} avg={format_work_hours(summary.average_hours)}"
            )

        output_dir = OUTPUT_DIR / "reports" / "monthly"
        output_path = output_dir / monthly_report_filename(year, month)
        create_monthly_excel_report(summaries, year, month, output_path, datewise_rows)

        print("\nDone!")

    except Exception as e:
        print(f"\nError: {e}")
        traceback.print_exc()
        raise


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Generate monthly attendance report")
    parser.add_argument(
        "--month",
        help="Target month (YYYY-MM). Defaults to previous month.",
    )
    parser.add_argument("--employee", help="Limit the report to one employee")
    args = parser.parse_args()

    main(args.month, args.employee)

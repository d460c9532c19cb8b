"""
Tests for the monthly grid and the date-wise listing.
"""

from datetime import date

import pytest

from models.attendance import DayRecord, StatusLabel
from services.pivot import build_datewise_view, build_monthly_pivot

TODAY = date(2025, 4, 1)


def day(n, in_time="9:00 AM", out_time="6:00 PM", hours=9.0, location="RO", name="John Doe"):
    on = f"2025-03-{n:02d}"
    return DayRecord(
        employee_name=name,
        date=on,
        in_time=f"{on} {in_time}" if in_time else "",
        out_time=f"{on} {out_time}" if out_time else "",
        work_hours=hours,
        location_code=location,
    )


@pytest.fixture
def march_records():
    return [
        day(3),
        day(4, in_time="10:30 AM", out_time="7:30 PM"),
        day(5, out_time="3:00 PM", hours=6.0),
        day(6, location="Client Site", hours=8.0),
        day(7, out_time="", hours=0.0, location="Client Site"),
    ]


@pytest.fixture
def john_summary(march_records, holidays, roster):
    summaries = build_monthly_pivot(march_records, holidays, 2025, 3, roster, today=TODAY)
    return {s.employee_name: s for s in summaries}["John Doe"]


def test_one_row_per_rostered_employee(march_records, holidays, roster):
    summaries = build_monthly_pivot(march_records, holidays, 2025, 3, roster, today=TODAY)

    assert [s.employee_name for s in summaries] == ["Jane Roe", "John Doe"]
    assert all(len(s.cells) == 31 for s in summaries)


def test_labels_per_day(john_summary):
    labels = {n: john_summary.cells[n].label for n in range(3, 8)}
    assert labels == {
        3: StatusLabel.FULL_DAY,
        4: StatusLabel.LATE_MARK,
        5: StatusLabel.HALF_DAY,
        6: StatusLabel.SITE_VISIT_PRESENT,
        7: StatusLabel.SITE_VISIT_INCOMPLETE,
    }


def test_aggregates(john_summary):
    assert john_summary.present_days == 3.5
    assert john_summary.days_worked == 3.5
    assert john_summary.late_mark_count == 1
    assert john_summary.total_hours == pytest.approx(32.0)
    assert john_summary.average_hours == pytest.approx(32.0 / 3.5)


def test_missing_past_weekday_is_absent(john_summary):
    # Tuesday
    cell = john_summary.cells[11]
    assert cell.label == StatusLabel.ABSENT
    assert cell.color_key == "absent"


def test_sunday_and_holiday_backgrounds(john_summary):
    sunday = john_summary.cells[2]
    assert sunday.label == StatusLabel.BLANK
    assert sunday.color_key == "sunday"
    assert sunday.display_text == ""

    holi = john_summary.cells[14]
    assert holi.label == StatusLabel.BLANK
    assert holi.color_key == "holiday"


def test_location_scoped_holiday(march_records, holidays, roster):
    summaries = build_monthly_pivot(march_records, holidays, 2025, 3, roster, today=TODAY)
    by_name = {s.employee_name: s for s in summaries}

    # Local Fair is a Mumbai holiday: Jane (Mumbai) gets a blank holiday cell,
    # John (Pune) is simply absent.
    assert by_name["Jane Roe"].cells[20].color_key == "holiday"
    assert by_name["Jane Roe"].cells[20].label == StatusLabel.BLANK
    assert by_name["John Doe"].cells[20].label == StatusLabel.ABSENT


def test_worked_holiday_shows_holiday(holidays, roster):
    records = [day(14)]
    summaries = build_monthly_pivot(records, holidays, 2025, 3, roster, today=TODAY)
    john = {s.employee_name: s for s in summaries}["John Doe"]

    assert john.cells[14].label == StatusLabel.HOLIDAY
    assert john.present_days == 0


def test_future_days_are_blank(march_records, holidays, roster):
    summaries = build_monthly_pivot(
        march_records, holidays, 2025, 3, roster, today=date(2025, 3, 10)
    )
    john = {s.employee_name: s for s in summaries}["John Doe"]

    assert john.cells[10].label == StatusLabel.BLANK
    assert john.cells[25].label == StatusLabel.BLANK
    assert john.cells[8].label == StatusLabel.ABSENT


def test_present_days_step_is_zero_half_or_one(march_records, holidays, roster):
    summaries = build_monthly_pivot(march_records, holidays, 2025, 3, roster, today=TODAY)
    john = {s.employee_name: s for s in summaries}["John Doe"]

    credits = {
        StatusLabel.FULL_DAY: 1.0,
        StatusLabel.LATE_MARK: 1.0,
        StatusLabel.SITE_VISIT_PRESENT: 1.0,
        StatusLabel.HALF_DAY: 0.5,
    }
    steps = [credits.get(cell.label, 0.0) for cell in john.cells.values()]
    assert set(steps) <= {0.0, 0.5, 1.0}
    assert sum(steps) == john.present_days


def test_without_roster_uses_names_from_records(march_records, holidays):
    records = march_records + [day(3, name="Ravi Kumar")]
    summaries = build_monthly_pivot(records, holidays, 2025, 3, [], today=TODAY)

    assert [s.employee_name for s in summaries] == ["John Doe", "Ravi Kumar"]


def test_records_outside_month_are_ignored(holidays, roster):
    stray = DayRecord("John Doe", "2025-04-02", work_hours=9.0, location_code="RO")
    summaries = build_monthly_pivot([stray], holidays, 2025, 3, roster, today=TODAY)
    john = {s.employee_name: s for s in summaries}["John Doe"]

    assert john.present_days == 0


def test_duplicate_rows_are_merged_before_classifying(holidays, roster):
    records = [
        day(3, out_time="1:00 PM", hours=4.0),
        day(3, in_time="2:00 PM", out_time="7:00 PM", hours=5.0),
    ]
    summaries = build_monthly_pivot(records, holidays, 2025, 3, roster, today=TODAY)
    john = {s.employee_name: s for s in summaries}["John Doe"]

    assert john.cells[3].label == StatusLabel.FULL_DAY
    assert john.total_hours == pytest.approx(9.0)


def test_rebuild_is_idempotent(march_records, holidays, roster):
    first = build_monthly_pivot(march_records, holidays, 2025, 3, roster, today=TODAY)
    second = build_monthly_pivot(march_records, holidays, 2025, 3, roster, today=TODAY)
    assert first == second


def test_invalid_month_raises(holidays, roster):
    with pytest.raises(ValueError):
        build_monthly_pivot([], holidays, 2025, 13, roster)


class TestDatewise:
    def test_rows_carry_long_text_and_hours(self, march_records, holidays, roster):
        rows = build_datewise_view(march_records, holidays, roster)

        assert len(rows) == 5
        by_date = {row.record.date: row for row in rows}
        assert by_date["2025-03-04"].cell.full_text == "Full Day (Late Mark)"
        assert by_date["2025-03-05"].work_hours_display == "6.00"
        assert by_date["2025-03-07"].cell.label == StatusLabel.SITE_VISIT_INCOMPLETE

    def test_hours_display_uses_minutes(self, holidays):
        rows = build_datewise_view([day(3, out_time="5:30 PM", hours=8.5)], holidays)
        assert rows[0].work_hours_display == "8.30"

    def test_local_holiday_only_for_its_location(self, holidays, roster):
        records = [day(20), day(20, name="Jane Roe")]
        rows = {row.record.employee_name: row for row in build_datewise_view(records, holidays, roster)}

        assert rows["Jane Roe"].cell.label == StatusLabel.HOLIDAY
        assert rows["John Doe"].cell.label == StatusLabel.FULL_DAY

    def test_unparseable_date_is_still_listed(self, holidays):
        record = DayRecord(
            "John Doe", "Yesterday",
            in_time="Yesterday 9:00 AM", out_time="Yesterday 6:00 PM",
            work_hours=9.0, location_code="RO",
        )
        rows = build_datewise_view([record], holidays)
        assert rows[0].cell.label == StatusLabel.FULL_DAY


def test_rows_with_differently_written_dates_share_a_cell(holidays, roster):
    records = [
        day(3, out_time="1:00 PM", hours=4.0),
        DayRecord(
            "John Doe", "2025-03-03 00:00:00",
            in_time="2025-03-03 2:00 PM", out_time="2025-03-03 7:00 PM",
            work_hours=5.0, location_code="RO",
        ),
    ]
    summaries = build_monthly_pivot(records, holidays, 2025, 3, roster, today=TODAY)
    john = {s.employee_name: s for s in summaries}["John Doe"]

    assert john.cells[3].label == StatusLabel.FULL_DAY
    assert john.total_hours == pytest.approx(9.0)

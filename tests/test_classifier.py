"""
Tests for day classification rules.
"""

from dataclasses import replace
from datetime import date, time

import pytest

from models.attendance import DayRecord, Holiday, StatusLabel
from services.classifier import (
    ClassificationRules,
    classify_day,
    classify_missing_day,
    is_late,
    is_site_visit,
)

THURSDAY = 3
SUNDAY = 6


def make_record(work_hours=9.0, in_time="9:00 AM", out_time="6:00 PM", location="RO", **kwargs):
    return DayRecord(
        employee_name="John Doe",
        date=kwargs.pop("date", "2025-03-06"),
        in_time=f"2025-03-06 {in_time}" if in_time else "",
        out_time=f"2025-03-06 {out_time}" if out_time else "",
        work_hours=work_hours,
        location_code=location,
        **kwargs,
    )


class TestWeekdayHours:
    def test_full_day(self, sample_record):
        cell = classify_day(sample_record, [], THURSDAY)
        assert cell.label == StatusLabel.FULL_DAY
        assert cell.display_text == "P"
        assert cell.color_key == "present"

    @pytest.mark.parametrize(
        "hours, expected",
        [
            (4.99, StatusLabel.LOW_HOURS),
            (5.0, StatusLabel.HALF_DAY),
            (8.49, StatusLabel.HALF_DAY),
            (8.5, StatusLabel.FULL_DAY),
        ],
    )
    def test_hour_boundaries(self, hours, expected):
        assert classify_day(make_record(work_hours=hours), [], THURSDAY).label == expected

    def test_half_day_cell(self):
        cell = classify_day(make_record(work_hours=6), [], THURSDAY)
        assert (cell.display_text, cell.color_key) == ("H", "half_day")

    def test_low_hours_is_ab(self):
        cell = classify_day(make_record(work_hours=2), [], THURSDAY)
        assert cell.label == StatusLabel.LOW_HOURS
        assert cell.display_text == "AB"


class TestLateMark:
    def test_exactly_ten_is_not_late(self):
        record = make_record(in_time="10:00:00 AM", out_time="7:00 PM", work_hours=9)
        assert classify_day(record, [], THURSDAY).label == StatusLabel.FULL_DAY

    def test_after_ten_is_late(self):
        record = make_record(in_time="10:00:01 AM", out_time="7:00 PM", work_hours=9)
        cell = classify_day(record, [], THURSDAY)
        assert cell.label == StatusLabel.LATE_MARK
        assert cell.display_text == "P"
        assert cell.full_text == "Full Day (Late Mark)"

    def test_late_half_day_stays_half_day(self):
        record = make_record(in_time="11:00 AM", out_time="5:00 PM", work_hours=6)
        assert classify_day(record, [], THURSDAY).label == StatusLabel.HALF_DAY

    def test_sunday_is_never_late(self):
        record = make_record(in_time="11:00 AM", out_time="8:00 PM", work_hours=9, date="2025-03-09")
        assert classify_day(record, [], SUNDAY).label == StatusLabel.FULL_DAY

    def test_is_late_ignores_unparseable(self):
        assert not is_late("")
        assert not is_late("whenever")


class TestSiteVisit:
    def test_client_site_without_check_out(self):
        record = make_record(location="Client Site", out_time="", work_hours=0)
        cell = classify_day(record, [], THURSDAY)
        assert cell.label == StatusLabel.SITE_VISIT_INCOMPLETE
        assert (cell.display_text, cell.color_key) == ("SV.I", "site_visit")

    def test_complete_site_visit_is_present_regardless_of_hours(self):
        record = make_record(location="Tata", work_hours=3)
        assert classify_day(record, [], THURSDAY).label == StatusLabel.SITE_VISIT_PRESENT

    def test_site_visit_on_sunday_falls_through_to_hours(self):
        record = make_record(location="Tata", work_hours=9, date="2025-03-09")
        assert classify_day(record, [], SUNDAY).label == StatusLabel.FULL_DAY

    def test_office_code_token_anywhere_is_office(self):
        assert not is_site_visit("RO")
        assert not is_site_visit("wfh today")
        assert is_site_visit("Client Site")
        assert not is_site_visit("")
        assert not is_site_visit(None)


class TestIncomplete:
    def test_incomplete_beats_ab(self):
        record = make_record(out_time="", work_hours=6)
        cell = classify_day(record, [], THURSDAY)
        assert cell.label == StatusLabel.INCOMPLETE
        assert cell.display_text == "I"

    def test_missing_punch_with_few_hours_is_ab(self):
        record = make_record(out_time="", work_hours=0)
        assert classify_day(record, [], THURSDAY).label == StatusLabel.LOW_HOURS

    def test_stored_absent_row_is_absent(self):
        record = DayRecord("Jane Roe", "2025-03-06", status=StatusLabel.ABSENT)
        cell = classify_day(record, [], THURSDAY)
        assert cell.label == StatusLabel.ABSENT
        assert cell.display_text == ""
        assert cell.color_key == "absent"


class TestHoliday:
    @pytest.mark.parametrize("hours", [0, 3, 6, 12])
    def test_holiday_wins_over_hours(self, hours):
        record = make_record(work_hours=hours, in_time="11:30 AM", date="2025-03-14")
        cell = classify_day(record, [Holiday(date(2025, 3, 14), "Holi")], 4)
        assert cell.label == StatusLabel.HOLIDAY
        assert cell.color_key == "holiday"

    def test_bare_dates_are_accepted(self):
        record = make_record(date="2025-03-14")
        assert classify_day(record, [date(2025, 3, 14)], 4).label == StatusLabel.HOLIDAY

    def test_stored_holiday_status(self):
        record = DayRecord("John Doe", "2025-03-14", status=StatusLabel.HOLIDAY)
        assert classify_day(record, [], 4).label == StatusLabel.HOLIDAY

    def test_other_dates_unaffected(self, sample_record):
        cell = classify_day(sample_record, [Holiday(date(2025, 3, 14), "Holi")], THURSDAY)
        assert cell.label == StatusLabel.FULL_DAY

    def test_location_scope(self):
        local = Holiday(date(2025, 3, 20), "Local Fair", frozenset({"Mumbai"}))
        assert local.applies_to("mumbai")
        assert not local.applies_to("Pune")
        assert Holiday(date(2025, 3, 14), "Holi").applies_to("Pune")


def test_invalid_weekday_raises(sample_record):
    with pytest.raises(ValueError):
        classify_day(sample_record, [], 7)
    with pytest.raises(ValueError):
        classify_day(sample_record, [], -1)


def test_classification_is_deterministic_and_pure(sample_record):
    snapshot = replace(sample_record)
    first = classify_day(sample_record, [], THURSDAY)
    second = classify_day(sample_record, [], THURSDAY)

    assert first == second
    assert sample_record == snapshot


def test_injected_rules():
    rules = ClassificationRules(
        low_hours_threshold=4.5,
        full_day_threshold=8.0,
        late_cutoff=time(9, 30),
        office_codes=frozenset({"hq"}),
    )

    assert classify_day(make_record(work_hours=4.6, location="HQ"), [], THURSDAY, rules).label == (
        StatusLabel.HALF_DAY
    )
    assert classify_day(
        make_record(work_hours=8.0, in_time="9:45 AM", location="HQ"), [], THURSDAY, rules
    ).label == StatusLabel.LATE_MARK
    assert classify_day(make_record(location="RO"), [], THURSDAY, rules).label == (
        StatusLabel.SITE_VISIT_PRESENT
    )


class TestMissingDay:
    TODAY = date(2025, 4, 1)

    def test_past_weekday_is_absent(self):
        cell = classify_missing_day(date(2025, 3, 4), [], self.TODAY)
        assert cell.label == StatusLabel.ABSENT

    def test_sunday_is_blank(self):
        cell = classify_missing_day(date(2025, 3, 9), [], self.TODAY)
        assert cell.label == StatusLabel.BLANK
        assert cell.display_text == ""
        assert cell.color_key == "none"

    def test_holiday_is_blank(self):
        cell = classify_missing_day(date(2025, 3, 14), [Holiday(date(2025, 3, 14), "Holi")], self.TODAY)
        assert cell.label == StatusLabel.BLANK

    def test_today_and_future_are_blank(self):
        assert classify_missing_day(self.TODAY, [], self.TODAY).label == StatusLabel.BLANK
        assert classify_missing_day(date(2025, 4, 2), [], self.TODAY).label == StatusLabel.BLANK

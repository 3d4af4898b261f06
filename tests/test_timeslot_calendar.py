"""
Unit tests for the timeslot catalog and calendar arithmetic
"""

from datetime import date, datetime

import pytest

from tutorpair.services.timeslot_calendar import (
    TimeslotCalendar,
    default_calendar,
    monday_of_week,
)

WEEK = date(2025, 1, 20)  # a Monday


class TestResolveEndTime:
    """Test resolving a timeslot to its end timestamp"""

    @pytest.mark.parametrize(
        "code, expected",
        [
            ("MON_P1", datetime(2025, 1, 20, 9, 50)),
            ("TUE_P2", datetime(2025, 1, 21, 10, 45)),
            ("WED_P5", datetime(2025, 1, 22, 14, 55)),
            ("FRI_P7", datetime(2025, 1, 24, 17, 15)),
        ],
    )
    def test_known_codes(self, code, expected):
        assert default_calendar.resolve_end_time(WEEK, code) == expected

    @pytest.mark.parametrize(
        "code",
        [None, "", "MON", "MON-P1", "MON_PX", "MON_P0", "MON_P8", "SUN_P1", "MON_P1_P2", "mon_P1"],
    )
    def test_malformed_codes_resolve_to_none(self, code):
        assert default_calendar.resolve_end_time(WEEK, code) is None

    def test_missing_week_start(self):
        assert default_calendar.resolve_end_time(None, "MON_P1") is None

    def test_injected_catalog(self):
        """Two calendars with different catalogs coexist"""
        weekend = TimeslotCalendar(days=("SAT", "SUN"), period_times=("10:00-11:30", "13:00-14:00"))

        assert weekend.resolve_end_time(WEEK, "SUN_P2") == datetime(2025, 1, 21, 14, 0)
        assert weekend.resolve_end_time(WEEK, "MON_P1") is None
        assert default_calendar.resolve_end_time(WEEK, "SUN_P2") is None

    def test_empty_catalog_rejected(self):
        with pytest.raises(ValueError):
            TimeslotCalendar(days=(), period_times=("09:00-09:50",))


class TestCatalog:
    def test_codes_are_day_major(self):
        codes = default_calendar.codes
        assert len(codes) == 35
        assert codes[:2] == ["MON_P1", "MON_P2"]
        assert codes[-1] == "FRI_P7"

    def test_filter_valid_keeps_order_and_drops_duplicates(self):
        assert default_calendar.filter_valid(["TUE_P3", "bogus", "MON_P1", "TUE_P3"]) == [
            "TUE_P3",
            "MON_P1",
        ]
        assert default_calendar.filter_valid(None) == []

    def test_label(self):
        assert default_calendar.label("MON_P1") == "Monday, P1 (09:00-09:50)"
        assert default_calendar.label("nope") == "nope"


class TestWeekAnchors:
    @pytest.mark.parametrize(
        "day, expected",
        [
            (date(2025, 1, 20), date(2025, 1, 20)),
            (date(2025, 1, 22), date(2025, 1, 20)),
            (date(2025, 1, 26), date(2025, 1, 20)),
            (date(2025, 1, 27), date(2025, 1, 27)),
        ],
    )
    def test_monday_of_week(self, day, expected):
        assert monday_of_week(day) == expected


"""
Unit tests for date_helpers.

Week and month boundaries, inclusive windows, countdowns and period ids.
"""

from datetime import datetime, timedelta

from arena import date_helpers


class TestPeriodStarts:
    """Weeks start Sunday 00:00 UTC, months on the 1st."""

    def test_midweek_goes_back_to_sunday(self):
        assert date_helpers.start_of_week(datetime(2024, 3, 13, 12, 30)) == datetime(2024, 3, 10)

    def test_sunday_is_its_own_week_start(self):
        assert date_helpers.start_of_week(datetime(2024, 3, 10, 0, 0, 1)) == datetime(2024, 3, 10)

    def test_saturday_night_belongs_to_previous_sunday(self):
        assert date_helpers.start_of_week(datetime(2024, 3, 16, 23, 59, 59)) == datetime(2024, 3, 10)

    def test_week_can_start_in_previous_month(self):
        assert date_helpers.start_of_week(datetime(2024, 3, 1, 8)) == datetime(2024, 2, 25)

    def test_start_of_month(self):
        assert date_helpers.start_of_month(datetime(2024, 3, 13, 12, 30, 45, 123000)) == datetime(2024, 3, 1)


class TestWindows:

    def test_is_between_is_inclusive(self):
        start, end = datetime(2024, 3, 1), datetime(2024, 3, 2)
        assert date_helpers.is_between(start, start, end)
        assert date_helpers.is_between(end, start, end)
        assert not date_helpers.is_between(end + timedelta(milliseconds=1), start, end)

    def test_time_remaining_breakdown(self):
        now = datetime(2024, 3, 13, 12)
        target = now + timedelta(days=2, hours=3, minutes=15, seconds=40)
        assert date_helpers.time_remaining(target, now) == {"days": 2, "hours": 3, "minutes": 15}

    def test_time_remaining_is_zero_once_past(self):
        now = datetime(2024, 3, 13, 12)
        assert date_helpers.time_remaining(now - timedelta(hours=1), now) == {"days": 0, "hours": 0, "minutes": 0}

    def test_future_date(self):
        assert date_helpers.future_date(3, datetime(2024, 2, 27)) == datetime(2024, 3, 1)


class TestFormatting:

    def test_format_date_and_datetime(self):
        moment = datetime(2024, 3, 5, 7, 8, 9)
        assert date_helpers.format_date(moment) == "2024-03-05"
        assert date_helpers.format_datetime(moment) == "2024-03-05 07:08"

    def test_week_id_rolls_over_on_sunday(self):
        # 2024-01-01 is a Monday, so the first Sunday opens week 2
        assert date_helpers.current_week_id(datetime(2024, 1, 1)) == "2024-01"
        assert date_helpers.current_week_id(datetime(2024, 1, 6)) == "2024-01"
        assert date_helpers.current_week_id(datetime(2024, 1, 7)) == "2024-02"

    def test_month_id(self):
        assert date_helpers.current_month_id(datetime(2024, 3, 5)) == "2024-03"

    def test_utcnow_is_naive_and_millisecond_precise(self):
        now = date_helpers.utcnow()
        assert now.tzinfo is None
        assert now.microsecond % 1000 == 0

"""Tests for recurrence expansion."""

from datetime import date, datetime

import pytest

from app.domain.scheduling.recurrence import (
    default_end_date,
    expand_recurrence,
    iter_occurrence_dates,
    sunday_based_weekday,
)
from app.shared.errors import ValidationError

MONDAY_9AM = datetime(2024, 1, 1, 9, 0)


class TestWeekdayConvention:
    def test_sunday_is_zero(self):
        assert sunday_based_weekday(date(2024, 1, 7)) == 0
        assert sunday_based_weekday(date(2024, 1, 1)) == 1
        assert sunday_based_weekday(date(2024, 1, 6)) == 6


class TestExpandRecurrence:
    """Occurrences fall strictly after the start date and up to the end date inclusive."""

    def test_daily(self):
        starts = expand_recurrence(MONDAY_9AM, "daily", end_date=date(2024, 1, 5))

        assert starts == [datetime(2024, 1, day, 9, 0) for day in (2, 3, 4, 5)]

    def test_weekly_uses_template_weekday(self):
        starts = expand_recurrence(MONDAY_9AM, "weekly", end_date=date(2024, 1, 22))

        assert starts == [
            datetime(2024, 1, 8, 9, 0),
            datetime(2024, 1, 15, 9, 0),
            datetime(2024, 1, 22, 9, 0),
        ]

    def test_weekly_with_days_of_week(self):
        # Monday and Wednesday
        starts = expand_recurrence(MONDAY_9AM, "weekly", end_date=date(2024, 1, 14), days_of_week=[1, 3])

        assert [s.date() for s in starts] == [date(2024, 1, 3), date(2024, 1, 8), date(2024, 1, 10)]

    def test_biweekly_every_other_week(self):
        starts = expand_recurrence(MONDAY_9AM, "biweekly", end_date=date(2024, 2, 5))

        assert [s.date() for s in starts] == [date(2024, 1, 15), date(2024, 1, 29)]

    def test_monthly_skips_short_months(self):
        starts = expand_recurrence(datetime(2024, 1, 31, 10, 0), "monthly", end_date=date(2024, 6, 30))

        assert [s.date() for s in starts] == [date(2024, 3, 31), date(2024, 5, 31)]

    def test_days_of_week_ignored_for_daily(self):
        starts = expand_recurrence(MONDAY_9AM, "daily", end_date=date(2024, 1, 4), days_of_week=[1])

        assert len(starts) == 3

    def test_cap_limits_occurrences(self):
        starts = expand_recurrence(MONDAY_9AM, "daily", end_date=date(2024, 12, 31), max_occurrences=5)

        assert starts[-1] == datetime(2024, 1, 6, 9, 0)
        assert len(starts) == 5

    def test_default_cap_is_52(self):
        starts = expand_recurrence(MONDAY_9AM, "daily", end_date=date(2024, 12, 31))

        assert len(starts) == 52

    def test_default_end_is_three_months(self):
        starts = expand_recurrence(MONDAY_9AM, "daily", max_occurrences=1000)

        assert starts[-1].date() == date(2024, 4, 1)
        assert len(starts) == 91

    def test_time_of_day_kept_seconds_dropped(self):
        starts = expand_recurrence(datetime(2024, 1, 1, 9, 30, 45), "daily", end_date=date(2024, 1, 2))

        assert starts == [datetime(2024, 1, 2, 9, 30, 0)]

    def test_explicit_start_date(self):
        starts = expand_recurrence(MONDAY_9AM, "weekly", start_date=date(2024, 1, 15), end_date=date(2024, 1, 29))

        assert [s.date() for s in starts] == [date(2024, 1, 22), date(2024, 1, 29)]

    def test_end_equal_to_start_is_empty(self):
        assert expand_recurrence(MONDAY_9AM, "daily", end_date=date(2024, 1, 1)) == []

    def test_unknown_pattern_rejected(self):
        with pytest.raises(ValidationError):
            expand_recurrence(MONDAY_9AM, "yearly", end_date=date(2024, 2, 1))

    def test_end_before_start_rejected(self):
        with pytest.raises(ValidationError):
            expand_recurrence(MONDAY_9AM, "daily", start_date=date(2024, 2, 1), end_date=date(2024, 1, 1))

    def test_cap_below_one_rejected(self):
        with pytest.raises(ValidationError):
            expand_recurrence(MONDAY_9AM, "daily", end_date=date(2024, 2, 1), max_occurrences=0)


class TestIterOccurrenceDates:
    def test_occurrences_are_strictly_after_start(self):
        days = list(iter_occurrence_dates(date(2024, 1, 1), "daily", date(2024, 1, 1), date(2024, 1, 3)))

        assert days == [date(2024, 1, 2), date(2024, 1, 3)]

    def test_default_end_date_handles_month_ends(self):
        assert default_end_date(date(2024, 11, 30)) == date(2025, 2, 28)

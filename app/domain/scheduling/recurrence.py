"""
Recurrence expansion

Turns a template's start time and a pattern into the dated occurrences of a
series. Pure: no I/O, no clock. Work is bounded by the occurrence cap and
the end date.
"""

from collections.abc import Iterator
from datetime import date, datetime, timedelta
from typing import Optional

from dateutil.relativedelta import relativedelta

from ...config import RECURRENCE_DEFAULT_MONTHS, RECURRENCE_MAX_OCCURRENCES
from ...shared.errors import ValidationError
from .entities import RECURRENCE_PATTERNS


def sunday_based_weekday(day: date) -> int:
    """Weekday number with 0 = Sunday ... 6 = Saturday"""
    return (day.weekday() + 1) % 7


def default_end_date(start: date, months: int = RECURRENCE_DEFAULT_MONTHS) -> date:
    return start + relativedelta(months=months)


def iter_occurrence_dates(
    anchor: date,
    pattern: str,
    start: date,
    end: date,
    days_of_week: Optional[list[int]] = None,
) -> Iterator[date]:
    """
    Yield each date in (start, end] that matches the pattern.

    `anchor` is the template's own date and supplies the weekday for weekly
    (without explicit days) and biweekly series. Monthly series repeat on
    the start date's day-of-month.
    """
    anchor_weekday = sunday_based_weekday(anchor)
    current = start + timedelta(days=1)

    while current <= end:
        if pattern == "daily":
            matches = True
        elif pattern == "weekly":
            if days_of_week:
                matches = sunday_based_weekday(current) in days_of_week
            else:
                matches = sunday_based_weekday(current) == anchor_weekday
        elif pattern == "biweekly":
            weeks_elapsed = (current - start).days // 7
            matches = weeks_elapsed % 2 == 0 and sunday_based_weekday(current) == anchor_weekday
        else:
            # Months without this day-of-month are skipped
            matches = current.day == start.day

        if matches:
            yield current
        current += timedelta(days=1)


def expand_recurrence(
    template_start: datetime,
    pattern: str,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    days_of_week: Optional[list[int]] = None,
    max_occurrences: int = RECURRENCE_MAX_OCCURRENCES,
) -> list[datetime]:
    """
    Expand a recurrence rule into occurrence start times.

    Args:
        template_start: The template's scheduled start; its time-of-day is
            carried onto every occurrence
        pattern: daily, weekly, biweekly or monthly
        start_date: Series start (exclusive), defaults to the template's date
        end_date: Series end (inclusive), defaults to start + 3 months
        days_of_week: Weekly only, 0 = Sunday ... 6 = Saturday
        max_occurrences: Safety cap on the number of occurrences

    Returns:
        Ordered occurrence start datetimes, at most max_occurrences long
    """
    if pattern not in RECURRENCE_PATTERNS:
        raise ValidationError(f"Unsupported recurrence pattern: {pattern!r}")
    if max_occurrences < 1:
        raise ValidationError("maxOccurrences must be at least 1")

    start = start_date or template_start.date()
    end = end_date or default_end_date(start)
    if end < start:
        raise ValidationError("End date must not be before start date")

    weekdays = days_of_week if pattern == "weekly" else None
    time_of_day = template_start.time().replace(second=0, microsecond=0)

    occurrences: list[datetime] = []
    for day in iter_occurrence_dates(template_start.date(), pattern, start, end, weekdays):
        occurrences.append(datetime.combine(day, time_of_day))
        if len(occurrences) >= max_occurrences:
            break

    return occurrences

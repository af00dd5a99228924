"""Shared validation utilities"""

from datetime import date, datetime
from typing import Optional, Union


def parse_iso_datetime(value: Union[str, date, datetime, None]) -> Optional[datetime]:
    """
    Parse an ISO-8601 date or datetime into a naive UTC-less datetime.

    Accepts a trailing "Z". Timezone-aware values are converted to naive
    datetimes in their own offset (the store holds naive wall-clock times).

    Raises:
        ValueError: If the value cannot be parsed
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.replace(tzinfo=None)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)

    parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    return parsed.replace(tzinfo=None)


def validate_days_of_week(days: Optional[list[int]]) -> Optional[list[int]]:
    """
    Validate weekday numbers (0 = Sunday ... 6 = Saturday).

    Returns a sorted, de-duplicated list, or None when no days are given.

    Raises:
        ValueError: If any value is outside 0-6
    """
    if not days:
        return None

    invalid = [d for d in days if d < 0 or d > 6]
    if invalid:
        raise ValueError(f"Days of week must be between 0 (Sunday) and 6 (Saturday), got {invalid}")

    return sorted(set(days))


def to_date_key(value: Union[date, datetime]) -> str:
    """Format a date as the YYYY-MM-DD key used by calendar maps"""
    if isinstance(value, datetime):
        value = value.date()
    return value.isoformat()

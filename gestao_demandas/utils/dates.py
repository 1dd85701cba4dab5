"""Date and time helpers.

All timestamps handled by the service are timezone-aware UTC datetimes;
due dates are plain calendar dates.
"""

from datetime import UTC, date, datetime, time, timedelta
from typing import Any


def utc_now() -> datetime:
    """Return current UTC time."""
    return datetime.now(UTC)


def ensure_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC and convert aware ones to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def parse_datetime(value: Any) -> datetime:
    """Parse an ISO 8601 date or datetime into an aware UTC datetime.

    Raises:
        ValueError: If the value is not a valid ISO 8601 string
    """
    if isinstance(value, datetime):
        return ensure_utc(value)
    if isinstance(value, date):
        return datetime.combine(value, time.min, tzinfo=UTC)
    if not isinstance(value, str):
        raise ValueError(f"Not a date/time: {value!r}")
    return ensure_utc(datetime.fromisoformat(value.strip()))


def parse_date(value: Any) -> date:
    """Parse a due date given as a date, a datetime or an ISO 8601 string.

    Time of day is discarded.

    Raises:
        ValueError: If the value cannot be read as a date
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        raise ValueError(f"Not a date: {value!r}")
    text = value.strip()
    if len(text) == 10:
        return date.fromisoformat(text)
    return datetime.fromisoformat(text).date()


def parse_range_bound(value: str | None, *, end_of_day: bool = False) -> datetime | None:
    """Parse a creation-date filter bound.

    A date-only upper bound ("2024-05-31") covers the whole day.

    Raises:
        ValueError: If the value is not a valid ISO 8601 string
    """
    if value is None or not value.strip():
        return None
    text = value.strip()
    if len(text) == 10:
        day = date.fromisoformat(text)
        start = datetime.combine(day, time.min, tzinfo=UTC)
        if end_of_day:
            return start + timedelta(days=1) - timedelta(microseconds=1)
        return start
    return parse_datetime(text)


def days_between(later: datetime, earlier: date) -> float:
    """Fractional days from midnight UTC of ``earlier`` to ``later``."""
    start = datetime.combine(earlier, time.min, tzinfo=UTC)
    return (ensure_utc(later) - start).total_seconds() / 86400.0

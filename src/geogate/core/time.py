"""
Time parsing and timezone normalization.

Calendar checks ("is today the scheduled internship day") are made in the configured
timezone, so every timestamp is normalized to a timezone-aware datetime first.
"""

from __future__ import annotations

from datetime import date, datetime
from zoneinfo import ZoneInfo


def ensure_tz(dt: datetime, timezone: str) -> datetime:
    """Ensure `dt` has tzinfo; attach `timezone` if naive."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=ZoneInfo(timezone))
    return dt


def parse_datetime(value: str, timezone: str) -> datetime:
    """Parse ISO-8601 datetime string and ensure tzinfo is present.

    Notes:
    - Accepts a trailing `Z` (UTC) and converts it to `+00:00` for `fromisoformat`.
    - If the parsed value is naive, the provided `timezone` is attached.
    """
    value = value.strip()
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    dt = datetime.fromisoformat(value)
    return ensure_tz(dt, timezone)


def parse_calendar_date(value: str, timezone: str) -> date:
    """Parse a date-only or datetime string into the calendar date seen in `timezone`."""
    value = value.strip()
    if len(value) == 10:
        return date.fromisoformat(value)
    return parse_datetime(value, timezone).astimezone(ZoneInfo(timezone)).date()


def now_in(timezone: str) -> datetime:
    return datetime.now(ZoneInfo(timezone))


def today_in(timezone: str) -> date:
    """Return the current calendar date in `timezone`."""
    return now_in(timezone).date()

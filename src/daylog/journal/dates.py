"""DayKey helpers.

A DayKey is a calendar date serialized as ``YYYY-MM-DD``. It is the sole
identity of a journal record and sorts lexicographically in date order.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import date, datetime, timedelta

DAY_KEY_FORMAT = "%Y-%m-%d"

Clock = Callable[[], date]
"""Zero-arg callable returning the current local date."""


def to_day_key(value: date | datetime | str) -> str:
    """Normalize a date, datetime or DayKey string to a DayKey."""
    if isinstance(value, datetime):
        return value.date().strftime(DAY_KEY_FORMAT)
    if isinstance(value, date):
        return value.strftime(DAY_KEY_FORMAT)
    return parse_day_key(value).strftime(DAY_KEY_FORMAT)


def parse_day_key(day_key: str) -> date:
    """Parse a DayKey, raising ``ValueError`` on anything but ``YYYY-MM-DD``."""
    if not isinstance(day_key, str) or len(day_key) != 10:
        raise ValueError(f"Invalid day key: {day_key!r} (expected YYYY-MM-DD)")
    try:
        return datetime.strptime(day_key, DAY_KEY_FORMAT).date()
    except ValueError:
        raise ValueError(f"Invalid day key: {day_key!r} (expected YYYY-MM-DD)") from None


def today_key(clock: Clock | None = None) -> str:
    return to_day_key((clock or date.today)())


def shift_day_key(day_key: str, days: int) -> str:
    return to_day_key(parse_day_key(day_key) + timedelta(days=days))


def days_between(earlier: str, later: str) -> int:
    """Whole calendar days from ``earlier`` to ``later`` (negative if reversed)."""
    return (parse_day_key(later) - parse_day_key(earlier)).days


def day_keys_between(start: str, end: str) -> list[str]:
    """DayKeys strictly between ``start`` and ``end``, ascending."""
    gap = days_between(start, end)
    return [shift_day_key(start, offset) for offset in range(1, gap)]

"""Shared date and time-of-day helpers used across the engine."""

from datetime import date, time, timedelta
from typing import Iterator, Union

TimeLike = Union[time, str]


def parse_hhmm(value: TimeLike) -> time:
    """Parse an "HH:MM" (or "HH:MM:SS") string into a ``time``.

    ``time`` instances pass through unchanged.

    Examples:
        >>> parse_hhmm("09:30")
        datetime.time(9, 30)
        >>> parse_hhmm("18:00:00")
        datetime.time(18, 0)
    """
    if isinstance(value, time):
        return value
    parts = value.strip().split(":")
    if len(parts) not in (2, 3):
        raise ValueError(f"Expected HH:MM, got {value!r}")
    hour, minute = int(parts[0]), int(parts[1])
    second = int(parts[2]) if len(parts) == 3 else 0
    return time(hour, minute, second)


def format_hhmm(value: time) -> str:
    """Format a ``time`` as 24-hour "HH:MM"."""
    return f"{value.hour:02d}:{value.minute:02d}"


def time_to_minutes(value: TimeLike) -> int:
    """Minutes since midnight for a time-of-day."""
    parsed = parse_hhmm(value)
    return parsed.hour * 60 + parsed.minute


def iso_weekday(day: date) -> int:
    """Day of week with Monday = 1 … Sunday = 7."""
    return day.isoweekday()


def date_range(start: date, end: date) -> Iterator[date]:
    """Yield every date from ``start`` to ``end`` inclusive."""
    current = start
    while current <= end:
        yield current
        current += timedelta(days=1)

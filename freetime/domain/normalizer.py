"""
Conversion of raw calendar records into canonical busy intervals.

Time-of-day strings are read literally as ``HH:MM``. Timezone handling is
the calendar source's job; nothing here reinterprets a clock reading.
"""

import pendulum

from .models import BusyInterval, minutes_to_time

ALL_DAY_START = "00:00"
ALL_DAY_END = "23:59"


def time_to_minutes(value: str) -> int:
    """
    Convert ``HH:MM`` to minutes since midnight.

    Raises:
        ValueError: If the string is not a valid ``HH:MM`` time of day
    """
    hours_str, sep, minutes_str = value.partition(":")
    if not sep or not hours_str.isdigit() or not minutes_str.isdigit():
        raise ValueError(f"Expected HH:MM, got {value!r}")

    hours = int(hours_str)
    minutes = int(minutes_str)
    if hours > 23 or minutes > 59:
        raise ValueError(f"Time of day out of range: {value!r}")

    return hours * 60 + minutes


def validate_date(value: str) -> str:
    """
    Ensure ``value`` is a ``YYYY-MM-DD`` calendar date and return it.

    Raises:
        ValueError: If the date cannot be parsed
    """
    try:
        pendulum.from_format(value, "YYYY-MM-DD")
    except (ValueError, TypeError) as exc:
        raise ValueError(f"Invalid calendar date {value!r}: {exc}") from exc
    return value


def normalize_busy_record(
    date: str,
    start_time: str = ALL_DAY_START,
    end_time: str = ALL_DAY_END,
    all_day: bool = False,
) -> BusyInterval:
    """
    Build a BusyInterval from a date and a pair of ``HH:MM`` strings.

    All-day records become ``00:00-23:59``; the last minute of the day is
    deliberately left out.
    """
    if all_day:
        start_time, end_time = ALL_DAY_START, ALL_DAY_END

    return BusyInterval(
        date=validate_date(date),
        start_minutes=time_to_minutes(start_time),
        end_minutes=time_to_minutes(end_time),
    )

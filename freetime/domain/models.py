"""
Domain models for busy intervals, free slots and the working-hours window.

All times are minutes since midnight in the business timezone; dates are
``YYYY-MM-DD`` strings in that same timezone.
"""

from dataclasses import dataclass
from typing import Tuple

import pendulum

MINUTES_PER_DAY = 1440

WORK_START = 10 * 60  # 10:00
WORK_END = 19 * 60  # 19:00
MIN_SLOT_MINUTES = 60

WEEKEND = (5, 6)  # Saturday, Sunday

WEEKDAY_NAMES = ("月", "火", "水", "木", "金", "土", "日")  # Monday first


def minutes_to_time(minutes: int) -> str:
    """Convert minutes since midnight to a zero-padded ``HH:MM`` string."""
    hours, mins = divmod(minutes, 60)
    return f"{hours:02d}:{mins:02d}"


@dataclass(frozen=True)
class BusyInterval:
    """
    One continuous busy period within a single calendar day.

    Invariant: 0 <= start_minutes < end_minutes <= 1440.
    """
    date: str
    start_minutes: int
    end_minutes: int

    def __post_init__(self):
        if not 0 <= self.start_minutes < MINUTES_PER_DAY:
            raise ValueError(f"start_minutes out of range: {self.start_minutes}")
        if not 0 < self.end_minutes <= MINUTES_PER_DAY:
            raise ValueError(f"end_minutes out of range: {self.end_minutes}")
        if self.start_minutes >= self.end_minutes:
            raise ValueError(
                f"Start {self.start_minutes} must be before end {self.end_minutes} on {self.date}"
            )

    def duration_minutes(self) -> int:
        """Return the duration in minutes."""
        return self.end_minutes - self.start_minutes


@dataclass(frozen=True)
class FreeSlot:
    """
    A free period inside the working-hours window of one business day.
    """
    date: str
    start_minutes: int
    end_minutes: int

    @property
    def start_time(self) -> str:
        return minutes_to_time(self.start_minutes)

    @property
    def end_time(self) -> str:
        return minutes_to_time(self.end_minutes)

    @property
    def date_label(self) -> str:
        """Short date with weekday, e.g. ``2/2(月)``."""
        day = pendulum.from_format(self.date, "YYYY-MM-DD")
        return f"{day.month}/{day.day}({WEEKDAY_NAMES[day.weekday()]})"

    def duration_minutes(self) -> int:
        """Return the duration in minutes."""
        return self.end_minutes - self.start_minutes

    def format_range(self) -> str:
        """Format as ``HH:MM-HH:MM``."""
        return f"{self.start_time}-{self.end_time}"

    def format_display(self) -> str:
        """
        Format the slot for display.
        Format: M/D(曜) HH:MM-HH:MM
        """
        return f"{self.date_label} {self.format_range()}"

    def overlaps(self, other: "FreeSlot") -> bool:
        """Check if this slot overlaps with another on the same date."""
        return (
            self.date == other.date
            and self.start_minutes < other.end_minutes
            and self.end_minutes > other.start_minutes
        )


@dataclass(frozen=True)
class WorkWindow:
    """
    Daily availability boundary that busy time is subtracted from.

    The defaults are the fixed 10:00-19:00 window with a one-hour minimum
    slot and weekends excluded.
    """
    start_minutes: int = WORK_START
    end_minutes: int = WORK_END
    min_slot_minutes: int = MIN_SLOT_MINUTES
    exclude_weekdays: Tuple[int, ...] = WEEKEND  # 0=Monday, 6=Sunday

    def __post_init__(self):
        if not 0 <= self.start_minutes < self.end_minutes <= MINUTES_PER_DAY:
            raise ValueError(
                f"Invalid work window {self.start_minutes}-{self.end_minutes}"
            )
        if self.min_slot_minutes <= 0:
            raise ValueError("min_slot_minutes must be greater than zero")

    def is_working_day(self, weekday: int) -> bool:
        """Check if a weekday (0=Monday) is part of the availability universe."""
        return weekday not in self.exclude_weekdays

    def total_minutes(self) -> int:
        return self.end_minutes - self.start_minutes

"""
Core business logic for calculating shared free time.

This is the heart of the application - pure domain logic without any
external dependencies (no API calls, no database, no I/O).
"""

from typing import Callable, Iterable, Iterator, List, Optional, Sequence, Tuple, Union

import pendulum
from pendulum import Date

from .clock import business_today
from .models import BusyInterval, FreeSlot, WorkWindow

Run = Tuple[int, int]


class AvailabilityComputer:
    """
    Calculates free slots from everyone's busy intervals and the work window.

    Algorithm, per day of the horizon:
    1. Skip excluded weekdays entirely
    2. Collect the busy intervals of that date and sort them by start
    3. Merge overlapping or touching intervals into runs
    4. Subtract the runs from the work window
    5. Keep only gaps of at least the minimum slot length
    """

    def __init__(
        self,
        work_window: Optional[WorkWindow] = None,
        clock: Optional[Callable[[], Date]] = None,
    ):
        self.work_window = work_window or WorkWindow()
        self.clock = clock or business_today

    def compute_free_slots(
        self,
        busy_intervals: Iterable[BusyInterval],
        days: int,
        anchor_date: Union[Date, str, None] = None,
    ) -> List[FreeSlot]:
        """
        Find every free slot over ``days`` calendar days starting at the anchor.

        Args:
            busy_intervals: Busy intervals of all calendars, any order
            days: Number of calendar days in the horizon (weekends included)
            anchor_date: First day of the horizon; the clock is asked once if omitted

        Returns:
            Free slots ordered by date, then start time
        """
        if days <= 0:
            return []

        anchor = self._resolve_anchor(anchor_date)

        by_date: dict = {}
        for interval in busy_intervals:
            by_date.setdefault(interval.date, []).append(interval)

        slots: List[FreeSlot] = []
        for date_str in self._business_days(anchor, days):
            runs = self.merge_busy_intervals(by_date.get(date_str, []))
            slots.extend(self._subtract_from_window(date_str, runs))

        return slots

    def _resolve_anchor(self, anchor_date: Union[Date, str, None]) -> Date:
        if anchor_date is None:
            return self.clock()
        if isinstance(anchor_date, str):
            return pendulum.from_format(anchor_date, "YYYY-MM-DD").date()
        return anchor_date

    def _business_days(self, anchor: Date, days: int) -> Iterator[str]:
        """
        Yield the date strings of the horizon that are working days.

        Dates are advanced on a date-only value so no offset or daylight
        saving shift can move a day boundary.
        """
        for offset in range(days):
            target = anchor.add(days=offset)
            if not self.work_window.is_working_day(target.weekday()):
                continue
            yield target.to_date_string()

    @staticmethod
    def merge_busy_intervals(intervals: Sequence[BusyInterval]) -> List[Run]:
        """
        Merge overlapping or touching intervals into disjoint runs.

        Example: [11:00-13:00, 12:00-14:00, 14:00-15:00] -> [11:00-15:00]
        """
        ordered = sorted(intervals, key=lambda interval: interval.start_minutes)
        merged: List[Run] = []

        for interval in ordered:
            if merged and interval.start_minutes <= merged[-1][1]:
                last_start, last_end = merged[-1]
                merged[-1] = (last_start, max(last_end, interval.end_minutes))
            else:
                merged.append((interval.start_minutes, interval.end_minutes))

        return merged

    def _subtract_from_window(self, date_str: str, runs: Sequence[Run]) -> List[FreeSlot]:
        """
        Subtract merged busy runs from the work window.

        Example:
        Window: 10:00 - 19:00
        Busy: [11:00-12:00, 14:00-15:00]
        Result: [10:00-11:00, 12:00-14:00, 15:00-19:00]
        """
        window = self.work_window
        free: List[FreeSlot] = []
        cursor = window.start_minutes

        for run_start, run_end in runs:
            if run_start > cursor and run_start - cursor >= window.min_slot_minutes:
                slot_end = min(run_start, window.end_minutes)
                # A gap clipped at the end of the window can fall under the minimum
                if slot_end - cursor >= window.min_slot_minutes:
                    free.append(FreeSlot(date=date_str, start_minutes=cursor, end_minutes=slot_end))
            cursor = max(cursor, run_end)

        if window.end_minutes - cursor >= window.min_slot_minutes:
            free.append(
                FreeSlot(date=date_str, start_minutes=cursor, end_minutes=window.end_minutes)
            )

        return free

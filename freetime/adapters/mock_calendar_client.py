"""
Mock calendar source for running without Google credentials.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from pendulum import Date

from ..domain.models import BusyInterval
from ..domain.normalizer import normalize_busy_record

logger = logging.getLogger(__name__)

DEFAULT_DATA_FILE = Path(__file__).parent / "mock_calendar_data.json"


class MockCalendarClient:
    """
    Mock client that serves busy intervals from mock_calendar_data.json.

    Entries are relative to the anchor date (``dayOffset``) so the sample
    week always lines up with "today".
    """

    def __init__(
        self,
        calendar_ids: Optional[Sequence[str]] = None,
        data_file: Path = DEFAULT_DATA_FILE,
    ):
        """
        Initialize the mock client.

        Args:
            calendar_ids: Calendars to include; all calendars in the file if empty
            data_file: JSON file with the sample events
        """
        self.calendar_ids = list(calendar_ids or [])
        self.calendar_events = self._load_calendar_data(data_file)

    @staticmethod
    def _load_calendar_data(data_file: Path) -> List[Dict[str, Any]]:
        """Load mock calendar data from JSON file."""
        if not data_file.exists():
            logger.warning("Mock calendar data not found at %s", data_file)
            return []

        with open(data_file, "r", encoding="utf-8") as f:
            return json.load(f)

    def get_busy_intervals(self, anchor_date: Date, days: int) -> List[BusyInterval]:
        """Return the sample busy intervals that fall inside the horizon."""
        busy: List[BusyInterval] = []

        for event in self.calendar_events:
            if self.calendar_ids and event.get("calendarId") not in self.calendar_ids:
                continue

            offset = int(event.get("dayOffset", 0))
            if not 0 <= offset < days:
                continue

            date_str = anchor_date.add(days=offset).to_date_string()
            try:
                if event.get("allDay"):
                    busy.append(normalize_busy_record(date_str, all_day=True))
                else:
                    busy.append(normalize_busy_record(date_str, event["start"], event["end"]))
            except (KeyError, ValueError) as exc:
                logger.warning("Skipping invalid mock event %s: %s", event, exc)
                continue

        return busy

    def test_connection(self) -> Dict[str, Any]:
        """Mock connection test."""
        return {"id": "mock@example.com", "summary": "Mock Calendar", "timeZone": "Asia/Tokyo"}

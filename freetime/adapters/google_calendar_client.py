"""
Google Calendar API client for fetching busy intervals.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Dict, Iterator, List, Optional, Sequence, Tuple
from urllib.parse import quote

import pendulum
import requests
from pendulum import Date

from ..domain.exceptions import AuthenticationError, CalendarAPIError
from ..domain.models import BusyInterval
from ..domain.normalizer import ALL_DAY_END, ALL_DAY_START, normalize_busy_record, time_to_minutes
from .google_authenticator import ServiceAccountAuthenticator

logger = logging.getLogger(__name__)


def split_date_time(value: str) -> Tuple[str, str]:
    """
    Split an RFC 3339 timestamp into its literal date and ``HH:MM`` parts.

    The clock digits are taken as written; the UTC offset is ignored and
    nothing is converted into the business timezone.

    Example: "2026-02-02T05:00:00Z" -> ("2026-02-02", "05:00")
    """
    date_part, sep, time_part = value.partition("T")
    if not sep or len(time_part) < 5:
        raise ValueError(f"Not a dateTime value: {value!r}")
    return date_part, time_part[:5]


def _dates_between(first: str, last: str) -> Iterator[str]:
    """Yield every ``YYYY-MM-DD`` date from ``first`` to ``last`` inclusive."""
    current = pendulum.from_format(first, "YYYY-MM-DD").date()
    end = pendulum.from_format(last, "YYYY-MM-DD").date()
    while current <= end:
        yield current.to_date_string()
        current = current.add(days=1)


def event_to_busy_intervals(event: Dict[str, Any]) -> List[BusyInterval]:
    """
    Reduce one Google Calendar event to busy intervals.

    All-day events cover every date from ``start.date`` up to the exclusive
    ``end.date``, each as 00:00-23:59. Timed events use the literal date
    and clock digits. One that runs past midnight is busy until 23:59 on
    its first day, all day in between and from 00:00 on its last day.
    """
    start = event.get("start") or {}
    end = event.get("end") or {}

    if start.get("date"):
        last = start["date"]
        if end.get("date"):
            last = (
                pendulum.from_format(end["date"], "YYYY-MM-DD").date().subtract(days=1).to_date_string()
            )
            # An end on or before the start still blocks the start date
            last = max(last, start["date"])
        return [normalize_busy_record(day, all_day=True) for day in _dates_between(start["date"], last)]

    start_date, start_time = split_date_time(start["dateTime"])
    end_date, end_time = split_date_time(end["dateTime"])

    if end_date == start_date and time_to_minutes(end_time) > time_to_minutes(start_time):
        return [normalize_busy_record(start_date, start_time, end_time)]

    if end_date <= start_date:
        logger.warning(
            "Skipping event %s with non-positive duration (%s %s - %s %s)",
            event.get("id", "?"), start_date, start_time, end_date, end_time,
        )
        return []

    intervals: List[BusyInterval] = []
    for day in _dates_between(start_date, end_date):
        day_start = start_time if day == start_date else ALL_DAY_START
        day_end = end_time if day == end_date else ALL_DAY_END
        if time_to_minutes(day_end) > time_to_minutes(day_start):
            intervals.append(normalize_busy_record(day, day_start, day_end))
    return intervals


class GoogleCalendarClient:
    """
    Client for Google Calendar API event listing.

    Uses the /calendars/{id}/events endpoint with expanded recurring events
    and reduces every event to canonical busy intervals.
    """

    API_ENDPOINT = "https://www.googleapis.com/calendar/v3"
    PAGE_SIZE = 100
    MAX_WORKERS = 8

    def __init__(
        self,
        authenticator: Optional[ServiceAccountAuthenticator],
        calendar_ids: Sequence[str],
        timezone: str,
        session: Optional[requests.Session] = None,
    ):
        """
        Initialize the Calendar API client.

        Args:
            authenticator: Token source; None means credentials are not configured
            calendar_ids: Calendars whose busy time is combined
            timezone: IANA timezone of the business day
            session: Optional requests session (used by tests)
        """
        self.authenticator = authenticator
        self.calendar_ids = list(calendar_ids)
        self.timezone = timezone
        self.session = session or requests.Session()

    def get_busy_intervals(self, anchor_date: Date, days: int) -> List[BusyInterval]:
        """
        Fetch busy intervals of all calendars for ``days`` days from the anchor.

        Failures never propagate: a calendar that cannot be read contributes
        nothing, and without credentials or a token the result is empty.
        The caller then sees more free time than actually exists.

        Args:
            anchor_date: First day of the horizon in the business timezone
            days: Number of calendar days to cover

        Returns:
            Busy intervals of all calendars, concatenated
        """
        if days <= 0:
            return []

        if self.authenticator is None:
            logger.error("Google Calendar API credentials not configured")
            return []

        if not self.calendar_ids:
            logger.error("No calendar IDs configured")
            return []

        try:
            access_token = self.authenticator.get_access_token()
        except AuthenticationError as exc:
            logger.error("Failed to fetch busy slots: %s", exc)
            return []

        time_min, time_max = self._query_window(anchor_date, days)

        with ThreadPoolExecutor(max_workers=min(self.MAX_WORKERS, len(self.calendar_ids))) as pool:
            results = pool.map(
                lambda calendar_id: self._fetch_calendar_safely(
                    calendar_id, access_token, time_min, time_max
                ),
                self.calendar_ids,
            )
            busy: List[BusyInterval] = []
            for intervals in results:
                busy.extend(intervals)

        logger.info(
            "Fetched %d busy intervals from %d calendars", len(busy), len(self.calendar_ids)
        )
        return busy

    def _query_window(self, anchor_date: Date, days: int) -> Tuple[str, str]:
        """Midnight of the anchor up to (exclusive) midnight ``days`` later, RFC 3339."""
        start = pendulum.datetime(
            anchor_date.year, anchor_date.month, anchor_date.day, tz=self.timezone
        )
        end = start.add(days=days)
        return start.to_iso8601_string(), end.to_iso8601_string()

    def _fetch_calendar_safely(
        self,
        calendar_id: str,
        access_token: str,
        time_min: str,
        time_max: str,
    ) -> List[BusyInterval]:
        try:
            return self.fetch_calendar(calendar_id, access_token, time_min, time_max)
        except CalendarAPIError as exc:
            logger.error("Error fetching calendar %s: %s", calendar_id, exc)
            return []

    def fetch_calendar(
        self,
        calendar_id: str,
        access_token: str,
        time_min: str,
        time_max: str,
    ) -> List[BusyInterval]:
        """
        Fetch and reduce all events of one calendar in the window.

        Raises:
            CalendarAPIError: If the API call fails or returns garbage
        """
        intervals: List[BusyInterval] = []

        for event in self._iter_events(calendar_id, access_token, time_min, time_max):
            try:
                intervals.extend(event_to_busy_intervals(event))
            except (KeyError, ValueError) as exc:
                logger.warning("Could not parse event in %s: %s", calendar_id, exc)
                continue

        return intervals

    def _iter_events(
        self,
        calendar_id: str,
        access_token: str,
        time_min: str,
        time_max: str,
    ) -> Iterator[Dict[str, Any]]:
        url = f"{self.API_ENDPOINT}/calendars/{quote(calendar_id, safe='')}/events"
        headers = {"Authorization": f"Bearer {access_token}"}
        params = {
            "timeMin": time_min,
            "timeMax": time_max,
            "singleEvents": "true",
            "orderBy": "startTime",
            "maxResults": str(self.PAGE_SIZE),
        }

        while True:
            try:
                response = self.session.get(url, headers=headers, params=params, timeout=30)
                if response.status_code == 401:
                    self._discard_rejected_token(calendar_id)
                response.raise_for_status()
                data = response.json()
            except requests.exceptions.RequestException as exc:
                raise CalendarAPIError(f"Failed to fetch events: {exc}") from exc
            except ValueError as exc:
                raise CalendarAPIError(f"Invalid JSON in events response: {exc}") from exc

            yield from data.get("items") or []

            page_token = data.get("nextPageToken")
            if not page_token:
                return
            params = {**params, "pageToken": page_token}

    def _discard_rejected_token(self, calendar_id: str) -> None:
        """Drop a token the API refused so the next request mints a new one."""
        logger.warning("Access token rejected while reading %s; clearing token cache", calendar_id)
        if self.authenticator is not None:
            self.authenticator.clear_cache()

    def test_connection(self) -> Dict[str, Any]:
        """
        Test credentials by reading the first calendar's metadata.

        Returns:
            Calendar metadata

        Raises:
            AuthenticationError: If no token can be obtained
            CalendarAPIError: If the calendar cannot be read
        """
        if self.authenticator is None:
            raise AuthenticationError("Google Calendar API credentials not configured")
        if not self.calendar_ids:
            raise CalendarAPIError("No calendar IDs configured")

        access_token = self.authenticator.get_access_token(force_refresh=True)
        url = f"{self.API_ENDPOINT}/calendars/{quote(self.calendar_ids[0], safe='')}"

        try:
            response = self.session.get(
                url, headers={"Authorization": f"Bearer {access_token}"}, timeout=10
            )
            response.raise_for_status()
            return response.json()
        except requests.exceptions.RequestException as exc:
            raise CalendarAPIError(f"Connection test failed: {exc}") from exc

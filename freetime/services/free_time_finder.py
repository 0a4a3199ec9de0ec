"""
Application service for finding shared free time.

The service anchors the horizon once, fetches busy intervals via a
calendar source adapter and delegates the availability calculation to the
domain-level ``AvailabilityComputer``. Keeping the calendar dependency
behind a protocol lets tests plug in a stub.
"""

from __future__ import annotations

import logging
from typing import Callable, List, Optional, Protocol

from pendulum import Date

from ..adapters.google_authenticator import ServiceAccountAuthenticator
from ..adapters.google_calendar_client import GoogleCalendarClient
from ..adapters.mock_calendar_client import MockCalendarClient
from ..config import AppConfig
from ..domain.availability import AvailabilityComputer
from ..domain.clock import business_today
from ..domain.models import BusyInterval, FreeSlot

logger = logging.getLogger(__name__)


class CalendarSourceProtocol(Protocol):
    """Protocol describing the calendar behaviour needed by the service."""

    def get_busy_intervals(self, anchor_date: Date, days: int) -> List[BusyInterval]:
        """Return busy intervals of every calendar within the horizon."""


class FreeTimeFinderService:
    """
    Orchestrates busy-time retrieval and free-slot calculation.
    """

    def __init__(
        self,
        calendar_source: CalendarSourceProtocol,
        computer: AvailabilityComputer,
        clock: Optional[Callable[[], Date]] = None,
        default_days: int = 7,
    ) -> None:
        self._calendar_source = calendar_source
        self._computer = computer
        self._clock = clock or computer.clock
        self.default_days = default_days

    def find_free_slots(self, days: Optional[int] = None) -> List[FreeSlot]:
        """
        Compute everyone's free slots for the next ``days`` calendar days.

        The anchor date is resolved once and shared by the fetch and the
        calculation, so a run crossing midnight cannot drift.
        """
        horizon = self.default_days if days is None else days
        anchor = self._clock()

        busy = self._calendar_source.get_busy_intervals(anchor, horizon)
        slots = self._computer.compute_free_slots(busy, horizon, anchor_date=anchor)

        logger.info(
            "Found %d free slots from %d busy intervals (%s, %d days)",
            len(slots), len(busy), anchor.to_date_string(), horizon,
        )
        for slot in slots:
            logger.debug("Free: %s", slot.format_display())
        return slots


def build_calendar_source(config: AppConfig, mock: bool = False) -> CalendarSourceProtocol:
    """Create the Google calendar client, or the mock one."""
    if mock:
        return MockCalendarClient(calendar_ids=config.google.calendar_ids)

    authenticator = None
    if config.google.is_configured():
        authenticator = ServiceAccountAuthenticator(
            service_account_email=config.google.service_account_email,
            private_key=config.google.service_account_private_key,
        )

    return GoogleCalendarClient(
        authenticator=authenticator,
        calendar_ids=config.google.calendar_ids,
        timezone=config.timezone,
    )


def build_service(config: AppConfig, mock: bool = False) -> FreeTimeFinderService:
    """Wire a service from configuration."""
    timezone = config.timezone
    computer = AvailabilityComputer(
        work_window=config.get_work_window(),
        clock=lambda: business_today(timezone),
    )
    return FreeTimeFinderService(
        calendar_source=build_calendar_source(config, mock=mock),
        computer=computer,
        default_days=config.work_hours.horizon_days,
    )

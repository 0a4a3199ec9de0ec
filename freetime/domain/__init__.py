"""
Domain layer - Pure availability logic without external dependencies.
"""

from .availability import AvailabilityComputer
from .clock import business_today
from .models import BusyInterval, FreeSlot, WorkWindow
from .normalizer import minutes_to_time, normalize_busy_record, time_to_minutes

__all__ = [
    "AvailabilityComputer",
    "BusyInterval",
    "FreeSlot",
    "WorkWindow",
    "business_today",
    "minutes_to_time",
    "normalize_busy_record",
    "time_to_minutes",
]

"""
Service layer helpers that orchestrate adapters and domain logic.
"""

from .free_time_finder import CalendarSourceProtocol, FreeTimeFinderService, build_service

__all__ = ["CalendarSourceProtocol", "FreeTimeFinderService", "build_service"]

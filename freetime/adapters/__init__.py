"""
Adapters layer - External integrations (Google Calendar API, Slack).
"""

from .google_authenticator import AccessTokenCache, ServiceAccountAuthenticator
from .google_calendar_client import GoogleCalendarClient
from .mock_calendar_client import MockCalendarClient

__all__ = [
    "AccessTokenCache",
    "GoogleCalendarClient",
    "MockCalendarClient",
    "ServiceAccountAuthenticator",
]

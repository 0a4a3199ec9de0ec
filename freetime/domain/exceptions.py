"""
Domain-specific exception hierarchy for the free-time finder.
"""


class FreeTimeError(Exception):
    """Base class for all application-level errors."""


class CalendarAPIError(FreeTimeError):
    """Raised when calendar data cannot be fetched or parsed."""


class AuthenticationError(FreeTimeError):
    """Raised when minting or exchanging a service-account token fails."""


class ConfigurationError(FreeTimeError):
    """Raised when required settings are missing or inconsistent."""

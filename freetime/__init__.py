"""
Free-time finder: shared availability across several calendars.
"""

__version__ = "0.1.0"

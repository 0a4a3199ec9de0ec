"""
Resolution of "today" in the business timezone.
"""

from typing import Optional

import pendulum
from pendulum import Date, DateTime

DEFAULT_TIMEZONE = "Asia/Tokyo"


def business_today(timezone: str = DEFAULT_TIMEZONE, now: Optional[DateTime] = None) -> Date:
    """
    Return the calendar date of ``now`` (default: the current instant) in ``timezone``.

    This is the single place where an instant is converted into the
    business timezone; everything downstream works on plain dates.
    """
    instant = now if now is not None else pendulum.now("UTC")
    return instant.in_timezone(timezone).date()

"""
Which calendar dates customers may pick when booking.
"""

from datetime import date
from typing import List, Tuple

import pendulum

DEFAULT_BOOKING_HORIZON_DAYS = 15
DEFAULT_DATE_LIST_DAYS = 60


def is_date_bookable(
    day: date,
    today: date,
    horizon_days: int = DEFAULT_BOOKING_HORIZON_DAYS,
) -> bool:
    """Check that ``day`` lies between today and ``horizon_days`` ahead (inclusive)."""
    last_day = pendulum.Date(today.year, today.month, today.day).add(days=horizon_days)
    return today <= day <= last_day


def bookable_dates(
    today: date,
    days_ahead: int = DEFAULT_DATE_LIST_DAYS,
    locale: str = "en",
) -> List[Tuple[str, str]]:
    """
    List the dates from today up to ``days_ahead`` days in the future.

    Returns:
        List of (ISO date, human-readable label) pairs, e.g.
        ("2024-11-25", "Monday, 25 November")
    """
    start = pendulum.Date(today.year, today.month, today.day)
    dates: List[Tuple[str, str]] = []

    for offset in range(days_ahead + 1):
        current = start.add(days=offset)
        dates.append(
            (current.to_date_string(), current.format("dddd, D MMMM", locale=locale))
        )

    return dates

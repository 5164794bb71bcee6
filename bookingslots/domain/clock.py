"""
Clock abstraction so that "now" is always injected, never read implicitly.
"""

from typing import Protocol

import pendulum
from pendulum import Date, DateTime


class Clock(Protocol):
    """Source of the current instant and the business's civil date."""

    def now(self) -> DateTime:
        """Return the current instant."""

    def today(self, timezone: str) -> Date:
        """Return the current calendar date in the given timezone."""


class SystemClock:
    """Wall clock backed by pendulum."""

    def now(self) -> DateTime:
        return pendulum.now("UTC")

    def today(self, timezone: str) -> Date:
        return pendulum.now(timezone).date()


class FixedClock:
    """
    Clock frozen at a given instant.

    Useful for tests and for replaying availability as it looked at a
    specific moment.
    """

    def __init__(self, instant: DateTime):
        self._instant = instant

    def now(self) -> DateTime:
        return self._instant

    def today(self, timezone: str) -> Date:
        return self._instant.in_timezone(timezone).date()

"""
Operating-hours resolution: weekly configuration + date -> effective day.
"""

import logging
from datetime import date, time
from typing import Mapping

from .exceptions import MalformedSchedule
from .models import EffectiveDay, Weekday, WeekdayOverride, WeeklySchedule

logger = logging.getLogger(__name__)


class OperatingHoursResolver:
    """
    Resolves the effective operating window of a business for one date.

    When per-weekday overrides are enabled, each override replaces the
    default window completely and a weekday without an override is closed.
    Otherwise the default schedule applies to every working weekday.

    ``resolve`` returns None for a closed day. It never raises for a
    well-formed but closed day, and malformed windows are reported as
    closed instead of being propagated to the slot generator.
    """

    def __init__(
        self,
        schedule: WeeklySchedule,
        overrides: Mapping[Weekday, WeekdayOverride] | None = None,
    ):
        self.schedule = schedule
        self.overrides = overrides

    @property
    def uses_overrides(self) -> bool:
        return self.overrides is not None

    def resolve(self, day: date) -> EffectiveDay | None:
        """
        Get the effective operating window for a specific date.

        Args:
            day: Calendar date in the business's local calendar

        Returns:
            EffectiveDay, or None if the business is closed on that date
        """
        weekday = Weekday.from_date(day)

        if self.overrides is not None:
            override = self.overrides.get(weekday)
            if override is None:
                logger.debug("No override for %s; %s is closed", weekday.name, day)
                return None
            return self._build(
                day,
                override.open,
                override.close,
                override.break_start,
                override.break_end,
            )

        if not self.schedule.is_working_day(day):
            logger.debug("%s is not a working day; %s is closed", weekday.name, day)
            return None

        return self._build(
            day,
            self.schedule.open,
            self.schedule.close,
            self.schedule.break_start,
            self.schedule.break_end,
        )

    def _build(
        self,
        day: date,
        open: time,
        close: time,
        break_start: time | None,
        break_end: time | None,
    ) -> EffectiveDay | None:
        try:
            return EffectiveDay.from_times(
                open=open,
                close=close,
                break_start=break_start,
                break_end=break_end,
                step_minutes=self.schedule.slot_step_minutes,
            )
        except MalformedSchedule as exc:
            logger.warning("Treating %s as closed: %s", day, exc)
            return None


def resolve_day(
    schedule: WeeklySchedule | None,
    overrides: Mapping[Weekday, WeekdayOverride] | None,
    day: date,
) -> EffectiveDay | None:
    """
    Resolve the effective day for ``day``.

    A missing schedule (``None``) means the business is not configured and
    is treated as fully closed.
    """
    if schedule is None:
        return None
    return OperatingHoursResolver(schedule, overrides).resolve(day)

"""
Core business logic for generating bookable time slots.

This is the heart of the application - pure domain logic without any
external dependencies (no API calls, no database, no I/O, no hidden clock
reads).
"""

from datetime import date
from typing import List, Sequence

from pendulum import DateTime

from .models import (
    DEFAULT_SLOT_STEP_MINUTES,
    EffectiveDay,
    IntervalSource,
    OccupiedInterval,
    Slot,
    SlotReason,
    format_minutes,
    overlaps,
)


class SlotGenerator:
    """
    Walks an effective day in fixed steps and classifies every candidate start.

    Algorithm (per candidate start, first matching rule wins):
    1. Service would end after closing time -> outsideOperatingWindow
    2. Service overlaps the break window -> onBreak
    3. Service overlaps an occupied interval -> occupied (blocked when only
       administrative blocks conflict)
    4. Date is today and the start is not after the current minute -> pastCutoff
    5. Otherwise available

    Slots are emitted in ascending start order and the output is fully
    determined by the inputs.
    """

    def __init__(self, timezone: str):
        self.timezone = timezone

    def generate(
        self,
        effective_day: EffectiveDay | None,
        service_duration_minutes: int,
        occupied: Sequence[OccupiedInterval],
        now: DateTime,
        day: date,
    ) -> List[Slot]:
        """
        Generate the ordered slot sequence for one professional and date.

        Args:
            effective_day: Resolved operating window, or None when closed
            service_duration_minutes: Duration of the requested service
            occupied: Occupied intervals of the professional on ``day``
            now: Current instant; only used when ``day`` is today
            day: Calendar date the slots are generated for

        Returns:
            List of Slot objects; empty when the day is closed
        """
        if effective_day is None:
            return []

        step = effective_day.step_minutes
        if step <= 0:
            step = DEFAULT_SLOT_STEP_MINUTES

        cutoff = self._cutoff_minutes(now, day)

        slots: List[Slot] = []
        cursor = effective_day.open_minutes

        while cursor < effective_day.close_minutes:
            slot_end = cursor + service_duration_minutes
            reason = self._classify(
                effective_day,
                cursor,
                slot_end,
                occupied,
                cutoff,
            )
            slots.append(
                Slot(
                    start_minutes=cursor,
                    end_minutes=slot_end,
                    available=reason is None,
                    reason=reason,
                )
            )
            cursor += step

        return slots

    def _cutoff_minutes(self, now: DateTime, day: date) -> int | None:
        """
        Minute of day up to which slots count as past, or None if ``day``
        is not today in the business's calendar.
        """
        local_now = now.in_timezone(self.timezone)
        if local_now.date() != day:
            return None
        return local_now.hour * 60 + local_now.minute

    def _classify(
        self,
        effective_day: EffectiveDay,
        start: int,
        end: int,
        occupied: Sequence[OccupiedInterval],
        cutoff: int | None,
    ) -> SlotReason | None:
        if end > effective_day.close_minutes:
            return SlotReason.OUTSIDE_OPERATING_WINDOW

        if effective_day.has_break and overlaps(
            start,
            end,
            effective_day.break_start_minutes,
            effective_day.break_end_minutes,
        ):
            return SlotReason.ON_BREAK

        conflict = self._conflict_reason(start, end, occupied)
        if conflict is not None:
            return conflict

        # The slot matching the current minute is already past
        if cutoff is not None and start <= cutoff:
            return SlotReason.PAST_CUTOFF

        return None

    @staticmethod
    def _conflict_reason(
        start: int,
        end: int,
        occupied: Sequence[OccupiedInterval],
    ) -> SlotReason | None:
        blocked = False
        for interval in occupied:
            if not interval.conflicts_with(start, end):
                continue
            if interval.source is IntervalSource.BOOKING:
                return SlotReason.OCCUPIED
            blocked = True

        return SlotReason.BLOCKED if blocked else None


def generate_slots(
    effective_day: EffectiveDay | None,
    service_duration_minutes: int,
    occupied: Sequence[OccupiedInterval],
    now: DateTime,
    day: date,
    timezone: str,
) -> List[Slot]:
    """Functional shortcut for ``SlotGenerator.generate``."""
    return SlotGenerator(timezone=timezone).generate(
        effective_day,
        service_duration_minutes,
        occupied,
        now,
        day,
    )


def available_times(slots: Sequence[Slot]) -> List[str]:
    """Return the HH:MM start times of the available slots."""
    return [slot.label for slot in slots if slot.available]


def end_time(start: str, duration_minutes: int) -> str:
    """
    Calculate the HH:MM end of an appointment starting at ``start``.

    Example: end_time("09:40", 30) -> "10:10"
    """
    hours, minutes = (int(part) for part in start.split(":")[:2])
    return format_minutes(hours * 60 + minutes + duration_minutes)

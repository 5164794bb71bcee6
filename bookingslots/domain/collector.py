"""
Normalizes bookings and administrative time blocks into occupied intervals.
"""

import logging
from datetime import date
from typing import Iterable, List

from .models import (
    Booking,
    IntervalSource,
    OccupiedInterval,
    TimeBlock,
    time_to_minutes,
)

logger = logging.getLogger(__name__)

DEFAULT_BOOKING_DURATION_MINUTES = 30


class OccupiedIntervalCollector:
    """
    Collects the occupied time of one professional on one date.

    Booking instants are converted to the business's local time before
    being reduced to minutes since midnight, so ``timezone`` must be the
    business's IANA timezone.
    """

    def __init__(
        self,
        timezone: str,
        fallback_duration_minutes: int = DEFAULT_BOOKING_DURATION_MINUTES,
    ):
        if fallback_duration_minutes <= 0:
            raise ValueError("fallback_duration_minutes must be greater than zero")
        self.timezone = timezone
        self.fallback_duration_minutes = fallback_duration_minutes

    def collect(
        self,
        bookings: Iterable[Booking],
        blocks: Iterable[TimeBlock],
        professional_id: str,
        day: date,
        split_step_minutes: int | None = None,
    ) -> List[OccupiedInterval]:
        """
        Merge bookings and blocks into a single list of occupied intervals.

        Args:
            bookings: Candidate bookings (any professional, any date)
            blocks: Candidate time blocks (any date)
            professional_id: Professional whose availability is computed
            day: Calendar date in the business's local calendar
            split_step_minutes: When set, blocks are decomposed into
                sub-intervals of this length (last one truncated)

        Returns:
            Unordered list of OccupiedInterval objects
        """
        intervals: List[OccupiedInterval] = []

        for booking in bookings:
            interval = self._booking_interval(booking, professional_id, day)
            if interval is not None:
                intervals.append(interval)

        for block in blocks:
            if block.day != day or not block.applies_to(professional_id):
                continue
            intervals.extend(self._block_intervals(block, split_step_minutes))

        return intervals

    def _booking_interval(
        self,
        booking: Booking,
        professional_id: str,
        day: date,
    ) -> OccupiedInterval | None:
        if booking.professional_id != professional_id or booking.is_cancelled:
            return None

        local_start = booking.start.in_timezone(self.timezone)
        if local_start.date() != day:
            return None

        duration = booking.service_duration_minutes
        if duration is None or duration <= 0:
            logger.warning(
                "Booking %s has no usable service duration (%r); assuming %d minutes",
                booking.id,
                duration,
                self.fallback_duration_minutes,
            )
            duration = self.fallback_duration_minutes

        start = local_start.hour * 60 + local_start.minute
        return OccupiedInterval(
            start_minutes=start,
            end_minutes=start + duration,
            source=IntervalSource.BOOKING,
            source_id=booking.id,
        )

    def _block_intervals(
        self,
        block: TimeBlock,
        split_step_minutes: int | None,
    ) -> List[OccupiedInterval]:
        start = time_to_minutes(block.start)
        end = time_to_minutes(block.end)

        if end <= start:
            logger.warning(
                "Ignoring time block %s with end %s not after start %s",
                block.id,
                block.end,
                block.start,
            )
            return []

        if not split_step_minutes or split_step_minutes <= 0:
            return [
                OccupiedInterval(
                    start_minutes=start,
                    end_minutes=end,
                    source=IntervalSource.BLOCK,
                    source_id=block.id,
                )
            ]

        pieces: List[OccupiedInterval] = []
        current = start
        while current < end:
            pieces.append(
                OccupiedInterval(
                    start_minutes=current,
                    end_minutes=min(current + split_step_minutes, end),
                    source=IntervalSource.BLOCK,
                    source_id=block.id,
                )
            )
            current += split_step_minutes
        return pieces


def collect_occupied(
    bookings: Iterable[Booking],
    blocks: Iterable[TimeBlock],
    professional_id: str,
    day: date,
    timezone: str,
    fallback_duration_minutes: int = DEFAULT_BOOKING_DURATION_MINUTES,
    split_step_minutes: int | None = None,
) -> List[OccupiedInterval]:
    """Functional shortcut for ``OccupiedIntervalCollector.collect``."""
    collector = OccupiedIntervalCollector(
        timezone=timezone,
        fallback_duration_minutes=fallback_duration_minutes,
    )
    return collector.collect(
        bookings,
        blocks,
        professional_id,
        day,
        split_step_minutes=split_step_minutes,
    )

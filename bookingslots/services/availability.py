"""
Application service for computing a professional's bookable slots.

The service coordinates fetching the schedule, bookings and time blocks via
source adapters and delegates the actual availability calculation to the
domain layer (resolver, collector, generator, summary). Sources are plain
protocols so the JSON store, the REST client or test stubs can be plugged in.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import date
from typing import List, Protocol, Sequence

from ..config import ScheduleConfig
from ..domain.clock import Clock
from ..domain.collector import DEFAULT_BOOKING_DURATION_MINUTES, OccupiedIntervalCollector
from ..domain.exceptions import ConfigurationMissing
from ..domain.models import Booking, EffectiveDay, OccupiedInterval, Slot, TimeBlock
from ..domain.resolver import resolve_day
from ..domain.slot_generator import SlotGenerator
from ..domain.summary import AvailabilitySummary, summarize

logger = logging.getLogger(__name__)


class ScheduleSource(Protocol):
    """Supplies the weekly schedule record of a business."""

    async def get_schedule(self, business_id: str) -> ScheduleConfig:
        """Return the schedule, or raise ConfigurationMissing."""


class BookingSource(Protocol):
    """Supplies the bookings of a professional on a date."""

    async def get_bookings(
        self,
        business_id: str,
        professional_id: str,
        day: date,
        timezone: str | None = None,
    ) -> List[Booking]:
        """
        Return the bookings; cancelled ones may be included.

        ``day`` is a calendar date in ``timezone`` (the business's zone);
        sources fall back to their own default zone when it is None.
        """


class BlockSource(Protocol):
    """Supplies the administrative time blocks of a business on a date."""

    async def get_blocks(self, business_id: str, day: date) -> List[TimeBlock]:
        """Return blocks for every professional, including business-wide ones."""


@dataclass
class AvailabilityResult:
    """Ordered slots for one (professional, date) pair plus their summary."""
    day: date
    effective_day: EffectiveDay | None
    slots: List[Slot] = field(default_factory=list)
    occupied: List[OccupiedInterval] = field(default_factory=list)
    summary: AvailabilitySummary = field(default_factory=AvailabilitySummary)

    @property
    def is_closed(self) -> bool:
        return self.effective_day is None

    @classmethod
    def closed(cls, day: date) -> "AvailabilityResult":
        return cls(day=day, effective_day=None)


class AvailabilityService:
    """
    Orchestrates data retrieval and slot generation.

    The service keeps no state between calls; each request re-reads its
    inputs, so it is safe to call concurrently and again whenever the
    underlying bookings change.
    """

    def __init__(
        self,
        schedule_source: ScheduleSource,
        booking_source: BookingSource,
        block_source: BlockSource,
        clock: Clock,
        timezone: str = "America/Sao_Paulo",
        fallback_duration_minutes: int = DEFAULT_BOOKING_DURATION_MINUTES,
        split_blocks: bool = False,
    ) -> None:
        self._schedule_source = schedule_source
        self._booking_source = booking_source
        self._block_source = block_source
        self._clock = clock
        self._timezone = timezone
        self._fallback_duration_minutes = fallback_duration_minutes
        self._split_blocks = split_blocks

    async def find_slots(
        self,
        *,
        business_id: str,
        professional_id: str,
        day: date,
        service_duration_minutes: int,
    ) -> AvailabilityResult:
        """
        Retrieve schedule and occupancy data and compute the slot sequence.

        A business without a schedule record is treated as closed.

        Raises:
            ValueError: If the service duration is not positive
        """
        if service_duration_minutes <= 0:
            raise ValueError("service_duration_minutes must be greater than zero")

        try:
            schedule = await self._schedule_source.get_schedule(business_id)
        except ConfigurationMissing as exc:
            logger.warning("%s; reporting %s as closed", exc, day)
            return AvailabilityResult.closed(day)

        effective_day = resolve_day(
            schedule.to_domain(),
            schedule.overrides_to_domain(),
            day,
        )
        if effective_day is None:
            return AvailabilityResult.closed(day)

        tz = schedule.timezone or self._timezone
        bookings, blocks = await asyncio.gather(
            self._booking_source.get_bookings(
                business_id, professional_id, day, timezone=tz
            ),
            self._block_source.get_blocks(business_id, day),
        )

        return self.calculate_slots(
            effective_day=effective_day,
            bookings=bookings,
            blocks=blocks,
            professional_id=professional_id,
            day=day,
            service_duration_minutes=service_duration_minutes,
            timezone=tz,
        )

    def calculate_slots(
        self,
        *,
        effective_day: EffectiveDay | None,
        bookings: Sequence[Booking],
        blocks: Sequence[TimeBlock],
        professional_id: str,
        day: date,
        service_duration_minutes: int,
        timezone: str | None = None,
    ) -> AvailabilityResult:
        """Calculate slots and summary from already fetched data."""
        if effective_day is None:
            return AvailabilityResult.closed(day)

        tz = timezone or self._timezone
        collector = OccupiedIntervalCollector(
            timezone=tz,
            fallback_duration_minutes=self._fallback_duration_minutes,
        )
        occupied = collector.collect(
            bookings,
            blocks,
            professional_id,
            day,
            split_step_minutes=effective_day.step_minutes if self._split_blocks else None,
        )

        slots = SlotGenerator(timezone=tz).generate(
            effective_day,
            service_duration_minutes,
            occupied,
            self._clock.now(),
            day,
        )

        return AvailabilityResult(
            day=day,
            effective_day=effective_day,
            slots=slots,
            occupied=occupied,
            summary=summarize(slots),
        )

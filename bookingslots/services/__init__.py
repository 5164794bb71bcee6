"""
Service layer helpers that orchestrate adapters and domain logic.
"""

from .availability import (
    AvailabilityResult,
    AvailabilityService,
    BlockSource,
    BookingSource,
    ScheduleSource,
)

__all__ = [
    "AvailabilityResult",
    "AvailabilityService",
    "BlockSource",
    "BookingSource",
    "ScheduleSource",
]

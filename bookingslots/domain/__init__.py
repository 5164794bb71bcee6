"""
Domain layer - Pure availability logic without external dependencies.
"""

from .clock import Clock, FixedClock, SystemClock
from .collector import OccupiedIntervalCollector, collect_occupied
from .models import (
    Booking,
    DayPeriod,
    EffectiveDay,
    IntervalSource,
    OccupiedInterval,
    Slot,
    SlotReason,
    TimeBlock,
    Weekday,
    WeekdayOverride,
    WeeklySchedule,
)
from .resolver import OperatingHoursResolver, resolve_day
from .slot_generator import SlotGenerator, available_times, end_time, generate_slots
from .summary import AvailabilitySummary, summarize

__all__ = [
    "AvailabilitySummary",
    "Booking",
    "Clock",
    "DayPeriod",
    "EffectiveDay",
    "FixedClock",
    "IntervalSource",
    "OccupiedInterval",
    "OccupiedIntervalCollector",
    "OperatingHoursResolver",
    "Slot",
    "SlotGenerator",
    "SlotReason",
    "SystemClock",
    "TimeBlock",
    "Weekday",
    "WeekdayOverride",
    "WeeklySchedule",
    "available_times",
    "collect_occupied",
    "end_time",
    "generate_slots",
    "resolve_day",
    "summarize",
]

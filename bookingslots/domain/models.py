"""
Domain models for operating hours, occupied time and bookable slots.

All times of day are handled internally as minutes since midnight so that
interval arithmetic stays exact and independent of any calendar library.
"""

from dataclasses import dataclass
from datetime import date, time
from enum import Enum, IntEnum
from typing import ClassVar, FrozenSet

from pendulum import DateTime

from .exceptions import MalformedSchedule

MINUTES_PER_DAY = 24 * 60
DEFAULT_SLOT_STEP_MINUTES = 20


class Weekday(IntEnum):
    """Fixed, locale-independent weekday enumeration (Sunday = 0)."""
    SUNDAY = 0
    MONDAY = 1
    TUESDAY = 2
    WEDNESDAY = 3
    THURSDAY = 4
    FRIDAY = 5
    SATURDAY = 6

    @classmethod
    def from_date(cls, day: date) -> "Weekday":
        """Return the weekday of a calendar date."""
        return cls(day.isoweekday() % 7)

    @classmethod
    def parse(cls, value: "int | str | Weekday") -> "Weekday":
        """
        Parse a weekday identifier.

        Accepts integers 0..6, English names or abbreviations ("sun",
        "monday") and the Portuguese abbreviations stored by existing
        tenants ("dom", "seg", ...).

        Raises:
            ValueError: If the identifier is not a known weekday
        """
        if isinstance(value, Weekday):
            return value

        if isinstance(value, bool):
            raise ValueError(f"Invalid weekday: {value!r}")

        if isinstance(value, int):
            return cls(value)

        key = str(value).strip().lower()
        if key.isdigit():
            return cls(int(key))

        try:
            return _WEEKDAY_ALIASES[key]
        except KeyError:
            raise ValueError(f"Invalid weekday: {value!r}") from None


_WEEKDAY_ALIASES = {}
for _day in Weekday:
    _WEEKDAY_ALIASES[_day.name.lower()] = _day
    _WEEKDAY_ALIASES[_day.name[:3].lower()] = _day
for _alias, _day in zip(("dom", "seg", "ter", "qua", "qui", "sex", "sab"), Weekday):
    _WEEKDAY_ALIASES[_alias] = _day
_WEEKDAY_ALIASES["sáb"] = Weekday.SATURDAY

DEFAULT_WORKING_WEEKDAYS = frozenset(Weekday) - {Weekday.SUNDAY}


def time_to_minutes(value: time) -> int:
    """Convert a time of day to minutes since midnight."""
    return value.hour * 60 + value.minute


def minutes_to_time(minutes: int) -> time:
    """Convert minutes since midnight to a time of day (wraps past midnight)."""
    hour, minute = divmod(minutes % MINUTES_PER_DAY, 60)
    return time(hour=hour, minute=minute)


def format_minutes(minutes: int) -> str:
    """Format minutes since midnight as HH:MM."""
    return minutes_to_time(minutes).strftime("%H:%M")


def parse_time_of_day(value: "str | time") -> time:
    """
    Parse a time of day given as ``HH:MM`` or ``HH:MM:SS``.

    Seconds are dropped, matching the precision of the slot grid.
    """
    if isinstance(value, time):
        return value.replace(second=0, microsecond=0)

    text = str(value).strip()
    parts = text.split(":")
    if len(parts) not in (2, 3) or not all(p.strip().isdigit() for p in parts):
        raise ValueError(f"Invalid time of day: {value!r} (expected HH:MM)")

    return time(hour=int(parts[0]), minute=int(parts[1]))


def overlaps(start: int, end: int, other_start: int, other_end: int) -> bool:
    """
    Three-way overlap test between ``[start, end)`` and ``[other_start, other_end)``.

    A range conflicts when it starts inside the other range, ends inside it,
    or fully spans it. Abutting ranges do not conflict.
    """
    starts_inside = other_start <= start < other_end
    ends_inside = other_start < end <= other_end
    spans = start < other_start and end > other_end
    return starts_inside or ends_inside or spans


@dataclass(frozen=True)
class WeekdayOverride:
    """
    Complete replacement of the operating window for one weekday.

    Break fields are not inherited from the default schedule.
    """
    open: time
    close: time
    break_start: time | None = None
    break_end: time | None = None


@dataclass(frozen=True)
class WeeklySchedule:
    """
    Default weekly configuration of a business.

    ``slot_step_minutes`` of 0 means "not configured" and falls back to the
    default grid; a negative step is rejected.
    """
    open: time
    close: time
    working_weekdays: FrozenSet[Weekday] = DEFAULT_WORKING_WEEKDAYS
    break_start: time | None = None
    break_end: time | None = None
    slot_step_minutes: int = DEFAULT_SLOT_STEP_MINUTES

    def __post_init__(self):
        if self.slot_step_minutes < 0:
            raise ValueError(
                f"slot_step_minutes must not be negative, got {self.slot_step_minutes}"
            )
        if self.slot_step_minutes == 0:
            object.__setattr__(self, "slot_step_minutes", DEFAULT_SLOT_STEP_MINUTES)

        object.__setattr__(
            self,
            "working_weekdays",
            frozenset(Weekday.parse(day) for day in self.working_weekdays),
        )

    def is_working_day(self, day: date) -> bool:
        """Check if a given date falls on a configured working weekday."""
        return Weekday.from_date(day) in self.working_weekdays


@dataclass(frozen=True)
class EffectiveDay:
    """
    Resolved operating window for one calendar date.

    Invariant: open < close, and if a break is set,
    open <= break_start < break_end <= close.
    """
    open_minutes: int
    close_minutes: int
    break_start_minutes: int | None = None
    break_end_minutes: int | None = None
    step_minutes: int = DEFAULT_SLOT_STEP_MINUTES

    def __post_init__(self):
        if self.open_minutes >= self.close_minutes:
            raise MalformedSchedule(
                f"Opening time {format_minutes(self.open_minutes)} must be before "
                f"closing time {format_minutes(self.close_minutes)}"
            )

        if (self.break_start_minutes is None) != (self.break_end_minutes is None):
            raise MalformedSchedule("Break start and end must both be set or both be empty")

        if self.has_break and not (
            self.open_minutes
            <= self.break_start_minutes
            < self.break_end_minutes
            <= self.close_minutes
        ):
            raise MalformedSchedule(
                f"Break {format_minutes(self.break_start_minutes)}-"
                f"{format_minutes(self.break_end_minutes)} must lie within "
                f"{format_minutes(self.open_minutes)}-{format_minutes(self.close_minutes)}"
            )

    @classmethod
    def from_times(
        cls,
        open: time,
        close: time,
        break_start: time | None = None,
        break_end: time | None = None,
        step_minutes: int = DEFAULT_SLOT_STEP_MINUTES,
    ) -> "EffectiveDay":
        """Build an effective day from times of day."""
        return cls(
            open_minutes=time_to_minutes(open),
            close_minutes=time_to_minutes(close),
            break_start_minutes=time_to_minutes(break_start) if break_start is not None else None,
            break_end_minutes=time_to_minutes(break_end) if break_end is not None else None,
            step_minutes=step_minutes,
        )

    @property
    def has_break(self) -> bool:
        return self.break_start_minutes is not None and self.break_end_minutes is not None

    def __str__(self) -> str:
        window = f"{format_minutes(self.open_minutes)}-{format_minutes(self.close_minutes)}"
        if self.has_break:
            window += (
                f" (break {format_minutes(self.break_start_minutes)}-"
                f"{format_minutes(self.break_end_minutes)})"
            )
        return window


class IntervalSource(str, Enum):
    BOOKING = "booking"
    BLOCK = "block"


@dataclass(frozen=True)
class OccupiedInterval:
    """Half-open ``[start, end)`` range of occupied minutes within one day."""
    start_minutes: int
    end_minutes: int
    source: IntervalSource
    source_id: str | None = None

    def __post_init__(self):
        if self.end_minutes < self.start_minutes:
            raise ValueError(
                f"Interval end {self.end_minutes} must not precede start {self.start_minutes}"
            )

    def duration_minutes(self) -> int:
        return self.end_minutes - self.start_minutes

    def conflicts_with(self, start_minutes: int, end_minutes: int) -> bool:
        """Check if ``[start_minutes, end_minutes)`` overlaps this interval."""
        return overlaps(start_minutes, end_minutes, self.start_minutes, self.end_minutes)

    def __str__(self) -> str:
        return (
            f"{format_minutes(self.start_minutes)}-{format_minutes(self.end_minutes)} "
            f"({self.source.value})"
        )


@dataclass(frozen=True)
class Booking:
    """
    An existing appointment.

    ``service_duration_minutes`` is None when the attached service could not
    be resolved.
    """
    id: str
    professional_id: str
    start: DateTime
    status: str | None = "confirmed"
    service_duration_minutes: int | None = None

    CANCELLED_STATUSES: ClassVar[FrozenSet[str]] = frozenset(
        {"cancelled", "canceled", "cancelado"}
    )

    @property
    def is_cancelled(self) -> bool:
        return (self.status or "").strip().lower() in self.CANCELLED_STATUSES


@dataclass(frozen=True)
class TimeBlock:
    """
    Administrative removal of availability on one date.

    A block without ``professional_id`` applies to every professional.
    """
    id: str
    day: date
    start: time
    end: time
    professional_id: str | None = None
    reason: str | None = None

    def applies_to(self, professional_id: str) -> bool:
        return self.professional_id is None or self.professional_id == professional_id


class SlotReason(str, Enum):
    """Why a slot cannot be booked."""
    OCCUPIED = "occupied"
    ON_BREAK = "onBreak"
    PAST_CUTOFF = "pastCutoff"
    BLOCKED = "blocked"
    OUTSIDE_OPERATING_WINDOW = "outsideOperatingWindow"


class DayPeriod(str, Enum):
    MORNING = "morning"
    AFTERNOON = "afternoon"
    EVENING = "evening"

    @classmethod
    def for_minutes(cls, minutes: int) -> "DayPeriod":
        hour = minutes // 60
        if hour < 12:
            return cls.MORNING
        if hour < 18:
            return cls.AFTERNOON
        return cls.EVENING


@dataclass(frozen=True)
class Slot:
    """
    One candidate appointment start with its availability verdict.

    Invariant: an unavailable slot carries exactly one reason and an
    available slot carries none.
    """
    start_minutes: int
    end_minutes: int
    available: bool
    reason: SlotReason | None = None

    WAITLIST_REASONS: ClassVar[FrozenSet[SlotReason]] = frozenset(
        {SlotReason.OCCUPIED, SlotReason.BLOCKED}
    )

    def __post_init__(self):
        if self.available and self.reason is not None:
            raise ValueError("An available slot cannot carry a reason")
        if not self.available and self.reason is None:
            raise ValueError("An unavailable slot must carry a reason")

    @property
    def label(self) -> str:
        """Start time formatted as HH:MM."""
        return format_minutes(self.start_minutes)

    @property
    def end_label(self) -> str:
        return format_minutes(self.end_minutes)

    @property
    def period(self) -> DayPeriod:
        return DayPeriod.for_minutes(self.start_minutes)

    @property
    def offers_waitlist(self) -> bool:
        """True when the slot is taken by someone else rather than structurally closed."""
        return self.reason in self.WAITLIST_REASONS


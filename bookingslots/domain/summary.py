"""
Aggregated view over a generated slot sequence.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Sequence

from .models import DayPeriod, Slot


@dataclass
class AvailabilitySummary:
    """
    Counts of available/unavailable slots and slots grouped by period.

    ``by_period`` always has an entry for every DayPeriod, in slot order.
    """
    available_count: int = 0
    unavailable_count: int = 0
    by_period: Dict[DayPeriod, List[Slot]] = field(
        default_factory=lambda: {period: [] for period in DayPeriod}
    )

    @property
    def total(self) -> int:
        return self.available_count + self.unavailable_count

    @property
    def has_availability(self) -> bool:
        return self.available_count > 0

    def available_in(self, period: DayPeriod) -> int:
        """Number of available slots within a period."""
        return sum(1 for slot in self.by_period[period] if slot.available)


def summarize(slots: Sequence[Slot]) -> AvailabilitySummary:
    """Aggregate slots into counts and morning/afternoon/evening groups."""
    summary = AvailabilitySummary()

    for slot in slots:
        if slot.available:
            summary.available_count += 1
        else:
            summary.unavailable_count += 1
        summary.by_period[slot.period].append(slot)

    return summary

"""
Tests for the availability summary and booking window helpers.
"""

import pendulum

from bookingslots.domain.booking_window import bookable_dates, is_date_bookable
from bookingslots.domain.models import DayPeriod, Slot, SlotReason
from bookingslots.domain.summary import summarize


def _slot(hour, minute=0, reason=None):
    start = hour * 60 + minute
    return Slot(start, start + 30, reason is None, reason)


class TestSummarize:
    """Tests for summarize."""

    def test_counts_and_periods(self):
        slots = [
            _slot(9),
            _slot(11, 40, SlotReason.OCCUPIED),
            _slot(12),
            _slot(17, 40, SlotReason.OUTSIDE_OPERATING_WINDOW),
            _slot(18),
            _slot(19, 20),
        ]

        summary = summarize(slots)

        assert summary.available_count == 4
        assert summary.unavailable_count == 2
        assert summary.total == 6
        assert summary.has_availability
        assert [s.label for s in summary.by_period[DayPeriod.MORNING]] == ["09:00", "11:40"]
        assert [s.label for s in summary.by_period[DayPeriod.AFTERNOON]] == ["12:00", "17:40"]
        assert [s.label for s in summary.by_period[DayPeriod.EVENING]] == ["18:00", "19:20"]
        assert summary.available_in(DayPeriod.MORNING) == 1
        assert summary.available_in(DayPeriod.EVENING) == 2

    def test_empty_sequence(self):
        summary = summarize([])

        assert summary.total == 0
        assert not summary.has_availability
        assert set(summary.by_period) == set(DayPeriod)
        assert all(slots == [] for slots in summary.by_period.values())


class TestBookingWindow:
    """Tests for bookable date helpers."""

    def test_is_date_bookable(self):
        today = pendulum.date(2024, 11, 25)

        assert is_date_bookable(today, today)
        assert is_date_bookable(pendulum.date(2024, 12, 10), today)
        assert not is_date_bookable(pendulum.date(2024, 12, 11), today)
        assert not is_date_bookable(pendulum.date(2024, 11, 24), today)
        assert is_date_bookable(pendulum.date(2024, 11, 27), today, horizon_days=2)

    def test_bookable_dates(self):
        dates = bookable_dates(pendulum.date(2024, 11, 25), days_ahead=7)

        assert len(dates) == 8
        assert dates[0] == ("2024-11-25", "Monday, 25 November")
        assert dates[-1][0] == "2024-12-02"

"""
Tests for occupied-interval collection.
"""

import logging
from datetime import time

import pendulum
import pytest

from bookingslots.domain.collector import OccupiedIntervalCollector, collect_occupied
from bookingslots.domain.models import Booking, IntervalSource, TimeBlock

TZ = "America/Sao_Paulo"
DAY = pendulum.date(2024, 11, 25)


def _booking(booking_id, start, professional="ana", status="confirmed", duration=30):
    return Booking(
        id=booking_id,
        professional_id=professional,
        start=pendulum.parse(start, tz=TZ),
        status=status,
        service_duration_minutes=duration,
    )


def _block(block_id, start, end, professional=None, day=DAY):
    return TimeBlock(
        id=block_id,
        day=day,
        start=start,
        end=end,
        professional_id=professional,
    )


class TestBookings:
    """Tests for booking normalization."""

    def test_booking_mapped_to_minutes(self):
        intervals = collect_occupied(
            [_booking("b1", "2024-11-25 14:00", duration=45)], [], "ana", DAY, TZ
        )

        assert len(intervals) == 1
        assert intervals[0].start_minutes == 14 * 60
        assert intervals[0].end_minutes == 14 * 60 + 45
        assert intervals[0].source == IntervalSource.BOOKING
        assert intervals[0].source_id == "b1"

    def test_booking_instant_converted_to_business_time(self):
        """A UTC instant lands on the local wall-clock minute."""
        booking = Booking(
            id="b1",
            professional_id="ana",
            start=pendulum.parse("2024-11-25T13:00:00Z"),
            service_duration_minutes=30,
        )
        intervals = collect_occupied([booking], [], "ana", DAY, TZ)
        assert intervals[0].start_minutes == 10 * 60

    @pytest.mark.parametrize("status", ["cancelled", "canceled", "Cancelado"])
    def test_cancelled_bookings_ignored(self, status):
        intervals = collect_occupied(
            [_booking("b1", "2024-11-25 14:00", status=status)], [], "ana", DAY, TZ
        )
        assert intervals == []

    def test_other_professional_and_other_day_ignored(self):
        bookings = [
            _booking("b1", "2024-11-25 14:00", professional="bruno"),
            _booking("b2", "2024-11-26 14:00"),
        ]
        assert collect_occupied(bookings, [], "ana", DAY, TZ) == []

    @pytest.mark.parametrize("duration", [None, 0])
    def test_missing_duration_uses_fallback(self, duration, caplog):
        with caplog.at_level(logging.WARNING):
            intervals = collect_occupied(
                [_booking("b1", "2024-11-25 09:00", duration=duration)],
                [],
                "ana",
                DAY,
                TZ,
                fallback_duration_minutes=40,
            )

        assert intervals[0].end_minutes == 9 * 60 + 40
        assert "no usable service duration" in caplog.text

    def test_invalid_fallback_rejected(self):
        with pytest.raises(ValueError):
            OccupiedIntervalCollector(timezone=TZ, fallback_duration_minutes=0)


class TestBlocks:
    """Tests for time block normalization."""

    def test_block_for_everyone_applies(self):
        intervals = collect_occupied([], [_block("t1", time(12), time(13))], "ana", DAY, TZ)

        assert len(intervals) == 1
        assert intervals[0].start_minutes == 12 * 60
        assert intervals[0].end_minutes == 13 * 60
        assert intervals[0].source == IntervalSource.BLOCK

    def test_block_scoped_to_other_professional_ignored(self):
        blocks = [_block("t1", time(12), time(13), professional="bruno")]
        assert collect_occupied([], blocks, "ana", DAY, TZ) == []

    def test_block_on_other_date_ignored(self):
        blocks = [_block("t1", time(12), time(13), day=pendulum.date(2024, 11, 26))]
        assert collect_occupied([], blocks, "ana", DAY, TZ) == []

    def test_empty_block_ignored(self, caplog):
        with caplog.at_level(logging.WARNING):
            intervals = collect_occupied([], [_block("t1", time(13), time(12))], "ana", DAY, TZ)

        assert intervals == []
        assert "Ignoring time block t1" in caplog.text

    def test_block_split_into_step_pieces(self):
        """Decomposition covers exactly the same minutes, last piece truncated."""
        intervals = collect_occupied(
            [],
            [_block("t1", time(9, 0), time(9, 50))],
            "ana",
            DAY,
            TZ,
            split_step_minutes=20,
        )

        assert [(i.start_minutes, i.end_minutes) for i in intervals] == [
            (540, 560),
            (560, 580),
            (580, 590),
        ]


def test_bookings_and_blocks_merged():
    intervals = collect_occupied(
        [_booking("b1", "2024-11-25 09:00")],
        [_block("t1", time(17), time(18), professional="ana")],
        "ana",
        DAY,
        TZ,
    )
    assert {i.source for i in intervals} == {IntervalSource.BOOKING, IntervalSource.BLOCK}

"""
Tests for the JSON file data store.
"""

import asyncio
import json
import logging

import pendulum
import pytest

from bookingslots.adapters.json_store import JsonDataStore
from bookingslots.domain.exceptions import ConfigurationMissing, DataSourceError

TZ = "America/Sao_Paulo"
DAY = pendulum.date(2024, 11, 25)

DATA = {
    "businesses": [
        {"id": "shop", "schedule": {"open": "09:00", "close": "18:00"}},
        {"id": "empty"},
        {"id": "broken", "schedule": {"open": "nine", "close": "18:00"}},
    ],
    "professionals": [
        {"id": "p2", "business_id": "shop", "name": "Zoe"},
        {"id": "p1", "business_id": "shop", "name": "Ana", "active": True},
        {"id": "p3", "business_id": "shop", "name": "Bia", "active": False},
        {"id": "p4", "business_id": "other", "name": "Caio"},
    ],
    "services": [
        {"id": "s1", "business_id": "shop", "duration_minutes": 45},
    ],
    "bookings": [
        {"id": "b1", "business_id": "shop", "professional_id": "p1", "service_id": "s1",
         "start": "2024-11-25T14:00:00-03:00", "status": "confirmed"},
        {"id": "b2", "business_id": "shop", "professional_id": "p1", "service_id": "unknown",
         "start": "2024-11-25T10:00:00"},
        {"id": "b3", "business_id": "shop", "professional_id": "p1",
         "start": "2024-11-26T01:00:00Z"},
        {"id": "b4", "business_id": "shop", "professional_id": "p1",
         "start": "2024-11-26T10:00:00-03:00"},
        {"id": "b5", "business_id": "shop", "professional_id": "p2",
         "start": "2024-11-25T10:00:00-03:00"},
        {"id": "b6", "business_id": "shop", "professional_id": "p1", "start": "not a date"},
    ],
    "time_blocks": [
        {"id": "t1", "business_id": "shop", "professional_id": None,
         "date": "2024-11-25", "start": "12:00", "end": "13:00"},
        {"id": "t2", "business_id": "shop", "professional_id": "p1",
         "date": "2024-11-25", "start": "17:00:00", "end": "18:00:00", "reason": "Dentist"},
        {"id": "t3", "business_id": "shop", "date": "2024-11-26", "start": "09:00", "end": "10:00"},
        {"id": "t4", "business_id": "shop", "date": "2024-11-25", "start": "late", "end": "10:00"},
    ],
}


@pytest.fixture
def store(tmp_path):
    data_file = tmp_path / "data.json"
    data_file.write_text(json.dumps(DATA), encoding="utf-8")
    return JsonDataStore(data_file, timezone=TZ)


class TestLoading:
    """Tests for reading the data file."""

    def test_missing_file(self, tmp_path):
        with pytest.raises(DataSourceError, match="not found"):
            JsonDataStore(tmp_path / "missing.json")

    def test_invalid_json(self, tmp_path):
        data_file = tmp_path / "data.json"
        data_file.write_text("{not json", encoding="utf-8")

        with pytest.raises(DataSourceError):
            JsonDataStore(data_file)


class TestSchedules:
    """Tests for get_schedule."""

    def test_schedule_found(self, store):
        schedule = asyncio.run(store.get_schedule("shop"))
        assert schedule.open.hour == 9

    @pytest.mark.parametrize("business_id", ["empty", "nowhere"])
    def test_missing_schedule(self, store, business_id):
        with pytest.raises(ConfigurationMissing):
            asyncio.run(store.get_schedule(business_id))

    def test_invalid_schedule(self, store):
        with pytest.raises(DataSourceError, match="broken"):
            asyncio.run(store.get_schedule("broken"))


class TestBookings:
    """Tests for get_bookings."""

    def test_bookings_for_professional_and_local_day(self, store, caplog):
        with caplog.at_level(logging.WARNING):
            bookings = asyncio.run(store.get_bookings("shop", "p1", DAY))

        by_id = {booking.id: booking for booking in bookings}
        # b3 is 22:00 on the 25th in local time; b4 is the next day
        assert set(by_id) == {"b1", "b2", "b3"}
        assert by_id["b1"].service_duration_minutes == 45
        assert by_id["b2"].service_duration_minutes is None
        assert by_id["b2"].start.in_timezone(TZ).hour == 10
        assert "Skipping invalid booking record 'b6'" in caplog.text


class TestBlocks:
    """Tests for get_blocks."""

    def test_blocks_on_day(self, store):
        blocks = asyncio.run(store.get_blocks("shop", DAY))

        by_id = {block.id: block for block in blocks}
        assert set(by_id) == {"t1", "t2"}
        assert by_id["t1"].professional_id is None
        assert by_id["t2"].professional_id == "p1"
        assert by_id["t2"].reason == "Dentist"


def test_list_professionals(store):
    names = [row["name"] for row in store.list_professionals("shop")]
    assert names == ["Ana", "Zoe"]

    everyone = [row["name"] for row in store.list_professionals("shop", active_only=False)]
    assert everyone == ["Ana", "Bia", "Zoe"]


def test_null_status_treated_as_confirmed(tmp_path):
    data_file = tmp_path / "data.json"
    data_file.write_text(
        json.dumps({
            "bookings": [
                {"id": "b1", "business_id": "shop", "professional_id": "p1",
                 "start": "2024-11-25T09:00:00-03:00", "status": None},
            ],
        }),
        encoding="utf-8",
    )

    bookings = asyncio.run(JsonDataStore(data_file, timezone=TZ).get_bookings("shop", "p1", DAY))

    assert [booking.status for booking in bookings] == ["confirmed"]
    assert not bookings[0].is_cancelled


def test_bookings_filtered_in_requested_timezone(store):
    """Offsets are converted to Tokyo and naive timestamps are read as Tokyo time."""
    bookings = asyncio.run(
        store.get_bookings("shop", "p1", pendulum.date(2024, 11, 26), timezone="Asia/Tokyo")
    )
    # b1 is 02:00 on the 26th in Tokyo; b2 stays 10:00 on the 25th
    assert {booking.id for booking in bookings} == {"b1", "b3", "b4"}

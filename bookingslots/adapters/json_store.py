"""
File-backed data store for schedules, bookings and time blocks.
"""

import json
import logging
from datetime import date
from pathlib import Path
from typing import Any, Dict, List

import pendulum
from pydantic import ValidationError

from ..config import ScheduleConfig
from ..domain.exceptions import ConfigurationMissing, DataSourceError
from ..domain.models import Booking, TimeBlock, parse_time_of_day

logger = logging.getLogger(__name__)


class JsonDataStore:
    """
    Loads business data from a single JSON file.

    Expected layout::

        {
            "businesses": [{"id": ..., "name": ..., "schedule": {...}}],
            "professionals": [{"id": ..., "business_id": ..., "name": ..., "active": true}],
            "services": [{"id": ..., "business_id": ..., "name": ..., "duration_minutes": 30}],
            "bookings": [{"id": ..., "business_id": ..., "professional_id": ...,
                          "service_id": ..., "start": "2024-11-25T14:00:00-03:00",
                          "status": "confirmed"}],
            "time_blocks": [{"id": ..., "business_id": ..., "professional_id": null,
                             "date": "2024-11-25", "start": "12:00", "end": "13:00"}]
        }

    Invalid booking and block records are skipped with a warning so that
    one bad row never hides a whole day.
    """

    def __init__(self, data_file: Path, timezone: str = "America/Sao_Paulo"):
        """
        Initialize the store.

        Args:
            data_file: Path to the JSON data file
            timezone: IANA timezone for naive booking timestamps and date filtering

        Raises:
            DataSourceError: If the file cannot be read or decoded
        """
        self.data_file = data_file
        self.timezone = timezone
        self._data = self._load(data_file)

    @staticmethod
    def _load(data_file: Path) -> Dict[str, Any]:
        try:
            with open(data_file, "r", encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError as exc:
            raise DataSourceError(f"Data file not found: {data_file}") from exc
        except (OSError, json.JSONDecodeError) as exc:
            raise DataSourceError(f"Could not read data file {data_file}: {exc}") from exc

        if not isinstance(data, dict):
            raise DataSourceError("Data file must contain a JSON object at the root level.")
        return data

    def _records(self, table: str) -> List[Dict[str, Any]]:
        return [row for row in self._data.get(table, []) if isinstance(row, dict)]

    def _service_durations(self, business_id: str) -> Dict[str, int]:
        return {
            str(service["id"]): service.get("duration_minutes")
            for service in self._records("services")
            if str(service.get("business_id")) == business_id and "id" in service
        }

    async def get_schedule(self, business_id: str) -> ScheduleConfig:
        """
        Return the validated schedule of a business.

        Raises:
            ConfigurationMissing: If the business or its schedule is absent
            DataSourceError: If the schedule record is invalid
        """
        for business in self._records("businesses"):
            if str(business.get("id")) != business_id:
                continue
            schedule = business.get("schedule")
            if not schedule:
                break
            try:
                return ScheduleConfig(**schedule)
            except ValidationError as exc:
                raise DataSourceError(
                    f"Invalid schedule for business '{business_id}': {exc}"
                ) from exc

        raise ConfigurationMissing(business_id)

    async def get_bookings(
        self,
        business_id: str,
        professional_id: str,
        day: date,
        timezone: str | None = None,
    ) -> List[Booking]:
        """
        Return the professional's bookings starting on ``day``.

        ``day`` and naive timestamps are read in ``timezone``, defaulting
        to the store's zone.
        """
        tz = timezone or self.timezone
        durations = self._service_durations(business_id)
        bookings: List[Booking] = []

        for row in self._records("bookings"):
            if str(row.get("business_id")) != business_id:
                continue
            if str(row.get("professional_id")) != professional_id:
                continue

            try:
                start = pendulum.parse(row["start"], tz=tz)
                booking = Booking(
                    id=str(row["id"]),
                    professional_id=professional_id,
                    start=start,
                    status=row.get("status") or "confirmed",
                    service_duration_minutes=durations.get(str(row.get("service_id"))),
                )
            except (KeyError, TypeError, ValueError) as exc:
                logger.warning("Skipping invalid booking record %r: %s", row.get("id"), exc)
                continue

            if booking.start.in_timezone(tz).date() == day:
                bookings.append(booking)

        return bookings

    async def get_blocks(self, business_id: str, day: date) -> List[TimeBlock]:
        """Return every time block of the business on ``day``."""
        blocks: List[TimeBlock] = []
        day_str = day.isoformat()

        for row in self._records("time_blocks"):
            if str(row.get("business_id")) != business_id or row.get("date") != day_str:
                continue

            professional = row.get("professional_id")
            try:
                blocks.append(
                    TimeBlock(
                        id=str(row["id"]),
                        day=day,
                        start=parse_time_of_day(row["start"]),
                        end=parse_time_of_day(row["end"]),
                        professional_id=str(professional) if professional is not None else None,
                        reason=row.get("reason"),
                    )
                )
            except (KeyError, ValueError) as exc:
                logger.warning("Skipping invalid time block %r: %s", row.get("id"), exc)

        return blocks

    def list_professionals(self, business_id: str, active_only: bool = True) -> List[Dict[str, Any]]:
        """Return professionals of a business sorted by name."""
        professionals = [
            row for row in self._records("professionals")
            if str(row.get("business_id")) == business_id
            and (not active_only or row.get("active", True))
        ]
        return sorted(professionals, key=lambda row: str(row.get("name", "")))

"""
REST client for PostgREST-compatible backends (e.g. Supabase).
"""

import asyncio
import logging
from datetime import date
from typing import Any, Dict, List, Sequence, Tuple

import pendulum
import requests
from pydantic import ValidationError

from ..config import RestConfig, ScheduleConfig
from ..domain.exceptions import ConfigurationMissing, DataSourceError
from ..domain.models import Booking, TimeBlock, parse_time_of_day

logger = logging.getLogger(__name__)


class RestDataStore:
    """
    Reads schedules, bookings and time blocks through a PostgREST API.

    Filters use PostgREST operators (``eq.``, ``neq.``, ``gte.``, ``lte.``)
    so that only the rows needed for one day are transferred. The blocking
    HTTP calls run in a worker thread to keep the service async.
    """

    SETTINGS_TABLE = "business_settings"
    BOOKINGS_TABLE = "bookings"
    BLOCKS_TABLE = "time_blocks"

    def __init__(self, config: RestConfig, timezone: str = "America/Sao_Paulo"):
        """
        Initialize the REST client.

        Args:
            config: Base URL, API key and timeout
            timezone: Business timezone used to compute day boundaries
        """
        self.base_url = f"{config.base_url}/rest/v1"
        self.timeout = config.timeout_seconds
        self.timezone = timezone
        self.headers = {
            "apikey": config.api_key,
            "Authorization": f"Bearer {config.api_key}",
            "Accept": "application/json",
        }

    def _get(self, table: str, params: Sequence[Tuple[str, str]]) -> List[Dict[str, Any]]:
        """
        Fetch rows from a table.

        Raises:
            DataSourceError: If the request fails or the response is not a list
        """
        url = f"{self.base_url}/{table}"

        try:
            response = requests.get(
                url,
                headers=self.headers,
                params=list(params),
                timeout=self.timeout
            )
            response.raise_for_status()
            data = response.json()

        except requests.exceptions.RequestException as e:
            raise DataSourceError(f"Failed to fetch {table}: {e}") from e
        except ValueError as e:
            raise DataSourceError(f"Invalid JSON from {table}: {e}") from e

        if not isinstance(data, list):
            raise DataSourceError(f"Unexpected response from {table}: expected a list")
        return data

    async def get_schedule(self, business_id: str) -> ScheduleConfig:
        """
        Return the validated schedule of a business.

        Raises:
            ConfigurationMissing: If the business has no settings row or no hours
            DataSourceError: If the request fails or the row is invalid
        """
        rows = await asyncio.to_thread(
            self._get,
            self.SETTINGS_TABLE,
            [("business_id", f"eq.{business_id}"), ("select", "*"), ("limit", "1")],
        )
        if not rows:
            raise ConfigurationMissing(business_id)

        return self._parse_schedule(business_id, rows[0])

    @staticmethod
    def _parse_schedule(business_id: str, row: Dict[str, Any]) -> ScheduleConfig:
        """
        Map a settings row onto the schedule model.

        Row format:
        {
            "opening_time": "09:00:00",
            "closing_time": "18:00:00",
            "break_start": "12:00:00" | null,
            "break_end": "13:00:00" | null,
            "working_days": ["mon", "tue", ...],
            "slot_interval": 20,
            "use_custom_hours": false,
            "custom_hours": {"sat": {"open": "08:00", "close": "14:00"}} | null,
            "timezone": "America/Sao_Paulo" | null
        }

        A row without opening or closing time counts as no configuration.
        """
        if not row.get("opening_time") or not row.get("closing_time"):
            logger.warning(
                "Settings for business '%s' have no opening/closing time", business_id
            )
            raise ConfigurationMissing(business_id)

        data = {
            "open": row.get("opening_time"),
            "close": row.get("closing_time"),
            "break_start": row.get("break_start"),
            "break_end": row.get("break_end"),
            "working_weekdays": row.get("working_days"),
            "slot_step_minutes": row.get("slot_interval"),
            "use_weekday_overrides": bool(row.get("use_custom_hours")),
            "weekday_overrides": row.get("custom_hours") or {},
            "timezone": row.get("timezone"),
        }

        try:
            return ScheduleConfig(**data)
        except ValidationError as exc:
            raise DataSourceError(
                f"Invalid schedule for business '{business_id}': {exc}"
            ) from exc

    async def get_bookings(
        self,
        business_id: str,
        professional_id: str,
        day: date,
        timezone: str | None = None,
    ) -> List[Booking]:
        """Return the professional's non-cancelled bookings on ``day`` in ``timezone``."""
        tz = timezone or self.timezone
        day_start = pendulum.datetime(day.year, day.month, day.day, tz=tz)
        day_end = day_start.end_of("day")

        rows = await asyncio.to_thread(
            self._get,
            self.BOOKINGS_TABLE,
            [
                ("select", "id,starts_at,status,services(duration_minutes)"),
                ("business_id", f"eq.{business_id}"),
                ("professional_id", f"eq.{professional_id}"),
                ("starts_at", f"gte.{day_start.in_timezone('UTC').to_iso8601_string()}"),
                ("starts_at", f"lte.{day_end.in_timezone('UTC').to_iso8601_string()}"),
                ("status", "neq.cancelled"),
            ],
        )

        bookings: List[Booking] = []
        for row in rows:
            service = row.get("services") or {}
            try:
                bookings.append(
                    Booking(
                        id=str(row["id"]),
                        professional_id=professional_id,
                        start=pendulum.parse(row["starts_at"], tz="UTC"),
                        status=row.get("status") or "confirmed",
                        service_duration_minutes=service.get("duration_minutes"),
                    )
                )
            except (KeyError, TypeError, ValueError) as exc:
                logger.warning("Skipping invalid booking row %r: %s", row.get("id"), exc)

        return bookings

    async def get_blocks(self, business_id: str, day: date) -> List[TimeBlock]:
        """Return every time block of the business on ``day``."""
        rows = await asyncio.to_thread(
            self._get,
            self.BLOCKS_TABLE,
            [
                ("select", "id,professional_id,date,start_time,end_time,reason"),
                ("business_id", f"eq.{business_id}"),
                ("date", f"eq.{day.isoformat()}"),
            ],
        )

        blocks: List[TimeBlock] = []
        for row in rows:
            professional = row.get("professional_id")
            try:
                blocks.append(
                    TimeBlock(
                        id=str(row["id"]),
                        day=day,
                        start=parse_time_of_day(row["start_time"]),
                        end=parse_time_of_day(row["end_time"]),
                        professional_id=str(professional) if professional is not None else None,
                        reason=row.get("reason"),
                    )
                )
            except (KeyError, TypeError, ValueError) as exc:
                logger.warning("Skipping invalid time block row %r: %s", row.get("id"), exc)

        return blocks

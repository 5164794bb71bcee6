"""
Configuration management using Pydantic models.

Holds both the application settings (loaded from config.yaml) and the
per-business schedule records, which are validated here before they reach
the domain layer.
"""

import logging
from datetime import time
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator

from .domain.booking_window import DEFAULT_BOOKING_HORIZON_DAYS, DEFAULT_DATE_LIST_DAYS
from .domain.collector import DEFAULT_BOOKING_DURATION_MINUTES
from .domain.models import (
    DEFAULT_SLOT_STEP_MINUTES,
    DEFAULT_WORKING_WEEKDAYS,
    Weekday,
    WeekdayOverride,
    WeeklySchedule,
    parse_time_of_day,
)

logger = logging.getLogger(__name__)


def _parse_optional_time(value: Any) -> Optional[time]:
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    return parse_time_of_day(value)


def _drop_half_break(owner: str, break_start: Optional[time], break_end: Optional[time]):
    """Both break fields or neither; a half-configured break is ignored."""
    if (break_start is None) != (break_end is None):
        logger.warning(
            "%s has only one of break_start/break_end set; ignoring the break",
            owner,
        )
        return None, None
    return break_start, break_end


class WeekdayOverrideConfig(BaseModel):
    """Operating window replacing the default for one weekday."""
    open: time
    close: time
    break_start: Optional[time] = None
    break_end: Optional[time] = None

    @field_validator("open", "close", mode="before")
    @classmethod
    def validate_time(cls, value: Any) -> time:
        """Accept HH:MM or HH:MM:SS strings."""
        return parse_time_of_day(value)

    @field_validator("break_start", "break_end", mode="before")
    @classmethod
    def validate_break_time(cls, value: Any) -> Optional[time]:
        return _parse_optional_time(value)

    @model_validator(mode="after")
    def validate_break_pair(self) -> "WeekdayOverrideConfig":
        self.break_start, self.break_end = _drop_half_break(
            "Weekday override", self.break_start, self.break_end
        )
        return self

    def to_domain(self) -> WeekdayOverride:
        return WeekdayOverride(
            open=self.open,
            close=self.close,
            break_start=self.break_start,
            break_end=self.break_end,
        )


class ScheduleConfig(BaseModel):
    """
    Weekly schedule record of one business.

    ``timezone`` overrides the application timezone for this business.

    Override keys may be weekday names, abbreviations (English or the
    Portuguese ones stored by existing tenants) or numbers with Sunday = 0.
    Unknown keys are dropped with a warning.
    """
    open: time
    close: time
    break_start: Optional[time] = None
    break_end: Optional[time] = None
    working_weekdays: List[Weekday] = Field(
        default_factory=lambda: sorted(DEFAULT_WORKING_WEEKDAYS)
    )
    slot_step_minutes: int = DEFAULT_SLOT_STEP_MINUTES
    timezone: Optional[str] = None
    use_weekday_overrides: bool = False
    weekday_overrides: Dict[Weekday, WeekdayOverrideConfig] = Field(default_factory=dict)

    @field_validator("open", "close", mode="before")
    @classmethod
    def validate_time(cls, value: Any) -> time:
        """Accept HH:MM or HH:MM:SS strings."""
        return parse_time_of_day(value)

    @field_validator("break_start", "break_end", mode="before")
    @classmethod
    def validate_break_time(cls, value: Any) -> Optional[time]:
        return _parse_optional_time(value)

    @field_validator("slot_step_minutes", mode="before")
    @classmethod
    def validate_step(cls, value: Any) -> int:
        """Missing or zero step falls back to the default grid; negative is an error."""
        if value is None:
            return DEFAULT_SLOT_STEP_MINUTES
        step = int(value)
        if step < 0:
            raise ValueError(f"slot_step_minutes must not be negative, got {step}")
        return step or DEFAULT_SLOT_STEP_MINUTES

    @field_validator("working_weekdays", mode="before")
    @classmethod
    def validate_working_weekdays(cls, value: Any) -> List[Weekday]:
        """Parse weekday identifiers, preserving order and removing duplicates."""
        if value is None:
            return sorted(DEFAULT_WORKING_WEEKDAYS)
        parsed: List[Weekday] = []
        for item in value:
            day = Weekday.parse(item)
            if day not in parsed:
                parsed.append(day)
        return parsed

    @field_validator("weekday_overrides", mode="before")
    @classmethod
    def validate_override_keys(cls, value: Any) -> Dict[Weekday, Any]:
        if not value:
            return {}
        if not isinstance(value, dict):
            raise ValueError("weekday_overrides must be a mapping of weekday to hours")

        overrides: Dict[Weekday, Any] = {}
        for key, hours in value.items():
            try:
                day = Weekday.parse(key)
            except ValueError:
                logger.warning("Ignoring override with unknown weekday key %r", key)
                continue
            if hours is None:
                continue
            overrides[day] = hours
        return overrides

    @model_validator(mode="after")
    def validate_break_pair(self) -> "ScheduleConfig":
        self.break_start, self.break_end = _drop_half_break(
            "Schedule", self.break_start, self.break_end
        )
        return self

    def to_domain(self) -> WeeklySchedule:
        """Build the strongly typed weekly schedule."""
        return WeeklySchedule(
            open=self.open,
            close=self.close,
            working_weekdays=frozenset(self.working_weekdays),
            break_start=self.break_start,
            break_end=self.break_end,
            slot_step_minutes=self.slot_step_minutes,
        )

    def overrides_to_domain(self) -> Optional[Dict[Weekday, WeekdayOverride]]:
        """Override map, or None when per-weekday overrides are disabled."""
        if not self.use_weekday_overrides:
            return None
        return {
            day: override.to_domain()
            for day, override in self.weekday_overrides.items()
        }


class DefaultsConfig(BaseModel):
    """Default settings for availability requests."""
    service_duration_minutes: int = 30
    fallback_booking_duration_minutes: int = DEFAULT_BOOKING_DURATION_MINUTES
    booking_horizon_days: int = DEFAULT_BOOKING_HORIZON_DAYS
    date_list_days: int = DEFAULT_DATE_LIST_DAYS

    @field_validator(
        "service_duration_minutes",
        "fallback_booking_duration_minutes",
    )
    @classmethod
    def validate_positive(cls, value: int) -> int:
        """Ensure durations are positive."""
        if value <= 0:
            raise ValueError("durations must be greater than zero")
        return value

    @field_validator("booking_horizon_days", "date_list_days")
    @classmethod
    def validate_days(cls, value: int) -> int:
        if value < 0:
            raise ValueError("day counts must not be negative")
        return value


class RestConfig(BaseModel):
    """Connection settings for a PostgREST-compatible backend."""
    base_url: str
    api_key: str
    timeout_seconds: float = 30

    @field_validator("base_url")
    @classmethod
    def strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")


class AppConfig(BaseModel):
    """Application configuration."""
    timezone: str = "America/Sao_Paulo"
    defaults: DefaultsConfig = Field(default_factory=DefaultsConfig)
    data_file: Optional[Path] = None
    rest: Optional[RestConfig] = None
    log_level: str = "WARNING"

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        level = value.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {value}")
        return level

    @classmethod
    def load_from_yaml(cls, config_path: Path) -> "AppConfig":
        """
        Load configuration from YAML file.

        A relative ``data_file`` is resolved against the config file's
        directory.

        Args:
            config_path: Path to the YAML config file

        Returns:
            AppConfig instance

        Raises:
            FileNotFoundError: If config file doesn't exist
            ValueError: If config is invalid
        """
        if not config_path.exists():
            raise FileNotFoundError(
                f"Config file not found: {config_path}\n"
                f"Please create a config.yaml file. See config.example.yaml for reference."
            )

        try:
            with open(config_path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as exc:
            raise ValueError(f"Invalid YAML in {config_path}: {exc}") from exc

        if not isinstance(data, dict):
            raise ValueError("Config file must contain a mapping at the root level.")

        config = cls(**data)
        if config.data_file is not None and not config.data_file.is_absolute():
            config.data_file = config_path.parent / config.data_file
        return config


def get_default_config_path() -> Path:
    """Get the default configuration file path."""
    # Look for config.yaml in current directory
    current_dir = Path.cwd()
    config_path = current_dir / "config.yaml"

    if not config_path.exists():
        # Try in the project root (parent of the package)
        project_root = Path(__file__).parent.parent
        config_path = project_root / "config.yaml"

    return config_path

"""
Domain-specific exception hierarchy for the booking slots engine.
"""


class BookingSlotsError(Exception):
    """Base class for all application-level errors."""


class ConfigurationMissing(BookingSlotsError):
    """Raised when a business has no schedule record."""

    def __init__(self, business_id: str):
        super().__init__(f"No schedule configured for business '{business_id}'")
        self.business_id = business_id


class MalformedSchedule(BookingSlotsError, ValueError):
    """Raised when an operating window has invalid bounds."""


class DataSourceError(BookingSlotsError):
    """Raised when schedule, booking or block data cannot be fetched or parsed."""

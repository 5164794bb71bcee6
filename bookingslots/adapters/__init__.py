"""
Adapters layer - Data sources for schedules, bookings and time blocks.
"""

from .json_store import JsonDataStore
from .rest_client import RestDataStore

__all__ = ["JsonDataStore", "RestDataStore"]

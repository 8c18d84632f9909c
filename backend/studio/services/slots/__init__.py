# backend/studio/services/slots/__init__.py
"""
Slots module.

Level 1: Fixed slot grid per weekday (static lookup)
Level 2: Availability for a day (closed dates, occupied slots, past slots),
         open-slot counts cached in Redis Sorted Sets
"""

from .config import SlotConfig, get_slot_config, normalize_time
from .calculator import slots_for_date, calculate_end_time, display_block, is_grid_slot
from .redis_store import AvailabilityRedisStore
from .invalidator import invalidate_availability_cache, get_affected_dates
from .availability import (
    SlotStatus,
    filter_past_slots,
    merge_availability,
    calculate_day_availability,
    calculate_calendar,
)

__all__ = [
    "SlotConfig",
    "get_slot_config",
    "normalize_time",
    "slots_for_date",
    "calculate_end_time",
    "display_block",
    "is_grid_slot",
    "AvailabilityRedisStore",
    "invalidate_availability_cache",
    "get_affected_dates",
    "SlotStatus",
    "filter_past_slots",
    "merge_availability",
    "calculate_day_availability",
    "calculate_calendar",
]

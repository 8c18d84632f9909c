# backend/studio/services/slots/calculator.py
"""
Level 1: Fixed slot grid for a date.

Static lookup by weekday:
✓ Monday … Saturday → 11 starts, 11:00 … 18:30
✓ Sunday            →  7 starts, 11:00 … 15:30

Does NOT contain:
✗ Occupied slots (merged at Level 2)
✗ Closed dates (merged at Level 2)
"""

from datetime import date

from ..calendar import parse_date
from .config import (
    SlotConfig,
    get_slot_config,
    minutes_to_time_str,
    normalize_time,
    time_str_to_minutes,
)

SUNDAY = 6  # date.weekday()


def slots_for_date(target_date: date, config: SlotConfig | None = None) -> list[str]:
    """Ordered "HH:MM" start times for the date."""
    target_date = parse_date(target_date)
    config = config or get_slot_config()
    if target_date.weekday() == SUNDAY:
        return list(config.starts(config.sunday_slots))
    return list(config.starts(config.weekday_slots))


def calculate_end_time(start_time: str, config: SlotConfig | None = None) -> str:
    """Stored end of a slot: start + 45 min as "HH:MM:SS"."""
    config = config or get_slot_config()
    end = time_str_to_minutes(start_time) + config.slot_step_minutes
    return f"{minutes_to_time_str(end)}:00"


def display_block(start_time: str, config: SlotConfig | None = None) -> tuple[str, str]:
    """(start, end) shown to clients; sessions are presented as 1-hour blocks."""
    config = config or get_slot_config()
    start = time_str_to_minutes(start_time)
    return minutes_to_time_str(start), minutes_to_time_str(start + config.display_minutes)


def is_grid_slot(target_date: date, start_time: str, config: SlotConfig | None = None) -> bool:
    """Whether start_time is one of the date's grid starts."""
    return normalize_time(start_time) in slots_for_date(target_date, config)

# backend/studio/services/slots/config.py
"""
Slot grid configuration.
"""

import calendar
import re
from dataclasses import dataclass
from datetime import date
from functools import lru_cache

from ...errors import InvalidTimeError

TIME_REGEX = re.compile(r"^(\d{2}):(\d{2})(?::(\d{2}))?$")


@dataclass(frozen=True)
class SlotConfig:
    """
    Configuration for the studio's slot grid.

    Attributes:
        first_slot: Start of the first session "HH:MM"
        slot_step_minutes: Stored slot length / distance between starts
        weekday_slots: Slots per day, Monday to Saturday (11:00 … 18:30)
        sunday_slots: Slots on Sunday (11:00 … 15:30)
        display_minutes: Length shown to clients (sessions are sold as 1 hour)
        horizon_months: How many calendar months ahead clients can book
    """
    first_slot: str = "11:00"
    slot_step_minutes: int = 45
    weekday_slots: int = 11
    sunday_slots: int = 7
    display_minutes: int = 60
    horizon_months: int = 6

    def __post_init__(self):
        """Validate configuration."""
        start = time_str_to_minutes(self.first_slot)
        if self.slot_step_minutes <= 0:
            raise ValueError(f"slot_step_minutes must be positive, got {self.slot_step_minutes}")
        longest = max(self.weekday_slots, self.sunday_slots)
        if start + longest * self.slot_step_minutes > 24 * 60:
            raise ValueError("Slot grid does not fit in a single day")
        if self.horizon_months < 0:
            raise ValueError(f"horizon_months must be non-negative, got {self.horizon_months}")

    def max_booking_date(self, today: date) -> date:
        """today + horizon_months, clamped to the last day of the target month (31 Aug → 28 Feb)."""
        months = today.month - 1 + self.horizon_months
        year, month = today.year + months // 12, months % 12 + 1
        day = min(today.day, calendar.monthrange(year, month)[1])
        return date(year, month, day)

    def starts(self, count: int) -> tuple[str, ...]:
        """First `count` start times of the grid."""
        start = time_str_to_minutes(self.first_slot)
        return tuple(
            minutes_to_time_str(start + i * self.slot_step_minutes)
            for i in range(count)
        )


def time_str_to_minutes(value: str) -> int:
    """ "HH:MM" or "HH:MM:SS" → minutes since midnight (seconds dropped)."""
    if not isinstance(value, str):
        raise InvalidTimeError(f"Expected 'HH:MM' string, got {type(value).__name__}")
    match = TIME_REGEX.match(value.strip())
    if not match:
        raise InvalidTimeError(f"Invalid time format {value!r}, expected HH:MM")
    hours, minutes = int(match.group(1)), int(match.group(2))
    seconds = int(match.group(3) or 0)
    if hours > 23 or minutes > 59 or seconds > 59:
        raise InvalidTimeError(f"Invalid time {value!r}")
    return hours * 60 + minutes


def minutes_to_time_str(total_minutes: int) -> str:
    """Minutes since midnight → "HH:MM"."""
    hour, minute = divmod(total_minutes, 60)
    return f"{hour:02d}:{minute:02d}"


def normalize_time(value: str) -> str:
    """Canonical "HH:MM" ("14:00:00" → "14:00")."""
    return minutes_to_time_str(time_str_to_minutes(value))


@lru_cache
def get_slot_config() -> SlotConfig:
    """Get slot configuration (singleton)."""
    return SlotConfig()

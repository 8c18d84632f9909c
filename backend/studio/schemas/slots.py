# backend/studio/schemas/slots.py
"""
Pydantic schemas for slots API.
"""

from datetime import date
from typing import Optional

from pydantic import BaseModel, Field


class SlotRead(BaseModel):
    """A single slot of the day grid."""
    start_time: str  # "HH:MM"
    end_time: str    # "HH:MM:SS", stored 45-minute slot
    display_start: str
    display_end: str  # shown to clients as a 1-hour block
    is_available: bool
    unavailable_reason: Optional[str] = None

    model_config = {"from_attributes": True}


class SlotsDayResponse(BaseModel):
    """Slots for a day with availability."""
    date: date
    is_closed: bool
    slots: list[SlotRead]
    open_slots_count: int

    model_config = {"from_attributes": True}


class SlotsDayStatus(BaseModel):
    """Status of a single day in calendar."""
    date: date
    has_slots: bool
    open_slots_count: int = 0

    model_config = {"from_attributes": True}


class SlotsCalendarResponse(BaseModel):
    """Response with calendar of available days."""
    start_date: date
    end_date: date
    days: list[SlotsDayStatus]

    max_date: date = Field(description="Last bookable date")
    slot_step_minutes: int = Field(description="Stored slot length in minutes")
    cached: bool = Field(description="Whether the availability cache is enabled")

    model_config = {"from_attributes": True}


class SlotsInvalidateRequest(BaseModel):
    """Dates to drop from the cache: explicit list, a range, or nothing (= all)."""
    dates: Optional[list[date]] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None

    model_config = {"from_attributes": True}

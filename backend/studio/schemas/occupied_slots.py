# backend/studio/schemas/occupied_slots.py

from datetime import date
from typing import Optional

from pydantic import BaseModel


class OccupiedSlotCreate(BaseModel):
    date: date
    start_time: str
    reservation_ref: Optional[str] = None

    model_config = {"from_attributes": True}


class OccupiedSlotRead(BaseModel):
    id: int
    date: date
    start_time: str
    end_time: str
    reservation_ref: Optional[str] = None
    created_at: Optional[str] = None

    model_config = {"from_attributes": True}

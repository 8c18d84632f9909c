# backend/studio/schemas/date_overrides.py

from datetime import date
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field


class DateOverrideCreate(BaseModel):
    date: date
    custom_price: Optional[Decimal] = Field(default=None, ge=0)
    is_closed: bool = False
    reason: Optional[str] = None

    model_config = {"from_attributes": True}


class DateOverrideUpdate(BaseModel):
    custom_price: Optional[Decimal] = Field(default=None, ge=0)
    is_closed: Optional[bool] = None
    reason: Optional[str] = None

    model_config = {"from_attributes": True}


class DateOverrideRead(BaseModel):
    id: int
    date: date
    custom_price: Optional[Decimal] = None
    is_closed: bool
    reason: Optional[str] = None
    created_at: Optional[str] = None

    model_config = {"from_attributes": True}

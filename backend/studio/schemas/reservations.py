# backend/studio/schemas/reservations.py

from datetime import date
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field

from ..services.eligibility import ChangeAction


class EligibilityRequest(BaseModel):
    date: date
    action: ChangeAction
    status: str = "confirmed"
    reschedule_count: int = Field(default=0, ge=0)
    is_admin: bool = False

    model_config = {"from_attributes": True}


class EligibilityRead(BaseModel):
    action: ChangeAction
    allowed: bool
    business_days: int
    required_business_days: int
    reason: Optional[str] = None

    model_config = {"from_attributes": True}


class ReschedulePaymentIn(BaseModel):
    additional_payment_amount: Optional[Decimal] = Field(default=None, ge=0)
    additional_payment_method: Optional[str] = None

    model_config = {"from_attributes": True}


class RefundQuoteRequest(BaseModel):
    payment_method: Optional[str] = None
    original_price: Optional[Decimal] = Field(default=None, ge=0)
    history: list[ReschedulePaymentIn] = []

    model_config = {"from_attributes": True}


class RefundQuoteRead(BaseModel):
    total_card_paid: Decimal
    refund_amount: Decimal
    refund_percentage: Decimal

    model_config = {"from_attributes": True}


class RescheduleQuoteRequest(BaseModel):
    current_price: Decimal = Field(ge=0)
    new_date: date
    new_start_time: str

    model_config = {"from_attributes": True}


class RescheduleQuoteRead(BaseModel):
    new_date: date
    new_start_time: str
    new_end_time: str
    slot_available: bool
    current_price: Decimal
    new_price: Decimal
    requires_payment: bool
    additional_amount: Decimal

    model_config = {"from_attributes": True}

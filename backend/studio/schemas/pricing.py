# backend/studio/schemas/pricing.py

from datetime import date
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field

from ..services.calendar import DayType
from ..services.pricing import DiscountKind, LoyaltyLevel


class DayInfoRead(BaseModel):
    """Classification and base price of a single date."""
    date: date
    day_type: DayType
    base_price: Decimal
    custom_price: Optional[Decimal] = None
    is_holiday: bool
    is_pricing_weekend: bool
    is_business_day: bool
    is_closed: bool = False

    model_config = {"from_attributes": True}


class PriceQuoteRequest(BaseModel):
    """
    Price quote input.

    custom_price: omitted → looked up in date_overrides;
                  null    → tier price, no lookup;
                  value   → used as base price.
    """
    date: date
    custom_price: Optional[Decimal] = Field(default=None, ge=0)
    apply_last_minute: bool = True
    reservation_count: Optional[int] = Field(default=None, ge=0)
    is_first_reservation: bool = False
    loyalty_points: int = Field(default=0, ge=0)
    credits: Decimal = Field(default=Decimal("0"), ge=0)
    discount_code: Optional[str] = None
    email: Optional[str] = None

    model_config = {"from_attributes": True}


class AppliedDiscountRead(BaseModel):
    kind: DiscountKind
    amount: Decimal
    percentage: Optional[Decimal] = None
    details: dict = {}

    model_config = {"from_attributes": True}


class PriceQuoteRead(BaseModel):
    date: date
    day_type: DayType
    base_price: Decimal
    original_price: Decimal
    discounts: list[AppliedDiscountRead]
    final_price: Decimal
    total_discount: Decimal
    currency: str

    model_config = {"from_attributes": True}


class LoyaltyRead(BaseModel):
    confirmed_count: int
    level: LoyaltyLevel
    paid_amount: Optional[Decimal] = None
    points_to_grant: Optional[int] = None
    points_expire_on: Optional[date] = None

    model_config = {"from_attributes": True}

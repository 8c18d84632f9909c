# backend/studio/schemas/discount_codes.py

from datetime import date
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field


class DiscountCodeCreate(BaseModel):
    code: str
    discount_percentage: Decimal = Field(gt=0, le=100)
    valid_from: date
    valid_until: date
    max_uses: Optional[int] = Field(default=100, ge=0)
    active: bool = True
    description: Optional[str] = None

    model_config = {"from_attributes": True}


class DiscountCodeUpdate(BaseModel):
    discount_percentage: Optional[Decimal] = Field(default=None, gt=0, le=100)
    valid_from: Optional[date] = None
    valid_until: Optional[date] = None
    max_uses: Optional[int] = Field(default=None, ge=0)
    active: Optional[bool] = None
    description: Optional[str] = None

    model_config = {"from_attributes": True}


class DiscountCodeRead(BaseModel):
    id: int
    code: str
    discount_percentage: Decimal
    valid_from: date
    valid_until: date
    max_uses: Optional[int] = None
    current_uses: int
    active: bool
    description: Optional[str] = None
    created_at: Optional[str] = None

    model_config = {"from_attributes": True}


class DiscountCodeValidateRequest(BaseModel):
    code: str
    email: Optional[str] = None

    model_config = {"from_attributes": True}


class DiscountCodeValidateRead(BaseModel):
    valid: bool
    code: str
    description: Optional[str] = None
    discount_percentage: Decimal

    model_config = {"from_attributes": True}


class DiscountCodeRedeemRequest(BaseModel):
    email: str
    reservation_ref: Optional[str] = None

    model_config = {"from_attributes": True}

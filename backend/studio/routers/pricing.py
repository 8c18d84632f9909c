# backend/studio/routers/pricing.py
"""
Pricing API endpoints.

GET  /pricing/day     - Day type and base price for a date
POST /pricing/quote   - Full price with the discount breakdown
GET  /pricing/loyalty - Loyalty level and points earned for a payment
"""

import logging
from dataclasses import asdict
from datetime import date
from decimal import Decimal
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ..database import get_db
from ..dependencies import get_calendar, get_reference_date
from ..models import DateOverrides as DBDateOverride
from ..schemas.pricing import DayInfoRead, LoyaltyRead, PriceQuoteRead, PriceQuoteRequest
from ..services.calendar import (
    HolidayCalendar,
    classify_for_pricing,
    is_business_day,
    is_pricing_weekend,
)
from ..services.pricing import (
    PricingContext,
    calculate_base_price,
    find_applicable_code,
    loyalty_level,
    points_expiry,
    points_to_grant,
    quote_price,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/pricing", tags=["pricing"])


def _get_override(db: Session, target_date: date) -> Optional[DBDateOverride]:
    return db.query(DBDateOverride).filter(DBDateOverride.date == target_date).first()


@router.get("/day", response_model=DayInfoRead)
def get_day_info(
    target_date: date = Query(..., alias="date"),
    db: Session = Depends(get_db),
    calendar: HolidayCalendar = Depends(get_calendar),
):
    """Classification and base price of a date (custom price included)."""
    override = _get_override(db, target_date)
    custom_price = override.custom_price if override else None

    return DayInfoRead(
        date=target_date,
        day_type=classify_for_pricing(target_date, calendar),
        base_price=calculate_base_price(target_date, custom_price, calendar),
        custom_price=custom_price,
        is_holiday=calendar.is_holiday(target_date),
        is_pricing_weekend=is_pricing_weekend(target_date),
        is_business_day=is_business_day(target_date, calendar),
        is_closed=bool(override and override.is_closed),
    )


@router.post("/quote", response_model=PriceQuoteRead)
def create_quote(
    data: PriceQuoteRequest,
    db: Session = Depends(get_db),
    today: date = Depends(get_reference_date),
    calendar: HolidayCalendar = Depends(get_calendar),
):
    """Quote a booking: base price → code → last-minute → loyalty → referral → points → credits."""
    if "custom_price" in data.model_fields_set:
        custom_price = data.custom_price
    else:
        override = _get_override(db, data.date)
        custom_price = override.custom_price if override else None

    code = None
    code_percentage = None
    if data.discount_code and data.discount_code.strip():
        row, code_percentage = find_applicable_code(db, data.discount_code, today, data.email)
        code = row.code

    context = PricingContext(
        booking_date=data.date,
        today=today,
        apply_last_minute=data.apply_last_minute,
        reservation_count=data.reservation_count,
        is_first_reservation=data.is_first_reservation,
        loyalty_points=data.loyalty_points,
        credits=data.credits,
        discount_code=code,
        discount_code_percentage=code_percentage,
    )
    quote = quote_price(context, custom_price=custom_price, calendar=calendar)
    logger.info(
        f"Quote {data.date.isoformat()}: {quote.original_price} → {quote.final_price} "
        f"({', '.join(d.kind.value for d in quote.discounts) or 'no discounts'})"
    )

    return PriceQuoteRead(
        date=data.date,
        day_type=classify_for_pricing(data.date, calendar),
        base_price=quote.base_price,
        original_price=quote.original_price,
        discounts=[asdict(d) for d in quote.discounts],
        final_price=quote.final_price,
        total_discount=quote.total_discount,
        currency=quote.currency,
    )


@router.get("/loyalty", response_model=LoyaltyRead)
def get_loyalty(
    confirmed_count: int = Query(..., ge=0),
    paid_amount: Optional[Decimal] = Query(None, ge=0),
    today: date = Depends(get_reference_date),
):
    """Loyalty level; with paid_amount also the points earned and their expiry."""
    result = LoyaltyRead(confirmed_count=confirmed_count, level=loyalty_level(confirmed_count))
    if paid_amount is not None:
        result.paid_amount = paid_amount
        result.points_to_grant = points_to_grant(paid_amount)
        result.points_expire_on = points_expiry(today)
    return result

# backend/studio/routers/reservations.py
"""
Computations the reservation app needs before mutating a reservation.

Nothing here writes a reservation: the caller persists the results.
"""

from datetime import date, datetime

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from ..database import get_db
from ..dependencies import get_calendar, get_reference_date, get_reference_now
from ..models import DateOverrides as DBDateOverride
from ..schemas.reservations import (
    EligibilityRead,
    EligibilityRequest,
    RefundQuoteRead,
    RefundQuoteRequest,
    RescheduleQuoteRead,
    RescheduleQuoteRequest,
)
from ..services.calendar import HolidayCalendar
from ..services.eligibility import check_change_window
from ..services.pricing import (
    ReschedulePayment,
    calculate_base_price,
    calculate_refund_amount,
    get_pricing_config,
    quote_reschedule,
    total_card_paid,
)
from ..services.slots import calculate_day_availability, calculate_end_time, is_grid_slot, normalize_time

router = APIRouter(prefix="/reservations", tags=["reservations"])


@router.post("/eligibility", response_model=EligibilityRead)
def check_eligibility(
    data: EligibilityRequest,
    today: date = Depends(get_reference_date),
    calendar: HolidayCalendar = Depends(get_calendar),
):
    """Whether a reservation can still be cancelled / rescheduled."""
    return check_change_window(
        reservation_date=data.date,
        today=today,
        action=data.action,
        status=data.status,
        reschedule_count=data.reschedule_count,
        is_admin=data.is_admin,
        calendar=calendar,
    )


@router.post("/refund-quote", response_model=RefundQuoteRead)
def quote_refund(data: RefundQuoteRequest):
    """Refund for a cancellation: a share of what was paid by card."""
    config = get_pricing_config()
    history = [
        ReschedulePayment(
            additional_payment_amount=h.additional_payment_amount,
            additional_payment_method=h.additional_payment_method,
        )
        for h in data.history
    ]
    paid = total_card_paid(data.payment_method, data.original_price, history, config)

    return RefundQuoteRead(
        total_card_paid=paid,
        refund_amount=calculate_refund_amount(paid, config),
        refund_percentage=config.refund_percentage,
    )


@router.post("/reschedule-quote", response_model=RescheduleQuoteRead)
def quote_reschedule_endpoint(
    data: RescheduleQuoteRequest,
    db: Session = Depends(get_db),
    now: datetime = Depends(get_reference_now),
    calendar: HolidayCalendar = Depends(get_calendar),
):
    """Price difference for moving a reservation to a new slot."""
    start = normalize_time(data.new_start_time)
    if not is_grid_slot(data.new_date, start):
        raise HTTPException(status_code=400, detail=f"{start} is not a slot on {data.new_date.isoformat()}")

    statuses = calculate_day_availability(db, data.new_date, now)
    slot_available = any(s.start_time == start and s.is_available for s in statuses)

    override = db.query(DBDateOverride).filter(DBDateOverride.date == data.new_date).first()
    custom_price = override.custom_price if override else None
    new_price = calculate_base_price(data.new_date, custom_price, calendar)
    quote = quote_reschedule(data.current_price, new_price)

    return RescheduleQuoteRead(
        new_date=data.new_date,
        new_start_time=start,
        new_end_time=calculate_end_time(start),
        slot_available=slot_available,
        current_price=quote.current_price,
        new_price=quote.new_price,
        requires_payment=quote.requires_payment,
        additional_amount=quote.additional_amount,
    )

# backend/studio/routers/slots.py
"""
Slots API endpoints.

GET  /slots/day        - Grid for a day with availability per slot
GET  /slots/calendar   - Open-slot counts per day (cached in Redis)
POST /slots/invalidate - Drop cached days
"""

from dataclasses import asdict
from datetime import date, datetime

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from ..database import get_db
from ..dependencies import get_reference_now
from ..redis_client import get_availability_store
from ..schemas.slots import (
    SlotsCalendarResponse,
    SlotsDayResponse,
    SlotsDayStatus,
    SlotsInvalidateRequest,
)
from ..services.calendar import iter_dates
from ..services.slots import (
    AvailabilityRedisStore,
    calculate_calendar,
    calculate_day_availability,
    get_affected_dates,
    get_slot_config,
    invalidate_availability_cache,
)

router = APIRouter(prefix="/slots", tags=["slots"])


@router.get("/day", response_model=SlotsDayResponse)
def get_slots_day(
    target_date: date = Query(..., alias="date"),
    db: Session = Depends(get_db),
    now: datetime = Depends(get_reference_now),
):
    """Slots for a date; closed dates return no slots."""
    config = get_slot_config()

    today = now.date()
    max_date = config.max_booking_date(today)

    if target_date < today:
        raise HTTPException(status_code=400, detail="Date cannot be in the past")

    if target_date > max_date:
        raise HTTPException(status_code=400, detail=f"Date cannot be after {max_date.isoformat()} ({config.horizon_months} months ahead)")

    statuses = calculate_day_availability(db, target_date, now, config)

    return SlotsDayResponse(
        date=target_date,
        is_closed=not statuses,
        slots=[asdict(s) for s in statuses],
        open_slots_count=sum(1 for s in statuses if s.is_available),
    )


@router.get("/calendar", response_model=SlotsCalendarResponse)
def get_slots_calendar(
    start_date: date | None = None,
    end_date: date | None = None,
    db: Session = Depends(get_db),
    now: datetime = Depends(get_reference_now),
    store: AvailabilityRedisStore | None = Depends(get_availability_store),
):
    """Calendar of available days (heatmap)."""
    config = get_slot_config()

    today = now.date()
    if start_date is None:
        start_date = today
    max_date = config.max_booking_date(today)
    if end_date is None:
        end_date = max_date

    if start_date < today:
        start_date = today
    if end_date > max_date:
        end_date = max_date
    if end_date < start_date:
        end_date = start_date

    dates = iter_dates(start_date, end_date)
    counts = calculate_calendar(db, dates, now, store, config)

    days = [
        SlotsDayStatus(date=dt, has_slots=counts[dt] > 0, open_slots_count=counts[dt])
        for dt in dates
    ]

    return SlotsCalendarResponse(
        start_date=start_date,
        end_date=end_date,
        days=days,
        max_date=max_date,
        slot_step_minutes=config.slot_step_minutes,
        cached=store is not None,
    )


@router.post("/invalidate")
def invalidate_slots_cache(
    data: SlotsInvalidateRequest,
    store: AvailabilityRedisStore | None = Depends(get_availability_store),
):
    """Manually invalidate the availability cache (admin endpoint)."""
    dates = data.dates
    if dates is None and data.start_date and data.end_date:
        dates = get_affected_dates(data.start_date, data.end_date)
    elif dates is None and (data.start_date or data.end_date):
        raise HTTPException(status_code=400, detail="start_date and end_date must be given together")

    deleted = invalidate_availability_cache(store, dates)

    return {
        "deleted_keys": deleted,
        "dates": [d.isoformat() for d in dates] if dates is not None else "all",
    }

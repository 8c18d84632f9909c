# backend/studio/routers/occupied_slots.py
# PATCH = 405 (move = delete + create), DELETE = ALLOWED (hard)

import logging
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..database import get_db
from ..models import DateOverrides as DBDateOverrides
from ..models import OccupiedSlots as DBOccupiedSlots
from ..redis_client import get_availability_store
from ..schemas.occupied_slots import OccupiedSlotCreate, OccupiedSlotRead
from ..services.slots import (
    AvailabilityRedisStore,
    calculate_end_time,
    invalidate_availability_cache,
    is_grid_slot,
    normalize_time,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/occupied_slots", tags=["occupied_slots"])


@router.get("/", response_model=list[OccupiedSlotRead])
def list_occupied_slots(
    target_date: Optional[date] = None,
    db: Session = Depends(get_db),
):
    query = db.query(DBOccupiedSlots)
    if target_date is not None:
        query = query.filter(DBOccupiedSlots.date == target_date)
    return query.order_by(DBOccupiedSlots.date, DBOccupiedSlots.start_time).all()


@router.get("/{id}", response_model=OccupiedSlotRead)
def get_occupied_slot(id: int, db: Session = Depends(get_db)):
    obj = db.get(DBOccupiedSlots, id)
    if not obj:
        raise HTTPException(status_code=404, detail="Not found")
    return obj


@router.post(
    "/", response_model=OccupiedSlotRead, status_code=status.HTTP_201_CREATED
)
def create_occupied_slot(
    data: OccupiedSlotCreate,
    db: Session = Depends(get_db),
    store: AvailabilityRedisStore | None = Depends(get_availability_store),
):
    start = normalize_time(data.start_time)
    if not is_grid_slot(data.date, start):
        raise HTTPException(status_code=400, detail=f"{start} is not a slot on {data.date.isoformat()}")

    closed = (
        db.query(DBDateOverrides.id)
        .filter(DBDateOverrides.date == data.date, DBDateOverrides.is_closed == 1)
        .first()
    )
    if closed:
        raise HTTPException(status_code=400, detail=f"Studio is closed on {data.date.isoformat()}")

    obj = DBOccupiedSlots(
        date=data.date,
        start_time=start,
        end_time=calculate_end_time(start),
        reservation_ref=data.reservation_ref,
    )
    db.add(obj)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=409, detail="Slot already occupied")
    db.refresh(obj)

    invalidate_availability_cache(store, [obj.date])
    logger.info(f"Slot occupied: {obj.date.isoformat()} {obj.start_time} ({obj.reservation_ref or '-'})")
    return obj


@router.patch("/{id}")
def patch_not_allowed():
    raise HTTPException(
        status_code=status.HTTP_405_METHOD_NOT_ALLOWED,
        detail="Method not allowed",
    )


@router.delete("/{id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_occupied_slot(
    id: int,
    db: Session = Depends(get_db),
    store: AvailabilityRedisStore | None = Depends(get_availability_store),
):
    obj = db.get(DBOccupiedSlots, id)
    if not obj:
        raise HTTPException(status_code=404, detail="Not found")
    slot_date = obj.date
    db.delete(obj)
    db.commit()

    invalidate_availability_cache(store, [slot_date])
    logger.info(f"Slot released: {slot_date.isoformat()}")

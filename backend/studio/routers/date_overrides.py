# backend/studio/routers/date_overrides.py
# PATCH = ALLOWED (date is immutable), DELETE = ALLOWED (hard)

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..database import get_db
from ..models import DateOverrides as DBDateOverrides
from ..redis_client import get_availability_store
from ..schemas.date_overrides import (
    DateOverrideCreate,
    DateOverrideUpdate,
    DateOverrideRead,
)
from ..services.slots import AvailabilityRedisStore, invalidate_availability_cache

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/date_overrides", tags=["date_overrides"])


def _to_columns(values: dict) -> dict:
    if values.get("custom_price") is not None:
        values["custom_price"] = float(values["custom_price"])
    if values.get("is_closed") is not None:
        values["is_closed"] = int(values["is_closed"])
    return values


@router.get("/", response_model=list[DateOverrideRead])
def list_date_overrides(db: Session = Depends(get_db)):
    return db.query(DBDateOverrides).order_by(DBDateOverrides.date).all()


@router.get("/{id}", response_model=DateOverrideRead)
def get_date_override(id: int, db: Session = Depends(get_db)):
    obj = db.get(DBDateOverrides, id)
    if not obj:
        raise HTTPException(status_code=404, detail="Not found")
    return obj


@router.post(
    "/", response_model=DateOverrideRead, status_code=status.HTTP_201_CREATED
)
def create_date_override(
    data: DateOverrideCreate,
    db: Session = Depends(get_db),
    store: AvailabilityRedisStore | None = Depends(get_availability_store),
):
    obj = DBDateOverrides(**_to_columns(data.model_dump()))
    db.add(obj)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=409, detail=f"Override for {data.date.isoformat()} already exists")
    db.refresh(obj)

    invalidate_availability_cache(store, [obj.date])
    logger.info(f"Date override created for {obj.date.isoformat()} (closed={bool(obj.is_closed)})")
    return obj


@router.patch("/{id}", response_model=DateOverrideRead)
def update_date_override(
    id: int,
    data: DateOverrideUpdate,
    db: Session = Depends(get_db),
    store: AvailabilityRedisStore | None = Depends(get_availability_store),
):
    obj = db.get(DBDateOverrides, id)
    if not obj:
        raise HTTPException(status_code=404, detail="Not found")

    for field, value in _to_columns(data.model_dump(exclude_unset=True)).items():
        setattr(obj, field, value)

    db.commit()
    db.refresh(obj)

    invalidate_availability_cache(store, [obj.date])
    return obj


@router.delete("/{id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_date_override(
    id: int,
    db: Session = Depends(get_db),
    store: AvailabilityRedisStore | None = Depends(get_availability_store),
):
    obj = db.get(DBDateOverrides, id)
    if not obj:
        raise HTTPException(status_code=404, detail="Not found")
    override_date = obj.date
    db.delete(obj)
    db.commit()

    invalidate_availability_cache(store, [override_date])
    logger.info(f"Date override removed for {override_date.isoformat()}")

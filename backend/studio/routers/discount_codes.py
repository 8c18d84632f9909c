# backend/studio/routers/discount_codes.py
# PATCH = ALLOWED (code is immutable), DELETE = ALLOWED (hard, uses cascade)

import logging
from datetime import date

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..database import get_db
from ..dependencies import get_reference_date
from ..errors import DiscountCodeError
from ..models import DiscountCodes as DBDiscountCodes
from ..schemas.discount_codes import (
    DiscountCodeCreate,
    DiscountCodeUpdate,
    DiscountCodeRead,
    DiscountCodeRedeemRequest,
    DiscountCodeValidateRequest,
    DiscountCodeValidateRead,
)
from ..services.pricing import (
    find_applicable_code,
    normalize_code,
    normalize_email,
    redeem_discount_code,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/discount_codes", tags=["discount_codes"])


def _to_columns(values: dict) -> dict:
    if values.get("discount_percentage") is not None:
        values["discount_percentage"] = float(values["discount_percentage"])
    if values.get("active") is not None:
        values["active"] = int(values["active"])
    return values


def _check_period(valid_from: date, valid_until: date):
    if valid_until < valid_from:
        raise HTTPException(status_code=400, detail="valid_until must not be before valid_from")


@router.get("/", response_model=list[DiscountCodeRead])
def list_discount_codes(db: Session = Depends(get_db)):
    return db.query(DBDiscountCodes).order_by(DBDiscountCodes.id).all()


@router.get("/{id}", response_model=DiscountCodeRead)
def get_discount_code(id: int, db: Session = Depends(get_db)):
    obj = db.get(DBDiscountCodes, id)
    if not obj:
        raise HTTPException(status_code=404, detail="Not found")
    return obj


@router.post(
    "/", response_model=DiscountCodeRead, status_code=status.HTTP_201_CREATED
)
def create_discount_code(
    data: DiscountCodeCreate,
    db: Session = Depends(get_db),
):
    _check_period(data.valid_from, data.valid_until)

    values = _to_columns(data.model_dump())
    values["code"] = normalize_code(data.code)
    obj = DBDiscountCodes(**values)
    db.add(obj)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=409, detail=f"Discount code {values['code']} already exists")
    db.refresh(obj)

    logger.info(f"Discount code {obj.code} created ({obj.discount_percentage}%)")
    return obj


@router.patch("/{id}", response_model=DiscountCodeRead)
def update_discount_code(
    id: int,
    data: DiscountCodeUpdate,
    db: Session = Depends(get_db),
):
    obj = db.get(DBDiscountCodes, id)
    if not obj:
        raise HTTPException(status_code=404, detail="Not found")

    for field, value in _to_columns(data.model_dump(exclude_unset=True)).items():
        setattr(obj, field, value)
    _check_period(obj.valid_from, obj.valid_until)

    db.commit()
    db.refresh(obj)
    return obj


@router.delete("/{id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_discount_code(id: int, db: Session = Depends(get_db)):
    obj = db.get(DBDiscountCodes, id)
    if not obj:
        raise HTTPException(status_code=404, detail="Not found")
    db.delete(obj)
    db.commit()


@router.post("/validate", response_model=DiscountCodeValidateRead)
def validate_code(
    data: DiscountCodeValidateRequest,
    db: Session = Depends(get_db),
    today: date = Depends(get_reference_date),
):
    """Check a code for a client; failures come back through the StudioError handler."""
    row, percentage = find_applicable_code(db, data.code, today, data.email)
    return DiscountCodeValidateRead(
        valid=True,
        code=row.code,
        description=row.description,
        discount_percentage=percentage,
    )


@router.post("/{id}/redeem", response_model=DiscountCodeRead)
def redeem_code(
    id: int,
    data: DiscountCodeRedeemRequest,
    db: Session = Depends(get_db),
    today: date = Depends(get_reference_date),
):
    """Record a use of the code by an email once the reservation is confirmed."""
    obj = db.get(DBDiscountCodes, id)
    if not obj:
        raise HTTPException(status_code=404, detail="Not found")

    email = normalize_email(data.email)
    if email is None:
        raise HTTPException(status_code=400, detail="email is required")

    find_applicable_code(db, obj.code, today, email)

    try:
        redeem_discount_code(db, obj, email, data.reservation_ref)
        db.commit()
    except DiscountCodeError as e:
        db.rollback()
        raise HTTPException(status_code=409, detail=str(e))
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=409, detail=f"Discount code {obj.code} was already used with this email")
    db.refresh(obj)

    logger.info(f"Discount code {obj.code} redeemed by {email} ({obj.current_uses}/{obj.max_uses})")
    return obj

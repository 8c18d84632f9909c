# backend/studio/services/pricing/codes.py
"""
Promotional discount codes.

A code is usable when it is active, today is within [valid_from, valid_until],
it has uses left, and the client's email has not used it before.
"""

import re
from datetime import date
from decimal import Decimal

from ...errors import DiscountCodeError

ZEROS_ONLY = re.compile(r"^0+$")


def normalize_code(code) -> str:
    """Trim and upper-case. Blank and all-zero codes are rejected."""
    if not isinstance(code, str) or not code.strip():
        raise DiscountCodeError("Discount code is required", reason="missing")
    normalized = code.strip().upper()
    if ZEROS_ONLY.match(normalized):
        raise DiscountCodeError(f"Invalid discount code {code!r}", reason="invalid")
    return normalized


def normalize_email(email) -> str | None:
    if not email or not str(email).strip():
        return None
    return str(email).strip().lower()


def validate_discount_code(code, today: date, already_used: bool = False) -> Decimal:
    """
    Check a stored code record and return its discount percentage.

    `code` is any object with active / valid_from / valid_until /
    max_uses / current_uses / discount_percentage attributes.
    """
    if not code.active:
        raise DiscountCodeError(f"Discount code {code.code} is not active", reason="inactive")
    if today < code.valid_from:
        raise DiscountCodeError(
            f"Discount code {code.code} is valid from {code.valid_from.isoformat()}",
            reason="not_started",
        )
    if today > code.valid_until:
        raise DiscountCodeError(f"Discount code {code.code} has expired", reason="expired")
    if code.max_uses is not None and (code.current_uses or 0) >= code.max_uses:
        raise DiscountCodeError(f"Discount code {code.code} has reached its usage limit", reason="exhausted")
    if already_used:
        raise DiscountCodeError(f"Discount code {code.code} was already used with this email", reason="already_used")

    percentage = Decimal(str(code.discount_percentage))
    if not Decimal("0") < percentage <= Decimal("100"):
        raise DiscountCodeError(f"Discount code {code.code} has an invalid percentage", reason="invalid")
    return percentage


def find_applicable_code(db, code, today: date, email=None):
    """
    Load a code by its normalized value and validate it for `email`.

    Returns:
        (row, discount_percentage)
    """
    from ...models import DiscountCodeUses, DiscountCodes

    normalized = normalize_code(code)
    row = db.query(DiscountCodes).filter(DiscountCodes.code == normalized).first()
    if row is None:
        raise DiscountCodeError(f"Discount code {normalized} does not exist", reason="not_found")

    already_used = False
    email = normalize_email(email)
    if email:
        already_used = (
            db.query(DiscountCodeUses.id)
            .filter(
                DiscountCodeUses.discount_code_id == row.id,
                DiscountCodeUses.email == email,
            )
            .first()
            is not None
        )

    return row, validate_discount_code(row, today, already_used)


def redeem_discount_code(db, row, email: str, reservation_ref=None):
    """
    Count one use of `row` and record it for `email`. The caller commits.

    The counter moves in a single conditional UPDATE, so two redemptions racing
    for the last use cannot both succeed whatever state each session loaded.
    """
    from sqlalchemy import or_, update

    from ...models import DiscountCodeUses, DiscountCodes

    result = db.execute(
        update(DiscountCodes)
        .where(
            DiscountCodes.id == row.id,
            DiscountCodes.active == 1,
            or_(
                DiscountCodes.max_uses.is_(None),
                DiscountCodes.current_uses < DiscountCodes.max_uses,
            ),
        )
        .values(current_uses=DiscountCodes.current_uses + 1)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        raise DiscountCodeError(f"Discount code {row.code} has reached its usage limit", reason="exhausted")

    db.add(DiscountCodeUses(
        discount_code_id=row.id,
        email=email,
        reservation_ref=reservation_ref,
    ))

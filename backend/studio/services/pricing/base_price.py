# backend/studio/services/pricing/base_price.py
"""
Base price for a date.

  custom_price given (0 included) → used as is
  otherwise                       → tier default by day type
"""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from ..calendar import classify_for_pricing, parse_date
from .config import PricingConfig, ZERO, get_pricing_config, to_money


def calculate_base_price(
    target_date: date,
    custom_price=None,
    calendar=None,
    config: PricingConfig | None = None,
) -> Decimal:
    """Return the override unchanged if present, otherwise the tier price."""
    target_date = parse_date(target_date)
    if custom_price is not None:
        return to_money(custom_price, "custom_price")

    config = config or get_pricing_config()
    day_type = classify_for_pricing(target_date, calendar)
    return config.price_for(day_type)


@dataclass(frozen=True)
class RescheduleQuote:
    current_price: Decimal
    new_price: Decimal
    requires_payment: bool
    additional_amount: Decimal


def quote_reschedule(current_price, new_price) -> RescheduleQuote:
    """
    Compare the price already paid with the price of the new date.

    Cheaper dates are not refunded: additional_amount is never negative.
    """
    current = to_money(current_price, "current_price")
    new = to_money(new_price, "new_price")
    additional = new - current if new > current else ZERO
    return RescheduleQuote(
        current_price=current,
        new_price=new,
        requires_payment=additional > 0,
        additional_amount=additional,
    )

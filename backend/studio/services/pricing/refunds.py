# backend/studio/services/pricing/refunds.py
"""
Refund amounts for cancelled reservations.

Only what was paid by card is refundable: the initial payment when the
reservation itself was paid by card, plus every additional reschedule
payment made by card. 80% of that total is returned.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable, Optional

from .config import ZERO, PricingConfig, get_pricing_config, round_money, to_money


@dataclass(frozen=True)
class ReschedulePayment:
    """One row of a reservation's reschedule history."""
    additional_payment_amount: Optional[Decimal] = None
    additional_payment_method: Optional[str] = None


def calculate_total_paid(price, additional_payment_amount=None) -> Decimal:
    total = to_money(price, "price")
    if additional_payment_amount:
        total += to_money(additional_payment_amount, "additional_payment_amount")
    return total


def calculate_refund_amount(total_paid, config: PricingConfig | None = None) -> Decimal:
    config = config or get_pricing_config()
    return round_money(to_money(total_paid, "total_paid") * config.refund_percentage)


def _is_card(method: Optional[str], config: PricingConfig) -> bool:
    return (method or "").strip().lower() == config.card_payment_method


def total_card_paid(
    payment_method: Optional[str],
    original_price,
    history: Iterable[ReschedulePayment] = (),
    config: PricingConfig | None = None,
) -> Decimal:
    """
    Sum of card payments for a reservation.

    original_price may be None for legacy reservations (counts as 0).
    """
    config = config or get_pricing_config()

    total = ZERO
    if _is_card(payment_method, config) and original_price is not None:
        total += to_money(original_price, "original_price")

    for entry in history or ():
        if _is_card(entry.additional_payment_method, config) and entry.additional_payment_amount:
            total += to_money(entry.additional_payment_amount, "additional_payment_amount")

    return total

# backend/studio/services/pricing/loyalty.py
"""
Loyalty program: levels and point earning.

Redemption value lives in discounts.points_discount.
"""

from datetime import date
from enum import Enum

from ...errors import InvalidAmountError
from .config import PricingConfig, get_pricing_config, to_money


class LoyaltyLevel(str, Enum):
    INITIAL = "initial"
    FREQUENT = "frequent"
    VIP = "vip"
    ELITE = "elite"


# (min confirmed reservations, level), checked top-down
LEVEL_THRESHOLDS = (
    (10, LoyaltyLevel.ELITE),
    (5, LoyaltyLevel.VIP),
    (1, LoyaltyLevel.FREQUENT),
)


def loyalty_level(confirmed_count: int) -> LoyaltyLevel:
    if confirmed_count < 0:
        raise InvalidAmountError(f"confirmed_count must be non-negative, got {confirmed_count}")
    for min_count, level in LEVEL_THRESHOLDS:
        if confirmed_count >= min_count:
            return level
    return LoyaltyLevel.INITIAL


def points_to_grant(price, config: PricingConfig | None = None) -> int:
    """1 point per `points_earn_divisor` currency units actually paid."""
    config = config or get_pricing_config()
    amount = to_money(price, "price")
    return int(amount // config.points_earn_divisor)


def points_expiry(granted_on: date) -> date:
    """Points expire one year after they are granted (Feb 29 → Feb 28)."""
    try:
        return granted_on.replace(year=granted_on.year + 1)
    except ValueError:
        return granted_on.replace(year=granted_on.year + 1, day=28)

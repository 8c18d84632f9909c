# backend/studio/services/pricing/config.py
"""
Pricing configuration and money helpers.
"""

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from functools import lru_cache

from ...errors import InvalidAmountError
from ..calendar import DayType

ZERO = Decimal("0")
CENT = Decimal("0.01")
HUNDRED = Decimal("100")


@dataclass(frozen=True)
class PricingConfig:
    """
    Prices, discount rates and policy constants.

    Attributes:
        normal_price / weekend_price / holiday_price: tier defaults (MXN)
        last_minute_percent: discount when booking inside the window
        last_minute_window_days: window length in days, today included (4 → 0..3)
        loyalty_tiers: (min_prior_reservations, percent), checked top-down
        referral_percent: first reservation of a referred client
        points_block: points are redeemed in whole blocks of this size
        points_block_value: currency value of one block
        points_earn_divisor: 1 point per this many currency units paid
        refund_percentage: share of card payments returned on cancellation
        card_payment_method: payment method whose amounts are refundable
        min_business_days_for_change: cancel/reschedule notice
        max_reschedules: reschedules allowed per reservation
    """
    normal_price: Decimal = Decimal("1500")
    weekend_price: Decimal = Decimal("1800")
    holiday_price: Decimal = Decimal("2000")
    currency: str = "MXN"

    last_minute_percent: Decimal = Decimal("15")
    last_minute_window_days: int = 4
    loyalty_tiers: tuple[tuple[int, Decimal], ...] = (
        (4, Decimal("15")),
        (3, Decimal("10")),
        (2, Decimal("5")),
    )
    referral_percent: Decimal = Decimal("10")

    points_block: int = 100
    points_block_value: Decimal = Decimal("100")
    points_earn_divisor: int = 10

    refund_percentage: Decimal = Decimal("0.8")
    card_payment_method: str = "conekta"

    min_business_days_for_change: int = 5
    max_reschedules: int = 1

    def __post_init__(self):
        """Validate configuration."""
        for name in ("normal_price", "weekend_price", "holiday_price"):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must be non-negative")
        for name in ("last_minute_percent", "referral_percent"):
            if not ZERO <= getattr(self, name) <= HUNDRED:
                raise ValueError(f"{name} must be within 0..100")
        if self.last_minute_window_days < 0:
            raise ValueError("last_minute_window_days must be non-negative")
        if self.points_block <= 0 or self.points_earn_divisor <= 0:
            raise ValueError("points_block and points_earn_divisor must be positive")
        if not ZERO <= self.refund_percentage <= 1:
            raise ValueError("refund_percentage must be within 0..1")

    def price_for(self, day_type: DayType) -> Decimal:
        """Tier default for a day type."""
        return {
            DayType.NORMAL: self.normal_price,
            DayType.WEEKEND: self.weekend_price,
            DayType.HOLIDAY: self.holiday_price,
        }[day_type]


@lru_cache
def get_pricing_config() -> PricingConfig:
    """Get pricing configuration (singleton)."""
    return PricingConfig()


def to_money(value, field: str = "amount") -> Decimal:
    """
    Convert int/float/str/Decimal to a non-negative Decimal.

    Floats go through str() so 0.1 stays 0.1.
    """
    if isinstance(value, bool):
        raise InvalidAmountError(f"{field} must be a number, got bool")
    if isinstance(value, float):
        value = str(value)
    try:
        amount = Decimal(value)
    except (InvalidOperation, TypeError, ValueError) as e:
        raise InvalidAmountError(f"{field} is not a valid amount: {value!r}") from e
    if not amount.is_finite():
        raise InvalidAmountError(f"{field} must be finite, got {value!r}")
    if amount < 0:
        raise InvalidAmountError(f"{field} must be non-negative, got {amount}")
    return amount


def round_money(amount: Decimal) -> Decimal:
    """Round to cents, half up."""
    return amount.quantize(CENT, rounding=ROUND_HALF_UP)


def percent_of(amount: Decimal, percent: Decimal) -> Decimal:
    return round_money(amount * percent / HUNDRED)

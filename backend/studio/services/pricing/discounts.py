# backend/studio/services/pricing/discounts.py
"""
Discount engine.

Discounts are an ordered pipeline of steps. Each step looks at the running
price left by the previous one and may produce one AppliedDiscount:

  1. discount code   percent of the base price (promo codes)
  2. last-minute     15% when the session is 0..3 days away
  3. loyalty tier    5% / 10% / 15% by prior reservations (2 / 3 / 4+)
  4. referral        10% on the first reservation, never together with a code
  5. points          whole blocks of 100 points, 100 points = $100
  6. credits         flat amount

The running price is clamped at 0 after every step, so the final price is
never negative and total_discount == original_price - final_price.
"""

import logging
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Optional, Sequence

from ...errors import InvalidAmountError
from ..calendar import parse_date
from .base_price import calculate_base_price
from .config import (
    HUNDRED,
    ZERO,
    PricingConfig,
    get_pricing_config,
    percent_of,
    round_money,
    to_money,
)

logger = logging.getLogger(__name__)


class DiscountKind(str, Enum):
    DISCOUNT_CODE = "discount_code"
    LAST_MINUTE = "last_minute"
    LOYALTY = "loyalty"
    REFERRAL = "referral"
    LOYALTY_POINTS = "loyalty_points"
    CREDITS = "credits"


@dataclass(frozen=True)
class AppliedDiscount:
    kind: DiscountKind
    amount: Decimal
    percentage: Optional[Decimal] = None
    details: dict = field(default_factory=dict)


@dataclass(frozen=True)
class PricingContext:
    """
    Everything the pipeline needs besides the base price.

    reservation_count=None skips the loyalty step entirely;
    apply_last_minute=False disables the last-minute step.
    """
    booking_date: date
    today: date
    apply_last_minute: bool = True
    reservation_count: Optional[int] = None
    is_first_reservation: bool = False
    loyalty_points: int = 0
    credits: Decimal = ZERO
    discount_code: Optional[str] = None
    discount_code_percentage: Optional[Decimal] = None

    def __post_init__(self):
        object.__setattr__(self, "booking_date", parse_date(self.booking_date))
        object.__setattr__(self, "today", parse_date(self.today))

        if self.reservation_count is not None and self.reservation_count < 0:
            raise InvalidAmountError(f"reservation_count must be non-negative, got {self.reservation_count}")
        if self.loyalty_points < 0:
            raise InvalidAmountError(f"loyalty_points must be non-negative, got {self.loyalty_points}")

        object.__setattr__(self, "credits", to_money(self.credits, "credits"))

        if self.discount_code_percentage is not None:
            pct = to_money(self.discount_code_percentage, "discount_code_percentage")
            if pct > HUNDRED:
                raise InvalidAmountError(f"discount_code_percentage must be within 0..100, got {pct}")
            object.__setattr__(self, "discount_code_percentage", pct)

    @property
    def days_until(self) -> int:
        return (self.booking_date - self.today).days


@dataclass
class PipelineState:
    base_price: Decimal
    running: Decimal
    config: PricingConfig
    discounts: list[AppliedDiscount] = field(default_factory=list)

    def has(self, kind: DiscountKind) -> bool:
        return any(d.kind == kind for d in self.discounts)


@dataclass(frozen=True)
class PriceQuote:
    base_price: Decimal
    original_price: Decimal
    discounts: list[AppliedDiscount]
    final_price: Decimal
    total_discount: Decimal
    currency: str = "MXN"

    def discount(self, kind: DiscountKind) -> Optional[AppliedDiscount]:
        for d in self.discounts:
            if d.kind == kind:
                return d
        return None


# ── Independent computations ─────────────────────────────────────────────


def last_minute_discount(
    booking_date: date,
    today: date,
    price: Decimal,
    config: PricingConfig | None = None,
) -> Decimal:
    """Discount amount if booking_date is 0..window-1 days from today, else 0."""
    config = config or get_pricing_config()
    days_until = (booking_date - today).days
    if 0 <= days_until < config.last_minute_window_days:
        return percent_of(price, config.last_minute_percent)
    return ZERO


def loyalty_discount_percentage(reservation_count: int, config: PricingConfig | None = None) -> Decimal:
    """2 → 5%, 3 → 10%, 4+ → 15%, otherwise 0%."""
    config = config or get_pricing_config()
    for min_count, percent in config.loyalty_tiers:
        if reservation_count >= min_count:
            return percent
    return ZERO


def referral_discount(is_first_reservation: bool, price: Decimal, config: PricingConfig | None = None) -> Decimal:
    config = config or get_pricing_config()
    if not is_first_reservation:
        return ZERO
    return percent_of(price, config.referral_percent)


def points_discount(points: Optional[int], config: PricingConfig | None = None) -> Decimal:
    """Value of the whole point blocks in `points` (250 → 200)."""
    config = config or get_pricing_config()
    if not points or points <= 0:
        return ZERO
    blocks = int(points) // config.points_block
    return blocks * config.points_block_value


# ── Pipeline steps ───────────────────────────────────────────────────────


class DiscountStep:
    """One stage of the pipeline. Returns None when it does not apply."""

    kind: DiscountKind

    def compute(self, context: PricingContext, state: PipelineState) -> Optional[AppliedDiscount]:
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class DiscountCodeStep(DiscountStep):
    kind = DiscountKind.DISCOUNT_CODE

    def compute(self, context, state):
        pct = context.discount_code_percentage
        if not pct:
            return None
        return AppliedDiscount(
            kind=self.kind,
            amount=percent_of(state.base_price, pct),
            percentage=pct,
            details={"code": context.discount_code},
        )


class LastMinuteStep(DiscountStep):
    kind = DiscountKind.LAST_MINUTE

    def compute(self, context, state):
        if not context.apply_last_minute:
            return None
        amount = last_minute_discount(context.booking_date, context.today, state.running, state.config)
        if amount <= 0:
            return None
        return AppliedDiscount(
            kind=self.kind,
            amount=amount,
            percentage=state.config.last_minute_percent,
            details={"days_until": context.days_until},
        )


class LoyaltyTierStep(DiscountStep):
    kind = DiscountKind.LOYALTY

    def compute(self, context, state):
        if context.reservation_count is None:
            return None
        pct = loyalty_discount_percentage(context.reservation_count, state.config)
        if pct <= 0:
            return None
        return AppliedDiscount(
            kind=self.kind,
            amount=percent_of(state.running, pct),
            percentage=pct,
            details={"reservation_count": context.reservation_count},
        )


class ReferralStep(DiscountStep):
    kind = DiscountKind.REFERRAL

    def compute(self, context, state):
        # referral and promo code do not combine
        if state.has(DiscountKind.DISCOUNT_CODE):
            return None
        amount = referral_discount(context.is_first_reservation, state.running, state.config)
        if amount <= 0:
            return None
        return AppliedDiscount(
            kind=self.kind,
            amount=amount,
            percentage=state.config.referral_percent,
        )


class PointsRedemptionStep(DiscountStep):
    kind = DiscountKind.LOYALTY_POINTS

    def compute(self, context, state):
        requested = points_discount(context.loyalty_points, state.config)
        if requested <= 0:
            return None
        blocks = context.loyalty_points // state.config.points_block
        return AppliedDiscount(
            kind=self.kind,
            amount=min(requested, state.running),
            details={
                "points": context.loyalty_points,
                "points_redeemed": blocks * state.config.points_block,
                "requested_amount": requested,
            },
        )


class CreditsStep(DiscountStep):
    kind = DiscountKind.CREDITS

    def compute(self, context, state):
        if context.credits <= 0:
            return None
        return AppliedDiscount(
            kind=self.kind,
            amount=min(round_money(context.credits), state.running),
            details={"requested_amount": context.credits},
        )


DEFAULT_PIPELINE: tuple[DiscountStep, ...] = (
    DiscountCodeStep(),
    LastMinuteStep(),
    LoyaltyTierStep(),
    ReferralStep(),
    PointsRedemptionStep(),
    CreditsStep(),
)


# ── Orchestration ────────────────────────────────────────────────────────


def apply_discounts(
    base_price,
    context: PricingContext,
    steps: Sequence[DiscountStep] | None = None,
    config: PricingConfig | None = None,
) -> PriceQuote:
    """Run the pipeline over base_price and return the full breakdown."""
    config = config or get_pricing_config()
    steps = DEFAULT_PIPELINE if steps is None else steps
    base = to_money(base_price, "base_price")

    state = PipelineState(base_price=base, running=base, config=config)
    for step in steps:
        applied = step.compute(context, state)
        if applied is None:
            continue
        state.running = max(ZERO, state.running - applied.amount)
        state.discounts.append(applied)
        logger.debug(f"{applied.kind.value}: -{applied.amount} → {state.running}")

    return PriceQuote(
        base_price=base,
        original_price=base,
        discounts=list(state.discounts),
        final_price=state.running,
        total_discount=base - state.running,
        currency=config.currency,
    )


def quote_price(
    context: PricingContext,
    custom_price=None,
    calendar=None,
    config: PricingConfig | None = None,
    steps: Sequence[DiscountStep] | None = None,
) -> PriceQuote:
    """Base price for context.booking_date followed by the discount pipeline."""
    config = config or get_pricing_config()
    base = calculate_base_price(context.booking_date, custom_price, calendar, config)
    return apply_discounts(base, context, steps, config)

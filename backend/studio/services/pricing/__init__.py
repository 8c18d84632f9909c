# backend/studio/services/pricing/__init__.py
"""
Pricing module.

Base price by day type → ordered discount pipeline → final price.
Also refunds, reschedule price difference, loyalty and promo codes.
"""

from .config import PricingConfig, get_pricing_config, to_money, round_money
from .base_price import calculate_base_price, quote_reschedule, RescheduleQuote
from .discounts import (
    DiscountKind,
    AppliedDiscount,
    PricingContext,
    PriceQuote,
    DiscountStep,
    DEFAULT_PIPELINE,
    apply_discounts,
    quote_price,
    last_minute_discount,
    loyalty_discount_percentage,
    referral_discount,
    points_discount,
)
from .loyalty import LoyaltyLevel, loyalty_level, points_to_grant, points_expiry
from .refunds import ReschedulePayment, calculate_refund_amount, calculate_total_paid, total_card_paid
from .codes import (
    normalize_code,
    normalize_email,
    validate_discount_code,
    find_applicable_code,
    redeem_discount_code,
)

__all__ = [
    "PricingConfig",
    "get_pricing_config",
    "to_money",
    "round_money",
    "calculate_base_price",
    "quote_reschedule",
    "RescheduleQuote",
    "DiscountKind",
    "AppliedDiscount",
    "PricingContext",
    "PriceQuote",
    "DiscountStep",
    "DEFAULT_PIPELINE",
    "apply_discounts",
    "quote_price",
    "last_minute_discount",
    "loyalty_discount_percentage",
    "referral_discount",
    "points_discount",
    "LoyaltyLevel",
    "loyalty_level",
    "points_to_grant",
    "points_expiry",
    "ReschedulePayment",
    "calculate_refund_amount",
    "calculate_total_paid",
    "total_card_paid",
    "normalize_code",
    "normalize_email",
    "validate_discount_code",
    "find_applicable_code",
    "redeem_discount_code",
]

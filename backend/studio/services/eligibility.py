# backend/studio/services/eligibility.py
"""
Cancellation / reschedule eligibility.

Business days are counted from tomorrow through the reservation date.
  cancel      ≥ 5 business days (admins: always)
  reschedule  ≥ 5 business days and not rescheduled before
Only confirmed reservations can be changed.
"""

import logging
from dataclasses import dataclass
from datetime import date, timedelta
from enum import Enum
from typing import Optional

from ..errors import InvalidAmountError
from .calendar import business_days_between, parse_date
from .pricing import PricingConfig, get_pricing_config

logger = logging.getLogger(__name__)


class ChangeAction(str, Enum):
    CANCEL = "cancel"
    RESCHEDULE = "reschedule"


CONFIRMED = "confirmed"


@dataclass(frozen=True)
class ChangeEligibility:
    action: ChangeAction
    allowed: bool
    business_days: int
    required_business_days: int
    reason: Optional[str] = None


def check_change_window(
    reservation_date: date,
    today: date,
    action: ChangeAction,
    status: str = CONFIRMED,
    reschedule_count: int = 0,
    is_admin: bool = False,
    calendar=None,
    config: PricingConfig | None = None,
) -> ChangeEligibility:
    config = config or get_pricing_config()
    reservation_date, today = parse_date(reservation_date), parse_date(today)
    action = ChangeAction(action)
    if reschedule_count < 0:
        raise InvalidAmountError(f"reschedule_count must be non-negative, got {reschedule_count}")

    required = config.min_business_days_for_change
    days = business_days_between(today + timedelta(days=1), reservation_date, calendar)

    def result(allowed: bool, reason: Optional[str] = None) -> ChangeEligibility:
        if not allowed:
            logger.warning(f"{action.value} refused for {reservation_date.isoformat()}: {reason}")
        return ChangeEligibility(
            action=action,
            allowed=allowed,
            business_days=days,
            required_business_days=required,
            reason=reason,
        )

    if status != CONFIRMED:
        return result(False, "not_confirmed")

    if action == ChangeAction.RESCHEDULE and reschedule_count >= config.max_reschedules:
        return result(False, "reschedule_limit_reached")

    if action == ChangeAction.CANCEL and is_admin:
        return result(True)

    if days < required:
        return result(False, "too_close")

    return result(True)

# backend/studio/services/calendar/day_types.py
"""
Day classification.

Two different "weekend" sets coexist and are kept apart on purpose:

  pricing weekend       Fri / Sat / Sun   → weekend surcharge
  non-business weekend  Sat / Sun         → cancellation/reschedule windows
"""

import re
from datetime import date, datetime
from enum import Enum

from ...errors import InvalidDateError

DATE_REGEX = re.compile(r"^\d{4}-\d{2}-\d{2}$")

# date.weekday(): 0 = Monday ... 6 = Sunday
PRICING_WEEKEND_DAYS = frozenset({4, 5, 6})
NON_BUSINESS_WEEKEND_DAYS = frozenset({5, 6})


class DayType(str, Enum):
    NORMAL = "normal"
    WEEKEND = "weekend"
    HOLIDAY = "holiday"


def parse_date(value) -> date:
    """Accept a date (datetime is truncated) or a "YYYY-MM-DD" string."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        raise InvalidDateError(f"Expected a date or 'YYYY-MM-DD' string, got {type(value).__name__}")

    text = value.strip()
    if not DATE_REGEX.match(text):
        raise InvalidDateError(f"Invalid date format {value!r}, expected YYYY-MM-DD")
    try:
        return date.fromisoformat(text)
    except ValueError as e:
        raise InvalidDateError(f"Invalid date {value!r}: {e}") from e


def is_pricing_weekend(d: date) -> bool:
    """Friday, Saturday or Sunday."""
    d = parse_date(d)
    return d.weekday() in PRICING_WEEKEND_DAYS


def is_non_business_weekend(d: date) -> bool:
    """Saturday or Sunday."""
    d = parse_date(d)
    return d.weekday() in NON_BUSINESS_WEEKEND_DAYS


def classify_for_pricing(d: date, calendar=None) -> DayType:
    """Holiday wins over weekend, weekend over normal."""
    d = parse_date(d)
    if calendar is None:
        from .holidays import get_holiday_calendar
        calendar = get_holiday_calendar()

    if calendar.is_holiday(d):
        return DayType.HOLIDAY
    if is_pricing_weekend(d):
        return DayType.WEEKEND
    return DayType.NORMAL


def is_business_day(d: date, calendar=None) -> bool:
    """Not Saturday, not Sunday, not a listed holiday."""
    d = parse_date(d)
    if calendar is None:
        from .holidays import get_holiday_calendar
        calendar = get_holiday_calendar()

    return not is_non_business_weekend(d) and not calendar.is_holiday(d)

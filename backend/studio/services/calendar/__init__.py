# backend/studio/services/calendar/__init__.py
"""
Calendar module.

Day classification (pricing vs. business days), holiday table,
business-day counting.
"""

from .day_types import (
    DayType,
    parse_date,
    is_pricing_weekend,
    is_non_business_weekend,
    classify_for_pricing,
    is_business_day,
)
from .holidays import HolidayCalendar, DEFAULT_HOLIDAYS, get_holiday_calendar, load_holidays_file
from .business_days import business_days_between, next_business_day, iter_dates, studio_today

__all__ = [
    "DayType",
    "parse_date",
    "is_pricing_weekend",
    "is_non_business_weekend",
    "classify_for_pricing",
    "is_business_day",
    "HolidayCalendar",
    "DEFAULT_HOLIDAYS",
    "get_holiday_calendar",
    "load_holidays_file",
    "business_days_between",
    "next_business_day",
    "iter_dates",
    "studio_today",
]

# backend/studio/dependencies.py
"""
Shared FastAPI dependencies.

The reference clock and the holiday calendar are dependencies so they can
be overridden (tests, back-office previews of a future date).
"""

from datetime import date, datetime
from zoneinfo import ZoneInfo

from fastapi import Depends

from .config import get_settings
from .services.calendar import HolidayCalendar, get_holiday_calendar, studio_today


def get_reference_now() -> datetime:
    """Wall clock in the studio's time zone, as a naive local datetime."""
    tz = ZoneInfo(get_settings().studio_timezone)
    return datetime.now(tz).replace(tzinfo=None)


def get_reference_date(now: datetime = Depends(get_reference_now)) -> date:
    return studio_today(get_settings().studio_timezone, now)


def get_calendar() -> HolidayCalendar:
    return get_holiday_calendar()

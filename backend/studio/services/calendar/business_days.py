# backend/studio/services/calendar/business_days.py
"""
Business-day arithmetic for cancellation / reschedule windows.

Counting rule (inclusive range):
  start is usually "tomorrow" in the studio's time zone;
  if start is not a business day, counting begins at the next one;
  adjusted start after end → 0.
"""

from datetime import date, datetime, timedelta
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from ...errors import InvalidDateError
from .day_types import is_business_day, parse_date


def next_business_day(d: date, calendar=None) -> date:
    """First business day strictly after d."""
    d = parse_date(d)
    current = d + timedelta(days=1)
    while not is_business_day(current, calendar):
        current += timedelta(days=1)
    return current


def business_days_between(start: date, end: date, calendar=None) -> int:
    """Number of business days in [start, end]."""
    start, end = parse_date(start), parse_date(end)
    if start > end:
        return 0

    current = start if is_business_day(start, calendar) else next_business_day(start, calendar)
    if current > end:
        return 0

    count = 0
    while current <= end:
        if is_business_day(current, calendar):
            count += 1
        current += timedelta(days=1)
    return count


def iter_dates(date_start: date, date_end: date) -> list[date]:
    """Dates in [date_start, date_end]; reversed bounds are swapped."""
    date_start, date_end = parse_date(date_start), parse_date(date_end)
    if date_start > date_end:
        date_start, date_end = date_end, date_start

    dates = []
    current = date_start
    while current <= date_end:
        dates.append(current)
        current += timedelta(days=1)
    return dates


def studio_today(tz_name: str, now: datetime | None = None) -> date:
    """Current calendar date in the studio's time zone."""
    try:
        tz = ZoneInfo(tz_name)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise InvalidDateError(f"Unknown time zone {tz_name!r}") from e

    if now is None:
        return datetime.now(tz).date()
    if now.tzinfo is None:
        # naive datetimes are taken as already local to the studio
        return now.date()
    return now.astimezone(tz).date()

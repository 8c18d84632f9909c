# backend/studio/services/slots/invalidator.py
"""
Cache invalidation for day availability.

Triggers:
✓ date_override created/deleted (closing a day) → that date
✓ occupied_slot created/deleted → that date
✓ manual POST /slots/invalidate → given dates or everything

Does NOT trigger:
✗ Price changes (prices are never cached)
"""

import logging
from datetime import date

from ..calendar import iter_dates
from .redis_store import AvailabilityRedisStore

logger = logging.getLogger(__name__)


def invalidate_availability_cache(
    store: AvailabilityRedisStore | None,
    dates: list[date] | None = None,
) -> int:
    """
    Invalidate cached days.

    Args:
        store: Availability cache (None when caching is disabled)
        dates: Specific dates to invalidate, or None for all cached dates

    Returns:
        Number of deleted cache keys
    """
    if store is None:
        return 0
    deleted = store.delete_days(dates)
    logger.info(f"Invalidated {deleted} cached day(s): {[d.isoformat() for d in dates] if dates is not None else 'all'}")
    return deleted


def get_affected_dates(date_start: date, date_end: date) -> list[date]:
    """Dates in [date_start, date_end] (swapped if reversed)."""
    return iter_dates(date_start, date_end)

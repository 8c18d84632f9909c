# backend/studio/services/slots/redis_store.py
"""
Redis cache of open slots per day, using Sorted Sets.

Key format: studio:slots:{date}
Value: Sorted Set where member = "HH:MM", score = slot start timestamp.

Query: ZCOUNT key (now_ts +inf → open slots that have not started yet,
so past slots drop out without recalculation.
Sentinel: "__empty__" with score=0 marks "calculated, zero open slots".
"""

import logging
from datetime import date, datetime

from redis import Redis

from .config import time_str_to_minutes

logger = logging.getLogger(__name__)

EMPTY_SENTINEL = "__empty__"


def slot_timestamp(dt: date, time_str: str) -> float:
    minutes = time_str_to_minutes(time_str)
    start = datetime.combine(dt, datetime.min.time())
    return start.timestamp() + minutes * 60


class AvailabilityRedisStore:
    """Redis storage wrapper for per-day open slots."""

    KEY_PREFIX = "studio:slots"

    def __init__(self, redis: Redis):
        self.redis = redis

    def _key(self, dt: date) -> str:
        return f"{self.KEY_PREFIX}:{dt.isoformat()}"

    # ── Write ────────────────────────────────────────────────────────────

    def _queue_day(self, pipe, dt: date, open_slots: list[str]) -> None:
        key = self._key(dt)
        pipe.delete(key)

        if open_slots:
            mapping = {time_str: slot_timestamp(dt, time_str) for time_str in open_slots}
            pipe.zadd(key, mapping)
        else:
            # Empty day: sentinel so EXISTS returns True
            pipe.zadd(key, {EMPTY_SENTINEL: 0})

        # Key lives until the day is over + 1 minute buffer
        end_of_day = datetime.combine(dt, datetime.max.time())
        pipe.expireat(key, int(end_of_day.timestamp()) + 60)

    def store_multiple_days(self, days_slots: dict[date, list[str]]) -> None:
        """Batch store open slots for multiple days via pipeline."""
        if not days_slots:
            return

        pipe = self.redis.pipeline()
        for dt, open_slots in days_slots.items():
            self._queue_day(pipe, dt, open_slots)
        pipe.execute()
        logger.info(f"Cached availability for {len(days_slots)} day(s)")

    # ── Read ─────────────────────────────────────────────────────────────

    def mget_counts(self, dates: list[date], now: datetime) -> dict[date, int | None]:
        """
        Open-slot counts for several dates in one round trip.

        A missing key and an empty sorted set both give ZCOUNT 0, so EXISTS
        is queued next to it to tell a cache miss (None) from a full day.
        """
        if not dates:
            return {}

        min_score = f"({now.timestamp()}"
        pipe = self.redis.pipeline()
        for dt in dates:
            key = self._key(dt)
            pipe.exists(key)
            pipe.zcount(key, min_score, "+inf")
        replies = pipe.execute()

        counts: dict[date, int | None] = {}
        for i, dt in enumerate(dates):
            exists, live = replies[2 * i], replies[2 * i + 1]
            counts[dt] = live if exists else None
        return counts

    # ── Delete ───────────────────────────────────────────────────────────

    def delete_days(self, dates: list[date] | None = None) -> int:
        """
        Delete cached days.

        Args:
            dates: Specific dates (an empty list deletes nothing), or None
                   to delete every cached day.

        Returns:
            Number of deleted keys.
        """
        if dates is not None:
            keys = [self._key(dt) for dt in dates]
        else:
            keys = list(self.redis.scan_iter(match=f"{self.KEY_PREFIX}:*"))

        if not keys:
            return 0

        return self.redis.delete(*keys)

# backend/studio/redis_client.py

from functools import lru_cache

from redis import Redis

from .config import get_settings
from .services.slots import AvailabilityRedisStore


@lru_cache
def get_redis() -> Redis | None:
    """Shared client, or None when REDIS_URL is not configured."""
    url = get_settings().redis_url
    if not url:
        return None
    return Redis.from_url(url, decode_responses=True, socket_timeout=2.0)


def get_availability_store() -> AvailabilityRedisStore | None:
    """FastAPI dependency: availability cache, or None if caching is off."""
    redis = get_redis()
    return AvailabilityRedisStore(redis) if redis is not None else None

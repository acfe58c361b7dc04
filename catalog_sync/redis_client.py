from __future__ import annotations

from functools import lru_cache

from redis import Redis

from catalog_sync.config import settings


@lru_cache(maxsize=1)
def get_redis() -> Redis:
    """Shared Redis client (connections are opened lazily on first command)."""

    return Redis.from_url(settings.redis_url, decode_responses=True)

from __future__ import annotations

import logging
from typing import Any

from redis import Redis

logger = logging.getLogger(__name__)


class RedisProgressStore:
    """Progress counters stored as plain Redis keys.

    Expired and missing keys both read back as None; callers pick the default.
    """

    def __init__(self, client: Redis, *, prefix: str = "") -> None:
        self._client = client
        self._prefix = prefix

    def _key(self, key: str) -> str:
        return f"{self._prefix}{key}"

    def get(self, key: str) -> Any | None:
        return self._client.get(self._key(key))

    def set(self, key: str, value: Any, ttl: int | None = None) -> None:
        # Redis rejects bools; flags are stored as 1/0.
        if isinstance(value, bool):
            value = int(value)
        if ttl is not None and ttl > 0:
            self._client.set(self._key(key), value, ex=int(ttl))
        else:
            self._client.set(self._key(key), value)

    def delete(self, key: str) -> bool:
        removed = self._client.delete(self._key(key))
        logger.debug("progress key deleted key=%s removed=%s", key, removed)
        return bool(removed)

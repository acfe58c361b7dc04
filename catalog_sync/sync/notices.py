from __future__ import annotations

import logging

from redis import Redis

logger = logging.getLogger(__name__)


class OperatorNotices:
    """Operator-facing status messages kept in Redis.

    - sticky: a single status line updated in place while a sync runs
    - info: a one-shot message, removed the first time it is read
    """

    def __init__(
        self,
        client: Redis,
        *,
        prefix: str = "catalog_sync:notice",
        ttl_seconds: int = 180,
    ) -> None:
        self._client = client
        self.sticky_key = f"{prefix}:sticky"
        self.info_key = f"{prefix}:info"
        self._ttl_seconds = max(1, int(ttl_seconds))

    @staticmethod
    def _text(raw) -> str | None:
        if raw is None:
            return None
        return raw.decode() if isinstance(raw, bytes) else str(raw)

    def set_sticky(self, text: str, persistent: bool = False) -> None:
        if persistent:
            self._client.set(self.sticky_key, text)
        else:
            self._client.set(self.sticky_key, text, ex=self._ttl_seconds)

    def get_sticky(self) -> str | None:
        return self._text(self._client.get(self.sticky_key))

    def clear_sticky(self) -> None:
        self._client.delete(self.sticky_key)

    def post_info(self, text: str) -> None:
        self._client.set(self.info_key, text, ex=self._ttl_seconds)
        logger.info("Operator notice posted: %s", text)

    def pop_info(self) -> str | None:
        raw = self._client.get(self.info_key)
        if raw is not None:
            self._client.delete(self.info_key)
        return self._text(raw)

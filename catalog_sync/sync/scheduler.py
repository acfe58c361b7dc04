"""
Periodic event scheduler.

Events are stored in a single Redis hash so every process sees the same
registrations:

    {hook: {"interval": <seconds>, "next_run": <unix ts>}}

Nothing here runs on its own. A Celery beat entry calls run_due_events() on a
fixed tick, and each due event is handed to the handler registered for its
hook in the current process.
"""

from __future__ import annotations

import json
import logging
import time
from collections.abc import Callable
from typing import Any

from redis import Redis

logger = logging.getLogger(__name__)

EventHandler = Callable[[], Any]


class RedisEventScheduler:
    def __init__(self, client: Redis, *, key: str = "catalog_sync:scheduled_events") -> None:
        self._client = client
        self._key = key
        self._handlers: dict[str, EventHandler] = {}

    def register_handler(self, hook: str, handler: EventHandler) -> None:
        self._handlers[hook] = handler

    def is_scheduled(self, hook: str) -> bool:
        return bool(self._client.hexists(self._key, hook))

    def schedule(self, hook: str, *, interval_seconds: int, first_run_at: float) -> None:
        entry = {"interval": int(interval_seconds), "next_run": float(first_run_at)}
        self._client.hset(self._key, hook, json.dumps(entry))
        logger.info(
            "Scheduled event hook=%s interval=%s first_run_at=%.0f",
            hook,
            interval_seconds,
            first_run_at,
        )

    def cancel(self, hook: str) -> None:
        if self._client.hdel(self._key, hook):
            logger.info("Cancelled scheduled event hook=%s", hook)

    def next_run(self, hook: str) -> float | None:
        raw = self._client.hget(self._key, hook)
        entry = self._decode(hook, raw)
        return None if entry is None else entry["next_run"]

    @staticmethod
    def _decode(hook: str, raw: Any) -> dict[str, float] | None:
        if raw is None:
            return None
        try:
            data = json.loads(raw)
            return {"interval": float(data["interval"]), "next_run": float(data["next_run"])}
        except (TypeError, ValueError, KeyError):
            logger.warning("Ignoring malformed scheduled event hook=%s raw=%r", hook, raw)
            return None

    def run_due_events(self, now: float | None = None) -> list[str]:
        """
        Fire every event whose next_run has passed.

        next_run is advanced before the handler is called, so a slow or failing
        handler is not fired again on the next tick. Returns the hooks that ran.
        """
        if now is None:
            now = time.time()

        fired: list[str] = []
        for raw_hook, raw in self._client.hgetall(self._key).items():
            hook = raw_hook.decode() if isinstance(raw_hook, bytes) else str(raw_hook)
            entry = self._decode(hook, raw)
            if entry is None or entry["next_run"] > now:
                continue

            handler = self._handlers.get(hook)
            if handler is None:
                logger.warning("No handler registered for scheduled event hook=%s", hook)
                continue

            interval = max(1.0, entry["interval"])
            self._client.hset(
                self._key,
                hook,
                json.dumps({"interval": int(interval), "next_run": now + interval}),
            )

            try:
                handler()
            except Exception:
                logger.exception("Scheduled event handler failed hook=%s", hook)
            fired.append(hook)

        return fired

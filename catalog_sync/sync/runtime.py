"""
Redis-backed queue runtime.

Storage layout (all keys derive from the queue name):
- <queue_name>:queue         Redis list of JSON-encoded items (RPUSH / LPOP)
- <queue_name>:process_lock  SET NX EX lock held by the active worker
- <queue_name>_cron          scheduled health-check event hook

Asynchronous passes are started by sending a Celery task by name, so this
module never imports the worker package.
"""

from __future__ import annotations

import json
import logging
import time
import uuid
from typing import Any

from celery import Celery
from redis import Redis

from catalog_sync.sync.exceptions import DispatchError
from catalog_sync.sync.ports import EventScheduler, QueueWorker

logger = logging.getLogger(__name__)

HANDLE_TASK_NAME = "catalog_sync.handle_queue"


class RedisQueueRuntime:
    def __init__(
        self,
        client: Redis,
        celery_app: Celery,
        scheduler: EventScheduler,
        *,
        queue_name: str,
        lock_seconds: int = 60,
        time_limit_seconds: float = 20.0,
        healthcheck_interval_seconds: int = 300,
        healthcheck_first_run_offset_seconds: int = 10,
        handle_task_name: str = HANDLE_TASK_NAME,
    ) -> None:
        self._client = client
        self._celery = celery_app
        self._scheduler = scheduler

        self.queue_name = queue_name
        self.queue_key = f"{queue_name}:queue"
        self.lock_key = f"{queue_name}:process_lock"
        self.cron_hook_identifier = f"{queue_name}_cron"
        self.handle_task_name = handle_task_name

        self._lock_seconds = max(1, int(lock_seconds))
        self._time_limit_seconds = float(time_limit_seconds)
        self._healthcheck_interval = int(healthcheck_interval_seconds)
        self._first_run_offset = int(healthcheck_first_run_offset_seconds)
        self._lock_token: str | None = None

    # ---- queue storage ----

    def push_to_queue(self, item: Any) -> None:
        self._client.rpush(self.queue_key, json.dumps(item))

    def _pop(self) -> tuple[bool, Any]:
        raw = self._client.lpop(self.queue_key)
        if raw is None:
            return False, None
        return True, json.loads(raw)

    def is_queue_empty(self) -> bool:
        return int(self._client.llen(self.queue_key) or 0) == 0

    # ---- process lock ----

    def is_process_running(self) -> bool:
        return bool(self._client.exists(self.lock_key))

    def _lock_process(self) -> bool:
        token = uuid.uuid4().hex
        if not self._client.set(self.lock_key, token, nx=True, ex=self._lock_seconds):
            return False
        self._lock_token = token
        return True

    def _unlock_process(self) -> None:
        token, self._lock_token = self._lock_token, None
        current = self._client.get(self.lock_key)
        if isinstance(current, bytes):
            current = current.decode()
        # Only drop the lock we own; an expired lock may have been re-taken.
        if token is not None and current == token:
            self._client.delete(self.lock_key)

    def _refresh_lock(self) -> bool:
        """Push the lock expiry out again; False when the lock is no longer ours."""
        current = self._client.get(self.lock_key)
        if isinstance(current, bytes):
            current = current.decode()
        if self._lock_token is None or current != self._lock_token:
            return False
        self._client.expire(self.lock_key, self._lock_seconds)
        return True

    # ---- scheduling ----

    def _schedule_event(self) -> None:
        if not self._scheduler.is_scheduled(self.cron_hook_identifier):
            self._scheduler.schedule(
                self.cron_hook_identifier,
                interval_seconds=self._healthcheck_interval,
                first_run_at=time.time() + self._first_run_offset,
            )

    def clear_scheduled_event(self) -> None:
        self._scheduler.cancel(self.cron_hook_identifier)

    def dispatch(self) -> None:
        """Register the health check and start an asynchronous pass.

        Raises DispatchError when either step fails.
        """
        try:
            self._schedule_event()
            self._celery.send_task(self.handle_task_name)
        except Exception as e:
            raise DispatchError(str(e) or e.__class__.__name__, queue_name=self.queue_name) from e

    # ---- task loop ----

    def _continue(self) -> None:
        try:
            self.dispatch()
        except DispatchError:
            logger.exception(
                "Unable to continue queue %s; waiting for the health check",
                self.queue_name,
                extra={"flow_name": "background_sync", "flow_step": "background_sync_dispatch"},
            )

    def _time_exceeded(self, started: float) -> bool:
        return time.monotonic() - started >= self._time_limit_seconds

    def handle(self, worker: QueueWorker) -> None:
        """
        Drive one synchronous pass over the queue.

        Items are popped one at a time, so each is removed before its task
        runs. A failed item is reported to worker.task_failed and dropped.
        The lock expiry is pushed out after every item. The pass ends when the
        queue drains, the time budget is used up or the lock is lost; a
        leftover queue is handed to a fresh dispatch.
        """
        if self.is_queue_empty():
            return

        if not self._lock_process():
            logger.debug("Queue %s already has an active worker", self.queue_name)
            return

        processed = 0
        started = time.monotonic()
        try:
            while True:
                found, item = self._pop()
                if not found:
                    break

                try:
                    result = worker.task(item)
                except Exception:
                    logger.exception(
                        "Background task failed; dropping item",
                        extra={
                            "flow_name": "background_sync",
                            "flow_step": "background_sync_task",
                            "queue_item": item,
                        },
                    )
                    worker.task_failed(item)
                    result = None

                if result is not None:
                    self.push_to_queue(result)
                processed += 1

                if not self._refresh_lock():
                    logger.warning(
                        "Queue %s lock expired or was taken over; ending pass",
                        self.queue_name,
                        extra={"flow_name": "background_sync", "flow_step": "background_sync_task"},
                    )
                    break

                if self._time_exceeded(started):
                    break
        finally:
            self._unlock_process()

        logger.info("Queue %s pass finished processed=%s", self.queue_name, processed)

        if self.is_queue_empty():
            worker.complete()
            return

        self._continue()

    def complete(self) -> None:
        """
        Cancel the health check once the queue has drained.

        Items leave the list one by one as they are popped, so the list is
        never wiped here. Anything found after the cancel was queued while
        the pass was completing and gets a fresh dispatch, which registers the
        health check again.
        """
        self.clear_scheduled_event()
        if self.is_queue_empty():
            return

        logger.info("Queue %s received items during completion; dispatching again", self.queue_name)
        self._continue()

"""Ports (interfaces) used by the background sync runner.

The runner depends on Protocols rather than on Redis/Celery directly, so the
queue storage, scheduler, counter store and catalog integration can each be
swapped for an in-memory fake in tests.
"""

from __future__ import annotations

from typing import Any, Protocol


class ProgressStore(Protocol):
    """Key-value counters/flags with an optional time-to-live."""

    def get(self, key: str) -> Any | None: ...

    def set(self, key: str, value: Any, ttl: int | None = None) -> None: ...

    def delete(self, key: str) -> bool: ...


class QueueWorker(Protocol):
    """What the runtime calls back into while draining the queue.

    `task` returns None when the item is fully consumed; any other value is
    pushed back onto the queue. `task_failed` is called for an item whose
    task raised; the item is dropped afterwards.
    """

    def task(self, item: Any) -> Any | None: ...

    def task_failed(self, item: Any) -> None: ...

    def complete(self) -> None: ...


class QueueRuntime(Protocol):
    def push_to_queue(self, item: Any) -> None: ...

    def dispatch(self) -> None: ...

    def handle(self, worker: QueueWorker) -> None: ...

    def is_process_running(self) -> bool: ...

    def is_queue_empty(self) -> bool: ...

    def clear_scheduled_event(self) -> None: ...

    def complete(self) -> None: ...


class EventScheduler(Protocol):
    def is_scheduled(self, hook: str) -> bool: ...

    def schedule(self, hook: str, *, interval_seconds: int, first_run_at: float) -> None: ...

    def cancel(self, hook: str) -> None: ...


class ProductIntegration(Protocol):
    sync_in_progress_key: str
    sync_remaining_key: str
    sync_timeout: int

    def on_product_publish(self, item: Any) -> None: ...

    def display_sticky_message(self, text: str, persistent: bool = False) -> None: ...

    def remove_sticky_message(self) -> None: ...

    def display_info_message(self, text: str) -> None: ...

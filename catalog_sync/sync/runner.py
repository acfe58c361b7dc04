from __future__ import annotations

import logging
from typing import Any

from catalog_sync.sync.exceptions import DispatchError
from catalog_sync.sync.ports import ProductIntegration, ProgressStore, QueueRuntime

logger = logging.getLogger(__name__)

FLOW_NAME = "background_sync"


class ProductSyncRunner:
    """Background processor that pushes queued products to the external catalog.

    The runner owns the sync-specific behavior (progress counters, operator
    messages, health check policy) and delegates queue storage, locking and
    dispatch to the runtime it holds.

    Only one worker drains the queue at a time. Items are never processed in
    parallel, and a failed item is dropped rather than retried.
    """

    def __init__(
        self,
        runtime: QueueRuntime,
        progress: ProgressStore,
        integration: ProductIntegration,
        *,
        remaining_ttl: int | None = None,
    ) -> None:
        self.runtime = runtime
        self.progress = progress
        self.integration = integration
        self.remaining_ttl = remaining_ttl

    def dispatch(self) -> None:
        """Start a background worker; failures are logged, never raised."""
        try:
            self.runtime.dispatch()
        except DispatchError as e:
            logger.error(
                "Unable to dispatch background sync processor: %s",
                e,
                extra={"flow_name": FLOW_NAME, "flow_step": "background_sync_dispatch"},
            )

    def handle(self) -> None:
        self.runtime.handle(self)

    def get_item_count(self) -> int:
        raw = self.progress.get(self.integration.sync_remaining_key)
        if isinstance(raw, bytes):
            raw = raw.decode()
        try:
            count = int(raw or 0)
        except (TypeError, ValueError):
            return 0
        return max(0, count)

    def handle_cron_healthcheck(self) -> bool | None:
        """
        Restart the background process if no worker is active and items remain.

        Returns True when a worker is (now) running. Returns None when the
        queue was found empty and the stale state was cleared.
        """
        if self.runtime.is_process_running():
            return True

        if self.runtime.is_queue_empty():
            self.runtime.clear_scheduled_event()
            self.progress.delete(self.integration.sync_remaining_key)
            return None

        self.runtime.handle(self)
        return True

    def is_updating(self) -> bool:
        return self.runtime.is_queue_empty() is False

    def is_running(self) -> bool:
        return self.runtime.is_process_running()

    def task(self, item: Any) -> Any | None:
        """
        Publish a single product.

        The message shows the count before this item is subtracted. Returns
        None so the runtime does not push the item back.
        """
        remaining = self.get_item_count()
        self.integration.display_sticky_message(
            f"Background syncing products to the catalog. Products remaining: {remaining}",
            True,
        )

        self.integration.on_product_publish(item)
        self._record_progress(remaining - 1)
        return None

    def task_failed(self, item: Any) -> None:
        """Count a dropped item as done so the remaining count keeps moving."""
        self._record_progress(self.get_item_count() - 1)

    def _record_progress(self, remaining: int) -> None:
        self.progress.set(
            self.integration.sync_in_progress_key,
            True,
            self.integration.sync_timeout,
        )
        self.progress.set(self.integration.sync_remaining_key, max(0, remaining), self.remaining_ttl)

    def complete(self) -> None:
        # A repeated completion finds both counters gone and skips the notices.
        cleared_in_progress = self.progress.delete(self.integration.sync_in_progress_key)
        cleared_remaining = self.progress.delete(self.integration.sync_remaining_key)

        if cleared_in_progress or cleared_remaining:
            logger.debug(
                "Background sync complete!",
                extra={"flow_name": FLOW_NAME, "flow_step": "background_sync_completed"},
            )
            self.integration.remove_sticky_message()
            self.integration.display_info_message("Catalog product sync complete!")

        self.runtime.complete()

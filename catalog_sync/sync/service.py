from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any

from catalog_sync.sync.factory import SyncServices

logger = logging.getLogger(__name__)


def queue_products(services: SyncServices, items: Iterable[Any]) -> int:
    """Queue products for background sync and start a worker.

    When a sync is already underway the new items are added to the published
    remaining count instead of replacing it. Returns the published count.
    """

    runner = services.runner
    items = list(items)
    if not items:
        return runner.get_item_count()

    already_updating = runner.is_updating()
    for item in items:
        services.runtime.push_to_queue(item)

    remaining = len(items)
    if already_updating:
        remaining += runner.get_item_count()

    services.progress.set(
        services.integration.sync_remaining_key,
        remaining,
        runner.remaining_ttl,
    )
    logger.info(
        "Products queued for background sync",
        extra={"queued": len(items), "remaining": remaining},
    )

    runner.dispatch()
    return remaining

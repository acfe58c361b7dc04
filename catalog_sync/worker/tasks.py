from __future__ import annotations

import logging

from catalog_sync.sync.factory import get_sync_services
from catalog_sync.sync.runtime import HANDLE_TASK_NAME
from catalog_sync.worker.celery_app import celery_app

logger = logging.getLogger(__name__)


@celery_app.task(name=HANDLE_TASK_NAME)
def handle_sync_queue() -> None:
    """Drain the product sync queue (one time-budgeted pass)."""

    logger.info("handle_sync_queue received")
    get_sync_services().runner.handle()


@celery_app.task(name="catalog_sync.run_scheduled_events")
def run_scheduled_events() -> list[str]:
    """Beat tick: fire registered events whose next run is due."""

    fired = get_sync_services().scheduler.run_due_events()
    if fired:
        logger.info("scheduled events fired", extra={"hooks": fired})
    return fired

from __future__ import annotations

from celery import Celery

from catalog_sync.config import settings


def make_celery() -> Celery:
    """Create the Celery app.

    Note: we keep this in a function so tests can import tasks without eagerly
    touching global state beyond settings.

    Beat fires the scheduled-event tick; the tick decides which registered
    events (the queue health check) are actually due.
    """

    celery = Celery(
        "catalog_sync",
        broker=settings.redis_url,
        backend=settings.redis_url,
        include=["catalog_sync.worker.tasks"],
    )

    celery.conf.update(
        task_serializer="json",
        result_serializer="json",
        accept_content=["json"],
        timezone="UTC",
        enable_utc=True,
        task_ignore_result=True,
        # One pass per worker at a time; the queue lock enforces it across workers.
        worker_prefetch_multiplier=1,
        beat_schedule={
            "catalog-sync-scheduled-events": {
                "task": "catalog_sync.run_scheduled_events",
                "schedule": settings.scheduler_tick_seconds,
            },
        },
    )

    return celery


celery_app = make_celery()

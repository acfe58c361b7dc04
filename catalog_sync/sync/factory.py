"""Composition root for the background sync runner.

Wires settings, Redis and Celery into the concrete runtime, scheduler, stores
and integration, and registers the runner's health check with the scheduler.
Tests build their own bundle with injected clients.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache

import httpx
from celery import Celery
from redis import Redis

from catalog_sync.config import Settings, settings
from catalog_sync.sync.integration import CatalogIntegration
from catalog_sync.sync.notices import OperatorNotices
from catalog_sync.sync.progress import RedisProgressStore
from catalog_sync.sync.runner import ProductSyncRunner
from catalog_sync.sync.runtime import RedisQueueRuntime
from catalog_sync.sync.scheduler import RedisEventScheduler


@dataclass(frozen=True, slots=True)
class SyncServices:
    runner: ProductSyncRunner
    runtime: RedisQueueRuntime
    scheduler: RedisEventScheduler
    progress: RedisProgressStore
    notices: OperatorNotices
    integration: CatalogIntegration


def build_sync_services(
    app_settings: Settings | None = None,
    *,
    redis_client: Redis | None = None,
    celery_app: Celery | None = None,
    http_client: httpx.Client | None = None,
) -> SyncServices:
    cfg = app_settings or settings

    if redis_client is None:
        from catalog_sync.redis_client import get_redis

        redis_client = get_redis()

    if celery_app is None:
        from catalog_sync.worker.celery_app import celery_app as default_celery_app

        celery_app = default_celery_app

    scheduler = RedisEventScheduler(redis_client, key=f"{cfg.queue_name}:scheduled_events")
    runtime = RedisQueueRuntime(
        redis_client,
        celery_app,
        scheduler,
        queue_name=cfg.queue_name,
        lock_seconds=cfg.queue_lock_seconds,
        time_limit_seconds=cfg.worker_time_limit_seconds,
        healthcheck_interval_seconds=cfg.healthcheck_interval_seconds,
        healthcheck_first_run_offset_seconds=cfg.healthcheck_first_run_offset_seconds,
    )
    progress = RedisProgressStore(redis_client)
    notices = OperatorNotices(
        redis_client,
        prefix=f"{cfg.queue_name}:notice",
        ttl_seconds=cfg.notice_ttl_seconds,
    )
    integration = CatalogIntegration(
        notices,
        sync_in_progress_key=cfg.sync_in_progress_key,
        sync_remaining_key=cfg.sync_remaining_key,
        sync_timeout=cfg.sync_timeout_seconds,
        api_url=cfg.catalog_api_url,
        api_token=cfg.catalog_api_token,
        http_client=http_client,
        timeout_seconds=cfg.catalog_api_timeout_seconds,
    )
    runner = ProductSyncRunner(
        runtime,
        progress,
        integration,
        remaining_ttl=cfg.sync_remaining_ttl_seconds,
    )

    scheduler.register_handler(runtime.cron_hook_identifier, runner.handle_cron_healthcheck)

    return SyncServices(
        runner=runner,
        runtime=runtime,
        scheduler=scheduler,
        progress=progress,
        notices=notices,
        integration=integration,
    )


@lru_cache(maxsize=1)
def get_sync_services() -> SyncServices:
    return build_sync_services()

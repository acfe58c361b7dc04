from __future__ import annotations

from fastapi import APIRouter, Depends, status

from catalog_sync.schemas.sync import (
    HealthcheckRead,
    ProductSyncQueued,
    ProductSyncRequest,
    SyncStatusRead,
)
from catalog_sync.sync.factory import SyncServices, get_sync_services
from catalog_sync.sync.service import queue_products


router = APIRouter(prefix="/sync", tags=["sync"])


# Plain `def` endpoints: the Redis client is synchronous, so FastAPI runs these
# in its threadpool.


@router.post("/products", response_model=ProductSyncQueued, status_code=status.HTTP_202_ACCEPTED)
def queue_products_endpoint(
    payload: ProductSyncRequest,
    services: SyncServices = Depends(get_sync_services),
) -> ProductSyncQueued:
    items = [item.model_dump() for item in payload.items]
    remaining = queue_products(services, items)
    return ProductSyncQueued(queued=len(items), remaining=remaining)


@router.get("/status", response_model=SyncStatusRead)
def sync_status_endpoint(
    services: SyncServices = Depends(get_sync_services),
) -> SyncStatusRead:
    runner = services.runner
    return SyncStatusRead(
        is_updating=runner.is_updating(),
        is_running=runner.is_running(),
        remaining=runner.get_item_count(),
        message=services.notices.get_sticky(),
        notice=services.notices.pop_info(),
    )


@router.post("/healthcheck", response_model=HealthcheckRead)
def run_healthcheck_endpoint(
    services: SyncServices = Depends(get_sync_services),
) -> HealthcheckRead:
    running = services.runner.handle_cron_healthcheck()
    return HealthcheckRead(running=bool(running))

from fastapi import APIRouter

from catalog_sync.api.v1.endpoints.sync import router as sync_router

router = APIRouter()


@router.get("/ping")
async def ping():
    return {"ping": "pong"}


router.include_router(sync_router)

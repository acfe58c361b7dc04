from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class ProductSyncItem(BaseModel):
    product_id: str = Field(..., min_length=1)
    payload: dict[str, Any] = Field(default_factory=dict)


class ProductSyncRequest(BaseModel):
    items: list[ProductSyncItem] = Field(..., min_length=1)


class ProductSyncQueued(BaseModel):
    queued: int
    remaining: int


class SyncStatusRead(BaseModel):
    is_updating: bool
    is_running: bool
    remaining: int

    message: str | None = None
    notice: str | None = None


class HealthcheckRead(BaseModel):
    running: bool

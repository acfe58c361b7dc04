from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from catalog_sync.config import Settings
from catalog_sync.main import app
from catalog_sync.sync.factory import SyncServices, build_sync_services, get_sync_services

from .fakes import FakeCelery, FakeIntegration, FakeProgressStore, FakeQueueRuntime, FakeRedis


@pytest.fixture()
def test_settings() -> Settings:
    return Settings(
        redis_url="redis://localhost:6379/15",
        queue_name="test_sync",
        sync_in_progress_key="test_sync_in_progress",
        sync_remaining_key="test_sync_remaining",
        catalog_api_url=None,
    )


@pytest.fixture()
def fake_redis() -> FakeRedis:
    return FakeRedis()


@pytest.fixture()
def fake_celery() -> FakeCelery:
    return FakeCelery()


@pytest.fixture()
def services(test_settings: Settings, fake_redis: FakeRedis, fake_celery: FakeCelery) -> SyncServices:
    """Real Redis-backed components wired to in-memory Redis and Celery fakes."""
    return build_sync_services(test_settings, redis_client=fake_redis, celery_app=fake_celery)


@pytest.fixture()
def runtime() -> FakeQueueRuntime:
    return FakeQueueRuntime()


@pytest.fixture()
def progress() -> FakeProgressStore:
    return FakeProgressStore()


@pytest.fixture()
def integration() -> FakeIntegration:
    return FakeIntegration()


@pytest.fixture()
def client(services: SyncServices):
    app.dependency_overrides[get_sync_services] = lambda: services
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()

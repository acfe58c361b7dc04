from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    redis_url: str = "redis://localhost:6379/0"

    # Background queue
    queue_name: str = "catalog_sync_background_process"
    queue_lock_seconds: int = 60
    worker_time_limit_seconds: float = 20.0

    # Progress counters
    sync_in_progress_key: str = "catalog_sync_in_progress"
    sync_remaining_key: str = "catalog_sync_remaining"
    sync_timeout_seconds: int = 30
    sync_remaining_ttl_seconds: int = 86400

    # Health check
    healthcheck_interval_seconds: int = 300
    healthcheck_first_run_offset_seconds: int = 10
    scheduler_tick_seconds: float = 60.0

    # Operator notices
    notice_ttl_seconds: int = 180

    # External catalog
    catalog_api_url: str | None = None
    catalog_api_token: str | None = None
    catalog_api_timeout_seconds: float = 10.0


settings = Settings()

"""Celery worker entrypoints.

Run with:
  celery -A catalog_sync.worker.celery_app worker
  celery -A catalog_sync.worker.celery_app beat
"""

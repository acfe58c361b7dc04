"""Background product sync.

Components:
- runner.py: ProductSyncRunner (dispatch, task, completion, health check)
- ports.py: Protocols for the runtime, scheduler, counters and integration
- runtime.py: Redis list queue + process lock, dispatched through Celery
- scheduler.py: Redis-backed periodic events fired by Celery beat
- progress.py / notices.py: Redis counters and operator messages
- integration.py: catalog HTTP client
- factory.py / service.py: wiring and the "queue these products" helper
"""

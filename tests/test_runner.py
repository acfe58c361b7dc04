from __future__ import annotations

import logging

import pytest

from catalog_sync.sync.exceptions import DispatchError
from catalog_sync.sync.runner import ProductSyncRunner


@pytest.fixture()
def runner(runtime, progress, integration) -> ProductSyncRunner:
    return ProductSyncRunner(runtime, progress, integration, remaining_ttl=3600)


def test_get_item_count_defaults_to_zero_when_absent(runner) -> None:
    assert runner.get_item_count() == 0


@pytest.mark.parametrize(
    ("raw", "expected"),
    [(7, 7), ("12", 12), (b"3", 3), (-2, 0), ("not-a-number", 0), (None, 0)],
)
def test_get_item_count_casts_to_non_negative_int(runner, progress, integration, raw, expected) -> None:
    progress.data[integration.sync_remaining_key] = raw
    assert runner.get_item_count() == expected


def test_get_item_count_after_expiry_or_delete(runner, progress, integration) -> None:
    key = integration.sync_remaining_key

    progress.set(key, 9)
    assert runner.get_item_count() == 9

    progress.delete(key)
    assert runner.get_item_count() == 0

    progress.set(key, 4)
    progress.expire(key)
    assert runner.get_item_count() == 0


@pytest.mark.parametrize("items", [[], [{"product_id": "p1"}], [{"product_id": "p1"}, {"product_id": "p2"}]])
def test_is_updating_mirrors_queue_emptiness(runner, runtime, items) -> None:
    runtime.items.extend(items)
    assert runner.is_updating() is (not runtime.is_queue_empty())
    assert runner.is_updating() is bool(items)


def test_is_running_delegates_to_process_lock(runner, runtime) -> None:
    assert runner.is_running() is False
    runtime.running = True
    assert runner.is_running() is True


def test_dispatch_delegates_to_runtime(runner, runtime) -> None:
    runner.dispatch()
    runner.dispatch()
    assert runtime.dispatch_calls == 2


def test_dispatch_failure_is_logged_not_raised(runner, runtime, caplog) -> None:
    runtime.dispatch_error = DispatchError("broker unreachable", queue_name="test_sync")
    caplog.set_level(logging.DEBUG, logger="catalog_sync.sync.runner")

    runner.dispatch()

    records = [r for r in caplog.records if r.name == "catalog_sync.sync.runner"]
    assert len(records) == 1
    record = records[0]
    assert record.levelno == logging.ERROR
    assert "broker unreachable" in record.getMessage()
    assert record.flow_name == "background_sync"
    assert record.flow_step == "background_sync_dispatch"


def test_repeated_dispatch_while_running_never_starts_a_second_worker(runner, runtime) -> None:
    runtime.items.extend([{"product_id": "p1"}, {"product_id": "p2"}])
    runtime.running = True

    for _ in range(5):
        runner.dispatch()
        runner.handle()

    # The lock holder is the only worker; no item was consumed by the extra calls.
    assert len(runtime.items) == 2
    assert runtime.handle_calls == 5


def test_task_shows_pre_decrement_count_and_refreshes_counters(runner, progress, integration) -> None:
    progress.set(integration.sync_remaining_key, 5)
    item = {"product_id": "p1", "payload": {"title": "Mug"}}

    result = runner.task(item)

    assert result is None
    assert integration.published == [item]
    assert integration.sticky == [
        ("Background syncing products to the catalog. Products remaining: 5", True)
    ]
    assert progress.data[integration.sync_remaining_key] == 4
    assert progress.ttls[integration.sync_remaining_key] == 3600
    assert progress.data[integration.sync_in_progress_key] is True
    assert progress.ttls[integration.sync_in_progress_key] == integration.sync_timeout


def test_task_does_not_catch_publish_errors(runner, progress, integration) -> None:
    progress.set(integration.sync_remaining_key, 3)
    integration.fail_on.add("bad")

    with pytest.raises(RuntimeError):
        runner.task({"product_id": "bad"})

    assert progress.data[integration.sync_remaining_key] == 3
    assert integration.sync_in_progress_key not in progress.data


def test_complete_clears_counters_and_notifies_once(runner, runtime, progress, integration, caplog) -> None:
    progress.set(integration.sync_in_progress_key, True, 30)
    progress.set(integration.sync_remaining_key, 0)
    caplog.set_level(logging.DEBUG, logger="catalog_sync.sync.runner")

    runner.complete()

    assert integration.sync_in_progress_key not in progress.data
    assert integration.sync_remaining_key not in progress.data
    assert integration.sticky_removed == 1
    assert integration.info == ["Catalog product sync complete!"]
    assert runtime.complete_calls == 1

    completed = [r for r in caplog.records if r.getMessage() == "Background sync complete!"]
    assert len(completed) == 1
    assert completed[0].levelno == logging.DEBUG
    assert completed[0].flow_name == "background_sync"
    assert completed[0].flow_step == "background_sync_completed"

    runner.complete()

    assert integration.info == ["Catalog product sync complete!"]
    assert integration.sticky_removed == 1
    # Base cleanup is never skipped.
    assert runtime.complete_calls == 2


def test_complete_after_in_progress_flag_expired_still_notifies(runner, progress, integration) -> None:
    progress.set(integration.sync_remaining_key, 0)

    runner.complete()

    assert integration.info == ["Catalog product sync complete!"]


def test_healthcheck_noop_when_worker_running(runner, runtime, progress, integration) -> None:
    runtime.items.append({"product_id": "p1"})
    runtime.running = True
    progress.set(integration.sync_remaining_key, 1)

    assert runner.handle_cron_healthcheck() is True

    assert list(runtime.items) == [{"product_id": "p1"}]
    assert runtime.handle_calls == 0
    assert runtime.cleared_events == 0
    assert progress.data[integration.sync_remaining_key] == 1


def test_healthcheck_clears_stale_state_when_queue_empty(runner, runtime, progress, integration) -> None:
    progress.set(integration.sync_remaining_key, 3)

    assert runner.handle_cron_healthcheck() is None

    assert runtime.cleared_events == 1
    assert integration.sync_remaining_key not in progress.data
    assert runtime.handle_calls == 0


def test_healthcheck_restarts_processing_when_items_remain(runner, runtime, progress, integration) -> None:
    items = [{"product_id": "p1"}, {"product_id": "p2"}]
    runtime.items.extend(items)
    progress.set(integration.sync_remaining_key, 2)

    assert runner.handle_cron_healthcheck() is True

    assert runtime.handle_calls == 1
    assert runtime.dispatch_calls == 0
    assert integration.published == items
    assert runtime.is_queue_empty()
    assert integration.info == ["Catalog product sync complete!"]
    assert integration.sync_remaining_key not in progress.data


def test_task_failed_counts_the_dropped_item(runner, progress, integration) -> None:
    progress.set(integration.sync_remaining_key, 3)

    runner.task_failed({"product_id": "bad"})

    assert progress.data[integration.sync_remaining_key] == 2
    assert progress.ttls[integration.sync_remaining_key] == 3600
    assert progress.data[integration.sync_in_progress_key] is True
    assert progress.ttls[integration.sync_in_progress_key] == integration.sync_timeout


def test_task_failed_never_goes_below_zero(runner, progress, integration) -> None:
    runner.task_failed({"product_id": "bad"})

    assert progress.data[integration.sync_remaining_key] == 0

"""Unit tests for the MaintenanceScheduler."""

import asyncio

import pytest

from aviator.application.services import BackupManager, MaintenanceScheduler, PredictionEngine, RecordStore
from aviator.infrastructure.storage import InMemoryKeyValueStorage


@pytest.fixture
def storage() -> InMemoryKeyValueStorage:
    return InMemoryKeyValueStorage()


@pytest.fixture
def store(storage: InMemoryKeyValueStorage) -> RecordStore:
    return RecordStore(storage)


@pytest.fixture
def scheduler(store: RecordStore, storage: InMemoryKeyValueStorage) -> MaintenanceScheduler:
    backups = BackupManager(store, storage)
    return MaintenanceScheduler(
        store,
        backups,
        autosave_interval=0.01,
        snapshot_interval=0.02,
        retention_interval=0.05,
    )


def test_default_jobs(scheduler: MaintenanceScheduler, store: RecordStore):
    assert scheduler.job_names == ["autosave", "snapshot", "retention"]
    scheduler.add_prediction_cycle(PredictionEngine(store))
    assert scheduler.job_names[-1] == "prediction"


def test_run_job_isolates_failures(scheduler: MaintenanceScheduler, storage: InMemoryKeyValueStorage):
    def explode():
        raise RuntimeError("boom")

    scheduler.add_job("broken", explode, lambda: 1)

    assert scheduler.run_job("broken") is False
    assert scheduler.run_job("snapshot") is True
    assert any(key.startswith("backup_") for key in storage.keys())


@pytest.mark.asyncio
async def test_start_runs_jobs_and_stop_autosaves(scheduler: MaintenanceScheduler, storage, store):
    ticks: list[int] = []
    scheduler.add_job("tick", lambda: ticks.append(1), lambda: 0.01)

    await scheduler.start()
    assert scheduler.running
    await asyncio.sleep(0.1)

    with pytest.raises(RuntimeError):
        scheduler.add_job("late", lambda: None, lambda: 1)

    store.create_client({"name": "A", "code": "X1", "phone": "1", "country": "US"})
    storage.remove("clients")

    await scheduler.stop()

    assert not scheduler.running
    assert ticks
    assert any(key.startswith("backup_") for key in storage.keys())
    # final autosave rewrote the collection removed behind the store's back
    assert [c["code"] for c in storage.get("clients")] == ["X1"]


@pytest.mark.asyncio
async def test_failing_job_does_not_stop_the_others(scheduler: MaintenanceScheduler):
    ticks: list[int] = []

    def explode():
        raise RuntimeError("boom")

    scheduler.add_job("broken", explode, lambda: 0.01)
    scheduler.add_job("tick", lambda: ticks.append(1), lambda: 0.01)

    await scheduler.start()
    await asyncio.sleep(0.1)
    await scheduler.stop()

    assert len(ticks) >= 2


@pytest.mark.asyncio
async def test_stop_without_start_is_a_no_op(scheduler: MaintenanceScheduler):
    await scheduler.stop()
    assert not scheduler.running

"""Unit tests for the RecordStore."""

from datetime import timedelta

import pytest

from aviator.application.services import RecordStore
from aviator.domain.entities import LogLevel
from aviator.domain.exceptions import (
    DuplicateEntityError,
    EntityNotFoundError,
    EntityValidationError,
    PersistenceError,
)
from aviator.domain.timestamps import utcnow
from aviator.infrastructure.storage import InMemoryKeyValueStorage


class FailingStorage(InMemoryKeyValueStorage):
    """In-memory storage that refuses writes to the listed keys."""

    def __init__(self, fail_keys: set[str] | None = None):
        super().__init__()
        self.fail_keys = set(fail_keys or ())

    def set(self, key, value):
        if key in self.fail_keys:
            return False
        return super().set(key, value)


def _client_data(**overrides) -> dict:
    data = {"name": "A", "code": "X1", "phone": "1", "country": "US"}
    data.update(overrides)
    return data


@pytest.fixture
def storage() -> FailingStorage:
    return FailingStorage()


@pytest.fixture
def store(storage: FailingStorage) -> RecordStore:
    return RecordStore(storage)


# ── Clients ─────────────────────────────────────────────────────────


def test_create_client_assigns_id_and_defaults(store: RecordStore):
    client = store.create_client(_client_data())
    assert client.id
    assert client.status == "active"
    assert client.receipt_uploaded is False
    assert client.created_at == client.updated_at
    assert store.get_client(client.id).code == "X1"


def test_create_client_missing_required_field(store: RecordStore):
    with pytest.raises(EntityValidationError) as exc_info:
        store.create_client({"name": "A", "code": "X1", "country": "US"})
    assert exc_info.value.fields == ["phone"]
    assert store.list_clients() == []


def test_create_client_rejects_blank_required_field(store: RecordStore):
    with pytest.raises(EntityValidationError):
        store.create_client(_client_data(name="   "))


def test_client_code_lifecycle(store: RecordStore):
    first = store.create_client(_client_data())
    assert store.get_client_by_code("X1").id == first.id

    with pytest.raises(DuplicateEntityError):
        store.create_client(_client_data(name="B"))

    store.delete_client(first.id)
    assert store.get_client_by_code("X1") is None

    third = store.create_client(_client_data(name="C"))
    assert store.get_client_by_code("X1").id == third.id


def test_returned_client_is_a_copy(store: RecordStore):
    client = store.create_client(_client_data())
    client.name = "Mutated"
    assert store.get_client(client.id).name == "A"


def test_list_clients_by_status(store: RecordStore):
    store.create_client(_client_data(code="A1"))
    store.create_client(_client_data(code="A2", status="inactive"))
    assert [c.code for c in store.list_active_clients()] == ["A1"]
    assert [c.code for c in store.list_clients("inactive")] == ["A2"]
    assert len(store.list_clients()) == 2


def test_update_client_merges_allowed_fields(store: RecordStore):
    client = store.create_client(_client_data())
    updated = store.update_client(client.id, {"receiptUploaded": True, "receiptName": "r.pdf"})
    assert updated.receipt_uploaded is True
    assert updated.receipt_name == "r.pdf"
    assert updated.name == "A"
    assert updated.updated_at >= client.updated_at


def test_update_client_rejects_code_change_and_leaves_record_untouched(
    store: RecordStore, storage: FailingStorage
):
    client = store.create_client(_client_data())
    before = storage.raw("clients")

    with pytest.raises(EntityValidationError) as exc_info:
        store.update_client(client.id, {"code": "NEW", "name": "Changed"})

    assert exc_info.value.fields == ["code"]
    assert storage.raw("clients") == before
    assert store.get_client(client.id).name == "A"
    assert store.get_client_by_code("NEW") is None


def test_update_unknown_client(store: RecordStore):
    with pytest.raises(EntityNotFoundError):
        store.update_client("missing", {"name": "x"})


def test_delete_client_cascades_connection(store: RecordStore, storage: FailingStorage):
    client = store.create_client(_client_data())
    store.set_connection(client.id, True)
    assert store.is_connected(client.id)

    assert store.delete_client(client.id) is True

    assert store.get_connection(client.id) is None
    assert client.id not in storage.get("connections")
    assert store.get_client(client.id) is None


def test_delete_unknown_client(store: RecordStore):
    with pytest.raises(EntityNotFoundError):
        store.delete_client("missing")


def test_failed_write_keeps_memory_unchanged(storage: FailingStorage, store: RecordStore):
    storage.fail_keys = {"clients"}

    with pytest.raises(PersistenceError) as exc_info:
        store.create_client(_client_data())

    assert exc_info.value.keys == ["clients"]
    assert store.list_clients() == []
    assert store.get_client_by_code("X1") is None
    last = store.get_logs(limit=1)[0]
    assert last.level == LogLevel.ERROR.value
    assert last.message.startswith("Failed to create client")


# ── Predictions ─────────────────────────────────────────────────────


def test_create_prediction_defaults(store: RecordStore):
    prediction = store.create_prediction({"multiplier": 2.5})
    assert prediction.status == "active"
    assert prediction.result is None
    assert prediction.timestamp is not None


@pytest.mark.parametrize("multiplier", [0, -1.5, "2.0", None, True])
def test_create_prediction_rejects_bad_multiplier(store: RecordStore, multiplier):
    with pytest.raises(EntityValidationError):
        store.create_prediction({"multiplier": multiplier})


def test_completed_prediction_requires_result(store: RecordStore):
    with pytest.raises(EntityValidationError):
        store.create_prediction({"multiplier": 2.0, "status": "completed"})
    with pytest.raises(EntityValidationError):
        store.create_prediction({"multiplier": 2.0, "status": "active", "result": "success"})

    prediction = store.create_prediction({"multiplier": 2.0})
    with pytest.raises(EntityValidationError):
        store.update_prediction(prediction.id, {"status": "completed"})
    assert store.get_prediction(prediction.id).status == "active"

    completed = store.complete_prediction(prediction.id, "success")
    assert completed.is_completed
    assert completed.result == "success"


def test_update_prediction_rejects_unknown_fields(store: RecordStore):
    prediction = store.create_prediction({"multiplier": 2.0})
    with pytest.raises(EntityValidationError):
        store.update_prediction(prediction.id, {"id": "other"})


def test_recent_predictions(store: RecordStore):
    for value in (1.1, 1.2, 1.3, 1.4, 1.5, 1.6, 1.7):
        store.create_prediction({"multiplier": value})
    assert [p.multiplier for p in store.recent_predictions()] == [1.3, 1.4, 1.5, 1.6, 1.7]
    assert store.recent_predictions(0) == []


def test_delete_prediction(store: RecordStore):
    prediction = store.create_prediction({"multiplier": 2.0})
    store.delete_prediction(prediction.id)
    assert store.get_prediction(prediction.id) is None
    with pytest.raises(EntityNotFoundError):
        store.delete_prediction(prediction.id)


# ── Settings & connections ──────────────────────────────────────────


def test_settings_defaults_and_merge(store: RecordStore):
    settings = store.get_settings()
    assert (settings.algorithm, settings.update_frequency, settings.success_threshold) == ("random", 5, 70)

    updated = store.update_settings({"algorithm": "pattern", "updateFrequency": 10})
    assert updated.algorithm == "pattern"
    assert updated.update_frequency == 10
    assert updated.success_threshold == 70
    assert updated.updated_at is not None


def test_set_connection_requires_existing_client(store: RecordStore):
    with pytest.raises(EntityNotFoundError):
        store.set_connection("ghost", True)
    assert store.get_all_connections() == {}


def test_is_connected_defaults_to_false(store: RecordStore):
    client = store.create_client(_client_data())
    assert store.is_connected(client.id) is False
    store.set_connection(client.id, True)
    store.set_connection(client.id, False)
    assert store.is_connected(client.id) is False


# ── Logs ────────────────────────────────────────────────────────────


def test_log_keeps_the_newest_thousand_entries(store: RecordStore):
    for i in range(1500):
        store.log(f"entry {i}")

    logs = store.get_logs()
    assert len(logs) == 1000
    assert logs[0].message == "entry 500"
    assert logs[-1].message == "entry 1499"


def test_log_survives_storage_failure(storage: FailingStorage, store: RecordStore):
    storage.fail_keys = {"logs"}
    entry = store.log("still here", "warning")
    assert entry.level == "warning"
    assert store.get_logs()[-1].message == "still here"


def test_get_logs_filters_by_level(store: RecordStore):
    store.log("a")
    store.log("b", LogLevel.ERROR)
    assert [e.message for e in store.get_logs(level="error")] == ["b"]


# ── Maintenance & statistics ────────────────────────────────────────


def test_sweep_retention_drops_old_completed_predictions(store: RecordStore):
    old = store.create_prediction({"multiplier": 2.0, "status": "completed", "result": "failed"})
    active = store.create_prediction({"multiplier": 3.0})

    removed = store.sweep_retention(max_age_days=30, now=utcnow() + timedelta(days=31))

    assert removed == 1
    assert store.get_prediction(old.id) is None
    assert store.get_prediction(active.id) is not None


def test_sweep_retention_keeps_recent_predictions(store: RecordStore):
    store.create_prediction({"multiplier": 2.0, "status": "completed", "result": "success"})
    assert store.sweep_retention(max_age_days=30) == 0
    assert len(store.list_predictions()) == 1


def test_statistics_success_rate_is_zero_without_completions(store: RecordStore):
    store.create_prediction({"multiplier": 2.0})
    stats = store.get_statistics()
    assert stats.completed_predictions == 0
    assert stats.success_rate == 0


def test_statistics_counts(store: RecordStore):
    active = store.create_client(_client_data(code="A1"))
    store.create_client(_client_data(code="A2", status="inactive"))
    store.set_connection(active.id, True)
    for result in ("success", "success", "failed"):
        store.create_prediction({"multiplier": 2.0, "status": "completed", "result": result})
    store.create_prediction({"multiplier": 1.5})

    stats = store.get_statistics()

    assert stats.total_clients == 2
    assert stats.active_clients == 1
    assert stats.inactive_clients == 1
    assert stats.connected_clients == 1
    assert stats.total_predictions == 4
    assert stats.active_predictions == 1
    assert stats.completed_predictions == 3
    assert stats.success_rate == 67
    assert stats.database_size_kb >= 1


# ── Loading ─────────────────────────────────────────────────────────


def test_load_falls_back_on_corrupt_keys(storage: FailingStorage):
    storage.put_raw("clients", "{not json")
    storage.set("predictions", [{"id": "p1", "multiplier": 2.0, "status": "active", "result": None}])

    store = RecordStore(storage)
    store.load()

    assert store.list_clients() == []
    assert store.get_prediction("p1").multiplier == 2.0
    assert store.get_settings().algorithm == "random"
    assert store.get_logs()[-1].message == "Database loaded from storage"


def test_load_skips_duplicate_client_codes(storage: FailingStorage):
    storage.set("clients", [
        {"id": "c1", "name": "A", "code": "DUP", "phone": "1", "country": "US"},
        {"id": "c2", "name": "B", "code": "DUP", "phone": "2", "country": "US"},
    ])
    store = RecordStore(storage)
    store.load()
    assert [c.id for c in store.list_clients()] == ["c1"]


def test_load_skips_client_with_list_code(storage: FailingStorage):
    storage.set("clients", [
        {"id": "c1", "name": "A", "code": ["X1"], "phone": "1", "country": "US"},
        {"id": "c2", "name": "B", "code": "X2", "phone": "2", "country": "US"},
    ])
    store = RecordStore(storage)
    store.load()
    assert [c.code for c in store.list_clients()] == ["X2"]


def test_state_survives_reload(storage: FailingStorage, store: RecordStore):
    client = store.create_client(_client_data(subscription="3 Months", legacyField="kept"))
    store.set_connection(client.id, True)

    reloaded = RecordStore(storage)
    reloaded.load()

    again = reloaded.get_client(client.id)
    assert again.subscription == "3 Months"
    assert again.extra == {"legacyField": "kept"}
    assert reloaded.is_connected(client.id)


def test_reset_empties_collections(store: RecordStore):
    store.create_client(_client_data())
    store.update_settings({"algorithm": "ai"})
    store.reset()
    assert store.list_clients() == []
    assert store.get_settings().algorithm == "random"
    assert store.metadata.record_counts["clients"] == 0

"""Record store — the predictor's collections held in memory and mirrored to key-value storage.

Every mutation follows the same sequence:

    validate → stage a copy → persist the affected key → commit to memory

so a refused write raises ``PersistenceError`` and leaves the in-memory state
exactly as it was. Whole-store replacements (restore, import, reset) commit
first and then flush every key; if that flush fails, memory is ahead of disk
until the next successful autosave.
"""

import copy
import json
import logging
import math
from contextlib import contextmanager
from collections.abc import Iterator
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any

from aviator.application.interfaces import KeyValueStorage
from aviator.domain.entities import (
    CLIENT_UPDATABLE_FIELDS,
    PREDICTION_UPDATABLE_FIELDS,
    Client,
    ClientStatus,
    Connection,
    LogEntry,
    LogLevel,
    Prediction,
    PredictionResult,
    PredictionStatus,
    PredictorSettings,
    StoreMetadata,
    StoreStatistics,
)
from aviator.domain.entities.client import CLIENT_REQUIRED_FIELDS
from aviator.domain.entities.prediction import is_positive_number
from aviator.domain.exceptions import (
    DuplicateEntityError,
    EntityNotFoundError,
    EntityValidationError,
    PersistenceError,
    StoreError,
)
from aviator.domain.timestamps import parse_timestamp, utcnow

logger = logging.getLogger(__name__)

CLIENTS_KEY = "clients"
PREDICTIONS_KEY = "predictions"
SETTINGS_KEY = "settings"
CONNECTIONS_KEY = "connections"
LOGS_KEY = "logs"
COLLECTION_KEYS = (CLIENTS_KEY, PREDICTIONS_KEY, SETTINGS_KEY, CONNECTIONS_KEY, LOGS_KEY)

STORE_VERSION = "1.0"
DEFAULT_LOG_CAPACITY = 1000

_PY_LEVELS = {
    LogLevel.INFO.value: logging.INFO,
    LogLevel.WARNING.value: logging.WARNING,
    LogLevel.ERROR.value: logging.ERROR,
}


@dataclass
class _StoreState:
    clients: dict[str, Client] = field(default_factory=dict)
    client_ids_by_code: dict[str, str] = field(default_factory=dict)
    predictions: dict[str, Prediction] = field(default_factory=dict)
    settings: PredictorSettings = field(default_factory=PredictorSettings)
    connections: dict[str, Connection] = field(default_factory=dict)
    logs: list[LogEntry] = field(default_factory=list)


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


class RecordStore:
    """Owns the clients, predictions, settings, connections and log collections.

    Collections are dicts keyed by id (plus a code index for clients), kept in
    insertion order. Callers always receive copies; nothing outside the store
    holds a reference into its state.
    """

    def __init__(
        self,
        storage: KeyValueStorage,
        *,
        version: str = STORE_VERSION,
        log_capacity: int = DEFAULT_LOG_CAPACITY,
    ):
        self._storage = storage
        self._version = version
        self._log_capacity = max(1, log_capacity)
        self._state = _StoreState()
        self._metadata = StoreMetadata(version=version)
        self._refresh_metadata()

    @property
    def version(self) -> str:
        return self._version

    @property
    def log_capacity(self) -> int:
        return self._log_capacity

    @property
    def metadata(self) -> StoreMetadata:
        return copy.deepcopy(self._metadata)

    # ── Loading & flushing ──────────────────────────────────────────

    def load(self) -> None:
        """Read every collection from storage, falling back to empty defaults."""
        raw = {key: self._storage.get(key) for key in COLLECTION_KEYS}
        self._state = self._parse_state(raw)
        self._refresh_metadata()
        self.log("Database loaded from storage")

    def flush_all(self) -> None:
        """Write every collection to storage.

        All keys are attempted; the raised ``PersistenceError`` names each
        one that failed.
        """
        with self._logged_failure("Failed to save all data"):
            self._flush()
        logger.debug("All collections flushed to storage")

    def export_state(self) -> dict[str, Any]:
        """Return a deep, JSON-ready copy of every collection."""
        state = self._state
        return copy.deepcopy({
            CLIENTS_KEY: [c.to_dict() for c in state.clients.values()],
            PREDICTIONS_KEY: [p.to_dict() for p in state.predictions.values()],
            SETTINGS_KEY: state.settings.to_dict(),
            CONNECTIONS_KEY: {cid: conn.to_dict() for cid, conn in state.connections.items()},
            LOGS_KEY: [e.to_dict() for e in state.logs],
        })

    def replace_state(self, data: dict[str, Any]) -> None:
        """Destructively replace every collection from serialized ``data`` and flush.

        No merge takes place. Callers are responsible for logging failures.
        """
        if not isinstance(data, dict):
            raise EntityValidationError("Store", "state must be a mapping of collections")
        self._state = self._parse_state(data)
        self._refresh_metadata()
        self._flush()

    def reset(self) -> None:
        """Empty every collection and restore default settings."""
        with self._logged_failure("Failed to reset database"):
            self.replace_state({SETTINGS_KEY: PredictorSettings().to_dict()})
        self.log("Database reset completed", LogLevel.WARNING)

    # ── Clients ─────────────────────────────────────────────────────

    def create_client(self, data: dict[str, Any]) -> Client:
        """Validate and add a client. Raises on invalid data or a taken code."""
        with self._logged_failure("Failed to create client"):
            client = self._build_client(data)
            if client.code in self._state.client_ids_by_code:
                raise DuplicateEntityError("Client", "code", client.code)
            if client.id in self._state.clients:
                raise DuplicateEntityError("Client", "id", client.id)

            self._write(CLIENTS_KEY, [*self._serialize_clients(), client.to_dict()])
            self._state.clients[client.id] = client
            self._state.client_ids_by_code[client.code] = client.id
            self._refresh_metadata()

        self.log(f"Client created: {client.name} ({client.code})")
        return copy.deepcopy(client)

    def get_client(self, client_id: str) -> Client | None:
        client = self._state.clients.get(str(client_id))
        return copy.deepcopy(client) if client else None

    def get_client_by_code(self, code: str) -> Client | None:
        client_id = self._state.client_ids_by_code.get(code)
        return self.get_client(client_id) if client_id is not None else None

    def list_clients(self, status: str | None = None) -> list[Client]:
        return [
            copy.deepcopy(c)
            for c in self._state.clients.values()
            if status is None or c.status == status
        ]

    def list_active_clients(self) -> list[Client]:
        return self.list_clients(ClientStatus.ACTIVE.value)

    def update_client(self, client_id: str, fields: dict[str, Any]) -> Client:
        """Shallow-merge allowed fields into a client.

        Only ``CLIENT_UPDATABLE_FIELDS`` may appear in ``fields``; anything
        else rejects the whole update and leaves the record untouched.
        """
        with self._logged_failure("Failed to update client"):
            current = self._state.clients.get(str(client_id))
            if current is None:
                raise EntityNotFoundError("Client", client_id)
            if not isinstance(fields, dict):
                raise EntityValidationError("Client", "update must be a mapping of fields")
            forbidden = sorted(set(fields) - CLIENT_UPDATABLE_FIELDS)
            if forbidden:
                raise EntityValidationError(
                    "Client",
                    f"fields not allowed in an update: {', '.join(forbidden)}",
                    forbidden,
                )

            staged = copy.deepcopy(current)
            staged.update(fields)
            self._write(CLIENTS_KEY, [
                staged.to_dict() if c.id == staged.id else c.to_dict()
                for c in self._state.clients.values()
            ])
            self._state.clients[staged.id] = staged
            self._refresh_metadata()

        self.log(f"Client updated: {staged.name}")
        return copy.deepcopy(staged)

    def delete_client(self, client_id: str) -> bool:
        """Remove a client together with its connection entry."""
        key = str(client_id)
        with self._logged_failure("Failed to delete client"):
            client = self._state.clients.get(key)
            if client is None:
                raise EntityNotFoundError("Client", client_id)

            # Connection first: a client left without one simply reads as disconnected
            if key in self._state.connections:
                self._write(CONNECTIONS_KEY, {
                    cid: conn.to_dict()
                    for cid, conn in self._state.connections.items()
                    if cid != key
                })
                del self._state.connections[key]

            self._write(CLIENTS_KEY, [c.to_dict() for c in self._state.clients.values() if c.id != key])
            del self._state.clients[key]
            if self._state.client_ids_by_code.get(client.code) == key:
                del self._state.client_ids_by_code[client.code]
            self._refresh_metadata()

        self.log(f"Client deleted: {client.name} ({client.code})", LogLevel.WARNING)
        return True

    # ── Predictions ─────────────────────────────────────────────────

    def create_prediction(self, data: dict[str, Any]) -> Prediction:
        with self._logged_failure("Failed to create prediction"):
            prediction = self._build_prediction(data)
            if prediction.id in self._state.predictions:
                raise DuplicateEntityError("Prediction", "id", prediction.id)

            self._write(PREDICTIONS_KEY, [*self._serialize_predictions(), prediction.to_dict()])
            self._state.predictions[prediction.id] = prediction
            self._refresh_metadata()

        self.log(f"Prediction created: {prediction.multiplier}x")
        return copy.deepcopy(prediction)

    def get_prediction(self, prediction_id: str) -> Prediction | None:
        prediction = self._state.predictions.get(str(prediction_id))
        return copy.deepcopy(prediction) if prediction else None

    def list_predictions(self, status: str | None = None) -> list[Prediction]:
        return [
            copy.deepcopy(p)
            for p in self._state.predictions.values()
            if status is None or p.status == status
        ]

    def list_active_predictions(self) -> list[Prediction]:
        return self.list_predictions(PredictionStatus.ACTIVE.value)

    def recent_predictions(self, limit: int = 5) -> list[Prediction]:
        """Return the ``limit`` most recently added predictions, oldest first."""
        if limit <= 0:
            return []
        return [copy.deepcopy(p) for p in list(self._state.predictions.values())[-limit:]]

    def update_prediction(self, prediction_id: str, fields: dict[str, Any]) -> Prediction:
        with self._logged_failure("Failed to update prediction"):
            current = self._state.predictions.get(str(prediction_id))
            if current is None:
                raise EntityNotFoundError("Prediction", prediction_id)
            if not isinstance(fields, dict):
                raise EntityValidationError("Prediction", "update must be a mapping of fields")
            forbidden = sorted(set(fields) - PREDICTION_UPDATABLE_FIELDS)
            if forbidden:
                raise EntityValidationError(
                    "Prediction",
                    f"fields not allowed in an update: {', '.join(forbidden)}",
                    forbidden,
                )

            staged = copy.deepcopy(current)
            staged.update(fields)
            if not is_positive_number(staged.multiplier):
                raise EntityValidationError("Prediction", "multiplier must be a positive number", ["multiplier"])
            problem = staged.invariant_error()
            if problem:
                raise EntityValidationError("Prediction", problem, ["status", "result"])

            self._write(PREDICTIONS_KEY, [
                staged.to_dict() if p.id == staged.id else p.to_dict()
                for p in self._state.predictions.values()
            ])
            self._state.predictions[staged.id] = staged
            self._refresh_metadata()

        self.log(f"Prediction updated: {staged.multiplier}x")
        return copy.deepcopy(staged)

    def complete_prediction(self, prediction_id: str, result: str) -> Prediction:
        return self.update_prediction(
            prediction_id,
            {"status": PredictionStatus.COMPLETED.value, "result": result},
        )

    def delete_prediction(self, prediction_id: str) -> bool:
        key = str(prediction_id)
        with self._logged_failure("Failed to delete prediction"):
            prediction = self._state.predictions.get(key)
            if prediction is None:
                raise EntityNotFoundError("Prediction", prediction_id)

            self._write(PREDICTIONS_KEY, [
                p.to_dict() for p in self._state.predictions.values() if p.id != key
            ])
            del self._state.predictions[key]
            self._refresh_metadata()

        self.log(f"Prediction deleted: {prediction.multiplier}x", LogLevel.WARNING)
        return True

    # ── Settings ────────────────────────────────────────────────────

    def get_settings(self) -> PredictorSettings:
        return copy.deepcopy(self._state.settings)

    def update_settings(self, fields: dict[str, Any]) -> PredictorSettings:
        """Shallow-merge ``fields`` into the settings. Values are not range-checked."""
        with self._logged_failure("Failed to update settings"):
            if not isinstance(fields, dict):
                raise EntityValidationError("Settings", "update must be a mapping of fields")
            staged = copy.deepcopy(self._state.settings)
            staged.merge(fields)
            self._write(SETTINGS_KEY, staged.to_dict())
            self._state.settings = staged
            self._refresh_metadata()

        self.log("Settings updated")
        return copy.deepcopy(staged)

    # ── Connections ─────────────────────────────────────────────────

    def set_connection(
        self,
        client_id: str,
        connected: bool,
        timestamp: datetime | int | str | None = None,
    ) -> Connection:
        """Upsert the connection flag of an existing client."""
        key = str(client_id)
        with self._logged_failure("Failed to update client connection"):
            if key not in self._state.clients:
                raise EntityNotFoundError("Client", client_id)
            connection = Connection(
                connected=bool(connected),
                timestamp=parse_timestamp(timestamp) or utcnow(),
            )
            staged = {cid: conn.to_dict() for cid, conn in self._state.connections.items()}
            staged[key] = connection.to_dict()
            self._write(CONNECTIONS_KEY, staged)
            self._state.connections[key] = connection
            self._refresh_metadata()

        self.log(f"Client connection updated: {key}")
        return copy.deepcopy(connection)

    def get_connection(self, client_id: str) -> Connection | None:
        connection = self._state.connections.get(str(client_id))
        return copy.deepcopy(connection) if connection else None

    def get_all_connections(self) -> dict[str, Connection]:
        return copy.deepcopy(self._state.connections)

    def is_connected(self, client_id: str) -> bool:
        connection = self._state.connections.get(str(client_id))
        return bool(connection and connection.connected)

    # ── Logs ────────────────────────────────────────────────────────

    def log(self, message: str, level: LogLevel | str = LogLevel.INFO) -> LogEntry:
        """Append a diagnostic entry, dropping the oldest past capacity.

        Persisting the log is best-effort and never raises.
        """
        try:
            level_value = LogLevel(level).value
        except ValueError:
            level_value = LogLevel.INFO.value

        entry = LogEntry(message=message, level=level_value)
        logs = self._state.logs
        logs.append(entry)
        if len(logs) > self._log_capacity:
            del logs[: len(logs) - self._log_capacity]

        logger.log(_PY_LEVELS[level_value], "%s", message)
        if not self._storage.set(LOGS_KEY, [e.to_dict() for e in logs]):
            logger.warning("Log entries could not be persisted; keeping %d in memory", len(logs))
        return copy.deepcopy(entry)

    def get_logs(self, limit: int | None = None, level: str | None = None) -> list[LogEntry]:
        """Return log entries oldest first, optionally only the newest ``limit``."""
        entries = [e for e in self._state.logs if level is None or e.level == level]
        if limit is not None:
            entries = entries[-limit:] if limit > 0 else []
        return copy.deepcopy(entries)

    # ── Maintenance ─────────────────────────────────────────────────

    def sweep_retention(self, max_age_days: int = 30, now: datetime | None = None) -> int:
        """Drop completed predictions older than ``max_age_days`` and trim the log.

        Returns the number of predictions removed.
        """
        cutoff = (now or utcnow()) - timedelta(days=max_age_days)
        with self._logged_failure("Failed to cleanup database"):
            kept = {
                pid: p
                for pid, p in self._state.predictions.items()
                if not (p.is_completed and p.created_at <= cutoff)
            }
            removed = len(self._state.predictions) - len(kept)
            if removed:
                self._write(PREDICTIONS_KEY, [p.to_dict() for p in kept.values()])
                self._state.predictions = kept

            logs = self._state.logs
            if len(logs) > self._log_capacity:
                del logs[: len(logs) - self._log_capacity]

            self._refresh_metadata()
            self._flush()

        self.log(f"Database cleanup completed: {removed} old predictions removed")
        return removed

    # ── Statistics ──────────────────────────────────────────────────

    def get_statistics(self, last_backup: datetime | None = None) -> StoreStatistics:
        clients = list(self._state.clients.values())
        predictions = list(self._state.predictions.values())
        completed = [p for p in predictions if p.is_completed]
        successes = sum(1 for p in completed if p.result == PredictionResult.SUCCESS.value)
        active_clients = sum(1 for c in clients if c.is_active)

        return StoreStatistics(
            total_clients=len(clients),
            active_clients=active_clients,
            inactive_clients=len(clients) - active_clients,
            total_predictions=len(predictions),
            active_predictions=sum(1 for p in predictions if p.status == PredictionStatus.ACTIVE.value),
            completed_predictions=len(completed),
            connected_clients=sum(1 for c in self._state.connections.values() if c.connected),
            success_rate=_round_half_up(successes * 100 / len(completed)) if completed else 0,
            database_size_kb=self.database_size_kb(),
            last_backup=last_backup,
        )

    def database_size_kb(self) -> int:
        """Approximate size of the serialized store in kilobytes."""
        try:
            size = len(json.dumps(self.export_state()))
        except (TypeError, ValueError):
            return 0
        return _round_half_up(size / 1024)

    # ── Internals ───────────────────────────────────────────────────

    @contextmanager
    def _logged_failure(self, action: str) -> Iterator[None]:
        """Record any store failure in the log collection, then let it propagate."""
        try:
            yield
        except StoreError as exc:
            self.log(f"{action}: {exc}", LogLevel.ERROR)
            raise

    def _write(self, key: str, payload: Any) -> None:
        if not self._storage.set(key, payload):
            raise PersistenceError(key)

    def _flush(self) -> None:
        failed = [
            key
            for key, payload in self.export_state().items()
            if not self._storage.set(key, payload)
        ]
        self._refresh_metadata()
        if failed:
            raise PersistenceError(failed)

    def _serialize_clients(self) -> list[dict[str, Any]]:
        return [c.to_dict() for c in self._state.clients.values()]

    def _serialize_predictions(self) -> list[dict[str, Any]]:
        return [p.to_dict() for p in self._state.predictions.values()]

    def _refresh_metadata(self) -> None:
        state = self._state
        self._metadata = StoreMetadata(
            version=self._version,
            record_counts={
                CLIENTS_KEY: len(state.clients),
                PREDICTIONS_KEY: len(state.predictions),
                CONNECTIONS_KEY: len(state.connections),
                LOGS_KEY: len(state.logs),
            },
            last_updated=utcnow(),
        )

    def _build_client(self, data: Any) -> Client:
        if not isinstance(data, dict):
            raise EntityValidationError("Client", "client data must be a mapping")
        missing = [
            name for name in CLIENT_REQUIRED_FIELDS
            if not isinstance(data.get(name), str) or not data[name].strip()
        ]
        if missing:
            raise EntityValidationError(
                "Client", f"missing or empty required fields: {', '.join(missing)}", missing
            )

        record = {k: v for k, v in data.items() if k not in ("createdAt", "updatedAt")}
        record["status"] = record.get("status") or ClientStatus.ACTIVE.value
        if record["status"] not in (ClientStatus.ACTIVE.value, ClientStatus.INACTIVE.value):
            raise EntityValidationError("Client", f"unknown status '{record['status']}'", ["status"])

        client = Client.from_dict(record)
        client.created_at = client.updated_at = utcnow()
        return client

    def _build_prediction(self, data: Any) -> Prediction:
        if not isinstance(data, dict):
            raise EntityValidationError("Prediction", "prediction data must be a mapping")
        if not is_positive_number(data.get("multiplier")):
            raise EntityValidationError(
                "Prediction", "multiplier must be a positive number", ["multiplier"]
            )

        record = {k: v for k, v in data.items() if k not in ("createdAt", "updatedAt")}
        record["status"] = record.get("status") or PredictionStatus.ACTIVE.value
        now = utcnow()
        record["timestamp"] = record.get("timestamp") or now

        prediction = Prediction.from_dict(record)
        prediction.created_at = prediction.updated_at = now
        problem = prediction.invariant_error()
        if problem:
            raise EntityValidationError("Prediction", problem, ["status", "result"])
        return prediction

    def _parse_state(self, raw: dict[str, Any]) -> _StoreState:
        """Build in-memory collections from serialized data, skipping malformed records."""
        state = _StoreState()

        for item in _as_list(raw.get(CLIENTS_KEY), CLIENTS_KEY):
            if not isinstance(item, dict) or not (
                _is_scalar_key(item.get("id")) and _is_scalar_key(item.get("code"))
            ):
                logger.warning("Skipping malformed client record: %r", item)
                continue
            client = Client.from_dict(item)
            if client.id in state.clients or client.code in state.client_ids_by_code:
                logger.warning("Skipping duplicate client %s (%s)", client.id, client.code)
                continue
            state.clients[client.id] = client
            state.client_ids_by_code[client.code] = client.id

        for item in _as_list(raw.get(PREDICTIONS_KEY), PREDICTIONS_KEY):
            if not isinstance(item, dict) or not _is_scalar_key(item.get("id")):
                logger.warning("Skipping malformed prediction record: %r", item)
                continue
            prediction = Prediction.from_dict(item)
            if prediction.id in state.predictions:
                logger.warning("Skipping duplicate prediction %s", prediction.id)
                continue
            state.predictions[prediction.id] = prediction

        settings = raw.get(SETTINGS_KEY)
        if isinstance(settings, dict):
            state.settings = PredictorSettings.from_dict(settings)

        connections = raw.get(CONNECTIONS_KEY)
        if isinstance(connections, dict):
            for client_id, item in connections.items():
                if isinstance(item, dict):
                    state.connections[str(client_id)] = Connection.from_dict(item)

        logs = [LogEntry.from_dict(e) for e in _as_list(raw.get(LOGS_KEY), LOGS_KEY) if isinstance(e, dict)]
        state.logs = logs[-self._log_capacity:]
        return state


def _is_scalar_key(value: Any) -> bool:
    """Ids and codes may be missing, strings or integers; anything else is malformed."""
    return value is None or (isinstance(value, (str, int)) and not isinstance(value, bool))


def _as_list(value: Any, key: str) -> list[Any]:
    if value is None:
        return []
    if not isinstance(value, list):
        logger.warning("Expected a list under '%s', got %s — ignoring", key, type(value).__name__)
        return []
    return value

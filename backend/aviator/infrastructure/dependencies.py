"""FastAPI dependency injection — wires infrastructure to application layer.

The record store is process-wide state, so the services are built once in
``build_container`` during the lifespan and parked on ``app.state``. The
``get_*`` providers below hand them to the endpoints.
"""

import logging
from dataclasses import dataclass
from pathlib import Path

from fastapi import Request

from aviator.config import Settings
from aviator.application.interfaces import KeyValueStorage
from aviator.application.services import (
    AccessService,
    BackupManager,
    DataTransferService,
    MaintenanceScheduler,
    PredictionEngine,
    RecordStore,
)
from aviator.infrastructure.storage import InMemoryKeyValueStorage, JsonFileKeyValueStorage

logger = logging.getLogger(__name__)


@dataclass
class StoreContainer:
    settings: Settings
    storage: KeyValueStorage
    store: RecordStore
    backups: BackupManager
    transfer: DataTransferService
    engine: PredictionEngine
    access: AccessService
    scheduler: MaintenanceScheduler


def build_storage(settings: Settings) -> KeyValueStorage:
    """Pick the key-value backend named by ``settings.storage_backend``."""
    backend = settings.storage_backend.strip().lower()
    if backend == "memory":
        return InMemoryKeyValueStorage(quota_bytes=settings.storage_quota_bytes)
    if backend == "file":
        return JsonFileKeyValueStorage(Path(settings.data_dir), quota_bytes=settings.storage_quota_bytes)
    raise ValueError(f"Unknown storage backend '{settings.storage_backend}' (expected 'file' or 'memory')")


def build_container(settings: Settings, storage: KeyValueStorage | None = None) -> StoreContainer:
    """Construct every service around one shared store. Nothing is loaded yet."""
    storage = storage if storage is not None else build_storage(settings)
    store = RecordStore(storage, version=settings.store_version, log_capacity=settings.log_capacity)
    backups = BackupManager(store, storage, retention=settings.backup_retention)
    scheduler = MaintenanceScheduler(
        store,
        backups,
        autosave_interval=settings.autosave_interval_seconds,
        snapshot_interval=settings.snapshot_interval_seconds,
        retention_interval=settings.retention_interval_seconds,
        retention_max_age_days=settings.prediction_max_age_days,
    )
    logger.debug("Store container built on %s", type(storage).__name__)
    return StoreContainer(
        settings=settings,
        storage=storage,
        store=store,
        backups=backups,
        transfer=DataTransferService(store, backups),
        engine=PredictionEngine(store),
        access=AccessService(store, settings.admin_username, settings.admin_password),
        scheduler=scheduler,
    )


def get_container(request: Request) -> StoreContainer:
    return request.app.state.container


def get_record_store(request: Request) -> RecordStore:
    return get_container(request).store


def get_backup_manager(request: Request) -> BackupManager:
    return get_container(request).backups


def get_transfer_service(request: Request) -> DataTransferService:
    return get_container(request).transfer


def get_prediction_engine(request: Request) -> PredictionEngine:
    return get_container(request).engine


def get_access_service(request: Request) -> AccessService:
    return get_container(request).access

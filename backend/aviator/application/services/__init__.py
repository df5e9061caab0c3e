from .record_store import RecordStore
from .backup_service import BackupManager
from .transfer_service import DataTransferService
from .prediction_engine import PredictionEngine
from .access_service import AccessService
from .maintenance_scheduler import MaintenanceScheduler
from .sample_data import seed_sample_data

__all__ = [
    "RecordStore",
    "BackupManager",
    "DataTransferService",
    "PredictionEngine",
    "AccessService",
    "MaintenanceScheduler",
    "seed_sample_data",
]

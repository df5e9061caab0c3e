from .client import Client, ClientStatus, CLIENT_UPDATABLE_FIELDS, generate_client_code
from .prediction import (
    Prediction,
    PredictionStatus,
    PredictionResult,
    PREDICTION_UPDATABLE_FIELDS,
)
from .connection import Connection
from .predictor_settings import PredictorSettings, PredictionAlgorithm
from .log_entry import LogEntry, LogLevel
from .snapshot import Snapshot, SnapshotInfo, StoreMetadata, StoreStatistics

__all__ = [
    "Client",
    "ClientStatus",
    "CLIENT_UPDATABLE_FIELDS",
    "generate_client_code",
    "Prediction",
    "PredictionStatus",
    "PredictionResult",
    "PREDICTION_UPDATABLE_FIELDS",
    "Connection",
    "PredictorSettings",
    "PredictionAlgorithm",
    "LogEntry",
    "LogLevel",
    "Snapshot",
    "SnapshotInfo",
    "StoreMetadata",
    "StoreStatistics",
]

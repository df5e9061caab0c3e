from .client import ClientCreate, ClientUpdate, ClientResponse
from .prediction import PredictionCreate, PredictionUpdate, PredictionResponse
from .store import (
    PredictorSettingsResponse,
    PredictorSettingsUpdate,
    ConnectionUpdate,
    ConnectionResponse,
    StatisticsResponse,
    LogEntryResponse,
    SnapshotInfoResponse,
    SnapshotCreatedResponse,
    ExportFileResponse,
    MaintenanceResult,
    AdminLoginRequest,
    ClientLoginRequest,
)

__all__ = [
    "ClientCreate",
    "ClientUpdate",
    "ClientResponse",
    "PredictionCreate",
    "PredictionUpdate",
    "PredictionResponse",
    "PredictorSettingsResponse",
    "PredictorSettingsUpdate",
    "ConnectionUpdate",
    "ConnectionResponse",
    "StatisticsResponse",
    "LogEntryResponse",
    "SnapshotInfoResponse",
    "SnapshotCreatedResponse",
    "ExportFileResponse",
    "MaintenanceResult",
    "AdminLoginRequest",
    "ClientLoginRequest",
]

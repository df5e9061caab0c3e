"""Pydantic DTOs for settings, connections, statistics, logs, backups and access."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class PredictorSettingsResponse(BaseModel):
    algorithm: str
    update_frequency: Any
    success_threshold: Any
    updated_at: datetime | None = None

    model_config = {"from_attributes": True}


class PredictorSettingsUpdate(BaseModel):
    """Shallow-merge payload. Values are stored as given, without range checks."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")

    algorithm: str | None = Field(None, examples=["pattern"])
    update_frequency: Any = Field(None, examples=[5])
    success_threshold: Any = Field(None, examples=[70])


class ConnectionUpdate(BaseModel):
    connected: bool


class ConnectionResponse(BaseModel):
    client_id: str
    connected: bool
    timestamp: datetime
    updated_at: datetime


class StatisticsResponse(BaseModel):
    total_clients: int
    active_clients: int
    inactive_clients: int
    total_predictions: int
    active_predictions: int
    completed_predictions: int
    connected_clients: int
    success_rate: int
    database_size_kb: int
    last_backup: datetime | None

    model_config = {"from_attributes": True}


class LogEntryResponse(BaseModel):
    timestamp: datetime
    level: str
    message: str

    model_config = {"from_attributes": True}


class SnapshotInfoResponse(BaseModel):
    key: str
    timestamp: datetime
    version: str
    record_counts: dict[str, int]

    model_config = {"from_attributes": True}


class SnapshotCreatedResponse(BaseModel):
    key: str


class ExportFileResponse(BaseModel):
    path: str


class MaintenanceResult(BaseModel):
    removed_predictions: int = 0
    backup_key: str | None = None


class AdminLoginRequest(BaseModel):
    username: str
    password: str


class ClientLoginRequest(BaseModel):
    code: str = Field(..., min_length=1)

"""Read-only dashboard endpoints: statistics and the diagnostic log."""

from fastapi import APIRouter, Depends, Query

from aviator.application.schemas.store import LogEntryResponse, StatisticsResponse
from aviator.application.services import BackupManager, RecordStore
from aviator.infrastructure.dependencies import get_backup_manager, get_record_store

router = APIRouter(tags=["Dashboard"])


@router.get("/statistics", response_model=StatisticsResponse)
async def get_statistics(
    store: RecordStore = Depends(get_record_store),
    backups: BackupManager = Depends(get_backup_manager),
) -> StatisticsResponse:
    statistics = store.get_statistics(last_backup=backups.latest_snapshot_time())
    return StatisticsResponse.model_validate(statistics, from_attributes=True)


@router.get("/logs", response_model=list[LogEntryResponse])
async def get_logs(
    limit: int | None = Query(None, ge=1, le=1000, description="Only the newest N entries"),
    level: str | None = Query(None, description="Filter by level (info, warning, error)"),
    store: RecordStore = Depends(get_record_store),
) -> list[LogEntryResponse]:
    """Log entries, oldest first."""
    return [
        LogEntryResponse.model_validate(e, from_attributes=True)
        for e in store.get_logs(limit=limit, level=level)
    ]

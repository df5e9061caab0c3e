"""Snapshot endpoints — list, create and restore whole-store backups."""

from fastapi import APIRouter, Depends, HTTPException, status

from aviator.application.schemas.store import SnapshotCreatedResponse, SnapshotInfoResponse
from aviator.application.services import BackupManager
from aviator.domain.exceptions import StoreError
from aviator.infrastructure.dependencies import get_backup_manager
from aviator.presentation.api.errors import to_http_exception

router = APIRouter(prefix="/backups", tags=["Backups"])


@router.get("", response_model=list[SnapshotInfoResponse])
async def list_backups(
    backups: BackupManager = Depends(get_backup_manager),
) -> list[SnapshotInfoResponse]:
    """Stored snapshots, newest first."""
    return [
        SnapshotInfoResponse.model_validate(info, from_attributes=True)
        for info in backups.list_snapshots()
    ]


@router.post("", response_model=SnapshotCreatedResponse, status_code=status.HTTP_201_CREATED)
async def create_backup(
    backups: BackupManager = Depends(get_backup_manager),
) -> SnapshotCreatedResponse:
    key = backups.create_snapshot()
    if key is None:
        raise HTTPException(
            status_code=status.HTTP_507_INSUFFICIENT_STORAGE,
            detail="Backup could not be written",
        )
    return SnapshotCreatedResponse(key=key)


@router.post("/{key}/restore", status_code=status.HTTP_204_NO_CONTENT)
async def restore_backup(
    key: str,
    backups: BackupManager = Depends(get_backup_manager),
) -> None:
    """Replace the whole store with the snapshot stored under ``key``."""
    try:
        backups.restore(key)
    except StoreError as e:
        raise to_http_exception(e)

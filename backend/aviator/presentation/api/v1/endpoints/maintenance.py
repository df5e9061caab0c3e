"""Manual maintenance triggers — retention sweep and full reset."""

from fastapi import APIRouter, Depends

from aviator.application.schemas.store import MaintenanceResult
from aviator.domain.exceptions import StoreError
from aviator.infrastructure.dependencies import StoreContainer, get_container
from aviator.presentation.api.errors import to_http_exception

router = APIRouter(prefix="/maintenance", tags=["Maintenance"])


@router.post("/cleanup", response_model=MaintenanceResult)
async def cleanup(
    container: StoreContainer = Depends(get_container),
) -> MaintenanceResult:
    """Drop completed predictions past the configured age and trim the log."""
    try:
        removed = container.store.sweep_retention(
            max_age_days=container.settings.prediction_max_age_days,
        )
    except StoreError as e:
        raise to_http_exception(e)
    return MaintenanceResult(removed_predictions=removed)


@router.post("/reset", response_model=MaintenanceResult)
async def reset(
    container: StoreContainer = Depends(get_container),
) -> MaintenanceResult:
    """Snapshot the store, then empty every collection."""
    try:
        key = container.backups.reset_store()
    except StoreError as e:
        raise to_http_exception(e)
    return MaintenanceResult(backup_key=key)

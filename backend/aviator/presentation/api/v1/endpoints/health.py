"""Health endpoints — liveness without dependencies, plus store metadata."""

from fastapi import APIRouter, Depends

from aviator.application.services import RecordStore
from aviator.config import get_settings
from aviator.infrastructure.dependencies import get_record_store

router = APIRouter(tags=["Health"])


@router.get("/health")
async def health_check() -> dict:
    """Returns the current application health status."""
    settings = get_settings()
    return {
        "status": "healthy",
        "version": settings.app_version,
        "environment": settings.app_env,
        "storage_backend": settings.storage_backend,
    }


@router.get("/health/store")
async def store_health(store: RecordStore = Depends(get_record_store)) -> dict:
    """Record counts and last mutation time of the live store."""
    return store.metadata.to_dict()

"""V1 API router — aggregates all v1 endpoint routers."""

from fastapi import APIRouter

from aviator.presentation.api.v1.endpoints.health import router as health_router
from aviator.presentation.api.v1.endpoints.auth import router as auth_router
from aviator.presentation.api.v1.endpoints.clients import router as clients_router
from aviator.presentation.api.v1.endpoints.predictions import router as predictions_router
from aviator.presentation.api.v1.endpoints.predictor_settings import router as settings_router
from aviator.presentation.api.v1.endpoints.connections import router as connections_router
from aviator.presentation.api.v1.endpoints.dashboard import router as dashboard_router
from aviator.presentation.api.v1.endpoints.backups import router as backups_router
from aviator.presentation.api.v1.endpoints.data_transfer import router as data_transfer_router
from aviator.presentation.api.v1.endpoints.maintenance import router as maintenance_router

router = APIRouter(prefix="/v1")
router.include_router(health_router)
router.include_router(auth_router)
router.include_router(clients_router)
router.include_router(predictions_router)
router.include_router(settings_router)
router.include_router(connections_router)
router.include_router(dashboard_router)
router.include_router(backups_router)
router.include_router(data_transfer_router)
router.include_router(maintenance_router)

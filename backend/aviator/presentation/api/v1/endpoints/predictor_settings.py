"""Predictor settings endpoints — algorithm, update frequency, success threshold."""

from fastapi import APIRouter, Depends

from aviator.application.schemas.store import PredictorSettingsResponse, PredictorSettingsUpdate
from aviator.application.services import RecordStore
from aviator.domain.exceptions import StoreError
from aviator.infrastructure.dependencies import get_record_store
from aviator.presentation.api.errors import to_http_exception

router = APIRouter(prefix="/settings", tags=["Settings"])


@router.get("", response_model=PredictorSettingsResponse)
async def get_settings(
    store: RecordStore = Depends(get_record_store),
) -> PredictorSettingsResponse:
    return PredictorSettingsResponse.model_validate(store.get_settings(), from_attributes=True)


@router.put("", response_model=PredictorSettingsResponse)
async def update_settings(
    body: PredictorSettingsUpdate,
    store: RecordStore = Depends(get_record_store),
) -> PredictorSettingsResponse:
    """Shallow-merge the given values into the stored settings."""
    try:
        settings = store.update_settings(body.model_dump(by_alias=True, exclude_unset=True))
    except StoreError as e:
        raise to_http_exception(e)
    return PredictorSettingsResponse.model_validate(settings, from_attributes=True)

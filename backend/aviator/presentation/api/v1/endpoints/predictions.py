"""Prediction endpoints — CRUD plus on-demand generation."""

from fastapi import APIRouter, Depends, HTTPException, Query, status

from aviator.application.schemas.prediction import (
    PredictionCreate,
    PredictionResponse,
    PredictionUpdate,
)
from aviator.application.services import PredictionEngine, RecordStore
from aviator.domain.exceptions import EntityNotFoundError, StoreError
from aviator.infrastructure.dependencies import get_prediction_engine, get_record_store
from aviator.presentation.api.errors import to_http_exception

router = APIRouter(prefix="/predictions", tags=["Predictions"])


@router.get("", response_model=list[PredictionResponse])
async def list_predictions(
    status_filter: str | None = Query(None, alias="status", description="Filter by prediction status"),
    store: RecordStore = Depends(get_record_store),
) -> list[PredictionResponse]:
    return [
        PredictionResponse.model_validate(p, from_attributes=True)
        for p in store.list_predictions(status_filter)
    ]


@router.get("/recent", response_model=list[PredictionResponse])
async def recent_predictions(
    limit: int = Query(5, ge=1, le=100),
    store: RecordStore = Depends(get_record_store),
) -> list[PredictionResponse]:
    """The most recently added predictions, oldest first."""
    return [
        PredictionResponse.model_validate(p, from_attributes=True)
        for p in store.recent_predictions(limit)
    ]


@router.post("/generate", response_model=PredictionResponse, status_code=status.HTTP_201_CREATED)
async def generate_prediction(
    engine: PredictionEngine = Depends(get_prediction_engine),
) -> PredictionResponse:
    """Generate a prediction with the configured algorithm and store it."""
    try:
        prediction = engine.generate_prediction()
    except StoreError as e:
        raise to_http_exception(e)
    return PredictionResponse.model_validate(prediction, from_attributes=True)


@router.get("/{prediction_id}", response_model=PredictionResponse)
async def get_prediction(
    prediction_id: str,
    store: RecordStore = Depends(get_record_store),
) -> PredictionResponse:
    prediction = store.get_prediction(prediction_id)
    if prediction is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(EntityNotFoundError("Prediction", prediction_id)),
        )
    return PredictionResponse.model_validate(prediction, from_attributes=True)


@router.post("", response_model=PredictionResponse, status_code=status.HTTP_201_CREATED)
async def create_prediction(
    data: PredictionCreate,
    store: RecordStore = Depends(get_record_store),
) -> PredictionResponse:
    try:
        prediction = store.create_prediction(data.model_dump(exclude_none=True))
    except StoreError as e:
        raise to_http_exception(e)
    return PredictionResponse.model_validate(prediction, from_attributes=True)


@router.put("/{prediction_id}", response_model=PredictionResponse)
async def update_prediction(
    prediction_id: str,
    data: PredictionUpdate,
    store: RecordStore = Depends(get_record_store),
) -> PredictionResponse:
    """Merge the given fields; a completed prediction must carry a result."""
    try:
        prediction = store.update_prediction(prediction_id, data.model_dump(exclude_unset=True))
    except StoreError as e:
        raise to_http_exception(e)
    return PredictionResponse.model_validate(prediction, from_attributes=True)


@router.delete("/{prediction_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_prediction(
    prediction_id: str,
    store: RecordStore = Depends(get_record_store),
) -> None:
    try:
        store.delete_prediction(prediction_id)
    except StoreError as e:
        raise to_http_exception(e)

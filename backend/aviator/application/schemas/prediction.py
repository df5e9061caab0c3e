"""Pydantic DTOs for the Prediction feature."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class PredictionCreate(BaseModel):
    """Schema for recording a prediction by hand."""

    multiplier: float = Field(..., examples=[2.35])
    status: str = Field("active", examples=["active"])
    result: str | None = Field(None, examples=[None])
    timestamp: datetime | None = None


class PredictionUpdate(BaseModel):
    """Partial update. Unknown fields reach the store, which rejects them."""

    model_config = ConfigDict(extra="allow")

    multiplier: float | None = None
    status: str | None = None
    result: str | None = None
    timestamp: datetime | None = None


class PredictionResponse(BaseModel):
    id: str
    multiplier: float
    status: str
    result: str | None
    timestamp: datetime
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}

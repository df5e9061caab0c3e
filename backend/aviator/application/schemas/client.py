"""Pydantic DTOs (Data Transfer Objects) for the Client feature.

Form posts arrive as loose strings; these schemas coerce them (e.g.
``"true"`` → ``True``) before anything reaches the store. ``model_dump``
with ``by_alias=True`` yields the store's camelCase field names.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

_NON_NULLABLE = frozenset({"name", "phone", "country", "subscription", "status", "receipt_uploaded"})


class ClientCreate(BaseModel):
    """Schema for registering a client. A code is generated when omitted."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    name: str = Field(..., min_length=1, max_length=200, examples=["John Doe"])
    phone: str = Field(..., min_length=1, max_length=50, examples=["+1234567890"])
    country: str = Field(..., min_length=1, max_length=100, examples=["United States"])
    subscription: str = Field("", max_length=100, examples=["3 Months"])
    code: str | None = Field(None, max_length=50, examples=["CLIENT001"])
    status: str = Field("active", examples=["active"])
    receipt_uploaded: bool = False
    receipt_name: str | None = Field(None, max_length=255)


class ClientUpdate(BaseModel):
    """Schema for a partial client update.

    Unknown fields are let through on purpose so the store's allow-list
    can reject them.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")

    name: str | None = None
    phone: str | None = None
    country: str | None = None
    subscription: str | None = None
    status: str | None = None
    receipt_uploaded: bool | None = None
    receipt_name: str | None = None

    @model_validator(mode="after")
    def reject_null_required_fields(self) -> "ClientUpdate":
        # Only receiptName may be cleared
        nulls = sorted(
            name for name in self.model_fields_set
            if name in _NON_NULLABLE and getattr(self, name) is None
        )
        if nulls:
            raise ValueError(f"Fields cannot be null: {', '.join(nulls)}")
        return self


class ClientResponse(BaseModel):
    """Schema returned to the caller."""

    id: str
    code: str
    name: str
    phone: str
    country: str
    subscription: str
    status: str
    receipt_uploaded: bool
    receipt_name: str | None
    connected: bool = False
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}

"""Domain entity — a predictor subscriber identified by a login code."""

import random
import string
import time
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any
from uuid import uuid4

from aviator.domain.timestamps import parse_timestamp, to_iso, utcnow


class ClientStatus(str, Enum):
    """Account states a client can be in."""

    ACTIVE = "active"
    INACTIVE = "inactive"


# Persisted (camelCase) key → entity attribute.
_FIELD_MAP: dict[str, str] = {
    "id": "id",
    "code": "code",
    "name": "name",
    "phone": "phone",
    "country": "country",
    "subscription": "subscription",
    "status": "status",
    "receiptUploaded": "receipt_uploaded",
    "receiptName": "receipt_name",
}

# Fields a client update may touch. The code and id are immutable once issued.
CLIENT_UPDATABLE_FIELDS = frozenset({
    "name",
    "phone",
    "country",
    "subscription",
    "status",
    "receiptUploaded",
    "receiptName",
})

CLIENT_REQUIRED_FIELDS = ("name", "code", "phone", "country")


def generate_client_code() -> str:
    """Build a login code like ``CLIENT123456ABC`` for clients registered without one."""
    stamp = str(int(time.time() * 1000))[-6:]
    suffix = "".join(random.choices(string.ascii_uppercase + string.digits, k=3))
    return f"CLIENT{stamp}{suffix}"


@dataclass
class Client:
    """A subscriber of the predictor.

    Unknown fields read from storage or an import document are kept in
    ``extra`` and written back unchanged.
    """

    code: str
    name: str
    phone: str
    country: str
    subscription: str = ""
    status: str = ClientStatus.ACTIVE.value
    receipt_uploaded: bool = False
    receipt_name: str | None = None
    id: str = field(default_factory=lambda: str(uuid4()))
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)
    extra: dict[str, Any] = field(default_factory=dict)

    @property
    def is_active(self) -> bool:
        return self.status == ClientStatus.ACTIVE.value

    def update(self, fields: dict[str, Any]) -> None:
        """Shallow-merge persisted-name fields and refresh the updated_at timestamp."""
        for key, value in fields.items():
            setattr(self, _FIELD_MAP[key], value)
        self.updated_at = utcnow()

    def to_dict(self) -> dict[str, Any]:
        data = dict(self.extra)
        for key, attr in _FIELD_MAP.items():
            data[key] = getattr(self, attr)
        data["createdAt"] = to_iso(self.created_at)
        data["updatedAt"] = to_iso(self.updated_at)
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Client":
        """Rebuild a client from its persisted form without validating it."""
        kwargs: dict[str, Any] = {}
        extra: dict[str, Any] = {}
        for key, value in data.items():
            if key in _FIELD_MAP:
                kwargs[_FIELD_MAP[key]] = value
            elif key not in ("createdAt", "updatedAt"):
                extra[key] = value

        for required in CLIENT_REQUIRED_FIELDS:
            kwargs.setdefault(required, "")
        kwargs["code"] = "" if kwargs.get("code") is None else str(kwargs["code"])
        if kwargs.get("id") in (None, ""):
            kwargs.pop("id", None)
        else:
            kwargs["id"] = str(kwargs["id"])

        created_at = parse_timestamp(data.get("createdAt")) or utcnow()
        updated_at = parse_timestamp(data.get("updatedAt")) or created_at
        return cls(**kwargs, created_at=created_at, updated_at=updated_at, extra=extra)

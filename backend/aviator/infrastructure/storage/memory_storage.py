"""In-process key-value storage. Nothing survives a restart."""

import json
import logging
from typing import Any

from aviator.application.interfaces import KeyValueStorage
from aviator.infrastructure.storage.json_file_storage import encode_value

logger = logging.getLogger(__name__)


class InMemoryKeyValueStorage(KeyValueStorage):
    """Keeps encoded JSON strings in a dict so callers never share references with it."""

    def __init__(self, quota_bytes: int | None = None):
        self._items: dict[str, str] = {}
        self._quota_bytes = quota_bytes

    def get(self, key: str, default: Any = None) -> Any:
        raw = self._items.get(key)
        if raw is None:
            return default
        try:
            return json.loads(raw)
        except ValueError:
            logger.warning("Corrupt entry under '%s' — using default", key)
            return default

    def set(self, key: str, value: Any) -> bool:
        encoded = encode_value(key, value)
        if encoded is None:
            return False
        if self._quota_bytes is not None:
            used = sum(len(v) for k, v in self._items.items() if k != key)
            if used + len(encoded) > self._quota_bytes:
                logger.error("Storage quota exceeded writing '%s'", key)
                return False
        self._items[key] = encoded
        return True

    def remove(self, key: str) -> bool:
        return self._items.pop(key, None) is not None

    def keys(self) -> list[str]:
        return list(self._items)

    def raw(self, key: str) -> str | None:
        """Return the stored JSON text for ``key`` (useful when inspecting state)."""
        return self._items.get(key)

    def put_raw(self, key: str, text: str) -> None:
        """Store ``text`` verbatim, bypassing encoding."""
        self._items[key] = text

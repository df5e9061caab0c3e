"""Abstract key-value storage interface (port) for the record store."""

from abc import ABC, abstractmethod
from typing import Any


class KeyValueStorage(ABC):
    """Port for opaque JSON persistence — implemented in the infrastructure layer.

    Implementations never raise on storage problems. Writes report failure
    as ``False`` and reads fall back to the caller's default, so the store
    can keep running in memory when the backing medium misbehaves.
    """

    @abstractmethod
    def get(self, key: str, default: Any = None) -> Any:
        """Return the decoded value under ``key``, or ``default`` if missing or corrupt."""
        ...

    @abstractmethod
    def set(self, key: str, value: Any) -> bool:
        """Serialize and store ``value``. Returns False when it could not be written."""
        ...

    @abstractmethod
    def remove(self, key: str) -> bool:
        """Delete ``key``. Returns True if something was removed."""
        ...

    @abstractmethod
    def keys(self) -> list[str]:
        """List every stored key."""
        ...

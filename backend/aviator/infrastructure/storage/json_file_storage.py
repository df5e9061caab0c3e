"""Local filesystem key-value storage — one JSON document per key.

Storage layout:
    <data_dir>/<key>.json      — e.g. clients.json, backup_1718000000000.json
"""

import json
import logging
import os
import re
import tempfile
from pathlib import Path
from typing import Any

from aviator.application.interfaces import KeyValueStorage

logger = logging.getLogger(__name__)

_KEY_PATTERN = re.compile(r"^[A-Za-z0-9_.\-]+$")
_SUFFIX = ".json"


def encode_value(key: str, value: Any) -> str | None:
    """JSON-encode ``value``, returning None (and logging) when it is not serializable."""
    try:
        return json.dumps(value, ensure_ascii=False, allow_nan=False)
    except (TypeError, ValueError) as exc:
        logger.error("Cannot serialize value for key '%s': %s", key, exc)
        return None


class JsonFileKeyValueStorage(KeyValueStorage):
    """Infrastructure adapter persisting each key as a JSON file.

    ``quota_bytes`` caps the combined size of all stored documents; a write
    that would exceed it is refused and reported as ``False``.
    """

    def __init__(self, data_dir: str | Path, quota_bytes: int | None = None):
        self._data_dir = Path(data_dir)
        self._data_dir.mkdir(parents=True, exist_ok=True)
        self._quota_bytes = quota_bytes

    @property
    def data_dir(self) -> Path:
        return self._data_dir

    def _path_for(self, key: str) -> Path:
        if not _KEY_PATTERN.match(key):
            raise ValueError(f"Unsupported storage key: {key!r}")
        return self._data_dir / f"{key}{_SUFFIX}"

    # ── Reads ───────────────────────────────────────────────────────

    def get(self, key: str, default: Any = None) -> Any:
        try:
            path = self._path_for(key)
        except ValueError:
            logger.warning("Rejected read of invalid key %r", key)
            return default
        if not path.exists():
            return default
        try:
            return json.loads(path.read_text("utf-8"))
        except (OSError, ValueError) as exc:
            logger.warning("Could not read %s — using default (%s)", path, exc)
            return default

    def keys(self) -> list[str]:
        return sorted(p.name[: -len(_SUFFIX)] for p in self._data_dir.glob(f"*{_SUFFIX}"))

    # ── Writes ──────────────────────────────────────────────────────

    def set(self, key: str, value: Any) -> bool:
        try:
            path = self._path_for(key)
        except ValueError as exc:
            logger.error("%s", exc)
            return False

        encoded = encode_value(key, value)
        if encoded is None:
            return False
        payload = encoded.encode("utf-8")

        if self._quota_bytes is not None:
            used = self._used_bytes(excluding=path)
            if used + len(payload) > self._quota_bytes:
                logger.error(
                    "Storage quota exceeded writing '%s' (%d + %d > %d bytes)",
                    key, used, len(payload), self._quota_bytes,
                )
                return False

        # Write to a sibling temp file, then swap it in so readers never see half a document
        try:
            fd, tmp_name = tempfile.mkstemp(dir=self._data_dir, prefix=f".{key}.", suffix=".tmp")
            try:
                with os.fdopen(fd, "wb") as handle:
                    handle.write(payload)
                os.replace(tmp_name, path)
            finally:
                Path(tmp_name).unlink(missing_ok=True)
        except OSError as exc:
            logger.error("Failed to write %s: %s", path, exc)
            return False

        logger.debug("Stored key '%s' (%d bytes)", key, len(payload))
        return True

    def remove(self, key: str) -> bool:
        try:
            path = self._path_for(key)
        except ValueError:
            return False
        if not path.exists():
            return False
        try:
            path.unlink()
        except OSError as exc:
            logger.error("Failed to remove %s: %s", path, exc)
            return False
        logger.debug("Removed key '%s'", key)
        return True

    def _used_bytes(self, excluding: Path) -> int:
        total = 0
        for path in self._data_dir.glob(f"*{_SUFFIX}"):
            if path == excluding:
                continue
            try:
                total += path.stat().st_size
            except OSError:
                continue
        return total

"""Backup manager — point-in-time snapshots of the record store with bounded retention.

Storage layout:
    backup_<epoch-ms>    — {timestamp, version, data, metadata}
"""

import logging
from datetime import datetime

from aviator.application.interfaces import KeyValueStorage
from aviator.application.services.record_store import RecordStore
from aviator.domain.entities import LogLevel, Snapshot, SnapshotInfo
from aviator.domain.exceptions import EntityNotFoundError, StoreError
from aviator.domain.timestamps import epoch_millis, utcnow

logger = logging.getLogger(__name__)

BACKUP_KEY_PREFIX = "backup_"
DEFAULT_RETENTION = 5


def _key_sequence(key: str) -> int:
    """Epoch-ms encoded in a snapshot key, or -1 when the key is not one of ours."""
    suffix = key[len(BACKUP_KEY_PREFIX):]
    return int(suffix) if suffix.isdigit() else -1


class BackupManager:
    """Creates, lists, prunes and restores store snapshots.

    Snapshots only ever contain the serialized copy produced by
    ``RecordStore.export_state``, never references into live state.
    """

    def __init__(self, store: RecordStore, storage: KeyValueStorage, retention: int = DEFAULT_RETENTION):
        self._store = store
        self._storage = storage
        self._retention = max(1, retention)
        self._last_sequence = 0

    @property
    def retention(self) -> int:
        return self._retention

    def create_snapshot(self) -> str | None:
        """Store a snapshot of the whole store and prune old ones.

        Never raises; returns the new key, or None if the snapshot could not
        be written.
        """
        try:
            now = utcnow()
            key = f"{BACKUP_KEY_PREFIX}{self._next_sequence(now)}"
            snapshot = Snapshot(
                timestamp=now,
                version=self._store.version,
                data=self._store.export_state(),
                metadata=self._store.metadata.to_dict(),
            )
            if not self._storage.set(key, snapshot.to_dict()):
                self._store.log(f"Failed to create backup: could not write {key}", LogLevel.ERROR)
                return None

            self._enforce_retention()
        except Exception as exc:
            logger.exception("Snapshot creation failed")
            self._store.log(f"Failed to create backup: {exc}", LogLevel.ERROR)
            return None

        self._store.log("Backup created successfully")
        return key

    def list_snapshots(self) -> list[SnapshotInfo]:
        """Return every readable snapshot, newest first."""
        infos: list[tuple[int, SnapshotInfo]] = []
        for key in self._storage.keys():
            if not key.startswith(BACKUP_KEY_PREFIX):
                continue
            snapshot = Snapshot.from_dict(self._storage.get(key))
            if snapshot is None:
                logger.warning("Ignoring unreadable snapshot '%s'", key)
                continue
            counts = snapshot.metadata.get("recordCounts")
            infos.append((
                _key_sequence(key),
                SnapshotInfo(
                    key=key,
                    timestamp=snapshot.timestamp,
                    version=snapshot.version,
                    record_counts=dict(counts) if isinstance(counts, dict) else {},
                ),
            ))
        infos.sort(key=lambda item: (item[0], item[1].timestamp), reverse=True)
        return [info for _, info in infos]

    def latest_snapshot_time(self) -> datetime | None:
        snapshots = self.list_snapshots()
        return snapshots[0].timestamp if snapshots else None

    def restore(self, key: str) -> None:
        """Replace the entire store with the snapshot under ``key``.

        Raises EntityNotFoundError when the key does not hold a valid snapshot.
        """
        try:
            snapshot = None
            if key.startswith(BACKUP_KEY_PREFIX):
                snapshot = Snapshot.from_dict(self._storage.get(key))
            if snapshot is None:
                raise EntityNotFoundError("Backup", key)
            self._store.replace_state(snapshot.data)
        except StoreError as exc:
            self._store.log(f"Failed to restore from backup: {exc}", LogLevel.ERROR)
            raise

        self._store.log(f"Restored from backup: {key}")

    def reset_store(self) -> str | None:
        """Take a final snapshot, then empty the store. Returns the snapshot key."""
        key = self.create_snapshot()
        self._store.reset()
        return key

    def _next_sequence(self, now: datetime) -> int:
        # Keys must stay unique and ordered even when two snapshots share a millisecond
        existing = [_key_sequence(k) for k in self._storage.keys() if k.startswith(BACKUP_KEY_PREFIX)]
        sequence = max([epoch_millis(now), self._last_sequence + 1, *(s + 1 for s in existing)])
        self._last_sequence = sequence
        return sequence

    def _enforce_retention(self) -> None:
        for info in self.list_snapshots()[self._retention:]:
            self._storage.remove(info.key)
            logger.info("Pruned old snapshot %s", info.key)

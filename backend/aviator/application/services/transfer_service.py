"""Import/export codec — whole-store JSON documents and spreadsheet reports."""

import asyncio
import json
import logging
from pathlib import Path
from typing import Any

from aviator.application.services.backup_service import BackupManager
from aviator.application.services.record_store import CLIENTS_KEY, PREDICTIONS_KEY, RecordStore
from aviator.domain.entities import LogLevel
from aviator.domain.exceptions import EntityValidationError, PersistenceError, StoreError
from aviator.domain.timestamps import to_iso, utcnow

logger = logging.getLogger(__name__)

EXPORT_FILENAME = "aviator_data_{date}.json"
REPORT_FILENAME = "aviator_data_{date}.xlsx"


class DataTransferService:
    """Serializes the store to a portable document and applies such documents back.

    Document shape:
        {timestamp, version, data: {clients, predictions, settings, connections, logs}, metadata}
    """

    def __init__(self, store: RecordStore, backups: BackupManager):
        self._store = store
        self._backups = backups

    # ── Export ──────────────────────────────────────────────────────

    def export_document(self) -> dict[str, Any]:
        document = {
            "timestamp": to_iso(utcnow()),
            "version": self._store.version,
            "data": self._store.export_state(),
            "metadata": self._store.metadata.to_dict(),
        }
        self._store.log("Data exported successfully")
        return document

    def export_json(self, indent: int | None = 2) -> str:
        return json.dumps(self.export_document(), indent=indent, ensure_ascii=False)

    async def export_to_file(self, directory: str | Path) -> Path:
        """Write the export document to ``<directory>/aviator_data_<date>.json``."""
        text = self.export_json()
        target = Path(directory) / EXPORT_FILENAME.format(date=utcnow().date().isoformat())
        try:
            await asyncio.to_thread(_write_text, target, text)
        except OSError as exc:
            self._store.log(f"Failed to export data to {target}: {exc}", LogLevel.ERROR)
            raise PersistenceError(str(target)) from exc
        logger.info("Exported store to %s", target)
        return target

    def export_workbook(self, path: str | Path | None = None) -> bytes | Path:
        """Render the spreadsheet report, to ``path`` when given, otherwise as bytes."""
        from aviator.infrastructure.exporters.xlsx_report import XlsxReportWriter

        writer = XlsxReportWriter()
        workbook = writer.build(
            clients=self._store.list_clients(),
            predictions=self._store.list_predictions(),
            connections=self._store.get_all_connections(),
            statistics=self._store.get_statistics(last_backup=self._backups.latest_snapshot_time()),
            exported_at=utcnow(),
        )
        self._store.log("Spreadsheet report exported")
        if path is None:
            return writer.to_bytes(workbook)
        return writer.write(workbook, path)

    # ── Import ──────────────────────────────────────────────────────

    @staticmethod
    def validate_document(document: Any) -> None:
        """Check the minimum shape of an import document.

        Only ``data.clients`` and ``data.predictions`` are required (as lists);
        everything else passes through unchecked.
        """
        if not isinstance(document, dict) or not isinstance(document.get("data"), dict):
            raise EntityValidationError("Import", "document must contain a 'data' object", ["data"])
        data = document["data"]
        bad = [key for key in (CLIENTS_KEY, PREDICTIONS_KEY) if not isinstance(data.get(key), list)]
        if bad:
            raise EntityValidationError(
                "Import", f"'data' must contain list-typed {', '.join(bad)}", bad
            )

    def import_document(self, document: Any) -> bool:
        """Replace the whole store with ``document`` after taking a safety snapshot."""
        try:
            self.validate_document(document)
            if self._backups.create_snapshot() is None:
                raise PersistenceError("pre-import backup")
            self._store.replace_state(document["data"])
        except StoreError as exc:
            self._store.log(f"Failed to import data: {exc}", LogLevel.ERROR)
            raise

        self._store.log("Data imported successfully")
        return True

    def import_json(self, text: str | bytes) -> bool:
        try:
            document = json.loads(text)
        except ValueError as exc:
            error = EntityValidationError("Import", f"document is not valid JSON ({exc})")
            self._store.log(f"Failed to import data: {error}", LogLevel.ERROR)
            raise error from exc
        return self.import_document(document)

    async def import_file(self, path: str | Path) -> bool:
        """Read an export document from disk, then apply it."""
        try:
            text = await asyncio.to_thread(Path(path).read_text, "utf-8")
        except OSError as exc:
            error = EntityValidationError("Import", f"could not read {path} ({exc})")
            self._store.log(f"Failed to read import file: {error}", LogLevel.ERROR)
            raise error from exc
        return self.import_json(text)


def _write_text(target: Path, text: str) -> None:
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(text, encoding="utf-8")

"""Spreadsheet report of the store — Clients, Predictions, Summary and Connections sheets."""

import io
import logging
from collections.abc import Iterable
from datetime import datetime
from pathlib import Path
from typing import Any

from openpyxl import Workbook
from openpyxl.styles import Font

from aviator.domain.entities import Client, Connection, Prediction, StoreStatistics

logger = logging.getLogger(__name__)

_CLIENT_COLUMNS = [
    "Client Code", "Name", "Phone", "Country", "Subscription", "Status",
    "Receipt Uploaded", "Receipt Name", "Created", "Last Updated",
    "Connected", "Last Connection",
]
_PREDICTION_COLUMNS = ["ID", "Multiplier", "Status", "Result", "Created", "Updated"]
_SUMMARY_COLUMNS = ["Metric", "Value"]
_CONNECTION_COLUMNS = ["Client ID", "Client Name", "Client Code", "Connected", "Last Connection", "Updated"]


def _fmt(value: datetime | None, fallback: str = "N/A") -> str:
    return value.strftime("%Y-%m-%d %H:%M:%S") if value else fallback


def _yes_no(flag: Any) -> str:
    return "Yes" if flag else "No"


class XlsxReportWriter:
    """Builds an openpyxl workbook from store records."""

    def build(
        self,
        *,
        clients: list[Client],
        predictions: list[Prediction],
        connections: dict[str, Connection],
        statistics: StoreStatistics,
        exported_at: datetime,
    ) -> Workbook:
        wb = Workbook()
        clients_ws = wb.active
        clients_ws.title = "Clients"
        self._fill(clients_ws, _CLIENT_COLUMNS, (
            [
                c.code, c.name, c.phone, c.country, c.subscription, c.status,
                _yes_no(c.receipt_uploaded), c.receipt_name or "N/A",
                _fmt(c.created_at), _fmt(c.updated_at),
                _yes_no(connections.get(c.id) and connections[c.id].connected),
                _fmt(connections[c.id].timestamp if c.id in connections else None, "Never"),
            ]
            for c in clients
        ))

        self._fill(wb.create_sheet("Predictions"), _PREDICTION_COLUMNS, (
            [p.id, p.multiplier, p.status, p.result or "Pending", _fmt(p.timestamp), _fmt(p.updated_at)]
            for p in predictions
        ))

        self._fill(wb.create_sheet("Summary"), _SUMMARY_COLUMNS, [
            ["Total Clients", statistics.total_clients],
            ["Active Clients", statistics.active_clients],
            ["Total Predictions", statistics.total_predictions],
            ["Active Predictions", statistics.active_predictions],
            ["Completed Predictions", statistics.completed_predictions],
            ["Connected Clients", statistics.connected_clients],
            ["Success Rate (%)", statistics.success_rate],
            ["Database Size (KB)", statistics.database_size_kb],
            ["Last Backup", _fmt(statistics.last_backup, "Never")],
            ["Export Date", _fmt(exported_at)],
        ])

        by_id = {c.id: c for c in clients}
        self._fill(wb.create_sheet("Connections"), _CONNECTION_COLUMNS, (
            [
                client_id,
                by_id[client_id].name if client_id in by_id else "Unknown",
                by_id[client_id].code if client_id in by_id else "Unknown",
                _yes_no(conn.connected),
                _fmt(conn.timestamp),
                _fmt(conn.updated_at),
            ]
            for client_id, conn in connections.items()
        ))
        return wb

    def to_bytes(self, workbook: Workbook) -> bytes:
        buffer = io.BytesIO()
        workbook.save(buffer)
        return buffer.getvalue()

    def write(self, workbook: Workbook, path: str | Path) -> Path:
        target = Path(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        workbook.save(target)
        logger.info("Wrote spreadsheet report: %s", target)
        return target

    @staticmethod
    def _fill(ws, header: list[str], rows: Iterable[list[Any]]) -> None:
        ws.append(header)
        for cell in ws[1]:
            cell.font = Font(bold=True)
        for row in rows:
            ws.append(row)

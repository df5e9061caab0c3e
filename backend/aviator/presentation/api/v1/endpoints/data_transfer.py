"""Export and import endpoints."""

import logging

from fastapi import APIRouter, Depends, File, Response, UploadFile, status

from aviator.application.schemas.store import ExportFileResponse
from aviator.application.services import DataTransferService
from aviator.domain.exceptions import StoreError
from aviator.domain.timestamps import utcnow
from aviator.infrastructure.dependencies import StoreContainer, get_container, get_transfer_service
from aviator.presentation.api.errors import to_http_exception

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Import / Export"])

_XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


@router.get("/export")
async def export_json(
    transfer: DataTransferService = Depends(get_transfer_service),
) -> Response:
    """Download the whole store as an import-compatible JSON document."""
    filename = f"aviator_data_{utcnow().date().isoformat()}.json"
    return Response(
        content=transfer.export_json(),
        media_type="application/json",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.get("/export/xlsx")
async def export_xlsx(
    transfer: DataTransferService = Depends(get_transfer_service),
) -> Response:
    """Download a spreadsheet report of clients, predictions and connections."""
    filename = f"aviator_data_{utcnow().date().isoformat()}.xlsx"
    return Response(
        content=transfer.export_workbook(),
        media_type=_XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.post("/export/file", response_model=ExportFileResponse, status_code=status.HTTP_201_CREATED)
async def export_to_file(
    container: StoreContainer = Depends(get_container),
) -> ExportFileResponse:
    """Write the export document into the configured export directory on the server."""
    try:
        path = await container.transfer.export_to_file(container.settings.export_dir)
    except StoreError as e:
        raise to_http_exception(e)
    return ExportFileResponse(path=str(path))


@router.post("/import", status_code=status.HTTP_204_NO_CONTENT)
async def import_json(
    file: UploadFile = File(..., description="A document produced by GET /export"),
    transfer: DataTransferService = Depends(get_transfer_service),
) -> None:
    """Replace the whole store with an uploaded export document.

    A snapshot of the current state is taken first.
    """
    content = await file.read()
    logger.info("Importing store from upload '%s' (%d bytes)", file.filename, len(content))
    try:
        transfer.import_json(content)
    except StoreError as e:
        raise to_http_exception(e)

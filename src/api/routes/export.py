"""FastAPI route for spreadsheet export of a terminal table.

Endpoints:
    POST /export — return the table as an XLSX download
"""

from fastapi import APIRouter
from fastapi.responses import Response

from src.api.schemas import ExportRequest
from src.errors import ClientInputError
from src.services.table_export import XLSX_MEDIA_TYPE, export_filename, table_to_xlsx
from src.services.table_extractor import has_table_shape

router = APIRouter(tags=["export"])


@router.post("/export")
async def export_table(payload: ExportRequest) -> Response:
    """Render a previously extracted table as an XLSX workbook.

    Raises:
        ClientInputError: 400 when the body is not a terminal table.
    """
    if not has_table_shape(payload.table):
        raise ClientInputError(
            "E-1005", details="table must contain 'controller' and a 'rows' list"
        )
    filename = export_filename(payload.sourceName)
    return Response(
        content=table_to_xlsx(payload.table),
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )

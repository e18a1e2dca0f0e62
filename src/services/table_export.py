"""Render a terminal table as an XLSX workbook.

One sheet, one header row, one row per table row. Columns follow the
schema field order; keys the schema does not know are appended after
them in first-seen order so nothing the assistant returned is dropped.
"""

import io
import re
from pathlib import PurePath

from openpyxl import Workbook
from openpyxl.cell.cell import ILLEGAL_CHARACTERS_RE
from openpyxl.utils import get_column_letter

from src.services.table_extractor import ROW_FIELDS

SHEET_TITLE = "Terminal Assignment"
DEFAULT_EXPORT_STEM = "terminal_assignment"
XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

_UNSAFE_FILENAME_CHARS = re.compile(r"[^A-Za-z0-9._-]+")
_MAX_COLUMN_WIDTH = 60


def _columns_for(rows: list[dict]) -> list[str]:
    present = [name for name in ROW_FIELDS if any(name in row for row in rows)]
    extras: list[str] = []
    for row in rows:
        for key in row:
            if key not in ROW_FIELDS and key not in extras:
                extras.append(key)
    return present + extras if (present or extras) else list(ROW_FIELDS)


def _cell_value(value: object) -> object:
    if value is None or isinstance(value, (int, float, bool)):
        return value
    return ILLEGAL_CHARACTERS_RE.sub("", str(value))


def export_filename(source_name: str | None = None) -> str:
    """Download name, derived from the first analyzed document when known."""
    if not source_name:
        return f"{DEFAULT_EXPORT_STEM}.xlsx"
    stem = _UNSAFE_FILENAME_CHARS.sub("_", PurePath(source_name).stem).strip("._")
    if not stem:
        return f"{DEFAULT_EXPORT_STEM}.xlsx"
    return f"{DEFAULT_EXPORT_STEM}_{stem}.xlsx"


def table_to_xlsx(table: dict) -> bytes:
    """Serialize a table's rows into XLSX bytes.

    Args:
        table: Table dict with a ``rows`` list of row objects.

    Returns:
        Workbook file content.
    """
    rows = [row for row in table.get("rows", []) if isinstance(row, dict)]
    columns = _columns_for(rows)

    wb = Workbook()
    ws = wb.active
    ws.title = SHEET_TITLE
    ws.append([_cell_value(col) for col in columns])
    for row in rows:
        ws.append([_cell_value(row.get(col)) for col in columns])

    # Assistant text is data, never a formula.
    for cells in ws.iter_rows():
        for cell in cells:
            if isinstance(cell.value, str):
                cell.data_type = "s"

    for idx, col in enumerate(columns, start=1):
        longest = max([len(str(col))] + [len(str(row.get(col) or "")) for row in rows])
        ws.column_dimensions[get_column_letter(idx)].width = min(longest + 2, _MAX_COLUMN_WIDTH)
    ws.freeze_panes = "A2"

    buffer = io.BytesIO()
    wb.save(buffer)
    return buffer.getvalue()

"""Spreadsheet export of arbitrary record lists."""
import io
import uuid
from collections.abc import Iterable, Mapping
from datetime import date, datetime
from decimal import Decimal
from typing import Any

from openpyxl import Workbook
from openpyxl.styles import Font

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def export_filename(name: str, today: date | None = None) -> str:
    today = today or date.today()
    return f"{name}_{today.isoformat()}.xlsx"


def _cell(value: Any) -> Any:
    if isinstance(value, uuid.UUID):
        return str(value)
    if isinstance(value, datetime):
        # openpyxl refuses tz-aware datetimes
        return value.isoformat()
    if isinstance(value, Decimal):
        return float(value)
    if isinstance(value, (list, dict)):
        return str(value)
    return value


def to_xlsx(records: Iterable[Mapping[str, Any]], sheet_title: str = "Data") -> bytes:
    """Serialize records to a single-sheet workbook.

    Columns are the union of record keys in first-seen order; missing keys
    become empty cells.
    """
    records = list(records)
    columns: list[str] = []
    for record in records:
        for key in record:
            if key not in columns:
                columns.append(key)

    wb = Workbook()
    ws = wb.active
    ws.title = sheet_title
    ws.append(columns)
    for cell in ws[1]:
        cell.font = Font(bold=True)
    for record in records:
        ws.append([_cell(record.get(col)) for col in columns])

    buffer = io.BytesIO()
    wb.save(buffer)
    return buffer.getvalue()

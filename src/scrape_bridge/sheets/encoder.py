"""Spreadsheet export for finished scrape results and the import template.

Both functions return raw xlsx bytes ready to be sent as an HTTP response.
The work is CPU-bound; route handlers run it through ``asyncio.to_thread``
so large result sets do not block the event loop.

Result sheets have no fixed schema: the columns are the union of the keys
found in the records, in the order they are first seen.
"""

from __future__ import annotations

import io
import json
from typing import Any, Iterable, Mapping, Sequence

import openpyxl
import structlog
from openpyxl.cell.cell import ILLEGAL_CHARACTERS_RE
from openpyxl.styles import Font
from openpyxl.utils import get_column_letter
from openpyxl.worksheet.worksheet import Worksheet

from scrape_bridge.core.exceptions import SerializationError

logger = structlog.get_logger(__name__)

XLSX_MEDIA_TYPE: str = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

RESULTS_SHEET_NAME: str = "Results"
TEMPLATE_SHEET_NAME: str = "Template"

#: Rows of the downloadable import template.  The header is not a URL, so
#: the decoder skips it when the filled-in template is uploaded again.
TEMPLATE_ROWS: tuple[tuple[str], ...] = (
    ("URL (必填)",),
    ("https://www.carrefour.fr/p/sample-product-id",),
    ("https://www.carrefour.fr/r/sample-category",),
)
TEMPLATE_COLUMN_WIDTH: int = 50

_AUTOSIZE_SAMPLE_ROWS: int = 100
_MAX_COLUMN_WIDTH: int = 80


def collect_columns(records: Iterable[Mapping[str, Any]]) -> list[str]:
    """Return the union of record keys in first-seen order."""
    columns: dict[str, None] = {}
    for rec in records:
        for key in rec:
            columns.setdefault(str(key), None)
    return list(columns)


def _cell_value(value: Any) -> Any:  # noqa: ANN401
    """Coerce a JSON result value into something openpyxl can store.

    Lists are joined with ``|`` so each record stays on one row; nested
    objects become JSON text.
    """
    if value is None:
        return None
    if isinstance(value, list):
        return " | ".join("" if v is None else str(v) for v in value)
    if isinstance(value, dict):
        return json.dumps(value, ensure_ascii=False)
    if isinstance(value, str):
        return ILLEGAL_CHARACTERS_RE.sub("", value)
    if isinstance(value, (bool, int, float)):
        return value
    return str(value)


def _write_row(ws: Worksheet, values: Sequence[Any]) -> None:
    """Append a row, keeping strings that start with ``=`` as plain text."""
    ws.append(list(values))
    for cell in ws[ws.max_row]:
        if isinstance(cell.value, str) and cell.value.startswith("="):
            cell.data_type = "s"


def _autosize(ws: Worksheet, headers: Sequence[str]) -> None:
    """Size each column to the widest of its header and first data rows."""
    last_row = min(_AUTOSIZE_SAMPLE_ROWS + 1, ws.max_row)
    for col_idx, header in enumerate(headers, start=1):
        max_len = len(header)
        for row_idx in range(2, last_row + 1):
            cell_val = ws.cell(row=row_idx, column=col_idx).value
            if cell_val is not None:
                max_len = max(max_len, len(str(cell_val)))
        ws.column_dimensions[get_column_letter(col_idx)].width = min(
            max_len + 2, _MAX_COLUMN_WIDTH
        )


def _to_bytes(wb: openpyxl.Workbook) -> bytes:
    buf = io.BytesIO()
    wb.save(buf)
    return buf.getvalue()


def encode_results(records: Sequence[Mapping[str, Any]]) -> bytes:
    """Build an xlsx workbook with one row per result record.

    The header row holds the union of keys across all records; a record
    missing a key leaves that cell blank.  The header row is bold and
    frozen.  Output is deterministic for a given record order.

    Args:
        records: Result records as returned by the task service.

    Returns:
        Raw xlsx bytes.

    Raises:
        SerializationError: If the workbook cannot be built or written.
    """
    try:
        wb = openpyxl.Workbook()
        ws = wb.active
        ws.title = RESULTS_SHEET_NAME

        columns = collect_columns(records)
        if columns:
            _write_row(ws, [ILLEGAL_CHARACTERS_RE.sub("", c) for c in columns])
            for cell in ws[1]:
                cell.font = Font(bold=True)
            ws.freeze_panes = "A2"

        for rec in records:
            _write_row(ws, [_cell_value(rec.get(col)) for col in columns])

        _autosize(ws, columns)
        data = _to_bytes(wb)
    except Exception as exc:
        logger.error("results_encoding_failed", record_count=len(records), exc_info=exc)
        raise SerializationError(f"Failed to build results workbook: {exc}") from exc

    logger.debug("results_encoded", record_count=len(records), column_count=len(columns))
    return data


def encode_template() -> bytes:
    """Build the static import template workbook.

    A single ``Template`` sheet with a header cell and two example URLs in
    column A, which is widened for readability.

    Returns:
        Raw xlsx bytes.

    Raises:
        SerializationError: If the workbook cannot be written.
    """
    try:
        wb = openpyxl.Workbook()
        ws = wb.active
        ws.title = TEMPLATE_SHEET_NAME
        for row in TEMPLATE_ROWS:
            ws.append(list(row))
        ws.column_dimensions["A"].width = TEMPLATE_COLUMN_WIDTH
        return _to_bytes(wb)
    except Exception as exc:
        logger.error("template_encoding_failed", exc_info=exc)
        raise SerializationError(f"Failed to build template workbook: {exc}") from exc

"""In-memory xlsx builders for decoder and upload tests.

Usage in tests::

    from tests.factories.workbooks import build_workbook

    data = build_workbook([["https://example.com/a"], ["not a url"]])
"""

from __future__ import annotations

import io
import zipfile
from typing import Any, Sequence

import openpyxl


def build_workbook(
    rows: Sequence[Sequence[Any]],
    title: str = "Sheet1",
    extra_sheets: dict[str, Sequence[Sequence[Any]]] | None = None,
) -> bytes:
    """Return xlsx bytes whose first sheet holds *rows*.

    Args:
        rows: Cell values, one inner sequence per row.
        title: Name of the first worksheet.
        extra_sheets: Additional worksheets appended after the first one.
    """
    wb = openpyxl.Workbook()
    ws = wb.active
    ws.title = title
    for row in rows:
        ws.append(list(row))
    for name, sheet_rows in (extra_sheets or {}).items():
        extra = wb.create_sheet(name)
        for row in sheet_rows:
            extra.append(list(row))
    buf = io.BytesIO()
    wb.save(buf)
    return buf.getvalue()


def read_workbook(data: bytes) -> list[tuple[Any, ...]]:
    """Read every row of the first worksheet of *data* as value tuples."""
    wb = openpyxl.load_workbook(io.BytesIO(data))
    try:
        return list(wb.worksheets[0].iter_rows(values_only=True))
    finally:
        wb.close()


def read_records(data: bytes) -> list[dict[str, Any]]:
    """Read a results workbook back into dicts, dropping blank cells."""
    rows = read_workbook(data)
    if not rows:
        return []
    header, *body = rows
    return [
        {key: value for key, value in zip(header, row) if value is not None}
        for row in body
    ]


def truncate_sheet_xml(
    data: bytes,
    drop: int = 40,
    member: str = "xl/worksheets/sheet1.xml",
) -> bytes:
    """Return *data* with the last *drop* bytes cut from one worksheet part.

    The zip container stays valid, so the workbook opens; the damage only
    surfaces once the sheet's rows are parsed.
    """
    out = io.BytesIO()
    with zipfile.ZipFile(io.BytesIO(data)) as src, zipfile.ZipFile(out, "w") as dst:
        for info in src.infolist():
            payload = src.read(info.filename)
            if info.filename == member:
                payload = payload[:-drop]
            dst.writestr(info, payload)
    return out.getvalue()


def build_csv(rows: Sequence[Sequence[Any]]) -> bytes:
    """Return UTF-8 CSV bytes for *rows*."""
    lines = [",".join("" if v is None else str(v) for v in row) for row in rows]
    return ("\n".join(lines) + "\n").encode("utf-8")

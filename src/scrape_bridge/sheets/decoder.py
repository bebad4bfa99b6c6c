"""Read the URL column out of an uploaded spreadsheet.

Two upload formats are accepted: xlsx workbooks and plain CSV files.  Only
the first worksheet of a workbook is read.  Each row's first cell is a
candidate; it is kept when it is a string starting with ``http``.  Every
other cell, column and sheet is ignored, so a header row such as
``"URL (必填)"`` is dropped without special handling.
"""

from __future__ import annotations

import csv
import io
import zipfile
from pathlib import Path
from typing import IO, Callable, Iterable
from xml.etree.ElementTree import ParseError

import openpyxl
import structlog
from openpyxl.utils.exceptions import InvalidFileException

from scrape_bridge.core.exceptions import EmptyInputError, UnreadableSheetError

logger = structlog.get_logger(__name__)

URL_PREFIX: str = "http"

FORMAT_XLSX: str = "xlsx"
FORMAT_CSV: str = "csv"

MSG_NO_URLS: str = "未在 Excel 中找到有效的 URL (需以 http 开头)"
MSG_UNREADABLE: str = "无法读取 Excel 文件"

# Raised by openpyxl while it parses worksheet XML lazily in read-only mode.
_SHEET_PARSE_ERRORS = (ParseError, ValueError, TypeError, KeyError, zipfile.BadZipFile)


def is_candidate_url(value: object) -> bool:
    """Return ``True`` when a cell value is a string beginning with ``http``."""
    return isinstance(value, str) and value.startswith(URL_PREFIX)


def detect_format(filename: str | None, content_type: str | None) -> str:
    """Pick the decoder for an upload from its filename and content type.

    ``.csv`` files and ``text/csv`` uploads are read as CSV; everything else
    is treated as an xlsx workbook.
    """
    name = (filename or "").lower()
    ctype = (content_type or "").lower()
    if name.endswith(".csv") or "text/csv" in ctype:
        return FORMAT_CSV
    return FORMAT_XLSX


def _first_column_urls(rows: Iterable[Iterable[object] | None]) -> list[str]:
    urls: list[str] = []
    for row in rows:
        first = next(iter(row or ()), None)
        if is_candidate_url(first):
            urls.append(first)
    return urls


def decode_urls(source: str | Path | IO[bytes]) -> list[str]:
    """Extract the URL list from the first column of the first worksheet.

    Order and duplicates are preserved exactly as they appear in the sheet.

    Args:
        source: Path to an xlsx file or a binary file-like object.

    Returns:
        Non-empty list of URL strings.

    Raises:
        UnreadableSheetError: The input is not a readable xlsx workbook,
            including a workbook whose sheet XML is truncated or corrupt.
        EmptyInputError: The first column holds no ``http``-prefixed string.
    """
    try:
        wb = openpyxl.load_workbook(source, read_only=True, data_only=True)
    except (InvalidFileException, zipfile.BadZipFile, KeyError, OSError) as exc:
        logger.info("sheet_unreadable", error=str(exc))
        raise UnreadableSheetError(MSG_UNREADABLE) from exc

    try:
        if not wb.worksheets:
            raise UnreadableSheetError(MSG_UNREADABLE)
        ws = wb.worksheets[0]
        title = ws.title
        urls = _first_column_urls(ws.iter_rows(values_only=True))
    except _SHEET_PARSE_ERRORS as exc:
        logger.info("sheet_unreadable", error=str(exc))
        raise UnreadableSheetError(MSG_UNREADABLE) from exc
    finally:
        wb.close()

    if not urls:
        raise EmptyInputError(MSG_NO_URLS)

    logger.debug("sheet_decoded", sheet=title, url_count=len(urls))
    return urls


def decode_csv_urls(source: str | Path | IO[bytes]) -> list[str]:
    """Extract the URL list from the first column of a CSV file.

    The bytes are decoded as UTF-8 (a leading BOM is dropped); undecodable
    bytes are replaced rather than rejected.

    Raises:
        UnreadableSheetError: The file cannot be read.
        EmptyInputError: The first column holds no ``http``-prefixed string.
    """
    try:
        if isinstance(source, (str, Path)):
            raw = Path(source).read_bytes()
        else:
            raw = source.read()
    except OSError as exc:
        logger.info("sheet_unreadable", error=str(exc))
        raise UnreadableSheetError(MSG_UNREADABLE) from exc

    text = raw.decode("utf-8-sig", errors="replace")
    try:
        urls = _first_column_urls(csv.reader(io.StringIO(text)))
    except csv.Error as exc:
        logger.info("sheet_unreadable", error=str(exc))
        raise UnreadableSheetError(MSG_UNREADABLE) from exc

    if not urls:
        raise EmptyInputError(MSG_NO_URLS)

    logger.debug("csv_decoded", url_count=len(urls))
    return urls


def decoder_for(file_format: str) -> Callable[[Path], list[str]]:
    """Return the decode function for a format from :func:`detect_format`."""
    return decode_csv_urls if file_format == FORMAT_CSV else decode_urls

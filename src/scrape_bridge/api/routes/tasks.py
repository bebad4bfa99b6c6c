"""Task routes: upload, status polling, result download and template download.

``POST /api/upload``
    Multipart ``file`` (xlsx or CSV) plus optional ``type`` and ``pages`` form
    fields.  The first column of the first sheet is read for URLs and submitted
    to the task service; the service's job descriptor is returned as-is.

``GET /api/status/{task_id}``
    Pass-through of the task service's status document.

``GET /api/download/{task_id}``
    The job's ``results`` as an xlsx attachment, once the job is completed.

``GET /api/template``
    A static xlsx import template.

Error bodies: JSON ``{"error": ...}`` for upload and status, plain text for
the two downloads.  Messages are the Chinese strings shown by the UI.
"""

from __future__ import annotations

import asyncio
import re
from typing import Annotated

import structlog
from fastapi import APIRouter, File, Form, Response, UploadFile, status
from fastapi.responses import JSONResponse, PlainTextResponse

from scrape_bridge.api.dependencies import StatusProxyDep, TaskServiceDep
from scrape_bridge.config.settings import get_settings
from scrape_bridge.core.exceptions import (
    JobNotReadyError,
    SerializationError,
    UpstreamUnavailableError,
    ValidationError,
)
from scrape_bridge.jobs.models import build_job_request
from scrape_bridge.sheets.decoder import decoder_for, detect_format
from scrape_bridge.sheets.encoder import XLSX_MEDIA_TYPE, encode_results, encode_template
from scrape_bridge.sheets.uploads import staged_upload

logger = structlog.get_logger(__name__)

router = APIRouter()

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

MSG_NO_FILE: str = "请上传 Excel 文件"
MSG_SUBMIT_FAILED: str = "提交任务失败: "
MSG_STATUS_FAILED: str = "获取状态失败"
MSG_NOT_READY: str = "任务未完成或无数据"
MSG_DOWNLOAD_FAILED: str = "生成文件失败"
MSG_TEMPLATE_FAILED: str = "生成模板失败"

TEMPLATE_FILENAME: str = "import_template.xlsx"

_UNSAFE_FILENAME_CHARS = re.compile(r"[^A-Za-z0-9._-]")

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _error_json(status_code: int, message: str) -> JSONResponse:
    return JSONResponse({"error": message}, status_code=status_code)


def _xlsx_attachment(data: bytes, filename: str) -> Response:
    """Wrap xlsx bytes in a download response."""
    return Response(
        content=data,
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


def download_filename(task_id: str) -> str:
    """Return ``<prefix>_<task_id>.xlsx`` with the id reduced to filename-safe characters."""
    prefix = get_settings().download_filename_prefix
    return f"{prefix}_{_UNSAFE_FILENAME_CHARS.sub('_', task_id)}.xlsx"


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------


@router.post("/upload")
async def upload_task(
    service: TaskServiceDep,
    file: Annotated[UploadFile | str | None, File()] = None,
    job_type: Annotated[str | None, Form(alias="type")] = None,
    pages: Annotated[str | None, Form()] = None,
) -> Response:
    """Turn an uploaded spreadsheet (xlsx or CSV) into a job on the task service.

    The staged upload is deleted before the task service is contacted, on
    every path.

    Returns:
        The task service's job descriptor, or an ``{"error": ...}`` body with
        HTTP 400 (bad upload) or 500 (submission failed).
    """
    settings = get_settings()
    # A "file" part sent without a filename arrives as a plain string.
    if file is None or isinstance(file, str) or not file.filename:
        return _error_json(status.HTTP_400_BAD_REQUEST, MSG_NO_FILE)

    file_format = detect_format(file.filename, file.content_type)
    decode = decoder_for(file_format)
    try:
        async with staged_upload(
            file, settings.upload_dir, settings.max_upload_bytes, suffix=f".{file_format}"
        ) as path:
            urls = await asyncio.to_thread(decode, path)
    except ValidationError as exc:
        logger.info("upload_rejected", filename=file.filename, reason=str(exc))
        return _error_json(status.HTTP_400_BAD_REQUEST, str(exc))

    job = build_job_request(urls, job_type, pages)

    try:
        descriptor = await service.submit(job)
    except UpstreamUnavailableError as exc:
        logger.error(
            "task_submission_failed",
            error=str(exc),
            detail=exc.detail,
            upstream_status=exc.status_code,
        )
        return _error_json(status.HTTP_500_INTERNAL_SERVER_ERROR, MSG_SUBMIT_FAILED + exc.reason)

    return JSONResponse(descriptor)


@router.get("/status/{task_id}")
async def task_status(task_id: str, proxy: StatusProxyDep) -> Response:
    """Return the task service's current status document for *task_id*."""
    try:
        document = await proxy.get_status(task_id)
    except UpstreamUnavailableError as exc:
        logger.warning(
            "status_fetch_failed",
            task_id=task_id,
            error=str(exc),
            upstream_status=exc.status_code,
        )
        return _error_json(status.HTTP_500_INTERNAL_SERVER_ERROR, MSG_STATUS_FAILED)
    return JSONResponse(document)


@router.get("/download/{task_id}")
async def download_results(task_id: str, proxy: StatusProxyDep) -> Response:
    """Stream a completed job's results as an xlsx attachment.

    Returns HTTP 400 (plain text) while the job is not completed or has no
    ``results``; HTTP 500 (plain text) when the fetch or workbook build fails.
    """
    try:
        records = await proxy.get_result(task_id)
    except JobNotReadyError:
        return PlainTextResponse(MSG_NOT_READY, status_code=status.HTTP_400_BAD_REQUEST)
    except UpstreamUnavailableError as exc:
        logger.error("download_failed", task_id=task_id, error=str(exc))
        return PlainTextResponse(
            MSG_DOWNLOAD_FAILED, status_code=status.HTTP_500_INTERNAL_SERVER_ERROR
        )

    try:
        data = await asyncio.to_thread(encode_results, records)
    except SerializationError as exc:
        logger.error("download_failed", task_id=task_id, error=str(exc))
        return PlainTextResponse(
            MSG_DOWNLOAD_FAILED, status_code=status.HTTP_500_INTERNAL_SERVER_ERROR
        )

    logger.info("results_downloaded", task_id=task_id, record_count=len(records))
    return _xlsx_attachment(data, download_filename(task_id))


@router.get("/template")
async def download_template() -> Response:
    """Return the static xlsx import template."""
    try:
        data = await asyncio.to_thread(encode_template)
    except SerializationError as exc:
        logger.error("template_generation_failed", error=str(exc))
        return PlainTextResponse(
            MSG_TEMPLATE_FAILED, status_code=status.HTTP_500_INTERNAL_SERVER_ERROR
        )
    return _xlsx_attachment(data, TEMPLATE_FILENAME)

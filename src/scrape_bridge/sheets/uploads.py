"""Scoped temporary storage for uploaded spreadsheets.

An upload is copied to a uniquely named file in the upload directory, handed
to the caller, and removed again when the ``async with`` block exits, on
success and failure alike.  Concurrent uploads never share a filename.
"""

from __future__ import annotations

import asyncio
import uuid
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator

import structlog
from fastapi import UploadFile

from scrape_bridge.core.exceptions import UploadTooLargeError

logger = structlog.get_logger(__name__)

_CHUNK_SIZE: int = 1024 * 1024  # 1 MB

MSG_TOO_LARGE: str = "文件过大"


def _discard(path: Path) -> None:
    """Delete a staged file; failure is logged and never raised."""
    try:
        path.unlink(missing_ok=True)
    except OSError as exc:
        logger.warning("staged_upload_cleanup_failed", path=str(path), error=str(exc))


async def _copy_upload(upload: UploadFile, path: Path, max_bytes: int) -> int:
    """Stream *upload* into *path* in chunks, enforcing *max_bytes*.

    Returns:
        Number of bytes written.

    Raises:
        UploadTooLargeError: As soon as the running total exceeds the limit.
    """
    written = 0
    fh = await asyncio.to_thread(path.open, "wb")
    try:
        while True:
            chunk = await upload.read(_CHUNK_SIZE)
            if not chunk:
                break
            written += len(chunk)
            if written > max_bytes:
                raise UploadTooLargeError(MSG_TOO_LARGE, limit=max_bytes)
            await asyncio.to_thread(fh.write, chunk)
    finally:
        await asyncio.to_thread(fh.close)
    return written


@asynccontextmanager
async def staged_upload(
    upload: UploadFile,
    directory: str | Path,
    max_bytes: int,
    suffix: str = ".xlsx",
) -> AsyncIterator[Path]:
    """Stage an upload on disk for the duration of the ``async with`` block.

    Usage::

        async with staged_upload(file, settings.upload_dir, settings.max_upload_bytes) as path:
            urls = await asyncio.to_thread(decode_urls, path)

    Args:
        upload: The multipart file from the request.
        directory: Upload directory; created when missing.
        max_bytes: Size limit for the upload.
        suffix: Extension of the staged file name.

    Yields:
        Path of the staged copy.

    Raises:
        UploadTooLargeError: When the upload exceeds *max_bytes*.
    """
    target_dir = Path(directory)
    await asyncio.to_thread(target_dir.mkdir, parents=True, exist_ok=True)
    path = target_dir / f"{uuid.uuid4().hex}{suffix}"
    try:
        size = await _copy_upload(upload, path, max_bytes)
        logger.debug("upload_staged", filename=upload.filename, size=size)
        yield path
    finally:
        await asyncio.to_thread(_discard, path)

"""Unit tests for scoped upload staging.

The staged file must be gone after the ``async with`` block on every exit
path, including validation failures raised inside the block.
"""

from __future__ import annotations

import asyncio
import io
from pathlib import Path
from unittest.mock import patch

import pytest
from fastapi import UploadFile

from scrape_bridge.core.exceptions import EmptyInputError, UploadTooLargeError
from scrape_bridge.sheets.decoder import decode_urls
from scrape_bridge.sheets.uploads import staged_upload
from tests.factories.workbooks import build_workbook


def _upload(data: bytes, filename: str = "urls.xlsx") -> UploadFile:
    return UploadFile(file=io.BytesIO(data), filename=filename)


@pytest.mark.asyncio
class TestStagedUpload:
    async def test_copies_content_and_removes_file(self, tmp_path: Path) -> None:
        data = build_workbook([["https://example.com/a"]])

        async with staged_upload(_upload(data), tmp_path, max_bytes=10_000_000) as path:
            assert path.parent == tmp_path
            assert path.read_bytes() == data
            staged = path

        assert not staged.exists()
        assert list(tmp_path.iterdir()) == []

    async def test_creates_missing_directory(self, tmp_path: Path) -> None:
        target = tmp_path / "nested" / "uploads"

        async with staged_upload(_upload(b"x"), target, max_bytes=100) as path:
            assert target.is_dir()
            assert path.exists()

    async def test_removed_when_decoding_fails(self, tmp_path: Path) -> None:
        data = build_workbook([["no urls here"]])

        with pytest.raises(EmptyInputError):
            async with staged_upload(_upload(data), tmp_path, max_bytes=10_000_000) as path:
                await asyncio.to_thread(decode_urls, path)

        assert list(tmp_path.iterdir()) == []

    async def test_too_large_rejected_and_removed(self, tmp_path: Path) -> None:
        with pytest.raises(UploadTooLargeError) as exc_info:
            async with staged_upload(_upload(b"x" * 50), tmp_path, max_bytes=10):
                pytest.fail("block must not run for oversized uploads")

        assert exc_info.value.limit == 10
        assert list(tmp_path.iterdir()) == []

    async def test_concurrent_uploads_use_distinct_names(self, tmp_path: Path) -> None:
        async with staged_upload(_upload(b"a"), tmp_path, max_bytes=100) as first:
            async with staged_upload(_upload(b"b"), tmp_path, max_bytes=100) as second:
                assert first != second
                assert first.read_bytes() == b"a"
                assert second.read_bytes() == b"b"

    async def test_cleanup_failure_does_not_mask_result(self, tmp_path: Path) -> None:
        with patch.object(Path, "unlink", side_effect=PermissionError("locked")):
            async with staged_upload(_upload(b"x"), tmp_path, max_bytes=100) as path:
                result = path.read_bytes()

        assert result == b"x"

    async def test_cleanup_failure_does_not_mask_primary_error(self, tmp_path: Path) -> None:
        with patch.object(Path, "unlink", side_effect=PermissionError("locked")):
            with pytest.raises(EmptyInputError):
                async with staged_upload(_upload(b"x"), tmp_path, max_bytes=100):
                    raise EmptyInputError("none")

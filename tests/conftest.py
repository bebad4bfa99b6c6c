"""Shared pytest fixtures for Scrape Bridge tests.

Fixture summary
---------------
upload_dir   : Empty temporary upload directory wired into settings.
fake_service : In-memory ``FakeTaskService`` (see ``tests/factories``).
client       : httpx.AsyncClient against the FastAPI app, with the task
                service dependency replaced by ``fake_service``.

No test talks to a real task service.  Client tests mock httpx with respx;
route tests use the fake.
"""

from __future__ import annotations

import os
from collections.abc import AsyncGenerator, Iterator
from pathlib import Path

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

# ---------------------------------------------------------------------------
# Test environment bootstrap
# ---------------------------------------------------------------------------
# Set before application modules are imported so the module-level app is
# built against the test configuration.

_TEST_ENV_DEFAULTS: dict[str, str] = {
    "TASK_API_URL": "http://tasks.test",
    "STATIC_DIR": "tests/_no_static",
    "LOG_LEVEL": "INFO",
}

for _key, _default in _TEST_ENV_DEFAULTS.items():
    os.environ.setdefault(_key, _default)

from scrape_bridge.api.dependencies import get_task_service  # noqa: E402
from scrape_bridge.api.main import app  # noqa: E402
from scrape_bridge.config.settings import get_settings  # noqa: E402
from tests.factories.task_service import FakeTaskService  # noqa: E402

get_settings.cache_clear()


@pytest.fixture
def upload_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Iterator[Path]:
    """Point ``UPLOAD_DIR`` at a fresh temporary directory."""
    target = tmp_path / "uploads"
    monkeypatch.setenv("UPLOAD_DIR", str(target))
    get_settings.cache_clear()
    yield target
    get_settings.cache_clear()


@pytest.fixture
def fake_service() -> FakeTaskService:
    return FakeTaskService()


@pytest_asyncio.fixture
async def client(
    upload_dir: Path,
    fake_service: FakeTaskService,
) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client bound to the app with the task service faked out."""

    async def _override() -> AsyncGenerator[FakeTaskService, None]:
        yield fake_service

    app.dependency_overrides[get_task_service] = _override
    try:
        async with AsyncClient(
            transport=ASGITransport(app=app),
            base_url="http://test",
        ) as ac:
            yield ac
    finally:
        app.dependency_overrides.pop(get_task_service, None)

"""FastAPI dependency injection providers.

Dependency hierarchy::

    get_task_service  : per-request TaskServiceClient over a fresh httpx client
    get_status_proxy  : StatusProxy wrapping the task service

Tests replace ``get_task_service`` through ``app.dependency_overrides`` to
run the routes against an in-memory fake.
"""

from __future__ import annotations

from typing import Annotated, AsyncGenerator

import httpx
from fastapi import Depends

from scrape_bridge.config.settings import get_settings
from scrape_bridge.jobs.client import TaskService, TaskServiceClient
from scrape_bridge.jobs.status import StatusProxy


async def get_task_service() -> AsyncGenerator[TaskService, None]:
    """Yield a task service client bound to the configured base URL.

    The underlying ``httpx.AsyncClient`` lives for one request only and is
    closed when the response has been produced.
    """
    settings = get_settings()
    async with httpx.AsyncClient(
        base_url=settings.task_api_url,
        timeout=settings.task_api_timeout,
    ) as client:
        yield TaskServiceClient(client)


TaskServiceDep = Annotated[TaskService, Depends(get_task_service)]


def get_status_proxy(service: TaskServiceDep) -> StatusProxy:
    """Return a :class:`StatusProxy` over the request's task service."""
    return StatusProxy(service)


StatusProxyDep = Annotated[StatusProxy, Depends(get_status_proxy)]

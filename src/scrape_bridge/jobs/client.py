"""HTTP client for the remote scrape task service.

The task service is an opaque capability with two calls:

- ``POST /tasks``: submit ``{"type", "urls", "pages"}``; returns a job
  descriptor such as ``{"task_id": ..., "message": ..., "status_url": ...}``.
- ``GET /tasks/{task_id}``: returns ``{"status": ..., "results": [...], ...}``.

Everything the service returns is passed through untouched.  Each call is a
single request: no retry, no caching.  Every transport problem is raised as
:class:`~scrape_bridge.core.exceptions.UpstreamUnavailableError`.
"""

from __future__ import annotations

import json
from typing import Any, Protocol
from urllib.parse import quote

import httpx
import structlog

from scrape_bridge.core.exceptions import UpstreamUnavailableError
from scrape_bridge.jobs.models import JobHandle, JobRequest

logger = structlog.get_logger(__name__)


class TaskService(Protocol):
    """What the bridge needs from the remote task service."""

    async def submit(self, job: JobRequest) -> dict[str, Any]: ...

    async def fetch_status(self, task_id: JobHandle) -> dict[str, Any]: ...


def _extract_detail(response: httpx.Response) -> str | None:
    """Return the ``detail`` field of an error body, if there is one.

    FastAPI-style services send ``{"detail": "..."}`` or, for validation
    errors, ``{"detail": [{...}, ...]}``; the list form is rendered as JSON.
    Non-JSON bodies, such as a proxy's HTML error page, yield ``None``.
    """
    try:
        body = response.json()
    except ValueError:
        return None
    if not isinstance(body, dict):
        return None
    detail = body.get("detail")
    if detail is None:
        return None
    if isinstance(detail, str):
        return detail
    return json.dumps(detail, ensure_ascii=False)


class TaskServiceClient:
    """``TaskService`` implementation over an ``httpx.AsyncClient``.

    The client must be created with ``base_url`` set to the task service
    address; its lifetime is owned by the caller.

    Typical usage::

        async with httpx.AsyncClient(base_url=settings.task_api_url) as http:
            service = TaskServiceClient(http)
            descriptor = await service.submit(job)
    """

    def __init__(self, client: httpx.AsyncClient) -> None:
        self._client = client

    async def submit(self, job: JobRequest) -> dict[str, Any]:
        """Submit *job* and return the service's job descriptor.

        Raises:
            UpstreamUnavailableError: On any transport or response failure.
        """
        descriptor = await self._request("POST", "/tasks", json=job.to_payload())
        logger.info(
            "task_submitted",
            task_id=descriptor.get("task_id"),
            job_type=job.job_type,
            url_count=len(job.urls),
            pages=job.page_count,
        )
        return descriptor

    async def fetch_status(self, task_id: JobHandle) -> dict[str, Any]:
        """Return the service's current status document for *task_id*.

        Raises:
            UpstreamUnavailableError: On any transport or response failure.
        """
        return await self._request("GET", f"/tasks/{quote(str(task_id), safe='')}")

    async def _request(self, method: str, path: str, **kwargs: Any) -> dict[str, Any]:
        try:
            response = await self._client.request(method, path, **kwargs)
        except httpx.RequestError as exc:
            raise UpstreamUnavailableError(
                f"task service: request error on {method} {path}: {exc}",
            ) from exc

        try:
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise UpstreamUnavailableError(
                f"task service: HTTP {response.status_code} on {method} {path}",
                detail=_extract_detail(response),
                status_code=response.status_code,
            ) from exc

        try:
            body = response.json()
        except ValueError as exc:
            raise UpstreamUnavailableError(
                f"task service: non-JSON body on {method} {path}",
                status_code=response.status_code,
            ) from exc

        if not isinstance(body, dict):
            raise UpstreamUnavailableError(
                f"task service: expected a JSON object on {method} {path}, "
                f"got {type(body).__name__}",
                status_code=response.status_code,
            )
        return body

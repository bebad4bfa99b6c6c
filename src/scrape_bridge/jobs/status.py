"""Status and result access for submitted jobs.

Every call goes straight to the task service.  Nothing is cached and
concurrent pollers of the same job each trigger their own upstream request.
"""

from __future__ import annotations

from typing import Any

import structlog

from scrape_bridge.core.exceptions import JobNotReadyError, UpstreamUnavailableError
from scrape_bridge.jobs.client import TaskService
from scrape_bridge.jobs.models import JobHandle

logger = structlog.get_logger(__name__)

COMPLETED_STATUS: str = "completed"


class StatusProxy:
    """Read-side view of jobs on the task service."""

    def __init__(self, service: TaskService) -> None:
        self._service = service

    async def get_status(self, task_id: JobHandle) -> dict[str, Any]:
        """Return the status document exactly as the task service sent it."""
        return await self._service.fetch_status(task_id)

    async def get_result(self, task_id: JobHandle) -> list[dict[str, Any]]:
        """Return the result records of a finished job.

        A job is consumable only when its status is ``completed`` *and* the
        document carries a ``results`` value.  ``results: []`` is a valid,
        empty result.

        Raises:
            JobNotReadyError: The job is not completed or has no results.
            UpstreamUnavailableError: The fetch failed, or ``results`` is
                not a list.
        """
        document = await self._service.fetch_status(task_id)
        status = document.get("status")
        results = document.get("results")

        if status != COMPLETED_STATUS or results is None:
            logger.info("task_not_ready", task_id=task_id, status=status)
            raise JobNotReadyError(task_id, status)

        if not isinstance(results, list):
            raise UpstreamUnavailableError(
                f"task service: 'results' for task {task_id!r} is "
                f"{type(results).__name__}, expected a list",
            )
        return results

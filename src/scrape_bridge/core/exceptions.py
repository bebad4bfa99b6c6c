"""Application-wide exception hierarchy for Scrape Bridge.

All custom exceptions subclass ``ScrapeBridgeError``.  Route handlers in
:mod:`scrape_bridge.api.routes.tasks` map each branch to exactly one HTTP
response.

Hierarchy::

    ScrapeBridgeError
    ├── ValidationError              (HTTP 400)
    │   ├── EmptyInputError
    │   ├── UnreadableSheetError
    │   └── UploadTooLargeError
    ├── UpstreamUnavailableError     (detail, status_code; HTTP 500)
    ├── JobNotReadyError             (task_id, status; HTTP 400)
    └── SerializationError           (HTTP 500)
"""

from __future__ import annotations


class ScrapeBridgeError(Exception):
    """Base class for all Scrape Bridge exceptions."""


# ---------------------------------------------------------------------------
# Input validation
# ---------------------------------------------------------------------------


class ValidationError(ScrapeBridgeError):
    """Raised when an uploaded file cannot be turned into a job.

    The message is user-facing and is returned verbatim in the ``error``
    field of the HTTP 400 response.
    """


class EmptyInputError(ValidationError):
    """Raised when a readable sheet yields zero URLs starting with ``http``."""


class UnreadableSheetError(ValidationError):
    """Raised when the uploaded bytes are not a readable xlsx workbook."""


class UploadTooLargeError(ValidationError):
    """Raised when an upload exceeds the configured size limit.

    Args:
        message: User-facing description.
        limit: Configured limit in bytes.
    """

    def __init__(self, message: str, limit: int | None = None) -> None:
        super().__init__(message)
        self.limit = limit


# ---------------------------------------------------------------------------
# Remote task service
# ---------------------------------------------------------------------------


class UpstreamUnavailableError(ScrapeBridgeError):
    """Raised when the task service cannot be reached or answers badly.

    Covers network failures, non-2xx responses, and bodies that are not a
    JSON object.

    Args:
        message: Generic description of the failure.
        detail: The task service's own error detail, when it sent one.
        status_code: Upstream HTTP status, or ``None`` on network failure.
    """

    def __init__(
        self,
        message: str,
        detail: str | None = None,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message)
        self.detail = detail
        self.status_code = status_code

    @property
    def reason(self) -> str:
        """The upstream detail when present, otherwise the generic message."""
        return self.detail or str(self)


class JobNotReadyError(ScrapeBridgeError):
    """Raised when results are requested for a job that cannot supply them yet.

    A job reporting ``completed`` without a ``results`` payload counts as
    not ready.

    Args:
        task_id: Identifier of the job.
        status: Status value reported by the task service.
    """

    def __init__(self, task_id: str, status: object = None) -> None:
        super().__init__(f"Task {task_id!r} has no results yet (status={status!r})")
        self.task_id = task_id
        self.status = status


# ---------------------------------------------------------------------------
# Output
# ---------------------------------------------------------------------------


class SerializationError(ScrapeBridgeError):
    """Raised when a spreadsheet cannot be built or written."""

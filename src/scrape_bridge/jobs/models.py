"""Job request model and the builder that fills it from upload form fields.

``JobRequest`` is what the bridge sends to ``POST /tasks`` on the task
service.  Field names are Pythonic; :meth:`JobRequest.to_payload` produces
the wire shape ``{"type", "urls", "pages"}``.
"""

from __future__ import annotations

import re
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_JOB_TYPE: str = "product"
DEFAULT_PAGE_COUNT: int = 1

# Leading integer, read the way a browser form value is: "3", " 3 ", "3.5", "3px".
_LEADING_INT_RE = re.compile(r"^\s*([+-]?\d+)")

JobHandle = str
"""Opaque task identifier assigned by the task service."""


class JobRequest(BaseModel):
    """A scrape job ready for submission.  Immutable once built."""

    model_config = ConfigDict(frozen=True)

    job_type: str = DEFAULT_JOB_TYPE
    urls: list[str] = Field(..., min_length=1)
    page_count: int = Field(DEFAULT_PAGE_COUNT, ge=1)

    def to_payload(self) -> dict[str, Any]:
        """Return the JSON body expected by the task service."""
        return {
            "type": self.job_type,
            "urls": list(self.urls),
            "pages": self.page_count,
        }


def parse_page_count(pages_raw: str | int | None) -> int:
    """Parse the ``pages`` form field.

    Missing or unparseable values, and values below 1, become
    :data:`DEFAULT_PAGE_COUNT`.  There is no upper bound here; the task
    service decides what it accepts.
    """
    if pages_raw is None:
        return DEFAULT_PAGE_COUNT
    if isinstance(pages_raw, int):
        value = pages_raw
    else:
        match = _LEADING_INT_RE.match(pages_raw)
        if match is None:
            return DEFAULT_PAGE_COUNT
        value = int(match.group(1))
    return value if value >= 1 else DEFAULT_PAGE_COUNT


def build_job_request(
    urls: list[str],
    job_type_raw: str | None = None,
    pages_raw: str | int | None = None,
) -> JobRequest:
    """Assemble a :class:`JobRequest` from decoded URLs and raw form values.

    Args:
        urls: Non-empty URL list from the decoder.
        job_type_raw: The ``type`` form field; blank means ``"product"``.
        pages_raw: The ``pages`` form field.

    Returns:
        The frozen job request.
    """
    job_type = (job_type_raw or "").strip() or DEFAULT_JOB_TYPE
    return JobRequest(
        job_type=job_type,
        urls=list(urls),
        page_count=parse_page_count(pages_raw),
    )

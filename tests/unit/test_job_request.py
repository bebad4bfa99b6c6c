"""Unit tests for JobRequest and build_job_request()."""

from __future__ import annotations

import pytest
from pydantic import ValidationError as PydanticValidationError

from scrape_bridge.jobs.models import (
    DEFAULT_JOB_TYPE,
    JobRequest,
    build_job_request,
    parse_page_count,
)

_URLS = ["https://example.com/a", "https://example.com/b"]


class TestParsePageCount:
    @pytest.mark.parametrize("raw", [None, "", "abc", "  ", "-", "x3"])
    def test_missing_or_non_numeric_defaults_to_one(self, raw: str | None) -> None:
        assert parse_page_count(raw) == 1

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [("3", 3), (" 3 ", 3), ("3.5", 3), ("12pages", 12), ("+4", 4), (7, 7)],
    )
    def test_leading_integer_is_used(self, raw: str | int, expected: int) -> None:
        assert parse_page_count(raw) == expected

    @pytest.mark.parametrize("raw", ["0", "-2", 0, -5])
    def test_values_below_one_default_to_one(self, raw: str | int) -> None:
        assert parse_page_count(raw) == 1

    def test_no_upper_bound(self) -> None:
        assert parse_page_count("5000") == 5000


class TestBuildJobRequest:
    def test_defaults(self) -> None:
        job = build_job_request(_URLS)

        assert job.job_type == DEFAULT_JOB_TYPE == "product"
        assert job.page_count == 1
        assert job.urls == _URLS

    def test_pages_three(self) -> None:
        assert build_job_request(_URLS, pages_raw="3").page_count == 3

    def test_non_numeric_pages(self) -> None:
        assert build_job_request(_URLS, pages_raw="many").page_count == 1

    def test_blank_type_defaults_to_product(self) -> None:
        assert build_job_request(_URLS, job_type_raw="  ").job_type == "product"

    def test_explicit_type_kept(self) -> None:
        assert build_job_request(_URLS, job_type_raw="store").job_type == "store"

    def test_payload_uses_wire_names(self) -> None:
        job = build_job_request(_URLS, "store", "2")

        assert job.to_payload() == {"type": "store", "urls": _URLS, "pages": 2}

    def test_urls_are_copied(self) -> None:
        urls = list(_URLS)
        job = build_job_request(urls)
        urls.append("https://example.com/c")

        assert job.urls == _URLS


class TestJobRequestModel:
    def test_is_frozen(self) -> None:
        job = build_job_request(_URLS)

        with pytest.raises(PydanticValidationError):
            job.page_count = 5  # type: ignore[misc]

    def test_empty_url_list_rejected(self) -> None:
        with pytest.raises(PydanticValidationError):
            JobRequest(urls=[])

    def test_page_count_must_be_positive(self) -> None:
        with pytest.raises(PydanticValidationError):
            JobRequest(urls=_URLS, page_count=0)

"""Test data builders.

Available helpers
-----------------
ProductResultFactory   : scraped product record dict (Factory Boy)
TaskDescriptorFactory  : ``POST /tasks`` response dict (Factory Boy)
FakeTaskService        : in-memory ``TaskService`` that records calls
build_workbook         : xlsx bytes from a list of rows
build_csv              : CSV bytes from a list of rows
truncate_sheet_xml     : xlsx bytes with a damaged worksheet part
read_workbook          : rows of the first sheet of xlsx bytes
read_records           : results workbook back into dicts
"""

from __future__ import annotations

from tests.factories.results import ProductResultFactory, TaskDescriptorFactory
from tests.factories.task_service import FakeTaskService
from tests.factories.workbooks import (
    build_csv,
    build_workbook,
    read_records,
    read_workbook,
    truncate_sheet_xml,
)

__all__ = [
    "FakeTaskService",
    "ProductResultFactory",
    "TaskDescriptorFactory",
    "build_csv",
    "build_workbook",
    "read_records",
    "read_workbook",
    "truncate_sheet_xml",
]

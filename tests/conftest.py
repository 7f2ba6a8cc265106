from __future__ import annotations

from collections.abc import Callable, Sequence
from io import BytesIO
from typing import Any

import pytest
from openpyxl import Workbook

from sheetlink.services.link_service import LinkExtractorService, ProcessingOptions
from sheetlink.services.metrics import InMemoryMetricsService

WorkbookFactory = Callable[..., bytes]


def build_workbook(
    rows: dict[int, Sequence[Any]],
    links: dict[str, str] | None = None,
    title: str = "Sheet1",
) -> bytes:
    """Build an xlsx file from row values and cell-reference hyperlinks.

    Args:
        rows: Row index to cell values, starting at column A. None leaves a
            cell empty.
        links: Cell reference (e.g. "A2") to hyperlink target.
        title: Worksheet title.
    """
    workbook = Workbook()
    sheet = workbook.active
    sheet.title = title
    for row_index, values in rows.items():
        for column_index, value in enumerate(values, start=1):
            if value is not None:
                sheet.cell(row=row_index, column=column_index, value=value)
    for reference, target in (links or {}).items():
        sheet[reference].hyperlink = target

    buffer = BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()


@pytest.fixture
def make_workbook() -> WorkbookFactory:
    """Factory fixture for xlsx bytes."""
    return build_workbook


@pytest.fixture
def links_workbook() -> bytes:
    """Title column with two hyperlinks separated by a fully blank row."""
    return build_workbook(
        rows={
            1: ["Title", "URL"],
            2: ["Google", "https://google.com"],
            4: ["GitHub", "https://github.com"],
        },
        links={"A2": "https://google.com", "A4": "https://github.com"},
    )


@pytest.fixture
def merge_workbook() -> bytes:
    """Title/URL text columns with one invalid URL and one blank row."""
    return build_workbook(
        rows={
            1: ["Title", "URL"],
            2: ["Google", "https://google.com"],
            3: ["Bad", "example.com"],
            4: [None, None],
            5: ["Docs", "  www.python.org  "],
        }
    )


@pytest.fixture
def options() -> ProcessingOptions:
    return ProcessingOptions(
        max_file_size_bytes=10 * 1024 * 1024,
        max_header_search_rows=10,
        max_url_length=2000,
        template_cache_ttl_seconds=7200,
    )


@pytest.fixture
def metrics() -> InMemoryMetricsService:
    return InMemoryMetricsService()


@pytest.fixture
def service(
    options: ProcessingOptions, metrics: InMemoryMetricsService
) -> LinkExtractorService:
    return LinkExtractorService(options=options, metrics=metrics)

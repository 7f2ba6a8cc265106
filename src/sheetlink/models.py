"""Pydantic models for API requests and responses."""

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field

from sheetlink.utils.exceptions import ErrorCode


class SpreadsheetFormat(str, Enum):
    """Spreadsheet container family detected from the file signature."""

    XLSX = "xlsx"
    XLS = "xls"


class ExtractionLayout(str, Enum):
    """Shape of the workbook produced by link extraction."""

    FULL_ROW = "full_row"
    SUMMARY = "summary"


class HealthResponse(BaseModel):
    """Response model for health check endpoint."""

    status: str
    timestamp: str
    version: str
    free_disk_bytes: int | None = None


class LinkInfo(BaseModel):
    """A single extracted or merged link."""

    row: int = Field(..., description="Row of the link in the output workbook")
    title: str = Field(..., description="Cell text shown for the link")
    url: str = Field(..., description="Hyperlink target")


class ExtractionResponse(BaseModel):
    """Response model for the extract endpoint."""

    total_rows: int = Field(..., description="Data rows written to the output")
    links_found: int = Field(..., description="Hyperlinks found in the column")
    links: list[LinkInfo] = Field(
        default_factory=list, description="Preview of the first links found"
    )
    output_file_base64: str = Field(..., description="Output workbook (base64)")


class MergeResponse(BaseModel):
    """Response model for the merge endpoints."""

    total_rows: int = Field(..., description="Data rows written to the output")
    links_created: int = Field(..., description="Hyperlinks created")
    links: list[LinkInfo] = Field(
        default_factory=list, description="Preview of the first links created"
    )
    output_file_base64: str = Field(..., description="Output workbook (base64)")
    error_message: str | None = Field(
        default=None,
        description="Set when one or more rows had an invalid URL",
    )
    skipped_rows: list[dict[str, Any]] = Field(
        default_factory=list, description="Rows rejected during merge"
    )


class MergeListsRequest(BaseModel):
    """Request body for merging in-memory title and URL lists."""

    titles: list[str] = Field(..., description="Link titles")
    urls: list[str] = Field(..., description="Link targets, one per title")


class MetricsResponse(BaseModel):
    """Snapshot of the process-wide processing counters."""

    files_processed: int
    total_rows: int
    total_bytes: int
    total_duration_ms: int
    average_duration_ms: float
    errors: dict[str, int]


class ErrorDetail(BaseModel):
    """Error detail model for API error responses.

    This model provides structured error responses with:
    - Human-readable error message
    - Machine-readable error code
    - Optional additional details for debugging
    - Optional request ID for correlation
    """

    detail: str = Field(..., description="Human-readable error message")
    error_code: str | None = Field(
        default=None,
        description="Machine-readable error code (e.g., 'E001')",
    )
    details: dict[str, Any] | None = Field(
        default=None,
        description="Additional error details for debugging",
    )
    request_id: str | None = Field(
        default=None,
        description="Request ID for error correlation",
    )

    @classmethod
    def from_error_code(
        cls,
        error_code: ErrorCode,
        detail: str,
        details: dict[str, Any] | None = None,
        request_id: str | None = None,
    ) -> "ErrorDetail":
        """Create an ErrorDetail from an ErrorCode enum value."""
        return cls(
            detail=detail,
            error_code=error_code.value,
            details=details,
            request_id=request_id,
        )

"""Centralized exception classes for sheetlink.

This module provides a hierarchy of custom exceptions with stable error
codes, HTTP status code mapping, and structured error details. The
processing service catches these at its boundary and turns them into
coded error messages on the result object.

Exception Hierarchy:
    SheetLinkError (base)
    └── ExcelProcessingError
        ├── InvalidFileFormatError
        │   └── FileTooLargeError
        ├── InvalidColumnError
        └── InvalidUrlError

Error Codes:
    All errors have a short code (e.g., "E001") that is independent of the
    message text and can be used for programmatic error handling.
"""

from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    """Enumeration of all error codes used in the application.

    Error codes are grouped by category:
    - E00x: Domain errors (file format, columns, URLs)
    - E01x: Resource and I/O errors
    - E999: Unexpected errors
    """

    # Domain errors (E00x)
    INVALID_FILE_FORMAT = "E001"
    INVALID_COLUMN = "E002"
    EXCEL_PROCESSING_FAILED = "E003"
    INVALID_URL = "E004"

    # Resource errors (E01x)
    OUT_OF_MEMORY = "E010"
    FILE_READ_ERROR = "E011"
    PERMISSION_DENIED = "E012"

    # Internal errors
    UNEXPECTED_ERROR = "E999"


class HTTPStatusMixin:
    """Mixin that provides HTTP status code for exceptions.

    Subclasses should set the `http_status` class attribute.
    """

    http_status: int = 500

    def get_http_status(self) -> int:
        """Get the HTTP status code for this exception.

        Returns:
            HTTP status code appropriate for this error.
        """
        return self.http_status


class SheetLinkError(Exception, HTTPStatusMixin):
    """Base exception for all sheetlink errors.

    Attributes:
        message: Human-readable error message.
        error_code: Unique error code from ErrorCode enum.
        details: Optional dictionary with additional error details.
        http_status: HTTP status code for API responses (default 500).
    """

    http_status: int = 500

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.UNEXPECTED_ERROR,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable error description.
            error_code: Error code from ErrorCode enum.
            details: Optional additional details about the error.
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or {}

    @property
    def full_message(self) -> str:
        """Message shown to the caller, including any remediation hint."""
        return self.message

    def to_dict(self) -> dict[str, Any]:
        """Convert the exception to a dictionary for API responses.

        Returns:
            Dictionary with error information.
        """
        result: dict[str, Any] = {
            "error_code": self.error_code.value,
            "message": self.full_message,
        }
        if self.details:
            result["details"] = self.details
        return result

    def __str__(self) -> str:
        """Return string representation with error code."""
        return f"[{self.error_code.value}] {self.message}"


class ExcelProcessingError(SheetLinkError):
    """Raised when a workbook cannot be processed for structural reasons."""

    http_status: int = 422

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.EXCEL_PROCESSING_FAILED,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, error_code, details)


class InvalidFileFormatError(ExcelProcessingError):
    """Raised when the uploaded bytes are not an acceptable spreadsheet."""

    http_status: int = 400

    def __init__(
        self,
        message: str,
        recovery_suggestion: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize with a remediation hint.

        Args:
            message: Error message.
            recovery_suggestion: Hint telling the user how to fix the file.
            details: Additional details.
        """
        details = details or {}
        if recovery_suggestion:
            details["recovery_suggestion"] = recovery_suggestion
        super().__init__(message, ErrorCode.INVALID_FILE_FORMAT, details)
        self.recovery_suggestion = recovery_suggestion

    @property
    def full_message(self) -> str:
        if self.recovery_suggestion:
            return f"{self.message} {self.recovery_suggestion}"
        return self.message


class FileTooLargeError(InvalidFileFormatError):
    """Raised when a file exceeds the maximum allowed size."""

    http_status: int = 413

    def __init__(
        self,
        file_size: int,
        max_size: int,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize with size information.

        Args:
            file_size: Actual file size in bytes.
            max_size: Maximum allowed size in bytes.
            details: Additional details.
        """
        details = details or {}
        details["file_size_bytes"] = file_size
        details["max_size_bytes"] = max_size
        megabyte = 1024 * 1024
        super().__init__(
            message=(
                f"File size ({file_size // megabyte}MB) exceeds maximum "
                f"allowed size of {max_size // megabyte}MB."
            ),
            recovery_suggestion=(
                "Tip: Try reducing the file size by removing unnecessary "
                "columns, rows, or formatting. Or split your data into "
                "smaller files."
            ),
            details=details,
        )
        self.file_size = file_size
        self.max_size = max_size


class InvalidColumnError(ExcelProcessingError):
    """Raised when a required column header cannot be located."""

    http_status: int = 400

    def __init__(
        self,
        column_name: str,
        max_search_rows: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize with the missing column name.

        Args:
            column_name: Header text that was searched for.
            max_search_rows: Number of rows that were scanned.
            details: Additional details.
        """
        details = details or {}
        details["column_name"] = column_name
        message = f"Column '{column_name}' not found in the spreadsheet."
        if max_search_rows is not None:
            details["max_search_rows"] = max_search_rows
            message = (
                f"Column '{column_name}' not found in the first "
                f"{max_search_rows} rows of the spreadsheet."
            )
        super().__init__(message, ErrorCode.INVALID_COLUMN, details)
        self.column_name = column_name
        self.max_search_rows = max_search_rows


class InvalidUrlError(ExcelProcessingError):
    """Raised when a URL cannot be sanitized into a hyperlink target."""

    http_status: int = 400

    def __init__(
        self,
        url: str,
        reason: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize with the rejected URL.

        Args:
            url: The raw URL text.
            reason: Short description of why it was rejected.
            details: Additional details.
        """
        details = details or {}
        details["url"] = url
        details["reason"] = reason
        super().__init__("Invalid URL format.", ErrorCode.INVALID_URL, details)
        self.url = url
        self.reason = reason

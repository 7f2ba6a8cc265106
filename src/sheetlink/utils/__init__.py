"""Utilities package for sheetlink.

This package provides:
- Centralized exception classes (exceptions.py)
- Structured logging utilities (logging.py)
"""

from sheetlink.utils.exceptions import (
    ErrorCode,
    ExcelProcessingError,
    FileTooLargeError,
    HTTPStatusMixin,
    InvalidColumnError,
    InvalidFileFormatError,
    InvalidUrlError,
    SheetLinkError,
)
from sheetlink.utils.logging import (
    LogContext,
    StructuredLogger,
    get_logger,
    get_request_id,
    set_request_id,
)

__all__ = [
    # Exceptions
    "ErrorCode",
    "ExcelProcessingError",
    "FileTooLargeError",
    "HTTPStatusMixin",
    "InvalidColumnError",
    "InvalidFileFormatError",
    "InvalidUrlError",
    "SheetLinkError",
    # Logging
    "LogContext",
    "StructuredLogger",
    "get_logger",
    "get_request_id",
    "set_request_id",
]

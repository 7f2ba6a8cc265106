"""Tests for the centralized exception hierarchy."""

import pytest

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


class TestErrorCode:
    """Tests for the ErrorCode enum."""

    def test_codes_are_stable(self) -> None:
        assert ErrorCode.INVALID_FILE_FORMAT.value == "E001"
        assert ErrorCode.INVALID_COLUMN.value == "E002"
        assert ErrorCode.EXCEL_PROCESSING_FAILED.value == "E003"
        assert ErrorCode.INVALID_URL.value == "E004"
        assert ErrorCode.OUT_OF_MEMORY.value == "E010"
        assert ErrorCode.FILE_READ_ERROR.value == "E011"
        assert ErrorCode.PERMISSION_DENIED.value == "E012"
        assert ErrorCode.UNEXPECTED_ERROR.value == "E999"

    def test_codes_are_unique(self) -> None:
        values = [code.value for code in ErrorCode]
        assert len(values) == len(set(values))


class TestSheetLinkError:
    """Tests for the base exception."""

    def test_defaults(self) -> None:
        error = SheetLinkError("boom")
        assert error.error_code is ErrorCode.UNEXPECTED_ERROR
        assert error.details == {}
        assert error.http_status == 500
        assert isinstance(error, HTTPStatusMixin)

    def test_str_includes_code(self) -> None:
        error = SheetLinkError("boom", ErrorCode.INVALID_COLUMN)
        assert str(error) == "[E002] boom"

    def test_to_dict(self) -> None:
        error = SheetLinkError("boom", details={"key": "value"})
        assert error.to_dict() == {
            "error_code": "E999",
            "message": "boom",
            "details": {"key": "value"},
        }

    def test_to_dict_omits_empty_details(self) -> None:
        assert "details" not in SheetLinkError("boom").to_dict()


class TestDomainErrors:
    """Tests for the concrete error types."""

    def test_excel_processing_error(self) -> None:
        error = ExcelProcessingError("bad workbook")
        assert error.error_code is ErrorCode.EXCEL_PROCESSING_FAILED
        assert error.get_http_status() == 422

    def test_invalid_file_format_appends_suggestion(self) -> None:
        error = InvalidFileFormatError("Not a workbook.", recovery_suggestion="Tip: fix it.")
        assert error.error_code is ErrorCode.INVALID_FILE_FORMAT
        assert error.http_status == 400
        assert error.full_message == "Not a workbook. Tip: fix it."
        assert error.details["recovery_suggestion"] == "Tip: fix it."
        assert error.to_dict()["message"] == "Not a workbook. Tip: fix it."

    def test_invalid_file_format_without_suggestion(self) -> None:
        error = InvalidFileFormatError("Not a workbook.")
        assert error.full_message == "Not a workbook."

    def test_file_too_large(self) -> None:
        error = FileTooLargeError(file_size=12 * 1024 * 1024, max_size=10 * 1024 * 1024)
        assert isinstance(error, InvalidFileFormatError)
        assert error.error_code is ErrorCode.INVALID_FILE_FORMAT
        assert error.http_status == 413
        assert "File size (12MB) exceeds maximum allowed size of 10MB." in error.message
        assert error.details["file_size_bytes"] == 12 * 1024 * 1024

    def test_invalid_column_names_column(self) -> None:
        error = InvalidColumnError("Title", max_search_rows=10)
        assert error.error_code is ErrorCode.INVALID_COLUMN
        assert error.http_status == 400
        assert error.column_name == "Title"
        assert error.message == (
            "Column 'Title' not found in the first 10 rows of the spreadsheet."
        )

    def test_invalid_column_without_budget(self) -> None:
        error = InvalidColumnError("URL")
        assert error.message == "Column 'URL' not found in the spreadsheet."
        assert "max_search_rows" not in error.details

    def test_invalid_url(self) -> None:
        error = InvalidUrlError("example.com", reason="unsupported_scheme")
        assert error.error_code is ErrorCode.INVALID_URL
        assert error.message == "Invalid URL format."
        assert error.details == {"url": "example.com", "reason": "unsupported_scheme"}

    @pytest.mark.parametrize(
        "error",
        [
            InvalidFileFormatError("x"),
            InvalidColumnError("x"),
            InvalidUrlError("x", "empty"),
        ],
    )
    def test_all_are_excel_processing_errors(self, error: SheetLinkError) -> None:
        assert isinstance(error, ExcelProcessingError)

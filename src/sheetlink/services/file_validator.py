"""Spreadsheet file signature validation.

This module inspects the leading bytes of an upload and accepts only the
two spreadsheet container families: ZIP packages (.xlsx) and OLE2
compound files (.xls).
"""

from typing import BinaryIO

from sheetlink.models import SpreadsheetFormat
from sheetlink.utils.exceptions import FileTooLargeError, InvalidFileFormatError
from sheetlink.utils.logging import get_logger

logger = get_logger(__name__)

__all__ = [
    "FileValidator",
    "XLSX_SIGNATURE",
    "XLS_SIGNATURE",
]

# PK\x03\x04, the local file header of a ZIP package
XLSX_SIGNATURE = bytes([0x50, 0x4B, 0x03, 0x04])
# OLE2 compound file header
XLS_SIGNATURE = bytes([0xD0, 0xCF, 0x11, 0xE0, 0xA1, 0xB1, 0x1A, 0xE1])

_HEADER_LENGTH = 8
_MIN_LENGTH = 4


class FileValidator:
    """Validates uploaded bytes against known spreadsheet signatures."""

    def __init__(self, max_file_size_bytes: int) -> None:
        self.max_file_size_bytes = max_file_size_bytes

    def validate(self, content: bytes, filename: str = "unknown") -> SpreadsheetFormat:
        """Validate an in-memory upload.

        Args:
            content: Entire file content.
            filename: Name used for logging only.

        Returns:
            The detected spreadsheet format.

        Raises:
            FileTooLargeError: If the content exceeds the configured maximum.
            InvalidFileFormatError: If the content is empty, truncated, or has
                an unknown signature.
        """
        return self._check(content[:_HEADER_LENGTH], len(content), filename)

    def validate_stream(
        self, stream: BinaryIO, filename: str = "unknown"
    ) -> SpreadsheetFormat:
        """Validate a seekable stream, restoring its position afterwards."""
        original_position = stream.tell()
        try:
            stream.seek(0, 2)
            size = stream.tell()
            stream.seek(0)
            header = stream.read(_HEADER_LENGTH)
        finally:
            stream.seek(original_position)
        return self._check(header, size, filename)

    def _check(self, header: bytes, size: int, filename: str) -> SpreadsheetFormat:
        if size > self.max_file_size_bytes:
            logger.warning(
                "File exceeds maximum size",
                filename=filename,
                file_size=size,
                max_size=self.max_file_size_bytes,
            )
            raise FileTooLargeError(file_size=size, max_size=self.max_file_size_bytes)

        if size == 0:
            logger.warning("File is empty", filename=filename)
            raise InvalidFileFormatError(
                "File is empty (0 bytes).",
                recovery_suggestion=(
                    "Tip: Make sure the file uploaded correctly. Try re-saving "
                    "your Excel file and uploading again."
                ),
            )

        if len(header) < _MIN_LENGTH:
            logger.warning("File too small to be a spreadsheet", filename=filename)
            raise InvalidFileFormatError(
                "File is too small to be a valid Excel file.",
                recovery_suggestion=(
                    "Tip: The file may be corrupted. Try opening it in Excel "
                    "and re-saving as .xlsx format."
                ),
            )

        detected: SpreadsheetFormat | None = None
        if header.startswith(XLSX_SIGNATURE):
            detected = SpreadsheetFormat.XLSX
        elif header.startswith(XLS_SIGNATURE):
            detected = SpreadsheetFormat.XLS

        if detected is None:
            logger.warning(
                "Invalid spreadsheet signature",
                filename=filename,
                header=header.hex(" "),
            )
            raise InvalidFileFormatError(
                "File is not a valid Excel file (.xlsx or .xls).",
                recovery_suggestion=(
                    "Tip: Make sure the file is actually an Excel file. If it's "
                    "a CSV or other format, open it in Excel and save it as "
                    "'.xlsx' format."
                ),
            )

        logger.info(
            "File validated",
            filename=filename,
            file_size=size,
            file_type=detected.value,
        )
        return detected

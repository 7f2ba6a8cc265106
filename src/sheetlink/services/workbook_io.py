"""Load spreadsheet bytes into a Worksheet and serialize Worksheets to xlsx."""

from __future__ import annotations

from datetime import date, datetime, time
from io import BytesIO
from typing import Any
from zipfile import BadZipFile

import xlrd
from openpyxl import Workbook, load_workbook
from openpyxl.cell.cell import ILLEGAL_CHARACTERS_RE
from openpyxl.styles import Font, PatternFill
from openpyxl.utils import get_column_letter
from openpyxl.utils.exceptions import InvalidFileException
from xlrd.compdoc import CompDocError

from sheetlink.models import SpreadsheetFormat
from sheetlink.utils.exceptions import ExcelProcessingError
from sheetlink.utils.logging import get_logger
from sheetlink.workbook import CellStyle, Worksheet

logger = get_logger(__name__)

_FONTS: dict[CellStyle, Font] = {
    CellStyle.HEADER: Font(bold=True),
    CellStyle.EXTRACT_HEADER: Font(bold=True),
    CellStyle.MERGE_HEADER: Font(bold=True),
    CellStyle.LINK: Font(bold=True, color="FF0000FF", underline="single"),
    CellStyle.NOTE: Font(color="FF888888"),
}

_FILLS: dict[CellStyle, PatternFill] = {
    CellStyle.EXTRACT_HEADER: PatternFill(fill_type="solid", fgColor="FFD9EAF7"),
    CellStyle.MERGE_HEADER: PatternFill(fill_type="solid", fgColor="FFD9F7E8"),
}


def cell_text(value: Any) -> str:
    """Render a raw cell value as the text a user sees."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "TRUE" if value else "FALSE"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    return str(value)


class WorkbookReader:
    """Read the first worksheet of a workbook into the sparse cell model."""

    def read(self, content: bytes, file_format: SpreadsheetFormat) -> Worksheet:
        """Load the first worksheet from raw workbook bytes.

        Args:
            content: Workbook file content.
            file_format: Container family detected from the signature.

        Returns:
            Worksheet with cell text and hyperlinks.

        Raises:
            ExcelProcessingError: If the workbook cannot be opened or has no
                worksheet.
        """
        if file_format is SpreadsheetFormat.XLS:
            return self._read_xls(content)
        return self._read_xlsx(content)

    # ------------------------------------------------------------------ #
    # Internal helpers
    # ------------------------------------------------------------------ #

    def _read_xlsx(self, content: bytes) -> Worksheet:
        try:
            workbook = load_workbook(filename=BytesIO(content), data_only=True)
        except (BadZipFile, InvalidFileException, KeyError, ValueError) as e:
            raise ExcelProcessingError(
                f"The workbook could not be opened: {e}",
                details={"format": SpreadsheetFormat.XLSX.value},
            ) from e

        if not workbook.worksheets:
            raise ExcelProcessingError("The workbook does not contain a worksheet.")

        sheet = workbook.worksheets[0]
        worksheet = Worksheet(name=sheet.title)

        for row_cells in sheet.iter_rows():
            for cell in row_cells:
                link = self._hyperlink_target(cell)
                if cell.value is None and link is None:
                    continue
                worksheet.set_cell(
                    cell.row, cell.column, cell_text(cell.value), hyperlink=link
                )

        logger.debug(
            "Worksheet loaded",
            sheet=sheet.title,
            rows=worksheet.row_count,
            hyperlinks=len(worksheet.hyperlinks),
        )
        return worksheet

    def _read_xls(self, content: bytes) -> Worksheet:
        try:
            book = xlrd.open_workbook(file_contents=content)
        except (xlrd.XLRDError, CompDocError) as e:
            raise ExcelProcessingError(
                f"The workbook could not be opened: {e}",
                details={"format": SpreadsheetFormat.XLS.value},
            ) from e

        if book.nsheets == 0:
            raise ExcelProcessingError("The workbook does not contain a worksheet.")

        sheet = book.sheet_by_index(0)
        worksheet = Worksheet(name=sheet.name)
        links: dict[tuple[int, int], str] = {
            key: link.url_or_path
            for key, link in sheet.hyperlink_map.items()
            if link.url_or_path
        }

        for rowx in range(sheet.nrows):
            for colx in range(sheet.row_len(rowx)):
                cell = sheet.cell(rowx, colx)
                link = links.get((rowx, colx))
                if cell.ctype in (xlrd.XL_CELL_EMPTY, xlrd.XL_CELL_BLANK) and not link:
                    continue
                worksheet.set_cell(
                    rowx + 1,
                    colx + 1,
                    self._xls_cell_text(cell, book.datemode),
                    hyperlink=link,
                )

        # Links anchored on cells past the end of their row's stored data
        for (rowx, colx), link in links.items():
            row = worksheet.get_row(rowx + 1)
            if row is None or row.cell_at(colx + 1) is None:
                worksheet.set_cell(rowx + 1, colx + 1, "", hyperlink=link)

        return worksheet

    @staticmethod
    def _hyperlink_target(cell: Any) -> str | None:
        hyperlink = getattr(cell, "hyperlink", None)
        if hyperlink is None:
            return None
        return hyperlink.target or None

    @staticmethod
    def _xls_cell_text(cell: Any, datemode: int) -> str:
        if cell.ctype == xlrd.XL_CELL_DATE:
            return xlrd.xldate_as_datetime(cell.value, datemode).isoformat()
        if cell.ctype == xlrd.XL_CELL_BOOLEAN:
            return "TRUE" if cell.value else "FALSE"
        if cell.ctype == xlrd.XL_CELL_ERROR:
            return xlrd.error_text_from_code.get(cell.value, "#ERR")
        return cell_text(cell.value)


class WorkbookWriter:
    """Serialize a Worksheet into a single-sheet xlsx package."""

    def to_bytes(self, worksheet: Worksheet) -> bytes:
        """Build an xlsx file from the worksheet model.

        Every cell is written as text. Hyperlinks become external hyperlink
        relations on their cell.

        Args:
            worksheet: Worksheet to serialize.

        Returns:
            The xlsx file content.
        """
        workbook = Workbook()
        sheet = workbook.active
        sheet.title = worksheet.name[:31]

        for column, width in sorted(worksheet.column_widths.items()):
            sheet.column_dimensions[get_column_letter(column)].width = width

        for row in worksheet.iter_rows():
            for cell in row.cells:
                target = sheet.cell(row=cell.address.row, column=cell.address.column)
                self._assign_text(target, cell.text)
                font = _FONTS.get(cell.style)
                if font is not None:
                    target.font = font
                fill = _FILLS.get(cell.style)
                if fill is not None:
                    target.fill = fill

        for address, url in worksheet.hyperlinks.items():
            sheet.cell(row=address.row, column=address.column).hyperlink = url

        buffer = BytesIO()
        workbook.save(buffer)
        return buffer.getvalue()

    @staticmethod
    def _assign_text(target: Any, text: str) -> None:
        text = ILLEGAL_CHARACTERS_RE.sub("", text)
        target.value = text
        # Keep text such as "=SUM(A1)" as a literal string, not a formula
        if text.startswith("="):
            target.data_type = "s"

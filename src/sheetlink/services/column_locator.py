"""Header/column lookup within the leading rows of a worksheet."""

from dataclasses import dataclass
from itertools import islice

from sheetlink.utils.exceptions import InvalidColumnError
from sheetlink.workbook import Worksheet


@dataclass(frozen=True)
class ColumnLocation:
    """Where a header cell was found."""

    header_row: int
    column: int


def locate_column(
    worksheet: Worksheet, column_name: str, max_search_rows: int
) -> ColumnLocation | None:
    """Find the first cell whose text equals ``column_name``, ignoring case.

    Only the first ``max_search_rows`` stored rows are visited; this counts
    rows encountered, not row-index values, so leading gaps in a sparse
    sheet do not consume the budget. Within a row, cells are compared in
    storage order and the first match wins.
    """
    target = column_name.casefold()
    for row in islice(worksheet.iter_rows(), max_search_rows):
        for cell in row.cells:
            if cell.text.casefold() == target:
                return ColumnLocation(header_row=row.index, column=cell.column)
    return None


def require_column(
    worksheet: Worksheet, column_name: str, max_search_rows: int
) -> ColumnLocation:
    """Like :func:`locate_column` but raises when the header is missing.

    Raises:
        InvalidColumnError: If no matching header is within the search budget.
    """
    location = locate_column(worksheet, column_name, max_search_rows)
    if location is None:
        raise InvalidColumnError(column_name, max_search_rows=max_search_rows)
    return location

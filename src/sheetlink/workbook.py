"""Dataclasses representing a single worksheet and its hyperlinks.

Hyperlinks are stored out-of-band as a mapping from cell address to URL,
mirroring how spreadsheet packages keep hyperlink relations separate from
cell content.
"""

from __future__ import annotations

import re
from collections.abc import Iterator
from dataclasses import dataclass, field
from enum import Enum

_REFERENCE_RE = re.compile(r"^\$?([A-Za-z]+)\$?([0-9]+)$")


def column_letters(index: int) -> str:
    """Convert a 1-based column index to spreadsheet letters (1 -> A, 27 -> AA)."""
    if index < 1:
        raise ValueError(f"Column index must be positive, got {index}")
    letters = ""
    while index > 0:
        index, remainder = divmod(index - 1, 26)
        letters = chr(ord("A") + remainder) + letters
    return letters


def column_index(letters: str) -> int:
    """Convert spreadsheet column letters to a 1-based index (A -> 1, AA -> 27)."""
    if not letters or not letters.isascii() or not letters.isalpha():
        raise ValueError(f"Invalid column letters: {letters!r}")
    index = 0
    for char in letters.upper():
        index = index * 26 + (ord(char) - ord("A") + 1)
    return index


class CellStyle(str, Enum):
    """Visual marker carried alongside a cell; orthogonal to its data."""

    NORMAL = "normal"
    HEADER = "header"
    LINK = "link"
    EXTRACT_HEADER = "extract_header"
    MERGE_HEADER = "merge_header"
    NOTE = "note"


@dataclass(frozen=True, order=True)
class CellAddress:
    """A 1-based (row, column) position within a worksheet."""

    row: int
    column: int

    def __post_init__(self) -> None:
        if self.row < 1 or self.column < 1:
            raise ValueError(
                f"Cell address must be positive, got row={self.row}, "
                f"column={self.column}"
            )

    @classmethod
    def from_reference(cls, reference: str) -> CellAddress:
        """Parse a reference such as ``B7`` (``$B$7`` is also accepted)."""
        match = _REFERENCE_RE.match(reference.strip())
        if match is None:
            raise ValueError(f"Invalid cell reference: {reference!r}")
        letters, digits = match.groups()
        return cls(row=int(digits), column=column_index(letters))

    @property
    def reference(self) -> str:
        return f"{column_letters(self.column)}{self.row}"

    def __str__(self) -> str:
        return self.reference


@dataclass
class Cell:
    """A single cell: its address, text value, and style marker."""

    address: CellAddress
    text: str = ""
    style: CellStyle = CellStyle.NORMAL

    @property
    def column(self) -> int:
        return self.address.column

    @property
    def is_blank(self) -> bool:
        return not self.text.strip()


@dataclass
class Row:
    """A worksheet row; cells are kept in storage order, not sorted."""

    index: int
    cells: list[Cell] = field(default_factory=list)

    def cell_at(self, column: int) -> Cell | None:
        """Return the first stored cell in the given column, if any."""
        for cell in self.cells:
            if cell.column == column:
                return cell
        return None

    @property
    def has_data(self) -> bool:
        return any(not cell.is_blank for cell in self.cells)


@dataclass
class Worksheet:
    """A sparse worksheet: rows keyed by index plus out-of-band hyperlinks.

    Missing row indices are skipped rather than zero-filled, so iteration
    visits only rows that were actually stored.
    """

    name: str = "Sheet1"
    hyperlinks: dict[CellAddress, str] = field(default_factory=dict)
    column_widths: dict[int, float] = field(default_factory=dict)
    _rows: dict[int, Row] = field(default_factory=dict, repr=False)

    def set_cell(
        self,
        row: int,
        column: int,
        text: str,
        style: CellStyle = CellStyle.NORMAL,
        hyperlink: str | None = None,
    ) -> Cell:
        """Store a cell, replacing any existing cell at the same address."""
        address = CellAddress(row=row, column=column)
        target_row = self._rows.get(row)
        if target_row is None:
            target_row = Row(index=row)
            self._rows[row] = target_row

        cell = Cell(address=address, text=text, style=style)
        for position, existing in enumerate(target_row.cells):
            if existing.column == column:
                target_row.cells[position] = cell
                break
        else:
            target_row.cells.append(cell)

        if hyperlink is not None:
            self.hyperlinks[address] = hyperlink
        return cell

    def hyperlink_for(self, address: CellAddress) -> str | None:
        return self.hyperlinks.get(address)

    def get_row(self, index: int) -> Row | None:
        return self._rows.get(index)

    def iter_rows(self) -> Iterator[Row]:
        """Yield stored rows in ascending row-index order."""
        for index in sorted(self._rows):
            yield self._rows[index]

    @property
    def row_count(self) -> int:
        return len(self._rows)


@dataclass(frozen=True)
class LinkRecord:
    """One (row, title, url) triple produced by extraction or merge."""

    row: int
    title: str
    url: str

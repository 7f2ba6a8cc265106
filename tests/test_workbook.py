"""Tests for the in-memory worksheet model."""

import pytest

from sheetlink.workbook import (
    Cell,
    CellAddress,
    CellStyle,
    Row,
    Worksheet,
    column_index,
    column_letters,
)


class TestColumnLetters:
    """Tests for column index/letter conversion."""

    @pytest.mark.parametrize(
        ("index", "letters"),
        [(1, "A"), (2, "B"), (26, "Z"), (27, "AA"), (52, "AZ"), (53, "BA"),
         (702, "ZZ"), (703, "AAA"), (16384, "XFD")],
    )
    def test_known_values(self, index: int, letters: str) -> None:
        assert column_letters(index) == letters
        assert column_index(letters) == index

    def test_lowercase_letters_accepted(self) -> None:
        assert column_index("ab") == 28

    def test_round_trip_first_thousand(self) -> None:
        for index in range(1, 1001):
            assert column_index(column_letters(index)) == index

    @pytest.mark.parametrize("bad", [0, -1])
    def test_non_positive_index_rejected(self, bad: int) -> None:
        with pytest.raises(ValueError):
            column_letters(bad)

    @pytest.mark.parametrize("bad", ["", "A1", "Ä", "-"])
    def test_invalid_letters_rejected(self, bad: str) -> None:
        with pytest.raises(ValueError):
            column_index(bad)


class TestCellAddress:
    """Tests for CellAddress."""

    def test_reference(self) -> None:
        assert CellAddress(row=7, column=2).reference == "B7"
        assert str(CellAddress(row=1, column=27)) == "AA1"

    def test_from_reference(self) -> None:
        assert CellAddress.from_reference("B7") == CellAddress(row=7, column=2)
        assert CellAddress.from_reference("$C$10") == CellAddress(row=10, column=3)

    def test_reference_round_trip(self) -> None:
        for reference in ("A1", "Z99", "AA27", "XFD1048576"):
            assert CellAddress.from_reference(reference).reference == reference

    @pytest.mark.parametrize("bad", ["", "7B", "B", "12", "B-1"])
    def test_invalid_reference(self, bad: str) -> None:
        with pytest.raises(ValueError):
            CellAddress.from_reference(bad)

    def test_rejects_zero_row(self) -> None:
        with pytest.raises(ValueError):
            CellAddress(row=0, column=1)

    def test_hashable_and_ordered(self) -> None:
        first = CellAddress(row=1, column=2)
        second = CellAddress(row=2, column=1)
        assert {first: "x"}[CellAddress(row=1, column=2)] == "x"
        assert first < second


class TestRow:
    """Tests for Row helpers."""

    def test_cell_at_returns_first_in_storage_order(self) -> None:
        row = Row(
            index=1,
            cells=[
                Cell(CellAddress(1, 2), "b"),
                Cell(CellAddress(1, 1), "a"),
            ],
        )
        assert row.cell_at(1).text == "a"
        assert row.cell_at(3) is None

    def test_has_data_ignores_whitespace(self) -> None:
        row = Row(index=1, cells=[Cell(CellAddress(1, 1), "   ")])
        assert not row.has_data
        row.cells.append(Cell(CellAddress(1, 2), "x"))
        assert row.has_data


class TestWorksheet:
    """Tests for Worksheet storage."""

    def test_set_cell_replaces_same_column(self) -> None:
        sheet = Worksheet()
        sheet.set_cell(1, 1, "old")
        sheet.set_cell(1, 1, "new", style=CellStyle.HEADER)

        row = sheet.get_row(1)
        assert row is not None
        assert len(row.cells) == 1
        assert row.cells[0].text == "new"
        assert row.cells[0].style is CellStyle.HEADER

    def test_hyperlinks_are_out_of_band(self) -> None:
        sheet = Worksheet()
        sheet.set_cell(2, 1, "Google", hyperlink="https://google.com")

        assert sheet.hyperlink_for(CellAddress(2, 1)) == "https://google.com"
        assert sheet.hyperlink_for(CellAddress(2, 2)) is None

    def test_sparse_rows_iterate_in_order(self) -> None:
        sheet = Worksheet()
        sheet.set_cell(10, 1, "c")
        sheet.set_cell(2, 1, "a")
        sheet.set_cell(5, 1, "b")

        assert [row.index for row in sheet.iter_rows()] == [2, 5, 10]
        assert sheet.row_count == 3
        assert sheet.get_row(3) is None

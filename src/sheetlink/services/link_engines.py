"""Link extraction and merge transforms over the worksheet model.

Every function here is pure: it reads a source :class:`Worksheet` and
returns a freshly built output worksheet plus the link records that were
produced. Serialization and error reporting live in the service layer.
"""

from dataclasses import dataclass, field

from sheetlink.models import ExtractionLayout
from sheetlink.services.column_locator import ColumnLocation
from sheetlink.services.url_sanitizer import DEFAULT_MAX_URL_LENGTH, sanitize_url
from sheetlink.utils.exceptions import InvalidColumnError, InvalidUrlError
from sheetlink.utils.logging import get_logger
from sheetlink.workbook import CellStyle, LinkRecord, Row, Worksheet

logger = get_logger(__name__)

EXTRACT_SHEET_NAME = "Extracted Links"
MERGE_SHEET_NAME = "Merged Links"
TEMPLATE_SHEET_NAME = "Data"

TITLE_HEADER = "Title"
URL_HEADER = "URL"

FULL_ROW_WIDTHS = {1: 30.0, 2: 50.0}
SUMMARY_WIDTHS = {1: 10.0, 2: 40.0, 3: 60.0}
MERGE_WIDTHS = {1: 40.0, 2: 60.0}
TEMPLATE_WIDTHS = {1: 30.0, 2: 50.0}

MERGE_HEADER_ROW = 1


@dataclass
class ExtractionOutcome:
    """Output of a link extraction transform."""

    worksheet: Worksheet
    total_rows: int
    links: list[LinkRecord] = field(default_factory=list)


@dataclass(frozen=True)
class SkippedRow:
    """A merge source row whose URL was rejected."""

    row: int
    title: str
    url: str
    reason: str


@dataclass
class MergeOutcome:
    """Output of a link merge transform."""

    worksheet: Worksheet
    total_rows: int
    links: list[LinkRecord] = field(default_factory=list)
    skipped_rows: list[SkippedRow] = field(default_factory=list)


def extract_links(
    source: Worksheet,
    location: ColumnLocation,
    layout: ExtractionLayout = ExtractionLayout.FULL_ROW,
    column_name: str = TITLE_HEADER,
) -> ExtractionOutcome:
    """Collect hyperlinks from the located column and build the output sheet.

    Args:
        source: Worksheet read from the upload.
        location: Header row and target column found by the locator.
        layout: ``FULL_ROW`` copies every non-blank data row, ``SUMMARY``
            writes one ``Row | <column> | URL`` line per link.
        column_name: Header text used for the summary layout.

    Raises:
        InvalidColumnError: If the header row is no longer present.
    """
    header = source.get_row(location.header_row)
    if header is None:
        raise InvalidColumnError(column_name)

    if layout is ExtractionLayout.SUMMARY:
        return _extract_summary(source, location, column_name)
    return _extract_full_rows(source, header, location)


def _extract_full_rows(
    source: Worksheet, header: Row, location: ColumnLocation
) -> ExtractionOutcome:
    output = Worksheet(name=EXTRACT_SHEET_NAME, column_widths=dict(FULL_ROW_WIDTHS))
    for cell in header.cells:
        output.set_cell(1, cell.column, cell.text, style=CellStyle.HEADER)

    links: list[LinkRecord] = []
    next_row = 2
    for row in source.iter_rows():
        if row.index <= location.header_row:
            continue

        if not row.has_data:
            # Blank rows are not copied; a link in one keeps its source row
            target = row.cell_at(location.column)
            url = source.hyperlink_for(target.address) if target else None
            if url:
                links.append(LinkRecord(row=row.index, title=target.text, url=url))
            continue

        for cell in row.cells:
            url = source.hyperlink_for(cell.address)
            style = CellStyle.LINK if url else CellStyle.NORMAL
            output.set_cell(next_row, cell.column, cell.text, style=style, hyperlink=url)
            if url and cell.column == location.column:
                links.append(LinkRecord(row=next_row, title=cell.text, url=url))

        next_row += 1

    return ExtractionOutcome(worksheet=output, total_rows=next_row - 2, links=links)


def _extract_summary(
    source: Worksheet, location: ColumnLocation, column_name: str
) -> ExtractionOutcome:
    output = Worksheet(name=EXTRACT_SHEET_NAME, column_widths=dict(SUMMARY_WIDTHS))
    for column, text in enumerate(("Row", column_name, URL_HEADER), start=1):
        output.set_cell(1, column, text, style=CellStyle.HEADER)

    links: list[LinkRecord] = []
    next_row = 2
    for row in source.iter_rows():
        if row.index <= location.header_row:
            continue
        cell = row.cell_at(location.column)
        if cell is None:
            continue
        url = source.hyperlink_for(cell.address)
        if not url:
            continue

        links.append(LinkRecord(row=row.index, title=cell.text, url=url))
        output.set_cell(next_row, 1, str(row.index))
        output.set_cell(next_row, 2, cell.text)
        output.set_cell(next_row, 3, url, style=CellStyle.LINK, hyperlink=url)
        next_row += 1

    return ExtractionOutcome(worksheet=output, total_rows=next_row - 2, links=links)


def merge_links(
    source: Worksheet,
    title_column: int,
    url_column: int,
    max_url_length: int = DEFAULT_MAX_URL_LENGTH,
) -> MergeOutcome:
    """Turn separate title and URL columns into hyperlinked cell pairs.

    The header is taken to be row 1; every later row with a title or a URL
    is considered. Rows whose URL fails sanitization are skipped and
    reported in ``skipped_rows`` while the remaining rows are still merged.

    Args:
        source: Worksheet read from the upload.
        title_column: Column index of the title values.
        url_column: Column index of the URL values.
        max_url_length: Maximum accepted URL length.
    """
    output = Worksheet(name=MERGE_SHEET_NAME, column_widths=dict(MERGE_WIDTHS))
    output.set_cell(1, 1, TITLE_HEADER, style=CellStyle.MERGE_HEADER)
    output.set_cell(1, 2, URL_HEADER, style=CellStyle.MERGE_HEADER)

    links: list[LinkRecord] = []
    skipped: list[SkippedRow] = []
    next_row = 2
    for row in source.iter_rows():
        if row.index <= MERGE_HEADER_ROW:
            continue

        title_cell = row.cell_at(title_column)
        url_cell = row.cell_at(url_column)
        title = title_cell.text.strip() if title_cell else ""
        url = url_cell.text.strip() if url_cell else ""
        if not title and not url:
            continue

        try:
            sanitized = sanitize_url(url, max_length=max_url_length)
        except InvalidUrlError as e:
            logger.warning("Skipping row with invalid URL", row=row.index, reason=e.reason)
            skipped.append(SkippedRow(row=row.index, title=title, url=url, reason=e.reason))
            continue

        output.set_cell(next_row, 1, title)
        output.set_cell(next_row, 2, sanitized, style=CellStyle.LINK, hyperlink=sanitized)
        links.append(LinkRecord(row=next_row, title=title, url=sanitized))
        next_row += 1

    return MergeOutcome(
        worksheet=output,
        total_rows=next_row - 2,
        links=links,
        skipped_rows=skipped,
    )


def worksheet_from_lists(titles: list[str], urls: list[str]) -> Worksheet:
    """Build a merge source sheet with Title/URL headers from parallel lists."""
    if len(titles) != len(urls):
        raise ValueError("Title and URL counts must match.")

    source = Worksheet(name=TEMPLATE_SHEET_NAME)
    source.set_cell(1, 1, TITLE_HEADER)
    source.set_cell(1, 2, URL_HEADER)
    for offset, (title, url) in enumerate(zip(titles, urls, strict=True)):
        source.set_cell(offset + 2, 1, title)
        source.set_cell(offset + 2, 2, url)
    return source


def build_extract_template() -> Worksheet:
    """Sample workbook showing hyperlinks placed on the Title column."""
    sheet = Worksheet(name=TEMPLATE_SHEET_NAME, column_widths=dict(TEMPLATE_WIDTHS))
    sheet.set_cell(1, 1, TITLE_HEADER, style=CellStyle.EXTRACT_HEADER)
    sheet.set_cell(1, 2, URL_HEADER, style=CellStyle.EXTRACT_HEADER)
    sheet.set_cell(
        2, 1, "Example Link 1", style=CellStyle.LINK, hyperlink="https://www.example.com"
    )
    sheet.set_cell(
        3, 1, "Example Link 2", style=CellStyle.LINK, hyperlink="https://www.google.com"
    )
    sheet.set_cell(
        5,
        1,
        "Add hyperlinks to Title column. URLs will be extracted automatically.",
        style=CellStyle.NOTE,
    )
    return sheet


MERGE_TEMPLATE_SAMPLES = (
    ("Google", "https://www.google.com"),
    ("GitHub", "https://github.com"),
    ("Stack Overflow", "https://stackoverflow.com"),
)


def build_merge_template() -> Worksheet:
    """Sample workbook with Title and URL text columns ready for merging."""
    sheet = Worksheet(name=TEMPLATE_SHEET_NAME, column_widths=dict(TEMPLATE_WIDTHS))
    sheet.set_cell(1, 1, TITLE_HEADER, style=CellStyle.MERGE_HEADER)
    sheet.set_cell(1, 2, URL_HEADER, style=CellStyle.MERGE_HEADER)

    row = 2
    for title, url in MERGE_TEMPLATE_SAMPLES:
        sheet.set_cell(row, 1, title)
        sheet.set_cell(row, 2, url)
        row += 1

    sheet.set_cell(
        row + 1,
        1,
        "Add your Title and URL values. URLs will be converted to hyperlinks.",
        style=CellStyle.NOTE,
    )
    return sheet

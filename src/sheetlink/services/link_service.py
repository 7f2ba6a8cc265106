"""Operation boundary for link extraction and merge.

:class:`LinkExtractorService` wires validation, workbook I/O, header
location and the link transforms together. Its operations never raise:
every failure is converted into an :class:`ErrorInfo` carrying a stable
error code, stored on the returned result.

Example:
    service = LinkExtractorService()
    result = service.extract(content, column_name="Title")
    if result.success:
        write(result.output)
    else:
        print(result.error_message)
"""

from dataclasses import dataclass, field
from typing import Any

from sheetlink.config import settings
from sheetlink.models import ExtractionLayout
from sheetlink.services.column_locator import require_column
from sheetlink.services.file_validator import FileValidator
from sheetlink.services.link_engines import (
    TITLE_HEADER,
    URL_HEADER,
    SkippedRow,
    build_extract_template,
    build_merge_template,
    extract_links,
    merge_links,
    worksheet_from_lists,
)
from sheetlink.services.metrics import InMemoryMetricsService, MetricsService
from sheetlink.services.template_cache import TemplateCache
from sheetlink.services.workbook_io import WorkbookReader, WorkbookWriter
from sheetlink.utils.exceptions import (
    ErrorCode,
    ExcelProcessingError,
    InvalidUrlError,
    SheetLinkError,
)
from sheetlink.utils.logging import LogContext, get_logger, timed_operation
from sheetlink.workbook import LinkRecord, Worksheet

logger = get_logger(__name__)

LINK_PREVIEW_LIMIT = 10

EXTRACT_TEMPLATE_KEY = "template:extract"
MERGE_TEMPLATE_KEY = "template:merge"


@dataclass
class ProcessingOptions:
    """Limits applied by the service, defaulting to the loaded settings."""

    max_file_size_bytes: int = field(
        default_factory=lambda: settings.max_file_size_bytes
    )
    max_header_search_rows: int = field(
        default_factory=lambda: settings.max_header_search_rows
    )
    max_url_length: int = field(default_factory=lambda: settings.max_url_length)
    template_cache_ttl_seconds: int = field(
        default_factory=lambda: settings.template_cache_ttl_seconds
    )


@dataclass(frozen=True)
class ErrorInfo:
    """A coded failure stored on a processing result."""

    code: ErrorCode
    message: str
    http_status: int = 500
    details: dict[str, Any] = field(default_factory=dict)

    @property
    def formatted(self) -> str:
        return f"{self.code.value}: {self.message}"

    @classmethod
    def from_exception(cls, error: Exception) -> "ErrorInfo":
        """Classify an exception raised inside an operation.

        Args:
            error: The exception that ended the operation.

        Returns:
            ErrorInfo with the matching code and HTTP status.
        """
        if isinstance(error, SheetLinkError):
            return cls(
                code=error.error_code,
                message=error.full_message,
                http_status=error.get_http_status(),
                details=dict(error.details),
            )
        if isinstance(error, MemoryError):
            return cls(
                code=ErrorCode.OUT_OF_MEMORY,
                message=(
                    "Not enough memory to process the file. "
                    "Tip: Try splitting your data into smaller files."
                ),
                http_status=413,
            )
        # PermissionError is an OSError, so it must be checked first
        if isinstance(error, PermissionError):
            return cls(
                code=ErrorCode.PERMISSION_DENIED,
                message="Permission denied while reading the file.",
                http_status=500,
            )
        if isinstance(error, OSError):
            return cls(
                code=ErrorCode.FILE_READ_ERROR,
                message=(
                    "The file could not be read. It may be locked or corrupted."
                ),
                http_status=500,
            )
        return cls(
            code=ErrorCode.UNEXPECTED_ERROR,
            message="An unexpected error occurred while processing the file.",
            http_status=500,
            details={"error_type": type(error).__name__},
        )


@dataclass
class ExtractionResult:
    """Outcome of :meth:`LinkExtractorService.extract`."""

    total_rows: int = 0
    links_found: int = 0
    links: list[LinkRecord] = field(default_factory=list)
    output: bytes | None = None
    error: ErrorInfo | None = None

    @property
    def success(self) -> bool:
        return self.error is None

    @property
    def error_message(self) -> str | None:
        return self.error.formatted if self.error else None

    @property
    def preview_links(self) -> list[LinkRecord]:
        return self.links[:LINK_PREVIEW_LIMIT]


@dataclass
class MergeResult:
    """Outcome of the merge operations.

    A merge in which some rows had an invalid URL still carries ``output``
    for the remaining rows, together with an ``INVALID_URL`` error and the
    list of skipped rows.
    """

    total_rows: int = 0
    links_created: int = 0
    links: list[LinkRecord] = field(default_factory=list)
    output: bytes | None = None
    error: ErrorInfo | None = None
    skipped_rows: list[SkippedRow] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return self.error is None

    @property
    def error_message(self) -> str | None:
        return self.error.formatted if self.error else None

    @property
    def preview_links(self) -> list[LinkRecord]:
        return self.links[:LINK_PREVIEW_LIMIT]


class LinkExtractorService:
    """Extract hyperlinks from, and merge hyperlinks into, spreadsheets."""

    def __init__(
        self,
        options: ProcessingOptions | None = None,
        cache: TemplateCache[bytes] | None = None,
        metrics: MetricsService | None = None,
    ) -> None:
        """Initialize the service.

        Args:
            options: Processing limits. Uses settings-derived defaults if None.
            cache: Template cache. A private one is created if None.
            metrics: Metrics collector. A private one is created if None.
        """
        self.options = options if options is not None else ProcessingOptions()
        self.cache: TemplateCache[bytes] = (
            cache
            if cache is not None
            else TemplateCache(ttl_seconds=self.options.template_cache_ttl_seconds)
        )
        self.metrics: MetricsService = (
            metrics if metrics is not None else InMemoryMetricsService()
        )
        self.validator = FileValidator(self.options.max_file_size_bytes)
        self.reader = WorkbookReader()
        self.writer = WorkbookWriter()

    def extract(
        self,
        content: bytes,
        column_name: str = TITLE_HEADER,
        layout: ExtractionLayout = ExtractionLayout.FULL_ROW,
        filename: str = "upload",
    ) -> ExtractionResult:
        """Extract hyperlinks found under ``column_name``.

        Args:
            content: Uploaded workbook bytes.
            column_name: Header text of the column holding hyperlinks.
            layout: Output layout.
            filename: Upload name, used for logging.

        Returns:
            ExtractionResult with output bytes, or an error and no output.
        """
        result = ExtractionResult()
        with LogContext(operation="extract"), timed_operation(
            logger, "extract"
        ) as perf:
            perf.bytes_processed = len(content)
            try:
                file_format = self.validator.validate(content, filename)
                worksheet = self.reader.read(content, file_format)
                location = require_column(
                    worksheet, column_name, self.options.max_header_search_rows
                )
                logger.debug(
                    "Column located",
                    column_name=column_name,
                    header_row=location.header_row,
                    column=location.column,
                )
                outcome = extract_links(worksheet, location, layout, column_name)
                result.output = self.writer.to_bytes(outcome.worksheet)
                result.total_rows = outcome.total_rows
                result.links = outcome.links
                result.links_found = len(outcome.links)
            except Exception as e:
                result = ExtractionResult(error=self._handle_error(e, "extract"))

            perf.rows_processed = result.total_rows
            perf.links = result.links_found

        self._finish(
            "extract",
            len(content),
            result.total_rows,
            result.links_found,
            result.error,
            perf.duration_seconds,
        )
        return result

    def merge_from_file(self, content: bytes, filename: str = "upload") -> MergeResult:
        """Build hyperlinks from the "Title" and "URL" columns of a workbook.

        Args:
            content: Uploaded workbook bytes.
            filename: Upload name, used for logging.

        Returns:
            MergeResult. Rows with an invalid URL are skipped and flag the
            result with an ``INVALID_URL`` error while output is still set.
        """
        result = MergeResult()
        with LogContext(operation="merge"), timed_operation(logger, "merge") as perf:
            perf.bytes_processed = len(content)
            try:
                file_format = self.validator.validate(content, filename)
                worksheet = self.reader.read(content, file_format)
                budget = self.options.max_header_search_rows
                title_location = require_column(worksheet, TITLE_HEADER, budget)
                url_location = require_column(worksheet, URL_HEADER, budget)
                result = self._merge(
                    worksheet, title_location.column, url_location.column
                )
            except Exception as e:
                result = MergeResult(error=self._handle_error(e, "merge"))

            perf.rows_processed = result.total_rows
            perf.links = result.links_created

        self._finish(
            "merge",
            len(content),
            result.total_rows,
            result.links_created,
            result.error,
            perf.duration_seconds,
        )
        return result

    def merge_from_lists(self, titles: list[str], urls: list[str]) -> MergeResult:
        """Merge parallel title and URL lists into a hyperlinked workbook.

        Args:
            titles: Link titles.
            urls: Link targets, one per title.

        Returns:
            MergeResult, with the same sticky URL error behavior as
            :meth:`merge_from_file`.
        """
        result = MergeResult()
        with LogContext(operation="merge_lists"), timed_operation(
            logger, "merge_lists"
        ) as perf:
            try:
                if len(titles) != len(urls):
                    raise ExcelProcessingError(
                        "Titles and URLs must have the same number of items.",
                        details={"titles": len(titles), "urls": len(urls)},
                    )
                worksheet = worksheet_from_lists(titles, urls)
                result = self._merge(worksheet, 1, 2)
            except Exception as e:
                result = MergeResult(error=self._handle_error(e, "merge_lists"))

            perf.rows_processed = result.total_rows
            perf.links = result.links_created

        self._finish(
            "merge_lists",
            0,
            result.total_rows,
            result.links_created,
            result.error,
            perf.duration_seconds,
        )
        return result

    def create_template(self) -> bytes:
        """Return the cached sample workbook for extraction."""
        return self.cache.get_or_create(
            EXTRACT_TEMPLATE_KEY,
            lambda: self.writer.to_bytes(build_extract_template()),
        )

    def create_merge_template(self) -> bytes:
        """Return the cached sample workbook for merging."""
        return self.cache.get_or_create(
            MERGE_TEMPLATE_KEY,
            lambda: self.writer.to_bytes(build_merge_template()),
        )

    # ------------------------------------------------------------------ #
    # Internal helpers
    # ------------------------------------------------------------------ #

    def _merge(
        self, worksheet: Worksheet, title_column: int, url_column: int
    ) -> MergeResult:
        outcome = merge_links(
            worksheet,
            title_column=title_column,
            url_column=url_column,
            max_url_length=self.options.max_url_length,
        )
        result = MergeResult(
            total_rows=outcome.total_rows,
            links_created=len(outcome.links),
            links=outcome.links,
            output=self.writer.to_bytes(outcome.worksheet),
            skipped_rows=outcome.skipped_rows,
        )
        if outcome.skipped_rows:
            first = outcome.skipped_rows[0]
            sticky = InvalidUrlError(first.url, first.reason)
            result.error = ErrorInfo(
                code=sticky.error_code,
                message=sticky.message,
                http_status=sticky.get_http_status(),
                details={"skipped_rows": len(outcome.skipped_rows)},
            )
        return result

    def _handle_error(self, error: Exception, operation: str) -> ErrorInfo:
        info = ErrorInfo.from_exception(error)
        if info.code is ErrorCode.UNEXPECTED_ERROR:
            logger.exception(
                "Unexpected error during processing",
                operation=operation,
                error_type=type(error).__name__,
            )
        else:
            logger.warning(
                "Processing failed",
                operation=operation,
                error_code=info.code.value,
                error=info.message,
            )
        return info

    def _finish(
        self,
        operation: str,
        file_size: int,
        total_rows: int,
        links: int,
        error: ErrorInfo | None,
        duration_seconds: float,
    ) -> None:
        self.metrics.record_file_processed(file_size, total_rows, duration_seconds)
        if error is not None:
            self.metrics.record_error(error.code.value)
        logger.log_processing_result(
            operation,
            success=error is None,
            total_rows=total_rows,
            links=links,
            error_code=error.code.value if error else None,
        )

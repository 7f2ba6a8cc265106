"""FastAPI application for sheetlink."""

import base64
import shutil
import tempfile
import uuid
from datetime import UTC, datetime
from typing import Annotated, Any

from fastapi import (
    FastAPI,
    File,
    Form,
    HTTPException,
    Request,
    Response,
    UploadFile,
    status,
)
from fastapi.concurrency import run_in_threadpool
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from sheetlink.config import Settings, settings, validate_settings_on_startup
from sheetlink.models import (
    ErrorDetail,
    ExtractionLayout,
    ExtractionResponse,
    HealthResponse,
    LinkInfo,
    MergeListsRequest,
    MergeResponse,
    MetricsResponse,
)
from sheetlink.services.link_service import (
    ErrorInfo,
    LinkExtractorService,
    MergeResult,
    ProcessingOptions,
)
from sheetlink.services.metrics import InMemoryMetricsService
from sheetlink.services.template_cache import TemplateCache
from sheetlink.utils.exceptions import ErrorCode, SheetLinkError
from sheetlink.utils.logging import (
    clear_context,
    configure_logging,
    get_logger,
    get_request_id,
    set_request_id,
)
from sheetlink.workbook import LinkRecord

# Configure structured logging using settings
configure_logging(
    level=settings.log_level_int,
    use_structured_formatter=True,
)
logger = get_logger(__name__)

VERSION = "0.1.0"
XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
EXTRACT_TEMPLATE_FILENAME = "link_extract_template.xlsx"
MERGE_TEMPLATE_FILENAME = "link_merge_template.xlsx"


def _link_infos(links: list[LinkRecord]) -> list[LinkInfo]:
    return [LinkInfo(row=link.row, title=link.title, url=link.url) for link in links]


def _encode(output: bytes | None) -> str:
    return base64.b64encode(output or b"").decode("ascii")


def _free_disk_bytes() -> int | None:
    try:
        return shutil.disk_usage(tempfile.gettempdir()).free
    except OSError as e:
        logger.warning("Disk usage unavailable", error=str(e))
        return None


def _error_response(request: Request, error: ErrorInfo) -> JSONResponse:
    """Render a coded processing error as a JSON response."""
    request_id = getattr(request.state, "request_id", get_request_id())
    return JSONResponse(
        status_code=error.http_status,
        content=ErrorDetail.from_error_code(
            error.code,
            detail=error.message,
            details=error.details or None,
            request_id=request_id,
        ).model_dump(exclude_none=True),
    )


def _merge_payload(result: MergeResult) -> dict[str, Any]:
    return {
        "total_rows": result.total_rows,
        "links_created": result.links_created,
        "links": _link_infos(result.preview_links),
        "output_file_base64": _encode(result.output),
        "error_message": result.error_message,
        "skipped_rows": [
            {"row": skipped.row, "url": skipped.url, "reason": skipped.reason}
            for skipped in result.skipped_rows
        ],
    }


def create_app(app_settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        app_settings: Settings to use. Defaults to the environment-loaded
            settings.
    """
    config = app_settings or settings

    app = FastAPI(
        title="SheetLink API",
        description=(
            "Extract embedded hyperlinks from spreadsheet columns, or merge "
            "separate Title and URL columns into hyperlinked cells."
        ),
        version=VERSION,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
    )

    # Configure CORS using settings
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Validate settings on startup
    validate_settings_on_startup(config)

    options = ProcessingOptions(
        max_file_size_bytes=config.max_file_size_bytes,
        max_header_search_rows=config.max_header_search_rows,
        max_url_length=config.max_url_length,
        template_cache_ttl_seconds=config.template_cache_ttl_seconds,
    )
    app.state.metrics = InMemoryMetricsService()
    app.state.template_cache = TemplateCache[bytes](
        ttl_seconds=options.template_cache_ttl_seconds
    )
    app.state.link_service = LinkExtractorService(
        options=options,
        cache=app.state.template_cache,
        metrics=app.state.metrics,
    )

    @app.middleware("http")
    async def request_id_middleware(request: Request, call_next: Any) -> Any:
        """Assign a request ID, expose it in logs and the response headers."""
        request_id = request.headers.get("X-Request-ID", str(uuid.uuid4()))
        set_request_id(request_id)
        request.state.request_id = request_id

        try:
            response = await call_next(request)
            response.headers["X-Request-ID"] = request_id
            return response
        finally:
            clear_context()

    @app.exception_handler(SheetLinkError)
    async def sheetlink_exception_handler(
        request: Request, exc: SheetLinkError
    ) -> JSONResponse:
        """Return structured error responses for sheetlink exceptions."""
        request_id = getattr(request.state, "request_id", get_request_id())
        logger.error(
            f"SheetLink Error: {exc.message}",
            error_code=exc.error_code.value,
            http_status=exc.http_status,
        )
        return JSONResponse(
            status_code=exc.http_status,
            content=ErrorDetail(
                detail=exc.full_message,
                error_code=exc.error_code.value,
                details=exc.details if exc.details else None,
                request_id=request_id,
            ).model_dump(exclude_none=True),
        )

    @app.exception_handler(HTTPException)
    async def http_exception_handler(
        request: Request, exc: HTTPException
    ) -> JSONResponse:
        """Custom exception handler for HTTP exceptions."""
        request_id = getattr(request.state, "request_id", get_request_id())
        logger.warning(
            f"HTTP Error: {exc.detail}",
            status_code=exc.status_code,
        )
        return JSONResponse(
            status_code=exc.status_code,
            content=ErrorDetail(
                detail=str(exc.detail),
                request_id=request_id,
            ).model_dump(exclude_none=True),
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(
        request: Request, exc: Exception
    ) -> JSONResponse:
        """Catch-all exception handler for unexpected errors.

        Logs the full exception and returns a generic error response
        to avoid leaking internal details.
        """
        request_id = getattr(request.state, "request_id", get_request_id())
        logger.exception(
            f"Unexpected error: {type(exc).__name__}",
            error_type=type(exc).__name__,
        )
        if config.debug:
            detail = f"Internal server error: {type(exc).__name__}: {exc}"
        else:
            detail = "Internal server error. Please try again later."

        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=ErrorDetail(
                detail=detail,
                error_code=ErrorCode.UNEXPECTED_ERROR.value,
                request_id=request_id,
            ).model_dump(exclude_none=True),
        )

    @app.get("/health", response_model=HealthResponse, tags=["Health"])
    async def health_check() -> dict[str, Any]:
        """Check the health status of the service."""
        logger.debug("Health check requested")
        return {
            "status": "healthy",
            "timestamp": datetime.now(UTC).isoformat(),
            "version": VERSION,
            "free_disk_bytes": _free_disk_bytes(),
        }

    @app.get("/metrics", response_model=MetricsResponse, tags=["Health"])
    async def get_metrics(request: Request) -> dict[str, Any]:
        """Return a snapshot of the processing counters."""
        return request.app.state.metrics.get_snapshot().to_dict()

    @app.post(
        "/api/file/extract",
        response_model=ExtractionResponse,
        tags=["Links"],
        responses={
            400: {"model": ErrorDetail, "description": "Invalid file or column"},
            413: {"model": ErrorDetail, "description": "File too large"},
            422: {"model": ErrorDetail, "description": "Unreadable workbook"},
        },
    )
    async def extract_file_links(
        request: Request,
        file: Annotated[UploadFile, File(description="Spreadsheet to read")],
        column_name: Annotated[
            str, Form(description="Header of the column holding hyperlinks")
        ] = "Title",
        layout: Annotated[
            ExtractionLayout, Form(description="Output workbook layout")
        ] = ExtractionLayout.FULL_ROW,
    ) -> Any:
        """Extract the hyperlinks attached to cells of a column.

        Args:
            request: FastAPI request object.
            file: Uploaded .xlsx or .xls workbook.
            column_name: Header text of the column to scan.
            layout: ``full_row`` or ``summary``.

        Returns:
            ExtractionResponse with a preview of the links and the output
            workbook, or a coded error response.
        """
        if not column_name.strip():
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="column_name must not be empty",
            )

        content = await file.read()
        logger.info(
            "Extract requested",
            filename=file.filename,
            file_size=len(content),
            column_name=column_name,
            layout=layout.value,
        )

        service: LinkExtractorService = request.app.state.link_service
        result = await run_in_threadpool(
            service.extract, content, column_name, layout, file.filename or "upload"
        )
        if result.error is not None:
            return _error_response(request, result.error)

        return {
            "total_rows": result.total_rows,
            "links_found": result.links_found,
            "links": _link_infos(result.preview_links),
            "output_file_base64": _encode(result.output),
        }

    @app.post(
        "/api/file/merge",
        response_model=MergeResponse,
        tags=["Links"],
        responses={
            400: {"model": ErrorDetail, "description": "Invalid file or column"},
            413: {"model": ErrorDetail, "description": "File too large"},
            422: {"model": ErrorDetail, "description": "Unreadable workbook"},
        },
    )
    async def merge_file_links(
        request: Request,
        file: Annotated[
            UploadFile, File(description="Spreadsheet with Title and URL columns")
        ],
    ) -> Any:
        """Merge the Title and URL columns of a workbook into hyperlinks.

        Rows with an invalid URL are skipped; the response then carries
        ``error_message`` and ``skipped_rows`` next to the output workbook.
        """
        content = await file.read()
        logger.info("Merge requested", filename=file.filename, file_size=len(content))

        service: LinkExtractorService = request.app.state.link_service
        result = await run_in_threadpool(
            service.merge_from_file, content, file.filename or "upload"
        )
        if result.output is None and result.error is not None:
            return _error_response(request, result.error)
        return _merge_payload(result)

    @app.post(
        "/api/file/merge-lists",
        response_model=MergeResponse,
        tags=["Links"],
        responses={
            400: {"model": ErrorDetail, "description": "Mismatched list lengths"},
        },
    )
    async def merge_list_links(request: Request, body: MergeListsRequest) -> Any:
        """Merge parallel title and URL lists into a hyperlinked workbook."""
        if len(body.titles) != len(body.urls):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=(
                    f"Titles ({len(body.titles)}) and URLs ({len(body.urls)}) "
                    "must have the same number of items."
                ),
            )

        service: LinkExtractorService = request.app.state.link_service
        result = await run_in_threadpool(
            service.merge_from_lists, body.titles, body.urls
        )
        if result.output is None and result.error is not None:
            return _error_response(request, result.error)
        return _merge_payload(result)

    @app.get("/api/file/template", tags=["Templates"])
    async def download_extract_template(request: Request) -> Response:
        """Download a sample workbook for link extraction."""
        service: LinkExtractorService = request.app.state.link_service
        content = await run_in_threadpool(service.create_template)
        return Response(
            content=content,
            media_type=XLSX_MEDIA_TYPE,
            headers={
                "Content-Disposition": (
                    f'attachment; filename="{EXTRACT_TEMPLATE_FILENAME}"'
                )
            },
        )

    @app.get("/api/file/merge-template", tags=["Templates"])
    async def download_merge_template(request: Request) -> Response:
        """Download a sample workbook for link merging."""
        service: LinkExtractorService = request.app.state.link_service
        content = await run_in_threadpool(service.create_merge_template)
        return Response(
            content=content,
            media_type=XLSX_MEDIA_TYPE,
            headers={
                "Content-Disposition": (
                    f'attachment; filename="{MERGE_TEMPLATE_FILENAME}"'
                )
            },
        )

    logger.info("FastAPI application created successfully")
    return app


# Create the application instance
app = create_app()

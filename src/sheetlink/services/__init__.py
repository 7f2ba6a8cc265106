"""Services for sheetlink."""

from sheetlink.services.file_validator import FileValidator
from sheetlink.services.link_service import (
    ErrorInfo,
    ExtractionResult,
    LinkExtractorService,
    MergeResult,
    ProcessingOptions,
)
from sheetlink.services.metrics import InMemoryMetricsService, MetricsSnapshot
from sheetlink.services.template_cache import TemplateCache

__all__ = [
    "ErrorInfo",
    "ExtractionResult",
    "FileValidator",
    "InMemoryMetricsService",
    "LinkExtractorService",
    "MergeResult",
    "MetricsSnapshot",
    "ProcessingOptions",
    "TemplateCache",
]

"""Process-wide processing counters.

The collector is an injected collaborator: the API creates one per
application and hands it to the service, and tests construct their own.
"""

import threading
from dataclasses import dataclass, field
from typing import Any, Protocol


@dataclass(frozen=True)
class MetricsSnapshot:
    """Point-in-time copy of the counters."""

    files_processed: int = 0
    total_rows: int = 0
    total_bytes: int = 0
    total_duration_ms: int = 0
    errors: dict[str, int] = field(default_factory=dict)

    @property
    def average_duration_ms(self) -> float:
        if self.files_processed == 0:
            return 0.0
        return self.total_duration_ms / self.files_processed

    def to_dict(self) -> dict[str, Any]:
        return {
            "files_processed": self.files_processed,
            "total_rows": self.total_rows,
            "total_bytes": self.total_bytes,
            "total_duration_ms": self.total_duration_ms,
            "average_duration_ms": round(self.average_duration_ms, 3),
            "errors": dict(self.errors),
        }


class MetricsService(Protocol):
    """Interface consumed by the link service."""

    def record_file_processed(
        self, file_size_bytes: int, row_count: int, duration_seconds: float
    ) -> None: ...

    def record_error(self, error_type: str) -> None: ...

    def get_snapshot(self) -> MetricsSnapshot: ...


class InMemoryMetricsService:
    """Lock-protected in-memory implementation of :class:`MetricsService`."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._files_processed = 0
        self._total_rows = 0
        self._total_bytes = 0
        self._total_duration_ms = 0
        self._errors: dict[str, int] = {}

    def record_file_processed(
        self, file_size_bytes: int, row_count: int, duration_seconds: float
    ) -> None:
        """Count one processed file.

        Args:
            file_size_bytes: Size of the input.
            row_count: Data rows written to the output.
            duration_seconds: Wall-clock processing time.
        """
        duration_ms = int(round(duration_seconds * 1000))
        with self._lock:
            self._files_processed += 1
            self._total_rows += row_count
            self._total_bytes += file_size_bytes
            self._total_duration_ms += duration_ms

    def record_error(self, error_type: str) -> None:
        with self._lock:
            self._errors[error_type] = self._errors.get(error_type, 0) + 1

    def get_snapshot(self) -> MetricsSnapshot:
        with self._lock:
            return MetricsSnapshot(
                files_processed=self._files_processed,
                total_rows=self._total_rows,
                total_bytes=self._total_bytes,
                total_duration_ms=self._total_duration_ms,
                errors=dict(self._errors),
            )

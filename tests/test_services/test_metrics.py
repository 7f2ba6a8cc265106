"""Tests for the in-memory metrics collector."""

import threading

from sheetlink.services.metrics import InMemoryMetricsService, MetricsSnapshot


class TestInMemoryMetricsService:
    """Tests for InMemoryMetricsService."""

    def test_starts_empty(self) -> None:
        snapshot = InMemoryMetricsService().get_snapshot()
        assert snapshot == MetricsSnapshot()
        assert snapshot.average_duration_ms == 0.0

    def test_record_file_processed(self) -> None:
        metrics = InMemoryMetricsService()
        metrics.record_file_processed(1000, 10, 0.5)
        metrics.record_file_processed(500, 4, 0.25)

        snapshot = metrics.get_snapshot()
        assert snapshot.files_processed == 2
        assert snapshot.total_rows == 14
        assert snapshot.total_bytes == 1500
        assert snapshot.total_duration_ms == 750
        assert snapshot.average_duration_ms == 375.0

    def test_record_error(self) -> None:
        metrics = InMemoryMetricsService()
        metrics.record_error("E001")
        metrics.record_error("E001")
        metrics.record_error("E002")

        assert metrics.get_snapshot().errors == {"E001": 2, "E002": 1}

    def test_snapshot_is_a_copy(self) -> None:
        metrics = InMemoryMetricsService()
        metrics.record_error("E001")
        snapshot = metrics.get_snapshot()
        metrics.record_error("E001")

        assert snapshot.errors == {"E001": 1}

    def test_to_dict(self) -> None:
        metrics = InMemoryMetricsService()
        metrics.record_file_processed(10, 1, 0.001)

        assert metrics.get_snapshot().to_dict() == {
            "files_processed": 1,
            "total_rows": 1,
            "total_bytes": 10,
            "total_duration_ms": 1,
            "average_duration_ms": 1.0,
            "errors": {},
        }

    def test_concurrent_updates(self) -> None:
        metrics = InMemoryMetricsService()

        def worker() -> None:
            for _ in range(500):
                metrics.record_file_processed(2, 1, 0.0)
                metrics.record_error("E003")

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        snapshot = metrics.get_snapshot()
        assert snapshot.files_processed == 4000
        assert snapshot.total_bytes == 8000
        assert snapshot.errors == {"E003": 4000}

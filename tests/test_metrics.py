"""Tests for the MetricsCollector class."""

import unittest

from codestats.metrics import MetricsCollector
from codestats.models import FetchResult


def _make_result(**overrides) -> FetchResult:
    """Helper to build a FetchResult with sensible defaults."""
    defaults = dict(
        platform="leetcode",
        handle="alice",
        success=True,
        status_code=200,
        latency_ms=100,
        data={"total_solved": 1},
        error_type=None,
    )
    defaults.update(overrides)
    return FetchResult(**defaults)


class TestMetricsCollector(unittest.TestCase):
    """Verify fetch recording and snapshot aggregation."""

    def test_empty_snapshot(self):
        """A fresh collector reports zeros."""
        snap = MetricsCollector().snapshot(window_secs=30)
        self.assertEqual(snap.total_fetches, 0)
        self.assertEqual(snap.success_count, 0)
        self.assertEqual(snap.avg_latency_ms, 0.0)
        self.assertEqual(snap.by_platform, {})

    def test_records_errors(self):
        """Failure results should be categorized by error type and status."""
        metrics = MetricsCollector()
        metrics.record_result(_make_result(success=False, status_code=429, error_type="HTTP_429"))
        metrics.record_result(_make_result(success=False, status_code=None, error_type="ReadTimeout"))
        metrics.record_result(_make_result(success=False, status_code=None, error_type="ConnectionError"))
        metrics.record_result(_make_result(success=False, status_code=200, error_type="SourceUnavailable"))
        snap = metrics.snapshot(window_secs=30)
        self.assertEqual(snap.total_fetches, 4)
        self.assertEqual(snap.http_429_count, 1)
        self.assertEqual(snap.timeout_count, 1)
        self.assertEqual(snap.conn_error_count, 1)
        self.assertEqual(snap.empty_count, 1)

    def test_per_platform_breakdown(self):
        """Totals are also split per platform."""
        metrics = MetricsCollector()
        metrics.record_result(_make_result(platform="leetcode"))
        metrics.record_result(_make_result(platform="codechef", success=False, error_type="HTTP_404"))
        metrics.record_result(_make_result(platform="codechef"))
        snap = metrics.snapshot(window_secs=30)
        self.assertEqual(snap.by_platform["leetcode"], {"total": 1, "success": 1, "failure": 0})
        self.assertEqual(snap.by_platform["codechef"], {"total": 2, "success": 1, "failure": 1})

    def test_average_latency(self):
        """Average latency covers the window only."""
        metrics = MetricsCollector()
        metrics.record_result(_make_result(latency_ms=100))
        metrics.record_result(_make_result(latency_ms=200))
        self.assertAlmostEqual(metrics.snapshot(window_secs=30).avg_latency_ms, 150.0)

    def test_export_json(self):
        """Snapshots are written as JSON."""
        metrics = MetricsCollector()
        metrics.record_result(_make_result())
        exported = metrics.export_json()
        self.assertEqual(len(exported), 1)
        self.assertEqual(exported[0]["platform"], "leetcode")
        self.assertIn("timestamp", exported[0])


if __name__ == "__main__":
    unittest.main()

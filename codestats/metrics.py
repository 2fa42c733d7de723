from __future__ import annotations

import time
from collections import deque
from dataclasses import asdict
from threading import Lock
from typing import Deque, Dict, List

from .models import FetchResult, MetricsSnapshot

_TIMEOUT_TYPES = {"Timeout", "ConnectTimeout", "ReadTimeout"}


class MetricsCollector:
    """Thread-safe collector of platform fetch outcomes.

    Records FetchResult events and produces MetricsSnapshot objects over a
    sliding time window, overall and broken down per platform."""

    def __init__(self, maxlen: int = 10000) -> None:
        self._lock = Lock()
        self._events: Deque[tuple[float, FetchResult]] = deque(maxlen=maxlen)

    def record_result(self, result: FetchResult) -> None:
        with self._lock:
            self._events.append((time.time(), result))

    def snapshot(self, window_secs: int) -> MetricsSnapshot:
        """Return aggregated metrics for fetches within the last window_secs seconds."""
        now = time.time()
        cutoff = now - window_secs
        with self._lock:
            events: List[FetchResult] = [e for ts, e in self._events if ts >= cutoff]

        total = len(events)
        by_platform: Dict[str, Dict[str, int]] = {}
        for e in events:
            bucket = by_platform.setdefault(e.platform, {"total": 0, "success": 0, "failure": 0})
            bucket["total"] += 1
            bucket["success" if e.success else "failure"] += 1

        return MetricsSnapshot(
            window_secs=window_secs,
            total_fetches=total,
            success_count=sum(1 for e in events if e.success),
            timeout_count=sum(1 for e in events if e.error_type in _TIMEOUT_TYPES),
            conn_error_count=sum(1 for e in events if e.error_type == "ConnectionError"),
            http_429_count=sum(1 for e in events if e.status_code == 429),
            http_403_count=sum(1 for e in events if e.status_code == 403),
            empty_count=sum(1 for e in events if e.error_type == "SourceUnavailable"),
            avg_latency_ms=(sum(e.latency_ms for e in events) / total) if total else 0.0,
            by_platform=by_platform,
            timestamp=now,
        )

    def export_json(self) -> List[Dict]:
        with self._lock:
            return [{"timestamp": ts, **asdict(e)} for ts, e in self._events]

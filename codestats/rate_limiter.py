from __future__ import annotations

import threading
import time
from typing import Dict, Optional


class RateLimiter:
    """Thread-safe per-platform request spacing.

    Each platform key gets its own schedule so a slow, heavily throttled site
    never delays requests to the others. ``acquire(key)`` blocks the calling
    thread until the next request to that platform is allowed."""

    def __init__(self, qps: float, overrides: Optional[Dict[str, float]] = None) -> None:
        self._default_interval = self._interval_for(qps)
        self._intervals = {key: self._interval_for(value) for key, value in (overrides or {}).items()}
        self._lock = threading.Lock()
        self._next_allowed: Dict[str, float] = {}

    def acquire(self, key: str) -> None:
        interval = self._intervals.get(key, self._default_interval)
        if interval <= 0:
            return
        with self._lock:
            now = time.time()
            slot = max(self._next_allowed.get(key, 0.0), now)
            self._next_allowed[key] = slot + interval
        wait = slot - now
        if wait > 0:
            time.sleep(wait)

    @staticmethod
    def _interval_for(qps: float) -> float:
        return 1.0 / qps if qps > 0 else 0.0

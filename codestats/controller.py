from __future__ import annotations

import threading
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Callable, Dict, Iterable, Tuple

from .models import FetchResult

FetchFn = Callable[[str], FetchResult]

STOPPED_ERROR_TYPE = "ControllerStopped"


class ThreadPoolController:
    """Fans platform fetches out over a bounded thread pool.

    A slow platform only ties up its own worker; ``run_all`` joins every
    fetch of a sync run before returning, keyed by platform so the caller
    can merge in its own fixed order regardless of completion order."""

    def __init__(self, max_workers: int = 6) -> None:
        self._executor = ThreadPoolExecutor(max_workers=max(1, max_workers), thread_name_prefix="codestats-fetch")
        self._lock = threading.Lock()
        self._running = True

    def __enter__(self) -> "ThreadPoolController":
        return self

    def __exit__(self, *exc_info) -> None:
        self.stop()

    @property
    def running(self) -> bool:
        with self._lock:
            return self._running

    def stop(self, wait: bool = True) -> None:
        with self._lock:
            self._running = False
        self._executor.shutdown(wait=wait, cancel_futures=False)

    def submit(self, platform: str, fn: FetchFn, handle: str) -> Future:
        with self._lock:
            if not self._running:
                future: Future = Future()
                future.set_result(self._stopped_result(platform, handle))
                return future
            return self._executor.submit(fn, handle)

    def run_all(self, jobs: Iterable[Tuple[str, FetchFn, str]]) -> Dict[str, FetchResult]:
        """Run (platform, fetch_fn, handle) jobs concurrently and wait for all of them."""
        futures = {platform: self.submit(platform, fn, handle) for platform, fn, handle in jobs}
        return {platform: future.result() for platform, future in futures.items()}

    @staticmethod
    def _stopped_result(platform: str, handle: str) -> FetchResult:
        return FetchResult(
            platform=platform,
            handle=handle,
            success=False,
            status_code=None,
            latency_ms=0,
            data=None,
            error_type=STOPPED_ERROR_TYPE,
            error="Sync aborted before fetching",
        )

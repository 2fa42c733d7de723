from __future__ import annotations

import time
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

from .errors import SourceUnavailable
from .metrics import MetricsCollector
from .models import FetchResult


class BaseAdapter(ABC):
    """Abstract base class defining the fetch pipeline shared by every platform.

    ``run`` never raises:
    - any 2xx response whose parse step returns stats is a success;
    - a non-2xx response is a failure tagged ``HTTP_<code>``;
    - a parse step raising SourceUnavailable (empty or unusable payload) is a
      failure tagged with that class name;
    - transport errors are tagged with the exception class name.
    """

    platform: str = ""
    display_name: str = ""

    def __init__(self, metrics: Optional[MetricsCollector] = None) -> None:
        self._metrics = metrics

    def run(self, handle: str) -> FetchResult:
        start_ms = self._now_ms()
        status_code = None

        try:
            self.validate(handle)
            response = self.fetch(handle)
            status_code = getattr(response, "status_code", None)

            if status_code is not None and not 200 <= int(status_code) < 300:
                return self._fail(handle, start_ms, status_code, f"HTTP_{status_code}")

            try:
                stats = self.parse(response)
            except Exception as parse_exc:  # noqa: BLE001
                return self._fail(handle, start_ms, status_code, type(parse_exc).__name__)

            return self._finish(
                FetchResult(
                    platform=self.platform,
                    handle=handle,
                    success=True,
                    status_code=status_code,
                    latency_ms=self._now_ms() - start_ms,
                    data=stats,
                    error_type=None,
                )
            )

        except Exception as exc:  # noqa: BLE001
            return self._fail(handle, start_ms, status_code, type(exc).__name__)

    def validate(self, handle: str) -> None:
        if not handle or not handle.strip():
            raise ValueError("handle is required")

    def failure_message(self, error_type: str) -> str:
        return f"Failed to fetch {self.display_name or self.platform} stats ({error_type})"

    @abstractmethod
    def fetch(self, handle: str) -> Any:
        ...

    @abstractmethod
    def parse(self, response: Any) -> Dict[str, Any]:
        """Turn a successful response into a stats dict or raise SourceUnavailable."""

    def _fail(self, handle: str, start_ms: int, status_code: Optional[int], error_type: str) -> FetchResult:
        return self._finish(
            FetchResult(
                platform=self.platform,
                handle=handle,
                success=False,
                status_code=status_code,
                latency_ms=self._now_ms() - start_ms,
                data=None,
                error_type=error_type,
                error=self.failure_message(error_type),
            )
        )

    def _finish(self, result: FetchResult) -> FetchResult:
        if self._metrics:
            self._metrics.record_result(result)
        return result

    @staticmethod
    def _require(condition: Any, reason: str) -> None:
        if not condition:
            raise SourceUnavailable(reason)

    @staticmethod
    def _now_ms() -> int:
        return int(time.time() * 1000)

from __future__ import annotations

import random
from typing import FrozenSet, Optional

RETRYABLE_ERRORS: FrozenSet[str] = frozenset(
    {
        "Timeout",
        "ConnectTimeout",
        "ReadTimeout",
        "ConnectionError",
        "ChunkedEncodingError",
        "RequestException",
        "CurlError",
    }
)


class BackoffStrategy:
    """Exponential backoff with jitter between fetch retries.

    Sleep is base * 2^(attempt-1) plus up to 10% jitter, capped at max_seconds.
    Only transport-level errors are worth retrying; a page that loaded but
    had nothing in it will look the same a second later."""

    def __init__(
        self,
        base_seconds: float = 0.5,
        max_seconds: float = 5.0,
        max_retries: int = 2,
        retryable: FrozenSet[str] = RETRYABLE_ERRORS,
    ) -> None:
        self._base = base_seconds
        self._max = max_seconds
        self._max_retries = max(0, max_retries)
        self._retryable = retryable

    @property
    def max_retries(self) -> int:
        return self._max_retries

    def should_retry(self, attempt: int, error_type: Optional[str]) -> bool:
        """True if a request that failed on ``attempt`` (1-based) should be tried again."""
        if attempt > self._max_retries:
            return False
        return error_type in self._retryable

    def get_sleep(self, attempt: int) -> float:
        exp = min(self._max, self._base * (2 ** max(attempt - 1, 0)))
        return exp + random.uniform(0, exp * 0.1)

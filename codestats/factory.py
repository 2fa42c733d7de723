from __future__ import annotations

from typing import Dict, Optional, Type

from .adapters import (
    AtCoderAdapter,
    CodeChefAdapter,
    CodeforcesAdapter,
    GeeksforGeeksAdapter,
    HackerRankAdapter,
    HtmlProfileAdapter,
    LeetCodeAdapter,
)
from .backoff import BackoffStrategy
from .base import BaseAdapter
from .config import SyncSettings
from .metrics import MetricsCollector
from .rate_limiter import RateLimiter

# Fixed evaluation order of a sync run.
PLATFORM_ORDER = ("leetcode", "codeforces", "codechef", "geeksforgeeks", "atcoder", "hackerrank")

ADAPTER_CLASSES: Dict[str, Type[BaseAdapter]] = {
    "leetcode": LeetCodeAdapter,
    "codeforces": CodeforcesAdapter,
    "codechef": CodeChefAdapter,
    "geeksforgeeks": GeeksforGeeksAdapter,
    "atcoder": AtCoderAdapter,
    "hackerrank": HackerRankAdapter,
}


class AdapterFactory:
    """Creates platform adapters by platform key.

    Adapters hold no per-call state, so one instance per platform is built
    lazily and shared across sync runs and threads."""

    def __init__(
        self,
        metrics: MetricsCollector,
        rate_limiter: RateLimiter,
        backoff: BackoffStrategy,
        settings: Optional[SyncSettings] = None,
    ) -> None:
        self._metrics = metrics
        self._rate_limiter = rate_limiter
        self._backoff = backoff
        self._settings = settings or SyncSettings()
        self._cache: Dict[str, BaseAdapter] = {}

    @classmethod
    def from_settings(cls, settings: SyncSettings, metrics: Optional[MetricsCollector] = None) -> "AdapterFactory":
        return cls(
            metrics=metrics or MetricsCollector(),
            rate_limiter=RateLimiter(qps=settings.qps),
            backoff=BackoffStrategy(
                base_seconds=settings.backoff_base,
                max_seconds=settings.backoff_max,
                max_retries=settings.max_retries,
            ),
            settings=settings,
        )

    @property
    def metrics(self) -> MetricsCollector:
        return self._metrics

    def create_adapter(self, platform: str) -> BaseAdapter:
        if platform in self._cache:
            return self._cache[platform]

        adapter_cls = ADAPTER_CLASSES.get(platform)
        if adapter_cls is None:
            raise ValueError(f"Unknown platform: {platform}")

        if adapter_cls is HackerRankAdapter:
            adapter: BaseAdapter = HackerRankAdapter(metrics=self._metrics)
        elif issubclass(adapter_cls, HtmlProfileAdapter):
            adapter = adapter_cls(
                rate_limiter=self._rate_limiter,
                backoff=self._backoff,
                timeout=self._settings.request_timeout,
                impersonate=self._settings.impersonate,
                metrics=self._metrics,
            )
        else:
            adapter = adapter_cls(
                rate_limiter=self._rate_limiter,
                backoff=self._backoff,
                timeout=self._settings.request_timeout,
                metrics=self._metrics,
            )

        self._cache[platform] = adapter
        return adapter

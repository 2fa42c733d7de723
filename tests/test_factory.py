"""Tests for the AdapterFactory class."""

import unittest

from codestats.adapters import (
    AtCoderAdapter,
    CodeChefAdapter,
    CodeforcesAdapter,
    GeeksforGeeksAdapter,
    HackerRankAdapter,
    LeetCodeAdapter,
)
from codestats.backoff import BackoffStrategy
from codestats.config import SyncSettings
from codestats.factory import PLATFORM_ORDER, AdapterFactory
from codestats.metrics import MetricsCollector
from codestats.rate_limiter import RateLimiter


class TestAdapterFactory(unittest.TestCase):
    """Verify that the factory creates the correct adapter type."""

    def setUp(self):
        self.factory = AdapterFactory(
            metrics=MetricsCollector(),
            rate_limiter=RateLimiter(qps=1.0),
            backoff=BackoffStrategy(),
        )

    def test_creates_adapter_per_platform(self):
        """Each key maps to its adapter class."""
        expected = {
            "leetcode": LeetCodeAdapter,
            "codeforces": CodeforcesAdapter,
            "codechef": CodeChefAdapter,
            "geeksforgeeks": GeeksforGeeksAdapter,
            "atcoder": AtCoderAdapter,
            "hackerrank": HackerRankAdapter,
        }
        for platform, adapter_cls in expected.items():
            with self.subTest(platform=platform):
                adapter = self.factory.create_adapter(platform)
                self.assertIsInstance(adapter, adapter_cls)
                self.assertEqual(adapter.platform, platform)

    def test_every_platform_in_order_is_supported(self):
        """Every key in the platform order can be built."""
        self.assertEqual(len(PLATFORM_ORDER), 6)
        for platform in PLATFORM_ORDER:
            self.factory.create_adapter(platform)

    def test_adapters_are_cached(self):
        """Repeated requests return the same instance."""
        first = self.factory.create_adapter("codechef")
        self.assertIs(first, self.factory.create_adapter("codechef"))

    def test_unknown_platform_raises_error(self):
        """Unknown keys raise ValueError."""
        with self.assertRaises(ValueError) as ctx:
            self.factory.create_adapter("topcoder")
        self.assertIn("topcoder", str(ctx.exception))

    def test_from_settings_shares_metrics(self):
        """Adapters built from settings share one collector."""
        metrics = MetricsCollector()
        factory = AdapterFactory.from_settings(SyncSettings(request_timeout=3.0), metrics=metrics)
        self.assertIs(factory.metrics, metrics)
        self.assertEqual(factory.create_adapter("leetcode")._timeout, 3.0)


if __name__ == "__main__":
    unittest.main()

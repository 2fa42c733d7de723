"""Tests for the RateLimiter class."""

import time
import unittest

from codestats.rate_limiter import RateLimiter


class TestRateLimiter(unittest.TestCase):
    """Verify that the rate limiter spaces requests per platform."""

    def test_acquire_does_not_block_first_call(self):
        """The first acquire() call should return almost immediately."""
        limiter = RateLimiter(qps=10.0)
        start = time.time()
        limiter.acquire("leetcode")
        self.assertLess(time.time() - start, 0.05)

    def test_acquire_throttles_same_platform(self):
        """Rapid calls for one platform at 4 QPS should be spaced out."""
        limiter = RateLimiter(qps=4.0)
        start = time.time()
        for _ in range(3):
            limiter.acquire("codechef")
        # two intervals of 0.25s, with slack for scheduling
        self.assertGreaterEqual(time.time() - start, 0.4)

    def test_platforms_do_not_block_each_other(self):
        """Different platforms keep independent schedules."""
        limiter = RateLimiter(qps=1.0)
        start = time.time()
        for platform in ("leetcode", "codeforces", "codechef", "atcoder"):
            limiter.acquire(platform)
        self.assertLess(time.time() - start, 0.1)

    def test_override_disables_limit(self):
        """A zero per-key rate disables throttling for that key."""
        limiter = RateLimiter(qps=1.0, overrides={"hackerrank": 0.0})
        start = time.time()
        for _ in range(5):
            limiter.acquire("hackerrank")
        self.assertLess(time.time() - start, 0.1)

    def test_zero_qps_does_not_block(self):
        """QPS of 0 should disable rate limiting entirely."""
        limiter = RateLimiter(qps=0.0)
        start = time.time()
        for _ in range(10):
            limiter.acquire("leetcode")
        self.assertLess(time.time() - start, 0.1)


if __name__ == "__main__":
    unittest.main()

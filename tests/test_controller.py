"""Tests for the ThreadPoolController class."""

import threading
import time
import unittest

from codestats.controller import ThreadPoolController
from codestats.models import FetchResult


def _result(platform, handle, success=True):
    return FetchResult(
        platform=platform,
        handle=handle,
        success=success,
        status_code=200 if success else None,
        latency_ms=0,
        data={} if success else None,
        error_type=None if success else "Timeout",
    )


class TestThreadPoolController(unittest.TestCase):
    """Fan-out and join over the fetch pool."""

    def test_run_all_returns_one_result_per_platform(self):
        """Results are keyed by platform."""
        with ThreadPoolController(max_workers=3) as controller:
            results = controller.run_all(
                [
                    ("leetcode", lambda h: _result("leetcode", h), "alice"),
                    ("codeforces", lambda h: _result("codeforces", h, success=False), "bob"),
                ]
            )
        self.assertEqual(set(results), {"leetcode", "codeforces"})
        self.assertEqual(results["leetcode"].handle, "alice")
        self.assertFalse(results["codeforces"].success)

    def test_fetches_run_concurrently(self):
        """A slow platform does not hold back the others."""
        barrier = threading.Barrier(3, timeout=2)

        def fetch(platform):
            def _fn(handle):
                barrier.wait()
                return _result(platform, handle)

            return _fn

        with ThreadPoolController(max_workers=3) as controller:
            start = time.time()
            results = controller.run_all([(p, fetch(p), "x") for p in ("a", "b", "c")])
        self.assertEqual(len(results), 3)
        self.assertLess(time.time() - start, 2)

    def test_stopped_controller_returns_failures(self):
        """A stopped pool answers with ControllerStopped failures."""
        controller = ThreadPoolController(max_workers=1)
        controller.stop()
        results = controller.run_all([("leetcode", lambda h: _result("leetcode", h), "alice")])
        self.assertFalse(results["leetcode"].success)
        self.assertEqual(results["leetcode"].error_type, "ControllerStopped")

    def test_running_flag_tracks_stop(self):
        """running is True until stop is called."""
        controller = ThreadPoolController(max_workers=1)
        self.assertTrue(controller.running)
        controller.stop()
        self.assertFalse(controller.running)


if __name__ == "__main__":
    unittest.main()

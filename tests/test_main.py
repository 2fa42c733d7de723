"""Tests for the command line entry point."""

import contextlib
import io
import json
import os
import tempfile
import unittest
from unittest import mock

import main
from codestats.storage import JsonFileDocumentStore


class TestMain(unittest.TestCase):
    """End-to-end runs of the CLI against a temporary data directory."""

    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self._tmp.cleanup)
        self.data_dir = self._tmp.name
        JsonFileDocumentStore(self.data_dir, "users").put(
            "u1",
            {
                "platform_handles": {"hackerrank": "alice_hr"},
                "solved_problems": [{"id": "p1", "difficulty": "easy"}],
            },
        )

    def _run(self, *argv):
        out, err = io.StringIO(), io.StringIO()
        with contextlib.redirect_stdout(out), contextlib.redirect_stderr(err):
            code = main.main(["--data-dir", self.data_dir, "--log-level", "WARNING", *argv])
        return code, out.getvalue(), err.getvalue()

    def test_unknown_user_exits_with_error(self):
        """A missing user prints an error and exits with 1."""
        code, _, err = self._run("stats", "ghost")
        self.assertEqual(code, 1)
        self.assertIn("User not found", err)

    def test_invalid_environment_exits_with_error(self):
        """A malformed CODESTATS_* variable is reported, not raised."""
        with mock.patch.dict(os.environ, {"CODESTATS_MAX_WORKERS": "2.9"}):
            code, _, err = self._run("stats", "u1")
        self.assertEqual(code, 2)
        self.assertIn("CODESTATS_MAX_WORKERS", err)

    def test_stats(self):
        """stats prints the local counts as JSON."""
        code, out, _ = self._run("stats", "u1")
        self.assertEqual(code, 0)
        self.assertEqual(json.loads(out)["easy_solved"], 1)

    def test_sync_persists_profile(self):
        """sync prints per-platform lines and stores the profile."""
        code, out, _ = self._run("sync", "u1")
        self.assertEqual(code, 0)
        self.assertIn("platform=hackerrank", out)

        stored = JsonFileDocumentStore(self.data_dir, "profiles").get("u1")
        self.assertEqual(stored["platforms"]["hackerrank"]["fetch_error"], "Sync not implemented yet")

    def test_achievements(self):
        """achievements prints the streak report."""
        code, out, _ = self._run("achievements", "u1")
        self.assertEqual(code, 0)
        report = json.loads(out)
        self.assertEqual(report["current_streak"], 0)


if __name__ == "__main__":
    unittest.main()

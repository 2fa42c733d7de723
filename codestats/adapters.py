from __future__ import annotations

import logging
import time as _time
from typing import Any, Callable, Dict, Mapping, Optional, Sequence
from urllib.parse import quote as _quote

import requests
from curl_cffi import requests as curl_requests

from .backoff import BackoffStrategy
from .base import BaseAdapter
from .errors import SourceUnavailable
from .extractor import PatternExtractor, Rule
from .models import FetchResult
from .rate_limiter import RateLimiter

logger = logging.getLogger(__name__)

DEFAULT_HEADERS = {
    "User-Agent": (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
        "AppleWebKit/537.36 (KHTML, like Gecko) "
        "Chrome/122.0.0.0 Safari/537.36"
    ),
    "Accept": "text/html,application/json;q=0.9,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.9",
}

LEETCODE_GRAPHQL_URL = "https://leetcode.com/graphql"
CODEFORCES_USER_INFO_URL = "https://codeforces.com/api/user.info"

LEETCODE_PROFILE_QUERY = """
query userPublicProfile($username: String!) {
  matchedUser(username: $username) {
    submitStats: submitStatsGlobal {
      acSubmissionNum {
        difficulty
        count
      }
    }
    profile {
      ranking
      reputation
    }
  }
  userContestRanking(username: $username) {
    rating
  }
}
"""


class _NetworkAdapter(BaseAdapter):
    """Adds rate limiting and transient-error retries around a single request."""

    def __init__(
        self,
        rate_limiter: RateLimiter,
        backoff: BackoffStrategy,
        timeout: float = 12.0,
        *args,
        **kwargs,
    ) -> None:
        super().__init__(*args, **kwargs)
        self._rate_limiter = rate_limiter
        self._backoff = backoff
        self._timeout = timeout

    def _with_retries(self, send: Callable[[], Any]) -> Any:
        attempt = 0
        while True:
            attempt += 1
            self._rate_limiter.acquire(self.platform)
            try:
                return send()
            except Exception as exc:  # noqa: BLE001
                error_type = type(exc).__name__
                if not self._backoff.should_retry(attempt, error_type):
                    raise
                sleep_s = self._backoff.get_sleep(attempt)
                logger.debug("%s: retry %d after %s in %.2fs", self.platform, attempt, error_type, sleep_s)
                _time.sleep(sleep_s)


class LeetCodeAdapter(_NetworkAdapter):
    platform = "leetcode"
    display_name = "LeetCode"

    def fetch(self, handle: str) -> Any:
        return self._with_retries(
            lambda: requests.post(
                LEETCODE_GRAPHQL_URL,
                json={"query": LEETCODE_PROFILE_QUERY, "variables": {"username": handle}},
                headers={"Content-Type": "application/json", "User-Agent": DEFAULT_HEADERS["User-Agent"]},
                timeout=self._timeout,
            )
        )

    def parse(self, response: Any) -> Dict[str, Any]:
        payload = response.json()
        self._require(isinstance(payload, dict), "unexpected payload")
        self._require(not payload.get("errors"), "query returned errors")

        data = payload.get("data") or {}
        matched = data.get("matchedUser")
        self._require(matched, "no matched user")

        submissions = (matched.get("submitStats") or {}).get("acSubmissionNum") or []
        counts = {row.get("difficulty"): int(row.get("count") or 0) for row in submissions}
        contest = data.get("userContestRanking") or {}

        return {
            "total_solved": counts.get("All", 0),
            "easy_solved": counts.get("Easy", 0),
            "medium_solved": counts.get("Medium", 0),
            "hard_solved": counts.get("Hard", 0),
            "ranking": (matched.get("profile") or {}).get("ranking") or 0,
            "contest_rating": int(round(contest.get("rating") or 0)),
        }


class CodeforcesAdapter(_NetworkAdapter):
    platform = "codeforces"
    display_name = "Codeforces"

    def fetch(self, handle: str) -> Any:
        return self._with_retries(
            lambda: requests.get(
                CODEFORCES_USER_INFO_URL,
                params={"handles": handle},
                timeout=self._timeout,
            )
        )

    def parse(self, response: Any) -> Dict[str, Any]:
        payload = response.json()
        self._require(isinstance(payload, dict), "unexpected payload")
        self._require(payload.get("status") == "OK", f"status {payload.get('status')!r}")
        result = payload.get("result") or []
        self._require(result, "empty result")

        user = result[0]
        return {
            "rating": user.get("rating") or 0,
            "max_rating": user.get("maxRating") or 0,
            "rank": user.get("rank") or "unrated",
            # user.info has no contest count; it needs a user.rating call per handle
            "contests_count": 0,
        }


class HtmlProfileAdapter(_NetworkAdapter):
    """Scrapes a public profile page rendered for browsers.

    Subclasses only declare data: the page URL and a field -> rules table.
    A page from which no field can be extracted is a failed fetch; any
    missing field is simply absent from the stats."""

    url_template: str = ""
    rules: Mapping[str, Sequence[Rule]] = {}
    required_fields: Optional[Sequence[str]] = None

    def __init__(self, *args, impersonate: str = "chrome120", **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._impersonate = impersonate
        self._extractor = PatternExtractor(self.rules)

    def profile_url(self, handle: str) -> str:
        return self.url_template.format(handle=_quote(handle, safe=""))

    def fetch(self, handle: str) -> Any:
        url = self.profile_url(handle)

        def send() -> Any:
            with curl_requests.Session() as session:
                return session.request(
                    method="GET",
                    url=url,
                    headers=DEFAULT_HEADERS,
                    impersonate=self._impersonate,
                    timeout=self._timeout,
                )

        return self._with_retries(send)

    def parse(self, response: Any) -> Dict[str, Any]:
        content_type = str((getattr(response, "headers", None) or {}).get("content-type", "") or "")
        if content_type and "html" not in content_type and "text" not in content_type:
            raise SourceUnavailable(f"non-text body ({content_type})")
        html = getattr(response, "text", None)
        self._require(isinstance(html, str) and html.strip(), "empty body")

        stats = self._extractor.extract(html)
        required = self.required_fields or self._extractor.fields
        self._require(any(name in stats for name in required), "no fields extracted")
        return stats


class CodeChefAdapter(HtmlProfileAdapter):
    platform = "codechef"
    display_name = "CodeChef"
    url_template = "https://www.codechef.com/users/{handle}"
    required_fields = ("rating",)
    rules = {
        "rating": (
            Rule(r"rating-number[^>]*>\s*([0-9]{2,5})\s*<"),
            Rule(r"Current Rating</[^>]+>\s*<[^>]+>\s*([0-9]{2,5})\s*<"),
        ),
        "stars": (Rule(r"rating-star[^>]*>\s*([^<]{1,20})\s*<", kind="count", symbol="★"),),
        "global_rank": (
            Rule(r"Global Rank</small>\s*<strong>\s*([0-9,]+)\s*</strong>"),
            Rule(r"Global Rank[\s\S]{0,120}?([0-9,]{1,15})"),
        ),
    }


class AtCoderAdapter(HtmlProfileAdapter):
    platform = "atcoder"
    display_name = "AtCoder"
    url_template = "https://atcoder.jp/users/{handle}?lang=en"
    rules = {
        "rating": (Rule(r"Rating</th>\s*<td[^>]*>\s*(?:<[^>]+>\s*)*([0-9]{1,6})"),),
        "max_rating": (Rule(r"Highest Rating</th>\s*<td[^>]*>\s*(?:<[^>]+>\s*)*([0-9]{1,6})"),),
        "rank": (Rule(r"Rank</th>\s*<td[^>]*>[\s\S]*?</td>", kind="text", strip_prefix="Rank"),),
    }


class GeeksforGeeksAdapter(HtmlProfileAdapter):
    platform = "geeksforgeeks"
    display_name = "GeeksforGeeks"
    url_template = "https://auth.geeksforgeeks.org/user/{handle}/"
    rules = {
        "total_solved": (
            Rule(r"Problems\s*Solved[\s\S]{0,120}?([0-9]{1,6})"),
            Rule(r"Solved\s*Problems[\s\S]{0,120}?([0-9]{1,6})"),
        ),
        "coding_score": (Rule(r"Coding\s*Score[\s\S]{0,120}?([0-9]{1,8})"),),
        "institute_rank": (Rule(r"Institute\s*Rank[\s\S]{0,120}?([0-9]{1,8})"),),
    }


class HackerRankAdapter(BaseAdapter):
    """Placeholder: the handle is recorded but no request is ever made."""

    platform = "hackerrank"
    display_name = "HackerRank"

    def run(self, handle: str) -> FetchResult:
        # Not a fetch attempt, so nothing is recorded in metrics.
        return FetchResult(
            platform=self.platform,
            handle=handle,
            success=False,
            status_code=None,
            latency_ms=0,
            data=None,
            error_type="NotImplementedError",
            error=self.failure_message("NotImplementedError"),
        )

    def fetch(self, handle: str) -> Any:
        raise NotImplementedError("HackerRank sync is not implemented")

    def parse(self, response: Any) -> Dict[str, Any]:
        raise NotImplementedError("HackerRank sync is not implemented")

    def failure_message(self, error_type: str) -> str:
        return "Sync not implemented yet"

from __future__ import annotations

import json
import logging
import threading
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Tuple

from .config import SyncSettings
from .controller import STOPPED_ERROR_TYPE, ThreadPoolController
from .errors import StorageFailure, SyncAborted, UserNotFound
from .factory import PLATFORM_ORDER, AdapterFactory
from .metrics import MetricsCollector
from .models import AggregatedProfile, FetchResult, Submission, UserRecord
from .storage import DocumentStore, JsonFileDocumentStore
from .streaks import compute_streak, evaluate_achievements, to_utc_date

logger = logging.getLogger(__name__)

# Platforms whose headline number is a count of solved problems. Rating-based
# platforms never contribute to the cross-platform total.
SOLVED_COUNT_PLATFORMS = ("leetcode", "geeksforgeeks")

_IDENTITY_KEYS = {"codeforces": "handle"}

# Per-user sync locks are striped over a fixed pool.
_LOCK_STRIPES = 64

Slot = Dict[str, Any]


def identity_key(platform: str) -> str:
    return _IDENTITY_KEYS.get(platform, "username")


def merge_result(previous: Optional[Slot], platform: str, result: FetchResult, now: str) -> Slot:
    """Build the new slot for one platform from its fetch result.

    On failure the previous stats are kept and only the error and timestamp
    change, unless the handle itself changed: stats belonging to another
    handle are dropped rather than relabelled."""
    key = identity_key(platform)
    if result.success:
        slot: Slot = {key: result.handle}
        slot.update(result.data or {})
        slot["last_fetched_at"] = now
        return slot

    previous = previous or {}
    stored_handle = previous.get(key)
    slot = dict(previous) if stored_handle in (None, result.handle) else {}
    slot[key] = result.handle
    slot["last_fetched_at"] = now
    slot["fetch_error"] = result.error or f"Failed to fetch {platform} stats"
    return slot


def merge_results(
    platforms: Mapping[str, Slot],
    results: Iterable[Tuple[str, FetchResult]],
    now: str,
) -> Dict[str, Slot]:
    """Fold (platform, result) pairs into a copy of the slot map.

    Each pair only replaces its own platform key, so the outcome does not
    depend on the order in which fetches finished."""
    merged = dict(platforms)
    for platform, result in results:
        merged[platform] = merge_result(merged.get(platform), platform, result, now)
    return merged


def total_problems_solved(platforms: Mapping[str, Slot]) -> int:
    return sum(int((platforms.get(p) or {}).get("total_solved") or 0) for p in SOLVED_COUNT_PLATFORMS)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class ProfileSyncService:
    """Synchronizes external coding profiles and serves the derived views.

    Collaborators are three keyed document stores: users (platform handles
    and solved problems), submissions (local submission history) and
    profiles (the aggregated profile, read and replaced whole)."""

    def __init__(
        self,
        users: DocumentStore,
        profiles: DocumentStore,
        submissions: DocumentStore,
        factory: AdapterFactory,
        controller: Optional[ThreadPoolController] = None,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        self._users = users
        self._profiles = profiles
        self._submissions = submissions
        self._factory = factory
        self._controller = controller
        self._clock = clock
        self._locks = tuple(threading.Lock() for _ in range(_LOCK_STRIPES))

    @classmethod
    def from_settings(cls, settings: SyncSettings) -> "ProfileSyncService":
        return cls(
            users=JsonFileDocumentStore(settings.data_dir, "users"),
            profiles=JsonFileDocumentStore(settings.data_dir, "profiles"),
            submissions=JsonFileDocumentStore(settings.data_dir, "submissions"),
            factory=AdapterFactory.from_settings(settings),
            controller=ThreadPoolController(max_workers=settings.max_workers),
        )

    @property
    def metrics(self) -> MetricsCollector:
        return self._factory.metrics

    def close(self) -> None:
        if self._controller is not None:
            self._controller.stop()

    def sync_user_stats(self, user_id: str) -> AggregatedProfile:
        """Fetch every configured platform and persist the merged profile.

        Raises UserNotFound, StorageFailure or SyncAborted; per-platform failures end up
        in the slots' ``fetch_error`` instead."""
        user = self._load_user(user_id)

        with self._user_lock(user_id):
            profile = self._load_profile(user_id) or AggregatedProfile(user_id=user_id)

            jobs = [
                (platform, self._factory.create_adapter(platform).run, user.platform_handles[platform])
                for platform in PLATFORM_ORDER
                if platform in user.platform_handles
            ]
            ignored = sorted(set(user.platform_handles) - set(PLATFORM_ORDER))
            if ignored:
                logger.debug("user %s: ignoring unsupported platforms %s", user_id, ignored)

            results = self._fetch(jobs)
            aborted = [platform for platform, result in results if result.error_type == STOPPED_ERROR_TYPE]
            if aborted:
                raise SyncAborted(f"sync for {user_id} aborted before fetching {', '.join(aborted)}")

            for _, result in results:
                self._log_result(user_id, result)

            now = self._clock().isoformat()
            profile.platforms = merge_results(profile.platforms, results, now)
            profile.aggregated_stats.total_problems_solved = total_problems_solved(profile.platforms)
            profile.last_full_sync_at = now

            self._profiles.put(user_id, profile.to_dict())

        failed = [platform for platform, result in results if not result.success]
        logger.info(
            "user %s synced: %d platform(s), %d failed%s",
            user_id,
            len(results),
            len(failed),
            f" ({', '.join(failed)})" if failed else "",
        )
        return profile

    def get_stats(self, user_id: str) -> Dict[str, Any]:
        user = self._load_user(user_id)
        submissions = self._load_submissions(user_id)
        profile = self._load_profile(user_id)

        counts = user.solved_by_difficulty()
        total = len(submissions)
        accepted = sum(1 for s in submissions if s.status == "Accepted")

        return {
            "total_solved": len(user.solved_problems),
            "easy_solved": counts["easy"],
            "medium_solved": counts["medium"],
            "hard_solved": counts["hard"],
            "total_submissions": total,
            "accepted_submissions": accepted,
            "acceptance_rate": (accepted / total) * 100 if total else 0.0,
            "external": profile.to_dict()["platforms"] if profile else None,
            "aggregated": profile.aggregated_stats.to_dict() if profile else None,
            "external_meta": {"last_full_sync_at": profile.last_full_sync_at} if profile else None,
        }

    def get_achievements(self, user_id: str) -> Dict[str, Any]:
        user = self._load_user(user_id)
        submissions = self._load_submissions(user_id)

        streak = compute_streak((s.timestamp for s in submissions), today=to_utc_date(self._clock()))
        counts = user.solved_by_difficulty()
        solved = {
            "total_solved": len(user.solved_problems),
            "easy_solved": counts["easy"],
            "medium_solved": counts["medium"],
            "hard_solved": counts["hard"],
        }
        return {
            "achievements": [status.to_dict() for status in evaluate_achievements(solved, streak)],
            "current_streak": streak.current_streak,
            "max_streak": streak.max_streak,
        }

    def _fetch(self, jobs: List[Tuple[str, Callable[[str], FetchResult], str]]) -> List[Tuple[str, FetchResult]]:
        if self._controller is not None:
            by_platform = self._controller.run_all(jobs)
            return [(platform, by_platform[platform]) for platform, _, _ in jobs]
        return [(platform, fn(handle)) for platform, fn, handle in jobs]

    def _load_user(self, user_id: str) -> UserRecord:
        doc = self._users.get(user_id)
        if doc is None:
            raise UserNotFound(user_id)
        return UserRecord.from_dict(user_id, doc)

    def _load_profile(self, user_id: str) -> Optional[AggregatedProfile]:
        doc = self._profiles.get(user_id)
        if doc is None:
            return None
        try:
            return AggregatedProfile.from_dict({**doc, "user_id": user_id})
        except (TypeError, ValueError) as exc:
            raise StorageFailure(f"profile for {user_id} is malformed: {exc}") from exc

    def _load_submissions(self, user_id: str) -> List[Submission]:
        doc = self._submissions.get(user_id) or {}
        return [
            Submission(timestamp=row["timestamp"], status=str(row.get("status", "")))
            for row in doc.get("submissions") or []
            if row.get("timestamp")
        ]

    def _user_lock(self, user_id: str) -> threading.Lock:
        return self._locks[hash(user_id) % len(self._locks)]

    @staticmethod
    def _log_result(user_id: str, result: FetchResult) -> None:
        line = json.dumps(
            {
                "user_id": user_id,
                "platform": result.platform,
                "success": result.success,
                "status_code": result.status_code,
                "latency_ms": result.latency_ms,
                "error_type": result.error_type,
            },
            ensure_ascii=False,
        )
        if result.success:
            logger.info(line)
        else:
            logger.warning(line)

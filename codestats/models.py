from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass(frozen=True)
class FetchResult:
    platform: str
    handle: str
    success: bool
    status_code: Optional[int]
    latency_ms: int
    data: Optional[Dict[str, Any]]
    error_type: Optional[str]
    error: Optional[str] = None


@dataclass
class AggregatedStats:
    total_problems_solved: int = 0
    strongest_topics: List[str] = field(default_factory=list)
    weakest_topics: List[str] = field(default_factory=list)
    consistency_score: Optional[float] = None
    active_days_this_month: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total_problems_solved": self.total_problems_solved,
            "strongest_topics": list(self.strongest_topics),
            "weakest_topics": list(self.weakest_topics),
            "consistency_score": self.consistency_score,
            "active_days_this_month": self.active_days_this_month,
        }

    @classmethod
    def from_dict(cls, raw: Optional[Dict[str, Any]]) -> "AggregatedStats":
        raw = raw or {}
        return cls(
            total_problems_solved=int(raw.get("total_problems_solved") or 0),
            strongest_topics=list(raw.get("strongest_topics") or []),
            weakest_topics=list(raw.get("weakest_topics") or []),
            consistency_score=raw.get("consistency_score"),
            active_days_this_month=raw.get("active_days_this_month"),
        )


@dataclass
class AggregatedProfile:
    """One user's merged view of every connected platform.

    ``platforms`` maps a platform key to its slot, a plain dict whose shape
    depends on the platform. Slots are only created once a handle for that
    platform has been synced."""

    user_id: str
    platforms: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    aggregated_stats: AggregatedStats = field(default_factory=AggregatedStats)
    last_full_sync_at: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "user_id": self.user_id,
            "platforms": copy.deepcopy(self.platforms),
            "aggregated_stats": self.aggregated_stats.to_dict(),
            "last_full_sync_at": self.last_full_sync_at,
        }

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "AggregatedProfile":
        return cls(
            user_id=str(raw["user_id"]),
            platforms=copy.deepcopy(raw.get("platforms") or {}),
            aggregated_stats=AggregatedStats.from_dict(raw.get("aggregated_stats")),
            last_full_sync_at=raw.get("last_full_sync_at"),
        )


@dataclass(frozen=True)
class UserRecord:
    user_id: str
    platform_handles: Dict[str, str] = field(default_factory=dict)
    solved_problems: List[Dict[str, Any]] = field(default_factory=list)

    @classmethod
    def from_dict(cls, user_id: str, raw: Dict[str, Any]) -> "UserRecord":
        handles = {
            str(platform): str(handle).strip()
            for platform, handle in (raw.get("platform_handles") or {}).items()
            if handle is not None and str(handle).strip()
        }
        return cls(
            user_id=user_id,
            platform_handles=handles,
            solved_problems=list(raw.get("solved_problems") or []),
        )

    def solved_by_difficulty(self) -> Dict[str, int]:
        counts = {"easy": 0, "medium": 0, "hard": 0}
        for problem in self.solved_problems:
            difficulty = str(problem.get("difficulty", "")).lower()
            if difficulty in counts:
                counts[difficulty] += 1
        return counts


@dataclass(frozen=True)
class Submission:
    timestamp: Any
    status: str


@dataclass(frozen=True)
class StreakState:
    current_streak: int
    max_streak: int


@dataclass(frozen=True)
class AchievementDefinition:
    id: str
    name: str
    icon: str
    description: str
    metric: str
    target: int
    show_progress: bool = True
    cap_progress: bool = False


@dataclass(frozen=True)
class AchievementStatus:
    id: str
    name: str
    icon: str
    description: str
    unlocked: bool
    progress: Optional[int] = None
    target: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "icon": self.icon,
            "description": self.description,
            "unlocked": self.unlocked,
        }
        if self.target is not None:
            out["progress"] = self.progress
            out["target"] = self.target
        return out


@dataclass(frozen=True)
class MetricsSnapshot:
    window_secs: int
    total_fetches: int
    success_count: int
    timeout_count: int
    conn_error_count: int
    http_429_count: int
    http_403_count: int
    empty_count: int
    avg_latency_ms: float
    by_platform: Dict[str, Dict[str, int]]
    timestamp: float

"""Consecutive-day streaks and the achievement catalog.

Nothing here is persisted: every call derives streaks and unlocks from the
submission history and solved counts it is handed.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone
from typing import Any, Iterable, List, Mapping, Optional

from .models import AchievementDefinition, AchievementStatus, StreakState

ONE_DAY = timedelta(days=1)

ACHIEVEMENT_CATALOG = (
    AchievementDefinition(
        id="first-solve",
        name="First Solve",
        icon="🎯",
        description="Solved your first problem",
        metric="total_solved",
        target=1,
        show_progress=False,
    ),
    AchievementDefinition(
        id="streak-7",
        name="7-Day Streak",
        icon="🔥",
        description="7 days in a row",
        metric="current_streak",
        target=7,
        cap_progress=True,
    ),
    AchievementDefinition(
        id="easy-50",
        name="Easy Master",
        icon="🟢",
        description="Solved 50 easy problems",
        metric="easy_solved",
        target=50,
    ),
    AchievementDefinition(
        id="medium-25",
        name="Medium Warrior",
        icon="🟡",
        description="Solved 25 medium problems",
        metric="medium_solved",
        target=25,
    ),
    AchievementDefinition(
        id="hard-10",
        name="Hard Crusher",
        icon="🔴",
        description="Solved 10 hard problems",
        metric="hard_solved",
        target=10,
    ),
    AchievementDefinition(
        id="streak-30",
        name="30-Day Streak",
        icon="💪",
        description="30 days in a row",
        metric="current_streak",
        target=30,
        cap_progress=True,
    ),
)


def to_utc_date(value: Any) -> date:
    """Calendar date in UTC of a datetime, date or ISO-8601 string. Naive values are taken as UTC."""
    if isinstance(value, str):
        value = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.date()
        return value.astimezone(timezone.utc).date()
    if isinstance(value, date):
        return value
    raise TypeError(f"Unsupported timestamp type: {type(value).__name__}")


def compute_streak(timestamps: Iterable[Any], today: Optional[date] = None) -> StreakState:
    """Count consecutive active days ending today or yesterday.

    Walks unique dates newest first against an anchor that starts at today.
    A date equal to the anchor, or exactly one day before it, extends the
    streak and moves the anchor to the day before that date; anything else
    ends the walk. Dates after the anchor (clock skew) are ignored.
    """
    today = today or datetime.now(timezone.utc).date()
    dates = sorted({to_utc_date(ts) for ts in timestamps}, reverse=True)

    streak = 0
    anchor = today
    for day in dates:
        if day > anchor:
            continue
        if day == anchor:
            streak += 1
            anchor = anchor - ONE_DAY
        elif day == anchor - ONE_DAY:
            streak += 1
            anchor = day - ONE_DAY
        else:
            break

    # No historical maximum is tracked; the best streak is the current one.
    return StreakState(current_streak=streak, max_streak=streak)


def evaluate_achievements(
    solved: Mapping[str, int],
    streak: StreakState,
    catalog: Iterable[AchievementDefinition] = ACHIEVEMENT_CATALOG,
) -> List[AchievementStatus]:
    """Evaluate every catalog entry against a live snapshot of counts and streak.

    ``solved`` holds ``total_solved``, ``easy_solved``, ``medium_solved`` and
    ``hard_solved``; missing keys count as zero.
    """
    snapshot = {key: int(value or 0) for key, value in solved.items()}
    snapshot["current_streak"] = streak.current_streak

    statuses: List[AchievementStatus] = []
    for definition in catalog:
        value = snapshot.get(definition.metric, 0)
        unlocked = value >= definition.target
        if not definition.show_progress:
            statuses.append(
                AchievementStatus(
                    id=definition.id,
                    name=definition.name,
                    icon=definition.icon,
                    description=definition.description,
                    unlocked=unlocked,
                )
            )
            continue
        progress = min(value, definition.target) if definition.cap_progress else value
        statuses.append(
            AchievementStatus(
                id=definition.id,
                name=definition.name,
                icon=definition.icon,
                description=definition.description,
                unlocked=unlocked,
                progress=progress,
                target=definition.target,
            )
        )
    return statuses

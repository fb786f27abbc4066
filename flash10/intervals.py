"""Fixed review interval table indexed by stage."""

from __future__ import annotations

from typing import Sequence, Tuple

HOUR_MS = 60 * 60 * 1000
DAY_MS = 24 * HOUR_MS

# stage 0 is "new" and never a resting state once an item is stored
REVIEW_INTERVALS: Tuple[int, ...] = (
    0,
    1 * HOUR_MS,
    1 * DAY_MS,
    3 * DAY_MS,
    7 * DAY_MS,
)

MAX_STAGE = len(REVIEW_INTERVALS) - 1
FIRST_STAGE = 1


def _check_stage(stage: int, intervals: Sequence[int]) -> None:
    if not 0 <= stage < len(intervals):
        raise ValueError(f"stage must be in [0, {len(intervals) - 1}], got {stage}")


def interval_for(stage: int, intervals: Sequence[int] = REVIEW_INTERVALS) -> int:
    """Return the delay in milliseconds for *stage*."""

    _check_stage(stage, intervals)
    return int(intervals[stage])


def next_stage(stage: int, intervals: Sequence[int] = REVIEW_INTERVALS) -> int:
    """Return the stage reached after a mastered outcome, saturating at the top."""

    _check_stage(stage, intervals)
    return min(stage + 1, len(intervals) - 1)


def describe_stage(stage: int, intervals: Sequence[int] = REVIEW_INTERVALS) -> str:
    delay = interval_for(stage, intervals)
    if delay == 0:
        return "new"
    if delay % DAY_MS == 0:
        days = delay // DAY_MS
        return f"{days} day" if days == 1 else f"{days} days"
    if delay % HOUR_MS == 0:
        hours = delay // HOUR_MS
        return f"{hours} hour" if hours == 1 else f"{hours} hours"
    return f"{delay // 1000} seconds"


__all__ = [
    "DAY_MS",
    "FIRST_STAGE",
    "HOUR_MS",
    "MAX_STAGE",
    "REVIEW_INTERVALS",
    "describe_stage",
    "interval_for",
    "next_stage",
]

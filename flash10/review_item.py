"""Domain model for a learned word under review.

This module defines :class:`ReviewItem`, the record the scheduler keeps per
identity, together with the helpers that convert it to and from the JSON
records persisted by the review store. Timestamps are integer epoch
milliseconds throughout.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field, replace
from typing import Any, Dict, Mapping, Optional, Sequence

from flash10.intervals import FIRST_STAGE, REVIEW_INTERVALS, interval_for, next_stage


def _coerce_int(value: Any, name: str) -> int:
    if isinstance(value, bool):
        raise ValueError(f"{name} must be an integer")
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str) and value.strip().lstrip("-").isdigit():
        return int(value.strip())
    raise ValueError(f"{name} must be an integer, got {value!r}")


def copy_payload(payload: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
    """Return a deep copy of *payload* so the item owns its content."""

    if payload is None:
        return {}
    if not isinstance(payload, Mapping):
        raise TypeError("payload must be a mapping")
    return copy.deepcopy(dict(payload))


@dataclass
class ReviewItem:
    """Scheduling state for one identity.

    Parameters
    ----------
    identity:
        Canonical text of the learned word; unique within a store.
    payload:
        Display content. Never inspected by the scheduler.
    stage:
        Index into the interval table; ``1`` or more once stored.
    last_transition_at:
        Epoch milliseconds of the outcome that set the current stage.
    next_due_at:
        ``last_transition_at`` plus the interval for ``stage``.
    """

    identity: str
    payload: Dict[str, Any] = field(default_factory=dict)
    stage: int = FIRST_STAGE
    last_transition_at: int = 0
    next_due_at: int = 0

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------
    @classmethod
    def create(
        cls,
        identity: str,
        payload: Optional[Mapping[str, Any]],
        now: int,
        intervals: Sequence[int] = REVIEW_INTERVALS,
    ) -> "ReviewItem":
        """Build a freshly mastered item at the first stage."""

        return cls(
            identity=identity,
            payload=copy_payload(payload),
            stage=FIRST_STAGE,
            last_transition_at=now,
            next_due_at=now + interval_for(FIRST_STAGE, intervals),
        )

    def advance(
        self,
        now: int,
        intervals: Sequence[int] = REVIEW_INTERVALS,
        *,
        payload: Optional[Mapping[str, Any]] = None,
    ) -> "ReviewItem":
        """Return the item one stage further on, saturating at the last stage."""

        stage = next_stage(self.stage, intervals)
        return replace(
            self,
            payload=copy_payload(payload) if payload is not None else copy_payload(self.payload),
            stage=stage,
            last_transition_at=now,
            next_due_at=now + interval_for(stage, intervals),
        )

    def is_due(self, now: int) -> bool:
        return self.next_due_at <= now

    # ------------------------------------------------------------------
    # Serialisation helpers
    # ------------------------------------------------------------------
    @classmethod
    def from_storage(
        cls,
        record: Mapping[str, Any],
        intervals: Sequence[int] = REVIEW_INTERVALS,
    ) -> "ReviewItem":
        """Create an item from a persisted record.

        Accepts the current layout and the legacy browser export layout
        (``wordData`` / ``lastMasteredAt`` / ``nextReviewAt``).
        """

        if not isinstance(record, Mapping):
            raise ValueError("review record must be a mapping")

        payload = record.get("payload", record.get("wordData"))
        if payload is None:
            payload = {}
        if not isinstance(payload, Mapping):
            raise ValueError("review record payload must be a mapping")

        identity = record.get("identity") or payload.get("word")
        if not isinstance(identity, str) or not identity:
            raise ValueError("review record has no identity")

        stage = _coerce_int(record.get("stage"), "stage")
        if not 0 <= stage < len(intervals):
            raise ValueError(f"review record stage {stage} outside the interval table")

        last_transition = record.get("lastTransitionAt", record.get("lastMasteredAt"))
        next_due = record.get("nextDueAt", record.get("nextReviewAt"))

        return cls(
            identity=identity,
            payload=copy_payload(payload),
            stage=stage,
            last_transition_at=_coerce_int(last_transition, "lastTransitionAt"),
            next_due_at=_coerce_int(next_due, "nextDueAt"),
        )

    def to_storage_dict(self) -> Dict[str, Any]:
        """Serialise into the JSON friendly persisted layout."""

        return {
            "identity": self.identity,
            "payload": copy_payload(self.payload),
            "stage": int(self.stage),
            "lastTransitionAt": int(self.last_transition_at),
            "nextDueAt": int(self.next_due_at),
        }

    def display_identity(self) -> str:
        """Text shown in reminders; the payload's word when present."""

        word = self.payload.get("word") if isinstance(self.payload, Mapping) else None
        return str(word) if word else self.identity


__all__ = ["ReviewItem", "copy_payload"]

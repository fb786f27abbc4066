"""Fixed-stage spaced repetition scheduler.

Each mastered outcome moves a word one stage up the interval table
(saturating at the last stage). A failed review collapses the word back to
the first stage regardless of how far it had progressed. Every mutation is
a full load, single-item change and save cycle against the injected
:class:`ReviewStore`.
"""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence

from loguru import logger

from flash10.errors import PersistenceWriteError
from flash10.intervals import describe_stage, interval_for
from flash10.reminders import ReminderDispatcher
from flash10.review_item import ReviewItem
from flash10.review_store import ReviewStore


def _now_ms() -> int:
    return int(time.time() * 1000)


def _payload_dict(payload: Any) -> Optional[Mapping[str, Any]]:
    if payload is None:
        return None
    to_payload = getattr(payload, "to_payload", None)
    if callable(to_payload):
        return to_payload()
    if isinstance(payload, Mapping):
        return payload
    raise TypeError(f"payload must be a mapping or WordData, got {type(payload).__name__}")


@dataclass
class TransitionResult:
    """Outcome of ``record_mastered`` / ``record_failed``.

    ``item`` is the state the call attempted to store (``None`` for a no-op).
    When ``error`` is set the store still holds the previous state.
    """

    item: Optional[ReviewItem]
    changed: bool
    error: Optional[PersistenceWriteError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def saved(self) -> bool:
        return self.changed and self.error is None


@dataclass
class RemovalResult:
    identity: str
    removed: bool
    error: Optional[PersistenceWriteError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class ReviewScheduler:
    """Owns every mutation of a :class:`ReviewStore`."""

    def __init__(
        self,
        store: ReviewStore,
        *,
        intervals: Optional[Sequence[int]] = None,
        clock: Optional[Callable[[], int]] = None,
        reminders: Optional[ReminderDispatcher] = None,
    ) -> None:
        table = tuple(int(value) for value in (store.intervals if intervals is None else intervals))
        if len(table) < 2:
            raise ValueError("interval table needs at least a new stage and one review stage")
        # The store validates stored stages against its own table.
        if table != tuple(int(value) for value in store.intervals):
            raise ValueError(
                f"interval table {table} differs from the store's table {tuple(store.intervals)}"
            )
        self.store = store
        self.intervals = table
        self.clock = clock or _now_ms
        self.reminders = reminders
        self._lock = threading.RLock()

    @property
    def max_stage(self) -> int:
        return len(self.intervals) - 1

    def _resolve_now(self, now: Optional[int]) -> int:
        return int(now) if now is not None else int(self.clock())

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------
    def record_mastered(
        self,
        identity: str,
        payload: Any = None,
        *,
        now: Optional[int] = None,
    ) -> TransitionResult:
        """Create *identity* at the first stage or move it one stage up."""

        with self._lock:
            at = self._resolve_now(now)
            items = self.store.load()
            current = items.get(identity)
            content = _payload_dict(payload)
            if current is None:
                updated = ReviewItem.create(identity, content, at, self.intervals)
                logger.debug(f"Scheduled new item {identity!r} due at {updated.next_due_at}")
            else:
                updated = current.advance(at, self.intervals, payload=content)
                logger.debug(
                    f"Advanced {identity!r} from stage {current.stage} to {updated.stage} "
                    f"({describe_stage(updated.stage, self.intervals)}), due at {updated.next_due_at}"
                )
            items[identity] = updated
            return self._commit(items, updated)

    def record_failed(
        self,
        identity: str,
        payload: Any = None,
        *,
        now: Optional[int] = None,
    ) -> TransitionResult:
        """Reset a present item to the first stage; no-op when absent."""

        with self._lock:
            at = self._resolve_now(now)
            items = self.store.load()
            current = items.pop(identity, None)
            if current is None:
                logger.debug(f"Ignoring failed outcome for unknown item {identity!r}")
                return TransitionResult(item=None, changed=False)
            content = _payload_dict(payload)
            recreated = ReviewItem.create(
                identity,
                content if content is not None else current.payload,
                at,
                self.intervals,
            )
            items[identity] = recreated
            logger.debug(f"Reset {identity!r} from stage {current.stage} to {recreated.stage}")
            return self._commit(items, recreated)

    def remove(self, identity: str) -> RemovalResult:
        """Delete *identity* if present."""

        with self._lock:
            items = self.store.load()
            if identity not in items:
                return RemovalResult(identity=identity, removed=False)
            del items[identity]
            try:
                self.store.save(items)
            except PersistenceWriteError as exc:
                logger.warning(f"Removal of {identity!r} not persisted: {exc}")
                return RemovalResult(identity=identity, removed=False, error=exc)
            if self.reminders is not None:
                self.reminders.cancel(identity)
            logger.debug(f"Removed {identity!r}")
            return RemovalResult(identity=identity, removed=True)

    def _commit(self, items: Dict[str, ReviewItem], updated: ReviewItem) -> TransitionResult:
        try:
            self.store.save(items)
        except PersistenceWriteError as exc:
            logger.warning(f"Change to {updated.identity!r} not persisted: {exc}")
            return TransitionResult(item=updated, changed=True, error=exc)
        self._arm_reminder(updated)
        return TransitionResult(item=updated, changed=True)

    def _arm_reminder(self, item: ReviewItem) -> None:
        if self.reminders is not None:
            self.reminders.schedule_reminder(item, interval_for(item.stage, self.intervals))

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    def query_due(self, now: Optional[int] = None) -> List[ReviewItem]:
        """Return items with ``next_due_at <= now``, earliest first."""

        at = self._resolve_now(now)
        with self._lock:
            items = self.store.load()
        due = [item for item in items.values() if item.is_due(at)]
        due.sort(key=lambda item: (item.next_due_at, item.identity))
        return due

    def due_count(self, now: Optional[int] = None) -> int:
        return len(self.query_due(now))

    def get(self, identity: str) -> Optional[ReviewItem]:
        with self._lock:
            return self.store.load().get(identity)

    def items(self) -> List[ReviewItem]:
        """Every stored item ordered by due time."""

        with self._lock:
            items = list(self.store.load().values())
        items.sort(key=lambda item: (item.next_due_at, item.identity))
        return items


__all__ = ["RemovalResult", "ReviewScheduler", "TransitionResult"]

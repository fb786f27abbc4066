"""High level helpers that drive learning and review sessions."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence, Union

from loguru import logger

from flash10.review_item import ReviewItem
from flash10.scheduler import ReviewScheduler, TransitionResult
from flash10.word_data import Category, WordData
from flash10.word_import import SpreadsheetWordSource

LEARNING_BATCH_SIZE = 5


def _word_for(item: ReviewItem) -> WordData:
    payload = dict(item.payload)
    word = payload.get("word")
    if not isinstance(word, str) or not word.strip():
        payload["word"] = item.identity
    return WordData.from_payload(payload)


def _apply_outcome(
    scheduler: ReviewScheduler,
    word: WordData,
    mastered: bool,
    *,
    is_review: bool,
    now: Optional[int] = None,
    identity: Optional[str] = None,
) -> Optional[TransitionResult]:
    key = identity if identity is not None else word.identity
    if mastered:
        return scheduler.record_mastered(key, word, now=now)
    if is_review:
        return scheduler.record_failed(key, word, now=now)
    return None


async def submit_outcome(
    scheduler: ReviewScheduler,
    word: WordData,
    mastered: bool,
    *,
    is_review: bool,
    now: Optional[int] = None,
    identity: Optional[str] = None,
) -> Optional[TransitionResult]:
    """Record the learner's judgement for *word* off the event loop.

    Returns ``None`` when the outcome does not touch the store (a word not
    mastered during a learning session). *identity* overrides the key taken
    from ``word`` when the stored item is known under a different spelling.
    """

    return await asyncio.to_thread(
        _apply_outcome, scheduler, word, mastered, is_review=is_review, now=now, identity=identity
    )


def submit_outcome_sync(
    scheduler: ReviewScheduler,
    word: WordData,
    mastered: bool,
    *,
    is_review: bool,
    now: Optional[int] = None,
    identity: Optional[str] = None,
) -> Optional[TransitionResult]:
    """Synchronous wrapper around :func:`submit_outcome`."""

    return asyncio.run(
        submit_outcome(scheduler, word, mastered, is_review=is_review, now=now, identity=identity)
    )


@dataclass
class SessionSnapshot:
    total: int
    position: int
    mastered: int
    failed: int
    unsaved: int


class ReviewSession:
    """Walk a batch of words and report each outcome to the scheduler.

    In a learning session only mastered words are stored. In a review
    session a word that is not mastered is reset to the first stage.
    Outcomes are recorded under ``identities``, which default to each
    word's own identity; review sessions keep the stored item keys.
    """

    def __init__(
        self,
        scheduler: ReviewScheduler,
        words: Iterable[WordData],
        *,
        is_review: bool = False,
        identities: Optional[Sequence[str]] = None,
        category: Optional[Category] = None,
    ) -> None:
        self.scheduler = scheduler
        self.words: List[WordData] = list(words)
        if identities is None:
            self.identities = [word.identity for word in self.words]
        else:
            self.identities = list(identities)
            if len(self.identities) != len(self.words):
                raise ValueError("identities must match words one to one")
        self.is_review = is_review
        self.category = category
        self.position = 0
        self.mastered: List[WordData] = []
        self.failed: List[WordData] = []
        self.unsaved = 0

    @classmethod
    def from_due(cls, scheduler: ReviewScheduler, now: Optional[int] = None) -> "ReviewSession":
        due: List[ReviewItem] = scheduler.query_due(now)
        words = [_word_for(item) for item in due]
        logger.info(f"Starting review session with {len(words)} due word(s)")
        return cls(scheduler, words, is_review=True, identities=[item.identity for item in due])

    @classmethod
    def from_source(
        cls,
        scheduler: ReviewScheduler,
        source: SpreadsheetWordSource,
        category: Union[Category, str],
        count: int = LEARNING_BATCH_SIZE,
    ) -> "ReviewSession":
        """Start a learning session with a fresh batch from *source*.

        Raises :class:`GenerationError` when the source has nothing to offer.
        """

        resolved = Category.parse(category)
        words = source.fetch_batch(resolved, count)
        logger.info(f"Starting learning session with {len(words)} {resolved.value} word(s)")
        return cls(scheduler, words, category=resolved)

    @property
    def finished(self) -> bool:
        return self.position >= len(self.words)

    def current(self) -> Optional[WordData]:
        if self.finished:
            return None
        return self.words[self.position]

    def record(self, mastered: bool, *, now: Optional[int] = None) -> Optional[TransitionResult]:
        """Apply the judgement for the current word and move on."""

        word = self.current()
        if word is None:
            raise IndexError("session already finished")
        identity = self.identities[self.position]

        result = _apply_outcome(
            self.scheduler, word, mastered, is_review=self.is_review, now=now, identity=identity
        )
        if result is not None and not result.ok:
            self.unsaved += 1
            logger.warning(f"Progress for {identity!r} may not survive a restart")
        (self.mastered if mastered else self.failed).append(word)
        self.position += 1
        return result

    def snapshot(self) -> SessionSnapshot:
        return SessionSnapshot(
            total=len(self.words),
            position=self.position,
            mastered=len(self.mastered),
            failed=len(self.failed),
            unsaved=self.unsaved,
        )


def stage_counts(scheduler: ReviewScheduler) -> List[int]:
    """Number of stored items per stage, indexed by stage."""

    counts = [0] * len(scheduler.intervals)
    for item in scheduler.items():
        counts[item.stage] += 1
    return counts


__all__ = [
    "LEARNING_BATCH_SIZE",
    "ReviewSession",
    "SessionSnapshot",
    "stage_counts",
    "submit_outcome",
    "submit_outcome_sync",
]

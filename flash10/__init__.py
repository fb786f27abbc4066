"""Spaced repetition review scheduler for the Flash10 vocabulary app."""

from .intervals import MAX_STAGE, REVIEW_INTERVALS
from .review_item import ReviewItem
from .review_store import InMemoryReviewStore, JsonFileReviewStore, ReviewStore
from .scheduler import RemovalResult, ReviewScheduler, TransitionResult

__all__ = [
    "InMemoryReviewStore",
    "JsonFileReviewStore",
    "MAX_STAGE",
    "REVIEW_INTERVALS",
    "RemovalResult",
    "ReviewItem",
    "ReviewScheduler",
    "ReviewStore",
    "TransitionResult",
]

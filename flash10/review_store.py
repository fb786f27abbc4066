"""Durable storage for the full set of review items.

Every save writes a complete snapshot: a single named record holding the
serialised item list. This costs O(total items) per mutation, which is fine
for the hundreds of words a learner accumulates.
"""

from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Union

from loguru import logger

from flash10.config import STORAGE_KEY
from flash10.errors import PersistenceReadError, PersistenceWriteError
from flash10.intervals import REVIEW_INTERVALS
from flash10.review_item import ReviewItem

SNAPSHOT_VERSION = 1

ItemsLike = Union[Mapping[str, ReviewItem], Iterable[ReviewItem]]


# ---------------------------------------------------------------------------
# Snapshot codec
# ---------------------------------------------------------------------------

def _iter_items(items: ItemsLike) -> List[ReviewItem]:
    if isinstance(items, Mapping):
        return list(items.values())
    return list(items)


def encode_snapshot(items: ItemsLike, storage_key: str = STORAGE_KEY) -> bytes:
    """Encode *items* deterministically so equal state gives equal bytes."""

    records = [item.to_storage_dict() for item in sorted(_iter_items(items), key=lambda i: i.identity)]
    document = {"key": storage_key, "version": SNAPSHOT_VERSION, "items": records}
    return json.dumps(document, ensure_ascii=False, sort_keys=True, indent=2).encode("utf-8")


def decode_snapshot(
    raw: Union[bytes, str],
    storage_key: str = STORAGE_KEY,
    intervals: Sequence[int] = REVIEW_INTERVALS,
) -> Dict[str, ReviewItem]:
    """Decode a snapshot into an identity keyed mapping.

    A bare JSON list is read as the legacy browser export. Malformed
    individual records are skipped; a malformed document raises
    :class:`PersistenceReadError`.
    """

    try:
        document: Any = json.loads(raw)
    except (TypeError, ValueError) as exc:
        raise PersistenceReadError("Snapshot is not valid JSON", {"error": str(exc)}) from exc

    if isinstance(document, list):
        records: Any = document
    elif isinstance(document, Mapping):
        key = document.get("key", storage_key)
        if key != storage_key:
            raise PersistenceReadError(
                "Snapshot belongs to another storage key",
                {"expected": storage_key, "found": key},
            )
        records = document.get("items")
    else:
        raise PersistenceReadError("Snapshot has an unexpected shape", {"type": type(document).__name__})

    if not isinstance(records, list):
        raise PersistenceReadError("Snapshot item list is missing")

    items: Dict[str, ReviewItem] = {}
    for index, record in enumerate(records):
        try:
            item = ReviewItem.from_storage(record, intervals)
        except ValueError as exc:
            logger.warning(f"Skipping malformed review record #{index}: {exc}")
            continue
        if item.identity in items:
            logger.warning(f"Duplicate review record for {item.identity!r}; keeping the last one")
        items[item.identity] = item
    return items


# ---------------------------------------------------------------------------
# Stores
# ---------------------------------------------------------------------------

class ReviewStore:
    """Load/save contract shared by every storage backend.

    Subclasses implement :meth:`read_snapshot` and :meth:`write_snapshot`.
    """

    def __init__(
        self,
        *,
        storage_key: str = STORAGE_KEY,
        intervals: Sequence[int] = REVIEW_INTERVALS,
    ) -> None:
        self.storage_key = storage_key
        self.intervals = tuple(int(value) for value in intervals)

    def read_snapshot(self) -> Optional[bytes]:
        """Return the raw snapshot, ``None`` when nothing was ever saved."""

        raise NotImplementedError

    def write_snapshot(self, data: bytes) -> None:
        """Atomically replace the raw snapshot."""

        raise NotImplementedError

    def load(self) -> Dict[str, ReviewItem]:
        """Return persisted items; unreadable state is treated as empty."""

        try:
            raw = self.read_snapshot()
            if raw is None:
                return {}
            return decode_snapshot(raw, self.storage_key, self.intervals)
        except PersistenceReadError as exc:
            logger.warning(f"Review state unreadable, starting empty: {exc}")
            return {}

    def save(self, items: ItemsLike) -> None:
        """Persist a full snapshot of *items*.

        Raises :class:`PersistenceWriteError` when the backend rejects it.
        """

        self.write_snapshot(encode_snapshot(items, self.storage_key))


class JsonFileReviewStore(ReviewStore):
    """Snapshot kept in a single JSON file, replaced via a temporary file."""

    def __init__(self, path: Union[str, Path], **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self.path = Path(path)

    def read_snapshot(self) -> Optional[bytes]:
        if not self.path.exists():
            return None
        try:
            return self.path.read_bytes()
        except OSError as exc:
            raise PersistenceReadError("Cannot read review state", {"path": str(self.path)}) from exc

    def write_snapshot(self, data: bytes) -> None:
        tmp_name: Optional[str] = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=str(self.path.parent), prefix=f".{self.path.name}.", suffix=".tmp"
            )
            with os.fdopen(fd, "wb") as handle:
                handle.write(data)
                handle.flush()
                os.fsync(handle.fileno())
            os.replace(tmp_name, self.path)
            tmp_name = None
        except OSError as exc:
            raise PersistenceWriteError(
                "Cannot write review state", {"path": str(self.path), "error": str(exc)}
            ) from exc
        finally:
            if tmp_name is not None:
                try:
                    os.unlink(tmp_name)
                except OSError:
                    logger.debug(f"Could not remove temporary file {tmp_name}")


class InMemoryReviewStore(ReviewStore):
    """Process-local store keeping the encoded snapshot bytes.

    ``fail_writes`` makes every save raise, simulating a full quota.
    """

    def __init__(
        self,
        initial: Optional[Union[bytes, ItemsLike]] = None,
        *,
        fail_writes: bool = False,
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        self.fail_writes = fail_writes
        self.writes = 0
        if initial is None or isinstance(initial, bytes):
            self.snapshot: Optional[bytes] = initial
        else:
            self.snapshot = encode_snapshot(initial, self.storage_key)

    def read_snapshot(self) -> Optional[bytes]:
        return self.snapshot

    def write_snapshot(self, data: bytes) -> None:
        if self.fail_writes:
            raise PersistenceWriteError("Storage quota exceeded", {"bytes": len(data)})
        self.snapshot = data
        self.writes += 1


__all__ = [
    "InMemoryReviewStore",
    "JsonFileReviewStore",
    "ReviewStore",
    "SNAPSHOT_VERSION",
    "decode_snapshot",
    "encode_snapshot",
]

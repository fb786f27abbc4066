"""Convert an exported browser review queue into the JSON state file."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Dict, List, Optional

from loguru import logger

from flash10.config import load_settings
from flash10.errors import PersistenceWriteError
from flash10.review_item import ReviewItem
from flash10.review_store import JsonFileReviewStore, ReviewStore


def read_export(source: Path) -> Dict[str, ReviewItem]:
    """Parse a ``flash10_review_data`` export (a JSON list of queue entries)."""

    with source.open("r", encoding="utf-8") as handle:
        payload = json.load(handle)
    if isinstance(payload, dict) and "flash10_review_data" in payload:
        payload = payload["flash10_review_data"]
    if isinstance(payload, str):
        payload = json.loads(payload)
    if not isinstance(payload, list):
        raise ValueError(f"{source} does not contain a review queue list")

    items: Dict[str, ReviewItem] = {}
    for index, entry in enumerate(payload):
        try:
            item = ReviewItem.from_storage(entry)
        except ValueError as exc:
            logger.warning(f"Skipping entry #{index} in {source}: {exc}")
            continue
        items[item.identity] = item
    return items


def migrate_export(source: Path, store: ReviewStore, *, dry_run: bool = False) -> int:
    """Merge the export at *source* into *store*; returns the migrated count.

    Entries already present in the store are kept when they were reviewed
    more recently than the exported copy.
    """

    exported = read_export(source)
    merged = store.load()
    migrated = 0
    for identity, item in exported.items():
        existing = merged.get(identity)
        if existing is not None and existing.last_transition_at >= item.last_transition_at:
            continue
        merged[identity] = item
        migrated += 1
    if migrated and not dry_run:
        store.save(merged)
    return migrated


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Import an exported Flash10 browser review queue."
    )
    parser.add_argument("source", type=Path, help="JSON export of the browser review queue.")
    parser.add_argument(
        "--state-file",
        type=Path,
        default=None,
        help="Target state file (defaults to FLASH10_STATE_FILE or res/state/review_data.json).",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Report changes without writing the state file.",
    )
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    settings = load_settings()
    target = args.state_file or settings.state_file
    store = JsonFileReviewStore(target, storage_key=settings.storage_key)

    try:
        count = migrate_export(args.source, store, dry_run=args.dry_run)
    except (OSError, ValueError) as exc:
        print(f"Cannot read export {args.source}: {exc}", file=sys.stderr)
        return 1
    except PersistenceWriteError as exc:
        print(f"Cannot write {target}: {exc}", file=sys.stderr)
        return 1

    action = "would migrate" if args.dry_run else "migrated"
    if count:
        print(f"{action.capitalize()} {count} item(s) into {target}")
    else:
        print("No changes required.")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())

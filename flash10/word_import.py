"""Offline vocabulary source backed by Excel or CSV sheets.

Fulfils the same ``fetch_batch(category, count)`` contract as the remote
content generation service so sessions can be started without network
access.

Expected columns: ``word, phonetic, translation, definition, examples,
synonyms, mnemonic, category``. ``examples`` holds ``en|zh`` pairs and
``synonyms`` holds ``word:translation`` pairs, both separated by ``;``.
"""

from __future__ import annotations

import random
from pathlib import Path
from typing import Any, Iterable, List, Optional, Union

import pandas as pd

from flash10.errors import GenerationError
from flash10.word_data import Category, Synonym, WordData, WordExample

REQUIRED_COLUMNS = {"word"}


def _cell(row: Any, column: str) -> str:
    value = row.get(column)
    if value is None or pd.isna(value):
        return ""
    return str(value).strip()


def _split_examples(text: str) -> List[WordExample]:
    examples: List[WordExample] = []
    for chunk in text.split(";"):
        chunk = chunk.strip()
        if not chunk:
            continue
        en, _, zh = chunk.partition("|")
        examples.append(WordExample(en.strip(), zh.strip()))
    return examples


def _split_synonyms(text: str) -> List[Synonym]:
    synonyms: List[Synonym] = []
    for chunk in text.split(";"):
        chunk = chunk.strip()
        if not chunk:
            continue
        word, _, translation = chunk.partition(":")
        synonyms.append(Synonym(word.strip(), translation.strip()))
    return synonyms


class SpreadsheetWordSource:
    """Reads vocabulary rows from a spreadsheet on demand."""

    def __init__(self, path: Union[str, Path], *, rng: Optional[random.Random] = None) -> None:
        self.path = Path(path)
        self.rng = rng or random.Random()

    def _read_frame(self) -> pd.DataFrame:
        if not self.path.exists():
            raise GenerationError("Vocabulary sheet not found", {"path": str(self.path)})
        try:
            if self.path.suffix.lower() == ".csv":
                frame = pd.read_csv(self.path, dtype=str)
            else:
                frame = pd.read_excel(self.path, dtype=str)
        except (OSError, ValueError) as exc:
            raise GenerationError(
                "Vocabulary sheet unreadable", {"path": str(self.path), "error": str(exc)}
            ) from exc
        frame.columns = [str(column).strip().lower().rstrip(":") for column in frame.columns]
        missing = REQUIRED_COLUMNS - set(frame.columns)
        if missing:
            raise GenerationError(
                "Vocabulary sheet is missing columns", {"missing": sorted(missing)}
            )
        return frame

    def load_words(self, category: Optional[Category] = None) -> List[WordData]:
        """Return every word in the sheet, optionally filtered by *category*."""

        frame = self._read_frame()
        has_category = "category" in frame.columns
        words: List[WordData] = []
        for _, row in frame.iterrows():
            word = _cell(row, "word")
            if not word:
                continue
            if category is not None and has_category:
                raw_category = _cell(row, "category") or Category.GENERAL.value
                try:
                    if Category.parse(raw_category) is not category:
                        continue
                except ValueError:
                    continue
            words.append(
                WordData(
                    word=word,
                    phonetic=_cell(row, "phonetic"),
                    translation=_cell(row, "translation"),
                    definition=_cell(row, "definition"),
                    examples=_split_examples(_cell(row, "examples")),
                    synonyms=_split_synonyms(_cell(row, "synonyms")),
                    mnemonic=_cell(row, "mnemonic"),
                    image_url=_cell(row, "image_url") or None,
                )
            )
        return words

    def fetch_batch(
        self,
        category: Union[Category, str],
        count: int = 5,
        *,
        exclude: Iterable[str] = (),
    ) -> List[WordData]:
        """Pick up to *count* random words of *category*."""

        if count < 1:
            raise ValueError("count must be at least 1")
        resolved = Category.parse(category)
        skipped = set(exclude)
        candidates = [word for word in self.load_words(resolved) if word.identity not in skipped]
        if not candidates:
            raise GenerationError("No words available", {"category": resolved.value})
        if len(candidates) <= count:
            self.rng.shuffle(candidates)
            return candidates
        return self.rng.sample(candidates, count)


__all__ = ["SpreadsheetWordSource"]

"""Vocabulary payloads produced by content sources and shown to learners.

The scheduler treats these as opaque dictionaries. :class:`WordData` is the
typed view the presentation layer and content sources work with; it
converts to and from the JSON-friendly payload dictionaries stored with
each review item.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Sequence

from flash10.errors import GenerationError


class Category(str, Enum):
    TOEFL = "TOEFL"
    IELTS = "IELTS"
    GRE = "GRE"
    SAT = "SAT"
    GENERAL = "General"

    @classmethod
    def parse(cls, value: Any) -> "Category":
        """Resolve *value* case-insensitively against names and values."""

        if isinstance(value, Category):
            return value
        text = str(value or "").strip().lower()
        for member in cls:
            if text in (member.value.lower(), member.name.lower()):
                return member
        raise ValueError(f"Unknown category: {value!r}")


@dataclass
class WordExample:
    en: str
    zh: str = ""


@dataclass
class Synonym:
    word: str
    translation: str = ""


def _as_sequence(value: Any) -> Sequence[Any]:
    if isinstance(value, Sequence) and not isinstance(value, (str, bytes)):
        return value
    return []


@dataclass
class WordData:
    """A learned unit with its display content.

    Parameters
    ----------
    word:
        Canonical text of the word, used as the review identity.
    phonetic / translation / definition:
        Display strings shown on the card.
    examples:
        Example sentences with their translations.
    synonyms:
        Related words with their translations.
    mnemonic:
        Memory aid text.
    image_url:
        Optional illustration.
    """

    word: str
    phonetic: str = ""
    translation: str = ""
    definition: str = ""
    examples: List[WordExample] = field(default_factory=list)
    synonyms: List[Synonym] = field(default_factory=list)
    mnemonic: str = ""
    image_url: Optional[str] = None

    @property
    def identity(self) -> str:
        return self.word.strip()

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "WordData":
        """Create a :class:`WordData` from a stored or generated payload."""

        if not isinstance(payload, Mapping):
            raise GenerationError("Word payload must be a mapping", {"type": type(payload).__name__})
        word = str(payload.get("word") or "").strip()
        if not word:
            raise GenerationError("Word payload has no word", {"keys": sorted(payload)})

        examples: List[WordExample] = []
        for entry in _as_sequence(payload.get("examples")):
            if isinstance(entry, Mapping):
                examples.append(WordExample(str(entry.get("en") or ""), str(entry.get("zh") or "")))
            elif entry:
                examples.append(WordExample(str(entry)))

        synonyms: List[Synonym] = []
        for entry in _as_sequence(payload.get("synonyms")):
            if isinstance(entry, Mapping):
                synonyms.append(
                    Synonym(str(entry.get("word") or ""), str(entry.get("translation") or ""))
                )
            elif entry:
                synonyms.append(Synonym(str(entry)))

        image_url = payload.get("imageUrl", payload.get("image_url"))
        return cls(
            word=word,
            phonetic=str(payload.get("phonetic") or ""),
            translation=str(payload.get("translation") or ""),
            definition=str(payload.get("definition") or ""),
            examples=examples,
            synonyms=synonyms,
            mnemonic=str(payload.get("mnemonic") or ""),
            image_url=str(image_url) if image_url else None,
        )

    def to_payload(self) -> Dict[str, Any]:
        """Serialise into the dictionary stored as a review item's payload."""

        data: Dict[str, Any] = {
            "word": self.word,
            "phonetic": self.phonetic,
            "translation": self.translation,
            "definition": self.definition,
            "examples": [{"en": ex.en, "zh": ex.zh} for ex in self.examples],
            "synonyms": [{"word": syn.word, "translation": syn.translation} for syn in self.synonyms],
            "mnemonic": self.mnemonic,
        }
        if self.image_url:
            data["imageUrl"] = self.image_url
        return data


__all__ = ["Category", "Synonym", "WordData", "WordExample"]

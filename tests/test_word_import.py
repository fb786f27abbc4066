import random
import sys
from pathlib import Path

import pandas as pd
import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from flash10.errors import GenerationError
from flash10.word_data import Category, WordData
from flash10.word_import import SpreadsheetWordSource

ROWS = [
    {
        "word": "abate",
        "phonetic": "/əˈbeɪt/",
        "translation": "减轻",
        "definition": "to become less intense",
        "examples": "The storm abated.|暴风雨减弱了。;The pain abated.|疼痛减轻了。",
        "synonyms": "subside:平息;ease:缓和",
        "mnemonic": "a + bate",
        "category": "GRE",
    },
    {
        "word": "lucid",
        "phonetic": "",
        "translation": "清晰的",
        "definition": "clear",
        "examples": "",
        "synonyms": "",
        "mnemonic": "",
        "category": "gre",
    },
    {
        "word": "campus",
        "phonetic": "",
        "translation": "校园",
        "definition": "university grounds",
        "examples": "",
        "synonyms": "",
        "mnemonic": "",
        "category": "TOEFL",
    },
]


@pytest.fixture
def csv_sheet(tmp_path):
    path = tmp_path / "vocab.csv"
    pd.DataFrame(ROWS).to_csv(path, index=False)
    return path


def test_load_words_parses_examples_and_synonyms(csv_sheet):
    words = SpreadsheetWordSource(csv_sheet).load_words(Category.GRE)

    assert [word.word for word in words] == ["abate", "lucid"]
    abate = words[0]
    assert abate.examples[1].en == "The pain abated."
    assert abate.examples[1].zh == "疼痛减轻了。"
    assert [syn.word for syn in abate.synonyms] == ["subside", "ease"]
    assert words[1].examples == []


def test_fetch_batch_respects_count_and_exclusions(csv_sheet):
    source = SpreadsheetWordSource(csv_sheet, rng=random.Random(7))

    batch = source.fetch_batch("GRE", 1)
    assert len(batch) == 1
    assert batch[0].word in {"abate", "lucid"}

    remaining = source.fetch_batch(Category.GRE, 5, exclude={"abate"})
    assert [word.word for word in remaining] == ["lucid"]


def test_fetched_words_round_trip_through_payload(csv_sheet):
    word = SpreadsheetWordSource(csv_sheet).fetch_batch("TOEFL", 1)[0]
    assert WordData.from_payload(word.to_payload()) == word


def test_empty_category_raises(csv_sheet):
    with pytest.raises(GenerationError):
        SpreadsheetWordSource(csv_sheet).fetch_batch(Category.SAT, 3)


def test_missing_sheet_raises(tmp_path):
    with pytest.raises(GenerationError):
        SpreadsheetWordSource(tmp_path / "absent.csv").fetch_batch("GRE", 3)


def test_sheet_without_word_column_raises(tmp_path):
    path = tmp_path / "bad.csv"
    pd.DataFrame([{"term": "abate"}]).to_csv(path, index=False)
    with pytest.raises(GenerationError):
        SpreadsheetWordSource(path).load_words()


def test_invalid_count_and_category(csv_sheet):
    source = SpreadsheetWordSource(csv_sheet)
    with pytest.raises(ValueError):
        source.fetch_batch("GRE", 0)
    with pytest.raises(ValueError):
        source.fetch_batch("LSAT", 1)


def test_excel_sheet_is_supported(tmp_path):
    path = tmp_path / "vocab.xlsx"
    pd.DataFrame(ROWS).to_excel(path, index=False)

    words = SpreadsheetWordSource(path).load_words(Category.TOEFL)

    assert [word.word for word in words] == ["campus"]

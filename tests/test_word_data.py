import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from flash10.errors import GenerationError
from flash10.word_data import Category, Synonym, WordData, WordExample


def test_payload_uses_original_field_names():
    word = WordData(
        word="abate",
        phonetic="/əˈbeɪt/",
        translation="减轻",
        definition="to lessen",
        examples=[WordExample("The storm abated.", "暴风雨减弱了。")],
        synonyms=[Synonym("subside", "平息")],
        mnemonic="a + bate",
        image_url="https://example.com/abate.png",
    )

    payload = word.to_payload()

    assert payload["imageUrl"] == "https://example.com/abate.png"
    assert payload["examples"] == [{"en": "The storm abated.", "zh": "暴风雨减弱了。"}]
    assert WordData.from_payload(payload) == word


def test_from_payload_tolerates_sparse_content():
    word = WordData.from_payload({"word": "  lucid ", "examples": ["Plain sentence"], "synonyms": None})

    assert word.identity == "lucid"
    assert word.examples == [WordExample("Plain sentence", "")]
    assert word.synonyms == []
    assert word.image_url is None


@pytest.mark.parametrize("payload", [{}, {"word": ""}, {"word": None}, "abate"])
def test_from_payload_requires_a_word(payload):
    with pytest.raises(GenerationError):
        WordData.from_payload(payload)


@pytest.mark.parametrize("raw", ["general", "General", "GENERAL", Category.GENERAL])
def test_category_parse(raw):
    assert Category.parse(raw) is Category.GENERAL

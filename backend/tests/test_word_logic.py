from __future__ import annotations

import re
import sys
from pathlib import Path

import pytest

BASE_DIR = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(BASE_DIR))

import word_logic as logic_module  # noqa: E402
from word_logic import NO_EXAMPLE_TEXT, HistoryEntry, WordEntry  # noqa: E402


def make_payload(*meanings, word="lucid"):
    return [{"word": word, "meanings": list(meanings)}]


def test_normalize_prefers_definition_with_example():
    payload = make_payload(
        {"definitions": [{"definition": "Clear."}]},
        {
            "definitions": [
                {"definition": "Bright.", "example": ""},
                {"definition": "Easily understood.", "example": "A lucid account."},
                {"definition": "Rational.", "example": "A lucid moment."},
            ]
        },
    )

    entry = logic_module.normalize_dictionary_entry(payload)

    assert entry == WordEntry(
        word="lucid",
        meaning="Easily understood.",
        example="A lucid account.",
    )


def test_normalize_falls_back_to_first_definition_without_example():
    payload = make_payload(
        {"definitions": [{"definition": "Clear."}, {"definition": "Bright."}]},
        {"definitions": [{"definition": "Rational."}]},
    )

    entry = logic_module.normalize_dictionary_entry(payload)

    assert entry.meaning == "Clear."
    assert entry.example == NO_EXAMPLE_TEXT


@pytest.mark.parametrize(
    "payload",
    [
        [],
        None,
        {"title": "No Definitions Found"},
        [{"word": "zzz"}],
        [{"word": "zzz", "meanings": []}],
        [{"word": "zzz", "meanings": [{"definitions": []}]}],
        [{"word": "zzz", "meanings": [{"definitions": [{"example": "x"}]}]}],
        [{"word": "zzz", "meanings": ["not-a-dict"]}],
    ],
)
def test_normalize_returns_none_for_malformed_payloads(payload):
    assert logic_module.normalize_dictionary_entry(payload) is None


def test_fallback_words_cycle_from_start():
    assert logic_module.fallback_words(7) == [
        "apple",
        "sky",
        "river",
        "music",
        "light",
        "apple",
        "sky",
    ]


def test_today_key_format():
    assert re.fullmatch(r"\d{4}-\d{2}-\d{2}", logic_module.today_key("UTC"))


def test_set_timezone_rejects_unknown_zone():
    before = logic_module.get_timezone_name()
    with pytest.raises(KeyError):
        logic_module.set_timezone("Invalid/Timezone")
    assert logic_module.get_timezone_name() == before


def test_word_entry_from_dict_defaults_example():
    entry = WordEntry.from_dict({"word": " sky ", "meaning": "Above us."})

    assert entry.word == "sky"
    assert entry.example == NO_EXAMPLE_TEXT


def test_word_entry_from_dict_requires_meaning():
    with pytest.raises(ValueError, match="meaning must be a string"):
        WordEntry.from_dict({"word": "sky"})


def test_history_entry_round_trip():
    entry = HistoryEntry(date="2024-05-01", words=[WordEntry("sky", "Above us.")])

    assert HistoryEntry.from_dict(entry.to_dict()) == entry


def test_sanitize_settings_payload_rejects_non_positive_count():
    with pytest.raises(ValueError, match="dailyWordCount must be positive"):
        logic_module.sanitize_settings_payload({"dailyWordCount": 0})


def test_sanitize_settings_payload_rejects_bool_count():
    with pytest.raises(ValueError, match="dailyWordCount must be an integer"):
        logic_module.sanitize_settings_payload({"dailyWordCount": True})


def test_sanitize_topic_normalizes_case():
    assert logic_module.sanitize_topic("  Animals ") == "animals"


def test_sanitize_topic_rejects_query_characters():
    with pytest.raises(ValueError):
        logic_module.sanitize_topic("animals&max=1000")

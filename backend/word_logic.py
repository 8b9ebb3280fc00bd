from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional
from zoneinfo import ZoneInfo

DEFAULT_TIMEZONE = "UTC"
NO_EXAMPLE_TEXT = "No example available."
FALLBACK_WORDS = ["apple", "sky", "river", "music", "light"]

_TIMEZONE_NAME = DEFAULT_TIMEZONE


@dataclass(frozen=True)
class WordEntry:
    word: str
    meaning: str
    example: str = NO_EXAMPLE_TEXT

    def to_dict(self) -> Dict[str, str]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Any) -> "WordEntry":
        if not isinstance(data, dict):
            raise ValueError("word entry must be an object")
        example = data.get("example")
        if not isinstance(example, str) or not example.strip():
            example = NO_EXAMPLE_TEXT
        return cls(
            word=sanitize_text(data.get("word"), "word"),
            meaning=sanitize_text(data.get("meaning"), "meaning"),
            example=example.strip(),
        )

    def same_word_as(self, other: "WordEntry") -> bool:
        return self.word == other.word and self.meaning == other.meaning


@dataclass
class HistoryEntry:
    date: str
    words: List[WordEntry] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {"date": self.date, "words": [word.to_dict() for word in self.words]}

    @classmethod
    def from_dict(cls, data: Any) -> "HistoryEntry":
        if not isinstance(data, dict):
            raise ValueError("history entry must be an object")
        return cls(
            date=sanitize_text(data.get("date"), "date"),
            words=parse_word_entries(data.get("words") or []),
        )


def set_timezone(name: str) -> None:
    global _TIMEZONE_NAME
    ZoneInfo(name)
    _TIMEZONE_NAME = name


def get_timezone_name() -> str:
    return _TIMEZONE_NAME


def today_key(timezone_name: Optional[str] = None) -> str:
    """Calendar day used as the daily cache key, e.g. ``2024-05-01``."""
    now = datetime.now(ZoneInfo(timezone_name or _TIMEZONE_NAME))
    return now.strftime("%Y-%m-%d")


def fallback_words(count: int) -> List[str]:
    return [FALLBACK_WORDS[index % len(FALLBACK_WORDS)] for index in range(count)]


def _pick_definition(meanings: List[Any]) -> Optional[Dict[str, Any]]:
    for meaning in meanings:
        for definition in meaning.get("definitions") or []:
            if definition.get("example"):
                return definition
    for meaning in meanings:
        definitions = meaning.get("definitions") or []
        if definitions and definitions[0]:
            return definitions[0]
    return None


def normalize_dictionary_entry(payload: Any) -> Optional[WordEntry]:
    """Reduce a dictionaryapi.dev payload to a single WordEntry.

    A definition carrying an example wins over the first definition listed.
    Returns None for anything without a usable definition.
    """
    try:
        entry = payload[0] if isinstance(payload, list) and payload else None
        if not entry or not entry.get("meanings"):
            return None
        definition = _pick_definition(entry["meanings"])
        if not definition or not definition.get("definition"):
            return None
        return WordEntry(
            word=entry["word"],
            meaning=definition["definition"],
            example=definition.get("example") or NO_EXAMPLE_TEXT,
        )
    except (KeyError, IndexError, TypeError, AttributeError):
        return None


def parse_word_entries(raw: Any) -> List[WordEntry]:
    if not isinstance(raw, list):
        raise ValueError("words must be a list")
    return [WordEntry.from_dict(item) for item in raw]


def sanitize_text(value: Any, field: str) -> str:
    if not isinstance(value, str):
        raise ValueError(f"{field} must be a string")
    text = value.strip()
    if not text:
        raise ValueError(f"{field} is required")
    return text


def sanitize_int(value: Any, field: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{field} must be an integer")
    return value


def sanitize_bool(value: Any, field: str) -> bool:
    if not isinstance(value, bool):
        raise ValueError(f"{field} must be a boolean")
    return value


def sanitize_topic(value: Any) -> str:
    topic = sanitize_text(value, "topic").lower()
    if not all(char.isalpha() or char in " -" for char in topic):
        raise ValueError("topic must contain only letters, spaces or hyphens")
    return topic


def sanitize_settings_payload(payload: Any) -> Dict[str, Any]:
    if not isinstance(payload, dict):
        raise ValueError("settings must be an object")
    sanitized: Dict[str, Any] = {}
    if "darkMode" in payload:
        sanitized["darkMode"] = sanitize_bool(payload["darkMode"], "darkMode")
    if "dailyWordCount" in payload:
        count = sanitize_int(payload["dailyWordCount"], "dailyWordCount")
        if count <= 0:
            raise ValueError("dailyWordCount must be positive.")
        sanitized["dailyWordCount"] = count
    return sanitized

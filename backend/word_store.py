from __future__ import annotations

import json
import logging
from typing import Any, List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from models import StorageItem
from word_logic import HistoryEntry, WordEntry, parse_word_entries, today_key

DEFAULT_NAMESPACE = "default"
DEFAULT_DAILY_WORD_COUNT = 2

DARK_MODE_KEY = "darkMode"
DAILY_WORD_COUNT_KEY = "dailyWordCount"
LAST_DATE_KEY = "lastDate"
TODAY_WORDS_KEY = "todayWords"
HISTORY_KEY = "history"
FAVORITES_KEY = "favorites"

logger = logging.getLogger(__name__)


def _get_record(session: Session, namespace: str, key: str) -> Optional[StorageItem]:
    return session.scalar(
        select(StorageItem).where(
            StorageItem.namespace == namespace,
            StorageItem.key == key,
        )
    )


def get_item(session: Session, namespace: str, key: str) -> Optional[str]:
    record = _get_record(session, namespace, key)
    if record is None:
        return None
    return record.value


def set_item(session: Session, namespace: str, key: str, value: str) -> None:
    record = _get_record(session, namespace, key)
    if record is None:
        session.add(StorageItem(namespace=namespace, key=key, value=value))
    else:
        record.value = value
    session.commit()


def load_json(session: Session, namespace: str, key: str, default: Any) -> Any:
    raw_value = get_item(session, namespace, key)
    if raw_value is None:
        return default
    try:
        return json.loads(raw_value)
    except ValueError:
        logger.warning("Ignoring malformed JSON stored under %s/%s", namespace, key)
        return default


def save_json(session: Session, namespace: str, key: str, value: Any) -> None:
    set_item(session, namespace, key, json.dumps(value))


def _load_word_list(session: Session, namespace: str, key: str) -> List[WordEntry]:
    raw_words = load_json(session, namespace, key, [])
    try:
        return parse_word_entries(raw_words)
    except ValueError:
        logger.warning("Ignoring invalid word list stored under %s/%s", namespace, key)
        return []


def _save_word_list(
    session: Session, namespace: str, key: str, words: List[WordEntry]
) -> None:
    save_json(session, namespace, key, [word.to_dict() for word in words])


def get_last_date(session: Session, namespace: str) -> Optional[str]:
    return get_item(session, namespace, LAST_DATE_KEY)


def get_today_words(session: Session, namespace: str) -> List[WordEntry]:
    return _load_word_list(session, namespace, TODAY_WORDS_KEY)


def save_today_words(
    session: Session,
    namespace: str,
    words: List[WordEntry],
    date_key: Optional[str] = None,
) -> None:
    _save_word_list(session, namespace, TODAY_WORDS_KEY, words)
    set_item(session, namespace, LAST_DATE_KEY, date_key or today_key())


def get_history(session: Session, namespace: str) -> List[HistoryEntry]:
    raw_history = load_json(session, namespace, HISTORY_KEY, [])
    try:
        if not isinstance(raw_history, list):
            raise ValueError("history must be a list")
        return [HistoryEntry.from_dict(item) for item in raw_history]
    except ValueError:
        logger.warning("Ignoring invalid history stored under %s", namespace)
        return []


def push_today_to_history(
    session: Session,
    namespace: str,
    words: List[WordEntry],
    date_key: Optional[str] = None,
) -> List[HistoryEntry]:
    key = date_key or today_key()
    history = get_history(session, namespace)
    # newest first, so a same-day reload can only ever match entry 0
    if history and history[0].date == key:
        history[0].words = list(words)
    else:
        history.insert(0, HistoryEntry(date=key, words=list(words)))
    save_json(session, namespace, HISTORY_KEY, [entry.to_dict() for entry in history])
    return history


def get_favorites(session: Session, namespace: str) -> List[WordEntry]:
    return _load_word_list(session, namespace, FAVORITES_KEY)


def save_favorite(session: Session, namespace: str, entry: WordEntry) -> bool:
    favorites = get_favorites(session, namespace)
    if any(favorite.same_word_as(entry) for favorite in favorites):
        return False
    favorites.append(entry)
    _save_word_list(session, namespace, FAVORITES_KEY, favorites)
    return True


def get_daily_word_count(session: Session, namespace: str) -> int:
    raw_count = get_item(session, namespace, DAILY_WORD_COUNT_KEY)
    if raw_count is None:
        return DEFAULT_DAILY_WORD_COUNT
    try:
        count = int(raw_count)
    except ValueError:
        return DEFAULT_DAILY_WORD_COUNT
    if count <= 0:
        return DEFAULT_DAILY_WORD_COUNT
    return count


def set_daily_word_count(session: Session, namespace: str, count: int) -> None:
    set_item(session, namespace, DAILY_WORD_COUNT_KEY, str(count))


def get_dark_mode(session: Session, namespace: str) -> bool:
    return get_item(session, namespace, DARK_MODE_KEY) == "true"


def set_dark_mode(session: Session, namespace: str, enabled: bool) -> None:
    save_json(session, namespace, DARK_MODE_KEY, enabled)


def get_settings(session: Session, namespace: str) -> dict:
    return {
        DARK_MODE_KEY: get_dark_mode(session, namespace),
        DAILY_WORD_COUNT_KEY: get_daily_word_count(session, namespace),
    }


def update_settings(session: Session, namespace: str, settings: dict) -> dict:
    if DARK_MODE_KEY in settings:
        set_dark_mode(session, namespace, settings[DARK_MODE_KEY])
    if DAILY_WORD_COUNT_KEY in settings:
        set_daily_word_count(session, namespace, settings[DAILY_WORD_COUNT_KEY])
    return get_settings(session, namespace)

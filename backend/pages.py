from __future__ import annotations

import logging
import threading
from collections import OrderedDict
from dataclasses import dataclass, field
from typing import List, Optional

import requests
from sqlalchemy.orm import Session

import word_api
import word_store
from word_logic import HistoryEntry, WordEntry, today_key

WORD_CONTAINER = "wordContainer"
HISTORY_CONTAINER = "historyContainer"
FAVORITES_CONTAINER = "favoritesContainer"
CATEGORY_CONTAINER = "categoryContainer"

DAILY_WORDS_FAILED = "Could not load daily words. Try again."

logger = logging.getLogger(__name__)

MAX_TRACKED_NAMESPACES = 1000

# Last category view per namespace, oldest first; in-memory only, lost on restart.
_LAST_CATEGORIES: "OrderedDict[str, PageView]" = OrderedDict()
_LAST_CATEGORIES_LOCK = threading.Lock()


@dataclass
class PageView:
    container_id: str
    title: str
    words: List[WordEntry] = field(default_factory=list)
    history: List[HistoryEntry] = field(default_factory=list)
    message: Optional[str] = None
    topic: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "containerId": self.container_id,
            "title": self.title,
            "words": [word.to_dict() for word in self.words],
            "history": [entry.to_dict() for entry in self.history],
            "message": self.message,
            "topic": self.topic,
        }


def load_words(
    session: Session,
    namespace: str,
    date_key: Optional[str] = None,
) -> PageView:
    key = date_key or today_key()
    view = PageView(container_id=WORD_CONTAINER, title="Today's words")

    cached_words = word_store.get_today_words(session, namespace)
    if word_store.get_last_date(session, namespace) == key and cached_words:
        view.words = cached_words
        return view

    count = word_store.get_daily_word_count(session, namespace)
    try:
        words = word_api.fetch_valid_random_words(count)
    except requests.RequestException as exc:
        logger.error("Dictionary lookups failed: %s", exc)
        words = []
    if not words:
        view.message = DAILY_WORDS_FAILED
        return view

    word_store.save_today_words(session, namespace, words, key)
    word_store.push_today_to_history(session, namespace, words, key)
    view.words = words
    return view


def load_history(session: Session, namespace: str) -> PageView:
    history = word_store.get_history(session, namespace)
    view = PageView(container_id=HISTORY_CONTAINER, title="History", history=history)
    if not history:
        view.message = "No history yet."
    return view


def load_favorites(session: Session, namespace: str) -> PageView:
    favorites = word_store.get_favorites(session, namespace)
    view = PageView(
        container_id=FAVORITES_CONTAINER, title="Favorites", words=favorites
    )
    if not favorites:
        view.message = "No favorites yet."
    return view


def _remember_category(namespace: str, view: PageView) -> None:
    with _LAST_CATEGORIES_LOCK:
        _LAST_CATEGORIES[namespace] = view
        _LAST_CATEGORIES.move_to_end(namespace)
        while len(_LAST_CATEGORIES) > MAX_TRACKED_NAMESPACES:
            _LAST_CATEGORIES.popitem(last=False)


def load_category(namespace: str, topic: str) -> PageView:
    view = PageView(
        container_id=CATEGORY_CONTAINER, title=f"{topic.title()} words", topic=topic
    )
    _remember_category(namespace, view)
    try:
        words, used_fallback = word_api.fetch_category_words(topic)
    except (
        requests.RequestException,
        word_api.CategoryFetchError,
        ValueError,
        KeyError,
        TypeError,
    ) as exc:
        logger.error("Error loading category %s: %s", topic, exc)
        view.message = f"Could not load words for {topic}."
        return view
    if used_fallback:
        view.message = f"No valid words found for {topic}, showing random instead."
    view.words = words
    return view


def get_last_category_view(namespace: str) -> Optional[PageView]:
    """The category view last shown to ``namespace``, without fetching again."""
    with _LAST_CATEGORIES_LOCK:
        return _LAST_CATEGORIES.get(namespace)


def get_last_category(namespace: str) -> Optional[str]:
    view = get_last_category_view(namespace)
    if view is None:
        return None
    return view.topic


def refresh_category(namespace: str) -> Optional[PageView]:
    topic = get_last_category(namespace)
    if topic is None:
        return None
    return load_category(namespace, topic)

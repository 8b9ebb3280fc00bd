from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Any, List, Optional, Tuple
from urllib.parse import quote

import requests

from word_logic import WordEntry, fallback_words, normalize_dictionary_entry

RANDOM_WORD_API_URL = "https://random-word-api.herokuapp.com/word"
DICTIONARY_API_URL = "https://api.dictionaryapi.dev/api/v2/entries/en/{}"
DATAMUSE_API_URL = "https://api.datamuse.com/words"
REQUEST_TIMEOUT = 10
MAX_LOOKUP_WORKERS = 10
CATEGORY_QUERY_SIZE = 10
CATEGORY_WORD_LIMIT = 3
HEADERS = {"User-Agent": "daily-words/1.0"}

logger = logging.getLogger(__name__)


class CategoryFetchError(RuntimeError):
    pass


def fetch_random_words(count: int = 2) -> List[str]:
    try:
        response = requests.get(
            RANDOM_WORD_API_URL,
            params={"number": count},
            headers=HEADERS,
            timeout=REQUEST_TIMEOUT,
        )
        if not response.ok:
            raise ValueError(f"http {response.status_code}")
        words = response.json()
        if not isinstance(words, list):
            raise ValueError("unexpected response structure")
        return [str(word) for word in words]
    except (requests.RequestException, ValueError) as exc:
        logger.warning("Random word API failed, using fallback list: %s", exc)
        return fallback_words(count)


def fetch_dictionary_for(word: str) -> Optional[Any]:
    url = DICTIONARY_API_URL.format(quote(word.lower()))
    response = requests.get(url, headers=HEADERS, timeout=REQUEST_TIMEOUT)
    if not response.ok:
        # plenty of random words have no entry
        return None
    try:
        return response.json()
    except ValueError:
        return None


def lookup_word(word: str) -> Optional[WordEntry]:
    entry = normalize_dictionary_entry(fetch_dictionary_for(word))
    if entry is None:
        logger.info("No definition for: %s", word)
    return entry


def lookup_entries(words: List[str]) -> List[Optional[WordEntry]]:
    """Look up every word concurrently, preserving input order.

    Waits for the whole batch; the first lookup error is re-raised.
    """
    if not words:
        return []
    max_workers = min(MAX_LOOKUP_WORKERS, len(words))
    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        return list(executor.map(lookup_word, words))


def fetch_valid_random_words(count: int = 2, max_attempts: int = 5) -> List[WordEntry]:
    """Random words that have a dictionary definition.

    May return fewer than ``count`` entries; an empty list means every
    attempt came back without a single definable word.
    """
    for attempt in range(max_attempts):
        candidates = fetch_random_words(count * 3)
        logger.debug("Candidate randoms (attempt %d): %s", attempt + 1, candidates)
        valid_words = [entry for entry in lookup_entries(candidates) if entry]
        if valid_words:
            return valid_words[:count]
    logger.warning("No valid words after %d attempts", max_attempts)
    return []


def _fetch_category_query(params: dict) -> List[str]:
    response = requests.get(
        DATAMUSE_API_URL,
        params={**params, "max": CATEGORY_QUERY_SIZE, "v": "enwiki"},
        headers=HEADERS,
        timeout=REQUEST_TIMEOUT,
    )
    if not response.ok:
        raise CategoryFetchError("Failed to fetch category words")
    return [item["word"] for item in response.json()]


def fetch_category_candidates(topic: str) -> List[str]:
    with ThreadPoolExecutor(max_workers=2) as executor:
        by_topic = executor.submit(_fetch_category_query, {"topics": topic})
        means_like = executor.submit(_fetch_category_query, {"ml": topic})
        words = by_topic.result() + means_like.result()
    return list(dict.fromkeys(words))


def fetch_category_words(
    topic: str,
    limit: int = CATEGORY_WORD_LIMIT,
) -> Tuple[List[WordEntry], bool]:
    """Return ``(words, used_fallback)`` for a topic."""
    candidates = fetch_category_candidates(topic)
    valid_words = [entry for entry in lookup_entries(candidates) if entry]
    if not valid_words:
        logger.warning("No valid words found for %s, using random words", topic)
        return fetch_valid_random_words(limit), True
    return valid_words[:limit], False

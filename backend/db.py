from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Dict, Optional
from zoneinfo import ZoneInfoNotFoundError

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

import word_logic
import word_store
from models import Base

BASE_DIR = Path(__file__).resolve().parent
DB_CONFIG_FILE = BASE_DIR / "db_config.json"
DEFAULT_TIMEZONE = word_logic.DEFAULT_TIMEZONE

_ENGINE = None
_SESSIONMAKER: Optional[sessionmaker] = None


def load_db_config() -> Dict[str, Any]:
    if not DB_CONFIG_FILE.exists():
        raise FileNotFoundError("db_config.json is missing.")
    return json.loads(DB_CONFIG_FILE.read_text(encoding="utf-8"))


def build_db_url() -> str:
    db_url = os.environ.get("WOTD_DB_URL")
    if db_url:
        return db_url
    if DB_CONFIG_FILE.exists():
        config = load_db_config()
        if "driver" in config:
            return (
                f"{config['driver']}://{config['user']}:{config['password']}@"
                f"{config['host']}:{config['port']}/{config['database']}"
            )
    sqlite_path = BASE_DIR / "daily_words.sqlite"
    return f"sqlite:///{sqlite_path}"


def get_timezone_name() -> str:
    env_value = os.environ.get("WOTD_TIMEZONE", "").strip()
    if env_value:
        return env_value
    if DB_CONFIG_FILE.exists():
        configured = load_db_config().get("timezone")
        if isinstance(configured, str) and configured.strip():
            return configured.strip()
    return DEFAULT_TIMEZONE


def configure_timezone() -> str:
    name = get_timezone_name()
    try:
        word_logic.set_timezone(name)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise ValueError(f"Invalid timezone: {name}") from exc
    return name


def configure_database(db_url: Optional[str] = None) -> None:
    global _ENGINE, _SESSIONMAKER
    if db_url is None:
        db_url = build_db_url()
    configure_timezone()
    _ENGINE = create_engine(db_url, future=True, pool_pre_ping=True)
    _SESSIONMAKER = sessionmaker(bind=_ENGINE, expire_on_commit=False, future=True)
    Base.metadata.create_all(_ENGINE)


def rebuild_database(db_url: Optional[str] = None) -> None:
    if db_url is None:
        db_url = build_db_url()
    engine = create_engine(db_url, future=True, pool_pre_ping=True)
    Base.metadata.drop_all(engine)
    Base.metadata.create_all(engine)


def get_session() -> Session:
    if _SESSIONMAKER is None:
        configure_database()
    return _SESSIONMAKER()


def get_today_summary(session: Session, namespace: str) -> Dict[str, Any]:
    return {
        "namespace": namespace,
        "timezone": word_logic.get_timezone_name(),
        "lastDate": word_store.get_last_date(session, namespace),
        "todayWords": [
            word.to_dict() for word in word_store.get_today_words(session, namespace)
        ],
        "settings": word_store.get_settings(session, namespace),
    }


def _print_summary(session: Session, namespace: str) -> None:
    print(json.dumps(get_today_summary(session, namespace), indent=2, sort_keys=True))


def _print_history(session: Session, namespace: str) -> None:
    history = word_store.get_history(session, namespace)
    if not history:
        print("No history found.")
        return
    print("Date\tWords")
    for entry in history:
        print(f"{entry.date}\t{', '.join(word.word for word in entry.words)}")


def _print_favorites(session: Session, namespace: str) -> None:
    favorites = word_store.get_favorites(session, namespace)
    if not favorites:
        print("No favorites found.")
        return
    print("Word\tMeaning")
    for entry in favorites:
        print(f"{entry.word}\t{entry.meaning}")


def main() -> None:
    import argparse

    parser = argparse.ArgumentParser(description="Database utilities.")
    parser.add_argument(
        "command",
        choices=["rebuild", "show", "history", "favorites"],
        help="Command to execute.",
    )
    parser.add_argument(
        "--uid",
        default=word_store.DEFAULT_NAMESPACE,
        help="Client namespace to inspect.",
    )
    args = parser.parse_args()

    if args.command == "rebuild":
        rebuild_database()
        return

    with get_session() as session:
        if args.command == "show":
            _print_summary(session, args.uid)
        elif args.command == "history":
            _print_history(session, args.uid)
        elif args.command == "favorites":
            _print_favorites(session, args.uid)


if __name__ == "__main__":
    main()

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Optional

from flask import (
    Flask,
    flash,
    g,
    jsonify,
    redirect,
    render_template,
    request,
    url_for,
)
from flask_cors import CORS

import db
import pages
import word_store
from word_logic import (
    WordEntry,
    sanitize_settings_payload,
    sanitize_text,
    sanitize_topic,
)

BASE_DIR = Path(__file__).resolve().parent
MAX_UID_LENGTH = 64
UID_COOKIE = "uid"
UID_COOKIE_MAX_AGE = 365 * 24 * 60 * 60
DEFAULT_TOPICS = ["animals", "food", "nature", "music", "science", "sports"]

app = Flask(__name__, template_folder=str(BASE_DIR / "templates"))
app.secret_key = os.environ.get("WOTD_SECRET_KEY", "daily-words-dev")
CORS(app)


def resolve_namespace(payload: Optional[dict] = None) -> str:
    for source in (payload or {}, request.form, request.args):
        raw_uid = source.get("uid")
        if raw_uid is not None:
            uid = sanitize_uid(raw_uid)
            # persisted as a cookie for HTML pages by remember_uid
            g.explicit_uid = uid
            return uid
    raw_uid = request.cookies.get(UID_COOKIE)
    if raw_uid is not None:
        return sanitize_uid(raw_uid)
    return word_store.DEFAULT_NAMESPACE


def sanitize_uid(raw_uid: Any) -> str:
    uid = sanitize_text(raw_uid, "uid")
    if len(uid) > MAX_UID_LENGTH:
        raise ValueError(f"uid must be at most {MAX_UID_LENGTH} characters")
    return uid


@app.after_request
def remember_uid(response: Any) -> Any:
    if request.path.startswith("/api/"):
        return response
    uid = g.get("explicit_uid")
    if uid is not None and request.cookies.get(UID_COOKIE) != uid:
        response.set_cookie(
            UID_COOKIE, uid, max_age=UID_COOKIE_MAX_AGE, samesite="Lax"
        )
    return response


def render_page(view: pages.PageView, namespace: str) -> str:
    with db.get_session() as session:
        dark_mode = word_store.get_dark_mode(session, namespace)
    return render_template(
        "page.html",
        view=view,
        dark_mode=dark_mode,
        topics=DEFAULT_TOPICS,
        uid=namespace,
    )


@app.errorhandler(ValueError)
def handle_value_error(exc: ValueError) -> Any:
    return jsonify({"error": str(exc)}), 400


@app.get("/")
def index() -> Any:
    namespace = resolve_namespace()
    with db.get_session() as session:
        view = pages.load_words(session, namespace)
    return render_page(view, namespace)


@app.get("/history")
def history_page() -> Any:
    namespace = resolve_namespace()
    with db.get_session() as session:
        view = pages.load_history(session, namespace)
    return render_page(view, namespace)


@app.get("/favorites")
def favorites_page() -> Any:
    namespace = resolve_namespace()
    with db.get_session() as session:
        view = pages.load_favorites(session, namespace)
    return render_page(view, namespace)


@app.post("/favorites")
def add_favorite_from_card() -> Any:
    next_url = request.form.get("next", "")
    if not next_url.startswith("/") or next_url.startswith("//"):
        next_url = url_for("favorites_page")
    try:
        namespace = resolve_namespace()
        entry = WordEntry.from_dict(request.form.to_dict())
    except ValueError as exc:
        flash(str(exc))
        return redirect(next_url)
    with db.get_session() as session:
        word_store.save_favorite(session, namespace, entry)
    flash(f'Added "{entry.word}" to favorites!')
    return redirect(next_url)


@app.get("/categories")
def categories_page() -> Any:
    namespace = resolve_namespace()
    view = pages.PageView(
        container_id=pages.CATEGORY_CONTAINER,
        title="Categories",
        message="Pick a category.",
    )
    return render_page(view, namespace)


@app.get("/categories/current")
def current_category_page() -> Any:
    namespace = resolve_namespace()
    view = pages.get_last_category_view(namespace)
    if view is None:
        return redirect(url_for("categories_page"))
    return render_page(view, namespace)


@app.get("/categories/<topic>")
def category_page(topic: str) -> Any:
    namespace = resolve_namespace()
    try:
        topic = sanitize_topic(topic)
    except ValueError as exc:
        flash(str(exc))
        return redirect(url_for("categories_page"))
    view = pages.load_category(namespace, topic)
    return render_page(view, namespace)


@app.post("/categories/refresh")
def refresh_category_page() -> Any:
    namespace = resolve_namespace()
    view = pages.refresh_category(namespace)
    if view is None:
        return redirect(url_for("categories_page"))
    return render_page(view, namespace)


@app.route("/settings", methods=["GET", "POST"])
def settings_page() -> Any:
    namespace = resolve_namespace()
    if request.method == "POST":
        settings = {"darkMode": request.form.get("darkMode") == "on"}
        raw_count = request.form.get("dailyWordCount", "").strip()
        try:
            if raw_count:
                if not raw_count.lstrip("-").isdigit():
                    raise ValueError("dailyWordCount must be an integer")
                settings["dailyWordCount"] = int(raw_count)
            settings = sanitize_settings_payload(settings)
        except ValueError as exc:
            flash(str(exc))
            return redirect(url_for("settings_page", uid=namespace))
        with db.get_session() as session:
            word_store.update_settings(session, namespace, settings)
        flash("Settings saved.")
        return redirect(url_for("settings_page", uid=namespace))
    with db.get_session() as session:
        settings = word_store.get_settings(session, namespace)
    return render_template(
        "settings.html",
        settings=settings,
        dark_mode=settings["darkMode"],
        uid=namespace,
    )


@app.get("/api/words")
def get_words() -> Any:
    namespace = resolve_namespace()
    with db.get_session() as session:
        view = pages.load_words(session, namespace)
    if not view.words:
        return jsonify(view.to_dict()), 503
    return jsonify(view.to_dict())


@app.get("/api/history")
def get_history() -> Any:
    namespace = resolve_namespace()
    with db.get_session() as session:
        view = pages.load_history(session, namespace)
    return jsonify(view.to_dict())


@app.get("/api/favorites")
def get_favorites() -> Any:
    namespace = resolve_namespace()
    with db.get_session() as session:
        view = pages.load_favorites(session, namespace)
    return jsonify(view.to_dict())


@app.post("/api/favorites")
def post_favorite() -> Any:
    payload = request.get_json(silent=True) or {}
    try:
        namespace = resolve_namespace(payload)
        entry = WordEntry.from_dict(payload)
    except ValueError as exc:
        return jsonify({"error": str(exc)}), 400
    with db.get_session() as session:
        added = word_store.save_favorite(session, namespace, entry)
        favorites = word_store.get_favorites(session, namespace)
    return jsonify(
        {
            "added": added,
            "favorites": [favorite.to_dict() for favorite in favorites],
        }
    )


@app.get("/api/category")
def get_category() -> Any:
    namespace = resolve_namespace()
    topic = sanitize_topic(request.args.get("topic"))
    return jsonify(pages.load_category(namespace, topic).to_dict())


@app.post("/api/category/refresh")
def post_category_refresh() -> Any:
    payload = request.get_json(silent=True) or {}
    namespace = resolve_namespace(payload)
    view = pages.refresh_category(namespace)
    if view is None:
        return jsonify({"error": "No category selected yet."}), 404
    return jsonify(view.to_dict())


@app.get("/api/settings")
def get_settings() -> Any:
    namespace = resolve_namespace()
    with db.get_session() as session:
        return jsonify(word_store.get_settings(session, namespace))


@app.post("/api/settings")
def post_settings() -> Any:
    payload = request.get_json(silent=True) or {}
    try:
        namespace = resolve_namespace(payload)
        settings = sanitize_settings_payload(
            {key: payload[key] for key in ("darkMode", "dailyWordCount") if key in payload}
        )
    except ValueError as exc:
        return jsonify({"error": str(exc)}), 400
    with db.get_session() as session:
        return jsonify(word_store.update_settings(session, namespace, settings))


if __name__ == "__main__":
    logging.basicConfig(
        level=os.environ.get("WOTD_LOG_LEVEL", "INFO"),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    app.run(host="0.0.0.0", port=5000, debug=True)

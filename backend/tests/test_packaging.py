from __future__ import annotations

import sys
from pathlib import Path

import pytest

BASE_DIR = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(BASE_DIR))

import app as app_module  # noqa: E402

PYPROJECT = BASE_DIR.parent / "pyproject.toml"


def test_templates_live_next_to_app():
    template_dir = Path(app_module.app.template_folder)

    assert template_dir == Path(app_module.__file__).resolve().parent / "templates"
    for name in ("base.html", "page.html", "_cards.html", "settings.html"):
        assert (template_dir / name).is_file()


def test_templates_are_installed_with_modules():
    tomllib = pytest.importorskip("tomllib")
    config = tomllib.loads(PYPROJECT.read_text(encoding="utf-8"))
    setuptools_config = config["tool"]["setuptools"]

    assert "app" in setuptools_config["py-modules"]
    assert "templates" in setuptools_config["packages"]
    assert setuptools_config["package-data"]["templates"] == ["*.html"]

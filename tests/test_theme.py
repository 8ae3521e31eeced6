"""Tests for tracker/theme.py and tracker/storage.py."""

import pytest

from tracker.storage import THEME_KEY, FileStorage, MemoryStorage
from tracker.theme import load_theme, set_theme, toggle_theme


def test_theme_defaults_to_light(storage):
    assert load_theme(storage) == "light"
    storage.write(THEME_KEY, "purple")
    assert load_theme(storage) == "light"


def test_toggle_theme_persists(storage):
    assert toggle_theme(storage) == "dark"
    assert storage.read(THEME_KEY) == "dark"
    assert toggle_theme(storage) == "light"
    assert load_theme(storage) == "light"


def test_set_theme_rejects_unknown(storage):
    with pytest.raises(ValueError):
        set_theme("sepia", storage)
    assert storage.read(THEME_KEY) is None


def test_theme_in_workspace(workspace):
    assert toggle_theme() == "dark"
    assert (workspace / "data" / THEME_KEY).read_text(encoding="utf-8") == "dark"


def test_storage_rejects_path_like_keys(tmp_path):
    for storage in (MemoryStorage(), FileStorage(tmp_path)):
        for key in ("../escape", "a/b", "", ".hidden"):
            with pytest.raises(ValueError):
                storage.write(key, "x")

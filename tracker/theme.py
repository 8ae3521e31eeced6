"""Persisted light/dark theme preference."""

from __future__ import annotations

from tracker.storage import THEME_KEY, Storage
from tracker.workspace import default_storage

THEMES = ("light", "dark")
DEFAULT_THEME = "light"


def load_theme(storage: Storage | None = None) -> str:
    if storage is None:
        storage = default_storage()
    value = (storage.read(THEME_KEY) or "").strip()
    return value if value in THEMES else DEFAULT_THEME


def set_theme(theme: str, storage: Storage | None = None) -> str:
    if theme not in THEMES:
        raise ValueError(f"Unknown theme: {theme!r}")
    if storage is None:
        storage = default_storage()
    storage.write(THEME_KEY, theme)
    return theme


def toggle_theme(storage: Storage | None = None) -> str:
    if storage is None:
        storage = default_storage()
    current = load_theme(storage)
    return set_theme("light" if current == "dark" else "dark", storage)

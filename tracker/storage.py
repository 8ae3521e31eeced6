"""Key-value storage port for persisted tracker state.

Every persisted entity lives under its own key in a shared key-value
space. Components receive a storage object instead of touching the
filesystem directly, so tests can swap in :class:`MemoryStorage`.
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Protocol

from tracker.fileio import read_text, remove_file, write_text_atomic


STORE_KEY = "habit-tracker-v2"
THEME_KEY = "habit-tracker-theme"
TIMER_STATE_KEY = "timer-state"
TIMER_HISTORY_KEY = "timer-history"

_KEY_RE = re.compile(r"^[A-Za-z0-9][A-Za-z0-9._-]*$")


class Storage(Protocol):
    def read(self, key: str) -> str | None: ...

    def write(self, key: str, value: str) -> None: ...

    def delete(self, key: str) -> None: ...


def _check_key(key: str) -> str:
    if not isinstance(key, str) or not _KEY_RE.match(key):
        raise ValueError(f"Invalid storage key: {key!r}")
    return key


class MemoryStorage:
    """Dict-backed storage used by tests and throwaway sessions."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self.data: dict[str, str] = dict(initial or {})

    def read(self, key: str) -> str | None:
        return self.data.get(_check_key(key))

    def write(self, key: str, value: str) -> None:
        self.data[_check_key(key)] = value

    def delete(self, key: str) -> None:
        self.data.pop(_check_key(key), None)


class FileStorage:
    """One file per key inside *directory*, written atomically."""

    def __init__(self, directory: Path) -> None:
        self.directory = Path(directory)

    def path_for(self, key: str) -> Path:
        return self.directory / _check_key(key)

    def read(self, key: str) -> str | None:
        path = self.path_for(key)
        if not path.exists():
            return None
        return read_text(path)

    def write(self, key: str, value: str) -> None:
        write_text_atomic(self.path_for(key), value)

    def delete(self, key: str) -> None:
        remove_file(self.path_for(key))

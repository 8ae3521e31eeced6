"""Shared test fixtures for habit tracker tests."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
import yaml

from tracker.models import Habit, Store
from tracker.storage import STORE_KEY, MemoryStorage


@pytest.fixture
def workspace(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Create a temporary workspace with a UTC profile and a small stored store."""
    root = tmp_path / "workspace"
    (root / "data").mkdir(parents=True)

    profile = {"timezone": "UTC", "week_start": 1}
    (root / "profile.yaml").write_text(
        yaml.dump(profile, default_flow_style=False), encoding="utf-8"
    )

    store = {
        "habits": [
            {"id": "run", "name": "Run", "color": "bg-green-100", "icon": "🏃",
             "repeatDays": [0, 1, 2, 3, 4, 5, 6], "createdAt": "2024-01-01", "order": 0},
            {"id": "read", "name": "Read", "color": "bg-blue-100", "icon": "📖",
             "repeatDays": [1, 2, 3, 4, 5], "createdAt": "2024-01-01", "order": 1},
            {"id": "old", "name": "Old habit", "color": "bg-rose-100", "icon": "🗃",
             "repeatDays": [0, 1, 2, 3, 4, 5, 6], "createdAt": "2024-01-01", "order": 2,
             "archived": True},
        ],
        "completions": {
            "2024-01-03": ["run", "read"],
            "2024-01-04": ["run"],
        },
    }
    (root / "data" / STORE_KEY).write_text(json.dumps(store), encoding="utf-8")

    monkeypatch.setenv("TRACKER_ROOT", str(root))
    monkeypatch.delenv("TZ", raising=False)
    return root


@pytest.fixture
def storage() -> MemoryStorage:
    return MemoryStorage()


def make_habit(habit_id: str, repeat_days=range(7), created_at: str = "2024-01-01", order: int = 0, **kw) -> Habit:
    return Habit(
        id=habit_id,
        name=kw.pop("name", habit_id.title()),
        color=kw.pop("color", "bg-blue-100"),
        icon=kw.pop("icon", "✅"),
        repeat_days=set(repeat_days),
        created_at=created_at,
        order=order,
        **kw,
    )


def make_store(*habits: Habit, completions: dict[str, list[str]] | None = None) -> Store:
    return Store(
        habits=list(habits),
        completions={day: set(ids) for day, ids in (completions or {}).items()},
    )

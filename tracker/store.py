"""Loading, seeding and saving the persisted habit store."""

from __future__ import annotations

import json
import logging
import random
import secrets
from typing import Any

from tracker.dates import today
from tracker.models import EVERY_DAY, Habit, Store
from tracker.storage import STORE_KEY, Storage
from tracker.workspace import default_storage

logger = logging.getLogger(__name__)

PALETTE = [
    "bg-blue-100 dark:bg-blue-900/40",
    "bg-amber-100 dark:bg-amber-900/40",
    "bg-green-100 dark:bg-green-900/40",
    "bg-rose-100 dark:bg-rose-900/40",
    "bg-indigo-100 dark:bg-indigo-900/40",
    "bg-lime-100 dark:bg-lime-900/40",
]

STARTER_HABITS = [
    ("Work", "💼", "bg-blue-100 dark:bg-blue-900/40"),
    ("Study", "📚", "bg-purple-100 dark:bg-purple-900/40"),
    ("Art", "🎨", "bg-pink-100 dark:bg-pink-900/40"),
    ("Exercises", "💪", "bg-green-100 dark:bg-green-900/40"),
    ("Meditation", "🧘", "bg-indigo-100 dark:bg-indigo-900/40"),
    ("Journal", "📝", "bg-amber-100 dark:bg-amber-900/40"),
    ("Read", "📖", "bg-orange-100 dark:bg-orange-900/40"),
]


def new_id() -> str:
    return secrets.token_hex(4)


def pick_color() -> str:
    return random.choice(PALETTE)


def seed_store(day: str | None = None) -> Store:
    """Starter store: every starter habit due daily, empty ledger."""
    if day is None:
        day = today()
    habits = [
        Habit(
            id=new_id(),
            name=name,
            color=color,
            icon=icon,
            repeat_days=set(EVERY_DAY),
            created_at=day,
            order=i,
        )
        for i, (name, icon, color) in enumerate(STARTER_HABITS)
    ]
    return Store(habits=habits)


def _decode_store(data: Any) -> Store:
    if not isinstance(data, dict):
        raise ValueError("store payload is not an object")
    if not isinstance(data.get("habits"), list):
        raise ValueError("store payload has no habits list")
    if not isinstance(data.get("completions", {}), (dict, type(None))):
        raise ValueError("store completions is not an object")
    store = Store.from_dict(data)
    fallback = None
    seen: set[str] = set()
    habits = []
    for habit in store.habits:
        if habit.id in seen:
            logger.warning("Dropping stored habit with duplicate id %s (%s)", habit.id, habit.name)
            continue
        seen.add(habit.id)
        bad_days = habit.repeat_days - EVERY_DAY
        if bad_days:
            logger.warning("Habit %s: ignoring repeat days outside 0..6: %s", habit.id, sorted(bad_days))
            habit.repeat_days &= EVERY_DAY
        if not habit.created_at:
            fallback = fallback or today()
            habit.created_at = fallback
        habits.append(habit)
    store.habits = habits
    return store


def load_store(storage: Storage | None = None) -> Store:
    """Load the persisted store, seeding defaults when it is missing or unreadable.

    Stored ``order`` values are kept as-is even if they collide; habits
    without one get their position in the stored list.
    """
    if storage is None:
        storage = default_storage()

    raw = storage.read(STORE_KEY)
    if not raw or not raw.strip():
        logger.info("No stored habits, starting from the starter set")
        return seed_store()
    try:
        return _decode_store(json.loads(raw))
    except (ValueError, TypeError, KeyError, AttributeError) as exc:
        logger.warning("Stored habits could not be read (%s), starting from the starter set", exc)
        return seed_store()


def save_store(store: Store, storage: Storage | None = None) -> None:
    """Persist the full store in a single write."""
    if storage is None:
        storage = default_storage()
    storage.write(STORE_KEY, json.dumps(store.to_dict(), ensure_ascii=False))

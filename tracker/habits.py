"""Habit mutations: completions, create/save/delete/archive, reordering.

Every mutation updates the in-memory store and then saves it. After any
mutation the habits are sorted by ``order`` and their ``order`` values
are exactly 0..N-1.
"""

from __future__ import annotations

import dataclasses
import logging

from tracker.dates import parse_date, today
from tracker.models import EVERY_DAY, Habit, Store
from tracker.storage import Storage
from tracker.store import new_id, pick_color, save_store

logger = logging.getLogger(__name__)

DEFAULT_ICON = "✅"


# ── Helpers ───────────────────────────────────────────────────


def find_habit(store: Store, habit_id: str) -> Habit | None:
    for h in store.habits:
        if h.id == habit_id:
            return h
    return None


def _densify(store: Store) -> None:
    store.habits.sort(key=lambda h: h.order)
    for i, h in enumerate(store.habits):
        h.order = i


def _commit(store: Store, storage: Storage | None) -> None:
    _densify(store)
    save_store(store, storage)


def validate_habit(habit: Habit) -> list[str]:
    """Validate a habit and return list of errors (empty if valid)."""
    errors = []
    if not habit.id:
        errors.append("Missing required field: id")
    if not (habit.name or "").strip():
        errors.append("Name must not be empty")
    bad_days = [d for d in habit.repeat_days if d not in EVERY_DAY]
    if bad_days:
        errors.append(f"Invalid repeat days: {sorted(bad_days)}")
    if habit.created_at:
        try:
            parse_date(habit.created_at)
        except ValueError as exc:
            errors.append(str(exc))
    return errors


# ── Ledger ────────────────────────────────────────────────────


def toggle_completion(store: Store, day: str, habit_id: str, storage: Storage | None = None) -> bool:
    """Flip whether *habit_id* is done on *day*. Returns the new state."""
    parse_date(day)
    done = store.completions.setdefault(day, set())
    if habit_id in done:
        done.discard(habit_id)
        completed = False
    else:
        done.add(habit_id)
        completed = True
    if not done:
        del store.completions[day]
    _commit(store, storage)
    logger.info("Habit %s marked %s on %s", habit_id, "done" if completed else "not done", day)
    return completed


def clear_day(store: Store, day: str, storage: Storage | None = None) -> None:
    """Mark every habit incomplete on *day*."""
    parse_date(day)
    store.completions.pop(day, None)
    _commit(store, storage)
    logger.info("Cleared completions for %s", day)


# ── CRUD ──────────────────────────────────────────────────────


def create_draft(store: Store, day: str | None = None) -> Habit:
    """A new, unsaved habit due every day. Not added to *store*."""
    habit_id = new_id()
    while find_habit(store, habit_id) is not None:
        habit_id = new_id()
    return Habit(
        id=habit_id,
        name="",
        color=pick_color(),
        icon=DEFAULT_ICON,
        repeat_days=set(EVERY_DAY),
        created_at=day or today(),
        order=len(store.habits),
    )


def save_habit(store: Store, habit: Habit, storage: Storage | None = None) -> list[str]:
    """Insert or replace *habit*. Returns validation errors; nothing changes if any."""
    errors = validate_habit(habit)
    if errors:
        logger.info("Rejected habit %s: %s", habit.id or "(new)", "; ".join(errors))
        return errors

    saved = dataclasses.replace(habit, repeat_days=set(habit.repeat_days))
    existing = find_habit(store, habit.id)
    if existing is not None:
        saved.order = existing.order
        saved.created_at = existing.created_at
        position = next(i for i, h in enumerate(store.habits) if h is existing)
        store.habits[position] = saved
    else:
        if not saved.created_at:
            saved.created_at = today()
        saved.order = len(store.habits)
        store.habits.append(saved)
    _commit(store, storage)
    logger.info("Saved habit %s (%s)", saved.id, saved.name)
    return []


def delete_habit(store: Store, habit_id: str, storage: Storage | None = None) -> bool:
    """Remove a habit. Its past completions stay in the ledger."""
    habit = find_habit(store, habit_id)
    if habit is None:
        return False
    store.habits = [h for h in store.habits if h is not habit]
    _commit(store, storage)
    logger.info("Deleted habit %s (%s)", habit.id, habit.name)
    return True


def set_archived(store: Store, habit_id: str, archived: bool, storage: Storage | None = None) -> Habit | None:
    habit = find_habit(store, habit_id)
    if habit is None:
        return None
    habit.archived = bool(archived)
    _commit(store, storage)
    logger.info("Habit %s %s", habit.id, "archived" if habit.archived else "unarchived")
    return habit


def reorder(store: Store, from_index: int, to_index: int, storage: Storage | None = None) -> list[Habit]:
    """Move the habit at *from_index* to *to_index* (positions in ``order`` sequence)."""
    count = len(store.habits)
    for name, index in (("from_index", from_index), ("to_index", to_index)):
        if not isinstance(index, int) or isinstance(index, bool) or not 0 <= index < count:
            raise ValueError(f"{name} out of range: {index!r} (have {count} habits)")

    ordered = sorted(store.habits, key=lambda h: h.order)
    moved = ordered.pop(from_index)
    ordered.insert(to_index, moved)
    for i, h in enumerate(ordered):
        h.order = i
    store.habits = ordered
    _commit(store, storage)
    logger.info("Moved habit %s from %d to %d", moved.id, from_index, to_index)
    return ordered

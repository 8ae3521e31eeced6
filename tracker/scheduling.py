"""Scheduling predicate and completion-ledger lookups."""

from __future__ import annotations

from tracker.dates import weekday
from tracker.models import Habit, Store


def is_scheduled(habit: Habit, day: str) -> bool:
    """True when *habit* is due on *day*: weekday in its repeat set and not archived."""
    if habit.archived:
        return False
    return weekday(day) in habit.repeat_days


def has_completed(store: Store, day: str, habit_id: str) -> bool:
    return habit_id in store.completions.get(day, ())

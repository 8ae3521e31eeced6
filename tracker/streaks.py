"""Consecutive-completion streaks."""

from __future__ import annotations

from tracker.dates import add_days, parse_date
from tracker.models import Habit, Store
from tracker.scheduling import has_completed, is_scheduled

MAX_STREAK_DAYS = 3650


def compute_streak(store: Store, habit: Habit, from_day: str) -> int:
    """Count due-and-done days walking backward from *from_day*.

    Days the habit is not due are skipped without breaking the streak; the
    first due day that is not done ends it. The walk stops after examining
    the first day before ``habit.created_at``.
    """
    parse_date(from_day)
    if habit.archived or not habit.repeat_days:
        # Never due, so nothing can be counted.
        return 0

    streak = 0
    day = from_day
    while True:
        before_created = day < habit.created_at
        due = is_scheduled(habit, day)
        done = has_completed(store, day, habit.id)
        if due and done:
            streak += 1
        elif due:
            break
        if before_created or streak > MAX_STREAK_DAYS:
            break
        day = add_days(day, -1)
    return streak

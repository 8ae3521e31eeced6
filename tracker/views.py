"""Derived read views over the store.

Nothing here is cached or persisted; every view is recomputed from the
current store on each call. Ledger entries for deleted habits are ignored.
"""

from __future__ import annotations

import math
from typing import Any

from tracker.dates import month_range, week_range
from tracker.models import DayProgress, Habit, Store
from tracker.scheduling import has_completed, is_scheduled
from tracker.streaks import compute_streak

STATUS_FILTERS = {"all", "active", "archived"}


def sorted_habits(store: Store) -> list[Habit]:
    return sorted(store.habits, key=lambda h: h.order)


def visible_habits(store: Store, status: str = "all", query: str = "") -> list[Habit]:
    """Habits filtered by archive status and a case-insensitive name search."""
    if status not in STATUS_FILTERS:
        raise ValueError(f"Unknown status filter: {status!r}")
    needle = (query or "").lower()
    result = []
    for h in sorted_habits(store):
        if status == "active" and h.archived:
            continue
        if status == "archived" and not h.archived:
            continue
        if needle not in h.name.lower():
            continue
        result.append(h)
    return result


def scheduled_habits(store: Store, day: str) -> list[Habit]:
    return [h for h in sorted_habits(store) if is_scheduled(h, day)]


def _percent(done: int, total: int) -> int:
    if total <= 0:
        return 0
    return math.floor(done * 100 / total + 0.5)


def day_progress(store: Store, day: str) -> DayProgress:
    scheduled = scheduled_habits(store, day)
    done = [h for h in scheduled if has_completed(store, day, h.id)]
    return DayProgress(
        date=day,
        scheduled=len(scheduled),
        done=len(done),
        percent=_percent(len(done), len(scheduled)),
    )


def week_progress(store: Store, day: str, week_start: int = 1) -> list[DayProgress]:
    return [day_progress(store, d) for d in week_range(day, week_start)]


def month_grid(store: Store, day: str) -> dict[str, list[str]]:
    """Done habit ids per day of the month, restricted to existing habits."""
    known = {h.id for h in store.habits}
    return {
        d: sorted(i for i in store.completions.get(d, ()) if i in known)
        for d in month_range(day)
    }


def habit_streaks(store: Store, day: str) -> dict[str, int]:
    return {h.id: compute_streak(store, h, day) for h in sorted_habits(store)}


def habit_rows(store: Store, day: str, status: str = "all", query: str = "") -> list[dict[str, Any]]:
    """Habits with their per-day fields (scheduled, done, streak) for list views."""
    rows = []
    for h in visible_habits(store, status, query):
        row = h.to_dict()
        row["scheduled"] = is_scheduled(h, day)
        row["done"] = has_completed(store, day, h.id)
        row["streak"] = compute_streak(store, h, day)
        rows.append(row)
    return rows

"""Typed dataclasses for the habit tracker data model.

All models use from_dict/to_dict for JSON serialization.
camelCase in JSON is mapped to snake_case in Python.
Unknown keys are ignored; missing keys use defaults.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

EVERY_DAY = frozenset(range(7))


# ── Habits ────────────────────────────────────────────────────


@dataclass
class Habit:
    id: str = ""
    name: str = ""
    color: str = ""
    icon: str = ""
    repeat_days: set[int] = field(default_factory=lambda: set(EVERY_DAY))  # 0=Sunday
    created_at: str = ""  # ISO date
    order: int = 0
    archived: bool = False

    @classmethod
    def from_dict(cls, d: dict[str, Any], position: int = 0) -> Habit:
        """Build a habit; a missing ``order`` falls back to *position*."""
        order = d.get("order")
        repeat = d.get("repeatDays", d.get("repeat_days"))
        return cls(
            id=str(d["id"]),
            name=str(d.get("name", "")),
            color=str(d.get("color", "")),
            icon=str(d.get("icon", "")),
            repeat_days=set(EVERY_DAY) if repeat is None else {int(x) for x in repeat},
            created_at=str(d.get("createdAt", d.get("created_at", "")) or ""),
            order=position if order is None else int(order),
            archived=d.get("archived") is True,
        )

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "color": self.color,
            "icon": self.icon,
            "repeatDays": sorted(self.repeat_days),
            "createdAt": self.created_at,
            "order": self.order,
        }
        if self.archived:
            d["archived"] = True
        return d


@dataclass
class Store:
    habits: list[Habit] = field(default_factory=list)
    completions: dict[str, set[str]] = field(default_factory=dict)  # date -> habit ids

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> Store:
        habits = [Habit.from_dict(h, i) for i, h in enumerate(d.get("habits") or [])]
        completions: dict[str, set[str]] = {}
        for day, ids in (d.get("completions") or {}).items():
            done = {str(x) for x in (ids or [])}
            if done:
                completions[str(day)] = done
        return cls(habits=habits, completions=completions)

    def to_dict(self) -> dict[str, Any]:
        return {
            "habits": [h.to_dict() for h in self.habits],
            "completions": {
                day: sorted(ids)
                for day, ids in sorted(self.completions.items())
                if ids
            },
        }


@dataclass
class DayProgress:
    date: str = ""
    scheduled: int = 0
    done: int = 0
    percent: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "date": self.date,
            "scheduled": self.scheduled,
            "done": self.done,
            "percent": self.percent,
        }


# ── Timer ─────────────────────────────────────────────────────


def _ms_to_iso(ms: Any) -> str | None:
    if ms is None:
        return None
    return datetime.fromtimestamp(float(ms) / 1000, tz=timezone.utc).isoformat(timespec="milliseconds")


@dataclass
class TimerState:
    accumulated_seconds: int = 0
    is_running: bool = False
    run_start: str | None = None  # ISO instant, set only while running

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> TimerState:
        if not d or not isinstance(d, dict):
            return cls()
        if "accumulatedSeconds" in d:
            seconds = d.get("accumulatedSeconds")
            run_start = d.get("runStartWallClock")
        else:
            # Older payloads: {"time": seconds, "startTime": epoch ms}
            seconds = d.get("time")
            run_start = _ms_to_iso(d.get("startTime"))
        running = bool(d.get("isRunning", False))
        return cls(
            accumulated_seconds=max(0, int(seconds or 0)),
            is_running=running,
            run_start=str(run_start) if running and run_start else None,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "accumulatedSeconds": self.accumulated_seconds,
            "isRunning": self.is_running,
            "runStartWallClock": self.run_start,
        }


@dataclass
class TimerHistoryEntry:
    id: str = ""
    duration_seconds: int = 0
    saved_at: str = ""  # ISO instant
    saved_date: str = ""  # ISO date
    note: str = ""

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> TimerHistoryEntry:
        return cls(
            id=str(d["id"]),
            duration_seconds=int(d.get("durationSeconds", d.get("duration", 0))),
            saved_at=str(d.get("savedAtInstant", d.get("timestamp", ""))),
            saved_date=str(d.get("savedAtDate", d.get("date", ""))),
            note=str(d.get("note", "") or ""),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "durationSeconds": self.duration_seconds,
            "savedAtInstant": self.saved_at,
            "savedAtDate": self.saved_date,
            "note": self.note,
        }

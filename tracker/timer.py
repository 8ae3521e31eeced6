"""Session timer with wall-clock reconciliation and a capped history log.

The persisted state holds the seconds accumulated so far plus, while
running, the wall-clock instant they were last brought up to date. The
true elapsed time is always ``accumulated + (now - run_start)``, which is
what lets a running timer survive a process restart.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Any

from tracker.dates import iso_date
from tracker.models import TimerHistoryEntry, TimerState
from tracker.storage import TIMER_HISTORY_KEY, TIMER_STATE_KEY, Storage
from tracker.store import new_id
from tracker.workspace import default_storage

logger = logging.getLogger(__name__)

HISTORY_LIMIT = 10
WORKDAY_SECONDS = 8 * 3600


# ── Clock helpers ─────────────────────────────────────────────


def _now(now: datetime | None) -> datetime:
    if now is None:
        return datetime.now(timezone.utc)
    if now.tzinfo is None:
        return now.replace(tzinfo=timezone.utc)
    return now


def _instant(now: datetime) -> str:
    return now.isoformat(timespec="milliseconds")


def _parse_instant(value: str | None) -> datetime | None:
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        logger.warning("Ignoring unreadable timer anchor %r", value)
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def seconds_since(anchor: str | None, now: datetime) -> int:
    """Whole seconds from *anchor* to *now*; zero if the clock went backward."""
    start = _parse_instant(anchor)
    if start is None:
        return 0
    delta = int((now - start).total_seconds())
    if delta < 0:
        logger.warning("Wall clock moved backward by %ss since %s, not counting it", -delta, anchor)
        return 0
    return delta


def elapsed_seconds(state: TimerState, now: datetime | None = None) -> int:
    """Seconds to display: accumulated plus the running stretch."""
    if not state.is_running:
        return state.accumulated_seconds
    return state.accumulated_seconds + seconds_since(state.run_start, _now(now))


def timer_progress(seconds: int) -> dict[str, float]:
    """Share of an 8-hour workday, capped at 1, plus the overflow beyond it."""
    share = max(0, seconds) / WORKDAY_SECONDS
    return {
        "progress": min(share, 1.0),
        "overflow": max(share - 1.0, 0.0),
    }


# ── State persistence ─────────────────────────────────────────


def load_timer_state(storage: Storage | None = None) -> TimerState:
    """Persisted state as stored, without reconciliation."""
    if storage is None:
        storage = default_storage()
    raw = storage.read(TIMER_STATE_KEY)
    if not raw or not raw.strip():
        return TimerState()
    try:
        return TimerState.from_dict(json.loads(raw))
    except (ValueError, TypeError) as exc:
        logger.warning("Timer state could not be read (%s), starting idle", exc)
        return TimerState()


def _save_state(state: TimerState, storage: Storage) -> None:
    storage.write(TIMER_STATE_KEY, json.dumps(state.to_dict()))


# ── Transitions ───────────────────────────────────────────────


def restore_timer(storage: Storage | None = None, now: datetime | None = None) -> TimerState:
    """Reconcile the persisted state after a process start.

    A timer that was running keeps running: the wall-clock time that passed
    while nothing was ticking is folded into the accumulated seconds.
    """
    if storage is None:
        storage = default_storage()
    now = _now(now)
    state = load_timer_state(storage)
    if not state.is_running:
        return state

    if state.run_start:
        missed = seconds_since(state.run_start, now)
        state.accumulated_seconds += missed
        logger.info("Restored running timer, added %ss elapsed while stopped", missed)
    state.run_start = _instant(now)
    _save_state(state, storage)
    return state


def start_timer(storage: Storage | None = None, now: datetime | None = None) -> TimerState:
    if storage is None:
        storage = default_storage()
    state = load_timer_state(storage)
    if state.is_running:
        return state
    state.is_running = True
    state.run_start = _instant(_now(now))
    _save_state(state, storage)
    logger.info("Timer started at %ss", state.accumulated_seconds)
    return state


def apply_tick(state: TimerState, now: datetime | None = None) -> TimerState:
    """In-memory tick: add one second to a running *state* and move its anchor to *now*."""
    if state.is_running:
        state.accumulated_seconds += 1
        state.run_start = _instant(_now(now))
    return state


def tick_timer(storage: Storage | None = None, now: datetime | None = None) -> TimerState:
    """Add one second to the stored running timer and move its anchor to *now*."""
    if storage is None:
        storage = default_storage()
    state = load_timer_state(storage)
    if not state.is_running:
        return state
    apply_tick(state, now)
    _save_state(state, storage)
    return state


def pause_timer(storage: Storage | None = None, now: datetime | None = None) -> TimerState:
    if storage is None:
        storage = default_storage()
    state = load_timer_state(storage)
    if not state.is_running:
        return state
    state.accumulated_seconds = elapsed_seconds(state, now)
    state.is_running = False
    state.run_start = None
    _save_state(state, storage)
    logger.info("Timer paused at %ss", state.accumulated_seconds)
    return state


def reset_timer(storage: Storage | None = None) -> TimerState:
    """Back to idle at zero; the persisted state record is erased."""
    if storage is None:
        storage = default_storage()
    storage.delete(TIMER_STATE_KEY)
    logger.info("Timer reset")
    return TimerState()


def save_session(
    storage: Storage | None = None,
    now: datetime | None = None,
    note: str = "",
) -> TimerHistoryEntry | None:
    """Log the current session to history and reset. No-op at zero seconds."""
    if storage is None:
        storage = default_storage()
    now = _now(now)
    state = load_timer_state(storage)
    duration = elapsed_seconds(state, now)
    if duration <= 0:
        return None

    entry = TimerHistoryEntry(
        id=new_id(),
        duration_seconds=duration,
        saved_at=_instant(now),
        saved_date=iso_date(now),
        note=note,
    )
    history = [entry] + load_history(storage)
    _save_history(history[:HISTORY_LIMIT], storage)
    reset_timer(storage)
    logger.info("Saved timer session %s (%ss)", entry.id, duration)
    return entry


# ── History ───────────────────────────────────────────────────


def load_history(storage: Storage | None = None) -> list[TimerHistoryEntry]:
    """Saved sessions, most recent first. Unreadable entries are dropped."""
    if storage is None:
        storage = default_storage()
    raw = storage.read(TIMER_HISTORY_KEY)
    if not raw or not raw.strip():
        return []
    try:
        data: Any = json.loads(raw)
    except ValueError as exc:
        logger.warning("Timer history could not be read (%s), starting empty", exc)
        return []
    if not isinstance(data, list):
        logger.warning("Timer history is not a list, starting empty")
        return []

    history = []
    for item in data:
        try:
            history.append(TimerHistoryEntry.from_dict(item))
        except (KeyError, TypeError, ValueError, AttributeError):
            logger.warning("Dropping unreadable timer history entry: %r", item)
    return history[:HISTORY_LIMIT]


def _save_history(history: list[TimerHistoryEntry], storage: Storage) -> None:
    storage.write(TIMER_HISTORY_KEY, json.dumps([e.to_dict() for e in history], ensure_ascii=False))


def delete_history_entry(entry_id: str, storage: Storage | None = None) -> bool:
    if storage is None:
        storage = default_storage()
    history = load_history(storage)
    remaining = [e for e in history if e.id != entry_id]
    if len(remaining) == len(history):
        return False
    _save_history(remaining, storage)
    return True


def update_entry_note(entry_id: str, note: str, storage: Storage | None = None) -> TimerHistoryEntry | None:
    """Replace the note of one history entry; order and other fields are kept."""
    if storage is None:
        storage = default_storage()
    history = load_history(storage)
    for entry in history:
        if entry.id == entry_id:
            entry.note = note
            _save_history(history, storage)
            return entry
    return None

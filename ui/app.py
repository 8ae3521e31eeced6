from __future__ import annotations

import os
import secrets
import threading
from contextlib import asynccontextmanager
from typing import Any

from fastapi import Body, Depends, FastAPI, HTTPException, Request, status
from fastapi.security import HTTPBasic, HTTPBasicCredentials

from tracker import (
    Habit,
    TimerRunner,
    clear_day as core_clear_day,
    configure_logging,
    compute_streak,
    create_draft,
    day_progress,
    default_storage,
    delete_habit as core_delete_habit,
    delete_history_entry,
    find_habit,
    get_week_start,
    habit_rows,
    load_history,
    load_profile,
    load_store,
    load_theme,
    month_grid,
    month_range,
    parse_date,
    reorder as core_reorder,
    save_habit as core_save_habit,
    set_archived as core_set_archived,
    today_str,
    toggle_completion as core_toggle_completion,
    toggle_theme,
    update_entry_note,
    update_profile,
    week_progress,
)


# ── App & lifecycle ───────────────────────────────────────────


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging()
    runner = TimerRunner(default_storage())
    runner.restore()
    app.state.timer = runner
    try:
        yield
    finally:
        runner.shutdown()


app = FastAPI(title="Habit Tracker", version="0.1.0", lifespan=lifespan)

# Sync endpoints run in a thread pool; load-mutate-save of stored data must not interleave.
_store_lock = threading.Lock()

security = HTTPBasic(auto_error=False)


def _configured_login() -> tuple[str, str] | None:
    """The (username, password) pair from the environment, or None when auth is off."""
    username = os.environ.get("TRACKER_USERNAME", "")
    password = os.environ.get("TRACKER_PASSWORD", "")
    if username and password:
        return username, password
    return None


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Basic"},
    )


def get_current_user(credentials: HTTPBasicCredentials | None = Depends(security)) -> str:
    login = _configured_login()
    if login is None:
        return "guest"
    if credentials is None:
        raise _unauthorized("Not authenticated")

    given = (credentials.username.encode("utf-8"), credentials.password.encode("utf-8"))
    matches = [secrets.compare_digest(g, e.encode("utf-8")) for g, e in zip(given, login)]
    if not all(matches):
        raise _unauthorized("Invalid credentials")
    return credentials.username


def _day(value: str | None) -> str:
    """Validate a path/query date, defaulting to today."""
    if not value:
        return today_str()
    try:
        parse_date(value)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return value


def _runner(request: Request) -> TimerRunner:
    return request.app.state.timer


@app.get("/healthz")
def healthz() -> dict[str, str]:
    return {"ok": "true"}


# ── Profile ───────────────────────────────────────────────────


@app.get("/api/profile")
def api_get_profile(username: str = Depends(get_current_user)) -> dict[str, Any]:
    return load_profile() or {}


@app.put("/api/profile")
def api_update_profile(payload: dict[str, Any] = Body(...), username: str = Depends(get_current_user)) -> dict[str, Any]:
    """Update timezone and/or week start."""
    updates = {k: v for k, v in payload.items() if k in {"timezone", "week_start"}}
    if not updates:
        raise HTTPException(status_code=400, detail="Nothing to update (timezone, week_start)")
    if "week_start" in updates:
        if not isinstance(updates["week_start"], int) or not 0 <= updates["week_start"] <= 6:
            raise HTTPException(status_code=400, detail="week_start must be an integer 0..6")
    return update_profile(updates)


# ── Habits ────────────────────────────────────────────────────


@app.get("/api/habits")
def api_list_habits(
    day: str | None = None,
    filter: str = "all",
    query: str = "",
    username: str = Depends(get_current_user),
) -> dict[str, Any]:
    """Habits with scheduled/done/streak for a day."""
    day = _day(day)
    store = load_store()
    try:
        rows = habit_rows(store, day, filter, query)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"day": day, "habits": rows, "progress": day_progress(store, day).to_dict()}


@app.post("/api/habits/draft")
def api_new_draft(username: str = Depends(get_current_user)) -> dict[str, Any]:
    """A fresh unsaved habit to edit."""
    store = load_store()
    return {"habit": create_draft(store, today_str()).to_dict()}


@app.post("/api/habits")
def api_save_habit(payload: dict[str, Any] = Body(...), username: str = Depends(get_current_user)) -> dict[str, Any]:
    """Create or update a habit."""
    try:
        habit = Habit.from_dict(payload)
    except (KeyError, TypeError, ValueError) as e:
        raise HTTPException(status_code=400, detail=f"Invalid habit payload: {e}")
    with _store_lock:
        store = load_store()
        errors = core_save_habit(store, habit)
    if errors:
        raise HTTPException(status_code=400, detail="; ".join(errors))
    saved = find_habit(store, habit.id)
    return {"ok": True, "habit": saved.to_dict() if saved else None}


@app.delete("/api/habits/{habit_id}")
def api_delete_habit(habit_id: str, username: str = Depends(get_current_user)) -> dict[str, Any]:
    """Delete a habit; its past completions are kept."""
    with _store_lock:
        store = load_store()
        deleted = core_delete_habit(store, habit_id)
    return {"ok": deleted, "habit_id": habit_id}


@app.post("/api/habits/{habit_id}/archive")
def api_archive_habit(habit_id: str, payload: dict[str, Any] = Body(default={}), username: str = Depends(get_current_user)) -> dict[str, Any]:
    """Archive or unarchive a habit (toggles when "archived" is omitted)."""
    with _store_lock:
        store = load_store()
        habit = find_habit(store, habit_id)
        if habit is None:
            return {"ok": False, "habit_id": habit_id}
        archived = payload.get("archived", not habit.archived)
        updated = core_set_archived(store, habit_id, bool(archived))
    return {"ok": True, "habit": updated.to_dict() if updated else None}


@app.post("/api/habits/reorder")
def api_reorder(payload: dict[str, Any] = Body(...), username: str = Depends(get_current_user)) -> dict[str, Any]:
    with _store_lock:
        store = load_store()
        try:
            ordered = core_reorder(store, payload.get("from_index"), payload.get("to_index"))
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))
    return {"ok": True, "habits": [h.to_dict() for h in ordered]}


@app.get("/api/habits/{habit_id}/streak")
def api_streak(habit_id: str, day: str | None = None, username: str = Depends(get_current_user)) -> dict[str, Any]:
    day = _day(day)
    store = load_store()
    habit = find_habit(store, habit_id)
    if habit is None:
        raise HTTPException(status_code=404, detail=f"Habit not found: {habit_id}")
    return {"habit_id": habit_id, "day": day, "streak": compute_streak(store, habit, day)}


# ── Completions ───────────────────────────────────────────────


@app.post("/api/completions/toggle")
def api_toggle(payload: dict[str, Any] = Body(...), username: str = Depends(get_current_user)) -> dict[str, Any]:
    habit_id = payload.get("habit_id")
    if not habit_id:
        raise HTTPException(status_code=400, detail="Missing habit_id")
    day = _day(payload.get("day"))
    with _store_lock:
        store = load_store()
        done = core_toggle_completion(store, day, str(habit_id))
    return {"ok": True, "day": day, "habit_id": habit_id, "done": done, "progress": day_progress(store, day).to_dict()}


@app.post("/api/completions/clear")
def api_clear_day(payload: dict[str, Any] = Body(default={}), username: str = Depends(get_current_user)) -> dict[str, Any]:
    day = _day(payload.get("day"))
    with _store_lock:
        store = load_store()
        core_clear_day(store, day)
    return {"ok": True, "day": day}


# ── Calendar views ────────────────────────────────────────────


@app.get("/api/day/{day}")
def api_day(day: str, username: str = Depends(get_current_user)) -> dict[str, Any]:
    day = _day(day)
    return day_progress(load_store(), day).to_dict()


@app.get("/api/week/{day}")
def api_week(day: str, username: str = Depends(get_current_user)) -> dict[str, Any]:
    day = _day(day)
    store = load_store()
    return {"days": [p.to_dict() for p in week_progress(store, day, get_week_start())]}


@app.get("/api/month/{day}")
def api_month(day: str, username: str = Depends(get_current_user)) -> dict[str, Any]:
    day = _day(day)
    store = load_store()
    return {"days": month_range(day), "completions": month_grid(store, day)}


# ── Timer ─────────────────────────────────────────────────────
# Timer endpoints are async so they share the event loop thread with the ticker.


@app.get("/api/timer")
async def api_timer(request: Request, username: str = Depends(get_current_user)) -> dict[str, Any]:
    return _runner(request).status()


@app.post("/api/timer/start")
async def api_timer_start(request: Request, username: str = Depends(get_current_user)) -> dict[str, Any]:
    runner = _runner(request)
    runner.start()
    return runner.status()


@app.post("/api/timer/pause")
async def api_timer_pause(request: Request, username: str = Depends(get_current_user)) -> dict[str, Any]:
    runner = _runner(request)
    runner.pause()
    return runner.status()


@app.post("/api/timer/reset")
async def api_timer_reset(request: Request, username: str = Depends(get_current_user)) -> dict[str, Any]:
    runner = _runner(request)
    runner.reset()
    return runner.status()


@app.post("/api/timer/save")
async def api_timer_save(request: Request, payload: dict[str, Any] = Body(default={}), username: str = Depends(get_current_user)) -> dict[str, Any]:
    runner = _runner(request)
    entry = runner.save(note=str(payload.get("note", "")))
    return {"ok": entry is not None, "entry": entry.to_dict() if entry else None, "timer": runner.status()}


@app.get("/api/timer/history")
async def api_timer_history(request: Request, username: str = Depends(get_current_user)) -> dict[str, Any]:
    history = load_history(_runner(request).storage)
    return {"history": [e.to_dict() for e in history]}


@app.delete("/api/timer/history/{entry_id}")
async def api_timer_history_delete(request: Request, entry_id: str, username: str = Depends(get_current_user)) -> dict[str, Any]:
    deleted = delete_history_entry(entry_id, _runner(request).storage)
    return {"ok": deleted, "entry_id": entry_id}


@app.put("/api/timer/history/{entry_id}/note")
async def api_timer_history_note(
    request: Request,
    entry_id: str,
    payload: dict[str, Any] = Body(...),
    username: str = Depends(get_current_user),
) -> dict[str, Any]:
    entry = update_entry_note(entry_id, str(payload.get("note", "")), _runner(request).storage)
    if entry is None:
        raise HTTPException(status_code=404, detail=f"History entry not found: {entry_id}")
    return {"ok": True, "entry": entry.to_dict()}


# ── Theme ─────────────────────────────────────────────────────


@app.get("/api/theme")
def api_theme(username: str = Depends(get_current_user)) -> dict[str, str]:
    return {"theme": load_theme()}


@app.post("/api/theme/toggle")
def api_theme_toggle(username: str = Depends(get_current_user)) -> dict[str, str]:
    with _store_lock:
        return {"theme": toggle_theme()}

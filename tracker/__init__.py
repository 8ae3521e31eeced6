"""Habit tracker core library: scheduling, streaks, persisted state, timer.

Public API re-exports for convenient imports:
    from tracker import load_store, toggle_completion, compute_streak, ...
"""

# Workspace & configuration
from tracker.workspace import (
    workspace_root,
    profile_path,
    data_dir,
    default_storage,
    load_profile,
    update_profile,
    get_user_timezone,
    get_week_start,
    today_str,
    now_local,
    configure_logging,
)

# Storage
from tracker.storage import (
    STORE_KEY,
    THEME_KEY,
    TIMER_STATE_KEY,
    TIMER_HISTORY_KEY,
    Storage,
    MemoryStorage,
    FileStorage,
)

# Calendar
from tracker.dates import (
    parse_date,
    iso_date,
    today,
    add_days,
    weekday,
    month_range,
    start_of_week,
    week_range,
    format_duration,
    repeat_label,
)

# Models
from tracker.models import (
    Habit,
    Store,
    DayProgress,
    TimerState,
    TimerHistoryEntry,
)

# Scheduling & streaks
from tracker.scheduling import is_scheduled, has_completed
from tracker.streaks import compute_streak

# Store
from tracker.store import load_store, save_store, seed_store, pick_color

# Mutations
from tracker.habits import (
    find_habit,
    validate_habit,
    toggle_completion,
    clear_day,
    create_draft,
    save_habit,
    delete_habit,
    set_archived,
    reorder,
)

# Derived views
from tracker.views import (
    sorted_habits,
    visible_habits,
    scheduled_habits,
    day_progress,
    week_progress,
    month_grid,
    habit_streaks,
    habit_rows,
)

# Timer
from tracker.timer import (
    restore_timer,
    start_timer,
    tick_timer,
    apply_tick,
    pause_timer,
    reset_timer,
    save_session,
    elapsed_seconds,
    timer_progress,
    load_timer_state,
    load_history,
    delete_history_entry,
    update_entry_note,
)
from tracker.ticker import Ticker, TimerRunner

# Theme
from tracker.theme import load_theme, set_theme, toggle_theme

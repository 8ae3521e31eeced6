"""Tests for tracker/streaks.py and tracker/scheduling.py."""

from conftest import make_habit, make_store
from tracker.habits import delete_habit
from tracker.scheduling import has_completed, is_scheduled
from tracker.storage import MemoryStorage
from tracker.streaks import MAX_STREAK_DAYS, compute_streak
from tracker.dates import add_days

WEEKDAYS = [1, 2, 3, 4, 5]


def test_is_scheduled_by_weekday():
    habit = make_habit("a", repeat_days=WEEKDAYS)
    assert is_scheduled(habit, "2024-01-01")  # Monday
    assert not is_scheduled(habit, "2024-01-06")  # Saturday
    assert not is_scheduled(habit, "2024-01-07")  # Sunday


def test_archived_never_scheduled():
    habit = make_habit("a", archived=True)
    assert not any(is_scheduled(habit, add_days("2024-01-01", i)) for i in range(7))


def test_empty_repeat_never_scheduled():
    habit = make_habit("a", repeat_days=[])
    assert not is_scheduled(habit, "2024-01-01")


def test_has_completed():
    store = make_store(completions={"2024-01-01": ["a"]})
    assert has_completed(store, "2024-01-01", "a")
    assert not has_completed(store, "2024-01-02", "a")


def test_streak_stops_at_missed_day():
    habit = make_habit("h")
    store = make_store(habit, completions={d: ["h"] for d in ("2024-01-05", "2024-01-04", "2024-01-03")})
    assert compute_streak(store, habit, "2024-01-05") == 3


def test_streak_skips_days_not_due():
    habit = make_habit("h", repeat_days=WEEKDAYS)
    store = make_store(habit, completions={f"2024-01-0{i}": ["h"] for i in range(1, 6)})
    assert compute_streak(store, habit, "2024-01-08") == 0  # Monday, due, not done
    assert compute_streak(store, habit, "2024-01-05") == 5
    assert compute_streak(store, habit, "2024-01-07") == 5  # Sunday: weekend is transparent


def test_streak_empty_repeat_is_zero():
    habit = make_habit("h", repeat_days=[])
    store = make_store(habit, completions={"2024-01-05": ["h"]})
    for day in ("2024-01-05", "2024-06-30", "2023-01-01"):
        assert compute_streak(store, habit, day) == 0


def test_streak_archived_is_zero():
    habit = make_habit("h", archived=True)
    store = make_store(habit, completions={"2024-01-05": ["h"]})
    assert compute_streak(store, habit, "2024-01-05") == 0


def test_streak_counts_day_before_created_then_stops():
    habit = make_habit("h", created_at="2024-01-03")
    done = ["2024-01-04", "2024-01-03", "2024-01-02", "2024-01-01"]
    store = make_store(habit, completions={d: ["h"] for d in done})
    # 01-02 is before creation but still counts; 01-01 is never examined
    assert compute_streak(store, habit, "2024-01-04") == 3


def test_streak_from_before_created():
    habit = make_habit("h", created_at="2024-02-01")
    store = make_store(habit, completions={"2024-01-10": ["h"], "2024-01-09": ["h"]})
    assert compute_streak(store, habit, "2024-01-10") == 1


def test_streak_is_bounded():
    habit = make_habit("h", created_at="1990-01-01")
    start = "2024-01-01"
    completions = {}
    day = start
    for _ in range(MAX_STREAK_DAYS + 50):
        completions[day] = ["h"]
        day = add_days(day, -1)
    store = make_store(habit, completions=completions)
    assert compute_streak(store, habit, start) == MAX_STREAK_DAYS + 1


def test_deleted_habit_history_does_not_break_streak_queries():
    habit = make_habit("h")
    other = make_habit("o", order=1)
    store = make_store(habit, other, completions={"2024-01-05": ["h", "o"]})
    delete_habit(store, "o", MemoryStorage())
    assert compute_streak(store, other, "2024-01-05") == 1
    assert store.completions["2024-01-05"] == {"h", "o"}

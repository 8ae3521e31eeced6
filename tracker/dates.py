"""Calendar-date helpers.

Calendar dates are ``YYYY-MM-DD`` strings, so they sort and compare
lexicographically. Day arithmetic is done on plain ``date`` objects, and
the reference timezone is consulted only when turning an instant into a
calendar date. A shifted date is never read back through a zone offset.
"""

from __future__ import annotations

import calendar
import re
from datetime import date, datetime, timedelta, timezone, tzinfo

from tracker.workspace import get_user_timezone

WEEKDAY_NAMES = ["Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat"]

_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def parse_date(day: str) -> date:
    """Parse a ``YYYY-MM-DD`` calendar date, raising ValueError if malformed."""
    if not isinstance(day, str) or not _DATE_RE.match(day):
        raise ValueError(f"Invalid calendar date: {day!r}")
    try:
        return date.fromisoformat(day)
    except ValueError as exc:
        raise ValueError(f"Invalid calendar date: {day!r}") from exc


def iso_date(instant: datetime | None = None, tz: tzinfo | None = None) -> str:
    """Calendar date of *instant* in the reference timezone.

    Naive instants are taken as UTC.
    """
    if tz is None:
        tz = get_user_timezone()
    if instant is None:
        instant = datetime.now(tz)
    elif instant.tzinfo is None:
        instant = instant.replace(tzinfo=timezone.utc)
    return instant.astimezone(tz).date().isoformat()


def today(tz: tzinfo | None = None) -> str:
    return iso_date(None, tz)


def add_days(day: str, delta: int) -> str:
    return (parse_date(day) + timedelta(days=delta)).isoformat()


def weekday(day: str) -> int:
    """Day of week with 0=Sunday..6=Saturday."""
    return (parse_date(day).weekday() + 1) % 7


def month_range(day: str) -> list[str]:
    """Every calendar date of the month containing *day*, 1st to last."""
    d = parse_date(day)
    first = d.replace(day=1)
    length = calendar.monthrange(d.year, d.month)[1]
    return [(first + timedelta(days=i)).isoformat() for i in range(length)]


def start_of_week(day: str, week_start: int = 1) -> str:
    if not 0 <= week_start <= 6:
        raise ValueError(f"week_start must be 0..6, got {week_start}")
    offset = (weekday(day) - week_start) % 7
    return add_days(day, -offset)


def week_range(day: str, week_start: int = 1) -> list[str]:
    first = start_of_week(day, week_start)
    return [add_days(first, i) for i in range(7)]


def format_duration(seconds: int) -> str:
    """Render seconds as HH:MM:SS (hours keep counting past 24)."""
    seconds = max(0, int(seconds))
    hours, rest = divmod(seconds, 3600)
    minutes, secs = divmod(rest, 60)
    return f"{hours:02d}:{minutes:02d}:{secs:02d}"


def repeat_label(repeat_days: set[int] | list[int]) -> str:
    """Human label for a repeat-day set: Every day, Weekdays, Weekends, or names."""
    days = sorted(set(repeat_days))
    if days == list(range(7)):
        return "Every day"
    if days == [1, 2, 3, 4, 5]:
        return "Weekdays"
    if days == [0, 6]:
        return "Weekends"
    if not days:
        return "Never"
    return ", ".join(WEEKDAY_NAMES[d] for d in days)

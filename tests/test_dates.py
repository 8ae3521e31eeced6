"""Tests for tracker/dates.py: calendar arithmetic and timezone resolution."""

from datetime import datetime, timezone
from zoneinfo import ZoneInfo

import pytest
import yaml

from tracker.dates import (
    add_days,
    format_duration,
    iso_date,
    month_range,
    parse_date,
    repeat_label,
    start_of_week,
    today,
    week_range,
    weekday,
)


def test_parse_date_rejects_malformed():
    with pytest.raises(ValueError):
        parse_date("2024-2-1")
    with pytest.raises(ValueError):
        parse_date("2024-02-30")
    with pytest.raises(ValueError):
        parse_date(None)


def test_add_days_across_month_and_year():
    assert add_days("2024-01-31", 1) == "2024-02-01"
    assert add_days("2024-03-01", -1) == "2024-02-29"
    assert add_days("2024-01-01", -1) == "2023-12-31"
    assert add_days("2024-01-05", 0) == "2024-01-05"


def test_add_days_ignores_dst_transitions(workspace):
    # US spring-forward and fall-back weekends, resolved in a zone west of UTC
    (workspace / "profile.yaml").write_text(
        yaml.dump({"timezone": "America/Los_Angeles"}), encoding="utf-8"
    )
    assert add_days("2024-03-09", 1) == "2024-03-10"
    assert add_days("2024-03-10", 1) == "2024-03-11"
    assert add_days("2024-11-04", -1) == "2024-11-03"
    assert add_days("2024-11-03", -1) == "2024-11-02"


def test_weekday_sunday_is_zero():
    assert weekday("2024-01-07") == 0  # Sunday
    assert weekday("2024-01-01") == 1  # Monday
    assert weekday("2024-01-06") == 6  # Saturday


def test_month_range_leap_february():
    days = month_range("2024-02-10")
    assert len(days) == 29
    assert days[0] == "2024-02-01"
    assert days[-1] == "2024-02-29"


def test_month_range_regular_months():
    assert len(month_range("2023-02-15")) == 28
    assert len(month_range("2024-04-30")) == 30
    assert month_range("2024-12-01")[-1] == "2024-12-31"


def test_start_of_week_monday_default():
    assert start_of_week("2024-01-10") == "2024-01-08"
    assert start_of_week("2024-01-07") == "2024-01-01"  # Sunday belongs to the week before


def test_start_of_week_sunday_start():
    assert start_of_week("2024-01-10", 0) == "2024-01-07"
    assert start_of_week("2024-01-07", 0) == "2024-01-07"


def test_start_of_week_invalid():
    with pytest.raises(ValueError):
        start_of_week("2024-01-10", 7)


def test_week_range():
    days = week_range("2024-02-28", 1)
    assert days == [
        "2024-02-26", "2024-02-27", "2024-02-28", "2024-02-29",
        "2024-03-01", "2024-03-02", "2024-03-03",
    ]


def test_iso_date_negative_offset_zone():
    instant = datetime(2024, 3, 10, 3, 30, tzinfo=timezone.utc)
    assert iso_date(instant, ZoneInfo("America/Los_Angeles")) == "2024-03-09"
    assert iso_date(instant, ZoneInfo("UTC")) == "2024-03-10"
    assert iso_date(instant, ZoneInfo("Asia/Tokyo")) == "2024-03-10"


def test_iso_date_naive_is_utc():
    assert iso_date(datetime(2024, 1, 1, 23, 30), ZoneInfo("UTC")) == "2024-01-01"


def test_today_uses_profile_timezone(workspace):
    (workspace / "profile.yaml").write_text(yaml.dump({"timezone": "Pacific/Kiritimati"}), encoding="utf-8")
    expected = datetime.now(ZoneInfo("Pacific/Kiritimati")).date().isoformat()
    assert today() == expected


def test_today_falls_back_on_unknown_zone(workspace):
    (workspace / "profile.yaml").write_text(yaml.dump({"timezone": "Not/AZone"}), encoding="utf-8")
    zurich = datetime.now(ZoneInfo("Europe/Zurich")).date().isoformat()
    assert today() == zurich


def test_format_duration():
    assert format_duration(0) == "00:00:00"
    assert format_duration(3725) == "01:02:05"
    assert format_duration(90000) == "25:00:00"
    assert format_duration(-5) == "00:00:00"


def test_repeat_label():
    assert repeat_label(set(range(7))) == "Every day"
    assert repeat_label({1, 2, 3, 4, 5}) == "Weekdays"
    assert repeat_label({0, 6}) == "Weekends"
    assert repeat_label(set()) == "Never"
    assert repeat_label({1, 3}) == "Mon, Wed"

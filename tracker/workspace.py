"""Workspace root, timezone, storage and logging configuration."""

from __future__ import annotations

import logging
import os
from datetime import datetime
from pathlib import Path
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import yaml

from tracker.fileio import read_yaml, write_yaml_atomic
from tracker.storage import FileStorage

logger = logging.getLogger(__name__)

DEFAULT_TIMEZONE = "Europe/Zurich"
DEFAULT_WEEK_START = 1  # Monday
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def workspace_root() -> Path:
    """Get the workspace root directory (contains profile.yaml and data/)."""
    return Path(
        os.environ.get("TRACKER_ROOT", str(Path.home() / "tracker"))
    ).expanduser().resolve()


def profile_path(root: Path | None = None) -> Path:
    if root is None:
        root = workspace_root()
    return root / "profile.yaml"


def data_dir(root: Path | None = None) -> Path:
    if root is None:
        root = workspace_root()
    return root / "data"


def default_storage(root: Path | None = None) -> FileStorage:
    """Storage backed by the workspace data directory."""
    return FileStorage(data_dir(root))


# ── Profile ───────────────────────────────────────────────────


def load_profile(root: Path | None = None) -> dict[str, Any]:
    try:
        return read_yaml(profile_path(root))
    except (OSError, yaml.YAMLError) as exc:
        logger.warning("Could not read profile.yaml: %s", exc)
        return {}


def update_profile(updates: dict[str, Any], root: Path | None = None) -> dict[str, Any]:
    """Merge *updates* into profile.yaml. Returns the saved profile."""
    profile = load_profile(root)
    profile.update(updates)
    write_yaml_atomic(profile_path(root), profile)
    return profile


def get_user_timezone(root: Path | None = None) -> ZoneInfo:
    """Reference timezone: profile, then $TZ, then the hard-coded default."""
    name = load_profile(root).get("timezone") or os.environ.get("TZ") or DEFAULT_TIMEZONE
    try:
        return ZoneInfo(str(name))
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning("Unknown timezone %r, falling back to %s", name, DEFAULT_TIMEZONE)
        return ZoneInfo(DEFAULT_TIMEZONE)


def get_week_start(root: Path | None = None) -> int:
    """First day of the week (0=Sunday..6=Saturday)."""
    value = load_profile(root).get("week_start", DEFAULT_WEEK_START)
    try:
        value = int(value)
    except (TypeError, ValueError):
        return DEFAULT_WEEK_START
    return value if 0 <= value <= 6 else DEFAULT_WEEK_START


def today_str(root: Path | None = None) -> str:
    """Get today's date string (YYYY-MM-DD) in the reference timezone."""
    return datetime.now(get_user_timezone(root)).date().isoformat()


def now_local(root: Path | None = None) -> datetime:
    return datetime.now(get_user_timezone(root))


# ── Logging ───────────────────────────────────────────────────


def configure_logging(level: str | int | None = None) -> None:
    """Install a stream handler on the root logger ($TRACKER_LOG_LEVEL, default INFO)."""
    if level is None:
        level = os.environ.get("TRACKER_LOG_LEVEL", "INFO")
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO
    logging.basicConfig(level=level, format=LOG_FORMAT)

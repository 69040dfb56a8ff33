"""Utility functions for idekit data paths and helpers."""

import os
from datetime import datetime, timezone
from pathlib import Path

DATA_DIR_NAME = ".idekit"


def ensure_dir(path: Path) -> Path:
    """Ensure a directory exists, creating it if necessary."""
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_data_path() -> Path:
    """
    Get the idekit data directory.

    Priority:
    1. `IDEKIT_DATA_DIR` env override
    2. `~/.idekit`
    """
    env_path = str(os.environ.get("IDEKIT_DATA_DIR") or "").strip()
    if env_path:
        return ensure_dir(Path(env_path).expanduser())
    return ensure_dir(Path.home() / DATA_DIR_NAME)


def timestamp() -> str:
    """Get current UTC timestamp in ISO format with millisecond precision."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def file_timestamp() -> str:
    """ISO timestamp safe for file names: colons and dots become dashes."""
    return timestamp().replace(":", "-").replace(".", "-")


def truncate_string(s: str, max_len: int = 100, suffix: str = "") -> str:
    """Truncate a string to max length, adding suffix if truncated."""
    if len(s) <= max_len:
        return s
    return s[: max_len - len(suffix)] + suffix

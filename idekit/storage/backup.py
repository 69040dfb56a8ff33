"""Timestamped sibling backups taken before in-place mutation."""

from __future__ import annotations

import shutil
from pathlib import Path

from idekit.errors import BackupFailedError
from idekit.utils.helpers import file_timestamp


def backup_path_for(path: Path, stamp: str) -> Path:
    """`<original>.bak.<stamp>`, with a numeric suffix if that name is taken."""
    candidate = path.with_name(f"{path.name}.bak.{stamp}")
    n = 1
    while candidate.exists():
        candidate = path.with_name(f"{path.name}.bak.{stamp}.{n}")
        n += 1
    return candidate


class BackupManager:
    """Copies a file byte-for-byte to a timestamped sibling. Old backups are kept."""

    def __init__(self, *, stamp: str | None = None) -> None:
        # Shared by every backup taken during one operation
        self.stamp = stamp or file_timestamp()

    def backup(self, path: str | Path) -> Path | None:
        """Return the backup path, or None when `path` does not exist.

        Raises BackupFailedError if an existing file could not be copied.
        """
        source = Path(path)
        if not source.exists():
            return None
        target = backup_path_for(source, self.stamp)
        try:
            shutil.copyfile(source, target)
        except OSError as e:
            raise BackupFailedError(f"Could not back up {source}: {e}") from e
        return target

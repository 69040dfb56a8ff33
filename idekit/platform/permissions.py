"""Read-only attribute handling around in-place writes."""

from __future__ import annotations

import os
import stat
import sys
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Protocol

from idekit.oplog import OperationLog

_WRITE_BITS = stat.S_IWUSR | stat.S_IWGRP | stat.S_IWOTH


class ReadOnlyGuard(Protocol):
    def is_locked(self, path: Path) -> bool: ...

    def lock(self, path: Path, mode: int | None = None) -> None: ...

    def unlock(self, path: Path) -> None: ...


class PosixReadOnlyGuard:
    """Read-only means the owner write bit is cleared."""

    def is_locked(self, path: Path) -> bool:
        return not (path.stat().st_mode & stat.S_IWUSR)

    def lock(self, path: Path, mode: int | None = None) -> None:
        """Restore `mode` exactly when given, else clear every write bit."""
        if mode is None:
            mode = stat.S_IMODE(path.stat().st_mode) & ~_WRITE_BITS
        os.chmod(path, mode)

    def unlock(self, path: Path) -> None:
        mode = stat.S_IMODE(path.stat().st_mode)
        os.chmod(path, mode | stat.S_IWUSR)


class WindowsReadOnlyGuard:
    """Uses the FILE_ATTRIBUTE_READONLY flag; os.chmod toggles it on Windows."""

    def is_locked(self, path: Path) -> bool:
        attrs = getattr(path.stat(), "st_file_attributes", 0)
        return bool(attrs & stat.FILE_ATTRIBUTE_READONLY)

    def lock(self, path: Path, mode: int | None = None) -> None:
        os.chmod(path, stat.S_IREAD)

    def unlock(self, path: Path) -> None:
        os.chmod(path, stat.S_IREAD | stat.S_IWRITE)


def default_guard(platform: str | None = None) -> ReadOnlyGuard:
    if (platform or sys.platform) == "win32":
        return WindowsReadOnlyGuard()
    return PosixReadOnlyGuard()


@contextmanager
def writable(
    path: Path,
    guard: ReadOnlyGuard,
    log: OperationLog,
    *,
    label: str | None = None,
) -> Iterator[None]:
    """Clear a read-only flag for the duration of a write and restore it afterwards.

    Checking and restoring are best-effort: failures become warnings. The
    write itself runs inside the block and propagates its own errors.
    """
    name = label or path.name
    was_locked = False
    original_mode: int | None = None
    if path.exists():
        try:
            if guard.is_locked(path):
                original_mode = stat.S_IMODE(path.stat().st_mode)
                guard.unlock(path)
                was_locked = True
                log.info(f"Removed ReadOnly attribute from {name}")
        except OSError as e:
            log.warn(f"Could not check {name} permissions: {e}")
    try:
        yield
    finally:
        if was_locked:
            try:
                guard.lock(path, original_mode)
                log.info(f"Restored ReadOnly attribute to {name}")
            except OSError as e:
                log.warn(f"Could not restore {name} ReadOnly: {e}")

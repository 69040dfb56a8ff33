from __future__ import annotations

import re
from pathlib import Path

import pytest

from idekit.errors import BackupFailedError
from idekit.storage.backup import BackupManager


def test_backup_copies_bytes_to_timestamped_sibling(tmp_path: Path) -> None:
    source = tmp_path / "storage.json"
    source.write_bytes(b"\xef\xbb\xbf{\"a\": 1}")

    backup = BackupManager().backup(source)

    assert backup is not None
    assert backup.parent == tmp_path
    assert re.fullmatch(r"storage\.json\.bak\.\d{4}-\d{2}-\d{2}T\d{2}-\d{2}-\d{2}-\d{3}Z", backup.name)
    assert backup.read_bytes() == source.read_bytes()


def test_backup_of_missing_file_is_noop(tmp_path: Path) -> None:
    assert BackupManager().backup(tmp_path / "missing.json") is None
    assert list(tmp_path.iterdir()) == []


def test_backup_never_overwrites_existing_backup(tmp_path: Path) -> None:
    source = tmp_path / "machineid"
    source.write_text("first", encoding="utf-8")
    manager = BackupManager(stamp="2024-01-01T00-00-00-000Z")

    first = manager.backup(source)
    source.write_text("second", encoding="utf-8")
    second = manager.backup(source)

    assert first is not None and second is not None
    assert first != second
    assert first.read_text(encoding="utf-8") == "first"
    assert second.read_text(encoding="utf-8") == "second"


def test_backup_failure_raises(tmp_path: Path, monkeypatch) -> None:  # type: ignore[no-untyped-def]
    source = tmp_path / "storage.json"
    source.write_text("{}", encoding="utf-8")

    def _boom(*args, **kwargs):  # type: ignore[no-untyped-def]
        raise OSError("disk full")

    monkeypatch.setattr("idekit.storage.backup.shutil.copyfile", _boom)
    with pytest.raises(BackupFailedError, match="disk full"):
        BackupManager().backup(source)

from __future__ import annotations

import json
import sqlite3
from pathlib import Path

from idekit.oplog import OperationLog
from idekit.storage.dual_store import DualStoreSync, StoreStatus
from idekit.storage.sqlite_items import get_engine


def _make_item_db(path: Path, rows: dict[str, str] | None = None) -> Path:
    conn = sqlite3.connect(path)
    conn.execute("CREATE TABLE ItemTable (key TEXT UNIQUE ON CONFLICT REPLACE, value BLOB)")
    conn.executemany("INSERT INTO ItemTable (key, value) VALUES (?, ?)", list((rows or {}).items()))
    conn.commit()
    conn.close()
    return path


def _read_items(path: Path) -> dict[str, str]:
    conn = sqlite3.connect(path)
    try:
        return dict(conn.execute("SELECT key, value FROM ItemTable").fetchall())
    finally:
        conn.close()


def test_apply_merges_into_existing_json_and_table(tmp_path: Path) -> None:
    storage = tmp_path / "storage.json"
    storage.write_text(json.dumps({"unrelated": {"nested": True}, "cursorAuth/cachedEmail": "old"}))
    db = _make_item_db(tmp_path / "state.vscdb", {"cursorAuth/cachedEmail": "old", "keep": "1"})
    log = OperationLog()

    outcome = DualStoreSync(storage, db, engine=get_engine()).apply(
        {"cursorAuth/cachedEmail": "new@example.com", "cursorAuth/accessToken": "tok"}, log
    )

    assert outcome.json_status == StoreStatus.UPDATED
    assert outcome.table_status == StoreStatus.UPDATED
    assert all(k.json and k.table for k in outcome.keys.values())
    assert json.loads(storage.read_text()) == {
        "unrelated": {"nested": True},
        "cursorAuth/cachedEmail": "new@example.com",
        "cursorAuth/accessToken": "tok",
    }
    assert _read_items(db) == {
        "cursorAuth/cachedEmail": "new@example.com",
        "keep": "1",
        "cursorAuth/accessToken": "tok",
    }
    assert '    "unrelated"' in storage.read_text()
    assert log.lines.count("  [OK] cursorAuth/accessToken: updated") == 2


def test_apply_skips_missing_json_unless_created(tmp_path: Path) -> None:
    storage = tmp_path / "globalStorage" / "storage.json"
    db = tmp_path / "absent.vscdb"
    sync = DualStoreSync(storage, db, engine=get_engine())

    outcome = sync.apply({"a": "1"})
    assert outcome.json_status == StoreStatus.SKIPPED
    assert outcome.table_status == StoreStatus.SKIPPED
    assert not storage.exists()

    outcome = sync.apply({"a": "1"}, create_json=True)
    assert outcome.json_status == StoreStatus.UPDATED
    assert json.loads(storage.read_text()) == {"a": "1"}


def test_apply_reports_table_unavailable_without_engine(tmp_path: Path) -> None:
    storage = tmp_path / "storage.json"
    storage.write_text("{}")
    db = _make_item_db(tmp_path / "state.vscdb", {"a": "old"})
    log = OperationLog()

    outcome = DualStoreSync(storage, db, engine=None).apply({"a": "new"}, log)

    assert outcome.json_ok
    assert outcome.table_status == StoreStatus.UNAVAILABLE
    assert _read_items(db) == {"a": "old"}
    assert any("SQLite not available" in line for line in log.lines)


def test_apply_leaves_corrupt_json_untouched_and_still_updates_table(tmp_path: Path) -> None:
    storage = tmp_path / "storage.json"
    storage.write_text("{broken")
    db = _make_item_db(tmp_path / "state.vscdb")
    log = OperationLog()

    outcome = DualStoreSync(storage, db, engine=get_engine()).apply({"a": "1"}, log)

    assert outcome.json_status == StoreStatus.FAILED
    assert outcome.table_ok
    assert outcome.partial
    assert storage.read_text() == "{broken"
    assert _read_items(db) == {"a": "1"}
    assert any(line.startswith("[WARN] Partial write") for line in log.lines)


def test_read_falls_back_to_table_per_key(tmp_path: Path) -> None:
    storage = tmp_path / "storage.json"
    storage.write_text(json.dumps({"cursorAuth/cachedEmail": "json@example.com"}))
    db = _make_item_db(
        tmp_path / "state.vscdb",
        {"cursorAuth/cachedEmail": "table@example.com", "cursorAuth/accessToken": "table-token"},
    )

    values = DualStoreSync(storage, db, engine=get_engine()).read(
        ["cursorAuth/cachedEmail", "cursorAuth/accessToken", "telemetry.machineId"]
    )

    assert values == {
        "cursorAuth/cachedEmail": "json@example.com",
        "cursorAuth/accessToken": "table-token",
        "telemetry.machineId": None,
    }

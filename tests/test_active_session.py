from __future__ import annotations

import json
import sqlite3
from pathlib import Path

from idekit.accounts import ActiveSession
from idekit.platform.paths import IdePaths
from idekit.storage.sqlite_items import get_engine


def _make_item_db(path: Path, rows: dict[str, str] | None = None) -> Path:
    conn = sqlite3.connect(path)
    conn.execute("CREATE TABLE ItemTable (key TEXT UNIQUE ON CONFLICT REPLACE, value BLOB)")
    conn.executemany("INSERT INTO ItemTable (key, value) VALUES (?, ?)", list((rows or {}).items()))
    conn.commit()
    conn.close()
    return path


def _ide(tmp_path: Path) -> IdePaths:
    return IdePaths(
        storage_path=tmp_path / "globalStorage" / "storage.json",
        sqlite_path=tmp_path / "globalStorage" / "state.vscdb",
        machine_id_path=tmp_path / "machineid",
    )


def test_update_auth_creates_json_store(tmp_path: Path) -> None:
    ide = _ide(tmp_path)
    session = ActiveSession(ide, engine=get_engine(), sign_up_type="Auth_0")

    result = session.update_auth(email="a@example.com", access_token="tok")

    assert result.success is True
    assert json.loads(ide.storage_path.read_text(encoding="utf-8")) == {
        "cursorAuth/cachedSignUpType": "Auth_0",
        "cursorAuth/cachedEmail": "a@example.com",
        "cursorAuth/accessToken": "tok",
    }
    assert any("authentication updated" in line.lower() for line in result.logs)


def test_info_reads_json_then_table(tmp_path: Path) -> None:
    ide = _ide(tmp_path)
    ide.storage_path.parent.mkdir(parents=True)
    ide.storage_path.write_text(
        "\ufeff" + json.dumps({"telemetry.machineId": "m-json"}) + "\n", encoding="utf-8"
    )
    _make_item_db(
        ide.sqlite_path,
        {"cursorAuth/cachedEmail": "t@example.com", "cursorAuth/accessToken": "tok-t"},
    )

    info = ActiveSession(ide, engine=get_engine()).info()

    assert info == {
        "email": "t@example.com",
        "token": "tok-t",
        "machineId": "m-json",
        "devDeviceId": None,
    }


def test_info_with_nothing_on_disk(tmp_path: Path) -> None:
    info = ActiveSession(_ide(tmp_path), engine=None).info()
    assert info == {"email": None, "token": None, "machineId": None, "devDeviceId": None}

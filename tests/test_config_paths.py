from __future__ import annotations

import json
from pathlib import Path

from idekit.config.loader import convert_keys, convert_to_camel, load_config, save_config
from idekit.config.schema import Config
from idekit.platform.paths import default_ide_paths, get_accounts_file_path, resolve_ide_paths


def test_load_config_reads_camel_case(tmp_path: Path) -> None:
    path = tmp_path / "config.json"
    path.write_text(
        json.dumps(
            {
                "ide": {"storagePath": "/x/storage.json", "wipeTargets": ["/x"]},
                "accounts": {"signUpType": "Auth_1"},
            }
        ),
        encoding="utf-8",
    )
    cfg = load_config(path)
    assert cfg.ide.storage_path == "/x/storage.json"
    assert cfg.ide.wipe_targets == ["/x"]
    assert cfg.accounts.sign_up_type == "Auth_1"


def test_load_config_invalid_falls_back_to_defaults(tmp_path: Path) -> None:
    path = tmp_path / "config.json"
    path.write_text("{oops", encoding="utf-8")
    cfg = load_config(path)
    assert cfg.accounts.sign_up_type == "Auth_0"


def test_save_config_writes_camel_case(tmp_path: Path) -> None:
    cfg = Config()
    cfg.ide.machine_id_path = "/m/machineid"
    path = save_config(cfg, tmp_path / "nested" / "config.json")
    data = json.loads(path.read_text(encoding="utf-8"))
    assert data["ide"]["machineIdPath"] == "/m/machineid"
    assert load_config(path).ide.machine_id_path == "/m/machineid"


def test_key_conversion_roundtrip() -> None:
    data = {"ideSettings": {"storagePath": "a"}, "list": [{"someKey": 1}]}
    assert convert_keys(data) == {"ide_settings": {"storage_path": "a"}, "list": [{"some_key": 1}]}
    assert convert_to_camel(convert_keys(data)) == data


def test_platform_defaults(tmp_path: Path) -> None:
    env = {"HOME": str(tmp_path), "APPDATA": str(tmp_path / "Roaming"), "LOCALAPPDATA": str(tmp_path / "Local")}

    win = default_ide_paths(platform="win32", env=env)
    assert win.storage_path == tmp_path / "Roaming" / "Cursor" / "User" / "globalStorage" / "storage.json"
    assert win.machine_id_path == tmp_path / "Roaming" / "Cursor" / "machineId"
    assert win.wipe_targets == [tmp_path / "Roaming" / "Cursor", tmp_path / "Local" / "cursor-updater"]

    mac = default_ide_paths(platform="darwin", env=env)
    assert mac.sqlite_path == (
        tmp_path / "Library" / "Application Support" / "Cursor" / "User" / "globalStorage" / "state.vscdb"
    )
    assert tmp_path / "Library" / "Preferences" / "com.cursor.Cursor.plist" in mac.wipe_targets

    linux = default_ide_paths(platform="linux", env=env)
    assert linux.storage_path == tmp_path / ".config" / "cursor" / "User" / "globalStorage" / "storage.json"
    (tmp_path / ".config" / "Cursor").mkdir(parents=True)
    linux = default_ide_paths(platform="linux", env=env)
    assert linux.machine_id_path == tmp_path / ".config" / "Cursor" / "machineid"
    assert len(linux.wipe_targets) == 3


def test_resolve_applies_overrides(tmp_path: Path) -> None:
    cfg = Config()
    cfg.ide.sqlite_path = str(tmp_path / "db.vscdb")
    cfg.ide.wipe_targets = [str(tmp_path / "gone")]
    paths = resolve_ide_paths(cfg, platform="linux", env={"HOME": str(tmp_path)})
    assert paths.sqlite_path == tmp_path / "db.vscdb"
    assert paths.wipe_targets == [tmp_path / "gone"]
    assert paths.storage_path.name == "storage.json"


def test_accounts_file_path(tmp_path: Path) -> None:
    env = {"HOME": str(tmp_path), "XDG_DOCUMENTS_DIR": str(tmp_path / "Docs")}
    assert get_accounts_file_path(platform="linux", env=env) == tmp_path / "Docs" / "CursorFreeVIP" / "accounts.json"
    cfg = Config()
    cfg.accounts.file = str(tmp_path / "mine.json")
    assert get_accounts_file_path(cfg) == tmp_path / "mine.json"

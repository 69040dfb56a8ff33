"""Resolve the target IDE's identity store locations per platform."""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping

from idekit.config.schema import Config


@dataclass(slots=True)
class IdePaths:
    """Files that make up one IDE installation's identity state."""

    storage_path: Path
    sqlite_path: Path
    machine_id_path: Path
    wipe_targets: list[Path] = field(default_factory=list)

    def to_dict(self) -> dict[str, object]:
        return {
            "storagePath": str(self.storage_path),
            "sqlitePath": str(self.sqlite_path),
            "machineIdPath": str(self.machine_id_path),
            "wipeTargets": [str(p) for p in self.wipe_targets],
        }


def _home(env: Mapping[str, str]) -> Path:
    return Path(env.get("HOME") or env.get("USERPROFILE") or Path.home())


def default_ide_paths(
    *,
    platform: str | None = None,
    env: Mapping[str, str] | None = None,
    product: str = "Cursor",
) -> IdePaths:
    """Platform default locations, before configuration overrides."""
    platform = platform or sys.platform
    env = os.environ if env is None else env
    home = _home(env)
    lower = product.lower()

    if platform == "win32":
        appdata = Path(env.get("APPDATA") or home / "AppData" / "Roaming")
        localappdata = Path(env.get("LOCALAPPDATA") or home / "AppData" / "Local")
        root = appdata / product
        return IdePaths(
            storage_path=root / "User" / "globalStorage" / "storage.json",
            sqlite_path=root / "User" / "globalStorage" / "state.vscdb",
            machine_id_path=root / "machineId",
            wipe_targets=[root, localappdata / f"{lower}-updater"],
        )

    if platform == "darwin":
        support = home / "Library" / "Application Support"
        root = support / product
        return IdePaths(
            storage_path=root / "User" / "globalStorage" / "storage.json",
            sqlite_path=root / "User" / "globalStorage" / "state.vscdb",
            machine_id_path=root / "machineId",
            wipe_targets=[
                root,
                support / f"{lower}-updater",
                home / "Library" / "Preferences" / f"com.{lower}.{product}.plist",
                home / "Library" / "Caches" / f"com.{lower}.{product}",
            ],
        )

    config_dir = home / ".config"
    # Some distributions package the app with a lowercase data dir
    dir_name = product if (config_dir / product).exists() else lower
    root = config_dir / dir_name
    return IdePaths(
        storage_path=root / "User" / "globalStorage" / "storage.json",
        sqlite_path=root / "User" / "globalStorage" / "state.vscdb",
        machine_id_path=root / "machineid",
        wipe_targets=[config_dir / product, config_dir / lower, config_dir / f"{lower}-updater"],
    )


def resolve_ide_paths(
    config: Config | None = None,
    *,
    platform: str | None = None,
    env: Mapping[str, str] | None = None,
) -> IdePaths:
    """Platform defaults with any non-empty configured paths applied on top."""
    cfg = config or Config()
    ide = cfg.ide
    paths = default_ide_paths(platform=platform, env=env, product=ide.product_dir or "Cursor")
    if ide.storage_path:
        paths.storage_path = Path(ide.storage_path).expanduser()
    if ide.sqlite_path:
        paths.sqlite_path = Path(ide.sqlite_path).expanduser()
    if ide.machine_id_path:
        paths.machine_id_path = Path(ide.machine_id_path).expanduser()
    if ide.wipe_targets:
        paths.wipe_targets = [Path(p).expanduser() for p in ide.wipe_targets]
    return paths


def get_documents_path(
    *,
    platform: str | None = None,
    env: Mapping[str, str] | None = None,
) -> Path:
    platform = platform or sys.platform
    env = os.environ if env is None else env
    if platform == "win32":
        return Path(env.get("USERPROFILE") or Path.home()) / "Documents"
    if platform == "darwin":
        return _home(env) / "Documents"
    xdg = env.get("XDG_DOCUMENTS_DIR")
    return Path(xdg) if xdg else _home(env) / "Documents"


def get_accounts_file_path(
    config: Config | None = None,
    *,
    platform: str | None = None,
    env: Mapping[str, str] | None = None,
) -> Path:
    """Saved-accounts file: configured path or `<Documents>/CursorFreeVIP/accounts.json`."""
    cfg = config or Config()
    if cfg.accounts.file:
        return Path(cfg.accounts.file).expanduser()
    return get_documents_path(platform=platform, env=env) / "CursorFreeVIP" / "accounts.json"

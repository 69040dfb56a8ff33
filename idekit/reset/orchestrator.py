"""Rotate the IDE's machine identifiers or wipe its local data entirely."""

from __future__ import annotations

import shutil
import sqlite3
from pathlib import Path
from typing import Any, Callable

from idekit.errors import BackupFailedError, CorruptStoreError, IdekitError, StoreMissingError
from idekit.identity.ids import IdentitySet, generate_identity
from idekit.oplog import LogSink, OperationLog, OperationResult
from idekit.platform.paths import IdePaths
from idekit.platform.permissions import ReadOnlyGuard, default_guard, writable
from idekit.platform.registry import SecondaryIdWriter, default_secondary_writer, new_sqm_guid
from idekit.storage import kv_codec
from idekit.storage.backup import BackupManager
from idekit.storage.sqlite_items import AUTO_ENGINE, ItemTableStore, SQLiteImageEngine, get_engine


PLATFORM_DEFAULT: Any = object()


class ResetOrchestrator:
    """Runs `rotate_identifiers` and `full_wipe` against one IDE installation.

    Both operations assume no other writer touches the same files while they
    run, and neither can be cancelled part way.
    """

    def __init__(
        self,
        paths: IdePaths,
        *,
        guard: ReadOnlyGuard | None = None,
        engine: SQLiteImageEngine | None = AUTO_ENGINE,
        secondary_writer: SecondaryIdWriter | None = PLATFORM_DEFAULT,
        id_factory: Callable[[], IdentitySet] = generate_identity,
    ) -> None:
        self.paths = paths
        self.guard = guard or default_guard()
        self._engine = engine
        self.secondary_writer = (
            default_secondary_writer() if secondary_writer is PLATFORM_DEFAULT else secondary_writer
        )
        self.id_factory = id_factory

    def _table(self) -> ItemTableStore:
        engine = get_engine() if self._engine is AUTO_ENGINE else self._engine
        return ItemTableStore(self.paths.sqlite_path, engine=engine)

    def rotate_identifiers(self, sink: LogSink | None = None) -> OperationResult:
        log = OperationLog(sink)
        log.info("Starting machine ID reset...")
        try:
            ids = self._rotate(log)
        except IdekitError as e:
            log.error(str(e))
            if isinstance(e, CorruptStoreError) and e.preview:
                log.info(f"First 100 characters: {e.preview}")
            return OperationResult.fail(log, e)
        except OSError as e:
            log.error(str(e))
            return OperationResult.fail(log, e)

        log.blank()
        log.ok("Machine ID reset completed")
        log.blank()
        log.emit("New IDs generated:")
        for key, value in ids.to_store().items():
            log.emit(f"  {key}: {value}")
        return OperationResult.ok(log, new_ids=ids.to_store())

    def _rotate(self, log: OperationLog) -> IdentitySet:
        storage = self.paths.storage_path
        if not storage.exists():
            raise StoreMissingError(f"Storage file not found: {storage}")

        backups = BackupManager()
        log.info(f"Backup created: {backups.backup(storage)}")

        log.info(f"Reading {storage.name}...")
        raw = kv_codec.read_text(storage)
        if raw.startswith(kv_codec.BOM):
            log.info("Stripped BOM from file")
        data = kv_codec.decode_map(raw)

        ids = self.id_factory()
        data.update(ids.to_store())

        log.info(f"Writing new IDs to {storage.name}...")
        with writable(storage, self.guard, log):
            kv_codec.write_json(storage, data)

        self._write_machine_id(ids.device_id, log)
        self._update_table(ids, backups, log)
        self._update_secondary(log)
        return ids

    def _write_machine_id(self, value: str, log: OperationLog) -> None:
        machine_file = self.paths.machine_id_path
        machine_file.parent.mkdir(parents=True, exist_ok=True)
        with writable(machine_file, self.guard, log, label="machineId"):
            machine_file.write_text(value, encoding="utf-8")
        log.ok("Machine ID file updated")

    def _update_table(self, ids: IdentitySet, backups: BackupManager, log: OperationLog) -> None:
        table = self._table()
        if not table.exists():
            log.info(f"{table.path.name} not found, table store unavailable; JSON store only")
            return
        if not table.available:
            log.warn("SQLite not available, table store unavailable; JSON store only")
            return

        log.info("Updating SQLite database...")
        try:
            log.info(f"SQLite backup created: {backups.backup(table.path)}")
        except BackupFailedError as e:
            log.warn(f"{e}; SQLite database left unchanged")
            return
        try:
            accepted = table.upsert_many(ids.to_store(), log)
        except (OSError, sqlite3.Error) as e:
            log.warn(f"SQLite error: {e}")
            return
        if all(accepted.values()):
            log.ok("SQLite database updated")
        else:
            log.warn("Partial write: some identifiers were not stored in the SQLite database")

    def _update_secondary(self, log: OperationLog) -> None:
        if self.secondary_writer is None:
            return
        log.info("Updating secondary machine identifier...")
        try:
            self.secondary_writer(new_sqm_guid())
            log.ok("Secondary machine identifier updated")
        except Exception as e:
            log.warn(f"Could not update secondary machine identifier (may need admin rights): {e}")

    def full_wipe(self, sink: LogSink | None = None) -> OperationResult:
        log = OperationLog(sink)
        log.info("Starting complete reset...")
        log.warn("This will remove all IDE settings and data")

        for target in self.paths.wipe_targets:
            if not target.exists() and not target.is_symlink():
                continue
            try:
                _remove(target)
                log.ok(f"Removed: {target}")
            except OSError as e:
                log.warn(f"Could not remove: {target} - {e}")

        log.blank()
        log.info("Resetting machine identifiers...")
        ids = self.id_factory()
        try:
            storage = self.paths.storage_path
            storage.parent.mkdir(parents=True, exist_ok=True)
            kv_codec.write_json(storage, ids.to_store())
            log.ok(f"Created fresh {storage.name} with new IDs")

            machine_file = self.paths.machine_id_path
            machine_file.parent.mkdir(parents=True, exist_ok=True)
            machine_file.write_text(ids.device_id, encoding="utf-8")
            log.ok("Created fresh machineId file")
        except OSError as e:
            log.error(str(e))
            return OperationResult.fail(log, e)

        log.blank()
        log.ok("Complete reset finished")
        log.info("Restart your system for full effect")
        return OperationResult.ok(log, new_ids=ids.to_store())


def _remove(target: Path) -> None:
    if target.is_dir() and not target.is_symlink():
        shutil.rmtree(target)
    else:
        target.unlink()

"""Mirrored key/value writes into the JSON store and the embedded item table."""

from __future__ import annotations

import sqlite3
from dataclasses import dataclass, field
from enum import StrEnum
from pathlib import Path
from typing import Any, Iterable

from loguru import logger

from idekit.errors import CorruptStoreError, StoreUnavailableError
from idekit.oplog import OperationLog
from idekit.storage import kv_codec
from idekit.storage.sqlite_items import AUTO_ENGINE, ItemTableStore, SQLiteImageEngine, get_engine


class StoreStatus(StrEnum):
    UPDATED = "updated"
    PARTIAL = "partial"
    SKIPPED = "skipped"  # file absent and not created
    UNAVAILABLE = "unavailable"  # no embedded engine
    FAILED = "failed"


@dataclass(slots=True)
class KeyOutcome:
    json: bool = False
    table: bool = False


@dataclass(slots=True)
class SyncOutcome:
    """Per-key and per-store result of one `DualStoreSync.apply` call."""

    json_status: StoreStatus = StoreStatus.SKIPPED
    table_status: StoreStatus = StoreStatus.SKIPPED
    keys: dict[str, KeyOutcome] = field(default_factory=dict)

    @property
    def json_ok(self) -> bool:
        return self.json_status == StoreStatus.UPDATED

    @property
    def table_ok(self) -> bool:
        return self.table_status == StoreStatus.UPDATED

    @property
    def partial(self) -> bool:
        return StoreStatus.FAILED in (self.json_status, self.table_status) or (
            StoreStatus.PARTIAL in (self.json_status, self.table_status)
        )


class DualStoreSync:
    """Applies key updates to both stores, tolerating either one being absent."""

    def __init__(
        self,
        json_path: str | Path,
        table_path: str | Path,
        *,
        engine: SQLiteImageEngine | None = AUTO_ENGINE,
        indent: int = kv_codec.STORE_INDENT,
    ) -> None:
        self.json_path = Path(json_path)
        self.table_path = Path(table_path)
        self._engine = engine
        self.indent = indent

    @property
    def table(self) -> ItemTableStore:
        engine = get_engine() if self._engine is AUTO_ENGINE else self._engine
        return ItemTableStore(self.table_path, engine=engine)

    def apply(
        self,
        updates: dict[str, str],
        log: OperationLog | None = None,
        *,
        create_json: bool = False,
    ) -> SyncOutcome:
        log = log or OperationLog()
        outcome = SyncOutcome(keys={key: KeyOutcome() for key in updates})
        outcome.json_status = self._apply_json(updates, log, outcome, create_json=create_json)
        outcome.table_status = self._apply_table(updates, log, outcome)
        if outcome.partial:
            log.warn("Partial write: some keys were not stored in both stores")
        return outcome

    def _apply_json(
        self,
        updates: dict[str, str],
        log: OperationLog,
        outcome: SyncOutcome,
        *,
        create_json: bool,
    ) -> StoreStatus:
        name = self.json_path.name
        if self.json_path.exists():
            try:
                data = kv_codec.load_map(self.json_path)
            except CorruptStoreError as e:
                log.warn(f"{name} is not valid JSON, leaving it untouched: {e}")
                return StoreStatus.FAILED
            except OSError as e:
                log.warn(f"Could not read {name}: {e}")
                return StoreStatus.FAILED
        elif create_json:
            data = {}
        else:
            log.info(f"{name} not found, skipping JSON store")
            return StoreStatus.SKIPPED

        data.update(updates)
        try:
            self.json_path.parent.mkdir(parents=True, exist_ok=True)
            kv_codec.write_json(self.json_path, data, indent=self.indent)
        except OSError as e:
            log.warn(f"Could not write {name}: {e}")
            return StoreStatus.FAILED
        for key in updates:
            outcome.keys[key].json = True
            log.detail(f"{key}: updated")
        log.ok(f"{name} updated")
        return StoreStatus.UPDATED

    def _apply_table(
        self,
        updates: dict[str, str],
        log: OperationLog,
        outcome: SyncOutcome,
    ) -> StoreStatus:
        table = self.table
        if not table.exists():
            log.info(f"{table.path.name} not found, table store unavailable")
            return StoreStatus.SKIPPED
        if not table.available:
            log.warn("SQLite not available, table store skipped")
            return StoreStatus.UNAVAILABLE

        log.info("Updating SQLite database...")
        try:
            accepted = table.upsert_many(updates, log)
        except StoreUnavailableError as e:
            log.warn(str(e))
            return StoreStatus.UNAVAILABLE
        except (OSError, sqlite3.Error) as e:
            log.warn(f"SQLite error: {e}")
            return StoreStatus.FAILED
        for key, ok in accepted.items():
            outcome.keys[key].table = ok
        if all(accepted.values()):
            log.ok("SQLite database updated")
            return StoreStatus.UPDATED
        return StoreStatus.PARTIAL

    def read(self, keys: Iterable[str]) -> dict[str, Any]:
        """Read keys from the JSON store, falling back to the table per missing key."""
        data = kv_codec.read_map(self.json_path)
        values: dict[str, Any] = {}
        table: ItemTableStore | None = None
        for key in keys:
            value = data.get(key) or None
            if value is None:
                if table is None:
                    table = self.table
                value = table.get(key)
            values[key] = value
        logger.debug(f"read {len(values)} keys from {self.json_path.name}")
        return values

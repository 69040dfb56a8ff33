"""Single-table key/value store inside an SQLite database image.

The database file is read fully into memory, mutated, and the whole image is
serialized back over the file. The engine is probed once per process; if the
interpreter's sqlite3 lacks the image API the store is reported unavailable.
"""

from __future__ import annotations

import sqlite3
import threading
from pathlib import Path
from typing import Any

from loguru import logger

from idekit.errors import StoreUnavailableError
from idekit.oplog import OperationLog

ITEM_TABLE = "ItemTable"


class SQLiteImageEngine:
    """Narrow handle over sqlite3's deserialize/serialize API."""

    def open(self, data: bytes) -> sqlite3.Connection:
        conn = sqlite3.connect(":memory:")
        if not data:
            return conn
        try:
            conn.deserialize(data)
        except Exception:
            conn.close()
            raise
        return conn

    def upsert(self, conn: sqlite3.Connection, key: str, value: str) -> None:
        cur = conn.execute(f"UPDATE {ITEM_TABLE} SET value = ? WHERE key = ?", (value, key))
        if cur.rowcount == 0:
            conn.execute(
                f"INSERT OR REPLACE INTO {ITEM_TABLE} (key, value) VALUES (?, ?)",
                (key, value),
            )
        conn.commit()

    def get(self, conn: sqlite3.Connection, key: str) -> str | None:
        row = conn.execute(f"SELECT value FROM {ITEM_TABLE} WHERE key = ?", (key,)).fetchone()
        if row is None:
            return None
        value = row[0]
        if isinstance(value, bytes):
            return value.decode("utf-8", errors="replace")
        return None if value is None else str(value)

    def export(self, conn: sqlite3.Connection) -> bytes:
        return bytes(conn.serialize())

    def close(self, conn: sqlite3.Connection) -> None:
        conn.close()


# Pass as `engine=` to resolve the process-wide engine lazily
AUTO_ENGINE: Any = object()

_ENGINE_LOCK = threading.Lock()
_ENGINE: SQLiteImageEngine | None = None
_ENGINE_PROBED = False


def get_engine() -> SQLiteImageEngine | None:
    """Initialize the engine on first use; cache `None` when unavailable."""
    global _ENGINE, _ENGINE_PROBED
    with _ENGINE_LOCK:
        if _ENGINE_PROBED:
            return _ENGINE
        _ENGINE_PROBED = True
        try:
            conn = sqlite3.connect(":memory:")
            try:
                conn.execute("CREATE TABLE probe (x)")
                conn.deserialize(conn.serialize())
            finally:
                conn.close()
            _ENGINE = SQLiteImageEngine()
        except (AttributeError, sqlite3.Error) as e:
            logger.warning(f"SQLite image API unavailable, table store disabled: {e}")
            _ENGINE = None
        return _ENGINE


class ItemTableStore:
    """Reads and upserts rows of `ItemTable` in one database file."""

    def __init__(self, path: str | Path, *, engine: SQLiteImageEngine | None) -> None:
        self.path = Path(path)
        self.engine = engine

    @property
    def available(self) -> bool:
        return self.engine is not None

    def exists(self) -> bool:
        return self.path.exists()

    def _require_engine(self) -> SQLiteImageEngine:
        if self.engine is None:
            raise StoreUnavailableError("SQLite not available")
        return self.engine

    def upsert_many(self, updates: dict[str, str], log: OperationLog) -> dict[str, bool]:
        """Upsert every key, continuing past per-key failures, then persist the image.

        Returns per-key acceptance. Raises OSError / sqlite3.Error when the file
        cannot be loaded or written back; StoreUnavailableError without an engine.
        """
        engine = self._require_engine()
        conn = engine.open(self.path.read_bytes())
        accepted: dict[str, bool] = {}
        try:
            for key, value in updates.items():
                try:
                    engine.upsert(conn, key, value)
                    accepted[key] = True
                    log.detail(f"{key}: updated")
                except sqlite3.Error as e:
                    accepted[key] = False
                    log.detail(f"{key}: {e}", ok=False)
            self.path.write_bytes(engine.export(conn))
        finally:
            engine.close(conn)
        return accepted

    def get(self, key: str) -> str | None:
        """Read one value; None on absence or any read failure."""
        if self.engine is None or not self.path.exists():
            return None
        try:
            conn = self.engine.open(self.path.read_bytes())
        except (OSError, sqlite3.Error) as e:
            logger.debug(f"table store read failed for {self.path}: {e}")
            return None
        try:
            return self.engine.get(conn, key)
        except sqlite3.Error as e:
            logger.debug(f"table store lookup failed for {key}: {e}")
            return None
        finally:
            self.engine.close(conn)

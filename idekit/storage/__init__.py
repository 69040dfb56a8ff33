"""Storage backends for the IDE's JSON store, item table and backups."""

from idekit.storage.backup import BackupManager
from idekit.storage.dual_store import DualStoreSync, StoreStatus, SyncOutcome
from idekit.storage.sqlite_items import ItemTableStore, SQLiteImageEngine, get_engine

__all__ = [
    "BackupManager",
    "DualStoreSync",
    "ItemTableStore",
    "SQLiteImageEngine",
    "StoreStatus",
    "SyncOutcome",
    "get_engine",
]

"""JSON-file-backed list of saved accounts."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from loguru import logger

from idekit.accounts.session import ACCESS_TOKEN_KEY, EMAIL_KEY, ActiveSession
from idekit.errors import (
    CorruptStoreError,
    IdekitError,
    InvalidFormatError,
    NotFoundError,
)
from idekit.identity.ids import generate_identity
from idekit.oplog import LogSink, OperationLog, OperationResult
from idekit.storage import kv_codec
from idekit.utils.helpers import timestamp


@dataclass(slots=True)
class Account:
    """One saved login. Optional fields are omitted from the file when unset."""

    name: str
    email: str
    access_token: str
    refresh_token: str | None = None
    machine_id: str | None = None
    dev_device_id: str | None = None
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    created_at: str = field(default_factory=timestamp)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "accessToken": self.access_token,
        }
        if self.refresh_token is not None:
            data["refreshToken"] = self.refresh_token
        if self.machine_id is not None:
            data["machineId"] = self.machine_id
        if self.dev_device_id is not None:
            data["devDeviceId"] = self.dev_device_id
        data["createdAt"] = self.created_at
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Account":
        def _opt(key: str) -> str | None:
            value = data.get(key)
            return None if value is None else str(value)

        kwargs: dict[str, Any] = {
            "name": str(data.get("name") or ""),
            "email": str(data.get("email") or ""),
            "access_token": str(data.get("accessToken") or ""),
            "refresh_token": _opt("refreshToken"),
            "machine_id": _opt("machineId"),
            "dev_device_id": _opt("devDeviceId"),
        }
        if data.get("id"):
            kwargs["id"] = str(data["id"])
        if data.get("createdAt"):
            kwargs["created_at"] = str(data["createdAt"])
        return cls(**kwargs)


def parse_accounts(raw: str, *, source: str = "accounts file") -> list[Account]:
    """Parse a JSON array of account objects. Other shapes are InvalidFormatError."""
    try:
        data = kv_codec.decode_json(raw)
    except CorruptStoreError as e:
        raise InvalidFormatError(f"Invalid JSON in {source}: {e}") from e
    if not isinstance(data, list):
        raise InvalidFormatError("Invalid JSON format: expected array")
    accounts: list[Account] = []
    for index, item in enumerate(data):
        if not isinstance(item, dict):
            raise InvalidFormatError(f"Invalid account entry at index {index}: expected object")
        accounts.append(Account.from_dict(item))
    return accounts


def read_accounts(path: Path) -> list[Account]:
    """Read and parse an accounts file; undecodable bytes are InvalidFormatError."""
    try:
        raw = kv_codec.read_text(path)
    except CorruptStoreError as e:
        raise InvalidFormatError(str(e)) from e
    return parse_accounts(raw, source=str(path))


class AccountStore:
    """Ordered account list persisted as a 2-space-indented JSON array."""

    def __init__(self, path: str | Path, *, session: ActiveSession | None = None) -> None:
        self.path = Path(path)
        self.session = session

    def _resolve(self, path: str | Path | None) -> Path:
        return Path(path) if path else self.path

    def _load(self, path: Path) -> list[Account]:
        """Strict load for read-modify-write; a damaged file is never overwritten."""
        if not path.exists():
            return []
        try:
            return read_accounts(path)
        except InvalidFormatError as e:
            raise CorruptStoreError(f"Accounts file {path} is damaged: {e}") from e

    def _save(self, path: Path, accounts: list[Account]) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        kv_codec.write_json(
            path, [a.to_dict() for a in accounts], indent=kv_codec.ACCOUNTS_INDENT
        )

    def list(self, path: str | Path | None = None) -> list[Account]:
        target = self._resolve(path)
        if not target.exists():
            return []
        try:
            return read_accounts(target)
        except (InvalidFormatError, OSError) as e:
            logger.warning(f"Could not read accounts from {target}: {e}")
            return []

    def get(self, account_id: str, path: str | Path | None = None) -> Account:
        target = self._resolve(path)
        if not target.exists():
            raise NotFoundError("Accounts file not found")
        for account in self._load(target):
            if account.id == account_id:
                return account
        raise NotFoundError(f"Account not found: {account_id}")

    def create(
        self,
        name: str,
        email: str,
        access_token: str,
        refresh_token: str | None = None,
        *,
        path: str | Path | None = None,
    ) -> Account:
        target = self._resolve(path)
        accounts = self._load(target)
        ids = generate_identity()
        existing = {a.id for a in accounts}
        account = Account(
            name=name,
            email=email,
            access_token=access_token,
            refresh_token=refresh_token,
            machine_id=ids.machine_id,
            dev_device_id=ids.device_id,
        )
        while account.id in existing:
            account.id = str(uuid.uuid4())
        accounts.append(account)
        self._save(target, accounts)
        logger.info(f"Saved account {account.name} ({account.id})")
        return account

    def delete(self, account_id: str, *, path: str | Path | None = None) -> bool:
        """Remove an account by id. Unknown ids and a missing file are no-ops."""
        target = self._resolve(path)
        if not target.exists():
            return True
        accounts = self._load(target)
        remaining = [a for a in accounts if a.id != account_id]
        if len(remaining) != len(accounts):
            self._save(target, remaining)
            logger.info(f"Deleted account {account_id}")
        return True

    def import_from(self, path: str | Path, *, persist: bool = False) -> list[Account]:
        """Parse an exported account list.

        With `persist`, records replace stored ones sharing the same id and the
        rest are appended.
        """
        source = Path(path)
        if not source.exists():
            raise NotFoundError(f"File not found: {source}")
        imported = read_accounts(source)
        if persist:
            accounts = self._load(self.path)
            by_id = {a.id: i for i, a in enumerate(accounts)}
            for account in imported:
                if account.id in by_id:
                    accounts[by_id[account.id]] = account
                else:
                    by_id[account.id] = len(accounts)
                    accounts.append(account)
            self._save(self.path, accounts)
            logger.info(f"Imported {len(imported)} accounts into {self.path}")
        return imported

    def export(self) -> str:
        if not self.path.exists():
            raise NotFoundError("No accounts file found")
        return self.path.read_text(encoding="utf-8")

    def activate(self, account_id: str, sink: LogSink | None = None) -> OperationResult:
        """Make a saved account the IDE's active login. The record itself is not changed."""
        log = OperationLog(sink)
        if self.session is None:
            log.error("No active IDE session configured")
            return OperationResult(
                success=False, logs=list(log.lines), error="No active IDE session configured"
            )
        try:
            account = self.get(account_id)
        except (IdekitError, OSError) as e:
            log.error(str(e))
            return OperationResult.fail(log, e)

        log.info(f"Switching to account: {account.name}")
        log.info("Applying account credentials...")
        updates = self.session.credential_updates(
            email=account.email,
            access_token=account.access_token,
            refresh_token=account.refresh_token,
            machine_id=account.machine_id,
            dev_device_id=account.dev_device_id,
        )
        # Email and access token are always written, even when empty
        updates[EMAIL_KEY] = account.email
        updates[ACCESS_TOKEN_KEY] = account.access_token
        try:
            outcome = self.session.apply(updates, log, machine_id=account.machine_id)
        except (IdekitError, OSError) as e:
            log.error(str(e))
            return OperationResult.fail(log, e)
        if not outcome.json_ok and not outcome.table_ok:
            log.error("Account credentials were not written to any store")
            return OperationResult(
                success=False, logs=list(log.lines), error="No store accepted the update"
            )
        log.ok("Account switched successfully")
        log.info("Restart the IDE for changes to take effect")
        return OperationResult.ok(log, account=account.to_dict())

"""Credentials and identifiers of the IDE's currently active login."""

from __future__ import annotations

from pathlib import Path
from typing import Any

from loguru import logger

from idekit.errors import IdekitError
from idekit.oplog import LogSink, OperationLog, OperationResult
from idekit.platform.paths import IdePaths
from idekit.storage.backup import BackupManager
from idekit.storage.dual_store import DualStoreSync, SyncOutcome
from idekit.storage.sqlite_items import AUTO_ENGINE, SQLiteImageEngine

SIGN_UP_TYPE_KEY = "cursorAuth/cachedSignUpType"
EMAIL_KEY = "cursorAuth/cachedEmail"
ACCESS_TOKEN_KEY = "cursorAuth/accessToken"
REFRESH_TOKEN_KEY = "cursorAuth/refreshToken"
MACHINE_ID_KEY = "telemetry.machineId"
DEV_DEVICE_ID_KEY = "telemetry.devDeviceId"


class ActiveSession:
    """Reads and writes the login state stored in the IDE's dual store."""

    def __init__(
        self,
        paths: IdePaths,
        *,
        engine: SQLiteImageEngine | None = AUTO_ENGINE,
        sign_up_type: str = "Auth_0",
    ) -> None:
        self.paths = paths
        self.sign_up_type = sign_up_type
        self.sync = DualStoreSync(paths.storage_path, paths.sqlite_path, engine=engine)

    def credential_updates(
        self,
        *,
        email: str | None = None,
        access_token: str | None = None,
        refresh_token: str | None = None,
        machine_id: str | None = None,
        dev_device_id: str | None = None,
    ) -> dict[str, str]:
        updates = {SIGN_UP_TYPE_KEY: self.sign_up_type}
        if email:
            updates[EMAIL_KEY] = email
        if access_token:
            updates[ACCESS_TOKEN_KEY] = access_token
        if refresh_token:
            updates[REFRESH_TOKEN_KEY] = refresh_token
        if machine_id:
            updates[MACHINE_ID_KEY] = machine_id
        if dev_device_id:
            updates[DEV_DEVICE_ID_KEY] = dev_device_id
        return updates

    def apply(
        self,
        updates: dict[str, str],
        log: OperationLog,
        *,
        machine_id: str | None = None,
    ) -> SyncOutcome:
        """Back up every file about to change, then write through both stores.

        When `machine_id` is given and the machine-id file exists it is
        overwritten too. Raises BackupFailedError before any write.
        """
        machine_file = self.paths.machine_id_path
        write_machine_file = bool(machine_id) and machine_file.exists()

        backups = BackupManager()
        targets: list[Path] = [self.paths.storage_path, self.paths.sqlite_path]
        if write_machine_file:
            targets.append(machine_file)
        for target in targets:
            backup = backups.backup(target)
            if backup is not None:
                log.info(f"Backup created: {backup}")

        outcome = self.sync.apply(updates, log, create_json=True)

        if write_machine_file:
            try:
                machine_file.write_text(machine_id or "", encoding="utf-8")
                log.ok("Machine ID file updated")
            except OSError as e:
                log.warn(f"Could not update machine ID file: {e}")
        return outcome

    def update_auth(
        self,
        *,
        email: str | None = None,
        access_token: str | None = None,
        refresh_token: str | None = None,
        sink: LogSink | None = None,
    ) -> OperationResult:
        log = OperationLog(sink)
        log.info("Updating authentication...")
        updates = self.credential_updates(
            email=email, access_token=access_token, refresh_token=refresh_token
        )
        try:
            outcome = self.apply(updates, log)
        except (IdekitError, OSError) as e:
            log.error(str(e))
            return OperationResult.fail(log, e)
        if not outcome.json_ok and not outcome.table_ok:
            log.error("Authentication was not written to any store")
            return OperationResult(success=False, logs=list(log.lines), error="No store accepted the update")
        log.ok("Authentication updated successfully")
        return OperationResult.ok(log)

    def info(self) -> dict[str, Any]:
        """Current email, token and identifiers; missing values are None."""
        keys = {
            "email": EMAIL_KEY,
            "token": ACCESS_TOKEN_KEY,
            "machineId": MACHINE_ID_KEY,
            "devDeviceId": DEV_DEVICE_ID_KEY,
        }
        try:
            values = self.sync.read(keys.values())
        except Exception as e:
            logger.warning(f"Could not read active session: {e}")
            return {name: None for name in keys}
        return {name: values.get(key) for name, key in keys.items()}

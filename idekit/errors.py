"""Error taxonomy for store, backup and account operations."""

from __future__ import annotations

from enum import StrEnum


class ErrorCode(StrEnum):
    NOT_FOUND = "NotFound"
    STORE_MISSING = "StoreMissing"
    CORRUPT_STORE = "CorruptStore"
    BACKUP_FAILED = "BackupFailed"
    STORE_UNAVAILABLE = "StoreUnavailable"
    PARTIAL_WRITE = "PartialWriteWarning"
    INVALID_FORMAT = "InvalidFormat"


class IdekitError(Exception):
    """Base error; `code` identifies the failure class for result payloads."""

    code: ErrorCode = ErrorCode.NOT_FOUND


class NotFoundError(IdekitError):
    code = ErrorCode.NOT_FOUND


class StoreMissingError(NotFoundError):
    code = ErrorCode.STORE_MISSING


class CorruptStoreError(IdekitError):
    """Raised when a JSON store cannot be parsed."""

    code = ErrorCode.CORRUPT_STORE

    def __init__(self, message: str, *, preview: str = "") -> None:
        super().__init__(message)
        self.preview = preview


class BackupFailedError(IdekitError):
    code = ErrorCode.BACKUP_FAILED


class StoreUnavailableError(IdekitError):
    code = ErrorCode.STORE_UNAVAILABLE


class InvalidFormatError(IdekitError):
    code = ErrorCode.INVALID_FORMAT

"""Operator-facing log transcript and structured operation results."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable

from loguru import logger

from idekit.errors import ErrorCode, IdekitError

LogSink = Callable[[str], None]

_LEVELS = {
    "INFO": "INFO",
    "OK": "SUCCESS",
    "WARN": "WARNING",
    "ERROR": "ERROR",
}


class OperationLog:
    """Ordered transcript of one operation, forwarded line by line to a sink."""

    def __init__(self, sink: LogSink | None = None) -> None:
        self.lines: list[str] = []
        self._sink = sink
        self.warnings = 0

    def emit(self, line: str, *, level: str = "INFO") -> None:
        self.lines.append(line)
        if line.strip():
            logger.log(_LEVELS.get(level, "INFO"), line.strip())
        if self._sink is not None:
            try:
                self._sink(line)
            except Exception as e:
                logger.debug(f"log sink failed: {e}")

    def info(self, message: str) -> None:
        self.emit(f"[INFO] {message}", level="INFO")

    def ok(self, message: str) -> None:
        self.emit(f"[OK] {message}", level="OK")

    def warn(self, message: str) -> None:
        self.warnings += 1
        self.emit(f"[WARN] {message}", level="WARN")

    def error(self, message: str) -> None:
        self.emit(f"[ERROR] {message}", level="ERROR")

    def blank(self) -> None:
        self.emit("")

    def detail(self, message: str, *, ok: bool = True) -> None:
        """Indented per-key line, e.g. `  [OK] key: updated`."""
        if ok:
            self.emit(f"  [OK] {message}", level="OK")
        else:
            self.warnings += 1
            self.emit(f"  [WARN] {message}", level="WARN")


@dataclass(slots=True)
class OperationResult:
    """Terminal outcome of an orchestrated operation plus its transcript."""

    success: bool
    logs: list[str] = field(default_factory=list)
    error: str = ""
    code: ErrorCode | None = None
    data: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def ok(cls, log: OperationLog, **data: Any) -> "OperationResult":
        return cls(success=True, logs=list(log.lines), data=data)

    @classmethod
    def fail(cls, log: OperationLog, exc: Exception) -> "OperationResult":
        code = exc.code if isinstance(exc, IdekitError) else None
        return cls(success=False, logs=list(log.lines), error=str(exc), code=code)

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"success": self.success, "logs": list(self.logs)}
        if self.error:
            payload["error"] = self.error
        if self.code is not None:
            payload["code"] = self.code.value
        payload.update(self.data)
        return payload

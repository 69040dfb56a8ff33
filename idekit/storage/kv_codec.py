"""JSON key-value file codec tolerant of BOM prefixes and stray whitespace."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from loguru import logger

from idekit.errors import CorruptStoreError
from idekit.utils.helpers import truncate_string

BOM = "\ufeff"
STORE_INDENT = 4
ACCOUNTS_INDENT = 2


def clean_text(raw: str) -> str:
    """Strip a leading byte-order mark and surrounding whitespace."""
    if raw.startswith(BOM):
        raw = raw[1:]
    return raw.strip()


def decode_json(raw: str) -> Any:
    text = clean_text(raw)
    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        raise CorruptStoreError(
            f"Invalid JSON: {e}", preview=truncate_string(text, 100)
        ) from e


def decode_map(raw: str) -> dict[str, Any]:
    """Decode a JSON object; anything else is a corrupt store."""
    data = decode_json(raw)
    if not isinstance(data, dict):
        text = clean_text(raw)
        raise CorruptStoreError(
            f"Expected JSON object, got {type(data).__name__}",
            preview=truncate_string(text, 100),
        )
    return data


def encode_json(data: Any, *, indent: int = STORE_INDENT) -> str:
    return json.dumps(data, indent=indent, ensure_ascii=False)


def read_map(path: Path) -> dict[str, Any]:
    """Return the stored map, or an empty map when the file is absent or unreadable."""
    if not path.exists():
        return {}
    try:
        return load_map(path)
    except (CorruptStoreError, OSError) as e:
        logger.warning(f"Ignoring unreadable JSON store {path}: {e}")
        return {}


def read_text(path: Path) -> str:
    """Read UTF-8 text; undecodable bytes raise CorruptStoreError."""
    data = path.read_bytes()
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError as e:
        raise CorruptStoreError(
            f"Invalid UTF-8 in {path.name}: {e}",
            preview=truncate_string(data.decode("utf-8", errors="replace"), 100),
        ) from e


def load_map(path: Path) -> dict[str, Any]:
    """Strict read: raises CorruptStoreError on unparseable content."""
    return decode_map(read_text(path))


def write_json(path: Path, data: Any, *, indent: int = STORE_INDENT) -> None:
    """Replace the whole file; never writes a BOM."""
    path.write_text(encode_json(data, indent=indent), encoding="utf-8")

from __future__ import annotations

import json
from pathlib import Path

import pytest

from idekit.errors import CorruptStoreError, ErrorCode
from idekit.storage import kv_codec


def test_decode_map_tolerates_bom_and_whitespace() -> None:
    raw = '\ufeff  \n{"foo": "bar"}\n\n  '
    assert kv_codec.decode_map(raw) == {"foo": "bar"}


def test_decode_map_rejects_invalid_json_with_preview() -> None:
    raw = "{" + "x" * 300
    with pytest.raises(CorruptStoreError) as excinfo:
        kv_codec.decode_map(raw)
    assert excinfo.value.code == ErrorCode.CORRUPT_STORE
    assert excinfo.value.preview == raw[:100]


def test_decode_map_rejects_non_object() -> None:
    with pytest.raises(CorruptStoreError):
        kv_codec.decode_map("[1, 2, 3]")


def test_write_json_uses_indent_and_never_writes_bom(tmp_path: Path) -> None:
    path = tmp_path / "storage.json"
    kv_codec.write_json(path, {"a": "1", "b": {"c": 2}})
    raw = path.read_bytes()
    assert not raw.startswith(b"\xef\xbb\xbf")
    assert b'\n    "a": "1"' in raw
    assert json.loads(raw) == {"a": "1", "b": {"c": 2}}

    kv_codec.write_json(path, [{"id": "x"}], indent=kv_codec.ACCOUNTS_INDENT)
    assert '\n  {\n    "id": "x"' in path.read_text(encoding="utf-8")


def test_read_map_returns_empty_for_missing_or_corrupt(tmp_path: Path) -> None:
    missing = tmp_path / "missing.json"
    assert kv_codec.read_map(missing) == {}

    corrupt = tmp_path / "corrupt.json"
    corrupt.write_text("{not json", encoding="utf-8")
    assert kv_codec.read_map(corrupt) == {}

    good = tmp_path / "good.json"
    good.write_text('\ufeff{"k": "v"}  ', encoding="utf-8")
    assert kv_codec.read_map(good) == {"k": "v"}


def test_identity_values_roundtrip_unchanged(tmp_path: Path) -> None:
    from idekit.identity import generate_identity

    ids = generate_identity().to_store()
    path = tmp_path / "storage.json"
    kv_codec.write_json(path, ids)
    assert kv_codec.load_map(path) == ids


def test_undecodable_bytes_are_a_corrupt_store(tmp_path: Path) -> None:
    path = tmp_path / "storage.json"
    path.write_bytes(b'{"foo": "\xff bar"}')

    with pytest.raises(CorruptStoreError) as excinfo:
        kv_codec.load_map(path)
    assert excinfo.value.code == ErrorCode.CORRUPT_STORE
    assert excinfo.value.preview.startswith('{"foo": "\ufffd')
    assert kv_codec.read_map(path) == {}

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict

from reltable.config import get_config
from reltable.errors import PersistenceFailure
from reltable.storage.record import decode_payload, encode_payload

MAGIC = b"RELTBL01"
FORMAT_VERSION = 1


def snapshot_path(name: str, store_dir: str | Path | None = None, file_ext: str | None = None) -> Path:
    separators = {"/", "\\", os.sep, os.altsep} - {None}
    if name in ("", ".", "..") or any(sep in name for sep in separators):
        raise PersistenceFailure(f"Invalid table name for a snapshot: {name!r}")
    config = get_config()
    directory = Path(store_dir) if store_dir is not None else Path(config.store_dir)
    return directory / f"{name}{file_ext or config.file_ext}"


def write_snapshot(path: Path, payload: Dict[str, Any]) -> None:
    body = dict(payload)
    body["version"] = FORMAT_VERSION
    try:
        data = MAGIC + encode_payload(body)
    except ValueError as exc:
        # NaN/infinite reals have no JSON encoding.
        raise PersistenceFailure(f"Cannot encode snapshot: {exc}") from exc

    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = path.with_name(path.name + ".tmp")
    try:
        with open(tmp_path, "wb") as handle:
            handle.write(data)
            handle.flush()
            os.fsync(handle.fileno())
        os.replace(tmp_path, path)
    except OSError:
        tmp_path.unlink(missing_ok=True)
        raise


def read_snapshot(path: Path) -> Dict[str, Any]:
    with open(path, "rb") as handle:
        data = handle.read()
    if data[: len(MAGIC)] != MAGIC:
        raise PersistenceFailure(f"Not a reltable snapshot: {path}")
    payload = decode_payload(data[len(MAGIC) :])
    version = payload.get("version")
    if version != FORMAT_VERSION:
        raise PersistenceFailure(f"Unsupported snapshot version: {version}")
    return payload

from __future__ import annotations

import json
import struct
from typing import Any, Dict

from reltable.errors import PersistenceFailure

LENGTH_STRUCT = struct.Struct("<I")


def encode_payload(payload: Dict[str, Any]) -> bytes:
    # JSON keeps the snapshot readable; the length prefix lets readers detect truncation.
    body = json.dumps(payload, separators=(",", ":"), ensure_ascii=False, allow_nan=False).encode("utf-8")
    return LENGTH_STRUCT.pack(len(body)) + body


def decode_payload(blob: bytes) -> Dict[str, Any]:
    if len(blob) < LENGTH_STRUCT.size:
        raise PersistenceFailure("Truncated record: missing length prefix")
    (size,) = LENGTH_STRUCT.unpack(blob[: LENGTH_STRUCT.size])
    body = blob[LENGTH_STRUCT.size : LENGTH_STRUCT.size + size]
    if len(body) != size:
        raise PersistenceFailure(f"Truncated record: expected {size} bytes, got {len(body)}")
    try:
        payload = json.loads(body.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise PersistenceFailure("Invalid record payload") from exc
    if not isinstance(payload, dict):
        raise PersistenceFailure("Invalid record payload: expected an object")
    return payload

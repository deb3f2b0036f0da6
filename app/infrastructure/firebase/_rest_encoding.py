"""Firestore REST ``Value`` codec for the tenant documents.

Only the value kinds the identity documents use are supported: strings,
numbers, booleans, timestamps, nulls, bytes, and nested lists/maps
(notification settings). Reference and geo-point values decode to None.
"""

import base64
import re
from collections.abc import Callable
from datetime import datetime
from typing import Any

from app.shared.utils.datetime import ensure_utc

# Firestore returns up to nanosecond precision; datetime keeps microseconds.
_FRACTION_RE = re.compile(r"\.(\d{6})\d+")


def encode_value(value: Any) -> dict:
    """One Python value as a Firestore ``Value`` object."""
    # bool before int: bool is an int subclass.
    if value is None:
        return {"nullValue": None}
    if isinstance(value, bool):
        return {"booleanValue": value}
    if isinstance(value, int):
        return {"integerValue": str(value)}
    if isinstance(value, float):
        return {"doubleValue": value}
    if isinstance(value, str):
        return {"stringValue": value}
    if isinstance(value, datetime):
        return {"timestampValue": ensure_utc(value).strftime("%Y-%m-%dT%H:%M:%S.%fZ")}
    if isinstance(value, bytes):
        return {"bytesValue": base64.standard_b64encode(value).decode("ascii")}
    if isinstance(value, (list, tuple)):
        return {"arrayValue": {"values": [encode_value(item) for item in value]}}
    if isinstance(value, dict):
        return {"mapValue": encode_document(value)}
    raise TypeError(f"Cannot store {type(value).__name__} in a Firestore document")


def encode_document(data: dict[str, Any]) -> dict:
    """Dict to ``{"fields": {...}}`` (the body of a Document or mapValue)."""
    return {"fields": {key: encode_value(item) for key, item in data.items()}}


def _timestamp(raw: str) -> datetime:
    raw = _FRACTION_RE.sub(r".\1", raw.replace("Z", "+00:00"))
    return ensure_utc(datetime.fromisoformat(raw))


_DECODERS: dict[str, Callable[[Any], Any]] = {
    "nullValue": lambda _: None,
    "booleanValue": bool,
    "integerValue": int,
    "doubleValue": float,
    "stringValue": str,
    "timestampValue": _timestamp,
    "bytesValue": base64.standard_b64decode,
    "arrayValue": lambda raw: [decode_value(item) for item in raw.get("values") or []],
    "mapValue": lambda raw: decode_document(raw.get("fields")),
}


def decode_value(value: dict) -> Any:
    """Firestore ``Value`` object to a Python value."""
    for kind, decode in _DECODERS.items():
        if kind in value:
            return decode(value[kind])
    return None


def decode_document(fields: dict | None) -> dict:
    """Document ``fields`` mapping to a dict (empty for a document without fields)."""
    return {key: decode_value(item) for key, item in (fields or {}).items()}

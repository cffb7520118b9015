"""JSON encoding of values held in a KeyValueStorage."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

from ..errors import StorageError

if TYPE_CHECKING:
    from .base import KeyValueStorage

__all__ = ["read_json", "write_json"]


async def read_json(storage: KeyValueStorage, key: str) -> Any | None:
    """Decode the JSON value under ``key``; None when nothing is stored."""
    raw = await storage.get(key)
    if raw is None or raw == "":
        return None
    try:
        return json.loads(raw)
    except json.JSONDecodeError as e:
        raise StorageError(f"Value under '{key}' is not valid JSON: {e}", key=key) from e


async def write_json(storage: KeyValueStorage, key: str, value: Any) -> None:
    await storage.set(key, json.dumps(value, ensure_ascii=False))

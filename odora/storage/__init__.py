"""Key-value storage backends."""

from __future__ import annotations

from .base import KeyValueStorage
from .codec import read_json, write_json
from .file import JsonFileStorage
from .inmemory import InMemoryStorage

__all__ = [
    "KeyValueStorage",
    "InMemoryStorage",
    "JsonFileStorage",
    "read_json",
    "write_json",
]

"""The user's editable list of quick-pick tags."""

from __future__ import annotations

from collections.abc import Iterable
from typing import TYPE_CHECKING

import anyio
from loguru import logger

from .errors import MemoryValidationError, StorageError
from .storage import read_json, write_json

if TYPE_CHECKING:
    from .storage import KeyValueStorage

__all__ = [
    "COMMON_TAGS_KEY",
    "DEFAULT_COMMON_TAGS",
    "MAX_TAG_LENGTH",
    "normalize_tag",
    "toggle_tag",
    "TagCatalog",
]

COMMON_TAGS_KEY = "@odora_common_tags"
MAX_TAG_LENGTH = 20
DEFAULT_COMMON_TAGS = (
    "Breakfast",
    "Mom's Cooking",
    "Dinner",
    "Holidays",
    "Street Food",
    "Dessert",
    "Home",
    "Comfort Food",
)


def normalize_tag(tag: str) -> str:
    cleaned = tag.strip()
    if not cleaned:
        raise MemoryValidationError("Tag cannot be empty")
    if len(cleaned) > MAX_TAG_LENGTH:
        raise MemoryValidationError(f"Tags should be {MAX_TAG_LENGTH} characters or less")
    return cleaned


def toggle_tag(selected: Iterable[str], tag: str) -> list[str]:
    """Remove ``tag`` from the selection if present, otherwise append it."""
    current = list(selected)
    if tag in current:
        return [t for t in current if t != tag]
    return [*current, tag]


class TagCatalog:
    """Persisted quick-pick tags; edits are serialized behind one lock."""

    def __init__(self, storage: KeyValueStorage, *, key: str = COMMON_TAGS_KEY) -> None:
        self.storage = storage
        self.key = key
        self._lock = anyio.Lock()

    async def list_tags(self) -> list[str]:
        data = await read_json(self.storage, self.key)
        if data is None:
            return list(DEFAULT_COMMON_TAGS)
        if not isinstance(data, list) or not all(isinstance(t, str) for t in data):
            raise StorageError(f"Value under '{self.key}' must be a list of strings", key=self.key)
        return data

    async def add_tag(self, tag: str) -> list[str]:
        cleaned = normalize_tag(tag)
        async with self._lock:
            tags = await self.list_tags()
            if cleaned in tags:
                return tags
            tags.append(cleaned)
            await write_json(self.storage, self.key, tags)
        logger.info(f"Common tag added: {cleaned}")
        return tags

    async def remove_tag(self, tag: str) -> list[str]:
        async with self._lock:
            tags = await self.list_tags()
            if tag not in tags:
                return tags
            remaining = [t for t in tags if t != tag]
            await write_json(self.storage, self.key, remaining)
        logger.info(f"Common tag removed: {tag}")
        return remaining

    async def reset(self) -> None:
        async with self._lock:
            await self.storage.remove(self.key)

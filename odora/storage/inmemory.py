"""In-memory implementation of KeyValueStorage."""

from __future__ import annotations

from collections.abc import Iterable

from .base import KeyValueStorage

__all__ = ["InMemoryStorage"]


class InMemoryStorage(KeyValueStorage):
    """Dict-backed storage for tests and ephemeral sessions."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._values: dict[str, str] = dict(initial or {})

    async def get(self, key: str) -> str | None:
        return self._values.get(key)

    async def set(self, key: str, value: str) -> None:
        self._values[key] = value

    async def remove(self, key: str) -> None:
        self._values.pop(key, None)

    async def remove_many(self, keys: Iterable[str]) -> None:
        for key in keys:
            self._values.pop(key, None)

    def keys(self) -> list[str]:
        return list(self._values)

"""Abstract async key-value storage."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable

__all__ = ["KeyValueStorage"]


class KeyValueStorage(ABC):
    """String values addressed by string keys.

    Implementations raise ``StorageError`` for every backend failure.
    """

    @abstractmethod
    async def get(self, key: str) -> str | None:
        """Return the stored value, or None when the key is absent."""
        pass

    @abstractmethod
    async def set(self, key: str, value: str) -> None:
        """Store ``value`` under ``key``, replacing any previous value."""
        pass

    @abstractmethod
    async def remove(self, key: str) -> None:
        """Remove ``key``; absent keys are ignored."""
        pass

    @abstractmethod
    async def remove_many(self, keys: Iterable[str]) -> None:
        """Remove every key in ``keys`` in one operation."""
        pass

    async def close(self) -> None:
        """Release backend resources."""
        return None

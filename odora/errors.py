"""Error types raised by the Odora core."""

from __future__ import annotations

__all__ = [
    "OdoraError",
    "StorageError",
    "MemoryNotFoundError",
    "MemoryValidationError",
    "DescriptionGenerationError",
]


class OdoraError(Exception):
    """Base class for all Odora errors."""


class StorageError(OdoraError):
    """The key-value backend failed to read or write a value."""

    def __init__(self, message: str, key: str | None = None) -> None:
        super().__init__(message)
        self.key = key


class MemoryNotFoundError(OdoraError, LookupError):
    """No memory with the requested id exists."""

    def __init__(self, memory_id: str) -> None:
        super().__init__(f"Memory not found: {memory_id}")
        self.memory_id = memory_id


class MemoryValidationError(OdoraError, ValueError):
    """A value was rejected at the store boundary."""


class DescriptionGenerationError(OdoraError):
    """The scent description could not be generated."""

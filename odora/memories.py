"""CRUD over the memory collection.

The whole collection is stored as one JSON array under a single key and is
read, modified and written back as a unit on every mutation. Mutations are
serialized behind one in-process lock so concurrent callers cannot lose each
other's updates.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import TYPE_CHECKING, Any

import anyio
from loguru import logger
from pydantic import ValidationError

from .clock import Clock, TimestampIdFactory, epoch_millis, system_clock
from .errors import MemoryNotFoundError, MemoryValidationError, StorageError
from .models import RATING_MAX, RATING_MIN, FamilyVoice, Memory
from .storage import read_json, write_json

if TYPE_CHECKING:
    from collections.abc import Callable

    from .storage import KeyValueStorage

__all__ = ["MEMORIES_KEY", "MemoryStore", "validate_rating"]

MEMORIES_KEY = "@odora_memories"
IMMUTABLE_FIELDS = ("id", "timestamp")

# Accept both the persisted camelCase keys and the Python attribute names.
_FIELD_NAMES: dict[str, str] = {
    **{name: name for name in Memory.model_fields},
    **{field.alias: name for name, field in Memory.model_fields.items() if field.alias},
}


def _normalize_fields(fields: Mapping[str, Any]) -> dict[str, Any]:
    unknown = sorted(key for key in fields if key not in _FIELD_NAMES)
    if unknown:
        raise MemoryValidationError(f"Unknown memory fields: {unknown}")
    return {_FIELD_NAMES[key]: value for key, value in fields.items()}


def validate_rating(rating: Any) -> float:
    """Ratings are half steps between 1 and 5 inclusive."""
    if isinstance(rating, bool) or not isinstance(rating, int | float):
        raise MemoryValidationError(f"Rating must be a number, got {rating!r}")
    value = float(rating)
    if not RATING_MIN <= value <= RATING_MAX:
        raise MemoryValidationError(
            f"Rating must be between {RATING_MIN} and {RATING_MAX}, got {value}"
        )
    if not (value * 2).is_integer():
        raise MemoryValidationError(f"Rating must be a multiple of 0.5, got {value}")
    return value


def _check_memory(memory: Memory, changed: Iterable[str] | None = None) -> Memory:
    """Validate ``memory``, or only the ``changed`` fields of it.

    Stored records may predate these rules, so an update checks just what it
    sets.
    """
    names = set(Memory.model_fields if changed is None else changed)
    if "photo_uri" in names and not memory.photo_uri.strip():
        raise MemoryValidationError("photoUri is required")
    if "reminder_rating" in names and memory.reminder_rating is not None:
        validate_rating(memory.reminder_rating)
    return memory


def _index_of(memories: list[Memory], memory_id: str) -> int | None:
    for index, memory in enumerate(memories):
        if memory.id == memory_id:
            return index
    return None


class MemoryStore:
    """Persisted, most-recent-first collection of memories."""

    def __init__(
        self,
        storage: KeyValueStorage,
        *,
        clock: Clock = system_clock,
        id_factory: Callable[[], str] | None = None,
        key: str = MEMORIES_KEY,
    ) -> None:
        self.storage = storage
        self.key = key
        self._clock = clock
        self._new_id = id_factory or TimestampIdFactory(clock)
        self._lock = anyio.Lock()

    async def _load(self) -> list[Memory]:
        data = await read_json(self.storage, self.key)
        if data is None:
            return []
        if not isinstance(data, list):
            raise StorageError(f"Value under '{self.key}' must be a JSON array", key=self.key)
        try:
            return [Memory.model_validate(item) for item in data]
        except ValidationError as e:
            raise StorageError(f"Corrupt memory record under '{self.key}': {e}", key=self.key) from e

    async def _save(self, memories: list[Memory]) -> None:
        await write_json(self.storage, self.key, [m.to_storage() for m in memories])

    def _now_millis(self) -> int:
        return epoch_millis(self._clock())

    async def create(self, fields: Mapping[str, Any] | None = None, /, **extra: Any) -> Memory:
        """Save a new memory at the head of the collection.

        ``id`` and ``timestamp`` are generated unless supplied; ``tags`` and
        ``familyVoices`` default to empty lists and ``reminderRating`` to None.
        """
        values = _normalize_fields({**(fields or {}), **extra})
        payload = {"id": self._new_id(), "timestamp": self._now_millis(), **values}
        try:
            memory = _check_memory(Memory.model_validate(payload))
        except ValidationError as e:
            raise MemoryValidationError(f"Invalid memory: {e}") from e

        async with self._lock:
            memories = await self._load()
            if _index_of(memories, memory.id) is not None:
                raise MemoryValidationError(f"Memory id already exists: {memory.id}")
            memories.insert(0, memory)
            await self._save(memories)

        logger.info(f"Memory '{memory.id}' created with {len(memory.tags)} tags")
        return memory

    async def list_all(self) -> list[Memory]:
        """All memories in stored order, newest first."""
        memories = await self._load()
        logger.debug(f"Loaded {len(memories)} memories")
        return memories

    async def get_by_id(self, memory_id: str) -> Memory | None:
        memories = await self._load()
        index = _index_of(memories, memory_id)
        return None if index is None else memories[index]

    async def update(self, memory_id: str, fields: Mapping[str, Any]) -> Memory:
        """Shallow-merge ``fields`` into the memory and persist it.

        An empty mapping changes nothing and writes nothing.
        """
        values = _normalize_fields(fields)

        async with self._lock:
            memories = await self._load()
            index = _index_of(memories, memory_id)
            if index is None:
                raise MemoryNotFoundError(memory_id)
            current = memories[index]
            if not values:
                return current

            for name in IMMUTABLE_FIELDS:
                if name in values and values[name] != getattr(current, name):
                    raise MemoryValidationError(f"Field '{name}' cannot be changed")
            try:
                updated = _check_memory(
                    Memory.model_validate({**current.model_dump(), **values}), values
                )
            except ValidationError as e:
                raise MemoryValidationError(f"Invalid update for '{memory_id}': {e}") from e

            memories[index] = updated
            await self._save(memories)

        logger.info(f"Memory '{memory_id}' updated: {sorted(values)}")
        return updated

    async def rate(self, memory_id: str, rating: float) -> Memory:
        """Record how well the memory brought back the scent."""
        return await self.update(memory_id, {"reminder_rating": validate_rating(rating)})

    async def set_tags(self, memory_id: str, tags: Iterable[str]) -> Memory:
        return await self.update(memory_id, {"tags": list(tags)})

    async def set_custom_description(self, memory_id: str, description: str | None) -> Memory:
        text = description.strip() if description else ""
        return await self.update(memory_id, {"custom_description": text or None})

    async def delete(self, memory_id: str) -> bool:
        """Remove the memory. Unknown ids succeed and leave the collection as is."""
        async with self._lock:
            memories = await self._load()
            remaining = [m for m in memories if m.id != memory_id]
            await self._save(remaining)

        if len(remaining) == len(memories):
            logger.debug(f"Delete of unknown memory '{memory_id}' ignored")
        else:
            logger.info(f"Memory '{memory_id}' deleted")
        return True

    async def add_family_voice(self, memory_id: str, name: str, audio_uri: str) -> Memory:
        """Append a family member's recording to the memory."""
        voice = FamilyVoice(name=name, audio_uri=audio_uri, timestamp=self._now_millis())

        async with self._lock:
            memories = await self._load()
            index = _index_of(memories, memory_id)
            if index is None:
                raise MemoryNotFoundError(memory_id)
            current = memories[index]
            updated = current.model_copy(
                update={"family_voices": [*current.family_voices, voice]}
            )
            memories[index] = updated
            await self._save(memories)

        logger.info(f"Family voice '{name}' added to memory '{memory_id}'")
        return updated

    async def find_by_tag(self, tag: str) -> list[Memory]:
        return [m for m in await self._load() if tag in m.tags]

    async def filter_by_tags(self, tags: Iterable[str]) -> list[Memory]:
        """Memories carrying every one of ``tags``."""
        wanted = list(tags)
        return [m for m in await self._load() if all(tag in m.tags for tag in wanted)]

    async def search(self, query: str) -> list[Memory]:
        """Case-insensitive match against tags and both descriptions."""
        needle = query.strip().lower()
        memories = await self._load()
        if not needle:
            return memories

        def matches(memory: Memory) -> bool:
            if any(needle in tag.lower() for tag in memory.tags):
                return True
            if needle in memory.scent_description.lower():
                return True
            return bool(memory.custom_description) and needle in memory.custom_description.lower()

        return [m for m in memories if matches(m)]

    async def all_tags(self) -> list[str]:
        """Sorted unique tags across every memory."""
        return sorted({tag for memory in await self._load() for tag in memory.tags})

    async def clear(self) -> None:
        async with self._lock:
            await self.storage.remove(self.key)
        logger.info("All memories cleared")

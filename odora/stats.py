"""Aggregate counters and bulk data management for the settings view."""

from __future__ import annotations

from typing import TYPE_CHECKING

from loguru import logger

from .models import MemoryStats

if TYPE_CHECKING:
    from .memories import MemoryStore
    from .rituals import RitualTracker
    from .tags import TagCatalog

__all__ = ["DataManager"]


class DataManager:
    def __init__(self, memories: MemoryStore, rituals: RitualTracker, tags: TagCatalog) -> None:
        self.memories = memories
        self.rituals = rituals
        self.tags = tags

    async def collect_stats(self) -> MemoryStats:
        memories = await self.memories.list_all()
        state = await self.rituals.get_state()
        unique_tags = {tag for memory in memories for tag in memory.tags}
        return MemoryStats(
            total_memories=len(memories),
            total_tags=len(unique_tags),
            total_rituals=state.total_count,
            current_streak=state.streak,
            longest_streak=max(state.longest_streak, state.streak),
            total_badges=len(state.badges),
        )

    async def clear_all(self) -> None:
        """Delete memories, ritual state and custom tags together."""
        # Every component must share one backend for a single remove_many.
        storage = self.memories.storage
        await storage.remove_many([self.memories.key, self.rituals.key, self.tags.key])
        logger.info("All data cleared")

    async def clear_memories(self) -> None:
        await self.memories.clear()

    async def reset_gamification(self) -> None:
        await self.rituals.reset()

# odora/models.py
from __future__ import annotations

from datetime import date
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

__all__ = [
    "FamilyVoice",
    "Memory",
    "Badge",
    "RitualState",
    "CompletionResult",
    "MemoryStats",
    "RATING_MIN",
    "RATING_MAX",
]

RATING_MIN = 1.0
RATING_MAX = 5.0


class _Record(BaseModel):
    """Persisted records use camelCase keys on disk and snake_case in Python."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    def to_storage(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


class FamilyVoice(_Record):
    """A recording of a family member talking about the memory."""

    name: str
    audio_uri: str
    timestamp: int


class Memory(_Record):
    """One captured food/scent memory."""

    id: str
    photo_uri: str
    audio_uri: str | None = None
    scent_description: str = ""
    custom_description: str | None = None
    tags: list[str] = Field(default_factory=list)
    timestamp: int
    family_voices: list[FamilyVoice] = Field(default_factory=list)
    reminder_rating: float | None = None

    @property
    def display_description(self) -> str:
        """The user's own wording wins over the generated one."""
        return self.custom_description or self.scent_description


class Badge(_Record):
    id: str
    name: str
    icon: str


class RitualState(_Record):
    """Composite gamification record stored under a single key."""

    streak: int = 0
    total_count: int = 0
    longest_streak: int = 0
    badges: list[Badge] = Field(default_factory=list)
    last_completion_date: date | None = None

    def badge_ids(self) -> set[str]:
        return {badge.id for badge in self.badges}


class CompletionResult(BaseModel):
    state: RitualState
    new_badges: list[Badge] = Field(default_factory=list)


class MemoryStats(_Record):
    total_memories: int = 0
    total_tags: int = 0
    total_rituals: int = 0
    current_streak: int = 0
    longest_streak: int = 0
    total_badges: int = 0

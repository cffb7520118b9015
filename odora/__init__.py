"""Odora - food scent memories and ritual streaks.

Odora keeps photos of meals together with AI-written "scent memory"
descriptions, optional ambient recordings, tags, ratings and family voice
notes. It provides:

- A memory store persisted as one JSON array in a key-value backend
- A ritual tracker deriving streaks and badges from completion events
- A capture flow that describes, copies and saves new photos
- An MCP server exposing all of the above as tools

Key Components:
    MemoryStore: CRUD, tag lookup and search over memories
    RitualTracker: Streak, total and badge state
    OdoraConfig: Configuration from environment variables

Example:
    >>> from odora import InMemoryStorage, MemoryStore
    >>> store = MemoryStore(InMemoryStorage())
"""

from __future__ import annotations

from .config import OdoraConfig
from .errors import (
    DescriptionGenerationError,
    MemoryNotFoundError,
    MemoryValidationError,
    OdoraError,
    StorageError,
)
from .memories import MemoryStore
from .models import Badge, CompletionResult, FamilyVoice, Memory, RitualState
from .rituals import BADGE_RULES, RitualTracker
from .storage import InMemoryStorage, JsonFileStorage, KeyValueStorage

__version__ = "1.0.0"
__all__ = [
    "OdoraConfig",
    "MemoryStore",
    "RitualTracker",
    "BADGE_RULES",
    "Memory",
    "FamilyVoice",
    "Badge",
    "RitualState",
    "CompletionResult",
    "KeyValueStorage",
    "InMemoryStorage",
    "JsonFileStorage",
    "OdoraError",
    "StorageError",
    "MemoryNotFoundError",
    "MemoryValidationError",
    "DescriptionGenerationError",
]

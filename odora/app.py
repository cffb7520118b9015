"""Wiring of storage, stores and collaborators from configuration."""

from __future__ import annotations

import sys
from dataclasses import dataclass

from loguru import logger

from .ai import DescriptionGenerator, OpenAIDescriptionGenerator
from .capture import CaptureService
from .clock import Clock, system_clock
from .config import OdoraConfig
from .files import PhotoLibrary
from .memories import MemoryStore
from .rituals import RitualTracker
from .stats import DataManager
from .storage import InMemoryStorage, JsonFileStorage, KeyValueStorage
from .tags import TagCatalog

__all__ = ["OdoraApp", "build_app", "configure_logging"]


def configure_logging(debug: bool = False) -> None:
    """Send loguru output to stderr; stdout belongs to the MCP transport."""
    logger.remove()
    logger.add(sys.stderr, level="DEBUG" if debug else "INFO")


@dataclass
class OdoraApp:
    config: OdoraConfig
    storage: KeyValueStorage
    memories: MemoryStore
    rituals: RitualTracker
    tags: TagCatalog
    photos: PhotoLibrary
    capture: CaptureService
    data: DataManager
    generator: DescriptionGenerator | None = None

    async def close(self) -> None:
        await self.storage.close()
        if isinstance(self.generator, OpenAIDescriptionGenerator):
            await self.generator.close()


def build_app(
    config: OdoraConfig,
    *,
    storage: KeyValueStorage | None = None,
    generator: DescriptionGenerator | None = None,
    clock: Clock = system_clock,
) -> OdoraApp:
    if storage is None:
        storage = (
            JsonFileStorage(config.storage_path) if config.storage_path else InMemoryStorage()
        )
    if generator is None and config.openai_api_key:
        generator = OpenAIDescriptionGenerator(
            config.openai_api_key,
            model=config.vision_model,
            suggestion_model=config.suggestion_model,
        )

    memories = MemoryStore(storage, clock=clock)
    rituals = RitualTracker(storage, clock=clock, tz=config.tzinfo)
    tags = TagCatalog(storage)
    photos = PhotoLibrary(config.photo_dir, capture_dir=config.capture_dir, clock=clock)
    return OdoraApp(
        config=config,
        storage=storage,
        memories=memories,
        rituals=rituals,
        tags=tags,
        photos=photos,
        capture=CaptureService(memories, photos, generator),
        data=DataManager(memories, rituals, tags),
        generator=generator,
    )

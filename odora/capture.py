"""The save step of the capture flow."""

from __future__ import annotations

from collections.abc import Iterable
from typing import TYPE_CHECKING

from loguru import logger

from .errors import MemoryValidationError

if TYPE_CHECKING:
    from .ai import DescriptionGenerator
    from .files import PhotoLibrary
    from .memories import MemoryStore
    from .models import Memory

__all__ = ["CaptureService"]


class CaptureService:
    """Turns a captured photo into a persisted memory.

    The description is generated before anything touches disk, so a failed
    generation leaves no trace. If the record cannot be saved, the permanent
    photo copy is removed again.
    """

    def __init__(
        self,
        memories: MemoryStore,
        photos: PhotoLibrary,
        generator: DescriptionGenerator | None = None,
    ) -> None:
        self.memories = memories
        self.photos = photos
        self.generator = generator

    async def describe(self, temp_photo_uri: str, image_bytes: bytes | None = None) -> str:
        if self.generator is None:
            raise MemoryValidationError("No description generator is configured")
        if image_bytes is None:
            image_bytes = await self.photos.read_bytes(temp_photo_uri)
        return await self.generator.generate(image_bytes)

    async def save_capture(
        self,
        temp_photo_uri: str,
        *,
        image_bytes: bytes | None = None,
        description: str | None = None,
        audio_uri: str | None = None,
        tags: Iterable[str] = (),
    ) -> Memory:
        """Persist a capture; ``description`` skips generation when already edited."""
        if description is None:
            description = await self.describe(temp_photo_uri, image_bytes)
        if not description.strip():
            raise MemoryValidationError("Please add a scent description")

        photo_uri = await self.photos.copy_to_permanent_storage(temp_photo_uri)
        try:
            return await self.memories.create(
                photo_uri=photo_uri,
                audio_uri=audio_uri,
                scent_description=description,
                tags=list(tags),
            )
        except Exception:
            logger.error(f"Saving memory failed, removing copied photo {photo_uri}")
            await self.photos.delete(photo_uri)
            raise

    async def delete_memory(self, memory_id: str) -> bool:
        """Delete the record, then reclaim the files it referenced.

        Photo, ambient audio and family voice recordings are removed only
        when they live inside the photo library directory.
        """
        memory = await self.memories.get_by_id(memory_id)
        await self.memories.delete(memory_id)
        if memory is not None:
            uris = [memory.photo_uri, memory.audio_uri]
            uris.extend(voice.audio_uri for voice in memory.family_voices)
            for uri in uris:
                if uri:
                    await self.photos.delete(uri)
        return True

"""Permanent on-device copies of captured photos.

The library only reads captures from its capture directory and only deletes
files that live under its own directory. Anything a stored record points at
outside of it is left untouched.
"""

from __future__ import annotations

import shutil
from pathlib import Path

import anyio
import anyio.to_thread
from loguru import logger

from .clock import Clock, epoch_millis, system_clock
from .errors import MemoryValidationError

__all__ = ["PhotoLibrary", "uri_to_path"]

FILE_SCHEME = "file://"
CAPTURE_SUBDIR = "incoming"


def uri_to_path(uri: str) -> Path:
    return Path(uri.removeprefix(FILE_SCHEME))


async def _is_within(path: Path, root: Path) -> bool:
    resolved = Path(await anyio.Path(path).resolve())
    return resolved.is_relative_to(Path(await anyio.Path(root).resolve()))


class PhotoLibrary:
    """Copies transient capture files into the app's document directory."""

    def __init__(
        self,
        directory: str | Path,
        *,
        capture_dir: str | Path | None = None,
        clock: Clock = system_clock,
    ) -> None:
        self.directory = Path(directory)
        self.capture_dir = (
            Path(capture_dir) if capture_dir is not None else self.directory / CAPTURE_SUBDIR
        )
        self._clock = clock

    async def owns(self, uri: str) -> bool:
        """Whether ``uri`` resolves to a path inside the library directory."""
        return await _is_within(uri_to_path(uri), self.directory)

    async def _capture_path(self, uri: str) -> Path:
        path = uri_to_path(uri)
        if not await _is_within(path, self.capture_dir):
            raise MemoryValidationError(f"Captures must be inside {self.capture_dir}: {uri}")
        return path

    async def _target_for(self, suffix: str) -> Path:
        stamp = epoch_millis(self._clock())
        target = self.directory / f"photo_{stamp}{suffix}"
        while await anyio.Path(target).exists():
            stamp += 1
            target = self.directory / f"photo_{stamp}{suffix}"
        return target

    async def copy_to_permanent_storage(self, temp_uri: str) -> str:
        """Copy ``temp_uri`` into the library and return the permanent path."""
        source = await self._capture_path(temp_uri)
        await anyio.Path(self.directory).mkdir(parents=True, exist_ok=True)
        target = await self._target_for(source.suffix or ".jpg")
        await anyio.to_thread.run_sync(shutil.copyfile, source, target)
        logger.info(f"Image saved permanently: {target}")
        return str(target)

    async def read_bytes(self, uri: str) -> bytes:
        return await anyio.Path(await self._capture_path(uri)).read_bytes()

    async def delete(self, uri: str) -> bool:
        """Delete the library file behind ``uri``.

        Missing files are ignored and paths outside the library are skipped.
        Returns whether a file was removed.
        """
        if not await self.owns(uri):
            logger.warning(f"Not deleting {uri}: outside {self.directory}")
            return False
        path = anyio.Path(uri_to_path(uri))
        if not await path.exists():
            return False
        await path.unlink()
        logger.info(f"File deleted: {uri}")
        return True

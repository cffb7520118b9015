"""JSON-file implementation of KeyValueStorage."""

from __future__ import annotations

import json
from collections.abc import Iterable
from pathlib import Path

import anyio
from loguru import logger

from ..errors import StorageError
from .base import KeyValueStorage

__all__ = ["JsonFileStorage"]


class JsonFileStorage(KeyValueStorage):
    """All keys live in one JSON object on disk.

    Every write rewrites the whole document through a temporary file and an
    atomic rename, so readers never observe a half-written file.
    """

    def __init__(self, path: str | Path) -> None:
        self.path = anyio.Path(path)
        self._tmp_path = anyio.Path(f"{path}.tmp")
        self._write_lock = anyio.Lock()

    async def _load(self) -> dict[str, str]:
        try:
            if not await self.path.exists():
                return {}
            raw = await self.path.read_text(encoding="utf-8")
        except OSError as e:
            logger.error(f"Failed to read storage file {self.path}: {e}")
            raise StorageError(f"Failed to read {self.path}: {e}") from e

        if not raw.strip():
            return {}
        try:
            document = json.loads(raw)
        except json.JSONDecodeError as e:
            raise StorageError(f"Storage file {self.path} is not valid JSON: {e}") from e
        if not isinstance(document, dict):
            raise StorageError(f"Storage file {self.path} must contain a JSON object")
        return document

    async def _dump(self, document: dict[str, str]) -> None:
        try:
            await self.path.parent.mkdir(parents=True, exist_ok=True)
            await self._tmp_path.write_text(
                json.dumps(document, ensure_ascii=False), encoding="utf-8"
            )
            await self._tmp_path.replace(self.path)
        except OSError as e:
            logger.error(f"Failed to write storage file {self.path}: {e}")
            raise StorageError(f"Failed to write {self.path}: {e}") from e

    async def get(self, key: str) -> str | None:
        document = await self._load()
        return document.get(key)

    async def set(self, key: str, value: str) -> None:
        async with self._write_lock:
            document = await self._load()
            document[key] = value
            await self._dump(document)

    async def remove(self, key: str) -> None:
        await self.remove_many([key])

    async def remove_many(self, keys: Iterable[str]) -> None:
        async with self._write_lock:
            document = await self._load()
            removed = [key for key in keys if document.pop(key, None) is not None]
            if removed:
                await self._dump(document)

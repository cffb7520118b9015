"""
Tests for the key-value storage backends.
"""
import json

import pytest

from odora.errors import StorageError
from odora.storage import InMemoryStorage, JsonFileStorage, read_json, write_json


@pytest.fixture(params=["memory", "file"])
def backend(request, tmp_path):
    if request.param == "memory":
        return InMemoryStorage()
    return JsonFileStorage(tmp_path / "odora.json")


@pytest.mark.asyncio
async def test_get_missing_key_returns_none(backend):
    assert await backend.get("@nothing") is None


@pytest.mark.asyncio
async def test_set_then_get(backend):
    await backend.set("@odora_memories", "[]")
    await backend.set("@odora_memories", '[{"id": "1"}]')
    assert await backend.get("@odora_memories") == '[{"id": "1"}]'


@pytest.mark.asyncio
async def test_remove_and_remove_many(backend):
    for key in ("a", "b", "c"):
        await backend.set(key, key.upper())

    await backend.remove("a")
    await backend.remove("never-set")
    await backend.remove_many(["b", "missing"])

    assert await backend.get("a") is None
    assert await backend.get("b") is None
    assert await backend.get("c") == "C"


@pytest.mark.asyncio
async def test_json_helpers_round_trip(backend):
    await write_json(backend, "tags", ["Home", "Mom's Cooking"])
    assert await read_json(backend, "tags") == ["Home", "Mom's Cooking"]
    assert await read_json(backend, "absent") is None


@pytest.mark.asyncio
async def test_read_json_rejects_garbage():
    storage = InMemoryStorage({"tags": "[unterminated"})
    with pytest.raises(StorageError) as exc_info:
        await read_json(storage, "tags")
    assert exc_info.value.key == "tags"


@pytest.mark.asyncio
async def test_file_storage_persists_across_instances(tmp_path):
    path = tmp_path / "nested" / "odora.json"
    await JsonFileStorage(path).set("@odora_rituals", '{"streak": 2}')

    reopened = JsonFileStorage(path)
    assert await reopened.get("@odora_rituals") == '{"streak": 2}'
    assert json.loads(path.read_text(encoding="utf-8")) == {"@odora_rituals": '{"streak": 2}'}
    assert not (tmp_path / "nested" / "odora.json.tmp").exists()


@pytest.mark.asyncio
async def test_file_storage_corrupt_document(tmp_path):
    path = tmp_path / "odora.json"
    path.write_text("not json at all", encoding="utf-8")
    with pytest.raises(StorageError):
        await JsonFileStorage(path).get("anything")


@pytest.mark.asyncio
async def test_file_storage_non_object_document(tmp_path):
    path = tmp_path / "odora.json"
    path.write_text("[1, 2, 3]", encoding="utf-8")
    with pytest.raises(StorageError):
        await JsonFileStorage(path).get("anything")


@pytest.mark.asyncio
async def test_file_storage_empty_file_reads_as_empty(tmp_path):
    path = tmp_path / "odora.json"
    path.write_text("", encoding="utf-8")
    assert await JsonFileStorage(path).get("anything") is None


@pytest.mark.asyncio
async def test_file_storage_write_failure_is_storage_error(tmp_path):
    blocker = tmp_path / "blocker"
    blocker.write_text("a file, not a directory", encoding="utf-8")
    storage = JsonFileStorage(blocker / "odora.json")
    with pytest.raises(StorageError):
        await storage.set("key", "value")

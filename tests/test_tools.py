"""
Tests for MCP tool validation, dispatch and server wiring.
"""
from unittest.mock import AsyncMock

import mcp.types as types
import pytest

from odora.app import build_app
from odora.config import OdoraConfig
from odora.errors import MemoryNotFoundError, MemoryValidationError
from odora.server import create_server
from odora.tools import TOOL_DEFINITIONS, TOOL_HANDLERS, create_tool_validators, handle_tool


@pytest.fixture
def app(storage, clock, tmp_path):
    config = OdoraConfig(storage_path=None, photo_dir=str(tmp_path / "photos"), openai_api_key=None)
    return build_app(config, storage=storage, clock=clock)


@pytest.fixture
def validators():
    return create_tool_validators(TOOL_DEFINITIONS)


async def _call(app, validators, name, arguments=None):
    return await handle_tool(app, name, arguments, validators)


def test_every_tool_has_a_handler():
    assert set(TOOL_DEFINITIONS) == set(TOOL_HANDLERS)


@pytest.mark.asyncio
async def test_create_then_get(app, validators):
    created = await _call(
        app, validators, "create_memory",
        {"photoUri": "photo.jpg", "scentDescription": "warm bread", "tags": ["Home"]},
    )
    memory_id = created["memory"]["id"]

    fetched = await _call(app, validators, "get_memory", {"memory_id": memory_id})
    assert fetched["memory"]["scentDescription"] == "warm bread"
    assert fetched["memory"]["tags"] == ["Home"]


@pytest.mark.asyncio
async def test_list_applies_default_view_and_limit(app, validators, clock):
    for i in range(3):
        clock.advance(minutes=1)
        await _call(app, validators, "create_memory", {"photoUri": f"p{i}.jpg"})

    result = await _call(app, validators, "list_memories", {"limit": 2})
    assert len(result["memories"]) == 2
    assert "descriptionPreview" in result["memories"][0]


@pytest.mark.asyncio
async def test_schema_violations_raise_value_error(app, validators):
    with pytest.raises(ValueError, match="Tool validation failed"):
        await _call(app, validators, "create_memory", {})
    with pytest.raises(ValueError, match="Tool validation failed"):
        await _call(app, validators, "rate_memory", {"memory_id": "x", "rating": 4.2})


@pytest.mark.asyncio
async def test_unknown_tool(app, validators):
    with pytest.raises(ValueError, match="Unknown tool"):
        await _call(app, validators, "teleport")


@pytest.mark.asyncio
async def test_missing_memory_is_reported_distinctly(app, validators):
    with pytest.raises(MemoryNotFoundError):
        await _call(app, validators, "get_memory", {"memory_id": "nope"})
    with pytest.raises(MemoryNotFoundError):
        await _call(app, validators, "rate_memory", {"memory_id": "nope", "rating": 3})


@pytest.mark.asyncio
async def test_rate_update_and_voice(app, validators):
    created = await _call(app, validators, "create_memory", {"photoUri": "p.jpg"})
    memory_id = created["memory"]["id"]

    rated = await _call(app, validators, "rate_memory", {"memory_id": memory_id, "rating": 3.5})
    assert rated["memory"]["reminderRating"] == 3.5

    updated = await _call(
        app, validators, "update_memory",
        {"memory_id": memory_id, "fields": {"customDescription": "Sunday roast"}},
    )
    assert updated["memory"]["displayDescription"] == "Sunday roast"

    voiced = await _call(
        app, validators, "add_family_voice",
        {"memory_id": memory_id, "name": "Dad", "audioUri": "dad.m4a"},
    )
    assert voiced["memory"]["familyVoices"][0]["name"] == "Dad"


@pytest.mark.asyncio
async def test_search_and_find_by_tag(app, validators):
    await _call(app, validators, "create_memory", {"photoUri": "a.jpg", "tags": ["Dinner", "Home"]})
    await _call(app, validators, "create_memory", {"photoUri": "b.jpg", "scentDescription": "home fries", "tags": ["Breakfast"]})

    by_tag = await _call(app, validators, "find_by_tag", {"tag": "Dinner"})
    assert len(by_tag["memories"]) == 1

    searched = await _call(app, validators, "search_memories", {"query": "home"})
    assert len(searched["memories"]) == 2

    narrowed = await _call(app, validators, "search_memories", {"query": "home", "tags": ["Breakfast"]})
    assert len(narrowed["memories"]) == 1


@pytest.mark.asyncio
async def test_rituals_and_stats(app, validators):
    await _call(app, validators, "create_memory", {"photoUri": "a.jpg", "tags": ["Home"]})
    completed = await _call(app, validators, "complete_ritual")
    assert completed["state"]["streak"] == 1
    assert [b["id"] for b in completed["newBadges"]] == ["first_ritual"]

    status = await _call(app, validators, "ritual_status")
    assert status["state"]["totalCount"] == 1

    stats = await _call(app, validators, "get_stats")
    assert stats["stats"] == {
        "totalMemories": 1,
        "totalTags": 1,
        "totalRituals": 1,
        "currentStreak": 1,
        "longestStreak": 1,
        "totalBadges": 1,
    }


@pytest.mark.asyncio
async def test_common_tags(app, validators):
    tags = await _call(app, validators, "add_common_tag", {"tag": "Picnic"})
    assert tags["tags"][-1] == "Picnic"
    listed = await _call(app, validators, "list_common_tags")
    assert "Picnic" in listed["tags"]


@pytest.mark.asyncio
async def test_suggestions_use_display_description(storage, clock, tmp_path, validators):
    generator = AsyncMock()
    generator.suggest_scent_products.return_value = ["Fig Candle"]
    config = OdoraConfig(photo_dir=str(tmp_path), openai_api_key=None)
    app = build_app(config, storage=storage, generator=generator, clock=clock)

    created = await _call(app, validators, "create_memory", {"photoUri": "p.jpg", "scentDescription": "figs"})
    result = await _call(app, validators, "suggest_scent_products", {"memory_id": created["memory"]["id"]})

    assert result == {"suggestions": ["Fig Candle"]}
    generator.suggest_scent_products.assert_awaited_once_with("figs")


@pytest.mark.asyncio
async def test_capture_with_explicit_description(app, validators, tmp_path):
    photo = tmp_path / "photos" / "incoming" / "shot.jpg"
    photo.parent.mkdir(parents=True)
    photo.write_bytes(b"jpeg")
    result = await _call(
        app, validators, "capture_memory",
        {"photoPath": str(photo), "description": "Cinnamon rolls"},
    )
    assert result["memory"]["scentDescription"] == "Cinnamon rolls"

    deleted = await _call(app, validators, "delete_memory", {"memory_id": result["memory"]["id"]})
    assert deleted == {"deleted": True}
    assert photo.exists()
    assert [p.name for p in (tmp_path / "photos").iterdir()] == ["incoming"]


@pytest.mark.asyncio
async def test_delete_memory_keeps_arbitrary_files(app, validators, tmp_path):
    notes = tmp_path / "important_notes.txt"
    notes.write_text("keep me")
    created = await _call(app, validators, "create_memory", {"photoUri": str(notes)})

    deleted = await _call(app, validators, "delete_memory", {"memory_id": created["memory"]["id"]})

    assert deleted == {"deleted": True}
    assert notes.read_text() == "keep me"


@pytest.mark.asyncio
async def test_capture_memory_refuses_paths_outside_capture_dir(app, validators, tmp_path):
    notes = tmp_path / "important_notes.txt"
    notes.write_text("private")

    with pytest.raises(MemoryValidationError):
        await _call(app, validators, "capture_memory", {"photoPath": str(notes), "description": "x"})
    assert await app.memories.list_all() == []


def test_create_server_registers_tool_handlers(app):
    server = create_server(app)
    assert server.name == "odora"
    assert types.ListToolsRequest in server.request_handlers
    assert types.CallToolRequest in server.request_handlers

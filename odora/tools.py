"""Tool definitions and handlers for the Odora MCP server.

Each tool is described by a JSON Schema used both for listing and, once
compiled with fastjsonschema, for validating incoming arguments before the
handler runs.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, Any, TypeAlias

import fastjsonschema

from .errors import MemoryNotFoundError
from .formatters import ResultView, format_memories, format_memory

if TYPE_CHECKING:
    from .app import OdoraApp
    from .models import Memory

ToolSchema: TypeAlias = dict[str, Any]
ToolHandler: TypeAlias = "Callable[[OdoraApp, dict[str, Any]], Awaitable[dict[str, Any]]]"

__all__ = [
    "TOOL_DEFINITIONS",
    "create_tool_validators",
    "handle_tool",
    "ToolSchema",
]

VIEW_PROPERTY = {
    "type": "string",
    "enum": [view.value for view in ResultView],
    "default": ResultView.SUMMARY.value,
    "description": "Result view: compact, summary or full",
}
MEMORY_ID_PROPERTY = {"type": "string", "minLength": 1, "description": "Memory id"}
TAGS_PROPERTY = {"type": "array", "items": {"type": "string"}}


def _object(properties: dict[str, Any], required: list[str] | None = None) -> ToolSchema:
    return {
        "type": "object",
        "properties": properties,
        "required": required or [],
        "additionalProperties": False,
    }


TOOL_DEFINITIONS: dict[str, dict[str, Any]] = {
    "list_memories": {
        "description": "List saved food memories, newest first.",
        "inputSchema": _object(
            {"view": VIEW_PROPERTY, "limit": {"type": "integer", "minimum": 1}}
        ),
    },
    "get_memory": {
        "description": "Fetch one memory by id.",
        "inputSchema": _object(
            {"memory_id": MEMORY_ID_PROPERTY, "view": {**VIEW_PROPERTY, "default": "full"}},
            ["memory_id"],
        ),
    },
    "create_memory": {
        "description": "Save a memory for a photo already in permanent storage.",
        "inputSchema": _object(
            {
                "photoUri": {"type": "string", "minLength": 1},
                "scentDescription": {"type": "string"},
                "customDescription": {"type": ["string", "null"]},
                "audioUri": {"type": ["string", "null"]},
                "tags": TAGS_PROPERTY,
            },
            ["photoUri"],
        ),
    },
    "capture_memory": {
        "description": "Describe a captured photo, copy it to permanent storage and save it.",
        "inputSchema": _object(
            {
                "photoPath": {"type": "string", "minLength": 1},
                "description": {"type": "string"},
                "audioUri": {"type": ["string", "null"]},
                "tags": TAGS_PROPERTY,
            },
            ["photoPath"],
        ),
    },
    "update_memory": {
        "description": "Replace named fields of a memory; other fields are kept.",
        "inputSchema": _object(
            {"memory_id": MEMORY_ID_PROPERTY, "fields": {"type": "object"}},
            ["memory_id", "fields"],
        ),
    },
    "rate_memory": {
        "description": "Rate how well a memory brought back the scent (1-5, half steps).",
        "inputSchema": _object(
            {
                "memory_id": MEMORY_ID_PROPERTY,
                "rating": {"type": "number", "minimum": 1, "maximum": 5, "multipleOf": 0.5},
            },
            ["memory_id", "rating"],
        ),
    },
    "delete_memory": {
        "description": "Delete a memory and its stored files.",
        "inputSchema": _object({"memory_id": MEMORY_ID_PROPERTY}, ["memory_id"]),
    },
    "add_family_voice": {
        "description": "Attach a family member's recording to a memory.",
        "inputSchema": _object(
            {
                "memory_id": MEMORY_ID_PROPERTY,
                "name": {"type": "string", "minLength": 1},
                "audioUri": {"type": "string", "minLength": 1},
            },
            ["memory_id", "name", "audioUri"],
        ),
    },
    "find_by_tag": {
        "description": "Memories carrying an exact tag.",
        "inputSchema": _object(
            {"tag": {"type": "string"}, "view": VIEW_PROPERTY}, ["tag"]
        ),
    },
    "search_memories": {
        "description": "Search tags and descriptions, optionally requiring every given tag.",
        "inputSchema": _object(
            {"query": {"type": "string", "default": ""}, "tags": TAGS_PROPERTY, "view": VIEW_PROPERTY}
        ),
    },
    "suggest_scent_products": {
        "description": "Suggest candles or incense that recreate a memory's scent.",
        "inputSchema": _object({"memory_id": MEMORY_ID_PROPERTY}, ["memory_id"]),
    },
    "complete_ritual": {
        "description": "Record a finished ritual and return streak and new badges.",
        "inputSchema": _object({}),
    },
    "ritual_status": {
        "description": "Current streak, totals and badges.",
        "inputSchema": _object({}),
    },
    "get_stats": {
        "description": "Counts of memories, tags, rituals, streaks and badges.",
        "inputSchema": _object({}),
    },
    "list_common_tags": {
        "description": "Quick-pick tags offered when tagging a memory.",
        "inputSchema": _object({}),
    },
    "add_common_tag": {
        "description": "Add a quick-pick tag (20 characters at most).",
        "inputSchema": _object({"tag": {"type": "string"}}, ["tag"]),
    },
}


def create_tool_validators(
    definitions: dict[str, dict[str, Any]],
) -> dict[str, Callable[[dict[str, Any]], dict[str, Any]]]:
    """Compile one argument validator per tool."""
    return {
        name: fastjsonschema.compile(definition["inputSchema"], use_default=True)
        for name, definition in definitions.items()
    }


def return_tool_error(error_msg: str) -> str:
    """Strip validator path prefixes from error messages."""
    return error_msg.replace("data.", "").replace("data ", "")


async def _require_memory(app: OdoraApp, memory_id: str) -> Memory:
    memory = await app.memories.get_by_id(memory_id)
    if memory is None:
        raise MemoryNotFoundError(memory_id)
    return memory


async def _list_memories(app: OdoraApp, args: dict[str, Any]) -> dict[str, Any]:
    memories = await app.memories.list_all()
    if "limit" in args:
        memories = memories[: args["limit"]]
    return {"memories": format_memories(memories, args["view"])}


async def _get_memory(app: OdoraApp, args: dict[str, Any]) -> dict[str, Any]:
    memory = await _require_memory(app, args["memory_id"])
    return {"memory": format_memory(memory, args["view"])}


async def _create_memory(app: OdoraApp, args: dict[str, Any]) -> dict[str, Any]:
    memory = await app.memories.create(args)
    return {"message": f"Memory stored with id: {memory.id}", "memory": format_memory(memory)}


async def _capture_memory(app: OdoraApp, args: dict[str, Any]) -> dict[str, Any]:
    memory = await app.capture.save_capture(
        args["photoPath"],
        description=args.get("description"),
        audio_uri=args.get("audioUri"),
        tags=args.get("tags", []),
    )
    return {"message": f"Memory stored with id: {memory.id}", "memory": format_memory(memory)}


async def _update_memory(app: OdoraApp, args: dict[str, Any]) -> dict[str, Any]:
    memory = await app.memories.update(args["memory_id"], args["fields"])
    return {"memory": format_memory(memory)}


async def _rate_memory(app: OdoraApp, args: dict[str, Any]) -> dict[str, Any]:
    memory = await app.memories.rate(args["memory_id"], args["rating"])
    return {"memory": format_memory(memory, "compact")}


async def _delete_memory(app: OdoraApp, args: dict[str, Any]) -> dict[str, Any]:
    deleted = await app.capture.delete_memory(args["memory_id"])
    return {"deleted": deleted}


async def _add_family_voice(app: OdoraApp, args: dict[str, Any]) -> dict[str, Any]:
    memory = await app.memories.add_family_voice(args["memory_id"], args["name"], args["audioUri"])
    return {"memory": format_memory(memory)}


async def _find_by_tag(app: OdoraApp, args: dict[str, Any]) -> dict[str, Any]:
    memories = await app.memories.find_by_tag(args["tag"])
    return {"memories": format_memories(memories, args["view"])}


async def _search_memories(app: OdoraApp, args: dict[str, Any]) -> dict[str, Any]:
    memories = await app.memories.search(args["query"])
    if args.get("tags"):
        tagged = {m.id for m in await app.memories.filter_by_tags(args["tags"])}
        memories = [m for m in memories if m.id in tagged]
    return {"memories": format_memories(memories, args["view"])}


async def _suggest_scent_products(app: OdoraApp, args: dict[str, Any]) -> dict[str, Any]:
    memory = await _require_memory(app, args["memory_id"])
    suggest = getattr(app.generator, "suggest_scent_products", None)
    if suggest is None:
        return {"suggestions": []}
    return {"suggestions": await suggest(memory.display_description)}


async def _complete_ritual(app: OdoraApp, args: dict[str, Any]) -> dict[str, Any]:
    result = await app.rituals.record_completion()
    return {
        "state": result.state.to_storage(),
        "newBadges": [badge.to_storage() for badge in result.new_badges],
    }


async def _ritual_status(app: OdoraApp, args: dict[str, Any]) -> dict[str, Any]:
    state = await app.rituals.check_streak_validity()
    return {"state": state.to_storage()}


async def _get_stats(app: OdoraApp, args: dict[str, Any]) -> dict[str, Any]:
    stats = await app.data.collect_stats()
    return {"stats": stats.to_storage()}


async def _list_common_tags(app: OdoraApp, args: dict[str, Any]) -> dict[str, Any]:
    return {"tags": await app.tags.list_tags()}


async def _add_common_tag(app: OdoraApp, args: dict[str, Any]) -> dict[str, Any]:
    return {"tags": await app.tags.add_tag(args["tag"])}


TOOL_HANDLERS: dict[str, ToolHandler] = {
    "list_memories": _list_memories,
    "get_memory": _get_memory,
    "create_memory": _create_memory,
    "capture_memory": _capture_memory,
    "update_memory": _update_memory,
    "rate_memory": _rate_memory,
    "delete_memory": _delete_memory,
    "add_family_voice": _add_family_voice,
    "find_by_tag": _find_by_tag,
    "search_memories": _search_memories,
    "suggest_scent_products": _suggest_scent_products,
    "complete_ritual": _complete_ritual,
    "ritual_status": _ritual_status,
    "get_stats": _get_stats,
    "list_common_tags": _list_common_tags,
    "add_common_tag": _add_common_tag,
}


async def handle_tool(
    app: OdoraApp,
    name: str,
    arguments: dict[str, Any] | None,
    validators: dict[str, Callable[[dict[str, Any]], dict[str, Any]]],
) -> dict[str, Any]:
    """Validate ``arguments`` for tool ``name`` and run its handler."""
    handler = TOOL_HANDLERS.get(name)
    if handler is None:
        raise ValueError(f"Unknown tool: {name}")
    try:
        validated = validators[name](dict(arguments or {}))
    except fastjsonschema.JsonSchemaException as validation_error:
        raise ValueError(
            f"Tool validation failed: {return_tool_error(str(validation_error))}"
        ) from validation_error
    return await handler(app, validated)

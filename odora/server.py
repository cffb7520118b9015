"""Odora MCP Server"""

import json
import sys
from typing import Any

import anyio
import mcp.server.stdio
import mcp.types as types
from mcp.server.lowlevel import Server
from mcp.server.models import InitializationOptions, ServerCapabilities

from .app import OdoraApp, build_app, configure_logging
from .config import OdoraConfig, TransportType
from .errors import OdoraError
from .tools import TOOL_DEFINITIONS, create_tool_validators, handle_tool

__all__ = ["create_server", "main"]


def _text(payload: dict[str, Any]) -> list[types.TextContent]:
    return [types.TextContent(type="text", text=json.dumps(payload, indent=2))]


def create_server(app: OdoraApp) -> Server:
    """Build the MCP server exposing the memory and ritual tools."""
    mcp_server = Server(app.config.server_name)
    tool_validators = create_tool_validators(TOOL_DEFINITIONS)

    @mcp_server.list_tools()
    async def list_tools() -> list[types.Tool]:
        """Return all available tools."""
        return [
            types.Tool(
                name=name,
                description=definition["description"],
                inputSchema=definition["inputSchema"],
            )
            for name, definition in TOOL_DEFINITIONS.items()
        ]

    @mcp_server.call_tool()
    async def call_tool(name: str, arguments: dict) -> list[types.TextContent]:
        """Route tool calls to their handlers and return JSON responses."""
        try:
            result = await handle_tool(app, name, arguments, tool_validators)
            return _text(result)
        except (OdoraError, ValueError, TypeError) as e:
            return _text({"error": str(e), "type": type(e).__name__})
        except Exception as e:
            return _text(
                {"error": f"An unexpected error occurred: {e}", "type": type(e).__name__}
            )

    return mcp_server


def main() -> int:
    """Main entry point for the Odora MCP server."""
    try:
        config = OdoraConfig.from_env()
        print(f"[OK] Loaded config for server: {config.server_name}", file=sys.stderr)
    except Exception as e:
        print(f"[ERROR] Configuration error: {e}", file=sys.stderr)
        return 1

    configure_logging(config.debug)
    app = build_app(config)
    storage_label = config.storage_path or "in-memory"
    print(f"[OK] Storage ready: {storage_label}", file=sys.stderr)
    if app.generator is None:
        print("[OK] No OPENAI_API_KEY set, capture needs explicit descriptions", file=sys.stderr)

    mcp_server = create_server(app)

    if config.transport == TransportType.STDIO:

        async def run_server() -> None:
            init_options = InitializationOptions(
                server_name=config.server_name,
                server_version=config.odora_version,
                capabilities=ServerCapabilities(tools={}),
            )
            print("[READY] Odora MCP server startup complete", file=sys.stderr)
            try:
                async with mcp.server.stdio.stdio_server() as (read_stream, write_stream):
                    await mcp_server.run(read_stream, write_stream, init_options)
            finally:
                await app.close()

        anyio.run(run_server)

    return 0


if __name__ == "__main__":
    sys.exit(main())

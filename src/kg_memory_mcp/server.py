from __future__ import annotations

import asyncio
import logging
import sys
from typing import Any

from mcp import types
from mcp.server.lowlevel import Server
from mcp.server.stdio import stdio_server

from kg_common.errors import ConfigError
from kg_config.settings import MemoryApiSettings, init_runtime, load_settings
from kg_memory_mcp import __version__, registry
from kg_memory_mcp.client import MemoryApiClient
from kg_memory_mcp.dispatcher import Dispatcher

logger = logging.getLogger(__name__)

SERVER_NAME = "kg-memory-mcp"


def create_server(dispatcher: Dispatcher) -> Server:
    """Build the MCP server exposing the tool catalog and routing calls to `dispatcher`."""
    server = Server(SERVER_NAME, version=__version__)

    @server.list_tools()
    async def list_tools() -> list[types.Tool]:
        return registry.list_tools()

    # The catalog schemas are advisory; argument checks live in the dispatcher.
    @server.call_tool(validate_input=False)
    async def call_tool(name: str, arguments: dict[str, Any] | None) -> types.CallToolResult:
        return await dispatcher.dispatch(name, arguments)

    return server


def build_dispatcher(settings: MemoryApiSettings) -> Dispatcher:
    return Dispatcher(MemoryApiClient(settings))


async def run_server(settings: MemoryApiSettings) -> None:
    server = create_server(build_dispatcher(settings))
    async with stdio_server() as (read_stream, write_stream):
        logger.info("Knowledge Graph MCP server running on stdio (api=%s)", settings.base_url)
        await server.run(read_stream, write_stream, server.create_initialization_options())


def main() -> None:
    # Entry points (console_scripts) call main() directly, so we must perform
    # runtime initialization here (dotenv + logging).
    try:
        init_runtime()
        settings = load_settings()
    except ConfigError as e:
        logger.error("Configuration error: %s", e)
        sys.exit(1)

    try:
        asyncio.run(run_server(settings))
    except KeyboardInterrupt:
        pass
    except Exception as e:
        logger.critical("Fatal error in main(): %s", e, exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()

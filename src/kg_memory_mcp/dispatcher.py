"""
Routes tools/call requests to the memory API facade.

Each tool maps to one handler that pulls its fields out of the argument bag
without trusting their shape and calls exactly one facade method. Everything a
handler produces, success or failure, is folded into a CallToolResult here;
nothing is raised past `Dispatcher.dispatch`.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Awaitable, Callable, Mapping, Optional

from mcp import types

from kg_common.errors import BAD_REQUEST, UNKNOWN_TOOL
from kg_common.result import ApiResult
from kg_common.tooling import InstrumentConfig, instrument_async_tool
from kg_memory_mcp import registry
from kg_memory_mcp.client import MemoryApiClient

logger = logging.getLogger(__name__)

Handler = Callable[[MemoryApiClient, Mapping[str, Any]], Awaitable[ApiResult]]

# Tools whose success carries no payload worth rendering
_CONFIRMATIONS = {
    "delete_entities": "Entities deleted successfully",
    "delete_observations": "Observations deleted successfully",
    "delete_relations": "Relations deleted successfully",
}


def _list_arg(arguments: Mapping[str, Any], key: str) -> list:
    value = arguments.get(key)
    return list(value) if isinstance(value, (list, tuple)) else []


def _str_arg(arguments: Mapping[str, Any], key: str) -> str:
    value = arguments.get(key)
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


def _int_arg(arguments: Mapping[str, Any], key: str) -> Optional[int]:
    value = arguments.get(key)
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def text_result(text: str, *, is_error: bool = False) -> types.CallToolResult:
    return types.CallToolResult(
        content=[types.TextContent(type="text", text=text)],
        isError=is_error,
    )


def error_result(message: str) -> types.CallToolResult:
    return text_result(f"Error: {message}", is_error=True)


_HANDLERS: dict[str, Handler] = {}


def _tool(name: str):
    """Register an instrumented handler for `name`."""

    def decorator(fn: Handler) -> Handler:
        wrapped = instrument_async_tool(InstrumentConfig(kind="tool", name=name))(fn)
        _HANDLERS[name] = wrapped
        return wrapped

    return decorator


@_tool("check_health")
async def _check_health(client: MemoryApiClient, arguments: Mapping[str, Any]) -> ApiResult:
    return await client.check_health()


@_tool("create_entities")
async def _create_entities(client: MemoryApiClient, arguments: Mapping[str, Any]) -> ApiResult:
    return await client.create_entities(_list_arg(arguments, "entities"))


@_tool("create_relations")
async def _create_relations(client: MemoryApiClient, arguments: Mapping[str, Any]) -> ApiResult:
    return await client.create_relations(_list_arg(arguments, "relations"))


@_tool("add_observations")
async def _add_observations(client: MemoryApiClient, arguments: Mapping[str, Any]) -> ApiResult:
    return await client.add_observations(_list_arg(arguments, "observations"))


@_tool("delete_entities")
async def _delete_entities(client: MemoryApiClient, arguments: Mapping[str, Any]) -> ApiResult:
    return await client.delete_entities(_list_arg(arguments, "entityNames"))


@_tool("delete_observations")
async def _delete_observations(client: MemoryApiClient, arguments: Mapping[str, Any]) -> ApiResult:
    return await client.delete_observations(_list_arg(arguments, "deletions"))


@_tool("delete_relations")
async def _delete_relations(client: MemoryApiClient, arguments: Mapping[str, Any]) -> ApiResult:
    return await client.delete_relations(_list_arg(arguments, "relations"))


@_tool("read_graph")
async def _read_graph(client: MemoryApiClient, arguments: Mapping[str, Any]) -> ApiResult:
    return await client.read_graph()


@_tool("search_nodes")
async def _search_nodes(client: MemoryApiClient, arguments: Mapping[str, Any]) -> ApiResult:
    return await client.search_nodes(_str_arg(arguments, "query"))


@_tool("open_nodes")
async def _open_nodes(client: MemoryApiClient, arguments: Mapping[str, Any]) -> ApiResult:
    return await client.open_nodes(_list_arg(arguments, "names"))


@_tool("get_patterns")
async def _get_patterns(client: MemoryApiClient, arguments: Mapping[str, Any]) -> ApiResult:
    category = arguments.get("category")
    return await client.get_patterns(category if isinstance(category, str) and category else None)


@_tool("get_temporal_graph")
async def _get_temporal_graph(client: MemoryApiClient, arguments: Mapping[str, Any]) -> ApiResult:
    return await client.get_temporal_graph(_str_arg(arguments, "startDate"), _str_arg(arguments, "endDate"))


@_tool("find_path")
async def _find_path(client: MemoryApiClient, arguments: Mapping[str, Any]) -> ApiResult:
    return await client.find_path(
        _str_arg(arguments, "from"),
        _str_arg(arguments, "to"),
        _int_arg(arguments, "maxDepth"),
    )


class Dispatcher:
    def __init__(self, client: MemoryApiClient) -> None:
        self.client = client
        self.handlers: dict[str, Handler] = dict(_HANDLERS)

    async def dispatch(self, name: str, arguments: Any) -> types.CallToolResult:
        handler = self.handlers.get(name)
        if handler is None:
            result = ApiResult.failure(UNKNOWN_TOOL, f"Unknown tool: {name}")
        elif not _has_arguments(name, arguments):
            result = ApiResult.failure(BAD_REQUEST, f"No arguments provided for tool: {name}")
        else:
            result = await handler(self.client, arguments)

        if not result.ok:
            logger.info("Tool %s failed: %s", name, result.error["error"])
            return error_result(result.message)

        if name in _CONFIRMATIONS:
            return text_result(_CONFIRMATIONS[name])
        return text_result(json.dumps(result.value, indent=2, ensure_ascii=False, default=str))


def _has_arguments(name: str, arguments: Any) -> bool:
    """
    An argument bag must be present; it may only be empty for tools with no required fields.

    This is stricter than a bare presence check on purpose: an empty bag for a tool
    with required fields is refused here instead of being forwarded upstream.
    """
    if not isinstance(arguments, Mapping):
        return False
    if arguments:
        return True
    spec = registry.get_tool(name)
    return spec is not None and not spec.required

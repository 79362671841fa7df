"""
Lending desk MCP tools.

Each tool is a dict with ``name``, ``description``, ``inputSchema`` and an
async ``handler(arguments, store)``. The server binds every handler to its
``RecordStore`` with ``bind_tool`` before registering it, so handlers never
reach for global state.
"""

from collections.abc import Awaitable, Callable
from typing import Any

from ..store import RecordStore
from .catalog import catalog_tools
from .records import record_tools

all_tools = catalog_tools + record_tools

BoundHandler = Callable[[dict[str, Any]], Awaitable[dict[str, Any]]]


def bind_tool(tool: dict[str, Any], store: RecordStore) -> BoundHandler:
    """Return the tool's handler with ``store`` filled in."""
    handler = tool["handler"]

    async def bound(arguments: dict[str, Any]) -> dict[str, Any]:
        return await handler(arguments, store)

    bound.__name__ = tool["name"]
    bound.__doc__ = tool["description"]
    return bound


__all__ = [
    "all_tools",
    "bind_tool",
    "catalog_tools",
    "record_tools",
]

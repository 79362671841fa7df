"""Lending Desk MCP Resources

Read-only views over the record store. Handlers take the store as their
only argument; ``bind_resource`` closes over it so FastMCP sees a static,
parameterless resource.
"""

from collections.abc import Awaitable, Callable
from typing import Any

from ..store import RecordStore
from .records import record_resources
from .stats import stats_resources

all_resources = record_resources + stats_resources


def bind_resource(
    resource: dict[str, Any], store: RecordStore
) -> Callable[[], Awaitable[dict[str, Any]]]:
    handler = resource["handler"]

    async def bound() -> dict[str, Any]:
        return await handler(store)

    bound.__name__ = handler.__name__
    bound.__doc__ = resource["description"]
    return bound


__all__ = [
    "all_resources",
    "bind_resource",
    "record_resources",
    "stats_resources",
]

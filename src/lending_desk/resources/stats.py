"""Lending Totals Resource

Resources:
- library://stats/totals - Record, book and borrower counts for the desk
"""

import logging
from typing import Any

from fastmcp.exceptions import ResourceError

from ..store import RecordStore

logger = logging.getLogger(__name__)


async def lending_totals_handler(store: RecordStore) -> dict[str, Any]:
    """Returns the summary counts shown beside the record table.

    ``total_books_borrowed`` counts the books on every record, returned
    ones included.
    """
    try:
        logger.debug("MCP Resource Request - stats/totals")
        return store.totals().model_dump(mode="json")
    except Exception as e:
        logger.exception("Error in stats/totals resource")
        raise ResourceError(f"Failed to compute lending totals: {e!s}") from e


stats_resources: list[dict[str, Any]] = [
    {
        "uri": "library://stats/totals",
        "name": "Lending Totals",
        "description": (
            "Total records, books borrowed, returned and overdue counts, borrower "
            "counts and catalog availability."
        ),
        "mime_type": "application/json",
        "handler": lending_totals_handler,
    },
]

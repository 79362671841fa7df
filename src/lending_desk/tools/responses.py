"""
MCP result builders shared by the lending desk tools.

Tool results are plain dicts: ``content`` holds human-readable text blocks,
``data`` holds structured output for follow-up calls, and failures carry
``isError`` plus the store's ``error_type`` so a client can branch on it.
"""

import logging
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from ..store.errors import BorrowerNotFound, LendingError

logger = logging.getLogger(__name__)


def success_result(message: str, data: dict[str, Any] | None = None) -> dict[str, Any]:
    result: dict[str, Any] = {"content": [{"type": "text", "text": message}]}
    if data is not None:
        result["data"] = data
    return result


def error_result(
    message: str, error_type: str = "error", data: dict[str, Any] | None = None
) -> dict[str, Any]:
    result: dict[str, Any] = {
        "isError": True,
        "error_type": error_type,
        "content": [{"type": "text", "text": message}],
    }
    if data is not None:
        result["data"] = data
    return result


def invalid_arguments(tool_name: str, exc: PydanticValidationError) -> dict[str, Any]:
    logger.warning("Invalid %s parameters: %s", tool_name, exc)
    return error_result(f"Invalid {tool_name} parameters: {exc}", "validation")


def store_error(tool_name: str, exc: LendingError) -> dict[str, Any]:
    """Translate a store exception into an MCP error result."""
    logger.info("%s failed (%s): %s", tool_name, exc.error_type, exc)
    if isinstance(exc, BorrowerNotFound):
        return error_result(
            f"{exc} Call {tool_name} again with create_borrower=true to register "
            "them as a new borrower.",
            exc.error_type,
            {"borrower_name": exc.name},
        )
    return error_result(str(exc), exc.error_type)


def unexpected_error(tool_name: str, exc: Exception) -> dict[str, Any]:
    logger.exception("Unexpected error in %s tool", tool_name)
    return error_result(f"An unexpected error occurred: {exc!s}")

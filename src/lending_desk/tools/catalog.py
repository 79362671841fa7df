"""
Catalog and roster tools.

1. add_book: add a title to the catalog under a generated ID
2. delete_book: remove a title that is not on loan
3. add_borrower: register a borrower under the lowest free serial
4. delete_borrower: remove a borrower with no unreturned records
"""

import logging
from typing import Any

from pydantic import BaseModel, Field
from pydantic import ValidationError as PydanticValidationError

from ..store import LendingError, RecordStore
from .responses import invalid_arguments, store_error, success_result, unexpected_error

logger = logging.getLogger(__name__)


# =============================================================================
# BOOKS
# =============================================================================


class AddBookInput(BaseModel):
    """Input schema for the add_book tool."""

    name: str = Field(
        ...,
        min_length=1,
        max_length=200,
        description="Book title; must not match an existing title (case-insensitive)",
        examples=["The Pragmatic Programmer", "Dune"],
    )
    author: str = Field(
        ...,
        min_length=1,
        max_length=200,
        description="Author name",
        examples=["Andrew Hunt", "Frank Herbert"],
    )
    year: int = Field(
        ...,
        ge=0,
        description="Publication year",
        examples=[1999, 1965],
    )


async def add_book_handler(arguments: dict[str, Any], store: RecordStore) -> dict[str, Any]:
    """Add a book; the catalog ID is generated from the title."""
    try:
        try:
            params = AddBookInput.model_validate(arguments)
        except PydanticValidationError as e:
            return invalid_arguments("add_book", e)

        try:
            book = store.add_book(params.name, params.author, params.year)
        except LendingError as e:
            return store_error("add_book", e)

        return success_result(
            f"Added '{book.name}' by {book.author} to the catalog as {book.id}",
            {"book": book.model_dump()},
        )

    except Exception as e:
        return unexpected_error("add_book", e)


class DeleteBookInput(BaseModel):
    """Input schema for the delete_book tool."""

    book_id: str = Field(
        ...,
        description="Catalog ID of the book to delete",
        examples=["TB-0001", "DU-0042"],
    )


async def delete_book_handler(arguments: dict[str, Any], store: RecordStore) -> dict[str, Any]:
    """Delete a book; refused while the book is on loan."""
    try:
        try:
            params = DeleteBookInput.model_validate(arguments)
        except PydanticValidationError as e:
            return invalid_arguments("delete_book", e)

        try:
            book = store.delete_book(params.book_id)
        except LendingError as e:
            return store_error("delete_book", e)

        return success_result(
            f"Deleted '{book.name}' ({book.id}) from the catalog",
            {"book": book.model_dump()},
        )

    except Exception as e:
        return unexpected_error("delete_book", e)


# =============================================================================
# BORROWERS
# =============================================================================


class AddBorrowerInput(BaseModel):
    """Input schema for the add_borrower tool."""

    name: str = Field(
        ...,
        min_length=1,
        max_length=100,
        description="Borrower name; must not match an existing borrower (case-insensitive)",
        examples=["Ada Lovelace"],
    )


async def add_borrower_handler(
    arguments: dict[str, Any], store: RecordStore
) -> dict[str, Any]:
    try:
        try:
            params = AddBorrowerInput.model_validate(arguments)
        except PydanticValidationError as e:
            return invalid_arguments("add_borrower", e)

        try:
            borrower = store.add_borrower(params.name)
        except LendingError as e:
            return store_error("add_borrower", e)

        return success_result(
            f"Registered {borrower.name} as {borrower.serial}",
            {"borrower": borrower.model_dump()},
        )

    except Exception as e:
        return unexpected_error("add_borrower", e)


class DeleteBorrowerInput(BaseModel):
    """Input schema for the delete_borrower tool."""

    serial: str = Field(
        ...,
        description="Serial of the borrower to delete",
        pattern=r"^STU-\d{3,}$",
        examples=["STU-001"],
    )


async def delete_borrower_handler(
    arguments: dict[str, Any], store: RecordStore
) -> dict[str, Any]:
    try:
        try:
            params = DeleteBorrowerInput.model_validate(arguments)
        except PydanticValidationError as e:
            return invalid_arguments("delete_borrower", e)

        try:
            borrower = store.delete_borrower(params.serial)
        except LendingError as e:
            return store_error("delete_borrower", e)

        return success_result(
            f"Removed {borrower.name} ({borrower.serial}) from the roster",
            {"borrower": borrower.model_dump()},
        )

    except Exception as e:
        return unexpected_error("delete_borrower", e)


# =============================================================================
# TOOL DEFINITIONS
# =============================================================================

add_book = {
    "name": "add_book",
    "description": (
        "Add a book to the catalog. The ID is generated from the title's initials and "
        "a counter that never repeats. Titles must be unique and the year non-negative."
    ),
    "inputSchema": AddBookInput.model_json_schema(),
    "handler": add_book_handler,
}

delete_book = {
    "name": "delete_book",
    "description": "Delete a book from the catalog. Books that are on loan cannot be deleted.",
    "inputSchema": DeleteBookInput.model_json_schema(),
    "handler": delete_book_handler,
}

add_borrower = {
    "name": "add_borrower",
    "description": (
        "Register a borrower. The serial (STU-NNN) is the lowest number not in use, "
        "so serials freed by deletions are reused."
    ),
    "inputSchema": AddBorrowerInput.model_json_schema(),
    "handler": add_borrower_handler,
}

delete_borrower = {
    "name": "delete_borrower",
    "description": (
        "Remove a borrower from the roster. Borrowers holding unreturned books cannot be removed."
    ),
    "inputSchema": DeleteBorrowerInput.model_json_schema(),
    "handler": delete_borrower_handler,
}

catalog_tools = [add_book, delete_book, add_borrower, delete_borrower]

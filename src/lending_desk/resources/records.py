"""Record, Catalog and Roster Resources

Read-only views of the record store.

Resources:
- library://records/list - Every loan record in table order, with search suggestions
- library://books/list - The catalog, alphabetical by title
- library://borrowers/list - The roster, by serial number
"""

import logging
from typing import Any

from fastmcp.exceptions import ResourceError
from pydantic import BaseModel, Field

from ..models.book import Book
from ..models.borrower import Borrower
from ..models.record import Record
from ..store import RecordStore

logger = logging.getLogger(__name__)


class RecordListResponse(BaseModel):
    records: list[Record] = Field(..., description="Records in table order")
    total: int = Field(..., description="Number of records")
    suggestions: list[str] = Field(..., description="Autocomplete terms for the search box")
    editing: str | None = Field(default=None, description="ID of the record under edit, if any")


class BookListResponse(BaseModel):
    books: list[Book] = Field(..., description="Catalog sorted by title")
    total: int = Field(..., description="Number of books")
    available: int = Field(..., description="Books not on loan")


class BorrowerListResponse(BaseModel):
    borrowers: list[Borrower] = Field(..., description="Roster sorted by serial number")
    total: int = Field(..., description="Number of borrowers")


async def list_records_handler(store: RecordStore) -> dict[str, Any]:
    """Returns every record in the store's current order."""
    try:
        logger.debug("MCP Resource Request - records/list")
        token = store.edit_in_progress
        response = RecordListResponse(
            records=store.records,
            total=len(store.records),
            suggestions=store.suggestions(),
            editing=token.record_id if token else None,
        )
        return response.model_dump(mode="json")
    except Exception as e:
        logger.exception("Error in records/list resource")
        raise ResourceError(f"Failed to retrieve record list: {e!s}") from e


async def list_books_handler(store: RecordStore) -> dict[str, Any]:
    try:
        logger.debug("MCP Resource Request - books/list")
        books = store.list_books()
        response = BookListResponse(
            books=books,
            total=len(books),
            available=sum(1 for book in books if book.is_available),
        )
        return response.model_dump(mode="json")
    except Exception as e:
        logger.exception("Error in books/list resource")
        raise ResourceError(f"Failed to retrieve book list: {e!s}") from e


async def list_borrowers_handler(store: RecordStore) -> dict[str, Any]:
    try:
        logger.debug("MCP Resource Request - borrowers/list")
        borrowers = store.list_borrowers()
        response = BorrowerListResponse(borrowers=borrowers, total=len(borrowers))
        return response.model_dump(mode="json")
    except Exception as e:
        logger.exception("Error in borrowers/list resource")
        raise ResourceError(f"Failed to retrieve borrower list: {e!s}") from e


record_resources: list[dict[str, Any]] = [
    {
        "uri": "library://records/list",
        "name": "Loan Records",
        "description": (
            "All loan records in table order with borrower, books, dates and status, "
            "plus autocomplete terms for searching."
        ),
        "mime_type": "application/json",
        "handler": list_records_handler,
    },
    {
        "uri": "library://books/list",
        "name": "Book Catalog",
        "description": "Every book in the catalog, alphabetical by title, with availability.",
        "mime_type": "application/json",
        "handler": list_books_handler,
    },
    {
        "uri": "library://borrowers/list",
        "name": "Borrower Roster",
        "description": "Every registered borrower, ordered by serial number.",
        "mime_type": "application/json",
        "handler": list_borrowers_handler,
    },
]

"""
Loan record tools.

These tools drive the record lifecycle on the store:

1. create_record: open a loan for one borrower and one or more books
2. begin_edit_record / commit_edit_record / cancel_edit_record: the
   single edit lock; only one record can be under edit at a time
3. delete_record / delete_all_records: remove records and release books
4. sweep_overdue: mark borrowed records past their return date as overdue
5. search_records: filtered, sorted view of the record table

A borrower that does not resolve is reported with
``error_type="borrower_not_found"``. The caller can repeat the same call
with ``create_borrower=true`` to register the name as part of the commit.
"""

import logging
from datetime import date
from typing import Any

from pydantic import BaseModel, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from ..models.record import Record, RecordStatus
from ..store import EditToken, LendingError, RecordSortOptions, RecordStore, SortOrder
from .responses import (
    invalid_arguments,
    store_error,
    success_result,
    unexpected_error,
)

logger = logging.getLogger(__name__)


def _record_data(record: Record) -> dict[str, Any]:
    return record.model_dump(mode="json")


def _token_data(token: EditToken) -> dict[str, str]:
    return token.model_dump()


# =============================================================================
# CREATE
# =============================================================================


class LoanFields(BaseModel):
    """Fields shared by create_record and commit_edit_record."""

    books: list[str] = Field(
        ...,
        min_length=1,
        description="Catalog IDs or titles of the books on the loan",
        examples=[["TB-1482", "The Pragmatic Programmer"]],
    )
    borrowed_date: date = Field(
        ...,
        description="Date the books were borrowed",
        examples=["2025-03-01"],
    )
    return_date: date = Field(
        ...,
        description="Expected return date, strictly after borrowed_date",
        examples=["2025-03-15"],
    )
    status: RecordStatus = Field(
        default=RecordStatus.BORROWED,
        description="Record status: borrowed, returned or overdue",
    )
    create_borrower: bool = Field(
        default=False,
        description="Register the borrower as a new borrower if the name does not resolve",
    )


class CreateRecordInput(LoanFields):
    """Input schema for the create_record tool."""

    borrower: str = Field(
        ...,
        min_length=1,
        description="Serial or name of the borrower, or the name of a new borrower",
        examples=["STU-001", "Ada Lovelace"],
    )


async def create_record_handler(
    arguments: dict[str, Any], store: RecordStore
) -> dict[str, Any]:
    """
    Handler for the create_record tool.

    Every check runs before anything changes: on any error the catalog,
    the roster and the record list are exactly as they were.
    """
    try:
        try:
            params = CreateRecordInput.model_validate(arguments)
        except PydanticValidationError as e:
            return invalid_arguments("create_record", e)

        try:
            record = store.create_record(
                borrower=params.borrower,
                books=params.books,
                borrowed_date=params.borrowed_date,
                return_date=params.return_date,
                status=params.status,
                create_borrower=params.create_borrower,
            )
        except LendingError as e:
            return store_error("create_record", e)

        titles = ", ".join(f"'{book.name}'" for book in record.books)
        message = (
            f"Record {record.id} created: {record.borrower.name} ({record.borrower.serial}) "
            f"borrowed {titles}, due back {record.return_date.strftime('%B %d, %Y')}"
        )
        return success_result(message, {"record": _record_data(record)})

    except Exception as e:
        return unexpected_error("create_record", e)


# =============================================================================
# EDIT LOCK
# =============================================================================


class BeginEditInput(BaseModel):
    """Input schema for the begin_edit_record tool."""

    record_id: str = Field(
        ...,
        description="ID of the record to edit",
        pattern=r"^rec_[a-f0-9]{12}$",
        examples=["rec_3f9a0c1b2d4e"],
    )


async def begin_edit_record_handler(
    arguments: dict[str, Any], store: RecordStore
) -> dict[str, Any]:
    """Take the edit lock and return the token commit_edit_record needs."""
    try:
        try:
            params = BeginEditInput.model_validate(arguments)
        except PydanticValidationError as e:
            return invalid_arguments("begin_edit_record", e)

        try:
            token = store.begin_edit(params.record_id)
            record = store.get_record(token.record_id)
        except LendingError as e:
            return store_error("begin_edit_record", e)

        return success_result(
            f"Editing record {record.id}. Pass record_id and nonce to commit_edit_record, "
            "or call cancel_edit_record to release it.",
            {"token": _token_data(token), "record": _record_data(record)},
        )

    except Exception as e:
        return unexpected_error("begin_edit_record", e)


class CommitEditInput(LoanFields):
    """Input schema for the commit_edit_record tool."""

    record_id: str = Field(..., description="ID from the edit token", pattern=r"^rec_[a-f0-9]{12}$")
    nonce: str = Field(..., min_length=1, description="Nonce from the edit token")
    borrower: str | None = Field(
        default=None,
        description="New borrower serial or name; omit to keep the current borrower",
    )


async def commit_edit_record_handler(
    arguments: dict[str, Any], store: RecordStore
) -> dict[str, Any]:
    """
    Handler for the commit_edit_record tool.

    The new book list replaces the old one. Books dropped from the list
    are released, books added must be available. On error the record is
    unchanged and the edit stays open.
    """
    try:
        try:
            params = CommitEditInput.model_validate(arguments)
        except PydanticValidationError as e:
            return invalid_arguments("commit_edit_record", e)

        token = EditToken(record_id=params.record_id, nonce=params.nonce)
        try:
            record = store.commit_edit(
                token,
                books=params.books,
                borrowed_date=params.borrowed_date,
                return_date=params.return_date,
                status=params.status,
                borrower=params.borrower,
                create_borrower=params.create_borrower,
            )
        except LendingError as e:
            return store_error("commit_edit_record", e)

        return success_result(
            f"Record {record.id} updated: {record.display_info()}",
            {"record": _record_data(record)},
        )

    except Exception as e:
        return unexpected_error("commit_edit_record", e)


async def cancel_edit_record_handler(
    arguments: dict[str, Any], store: RecordStore
) -> dict[str, Any]:
    """Release the edit lock without changes. Takes no arguments."""
    try:
        token = store.edit_in_progress
        store.cancel_edit()
        if token is None:
            return success_result("No record was being edited")
        return success_result(
            f"Edit of record {token.record_id} cancelled",
            {"record_id": token.record_id},
        )
    except Exception as e:
        return unexpected_error("cancel_edit_record", e)


# =============================================================================
# DELETE
# =============================================================================


class DeleteRecordInput(BaseModel):
    """Input schema for the delete_record tool."""

    record_id: str = Field(
        ...,
        description="ID of the record to delete",
        pattern=r"^rec_[a-f0-9]{12}$",
    )


async def delete_record_handler(
    arguments: dict[str, Any], store: RecordStore
) -> dict[str, Any]:
    try:
        try:
            params = DeleteRecordInput.model_validate(arguments)
        except PydanticValidationError as e:
            return invalid_arguments("delete_record", e)

        try:
            record = store.delete_record(params.record_id)
        except LendingError as e:
            return store_error("delete_record", e)

        return success_result(
            f"Record {record.id} deleted; {len(record.books)} book(s) released",
            {"record": _record_data(record)},
        )

    except Exception as e:
        return unexpected_error("delete_record", e)


class DeleteAllRecordsInput(BaseModel):
    """Input schema for the delete_all_records tool."""

    confirm: bool = Field(
        ...,
        description="Must be true; every record is removed and cannot be restored",
    )

    @field_validator("confirm")
    @classmethod
    def validate_confirm(cls, v: bool) -> bool:
        if not v:
            raise ValueError("confirm must be true to delete all records")
        return v


async def delete_all_records_handler(
    arguments: dict[str, Any], store: RecordStore
) -> dict[str, Any]:
    try:
        try:
            DeleteAllRecordsInput.model_validate(arguments)
        except PydanticValidationError as e:
            return invalid_arguments("delete_all_records", e)

        try:
            removed = store.delete_all_records()
        except LendingError as e:
            return store_error("delete_all_records", e)

        return success_result(f"Deleted {removed} record(s)", {"deleted": removed})

    except Exception as e:
        return unexpected_error("delete_all_records", e)


# =============================================================================
# OVERDUE SWEEP AND SEARCH
# =============================================================================


class SweepOverdueInput(BaseModel):
    """Input schema for the sweep_overdue tool."""

    today: date | None = Field(
        default=None,
        description="Date to sweep against; defaults to the server's current date",
        examples=["2025-03-20"],
    )


async def sweep_overdue_handler(
    arguments: dict[str, Any], store: RecordStore
) -> dict[str, Any]:
    try:
        try:
            params = SweepOverdueInput.model_validate(arguments or {})
        except PydanticValidationError as e:
            return invalid_arguments("sweep_overdue", e)

        changed = store.sweep_overdue(params.today)
        return success_result(
            f"Marked {len(changed)} record(s) overdue",
            {
                "updated": len(changed),
                "records": [_record_data(record) for record in changed],
            },
        )

    except Exception as e:
        return unexpected_error("sweep_overdue", e)


class SearchRecordsInput(BaseModel):
    """Input schema for the search_records tool."""

    query: str = Field(
        default="",
        max_length=200,
        description=(
            "Case-insensitive text matched against borrower serial and name, book titles "
            "and IDs, and status. Empty matches every record."
        ),
        examples=["overdue", "STU-002", "Pragmatic"],
    )
    sort_by: RecordSortOptions = Field(
        default=RecordSortOptions.SERIAL,
        description="Sort field: name, serial, borrowed_date, return_date or status",
    )
    order: SortOrder = Field(default=SortOrder.ASC, description="asc or desc")


async def search_records_handler(
    arguments: dict[str, Any], store: RecordStore
) -> dict[str, Any]:
    try:
        try:
            params = SearchRecordsInput.model_validate(arguments or {})
        except PydanticValidationError as e:
            return invalid_arguments("search_records", e)

        records = store.search(params.query, params.sort_by, params.order)
        logger.debug("search_records %r matched %d record(s)", params.query, len(records))

        if records:
            lines = [f"Found {len(records)} record(s):"]
            lines.extend(f"- {record.id}: {record.display_info()}" for record in records)
            message = "\n".join(lines)
        else:
            message = f"No records match '{params.query}'"

        return success_result(
            message,
            {
                "records": [_record_data(record) for record in records],
                "total": len(records),
                "query": params.query,
                "sort_by": params.sort_by.value,
                "order": params.order.value,
            },
        )

    except Exception as e:
        return unexpected_error("search_records", e)


# =============================================================================
# TOOL DEFINITIONS
# =============================================================================

create_record = {
    "name": "create_record",
    "description": (
        "Open a loan record for a borrower and one or more available books. Borrowers with "
        "overdue records cannot borrow. If the borrower is unknown the result has "
        "error_type 'borrower_not_found'; retry with create_borrower=true to register them."
    ),
    "inputSchema": CreateRecordInput.model_json_schema(),
    "handler": create_record_handler,
}

begin_edit_record = {
    "name": "begin_edit_record",
    "description": (
        "Start editing a record. Only one record can be edited at a time; while an edit is "
        "open, records cannot be deleted. Returns the token commit_edit_record needs."
    ),
    "inputSchema": BeginEditInput.model_json_schema(),
    "handler": begin_edit_record_handler,
}

commit_edit_record = {
    "name": "commit_edit_record",
    "description": (
        "Save the open edit: replace the record's books, dates, status and optionally its "
        "borrower. Books removed from the list become available again."
    ),
    "inputSchema": CommitEditInput.model_json_schema(),
    "handler": commit_edit_record_handler,
}

cancel_edit_record = {
    "name": "cancel_edit_record",
    "description": "Abandon the open edit without changing the record.",
    "inputSchema": {"type": "object", "properties": {}},
    "handler": cancel_edit_record_handler,
}

delete_record = {
    "name": "delete_record",
    "description": "Delete a record and make its books available again.",
    "inputSchema": DeleteRecordInput.model_json_schema(),
    "handler": delete_record_handler,
}

delete_all_records = {
    "name": "delete_all_records",
    "description": "Delete every record and make every listed book available. Requires confirm=true.",
    "inputSchema": DeleteAllRecordsInput.model_json_schema(),
    "handler": delete_all_records_handler,
}

sweep_overdue = {
    "name": "sweep_overdue",
    "description": (
        "Mark every borrowed record whose return date has passed as overdue. "
        "Running it again on the same day changes nothing."
    ),
    "inputSchema": SweepOverdueInput.model_json_schema(),
    "handler": sweep_overdue_handler,
}

search_records = {
    "name": "search_records",
    "description": "Search and sort the record table.",
    "inputSchema": SearchRecordsInput.model_json_schema(),
    "handler": search_records_handler,
}

record_tools = [
    create_record,
    begin_edit_record,
    commit_edit_record,
    cancel_edit_record,
    delete_record,
    delete_all_records,
    sweep_overdue,
    search_records,
]

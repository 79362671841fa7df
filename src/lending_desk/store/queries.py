"""
Derived views over the record store: search, sort and totals.

None of these functions mutate anything. They take the store's collections
and return new lists or summary models, so the presentation layer can
re-render without touching store state.
"""

import enum
from collections.abc import Callable, Iterable, Sequence
from typing import Any

from pydantic import BaseModel, Field

from ..models.book import Book
from ..models.borrower import Borrower
from ..models.record import Record, RecordStatus


class RecordSortOptions(str, enum.Enum):
    """Fields records can be sorted by."""

    NAME = "name"
    SERIAL = "serial"
    BORROWED_DATE = "borrowed_date"
    RETURN_DATE = "return_date"
    STATUS = "status"


class SortOrder(str, enum.Enum):
    ASC = "asc"
    DESC = "desc"


class LendingTotals(BaseModel):
    """Summary counts shown next to the record table."""

    total_records: int = Field(..., description="Number of records")
    total_books_borrowed: int = Field(
        ..., description="Books listed across all records, whatever their status"
    )
    total_returned: int = Field(..., description="Records with status returned")
    total_overdue: int = Field(..., description="Records with status overdue")

    total_borrowers: int = Field(..., description="Borrowers on the roster")
    borrowers_with_active_loans: int = Field(
        ..., description="Borrowers holding at least one unreturned record"
    )
    total_books: int = Field(..., description="Books in the catalog")
    available_books: int = Field(..., description="Catalog books not on loan")


_SORT_KEYS: dict[RecordSortOptions, Callable[[Record], Any]] = {
    RecordSortOptions.NAME: lambda r: r.borrower.name.lower(),
    RecordSortOptions.SERIAL: lambda r: r.borrower.serial_number,
    RecordSortOptions.BORROWED_DATE: lambda r: r.borrowed_date,
    RecordSortOptions.RETURN_DATE: lambda r: r.return_date,
    RecordSortOptions.STATUS: lambda r: r.status.sort_rank,
}


def record_search_fields(record: Record) -> list[str]:
    """Text fields a search query is matched against, in display order."""
    return [
        record.borrower.serial,
        record.borrower.name,
        *(book.name for book in record.books),
        *(book.id for book in record.books),
        record.status.value,
    ]


def filter_records(records: Iterable[Record], query: str) -> list[Record]:
    """Records with any search field containing ``query`` (case-insensitive).

    An empty query matches every record. Input order is preserved.
    """
    needle = query.strip().lower()
    if not needle:
        return list(records)
    return [
        record
        for record in records
        if any(needle in field.lower() for field in record_search_fields(record))
    ]


def sort_records(
    records: Iterable[Record],
    sort_by: RecordSortOptions | str = RecordSortOptions.SERIAL,
    order: SortOrder | str = SortOrder.ASC,
) -> list[Record]:
    """Stable sort of records; ties keep their relative order in both directions."""
    key = _SORT_KEYS[RecordSortOptions(sort_by)]
    return sorted(records, key=key, reverse=SortOrder(order) is SortOrder.DESC)


def search_records(
    records: Iterable[Record],
    query: str = "",
    sort_by: RecordSortOptions | str = RecordSortOptions.SERIAL,
    order: SortOrder | str = SortOrder.ASC,
) -> list[Record]:
    """Filter then sort, the way the record table's search box works."""
    return sort_records(filter_records(records, query), sort_by, order)


def search_suggestions(records: Iterable[Record]) -> list[str]:
    """Distinct autocomplete terms drawn from the records, first-seen order."""
    seen: dict[str, None] = {}
    for record in records:
        for term in record_search_fields(record):
            if term:
                seen.setdefault(term, None)
    return list(seen)


def compute_totals(
    records: Sequence[Record],
    borrowers: Sequence[Borrower],
    books: Sequence[Book],
) -> LendingTotals:
    """Aggregate counts over records, roster and catalog."""
    return LendingTotals(
        total_records=len(records),
        total_books_borrowed=sum(len(r.books) for r in records),
        total_returned=sum(1 for r in records if r.status is RecordStatus.RETURNED),
        total_overdue=sum(1 for r in records if r.status is RecordStatus.OVERDUE),
        total_borrowers=len(borrowers),
        borrowers_with_active_loans=sum(
            1 for b in borrowers if any(r.is_active and r.borrower is b for r in records)
        ),
        total_books=len(books),
        available_books=sum(1 for b in books if b.is_available),
    )

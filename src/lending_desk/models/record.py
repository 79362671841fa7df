"""
Loan record model for the Lending Desk.

A record links one borrower to one or more books over a date range:

- ``borrowed`` records hold their books (the books are unavailable)
- ``overdue`` records are borrowed records past their return date
- ``returned`` records have released their books

Records never own their book or borrower data. They keep references to the
catalog and roster entries, so availability changes made by the store are
seen everywhere.
"""

from datetime import date
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .book import Book
from .borrower import Borrower


class RecordStatus(str, Enum):
    """Lifecycle state of a loan record."""

    BORROWED = "borrowed"
    RETURNED = "returned"
    OVERDUE = "overdue"

    @property
    def sort_rank(self) -> int:
        """Fixed precedence used when sorting by status."""
        return _STATUS_RANK[self]

    @property
    def holds_books(self) -> bool:
        """Whether a record in this state keeps its books unavailable."""
        return self is not RecordStatus.RETURNED


_STATUS_RANK = {
    RecordStatus.OVERDUE: 1,
    RecordStatus.BORROWED: 2,
    RecordStatus.RETURNED: 3,
}


class Record(BaseModel):
    """
    Represents one loan transaction.

    The model only checks its own shape (non-empty book list, sane date
    range). Cross-entity rules such as book exclusivity or the overdue
    borrower block live in the record store.
    """

    id: str = Field(
        ...,
        description="Store-assigned identifier for the record",
        pattern=r"^rec_[a-f0-9]{12}$",
        examples=["rec_3f9a0c1b2d4e"],
    )

    borrower: Borrower = Field(
        ...,
        description="Borrower holding the books",
    )

    books: list[Book] = Field(
        ...,
        description="Books on this loan, in the order they were added",
        min_length=1,
    )

    borrowed_date: date = Field(
        ...,
        description="Date the books were borrowed",
        examples=["2025-03-01"],
    )

    return_date: date = Field(
        ...,
        description="Date the books are expected back",
        examples=["2025-03-15"],
    )

    status: RecordStatus = Field(
        default=RecordStatus.BORROWED,
        description="Current status of the loan",
    )

    @model_validator(mode="after")
    def validate_dates(self) -> "Record":
        """Expected return date must come after the borrowed date."""
        if self.return_date <= self.borrowed_date:
            raise ValueError("Expected return date must be after the borrowed date")
        return self

    @property
    def book_ids(self) -> list[str]:
        return [book.id for book in self.books]

    @property
    def is_active(self) -> bool:
        """True while the record still holds its books."""
        return self.status.holds_books

    def display_info(self) -> str:
        names = ", ".join(book.name for book in self.books)
        ids = ", ".join(self.book_ids)
        return (
            f"{self.borrower.display_info()} borrows [{names}] (IDs: {ids}) "
            f"on {self.borrowed_date.isoformat()}, expected return by "
            f"{self.return_date.isoformat()}, status: {self.status.value}."
        )

    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "id": "rec_3f9a0c1b2d4e",
                "borrower": {"name": "Alice Johnson", "serial": "STU-001"},
                "books": [
                    {
                        "name": "The Prince",
                        "id": "TP-0003",
                        "author": "Niccolò Machiavelli",
                        "year": 1532,
                        "is_available": False,
                    }
                ],
                "borrowed_date": "2025-03-01",
                "return_date": "2025-03-15",
                "status": "borrowed",
            }
        },
    )

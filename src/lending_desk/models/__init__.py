"""
Lending Desk models.

Pydantic models for every entity the project handles:
- Book: catalog entries
- Borrower: roster entries
- Record: loan transactions linking a borrower to books
- Note / Reminder: items persisted by the notes service
"""

from .book import Book
from .borrower import Borrower
from .note import Note, NoteItem, Reminder
from .record import Record, RecordStatus

__all__ = [
    "Book",
    "Borrower",
    "Note",
    "NoteItem",
    "Record",
    "RecordStatus",
    "Reminder",
]

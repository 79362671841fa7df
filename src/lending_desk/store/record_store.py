"""
In-memory record store for the Lending Desk.

The store owns the catalog (books), the roster (borrowers) and the loan
records, and is the only component allowed to change book availability.
It keeps one invariant above all others:

    a book is unavailable exactly while an unreturned record lists it

Every public operation validates its whole input first and only then
mutates, so a raised error always leaves the store unchanged. At most one
record can be under edit at a time; the edit is represented by an
``EditToken`` and destructive operations refuse to run while one is out.
"""

import logging
from collections.abc import Iterable, Sequence
from datetime import date
from uuid import uuid4

from pydantic import BaseModel, ConfigDict
from pydantic import ValidationError as PydanticValidationError

from ..models.book import Book
from ..models.borrower import Borrower
from ..models.record import Record, RecordStatus
from .errors import BorrowerNotFound, ConflictError, NotFoundError, ValidationError
from .identifiers import BookIdSequence, generate_borrower_serial
from .queries import (
    LendingTotals,
    RecordSortOptions,
    SortOrder,
    compute_totals,
    search_records,
    search_suggestions,
)

logger = logging.getLogger(__name__)

BookRef = Book | str


class EditToken(BaseModel):
    """Proof that the holder started the edit currently in progress."""

    record_id: str
    nonce: str

    model_config = ConfigDict(frozen=True)


def _first_error(exc: PydanticValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return str(exc)
    message = errors[0].get("msg", str(exc))
    return message.removeprefix("Value error, ")


def _require_text(value: str | None, label: str) -> str:
    text = (value or "").strip()
    if not text:
        raise ValidationError(f"{label} is required")
    return text


def _parse_year(year: int | str) -> int:
    """Accept a non-negative int or a string of digits."""
    if isinstance(year, bool):
        raise ValidationError("Please enter a valid year")
    if isinstance(year, int):
        value = year
    elif isinstance(year, str) and year.strip().isdigit():
        value = int(year.strip())
    else:
        raise ValidationError("Please enter a valid year")
    if value < 0:
        raise ValidationError("Please enter a valid year")
    return value


def _coerce_date(value: date | str, label: str) -> date:
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value).strip())
    except ValueError as e:
        raise ValidationError(f"{label} must be a date (YYYY-MM-DD)") from e


def _coerce_status(status: RecordStatus | str) -> RecordStatus:
    try:
        return RecordStatus(status)
    except ValueError as e:
        raise ValidationError(f"Unknown record status: {status!r}") from e


class RecordStore:
    """
    Catalog, roster and loan records for one lending desk.

    The store is a plain object: create one per desk and pass it to
    whatever needs it. Nothing here is global.
    """

    def __init__(self, book_id_start: int = 0):
        self._books: list[Book] = []
        self._borrowers: list[Borrower] = []
        self._records: list[Record] = []
        self._book_ids = BookIdSequence(book_id_start)
        self._edit: EditToken | None = None

    # ------------------------------------------------------------------
    # Read access
    # ------------------------------------------------------------------

    @property
    def books(self) -> list[Book]:
        """Catalog in insertion order (a copy; the books themselves are shared)."""
        return list(self._books)

    @property
    def borrowers(self) -> list[Borrower]:
        return list(self._borrowers)

    @property
    def records(self) -> list[Record]:
        return list(self._records)

    @property
    def last_book_sequence(self) -> int:
        return self._book_ids.last

    def list_books(self) -> list[Book]:
        """Catalog sorted alphabetically by title."""
        return sorted(self._books, key=lambda b: b.name.lower())

    def list_borrowers(self) -> list[Borrower]:
        """Roster sorted by serial number."""
        return sorted(self._borrowers, key=lambda b: b.serial_number)

    def get_book(self, book_id: str) -> Book:
        for book in self._books:
            if book.id == book_id:
                return book
        raise NotFoundError(f"Book not found: {book_id}")

    def find_book(self, ref: BookRef) -> Book:
        """Resolve a book by catalog ID or (case-insensitive) title."""
        if isinstance(ref, Book):
            return self.get_book(ref.id)
        text = _require_text(ref, "Book")
        lowered = text.lower()
        for book in self._books:
            if book.id == text or book.name.lower() == lowered:
                return book
        raise NotFoundError(f"Book not found in the records: {text}")

    def get_borrower(self, serial: str) -> Borrower:
        for borrower in self._borrowers:
            if borrower.serial == serial:
                return borrower
        raise NotFoundError(f"Borrower not found: {serial}")

    def find_borrower(self, ref: Borrower | str) -> Borrower:
        """Resolve a borrower by serial or (case-insensitive) name.

        Raises:
            BorrowerNotFound: if nothing matches, so the caller can offer
                to register the name as a new borrower
        """
        if isinstance(ref, Borrower):
            ref = ref.serial
        text = _require_text(ref, "Borrower")
        lowered = text.lower()
        for borrower in self._borrowers:
            if borrower.serial == text or borrower.name.lower() == lowered:
                return borrower
        raise BorrowerNotFound(text)

    def get_record(self, record_id: str) -> Record:
        for record in self._records:
            if record.id == record_id:
                return record
        raise NotFoundError(f"Record not found: {record_id}")

    def has_active_record(self, borrower: Borrower) -> bool:
        """True if the borrower holds any record that is not returned."""
        return any(r.borrower is borrower and r.is_active for r in self._records)

    def has_overdue_record(self, borrower: Borrower) -> bool:
        return any(
            r.borrower is borrower and r.status is RecordStatus.OVERDUE
            for r in self._records
        )

    def search(
        self,
        query: str = "",
        sort_by: RecordSortOptions | str = RecordSortOptions.SERIAL,
        order: SortOrder | str = SortOrder.ASC,
    ) -> list[Record]:
        """Filtered and sorted view of the records."""
        return search_records(self._records, query, sort_by, order)

    def suggestions(self) -> list[str]:
        return search_suggestions(self._records)

    def totals(self) -> LendingTotals:
        return compute_totals(self._records, self._borrowers, self._books)

    # ------------------------------------------------------------------
    # Catalog and roster
    # ------------------------------------------------------------------

    def add_book(self, name: str, author: str, year: int | str) -> Book:
        """
        Add a book to the catalog under a freshly generated ID.

        Raises:
            ValidationError: blank field, invalid year or duplicate title
        """
        name = _require_text(name, "Book title")
        author = _require_text(author, "Author")
        year_value = _parse_year(year)
        self._check_unique_title(name)

        # A failed add must not consume a sequence number
        try:
            book = Book(name=name, id=self._book_ids.preview(name), author=author, year=year_value)
        except PydanticValidationError as e:
            raise ValidationError(_first_error(e)) from e

        self._book_ids.next_id(name)
        self._books.append(book)
        logger.info("Book added: %s", book.display_info())
        return book

    def import_book(self, book: Book) -> Book:
        """Adopt an existing catalog entry (sample data, imports) as-is."""
        self._check_unique_title(book.name)
        if any(b.id == book.id for b in self._books):
            raise ValidationError(f"Book ID already exists: {book.id}")
        book.is_available = True
        self._books.append(book)
        return book

    def delete_book(self, book_id: str) -> Book:
        """
        Remove a book from the catalog.

        Returned records that list the book keep their reference to it, so
        loan history still shows the title. Such a record cannot be reopened
        with the book: it no longer resolves from the catalog.

        Raises:
            NotFoundError: unknown ID
            ConflictError: the book is currently on loan
        """
        book = self.get_book(book_id)
        if not book.is_available:
            raise ConflictError("This book is currently borrowed and cannot be deleted")
        self._books.remove(book)
        logger.info("Book deleted: %s", book.display_info())
        return book

    def add_borrower(self, name: str) -> Borrower:
        """
        Register a borrower under the lowest free serial.

        Raises:
            ValidationError: blank or duplicate name
        """
        borrower = self._prepare_borrower(name)
        self._borrowers.append(borrower)
        logger.info("Borrower added: %s", borrower.display_info())
        return borrower

    def import_borrower(self, borrower: Borrower) -> Borrower:
        """Adopt an existing roster entry (sample data, imports) as-is."""
        self._check_unique_borrower_name(borrower.name)
        if any(b.serial == borrower.serial for b in self._borrowers):
            raise ValidationError(f"Borrower serial already exists: {borrower.serial}")
        self._borrowers.append(borrower)
        return borrower

    def delete_borrower(self, serial: str) -> Borrower:
        """
        Remove a borrower from the roster.

        Raises:
            NotFoundError: unknown serial
            ConflictError: the borrower still holds unreturned books
        """
        borrower = self.get_borrower(serial)
        if self.has_active_record(borrower):
            raise ConflictError(
                "This borrower currently has borrowed books and cannot be deleted"
            )
        self._borrowers.remove(borrower)
        logger.info("Borrower deleted: %s", borrower.display_info())
        return borrower

    # ------------------------------------------------------------------
    # Record lifecycle
    # ------------------------------------------------------------------

    def create_record(
        self,
        borrower: Borrower | str,
        books: Sequence[BookRef],
        borrowed_date: date | str,
        return_date: date | str,
        status: RecordStatus | str = RecordStatus.BORROWED,
        create_borrower: bool = False,
    ) -> Record:
        """
        Open a new loan record.

        Args:
            borrower: Serial or name of the borrower, or a new name to register
            books: Catalog IDs or titles, at least one
            borrowed_date: Start of the loan
            return_date: Expected return, strictly after ``borrowed_date``
            status: Initial status; any status may be chosen
            create_borrower: Register ``borrower`` as a new borrower if it
                does not resolve

        Returns:
            The stored record

        Raises:
            ValidationError: empty book list, bad dates, bad status
            BorrowerNotFound: unknown borrower and ``create_borrower`` is false
            ConflictError: borrower has overdue records, or a book is on loan
            NotFoundError: a book reference does not resolve
        """
        start, end = self._check_loan_input(books, borrowed_date, return_date)
        new_status = _coerce_status(status)

        target, is_new = self._resolve_borrower(borrower, create_borrower)
        if not is_new and self.has_overdue_record(target):
            raise ConflictError(
                "This borrower has overdue books and cannot borrow new ones until they are returned"
            )

        resolved = self._resolve_books(books)
        for book in resolved:
            if not book.is_available:
                raise ConflictError(f"This book is currently unavailable: {book.name}")

        record = self._build_record(f"rec_{uuid4().hex[:12]}", target, resolved, start, end, new_status)

        if is_new:
            self._borrowers.append(target)
            logger.info("Borrower added: %s", target.display_info())
        self._records.append(record)
        self._refresh_availability(resolved)
        logger.info("Record created: %s", record.display_info())
        return record

    @property
    def edit_in_progress(self) -> EditToken | None:
        """The outstanding edit token, or None when no record is being edited."""
        return self._edit

    def begin_edit(self, record_id: str) -> EditToken:
        """
        Take the edit lock for a record.

        Beginning an edit on the record already being edited returns the
        existing token.

        Raises:
            NotFoundError: unknown record
            ConflictError: another record is being edited
        """
        record = self.get_record(record_id)
        if self._edit is not None:
            if self._edit.record_id == record.id:
                return self._edit
            raise ConflictError("Please finish editing the current record before editing another")
        self._edit = EditToken(record_id=record.id, nonce=uuid4().hex)
        logger.debug("Editing record %s", record.id)
        return self._edit

    def cancel_edit(self) -> None:
        """Release the edit lock without changing anything."""
        if self._edit is not None:
            logger.debug("Edit of record %s cancelled", self._edit.record_id)
        self._edit = None

    def commit_edit(
        self,
        token: EditToken,
        books: Sequence[BookRef],
        borrowed_date: date | str,
        return_date: date | str,
        status: RecordStatus | str,
        borrower: Borrower | str | None = None,
        create_borrower: bool = False,
    ) -> Record:
        """
        Apply an edit and release the lock.

        Books dropped from the list are released; books added must be
        available. With status ``returned`` every listed book becomes
        available, otherwise every listed book is marked on loan. If the
        call raises, the record is untouched and the lock is still held.

        Raises:
            ConflictError: stale or missing token, a new book is on loan, or
                the record is reopened for a borrower no longer on the roster
            ValidationError: empty book list, bad dates, bad status
            BorrowerNotFound: new borrower does not resolve and
                ``create_borrower`` is false
            NotFoundError: a book reference does not resolve
        """
        self._check_token(token)
        record = self.get_record(token.record_id)
        start, end = self._check_loan_input(books, borrowed_date, return_date)
        new_status = _coerce_status(status)

        if borrower is None:
            target, is_new = record.borrower, False
            if new_status.holds_books and not self._on_roster(target):
                raise ConflictError(
                    f"Borrower {target.serial} is no longer registered; "
                    "choose a current borrower to reopen this record"
                )
        else:
            target, is_new = self._resolve_borrower(borrower, create_borrower)

        resolved = self._resolve_books(books)
        held_ids = set(record.book_ids) if record.is_active else set()
        if new_status.holds_books:
            for book in resolved:
                if not book.is_available and book.id not in held_ids:
                    raise ConflictError(f"This book is currently unavailable: {book.name}")

        updated = self._build_record(record.id, target, resolved, start, end, new_status)

        previous_books = list(record.books)
        if is_new:
            self._borrowers.append(target)
            logger.info("Borrower added: %s", target.display_info())
        record.borrower = updated.borrower
        record.books = updated.books
        record.borrowed_date = updated.borrowed_date
        record.return_date = updated.return_date
        record.status = updated.status
        self._refresh_availability([*previous_books, *resolved])
        self._edit = None
        logger.info("Record edited: %s", record.display_info())
        return record

    def delete_record(self, record_id: str) -> Record:
        """
        Remove a record and release its books.

        Raises:
            ConflictError: an edit is in progress
            NotFoundError: unknown record
        """
        if self._edit is not None:
            raise ConflictError("Please finish editing the current record before deleting another")
        record = self.get_record(record_id)
        self._records.remove(record)
        self._refresh_availability(record.books)
        logger.info("Record deleted: %s", record.display_info())
        return record

    def delete_all_records(self) -> int:
        """
        Clear every record and make every listed book available again.

        Returns:
            Number of records removed

        Raises:
            ConflictError: an edit is in progress
        """
        if self._edit is not None:
            raise ConflictError("Please finish editing the current record before deleting records")
        removed = self._records
        self._records = []
        for record in removed:
            for book in record.books:
                book.is_available = True
        logger.info("All records deleted (%d)", len(removed))
        return len(removed)

    def sweep_overdue(self, today: date | None = None) -> list[Record]:
        """
        Mark borrowed records past their return date as overdue.

        Safe to call at any interval; a second call on the same day changes
        nothing.

        Returns:
            The records that changed status on this call
        """
        today = today or date.today()
        changed = []
        for record in self._records:
            if record.status is RecordStatus.BORROWED and record.return_date < today:
                record.status = RecordStatus.OVERDUE
                changed.append(record)
        logger.info("Overdue sweep for %s updated %d record(s)", today.isoformat(), len(changed))
        return changed

    def reset_order(self) -> None:
        """Restore the default record order (by borrower serial)."""
        self._records.sort(key=lambda r: r.borrower.serial_number)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _check_unique_title(self, name: str) -> None:
        lowered = name.lower()
        if any(b.name.lower() == lowered for b in self._books):
            raise ValidationError("This book already exists in the records")

    def _check_unique_borrower_name(self, name: str) -> None:
        lowered = name.lower()
        if any(b.name.lower() == lowered for b in self._borrowers):
            raise ValidationError("This borrower already exists")

    def _prepare_borrower(self, name: str) -> Borrower:
        """Validate a new borrower name and build it, without registering it."""
        name = _require_text(name, "Borrower name")
        self._check_unique_borrower_name(name)
        serial = generate_borrower_serial(b.serial for b in self._borrowers)
        try:
            return Borrower(name=name, serial=serial)
        except PydanticValidationError as e:
            raise ValidationError(_first_error(e)) from e

    def _resolve_borrower(
        self, ref: Borrower | str, create_borrower: bool
    ) -> tuple[Borrower, bool]:
        """Return ``(borrower, is_new)``; new borrowers are not yet registered."""
        try:
            return self.find_borrower(ref), False
        except BorrowerNotFound as missing:
            if not create_borrower:
                raise
            return self._prepare_borrower(missing.name), True

    def _check_loan_input(
        self,
        books: Sequence[BookRef],
        borrowed_date: date | str,
        return_date: date | str,
    ) -> tuple[date, date]:
        if not books:
            raise ValidationError("Please add at least one book to the record")
        start = _coerce_date(borrowed_date, "Borrowed date")
        end = _coerce_date(return_date, "Return date")
        if end <= start:
            raise ValidationError("Expected return date must be after the borrowed date")
        return start, end

    def _resolve_books(self, refs: Iterable[BookRef]) -> list[Book]:
        resolved: list[Book] = []
        for ref in refs:
            book = self.find_book(ref)
            if any(b.id == book.id for b in resolved):
                raise ConflictError(f"Book listed more than once: {book.name}")
            resolved.append(book)
        return resolved

    def _build_record(
        self,
        record_id: str,
        borrower: Borrower,
        books: list[Book],
        start: date,
        end: date,
        status: RecordStatus,
    ) -> Record:
        try:
            return Record(
                id=record_id,
                borrower=borrower,
                books=books,
                borrowed_date=start,
                return_date=end,
                status=status,
            )
        except PydanticValidationError as e:
            raise ValidationError(_first_error(e)) from e

    def _on_roster(self, borrower: Borrower) -> bool:
        return any(b is borrower for b in self._borrowers)

    def _check_token(self, token: EditToken) -> None:
        if self._edit is None:
            raise ConflictError("No record is being edited")
        if token != self._edit:
            raise ConflictError("This edit is no longer current")

    def _refresh_availability(self, books: Iterable[Book]) -> None:
        """Recompute availability of the given books from the active records."""
        held = {book_id for r in self._records if r.is_active for book_id in r.book_ids}
        for book in books:
            book.is_available = book.id not in held

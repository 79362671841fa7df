"""Tests for the Book, Borrower and Record models."""

from datetime import date

import pytest
from pydantic import ValidationError

from lending_desk.models import Book, Borrower, Record, RecordStatus


@pytest.fixture
def book() -> Book:
    return Book(name="The Prince", id="TP-1532", author="Niccolò Machiavelli", year=1532)


@pytest.fixture
def borrower() -> Borrower:
    return Borrower(name="Alice Johnson", serial="STU-001")


class TestBookModel:
    def test_defaults_to_available(self, book):
        assert book.is_available is True

    def test_strips_whitespace(self):
        book = Book(name="  Utopia ", id="UT-0001", author=" Thomas More ", year=1516)
        assert book.name == "Utopia"
        assert book.author == "Thomas More"

    @pytest.mark.parametrize("book_id", ["TP1532", "TPX-0001", "TP-12", ""])
    def test_rejects_malformed_ids(self, book_id):
        with pytest.raises(ValidationError):
            Book(name="The Prince", id=book_id, author="N. Machiavelli", year=1532)

    def test_rejects_negative_year(self):
        with pytest.raises(ValidationError):
            Book(name="The Prince", id="TP-0001", author="N. Machiavelli", year=-1)

    def test_assignment_is_validated(self, book):
        with pytest.raises(ValidationError):
            book.year = -5

    def test_display_info(self, book):
        assert book.display_info() == "The Prince by Niccolò Machiavelli (1532) - ID: TP-1532"


class TestBorrowerModel:
    def test_serial_number(self, borrower):
        assert borrower.serial_number == 1
        assert Borrower(name="Zed", serial="STU-1024").serial_number == 1024

    @pytest.mark.parametrize("serial", ["STU-1", "STU-ABC", "ST-001", "stu-001"])
    def test_rejects_malformed_serials(self, serial):
        with pytest.raises(ValidationError):
            Borrower(name="Alice", serial=serial)

    def test_extra_fields_forbidden(self):
        with pytest.raises(ValidationError):
            Borrower(name="Alice", serial="STU-001", email="alice@example.com")

    def test_display_info(self, borrower):
        assert borrower.display_info() == "Alice Johnson (Serial: STU-001)"


class TestRecordModel:
    def test_valid_record(self, book, borrower):
        record = Record(
            id="rec_0123456789ab",
            borrower=borrower,
            books=[book],
            borrowed_date=date(2025, 3, 1),
            return_date=date(2025, 3, 15),
        )

        assert record.status is RecordStatus.BORROWED
        assert record.is_active is True
        assert record.book_ids == ["TP-1532"]

    def test_shares_book_instances(self, book, borrower):
        record = Record(
            id="rec_0123456789ab",
            borrower=borrower,
            books=[book],
            borrowed_date=date(2025, 3, 1),
            return_date=date(2025, 3, 15),
        )

        book.is_available = False
        assert record.books[0].is_available is False

    @pytest.mark.parametrize(
        "return_date",
        [date(2025, 3, 1), date(2025, 2, 28)],
        ids=["same-day", "before"],
    )
    def test_return_date_must_follow_borrowed_date(self, book, borrower, return_date):
        with pytest.raises(ValidationError, match="Expected return date must be after"):
            Record(
                id="rec_0123456789ab",
                borrower=borrower,
                books=[book],
                borrowed_date=date(2025, 3, 1),
                return_date=return_date,
            )

    def test_requires_books(self, borrower):
        with pytest.raises(ValidationError):
            Record(
                id="rec_0123456789ab",
                borrower=borrower,
                books=[],
                borrowed_date=date(2025, 3, 1),
                return_date=date(2025, 3, 15),
            )

    def test_returned_record_is_not_active(self, book, borrower):
        record = Record(
            id="rec_0123456789ab",
            borrower=borrower,
            books=[book],
            borrowed_date=date(2025, 3, 1),
            return_date=date(2025, 3, 15),
            status="returned",
        )
        assert record.is_active is False

    def test_status_ranks(self):
        ranked = sorted(RecordStatus, key=lambda s: s.sort_rank)
        assert ranked == [RecordStatus.OVERDUE, RecordStatus.BORROWED, RecordStatus.RETURNED]

    def test_display_info(self, book, borrower):
        record = Record(
            id="rec_0123456789ab",
            borrower=borrower,
            books=[book],
            borrowed_date=date(2025, 3, 1),
            return_date=date(2025, 3, 15),
        )
        assert record.display_info() == (
            "Alice Johnson (Serial: STU-001) borrows [The Prince] (IDs: TP-1532) "
            "on 2025-03-01, expected return by 2025-03-15, status: borrowed."
        )

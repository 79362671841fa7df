"""
Error taxonomy for record store operations.

Every store operation either commits its whole change or raises one of
these before touching any state. Callers (the MCP tools) map each class to
a user-facing message:

- ValidationError: bad or missing input
- ConflictError: an invariant blocks the operation
- NotFoundError: a book, borrower or record reference does not resolve
- BorrowerNotFound: soft outcome; the caller may create the borrower and retry
"""


class LendingError(Exception):
    """Base exception for record store operations."""

    error_type = "error"


class ValidationError(LendingError):
    """Raised when input is missing or malformed."""

    error_type = "validation"


class ConflictError(LendingError):
    """Raised when an operation would break a store invariant."""

    error_type = "conflict"


class NotFoundError(LendingError):
    """Raised when a reference does not match any entity."""

    error_type = "not_found"


class BorrowerNotFound(LendingError):
    """Raised when a borrower reference does not resolve.

    Unlike the other errors this is an invitation rather than a failure:
    repeating the call with ``create_borrower=True`` registers a new
    borrower under ``name``.
    """

    error_type = "borrower_not_found"

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Borrower not found in the records: {name!r}")

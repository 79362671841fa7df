"""Identifier generation for books and borrowers.

Book IDs come from a counter that only moves forward, so an ID is never
handed out twice even after the book is deleted. Borrower serials are
recomputed from the roster each time and fill the lowest free slot, so a
deleted borrower's serial is reused.
"""

import logging
from collections.abc import Iterable

logger = logging.getLogger(__name__)

BORROWER_PREFIX = "STU"


def title_prefix(title: str) -> str:
    """Two-letter prefix for a book title.

    A single word contributes its first two letters; otherwise the first
    letters of the first two words are used. Uppercasing can lengthen a
    letter (``ß`` becomes ``SS``), so the result is cut back to two.
    """
    words = title.split()
    if not words:
        raise ValueError("Cannot derive an ID prefix from an empty title")
    if len(words) == 1:
        return words[0][:2].upper()[:2]
    return (words[0][0] + words[1][0]).upper()[:2]


class BookIdSequence:
    """Monotonic counter shared by every book in a catalog."""

    def __init__(self, start: int = 0):
        self._last = start

    @property
    def last(self) -> int:
        """The most recently issued sequence number (0 if none)."""
        return self._last

    def preview(self, title: str) -> str:
        """The ID ``next_id`` would return for this title, without consuming it."""
        return f"{title_prefix(title)}-{self._last + 1:04d}"

    def next_id(self, title: str) -> str:
        book_id = self.preview(title)
        self._last += 1
        logger.debug("Generated book ID %s for %r", book_id, title)
        return book_id


def generate_borrower_serial(serials: Iterable[str]) -> str:
    """Return the smallest unused ``STU-NNN`` serial.

    Serials whose suffix is not a number are ignored.
    """
    used = set()
    for serial in serials:
        _, _, suffix = serial.partition("-")
        if suffix.isdigit():
            used.add(int(suffix))

    candidate = 1
    while candidate in used:
        candidate += 1

    serial = f"{BORROWER_PREFIX}-{candidate:03d}"
    logger.debug("Generated borrower serial %s", serial)
    return serial

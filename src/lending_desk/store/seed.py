"""
Sample catalog and roster for a fresh lending desk.

The sample books keep their historical IDs (prefix plus publication year)
rather than drawing from the book ID sequence, so the first book added by a
user still gets sequence number 0001.
"""

import logging

from ..models.book import Book
from ..models.borrower import Borrower
from .record_store import RecordStore

logger = logging.getLogger(__name__)

SAMPLE_BOOKS: list[dict] = [
    {"name": "The Barometz", "id": "TB-1482", "author": "Jean Pessante", "year": 1428},
    {"name": "The Canterbury Tales", "id": "TC-1387", "author": "Geoffrey Chaucer", "year": 1387},
    {"name": "The Prince", "id": "TP-1532", "author": "Niccolò Machiavelli", "year": 1532},
    {"name": "Utopia", "id": "UT-1516", "author": "Thomas More", "year": 1516},
    {
        "name": "Gargantua and Pantagruel",
        "id": "GP-1532",
        "author": "François Rabelais",
        "year": 1532,
    },
]

SAMPLE_BORROWERS: list[dict] = [
    {"name": "Alice Johnson", "serial": "STU-001"},
    {"name": "Bob Smith", "serial": "STU-002"},
    {"name": "Charlie Brown", "serial": "STU-003"},
]


def seed_sample_data(store: RecordStore) -> RecordStore:
    """Load the sample catalog and roster into ``store``."""
    for data in SAMPLE_BOOKS:
        store.import_book(Book(**data))
    for data in SAMPLE_BORROWERS:
        store.import_borrower(Borrower(**data))
    logger.info(
        "Seeded %d sample books and %d sample borrowers",
        len(SAMPLE_BOOKS),
        len(SAMPLE_BORROWERS),
    )
    return store


def create_store(seed: bool = True) -> RecordStore:
    """Build a record store, optionally pre-loaded with the sample data."""
    store = RecordStore()
    if seed:
        seed_sample_data(store)
    return store

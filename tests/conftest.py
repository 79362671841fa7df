"""Test configuration and fixtures for the Lending Desk.

1. Record stores - a fresh empty store and one loaded with the sample data
2. Notes storage - a JSON file under a per-test temporary directory
3. Configuration - isolated settings that never touch the working directory
"""

import os
from collections.abc import Generator
from datetime import date
from pathlib import Path

import pytest

from lending_desk.config import AppConfig, reset_config
from lending_desk.notes.storage import NotesStorage
from lending_desk.store import RecordStore, create_store

# === Record Store Fixtures ===


@pytest.fixture
def store() -> RecordStore:
    """Empty record store with a fresh book ID sequence."""
    return RecordStore()


@pytest.fixture
def seeded_store() -> RecordStore:
    """Record store holding the sample catalog (5 books) and roster (3 borrowers)."""
    return create_store(seed=True)


@pytest.fixture
def loan_dates() -> tuple[date, date]:
    """A valid (borrowed_date, return_date) pair."""
    return date(2025, 3, 1), date(2025, 3, 15)


SWEEP_DAY = date(2025, 4, 1)


@pytest.fixture
def history_store() -> RecordStore:
    """Six single-book records swept on SWEEP_DAY.

    Table order and final status:
    0. Alice / Dune        - overdue
    1. Bob / Emma          - borrowed
    2. Alice / Ivanhoe     - overdue
    3. Charlie / Beloved   - borrowed
    4. Bob / Middlemarch   - returned
    5. Charlie / Persuasion - borrowed
    """
    store = RecordStore()
    for name, author, year in [
        ("Dune", "Frank Herbert", 1965),
        ("Emma", "Jane Austen", 1815),
        ("Ivanhoe", "Walter Scott", 1819),
        ("Beloved", "Toni Morrison", 1987),
        ("Middlemarch", "George Eliot", 1871),
        ("Persuasion", "Jane Austen", 1817),
    ]:
        store.add_book(name, author, year)
    for name in ["Alice Johnson", "Bob Smith", "Charlie Brown"]:
        store.add_borrower(name)

    past = (date(2025, 3, 1), date(2025, 3, 15))
    future = (date(2025, 3, 20), date(2025, 5, 1))
    store.create_record("Alice Johnson", ["Dune"], *past)
    store.create_record("Bob Smith", ["Emma"], *future)
    store.create_record("Alice Johnson", ["Ivanhoe"], *past)
    store.create_record("Charlie Brown", ["Beloved"], *future)
    store.create_record("Bob Smith", ["Middlemarch"], *past, status="returned")
    store.create_record("Charlie Brown", ["Persuasion"], *future)
    store.sweep_overdue(SWEEP_DAY)
    return store


def _assert_availability_invariant(store: RecordStore) -> None:
    held = {book.id for record in store.records if record.is_active for book in record.books}
    for book in store.books:
        assert book.is_available == (book.id not in held), book.id


@pytest.fixture
def check_invariant():
    """Assert that a book is unavailable exactly while an unreturned record lists it."""
    return _assert_availability_invariant


# === Notes Fixtures ===


@pytest.fixture
def notes_path(tmp_path: Path) -> Path:
    """Location of a notes file that does not exist yet."""
    return tmp_path / "data" / "notes.json"


@pytest.fixture
def notes_storage(notes_path: Path) -> NotesStorage:
    return NotesStorage(notes_path)


# === Configuration Fixtures ===


@pytest.fixture
def clean_env() -> Generator[None, None, None]:
    """Remove LENDING_DESK_* variables for the duration of a test."""
    original_env = os.environ.copy()

    for key in list(os.environ.keys()):
        if key.startswith("LENDING_DESK_"):
            del os.environ[key]

    yield

    os.environ.clear()
    os.environ.update(original_env)


@pytest.fixture
def test_config(notes_path: Path, clean_env) -> Generator[AppConfig, None, None]:
    """Settings pointing the notes service at a temporary file."""
    reset_config()

    config = AppConfig(
        server_name="test-lending-desk",
        server_version="0.0.1-test",
        notes_data_file=notes_path,
        seed_sample_data=True,
        debug=True,
        log_level="DEBUG",
    )

    yield config

    reset_config()

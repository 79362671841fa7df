"""
Lending Desk record store.

Everything the lending desk knows lives in a ``RecordStore``: the catalog,
the roster, the loan records and the single edit lock. The presentation
layer (the MCP tools and resources) calls into the store and renders what
comes back.
"""

from .errors import (
    BorrowerNotFound,
    ConflictError,
    LendingError,
    NotFoundError,
    ValidationError,
)
from .identifiers import BookIdSequence, generate_borrower_serial, title_prefix
from .queries import (
    LendingTotals,
    RecordSortOptions,
    SortOrder,
    compute_totals,
    filter_records,
    search_records,
    search_suggestions,
    sort_records,
)
from .record_store import EditToken, RecordStore
from .seed import create_store, seed_sample_data

__all__ = [
    "BookIdSequence",
    "BorrowerNotFound",
    "ConflictError",
    "EditToken",
    "LendingError",
    "LendingTotals",
    "NotFoundError",
    "RecordSortOptions",
    "RecordStore",
    "SortOrder",
    "ValidationError",
    "compute_totals",
    "create_store",
    "filter_records",
    "generate_borrower_serial",
    "search_records",
    "search_suggestions",
    "seed_sample_data",
    "sort_records",
    "title_prefix",
]

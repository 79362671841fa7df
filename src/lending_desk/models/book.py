"""
Book model for the Lending Desk catalog.

A book is a single catalog entry. Records refer to books by reference, so the
same ``Book`` instance is shared between the catalog and every record that
lists it; flipping ``is_available`` on one is visible through all of them.

Books are exposed through the ``library://books/list`` resource.
"""

from pydantic import BaseModel, ConfigDict, Field


class Book(BaseModel):
    """
    Represents a book in the catalog.

    ``is_available`` is owned by the record store: it is false exactly while
    the book is listed on a record whose status is not ``returned``.
    """

    name: str = Field(
        ...,
        description="Title of the book (unique, case-insensitive)",
        min_length=1,
        max_length=500,
        examples=["The Prince", "Utopia"],
    )

    id: str = Field(
        ...,
        description="Catalog identifier: two-letter prefix and a sequence number",
        pattern=r"^\S{1,2}-\d{4,}$",
        examples=["TP-0003", "UT-0004"],
    )

    author: str = Field(
        ...,
        description="Author of the book",
        min_length=1,
        max_length=200,
        examples=["Niccolò Machiavelli", "Thomas More"],
    )

    year: int = Field(
        ...,
        description="Publication year",
        ge=0,
        examples=[1532, 1516],
    )

    is_available: bool = Field(
        default=True,
        description="Whether the book can be added to a new record",
    )

    def display_info(self) -> str:
        return f"{self.name} by {self.author} ({self.year}) - ID: {self.id}"

    model_config = ConfigDict(
        # Availability flips are validated like any other assignment
        validate_assignment=True,
        str_strip_whitespace=True,
        json_schema_extra={
            "example": {
                "name": "The Canterbury Tales",
                "id": "TC-0002",
                "author": "Geoffrey Chaucer",
                "year": 1387,
                "is_available": True,
            }
        },
    )

"""
Borrower model for the Lending Desk roster.

Borrowers are identified by a generated ``STU-NNN`` serial. Records hold a
reference to the borrower, never a copy.
"""

from pydantic import BaseModel, ConfigDict, Field


class Borrower(BaseModel):
    """A person who can borrow books."""

    name: str = Field(
        ...,
        description="Full name of the borrower (unique, case-insensitive)",
        min_length=1,
        max_length=200,
        examples=["Alice Johnson", "Bob Smith"],
    )

    serial: str = Field(
        ...,
        description="Roster serial, STU- followed by a zero-padded number",
        pattern=r"^STU-\d{3,}$",
        examples=["STU-001", "STU-012"],
    )

    @property
    def serial_number(self) -> int:
        """Numeric part of the serial, used for roster ordering."""
        return int(self.serial.split("-", 1)[1])

    def display_info(self) -> str:
        return f"{self.name} (Serial: {self.serial})"

    model_config = ConfigDict(
        validate_assignment=True,
        str_strip_whitespace=True,
        extra="forbid",
        json_schema_extra={
            "example": {
                "name": "Alice Johnson",
                "serial": "STU-001",
            }
        },
    )

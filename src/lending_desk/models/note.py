"""
Note and reminder models for the notes service.

Notes and reminders share most fields and differ by whether a reminder time
is attached. They are modelled as two variants of one tagged union with a
``kind`` discriminator, so handlers branch on the variant instead of probing
for optional fields.

On disk (and on the wire) the fields use camelCase names, matching the
browser client: ``lastEditTime``, ``alertedDay`` and so on.
"""

from datetime import datetime
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter
from pydantic.alias_generators import to_camel


def _now_text() -> str:
    return datetime.now().isoformat(timespec="seconds")


class _ItemBase(BaseModel):
    """Fields shared by notes and reminders."""

    id: int = Field(
        ...,
        description="Identifier assigned from the document's nextId counter",
        ge=1,
    )

    title: str = Field(
        default="",
        description="Title shown in the note list",
        max_length=200,
    )

    content: str = Field(
        default="",
        description="Body text of the note",
        max_length=10000,
    )

    category: str | None = Field(
        default=None,
        description="Optional free-form category",
    )

    timestamp: str = Field(
        default_factory=_now_text,
        description="When the item was created",
    )

    last_edit_time: str = Field(
        default_factory=_now_text,
        description="When the item was last edited",
    )

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        validate_assignment=True,
        extra="ignore",
    )

    def touch(self) -> None:
        self.last_edit_time = _now_text()


class Note(_ItemBase):
    """A plain note without a reminder time."""

    kind: Literal["note"] = "note"


class Reminder(_ItemBase):
    """A note with a reminder time and alert bookkeeping."""

    kind: Literal["reminder"] = "reminder"

    reminder: datetime = Field(
        ...,
        description="When the reminder is due",
        examples=["2025-12-20T14:30:00"],
    )

    alerted_day: bool = Field(default=False, description="Day-of alert already raised")
    alerted_time: bool = Field(default=False, description="On-time alert already raised")
    done: bool = Field(default=False, description="Marked as done by the user")
    missed: bool = Field(default=False, description="Passed without being marked done")


NoteItem = Annotated[Note | Reminder, Field(discriminator="kind")]

_item_adapter: TypeAdapter[Note | Reminder] = TypeAdapter(NoteItem)


def kind_of(data: dict[str, Any]) -> str:
    """Pick the variant for a raw payload: anything with a reminder time is a reminder."""
    return "reminder" if data.get("reminder") else "note"


def parse_item(data: dict[str, Any]) -> Note | Reminder:
    """Validate a raw payload into the matching variant.

    Payloads written by the browser client carry no ``kind`` tag, so it is
    derived from the presence of a reminder time.
    """
    payload = dict(data)
    payload["kind"] = kind_of(payload)
    if payload["kind"] == "note":
        payload.pop("reminder", None)
    return _item_adapter.validate_python(payload)


def dump_item(item: Note | Reminder) -> dict[str, Any]:
    """Serialize an item the way the JSON document stores it."""
    return item.model_dump(mode="json", by_alias=True)

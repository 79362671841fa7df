"""
JSON file storage for notes and reminders.

The whole collection lives in one JSON document:

    {"notes": [...], "reminders": [...], "nextId": 7}

Each operation reads the file, changes the document and writes it back
under a process-wide lock. There is no journaling: the last write wins.

A missing or empty file is an empty document. A file that is not a JSON
object also reads as empty, but nothing is written over it until it is
repaired. Items that fail validation are skipped when reading and written
back untouched.
"""

import json
import logging
from datetime import datetime
from pathlib import Path
from threading import RLock
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from ..models.note import Note, Reminder, dump_item, parse_item
from .reminders import ReminderAlert, check_reminders, reschedule, toggle_done, untitled_title

logger = logging.getLogger(__name__)

_ESCAPES = str.maketrans(
    {
        "&": "&amp;",
        "<": "&lt;",
        ">": "&gt;",
        '"': "&quot;",
        "'": "&#39;",
    }
)

SANITIZED_FIELDS = ("title", "content")


class NoteNotFoundError(LookupError):
    """Raised when no note or reminder has the requested ID."""

    def __init__(self, item_id: int):
        self.item_id = item_id
        super().__init__(f"Note not found: {item_id}")


class NotesFileError(RuntimeError):
    """Raised when the notes file exists but cannot be parsed, so it must not be overwritten."""

    def __init__(self, path: Path):
        self.path = path
        super().__init__(f"Notes file is not valid JSON: {path}")


class NotesDocument(BaseModel):
    """In-memory form of the JSON document."""

    notes: list[Note] = Field(default_factory=list)
    reminders: list[Reminder] = Field(default_factory=list)
    next_id: int = Field(default=1, ge=1)
    # Raw entries that failed validation, kept so a write does not drop them
    unparsed_notes: list[Any] = Field(default_factory=list)
    unparsed_reminders: list[Any] = Field(default_factory=list)

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def all_items(self) -> list[Note | Reminder]:
        return [*self.notes, *self.reminders]

    def reserved_ids(self) -> set[int]:
        """IDs held by valid items and by unparsed entries that carry an integer ID."""
        ids = {item.id for item in self.all_items()}
        for raw in [*self.unparsed_notes, *self.unparsed_reminders]:
            raw_id = raw.get("id") if isinstance(raw, dict) else None
            if isinstance(raw_id, int) and not isinstance(raw_id, bool):
                ids.add(raw_id)
        return ids

    def find(self, item_id: int) -> Note | Reminder | None:
        for item in self.all_items():
            if item.id == item_id:
                return item
        return None

    def remove(self, item_id: int) -> Note | Reminder | None:
        for collection in (self.notes, self.reminders):
            for index, item in enumerate(collection):
                if item.id == item_id:
                    return collection.pop(index)
        return None

    def place(self, item: Note | Reminder) -> None:
        """Append an item to the list matching its variant."""
        if isinstance(item, Reminder):
            self.reminders.append(item)
        else:
            self.notes.append(item)

    def replace(self, item: Note | Reminder) -> None:
        """Swap in a new version of an item, keeping its position if the variant is unchanged."""
        for collection in (self.notes, self.reminders):
            for index, existing in enumerate(collection):
                if existing.id != item.id:
                    continue
                if type(existing) is type(item):
                    collection[index] = item
                else:
                    collection.pop(index)
                    self.place(item)
                return
        self.place(item)

    def to_json(self) -> dict[str, Any]:
        return {
            "notes": [dump_item(n) for n in self.notes] + self.unparsed_notes,
            "reminders": [dump_item(r) for r in self.reminders] + self.unparsed_reminders,
            "nextId": self.next_id,
        }


def sanitize_text(value: Any) -> Any:
    """HTML-escape ``& < > " '`` in strings; other values pass through."""
    if not isinstance(value, str):
        return value
    return value.translate(_ESCAPES)


def _sanitize(payload: dict[str, Any]) -> dict[str, Any]:
    cleaned = dict(payload)
    for field in SANITIZED_FIELDS:
        if field in cleaned:
            cleaned[field] = sanitize_text(cleaned[field])
    return cleaned


class NotesStorage:
    """Read-modify-write access to the notes JSON file."""

    def __init__(self, path: Path):
        self.path = Path(path)
        self._lock = RLock()

    # -- file access -----------------------------------------------------

    def read(self) -> NotesDocument:
        """Load the document for display; an unparseable file reads as empty."""
        try:
            return self.load()
        except NotesFileError:
            logger.warning("Unreadable notes file %s, showing an empty document", self.path)
            return NotesDocument()

    def load(self) -> NotesDocument:
        """
        Load the document for modification.

        Raises:
            NotesFileError: the file exists but is not a JSON object
        """
        try:
            raw = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return NotesDocument()
        if not raw.strip():
            return NotesDocument()
        try:
            data = json.loads(raw)
        except ValueError as e:
            raise NotesFileError(self.path) from e
        if not isinstance(data, dict):
            raise NotesFileError(self.path)

        document = NotesDocument()
        sections = (
            ("notes", document.unparsed_notes),
            ("reminders", document.unparsed_reminders),
        )
        for key, unparsed in sections:
            entries = data.get(key) or []
            if not isinstance(entries, list):
                raise NotesFileError(self.path)
            for entry in entries:
                try:
                    item = parse_item(entry)
                except (ValueError, TypeError) as e:
                    logger.warning("Skipping invalid entry in %s of %s: %s", key, self.path, e)
                    unparsed.append(entry)
                    continue
                document.place(item)

        stored_next = data.get("nextId")
        if not isinstance(stored_next, int) or isinstance(stored_next, bool) or stored_next < 1:
            stored_next = 1
        document.next_id = max(stored_next, max(document.reserved_ids(), default=0) + 1)
        return document

    def write(self, document: NotesDocument) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(document.to_json(), indent=2), encoding="utf-8")

    # -- operations --------------------------------------------------------

    def list_items(self) -> NotesDocument:
        with self._lock:
            return self.read()

    def peek_next_id(self) -> int:
        with self._lock:
            return self.read().next_id

    def create(self, payload: dict[str, Any]) -> Note | Reminder:
        """
        Store a new note or reminder.

        The item gets the document's next ID unless the payload brings its
        own, and a blank title is replaced with the next ``UntitledN``.
        """
        with self._lock:
            document = self.load()
            data = _sanitize(payload)

            item_id = data.get("id")
            if item_id is None:
                item_id = document.next_id
            elif int(item_id) in document.reserved_ids():
                raise ValueError(f"Note ID already in use: {item_id}")
            data["id"] = item_id

            if not str(data.get("title") or "").strip():
                data["title"] = untitled_title(document.all_items())

            item = parse_item(data)
            document.place(item)
            document.next_id = max(document.next_id, item.id + 1)
            self.write(document)

        logger.info("Created %s %d", item.kind, item.id)
        return item

    def update(self, item_id: int, updates: dict[str, Any]) -> Note | Reminder:
        """
        Merge ``updates`` into an existing item.

        Adding a reminder time to a note turns it into a reminder, and
        clearing it turns a reminder back into a note.

        Raises:
            NoteNotFoundError: no item has ``item_id``
        """
        with self._lock:
            document = self.load()
            item = self._merge(document, item_id, updates)
            self.write(document)
        logger.info("Updated %s %d", item.kind, item.id)
        return item

    def bulk_update(self, updates: list[dict[str, Any]]) -> list[Note | Reminder]:
        """
        Apply several partial updates in one write; unknown IDs are skipped.

        Bulk saves send back items the client already read, so text is stored
        as given rather than escaped a second time.
        """
        results = []
        with self._lock:
            document = self.load()
            for update in updates:
                item_id = update.get("id")
                if item_id is None or document.find(item_id) is None:
                    logger.debug("Bulk update skipped unknown note %s", item_id)
                    continue
                results.append(self._merge(document, item_id, update, sanitize=False))
            self.write(document)
        logger.info("Bulk updated %d item(s)", len(results))
        return results

    def delete(self, item_id: int) -> Note | Reminder:
        """
        Raises:
            NoteNotFoundError: no item has ``item_id``
        """
        with self._lock:
            document = self.load()
            item = document.remove(item_id)
            if item is None:
                raise NoteNotFoundError(item_id)
            self.write(document)
        logger.info("Deleted %s %d", item.kind, item.id)
        return item

    def toggle_done(self, item_id: int) -> Reminder:
        with self._lock:
            document = self.load()
            reminder = self._get_reminder(document, item_id)
            toggle_done(reminder)
            self.write(document)
        return reminder

    def reschedule(self, item_id: int, when: datetime) -> Reminder:
        with self._lock:
            document = self.load()
            reminder = self._get_reminder(document, item_id)
            reschedule(reminder, when)
            self.write(document)
        return reminder

    def check_reminders(self, now: datetime | None = None) -> list[ReminderAlert]:
        """Run the alert rules over every reminder and persist the flags."""
        with self._lock:
            document = self.load()
            alerts = check_reminders(document.reminders, now)
            if alerts:
                self.write(document)
        for alert in alerts:
            logger.info("Reminder alert (%s): %s", alert.kind.value, alert.title)
        return alerts

    # -- helpers -----------------------------------------------------------

    def _merge(
        self,
        document: NotesDocument,
        item_id: int,
        updates: dict[str, Any],
        sanitize: bool = True,
    ) -> Note | Reminder:
        existing = document.find(item_id)
        if existing is None:
            raise NoteNotFoundError(item_id)
        if sanitize:
            updates = _sanitize(updates)
        merged = {**dump_item(existing), **updates, "id": item_id}
        item = parse_item(merged)
        if item.kind != existing.kind:
            logger.debug("Item %d changed from %s to %s", item_id, existing.kind, item.kind)
        document.replace(item)
        return item

    def _get_reminder(self, document: NotesDocument, item_id: int) -> Reminder:
        item = document.find(item_id)
        if item is None:
            raise NoteNotFoundError(item_id)
        if not isinstance(item, Reminder):
            raise ValueError(f"Item {item_id} is a note, not a reminder")
        return item

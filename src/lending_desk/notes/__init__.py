"""
Notes and reminders service.

A small REST app that keeps notes and reminders in one JSON file, plus the
reminder alert rules the client applies on a timer.
"""

from .reminders import (
    AlertKind,
    ReminderAlert,
    check_reminder,
    check_reminders,
    order_reminders,
    reschedule,
    toggle_done,
    untitled_title,
)
from .storage import NoteNotFoundError, NotesDocument, NotesFileError, NotesStorage, sanitize_text

__all__ = [
    "AlertKind",
    "NoteNotFoundError",
    "NotesDocument",
    "NotesFileError",
    "NotesStorage",
    "ReminderAlert",
    "check_reminder",
    "check_reminders",
    "order_reminders",
    "reschedule",
    "sanitize_text",
    "toggle_done",
    "untitled_title",
]

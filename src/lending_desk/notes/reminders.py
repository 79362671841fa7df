"""Reminder alert rules.

A reminder raises up to three alerts over its life:

- ``day``: once, on the calendar day it is due
- ``time``: once, when the clock is within a minute of the due time
- ``missed``: once, when the due time passed more than a minute ago

Reminders marked done raise nothing. The functions here flip the
bookkeeping flags on the reminder and return the alerts; delivering them
(browser notification, alert box, log line) is up to the caller.
"""

import enum
from collections.abc import Iterable, Sequence
from datetime import datetime, timedelta

from pydantic import BaseModel, Field

from ..models.note import Note, Reminder

ALERT_WINDOW = timedelta(minutes=1)
UNTITLED_PREFIX = "Untitled"


class AlertKind(str, enum.Enum):
    DAY = "day"
    TIME = "time"
    MISSED = "missed"


class ReminderAlert(BaseModel):
    """One alert raised by a reminder check."""

    reminder_id: int = Field(..., description="ID of the reminder that fired")
    title: str = Field(..., description="Reminder title")
    kind: AlertKind = Field(..., description="Which alert fired")
    message: str = Field(..., description="Human readable alert text")


_MESSAGES = {
    AlertKind.DAY: "Reminder for today: {title}",
    AlertKind.TIME: "Reminder time: {title}",
    AlertKind.MISSED: "Missed reminder: {title}",
}


def _local(moment: datetime) -> datetime:
    """Naive local time, so aware and naive datetimes compare cleanly."""
    if moment.tzinfo is not None:
        return moment.astimezone().replace(tzinfo=None)
    return moment


def _alert(reminder: Reminder, kind: AlertKind) -> ReminderAlert:
    return ReminderAlert(
        reminder_id=reminder.id,
        title=reminder.title,
        kind=kind,
        message=_MESSAGES[kind].format(title=reminder.title),
    )


def check_reminder(reminder: Reminder, now: datetime | None = None) -> list[ReminderAlert]:
    """Apply the alert rules to one reminder and return the alerts it raised."""
    if reminder.done:
        return []

    now = _local(now or datetime.now())
    due = _local(reminder.reminder)
    alerts = []

    if not reminder.alerted_day and due.date() == now.date():
        reminder.alerted_day = True
        alerts.append(_alert(reminder, AlertKind.DAY))

    if not reminder.alerted_time and abs(now - due) < ALERT_WINDOW:
        reminder.alerted_time = True
        alerts.append(_alert(reminder, AlertKind.TIME))

    if not reminder.missed and now > due + ALERT_WINDOW:
        reminder.missed = True
        alerts.append(_alert(reminder, AlertKind.MISSED))

    return alerts


def check_reminders(
    reminders: Iterable[Reminder], now: datetime | None = None
) -> list[ReminderAlert]:
    now = now or datetime.now()
    alerts = []
    for reminder in reminders:
        alerts.extend(check_reminder(reminder, now))
    return alerts


def toggle_done(reminder: Reminder) -> Reminder:
    """Flip the done flag; finishing a reminder also clears ``missed``."""
    reminder.done = not reminder.done
    if reminder.done:
        reminder.missed = False
    return reminder


def reschedule(reminder: Reminder, when: datetime) -> Reminder:
    """Move a reminder and re-arm all of its alerts."""
    reminder.reminder = when
    reminder.alerted_day = False
    reminder.alerted_time = False
    reminder.missed = False
    reminder.touch()
    return reminder


def order_reminders(reminders: Iterable[Reminder]) -> list[Reminder]:
    """Missed reminders first, then upcoming, then done; stable within each group."""

    def rank(reminder: Reminder) -> int:
        if reminder.missed:
            return 0
        if reminder.done:
            return 2
        return 1

    return sorted(reminders, key=rank)


def untitled_title(items: Sequence[Note | Reminder]) -> str:
    """Next placeholder title: ``Untitled`` plus one more than those already used."""
    used = sum(1 for item in items if item.title.startswith(UNTITLED_PREFIX))
    return f"{UNTITLED_PREFIX}{used + 1}"

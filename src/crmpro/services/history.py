"""Per-customer note history: appending, date correction and the combined view."""

from __future__ import annotations

import logging
from datetime import date, datetime, time, timezone

from crmpro.errors import NoteNotFound, ValidationError
from crmpro.models import Customer, Note, today, utcnow
from crmpro.store import CustomerStore

logger = logging.getLogger(__name__)

FUTURE_NOTE_ID = "reminder"


def as_utc(value: datetime) -> datetime:
    # naive timestamps are read as local time
    return value.astimezone(timezone.utc)


def day_start(day: date) -> datetime:
    return datetime.combine(day, time.min, tzinfo=timezone.utc)


def append_note(
    customer: Customer,
    content: str,
    *,
    on: date | None = None,
) -> Note:
    """Append a note and advance ``last_contact``. Mutates ``customer``."""
    note = Note(date=utcnow(), content=content)
    customer.notes.append(note)
    customer.last_contact = on or today()
    return note


def correct_note_date(customer: Customer, note_id: str, when: datetime) -> Note:
    """Move a persisted note to another timestamp. ``last_contact`` is left alone."""
    note = customer.find_note(note_id)
    if note is None:
        raise NoteNotFound(customer.id, note_id)
    note.date = as_utc(when)
    return note


def future_entry(customer: Customer) -> Note | None:
    if not customer.next_steps or customer.reminder_date is None:
        return None
    return Note(
        id=FUTURE_NOTE_ID,
        date=day_start(customer.reminder_date),
        content=f"Next task: {customer.next_steps}",
        is_future=True,
    )


def combined_history(customer: Customer) -> list[Note]:
    """Persisted notes plus the open reminder, most recent (or most future) first."""
    items = list(customer.notes)
    pending = future_entry(customer)
    if pending is not None:
        items.append(pending)
    return sorted(items, key=lambda n: n.date, reverse=True)


def add_note(store: CustomerStore, customer_id: str, content: str) -> Note:
    if not content or not content.strip():
        raise ValidationError("Note content is required")
    customer = store.get(customer_id)
    note = append_note(customer, content)
    store.save(customer)
    logger.info("Added note %s to %s", note.id, customer.company_name)
    return note


def edit_note_date(store: CustomerStore, customer_id: str, note_id: str, when: datetime) -> Note:
    customer = store.get(customer_id)
    note = correct_note_date(customer, note_id, when)
    store.save(customer)
    return note

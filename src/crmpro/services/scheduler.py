"""Follow-up reminders ("Doings") derived from customer state."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime, timedelta

from crmpro.models import Customer, today, utcnow
from crmpro.services.history import append_note, day_start
from crmpro.store import CustomerStore

logger = logging.getLogger(__name__)

REMINDER_OPTIONS = (7, 14, 28)


@dataclass
class Task:
    customer: Customer
    due: date
    overdue: bool

    @property
    def description(self) -> str:
        return self.customer.next_steps


def is_overdue(reminder_date: date, now: datetime | None = None) -> bool:
    return day_start(reminder_date) < (now or utcnow())


def set_reminder(
    customer: Customer,
    *,
    days: int | None = None,
    on: date | None = None,
    start: date | None = None,
) -> date:
    """Set the reminder ``days`` after ``start`` (default today), or to the explicit date ``on``."""
    if on is None and days is None:
        raise ValueError("Either days or an explicit date is required")
    due = on if on is not None else (start or today()) + timedelta(days=days)
    customer.reminder_date = due
    return due


def clear_reminder(customer: Customer) -> None:
    customer.reminder_date = None


def complete(customer: Customer, *, on: date | None = None) -> None:
    customer.reminder_date = None
    append_note(customer, f"Task completed: {customer.next_steps}", on=on)


def reschedule(customer: Customer, days: int, *, start: date | None = None) -> date:
    return set_reminder(customer, days=days, start=start)


def open_tasks(customers: list[Customer], now: datetime | None = None) -> list[Task]:
    now = now or utcnow()
    pending = [c for c in customers if c.reminder_date is not None and not c.inactive]
    pending.sort(key=lambda c: c.reminder_date)
    return [Task(customer=c, due=c.reminder_date, overdue=is_overdue(c.reminder_date, now)) for c in pending]


def upcoming_tasks(customers: list[Customer], limit: int = 5, now: datetime | None = None) -> list[Task]:
    return open_tasks(customers, now)[:limit]


# -- store-backed transitions ------------------------------------------------


def complete_task(store: CustomerStore, customer_id: str) -> Customer:
    customer = store.get(customer_id)
    complete(customer)
    store.save(customer)
    logger.info("Completed task for %s", customer.company_name)
    return customer


def reschedule_task(store: CustomerStore, customer_id: str, days: int) -> Customer:
    customer = store.get(customer_id)
    reschedule(customer, days)
    store.save(customer)
    return customer


def update_reminder(
    store: CustomerStore,
    customer_id: str,
    *,
    days: int | None = None,
    on: date | None = None,
) -> Customer:
    """Set the reminder from an offset or an explicit date; clear it when neither is given."""
    customer = store.get(customer_id)
    if days is None and on is None:
        clear_reminder(customer)
    else:
        set_reminder(customer, days=days, on=on)
    store.save(customer)
    return customer

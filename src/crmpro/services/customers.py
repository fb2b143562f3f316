from __future__ import annotations

import calendar
import logging
from datetime import date
from typing import Any

from crmpro.errors import ValidationError
from crmpro.models import Customer, Source, today
from crmpro.store import CustomerStore

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = (
    "company_name",
    "contact_person",
    "address",
    "email",
    "phone",
    "source",
    "industry",
    "info",
    "next_steps",
    "first_contact",
    "last_contact",
    "reminder_date",
    "sj_seen",
    "inactive",
)

SORT_KEYS = ("lastContact", "firstContact", "companyName")
STALE_AFTER_MONTHS = 3


def _apply_fields(customer: Customer, fields: dict[str, Any]) -> None:
    unknown = set(fields) - set(EDITABLE_FIELDS)
    if unknown:
        raise ValidationError(f"Unknown fields: {', '.join(sorted(unknown))}")
    for name, value in fields.items():
        if name == "source":
            value = Source.parse(value)
        setattr(customer, name, value)


def create_customer(store: CustomerStore, fields: dict[str, Any]) -> Customer:
    customer = Customer()
    _apply_fields(customer, fields)
    customer.validate()
    store.save(customer)
    logger.info("Created customer %s (%s)", customer.company_name, customer.id)
    return customer


def update_customer(store: CustomerStore, customer_id: str, fields: dict[str, Any]) -> Customer:
    """Edit form submission. Id and notes are preserved."""
    customer = store.get(customer_id)
    _apply_fields(customer, fields)
    customer.validate()
    store.save(customer)
    return customer


def delete_customer(store: CustomerStore, customer_id: str) -> None:
    store.delete(customer_id)


def _as_day(value: date | str) -> date:
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(value)
    except ValueError:
        return date.min


def months_before(day: date, months: int) -> date:
    """Same day of month ``months`` earlier, clamped to the end of shorter months."""
    year, month = divmod(day.year * 12 + day.month - 1 - months, 12)
    month += 1
    return date(year, month, min(day.day, calendar.monthrange(year, month)[1]))


def is_stale_contact(customer: Customer, on: date | None = None) -> bool:
    """Last contact lies more than three calendar months back."""
    return _as_day(customer.last_contact) < months_before(on or today(), STALE_AFTER_MONTHS)


def query_customers(
    customers: list[Customer],
    *,
    search: str = "",
    source: Source | str | None = None,
    industry: str = "",
    with_reminder: bool = False,
    inactive: bool = False,
    sort_by: str = "lastContact",
) -> list[Customer]:
    """Filter and sort the customer list. Active and inactive records are never mixed."""
    if sort_by not in SORT_KEYS:
        raise ValidationError(f"Cannot sort by {sort_by!r}")
    needle = search.lower()
    wanted_source = Source.parse(source) if source else None

    def keep(c: Customer) -> bool:
        if c.inactive != inactive:
            return False
        if needle:
            haystack = " ".join([c.company_name, c.contact_person, c.email, c.industry]).lower()
            if needle not in haystack:
                return False
        if wanted_source is not None and c.source is not wanted_source:
            return False
        if industry and industry.lower() not in c.industry.lower():
            return False
        if with_reminder and c.reminder_date is None:
            return False
        return True

    result = [c for c in customers if keep(c)]
    if sort_by == "companyName":
        result.sort(key=lambda c: c.company_name.lower())
    elif sort_by == "firstContact":
        result.sort(key=lambda c: _as_day(c.first_contact), reverse=True)
    else:
        result.sort(key=lambda c: _as_day(c.last_contact), reverse=True)
    return result

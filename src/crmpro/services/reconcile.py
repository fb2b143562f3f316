"""Merge extracted contact details from correspondence into a customer.

Two phases: ``review`` computes the proposed changes from untrusted
extraction output without touching the store, then ``apply_and_note`` or
``note_only`` commits them together with the summary note.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date

from crmpro.errors import OracleIntegrityError
from crmpro.models import Customer
from crmpro.services.history import append_note
from crmpro.store import CustomerStore

logger = logging.getLogger(__name__)

CONTACT_FIELDS = ("contact_person", "email", "phone", "address")
DEFAULT_SUMMARY = "Email added as note."


@dataclass
class ExtractionPayload:
    customer_id: str | None = None
    contact_person: str = ""
    email: str = ""
    phone: str = ""
    address: str = ""
    summary: str = ""


@dataclass(frozen=True)
class FieldChange:
    field: str
    old_value: str
    new_value: str


@dataclass
class ReviewSet:
    customer: Customer
    changes: list[FieldChange] = field(default_factory=list)
    summary: str = DEFAULT_SUMMARY

    @property
    def has_changes(self) -> bool:
        return bool(self.changes)


@dataclass(frozen=True)
class NoMatch:
    message: str = "Could not confidently match the correspondence to a customer."


def diff_fields(customer: Customer, payload: ExtractionPayload) -> list[FieldChange]:
    """Fields where the extraction found a non-empty value that differs from the stored one."""
    changes = []
    for name in CONTACT_FIELDS:
        new_value = getattr(payload, name) or ""
        old_value = getattr(customer, name)
        if new_value and new_value != old_value:
            changes.append(FieldChange(field=name, old_value=old_value, new_value=new_value))
    return changes


def review(customers: list[Customer], payload: ExtractionPayload) -> ReviewSet | NoMatch:
    if payload.customer_id is None:
        return NoMatch()
    matched = next((c for c in customers if c.id == payload.customer_id), None)
    if matched is None:
        raise OracleIntegrityError(payload.customer_id)
    return ReviewSet(
        customer=matched,
        changes=diff_fields(matched, payload),
        summary=payload.summary or DEFAULT_SUMMARY,
    )


def merge(customer: Customer, review_set: ReviewSet, *, update_fields: bool, on: date | None = None) -> Customer:
    """Apply ``review_set`` to ``customer`` in place and append the summary note."""
    if update_fields:
        for change in review_set.changes:
            setattr(customer, change.field, change.new_value)
    append_note(customer, review_set.summary, on=on)
    return customer


def _commit(store: CustomerStore, review_set: ReviewSet, update_fields: bool) -> Customer:
    # start from the stored record, not the snapshot taken at review time
    customer = store.get(review_set.customer.id)
    merge(customer, review_set, update_fields=update_fields)
    store.save(customer)
    logger.info(
        "Reconciled correspondence into %s (%d field changes applied)",
        customer.company_name,
        len(review_set.changes) if update_fields else 0,
    )
    return customer


def apply_and_note(store: CustomerStore, review_set: ReviewSet) -> Customer:
    return _commit(store, review_set, update_fields=True)


def note_only(store: CustomerStore, review_set: ReviewSet) -> Customer:
    return _commit(store, review_set, update_fields=False)

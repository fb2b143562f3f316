"""Request and response bodies for the HTTP API."""

from __future__ import annotations

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from crmpro.models import Customer, Note, Source
from crmpro.services.reconcile import FieldChange, ReviewSet
from crmpro.services.scheduler import Task


class CustomerIn(BaseModel):
    company_name: str = ""
    contact_person: str = ""
    address: str = ""
    email: str = ""
    phone: str = ""
    source: Source = Source.OTHER
    industry: str = ""
    info: str = ""
    next_steps: str = ""
    first_contact: Optional[date] = None
    last_contact: Optional[date] = None
    reminder_date: Optional[date] = None
    sj_seen: bool = False
    inactive: bool = False

    @field_validator("source", mode="before")
    @classmethod
    def parse_source(cls, value):
        return Source.parse(value)

    def to_fields(self) -> dict:
        # omitted contact dates keep the stored value; a null reminder clears it
        data = self.model_dump(exclude_none=True)
        data["reminder_date"] = self.reminder_date
        return data


class NoteIn(BaseModel):
    content: str


class NoteDateIn(BaseModel):
    date: datetime


class ReminderIn(BaseModel):
    days: Optional[int] = Field(None, ge=0)
    on: Optional[date] = None


class RescheduleIn(BaseModel):
    days: int = Field(7, ge=0)


class AssignIn(BaseModel):
    text: str


class SettingsIn(BaseModel):
    company_name: str = ""
    logo: Optional[str] = None


def note_out(note: Note) -> dict:
    return {
        "id": note.id,
        "date": note.date.isoformat(),
        "content": note.content,
        "isFuture": note.is_future,
    }


def task_out(task: Task) -> dict:
    return {
        "customerId": task.customer.id,
        "companyName": task.customer.company_name,
        "nextSteps": task.description,
        "due": task.due.isoformat(),
        "overdue": task.overdue,
    }


def change_out(change: FieldChange) -> dict:
    return {"field": change.field, "oldValue": change.old_value, "newValue": change.new_value}


def review_out(review: ReviewSet) -> dict:
    return {
        "matched": True,
        "customerId": review.customer.id,
        "companyName": review.customer.company_name,
        "changes": [change_out(c) for c in review.changes],
        "summary": review.summary,
    }


def customer_out(customer: Customer) -> dict:
    return customer.to_dict()

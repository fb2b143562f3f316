from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from enum import Enum
from typing import Any

from crmpro.errors import ValidationError


class Source(str, Enum):
    GOOGLE = "Google"
    REFERRAL = "Referral"
    TRADE_SHOW = "TradeShow"
    OTHER = "Other"

    @classmethod
    def parse(cls, value: Any) -> "Source":
        """Map a free-form source label to a category. Unknown labels become Other."""
        if isinstance(value, cls):
            return value
        key = str(value or "").strip().lower().replace(" ", "").replace("-", "")
        return _SOURCE_ALIASES.get(key, cls.OTHER)


_SOURCE_ALIASES = {
    "google": Source.GOOGLE,
    "referral": Source.REFERRAL,
    "empfehlung": Source.REFERRAL,
    "tradeshow": Source.TRADE_SHOW,
    "fair": Source.TRADE_SHOW,
    "messe": Source.TRADE_SHOW,
    "other": Source.OTHER,
    "sonstiges": Source.OTHER,
}


def new_id() -> str:
    return str(uuid.uuid4())


def today() -> date:
    return date.today()


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class Note:
    id: str = field(default_factory=new_id)
    date: datetime = field(default_factory=utcnow)
    content: str = ""
    # only set on the synthetic reminder entry of a combined history
    is_future: bool = False

    def to_dict(self) -> dict:
        return {"id": self.id, "date": self.date.isoformat(), "content": self.content}

    @classmethod
    def from_dict(cls, data: dict) -> "Note":
        return cls(
            id=data["id"],
            date=_parse_timestamp(data["date"]),
            content=data.get("content", ""),
        )


@dataclass
class Customer:
    company_name: str = ""
    id: str = field(default_factory=new_id)
    contact_person: str = ""
    address: str = ""
    email: str = ""
    phone: str = ""
    source: Source = Source.OTHER
    industry: str = ""
    info: str = ""
    next_steps: str = ""
    # imported text that is not an ISO date is kept verbatim
    first_contact: date | str = field(default_factory=today)
    last_contact: date | str = field(default_factory=today)
    reminder_date: date | None = None
    sj_seen: bool = False
    inactive: bool = False
    notes: list[Note] = field(default_factory=list)

    def validate(self) -> None:
        if not self.company_name or not self.company_name.strip():
            raise ValidationError("Company name is required")

    def find_note(self, note_id: str) -> Note | None:
        for note in self.notes:
            if note.id == note_id:
                return note
        return None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "companyName": self.company_name,
            "contactPerson": self.contact_person,
            "address": self.address,
            "email": self.email,
            "phone": self.phone,
            "source": self.source.value,
            "industry": self.industry,
            "info": self.info,
            "nextSteps": self.next_steps,
            "firstContact": _format_day(self.first_contact),
            "lastContact": _format_day(self.last_contact),
            "reminderDate": self.reminder_date.isoformat() if self.reminder_date else None,
            "sjSeen": self.sj_seen,
            "inactive": self.inactive,
            "notes": [n.to_dict() for n in self.notes],
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Customer":
        reminder = data.get("reminderDate")
        return cls(
            id=data["id"],
            company_name=data.get("companyName", ""),
            contact_person=data.get("contactPerson", ""),
            address=data.get("address", ""),
            email=data.get("email", ""),
            phone=data.get("phone", ""),
            source=Source.parse(data.get("source")),
            industry=data.get("industry", ""),
            info=data.get("info", ""),
            next_steps=data.get("nextSteps", ""),
            first_contact=_parse_day(data.get("firstContact")),
            last_contact=_parse_day(data.get("lastContact")),
            reminder_date=date.fromisoformat(reminder) if reminder else None,
            sj_seen=bool(data.get("sjSeen", False)),
            inactive=bool(data.get("inactive", False)),
            notes=[Note.from_dict(n) for n in data.get("notes") or []],
        )


@dataclass
class CompanySettings:
    company_name: str = "My Company"
    logo: str | None = None  # data URI

    def to_dict(self) -> dict:
        return {"companyName": self.company_name, "logo": self.logo}

    @classmethod
    def from_dict(cls, data: dict) -> "CompanySettings":
        return cls(company_name=data.get("companyName", ""), logo=data.get("logo"))


def _format_day(value: date | str) -> str:
    return value.isoformat() if isinstance(value, date) else value


def _parse_day(value: str | None) -> date | str:
    if not value:
        return today()
    try:
        return date.fromisoformat(value)
    except ValueError:
        return value


def _parse_timestamp(value: str) -> datetime:
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed

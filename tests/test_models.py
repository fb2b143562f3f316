from __future__ import annotations

from datetime import date, datetime, timezone

import pytest

from crmpro.errors import ValidationError
from crmpro.models import Customer, Note, Source


def test_defaults():
    c = Customer(company_name="Acme")
    assert c.source is Source.OTHER
    assert c.first_contact == date.today()
    assert c.last_contact == date.today()
    assert c.reminder_date is None
    assert c.notes == []
    assert not c.sj_seen and not c.inactive


def test_ids_are_unique():
    assert Customer().id != Customer().id


@pytest.mark.parametrize("name", ["", "   "])
def test_company_name_required(name):
    with pytest.raises(ValidationError):
        Customer(company_name=name).validate()


def test_valid_customer_passes():
    Customer(company_name="Acme").validate()


def test_serialized_keys_are_camel_case():
    c = Customer(company_name="Acme", next_steps="Call", reminder_date=date(2024, 3, 1))
    data = c.to_dict()
    assert data["companyName"] == "Acme"
    assert data["nextSteps"] == "Call"
    assert data["reminderDate"] == "2024-03-01"
    assert data["source"] == "Other"


def test_is_future_is_not_persisted():
    note = Note(content="x", is_future=True)
    assert "isFuture" not in note.to_dict()


def test_free_text_dates_survive_roundtrip():
    c = Customer(company_name="Acme", first_contact="Spring 2019")
    assert Customer.from_dict(c.to_dict()).first_contact == "Spring 2019"


def test_note_timestamps_are_utc():
    note = Note.from_dict({"id": "1", "date": "2024-01-01T10:00:00Z", "content": "x"})
    assert note.date == datetime(2024, 1, 1, 10, tzinfo=timezone.utc)


@pytest.mark.parametrize(
    "label,expected",
    [
        ("Google", Source.GOOGLE),
        ("referral", Source.REFERRAL),
        ("Empfehlung", Source.REFERRAL),
        ("Trade Show", Source.TRADE_SHOW),
        ("Messe", Source.TRADE_SHOW),
        ("Sonstiges", Source.OTHER),
        ("Newspaper", Source.OTHER),
        (None, Source.OTHER),
    ],
)
def test_source_parse(label, expected):
    assert Source.parse(label) is expected

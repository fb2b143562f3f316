from __future__ import annotations

import asyncio
import json
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from crmpro.errors import OracleError
from crmpro.models import Customer
from crmpro.services.ai import build_roster, extract_correspondence, parse_response

VALID = {
    "customerId": "c1",
    "contactPerson": "Jane Doe",
    "email": "jane@acme.test",
    "phone": "",
    "address": "",
    "summary": "Asks for an offer.",
}


def test_build_roster_skips_inactive():
    active = Customer(company_name="Active", contact_person="Ann", email="a@x.test")
    inactive = Customer(company_name="Gone", inactive=True)

    roster = build_roster([active, inactive])

    assert roster == [
        {"id": active.id, "companyName": "Active", "contactPerson": "Ann", "email": "a@x.test"}
    ]


def test_parse_valid_response():
    payload = parse_response(json.dumps(VALID))
    assert payload.customer_id == "c1"
    assert payload.contact_person == "Jane Doe"
    assert payload.phone == ""
    assert payload.summary == "Asks for an offer."


def test_parse_strips_markdown_fences():
    raw = "```json\n" + json.dumps(VALID) + "\n```"
    assert parse_response(raw).email == "jane@acme.test"


def test_parse_null_customer():
    assert parse_response(json.dumps(VALID | {"customerId": None})).customer_id is None


@pytest.mark.parametrize(
    "raw",
    [
        "not json",
        "[]",
        json.dumps({k: v for k, v in VALID.items() if k != "summary"}),
        json.dumps(VALID | {"customerId": 42}),
        json.dumps(VALID | {"email": ["a", "b"]}),
    ],
)
def test_parse_rejects_malformed(raw):
    with pytest.raises(OracleError):
        parse_response(raw)


def test_extract_requires_api_key(monkeypatch):
    monkeypatch.delenv("ANTHROPIC_API_KEY", raising=False)
    with pytest.raises(OracleError, match="ANTHROPIC_API_KEY"):
        asyncio.run(extract_correspondence("Hello", []))


def _fake_client(text: str | None = None, error: Exception | None = None) -> MagicMock:
    client = MagicMock()
    client.__aenter__.return_value = client
    if error is not None:
        client.messages.create = AsyncMock(side_effect=error)
    else:
        message = SimpleNamespace(content=[SimpleNamespace(text=text)])
        client.messages.create = AsyncMock(return_value=message)
    return client


def test_extract_calls_model_with_roster(monkeypatch):
    monkeypatch.setenv("ANTHROPIC_API_KEY", "test-key")
    monkeypatch.setenv("CRMPRO_MODEL", "test-model")
    client = _fake_client(json.dumps(VALID))
    roster = [{"id": "c1", "companyName": "Acme", "contactPerson": "", "email": ""}]

    with patch("crmpro.services.ai.anthropic.AsyncAnthropic", return_value=client):
        payload = asyncio.run(extract_correspondence("Best regards, Jane", roster))

    assert payload.customer_id == "c1"
    kwargs = client.messages.create.call_args.kwargs
    assert kwargs["model"] == "test-model"
    prompt = kwargs["messages"][0]["content"]
    assert "Best regards, Jane" in prompt
    assert '"companyName": "Acme"' in prompt
    client.__aexit__.assert_awaited_once()


def test_extract_transport_failure(monkeypatch):
    monkeypatch.setenv("ANTHROPIC_API_KEY", "test-key")
    client = _fake_client(error=ConnectionError("down"))

    with patch("crmpro.services.ai.anthropic.AsyncAnthropic", return_value=client):
        with pytest.raises(OracleError):
            asyncio.run(extract_correspondence("Hi", []))

    client.__aexit__.assert_awaited_once()

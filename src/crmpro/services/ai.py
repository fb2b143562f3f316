from __future__ import annotations

import json
import logging

import anthropic

from crmpro.config import get_settings
from crmpro.errors import OracleError
from crmpro.models import Customer
from crmpro.services.reconcile import ExtractionPayload

logger = logging.getLogger(__name__)

EXTRACTION_PROMPT = """\
You are a CRM assistant. Analyze the email below together with the list of customers and:
1. Identify which customer the email belongs to.
2. Extract contact information (contact person, email, phone, address) and write a concise summary of the email.

Customers:
{roster}

Email content:
\"\"\"
{text}
\"\"\"

Return a JSON object with exactly these keys:
- "customerId": the "id" of the matched customer from the list, or null if no customer can be confidently matched
- "contactPerson": full name of the contact person found in the email
- "email": email address found in the signature or body
- "phone": phone number found in the email
- "address": physical address found in the email
- "summary": a one or two sentence description of the email's purpose

Rules:
- Only use an id that appears in the customer list
- If a detail is not found, return an empty string ""
- Return ONLY valid JSON, no markdown fences or extra text
"""

_STRING_KEYS = ("contactPerson", "email", "phone", "address", "summary")


def build_roster(customers: list[Customer]) -> list[dict]:
    """The candidate list sent along with the email. Inactive customers are left out."""
    return [
        {
            "id": c.id,
            "companyName": c.company_name,
            "contactPerson": c.contact_person,
            "email": c.email,
        }
        for c in customers
        if not c.inactive
    ]


def _strip_fences(raw: str) -> str:
    raw = raw.strip()
    if raw.startswith("```"):
        raw = raw.split("\n", 1)[1] if "\n" in raw else ""
        raw = raw.rsplit("```", 1)[0]
    return raw.strip()


def parse_response(raw: str) -> ExtractionPayload:
    """Validate the model output against the expected schema."""
    try:
        data = json.loads(_strip_fences(raw))
    except json.JSONDecodeError as exc:
        raise OracleError(f"Extraction response is not valid JSON: {exc}") from exc
    if not isinstance(data, dict):
        raise OracleError("Extraction response is not a JSON object")

    missing = [k for k in ("customerId", *_STRING_KEYS) if k not in data]
    if missing:
        raise OracleError(f"Extraction response is missing keys: {', '.join(missing)}")

    customer_id = data["customerId"]
    if customer_id is not None and not isinstance(customer_id, str):
        raise OracleError("customerId must be a string or null")
    for key in _STRING_KEYS:
        if data[key] is not None and not isinstance(data[key], str):
            raise OracleError(f"{key} must be a string")

    return ExtractionPayload(
        customer_id=customer_id or None,
        contact_person=(data["contactPerson"] or "").strip(),
        email=(data["email"] or "").strip(),
        phone=(data["phone"] or "").strip(),
        address=(data["address"] or "").strip(),
        summary=(data["summary"] or "").strip(),
    )


async def extract_correspondence(text: str, roster: list[dict]) -> ExtractionPayload:
    """Ask Claude to match ``text`` against ``roster`` and pull out contact details."""
    settings = get_settings()
    if not settings.anthropic_api_key:
        raise OracleError("ANTHROPIC_API_KEY is required for email assignment")

    prompt = EXTRACTION_PROMPT.format(roster=json.dumps(roster, ensure_ascii=False), text=text)
    try:
        async with anthropic.AsyncAnthropic(api_key=settings.anthropic_api_key) as client:
            message = await client.messages.create(
                model=settings.model,
                max_tokens=settings.max_tokens,
                messages=[{"role": "user", "content": prompt}],
            )
        raw = message.content[0].text
    except Exception as exc:
        logger.exception("Extraction request failed")
        raise OracleError("Extraction request failed") from exc

    return parse_response(raw)

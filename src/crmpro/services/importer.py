"""Bulk import of customers from CSV files and spreadsheets.

Column names drift between hand-maintained sheets, so spreadsheet rows are
looked up both as ``companyName`` and ``CompanyName``. CSV files carry no
usable header; their fields are taken positionally in ``COLUMNS`` order.
Rows without a company name are dropped without failing the batch.
"""

from __future__ import annotations

import io
import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from pathlib import PurePath
from typing import Any, Callable, Iterable, Mapping

from openpyxl import load_workbook

from crmpro.errors import ImportParseError
from crmpro.models import Customer, Source, today
from crmpro.store import CustomerStore

logger = logging.getLogger(__name__)

COLUMNS = (
    "companyName",
    "contactPerson",
    "address",
    "email",
    "phone",
    "source",
    "industry",
    "nextSteps",
    "firstContact",
    "lastContact",
    "sjSeen",
    "info",
)

DELIMITER = ","
QUOTE = '"'
TRUTHY = {"ja", "yes"}


class FileKind(str, Enum):
    DELIMITED = "delimited"
    SPREADSHEET = "spreadsheet"


_EXTENSIONS = {
    ".csv": FileKind.DELIMITED,
    ".xlsx": FileKind.SPREADSHEET,
    ".xlsm": FileKind.SPREADSHEET,
    ".xls": FileKind.SPREADSHEET,
}


@dataclass
class ImportResult:
    customers: list[Customer] = field(default_factory=list)

    @property
    def accepted(self) -> int:
        return len(self.customers)


def detect_kind(filename: str) -> FileKind:
    suffix = PurePath(filename).suffix.lower()
    try:
        return _EXTENSIONS[suffix]
    except KeyError:
        raise ImportParseError(f"Unsupported file type: {suffix or filename!r}") from None


# -- cell helpers ------------------------------------------------------------


def _text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return str(value)


def _day(value: Any, fallback: date) -> date | str:
    if value is None or value == "":
        return fallback
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = _text(value)
    try:
        return date.fromisoformat(text)
    except ValueError:
        return text


def _flag(value: Any) -> bool:
    return _text(value).strip().lower() in TRUTHY


def _build(get: Callable[[str], Any], on: date) -> Customer | None:
    company = _text(get("companyName"))
    if not company.strip():
        return None
    return Customer(
        company_name=company,
        contact_person=_text(get("contactPerson")),
        address=_text(get("address")),
        email=_text(get("email")),
        phone=_text(get("phone")),
        source=Source.parse(get("source")),
        industry=_text(get("industry")),
        next_steps=_text(get("nextSteps")),
        first_contact=_day(get("firstContact"), on),
        last_contact=_day(get("lastContact"), on),
        sj_seen=_flag(get("sjSeen")),
        info=_text(get("info")),
        inactive=False,
        reminder_date=None,
        notes=[],
    )


# -- normalizers -------------------------------------------------------------


def normalize_delimited(text: str, on: date | None = None) -> list[Customer]:
    on = on or today()
    customers = []
    for line in text.split("\n")[1:]:
        if not line.strip():
            continue
        fields = [f.strip().replace(QUOTE, "") for f in line.split(DELIMITER)]
        values = dict(zip(COLUMNS, fields))
        customer = _build(values.get, on)
        if customer is not None:
            customers.append(customer)
    return customers


def _lookup(row: Mapping[str, Any], name: str) -> Any:
    for key in (name, name[0].upper() + name[1:]):
        value = row.get(key)
        if value is not None and value != "":
            return value
    return None


def normalize_rows(rows: Iterable[Mapping[str, Any]], on: date | None = None) -> list[Customer]:
    on = on or today()
    customers = []
    for row in rows:
        customer = _build(lambda name: _lookup(row, name), on)
        if customer is not None:
            customers.append(customer)
    return customers


# -- file readers ------------------------------------------------------------


def read_delimited(data: bytes) -> str:
    try:
        return data.decode("utf-8-sig")
    except UnicodeDecodeError as exc:
        raise ImportParseError(f"File is not valid UTF-8 text: {exc}") from exc


def read_spreadsheet(data: bytes) -> list[dict[str, Any]]:
    """Rows of the first worksheet as header-keyed dicts."""
    try:
        wb = load_workbook(io.BytesIO(data), read_only=True, data_only=True)
    except Exception as exc:
        raise ImportParseError(f"Could not read spreadsheet: {exc}") from exc
    try:
        rows = wb.worksheets[0].iter_rows(values_only=True)
        header = next(rows, None)
        if header is None:
            return []
        names = [_text(h).strip() for h in header]
        result = []
        for values in rows:
            if all(v is None for v in values):
                continue
            result.append({name: value for name, value in zip(names, values) if name})
        return result
    finally:
        wb.close()


def parse_file(filename: str, data: bytes, on: date | None = None) -> list[Customer]:
    kind = detect_kind(filename)
    if kind is FileKind.DELIMITED:
        return normalize_delimited(read_delimited(data), on)
    return normalize_rows(read_spreadsheet(data), on)


def import_file(store: CustomerStore, filename: str, data: bytes) -> ImportResult:
    """Parse ``data`` and append every accepted row to the store.

    Imports never deduplicate: importing the same sheet twice yields two
    records per company.
    """
    customers = parse_file(filename, data)
    store.add_many(customers)
    logger.info("Imported %d customers from %s", len(customers), filename)
    return ImportResult(customers=customers)

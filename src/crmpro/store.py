from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, Iterable

from crmpro.db import get_db, init_db, read_document, write_document
from crmpro.errors import CustomerNotFound
from crmpro.models import CompanySettings, Customer

logger = logging.getLogger(__name__)

CUSTOMERS_KEY = "customers"
SETTINGS_KEY = "settings"

Listener = Callable[[str], None]


class CustomerStore:
    """Owns the two persisted documents: the customer collection and the settings.

    Every write replaces the whole document inside one transaction, so a
    failed write leaves the previous state intact. Listeners are told which
    document changed after the commit.
    """

    def __init__(self, db_path: Path | None = None):
        self.db_path = db_path
        self._listeners: list[Listener] = []
        init_db(db_path)

    # -- change notification -------------------------------------------------

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self, key: str) -> None:
        for listener in list(self._listeners):
            listener(key)

    # -- customers -----------------------------------------------------------

    def all(self) -> list[Customer]:
        with get_db(self.db_path) as db:
            raw = read_document(db, CUSTOMERS_KEY) or []
        return [Customer.from_dict(item) for item in raw]

    def get(self, customer_id: str) -> Customer:
        for customer in self.all():
            if customer.id == customer_id:
                return customer
        raise CustomerNotFound(customer_id)

    def find(self, customer_id: str) -> Customer | None:
        try:
            return self.get(customer_id)
        except CustomerNotFound:
            return None

    def replace_all(self, customers: Iterable[Customer]) -> None:
        payload = [c.to_dict() for c in customers]
        with get_db(self.db_path) as db:
            write_document(db, CUSTOMERS_KEY, payload)
        self._notify(CUSTOMERS_KEY)

    def save(self, customer: Customer) -> Customer:
        """Insert or replace a customer by id."""
        customers = self.all()
        for i, existing in enumerate(customers):
            if existing.id == customer.id:
                customers[i] = customer
                break
        else:
            customers.append(customer)
        self.replace_all(customers)
        return customer

    def add_many(self, new_customers: list[Customer]) -> None:
        if not new_customers:
            return
        self.replace_all(self.all() + new_customers)

    def delete(self, customer_id: str) -> None:
        customers = self.all()
        remaining = [c for c in customers if c.id != customer_id]
        if len(remaining) == len(customers):
            raise CustomerNotFound(customer_id)
        self.replace_all(remaining)
        logger.info("Deleted customer %s", customer_id)

    # -- settings ------------------------------------------------------------

    def load_settings(self) -> CompanySettings:
        with get_db(self.db_path) as db:
            raw = read_document(db, SETTINGS_KEY)
        if raw is None:
            return CompanySettings()
        return CompanySettings.from_dict(raw)

    def save_settings(self, settings: CompanySettings) -> None:
        with get_db(self.db_path) as db:
            write_document(db, SETTINGS_KEY, settings.to_dict())
        self._notify(SETTINGS_KEY)

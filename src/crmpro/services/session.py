from __future__ import annotations

import logging
from typing import Awaitable, Callable

from crmpro.errors import ReconciliationBusy, ValidationError
from crmpro.models import Customer
from crmpro.services import reconcile
from crmpro.services.ai import build_roster, extract_correspondence
from crmpro.services.reconcile import ExtractionPayload, NoMatch, ReviewSet
from crmpro.store import CustomerStore

logger = logging.getLogger(__name__)

Extractor = Callable[[str, list[dict]], Awaitable[ExtractionPayload]]


class ReconciliationSession:
    """One email-assignment workflow: submit text, review, then commit or discard.

    Only one extraction call may be outstanding at a time. A failed call
    leaves the session exactly as it was before the submit.
    """

    def __init__(self, store: CustomerStore, extractor: Extractor | None = None):
        self.store = store
        self.extractor = extractor or extract_correspondence
        self.text = ""
        self.pending: ReviewSet | None = None
        self.in_flight = False

    async def submit(self, text: str) -> ReviewSet | NoMatch:
        if self.in_flight:
            raise ReconciliationBusy()
        if not text or not text.strip():
            raise ValidationError("Email text is required")

        previous = (self.text, self.pending)
        self.in_flight = True
        self.text, self.pending = text, None
        try:
            customers = self.store.all()
            payload = await self.extractor(text, build_roster(customers))
            outcome = reconcile.review(customers, payload)
        except Exception:
            self.text, self.pending = previous
            raise
        finally:
            self.in_flight = False

        if isinstance(outcome, ReviewSet):
            self.pending = outcome
        else:
            logger.info("No customer matched the submitted email")
        return outcome

    def discard(self) -> None:
        self.text = ""
        self.pending = None

    def _take(self) -> ReviewSet:
        if self.pending is None:
            raise ValidationError("Nothing to apply; submit an email first")
        return self.pending

    def apply_and_note(self) -> Customer:
        customer = reconcile.apply_and_note(self.store, self._take())
        self.discard()
        return customer

    def note_only(self) -> Customer:
        customer = reconcile.note_only(self.store, self._take())
        self.discard()
        return customer

"""Error hierarchy for CRM Pro."""

from __future__ import annotations


class CrmError(Exception):
    """Base class for all domain errors."""

    status_code = 400


class ValidationError(CrmError):
    """A record failed structural validation (e.g. missing company name)."""

    status_code = 422


class CustomerNotFound(CrmError):
    status_code = 404

    def __init__(self, customer_id: str):
        self.customer_id = customer_id
        super().__init__(f"Customer {customer_id} not found")


class NoteNotFound(CrmError):
    status_code = 404

    def __init__(self, customer_id: str, note_id: str):
        self.customer_id = customer_id
        self.note_id = note_id
        super().__init__(f"Note {note_id} not found on customer {customer_id}")


class ImportParseError(CrmError):
    """The import file could not be read at all. Nothing was committed."""

    status_code = 422


class OracleError(CrmError):
    """The extraction service failed or returned something unusable."""

    status_code = 502


class OracleIntegrityError(OracleError):
    """The extraction service matched an id that is not in the store."""

    def __init__(self, customer_id: str):
        self.customer_id = customer_id
        super().__init__(f"Extraction matched unknown customer id {customer_id!r}")


class ReconciliationBusy(CrmError):
    status_code = 409

    def __init__(self) -> None:
        super().__init__("A reconciliation request is already in progress")

"""
Typed errors for the delivery note workflow.

    SuratJalanError (base)
    |
    +-- NotFoundError       referenced note / PO / user absent from cache or store
    +-- ValidationError     required field missing or malformed
    +-- PersistenceError    the store operation itself failed

Each error carries a machine-readable ``code`` and the HTTP status the API
layer maps it to.
"""
from typing import Optional


class SuratJalanError(Exception):
    code: str = "SURAT_JALAN_ERROR"
    status_code: int = 500

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class NotFoundError(SuratJalanError):
    code = "NOT_FOUND"
    status_code = 404

    def __init__(self, entity: str, identifier: Optional[str] = None):
        self.entity = entity
        self.identifier = identifier
        if identifier is None:
            message = f"{entity} not found"
        else:
            message = f"{entity} {identifier} not found"
        super().__init__(message)


class ValidationError(SuratJalanError):
    code = "VALIDATION_ERROR"
    status_code = 422

    def __init__(self, message: str, field: Optional[str] = None):
        self.field = field
        super().__init__(message)


class PersistenceError(SuratJalanError):
    code = "PERSISTENCE_ERROR"
    status_code = 502

    def __init__(self, operation: str, message: str):
        self.operation = operation
        super().__init__(f"{operation} failed: {message}")

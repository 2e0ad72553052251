"""
Ledger Errors

Every failure a caller can see is one of these types. Each carries a
stable ``code`` so a host UI can pick a message without parsing text.

Storage-level errors live in ``library_ledger.services.storage.interface``
and share the same base class.
"""

from typing import Optional


class LedgerError(Exception):
    """Base exception for all ledger operations."""

    code: str = "ledger_error"

    def __init__(self, message: str, *, key: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.key = key


class DuplicateKeyError(LedgerError):
    """A record with the same identity key already exists."""

    code = "duplicate_key"


class NotFoundError(LedgerError):
    """No record with the given identity key exists."""

    code = "not_found"


class NotAvailableError(LedgerError):
    """The book is not in the Available state."""

    code = "not_available"


class NotIssuedError(LedgerError):
    """The book is not in the Issued state."""

    code = "not_issued"


class NoOpenLoanError(LedgerError):
    """The user holds no open loan for the book."""

    code = "no_open_loan"


class InvalidCredentialsError(LedgerError):
    """Unknown user or wrong password. Deliberately indistinguishable."""

    code = "invalid_credentials"


class PermissionDeniedError(LedgerError):
    """The user's role does not grant the requested permission."""

    code = "permission_denied"


class InvalidInputError(LedgerError):
    """Input rejected before any state was touched."""

    code = "invalid_input"

    def __init__(self, message: str, *, field: str, key: Optional[str] = None):
        super().__init__(message, key=key)
        self.field = field

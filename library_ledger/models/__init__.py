"""
Data Models Package

This package contains all Pydantic models used in the Library Ledger.
All data flowing through the system must conform to these schemas.
"""

from library_ledger.models.book import Book, BookStatus
from library_ledger.models.user import Credential, Permission, Role, User
from library_ledger.models.transaction import Transaction
from library_ledger.models.results import (
    BorrowReceipt,
    LibraryReport,
    ReturnReceipt,
)
from library_ledger.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Inventory models
    "Book",
    "BookStatus",
    # Account models
    "Credential",
    "Permission",
    "Role",
    "User",
    # Loan models
    "Transaction",
    # Results
    "BorrowReceipt",
    "LibraryReport",
    "ReturnReceipt",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]

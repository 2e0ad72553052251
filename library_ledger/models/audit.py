"""
Audit Models for Library Ledger

Every state change and every security-relevant failure produces an
audit event. This provides:
1. Traceability of who borrowed and returned what
2. Visibility of failed logins and bootstrap of the default admin
3. A record of store writes that failed after memory was changed

DESIGN DECISION: Audit events are emitted to the structured log only.
They are never edited after creation.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Inventory
    BOOK_ADDED = "book_added"
    BOOK_DELETED = "book_deleted"

    # Loans
    BOOK_BORROWED = "book_borrowed"
    BOOK_RETURNED = "book_returned"

    # Accounts
    USER_REGISTERED = "user_registered"
    DEFAULT_ADMIN_CREATED = "default_admin_created"
    AUTHENTICATION_SUCCEEDED = "authentication_succeeded"
    AUTHENTICATION_FAILED = "authentication_failed"
    PERMISSION_DENIED = "permission_denied"

    # Persistence
    STORE_WRITE_FAILED = "store_write_failed"
    MALFORMED_RECORDS_SKIPPED = "malformed_records_skipped"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AuditEvent(BaseModel):
    """
    A single audit event.

    This is the core unit of our audit trail.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=_utcnow,
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: AuditEventType = Field(
        ...,
        description="Type of event"
    )
    severity: AuditSeverity = Field(
        default=AuditSeverity.INFO,
        description="Event severity"
    )

    # Context - what entity is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'book', 'user', 'store')"
    )
    entity_id: Optional[str] = Field(
        default=None,
        description="Identity key of the entity (ISBN, username, file name)"
    )

    # Correlation - for tracking related events
    correlation_id: Optional[UUID] = Field(
        default=None,
        description="ID to correlate related events (e.g., one borrow and its writes)"
    )

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )

    # Error information (if applicable)
    error_code: Optional[str] = None
    error_message: Optional[str] = None

    is_user_action: bool = Field(
        default=False,
        description="Was this triggered by a user action?"
    )

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_code": self.error_code,
            "error_message": self.error_message,
            "is_user_action": self.is_user_action,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.book_added(isbn, title)
        event = AuditEventBuilder.book_returned(isbn, username, late_days, fine)
    """

    @staticmethod
    def book_added(
        isbn: str,
        title: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.BOOK_ADDED,
            entity_type="book",
            entity_id=isbn,
            correlation_id=correlation_id,
            description=f"Book added: {title}",
            details={"title": title},
            is_user_action=True,
        )

    @staticmethod
    def book_deleted(
        isbn: str,
        was_issued: bool,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        # Deleting an issued book leaves its open loan orphaned
        return AuditEvent(
            event_type=AuditEventType.BOOK_DELETED,
            severity=AuditSeverity.WARNING if was_issued else AuditSeverity.INFO,
            entity_type="book",
            entity_id=isbn,
            correlation_id=correlation_id,
            description="Book deleted while issued" if was_issued else "Book deleted",
            details={"was_issued": was_issued},
            is_user_action=True,
        )

    @staticmethod
    def book_borrowed(
        isbn: str,
        username: str,
        due_date: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.BOOK_BORROWED,
            entity_type="book",
            entity_id=isbn,
            correlation_id=correlation_id,
            description=f"Book borrowed by {username}, due {due_date}",
            details={
                "username": username,
                "due_date": due_date,
            },
            is_user_action=True,
        )

    @staticmethod
    def book_returned(
        isbn: str,
        username: str,
        late_days: int,
        fine: int,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.BOOK_RETURNED,
            entity_type="book",
            entity_id=isbn,
            correlation_id=correlation_id,
            description=(
                f"Book returned by {username}, {late_days} days late"
                if late_days
                else f"Book returned by {username} on time"
            ),
            details={
                "username": username,
                "late_days": late_days,
                "fine": fine,
            },
            is_user_action=True,
        )

    @staticmethod
    def user_registered(
        username: str,
        role: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.USER_REGISTERED,
            entity_type="user",
            entity_id=username,
            correlation_id=correlation_id,
            description=f"User registered with role {role}",
            details={"role": role},
            is_user_action=True,
        )

    @staticmethod
    def default_admin_created(username: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.DEFAULT_ADMIN_CREATED,
            severity=AuditSeverity.WARNING,
            entity_type="user",
            entity_id=username,
            description="Default admin created with well-known credentials; change them before real use",
        )

    @staticmethod
    def authentication_succeeded(username: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.AUTHENTICATION_SUCCEEDED,
            entity_type="user",
            entity_id=username,
            description="User authenticated",
            is_user_action=True,
        )

    @staticmethod
    def authentication_failed(username: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.AUTHENTICATION_FAILED,
            severity=AuditSeverity.WARNING,
            entity_type="user",
            entity_id=username,
            description="Authentication failed",
            error_code="invalid_credentials",
            is_user_action=True,
        )

    @staticmethod
    def permission_denied(
        username: str,
        permission: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.PERMISSION_DENIED,
            severity=AuditSeverity.WARNING,
            entity_type="user",
            entity_id=username,
            description=f"Permission denied: {permission}",
            details={"permission": permission},
            error_code="permission_denied",
            is_user_action=True,
        )

    @staticmethod
    def store_write_failed(
        store: str,
        error_message: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STORE_WRITE_FAILED,
            severity=AuditSeverity.ERROR,
            entity_type="store",
            entity_id=store,
            correlation_id=correlation_id,
            description=f"Store write failed: {store}; memory and disk now differ",
            error_code="storage_write_failure",
            error_message=error_message,
        )

    @staticmethod
    def malformed_records_skipped(
        store: str,
        line_numbers: list[int],
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.MALFORMED_RECORDS_SKIPPED,
            severity=AuditSeverity.WARNING,
            entity_type="store",
            entity_id=store,
            description=f"Skipped {len(line_numbers)} malformed lines while loading {store}",
            details={"line_numbers": line_numbers},
        )

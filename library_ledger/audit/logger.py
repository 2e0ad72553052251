"""
Audit Logger

DESIGN DECISION: Every state change in the ledger is logged.
This provides:
1. Traceability of loans and returns
2. Debugging capability when the two store files disagree
3. Visibility of failed logins and the weak default admin

The audit logger:
- Never raises into the caller (logging must not break a borrow)
- Supports correlation IDs to tie an operation to its store writes
- Can forward events to an optional sink (e.g. a list in tests)
"""

import logging
from typing import Callable, Optional
from uuid import UUID, uuid4

import structlog

from library_ledger.models.audit import AuditEvent, AuditEventBuilder


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


def configure_logging(log_level: str = "INFO") -> None:
    """Route structlog output through stdlib logging at ``log_level``."""
    logging.basicConfig(format="%(message)s", level=getattr(logging, log_level.upper(), logging.INFO))


AuditSink = Callable[[AuditEvent], None]


class AuditLogger:
    """
    Central audit logging service.

    Logs events both to:
    1. Structured local log (for debugging)
    2. An optional sink (for inspection by the host or tests)
    """

    def __init__(
        self,
        sink: Optional[AuditSink] = None,
    ):
        """
        Initialize audit logger.

        Args:
            sink: Callable receiving every event.
                  If None, only logs locally.
        """
        self._sink = sink
        self._logger = structlog.get_logger("library_ledger.audit")

    def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Always logs locally. Forwards to the sink if available.

        Returns True if the sink accepted the event (or no sink configured).
        """
        log_dict = event.to_log_dict()

        if event.severity.value in ("error", "critical"):
            self._logger.error("audit_event", **log_dict)
        elif event.severity.value == "warning":
            self._logger.warning("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

        if self._sink:
            try:
                self._sink(event)
            except Exception as e:
                # Log failure but don't raise
                self._logger.error(
                    "audit_sink_failed",
                    error=str(e),
                    event_id=str(event.event_id),
                )
                return False

        return True

    def log_book_added(self, isbn: str, title: str, correlation_id: Optional[UUID] = None) -> None:
        self.log(AuditEventBuilder.book_added(isbn=isbn, title=title, correlation_id=correlation_id))

    def log_book_deleted(self, isbn: str, was_issued: bool, correlation_id: Optional[UUID] = None) -> None:
        self.log(AuditEventBuilder.book_deleted(isbn=isbn, was_issued=was_issued, correlation_id=correlation_id))

    def log_book_borrowed(
        self,
        isbn: str,
        username: str,
        due_date: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.book_borrowed(
            isbn=isbn,
            username=username,
            due_date=due_date,
            correlation_id=correlation_id,
        ))

    def log_book_returned(
        self,
        isbn: str,
        username: str,
        late_days: int,
        fine: int,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.book_returned(
            isbn=isbn,
            username=username,
            late_days=late_days,
            fine=fine,
            correlation_id=correlation_id,
        ))

    def log_user_registered(self, username: str, role: str) -> None:
        self.log(AuditEventBuilder.user_registered(username=username, role=role))

    def log_default_admin_created(self, username: str) -> None:
        self.log(AuditEventBuilder.default_admin_created(username=username))

    def log_authentication(self, username: str, succeeded: bool) -> None:
        if succeeded:
            self.log(AuditEventBuilder.authentication_succeeded(username=username))
        else:
            self.log(AuditEventBuilder.authentication_failed(username=username))

    def log_permission_denied(self, username: str, permission: str) -> None:
        self.log(AuditEventBuilder.permission_denied(username=username, permission=permission))

    def log_store_write_failed(
        self,
        store: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log a failed store write; memory now holds changes the disk does not."""
        self.log(AuditEventBuilder.store_write_failed(
            store=store,
            error_message=error_message,
            correlation_id=correlation_id,
        ))

    def log_malformed_records(self, store: str, line_numbers: list[int]) -> None:
        self.log(AuditEventBuilder.malformed_records_skipped(store=store, line_numbers=line_numbers))


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use this at the start of a ledger operation and pass it to
    every event that operation emits.
    """
    return uuid4()

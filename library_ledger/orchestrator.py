"""
Main Orchestrator for Library Ledger

This module ties together all the components:
settings -> stores -> audit logger -> inventory ledger + account directory

DESIGN DECISION: Components are built once per process here and handed
to the host (CLI, GUI, tests) by reference. Nothing in the package keeps
module-level state of its own; the bootstrap admin is created here
rather than as a side effect of importing anything.
"""

from datetime import date
from typing import Optional

import structlog

from library_ledger.audit import AuditLogger, configure_logging
from library_ledger.audit.logger import AuditSink
from library_ledger.config import (
    BootstrapSettings,
    LendingSettings,
    StorageSettings,
    check_delimiter_compatible,
    get_settings,
)
from library_ledger.ledger import AccountDirectory, InventoryLedger
from library_ledger.ledger.inventory import Clock
from library_ledger.models.book import Book
from library_ledger.models.transaction import Transaction
from library_ledger.models.user import User
from library_ledger.services.storage import (
    BookCodec,
    FlatFileStore,
    TransactionCodec,
    UserCodec,
)
from library_ledger.validation import InputValidator


logger = structlog.get_logger(__name__)


def create_stores(
    storage: StorageSettings,
    lending: LendingSettings,
) -> tuple[FlatFileStore[Book], FlatFileStore[User], FlatFileStore[Transaction]]:
    """
    Build the three flat-file stores from settings.

    Returns:
        (book_store, user_store, transaction_store)

    Raises:
        ValueError: If formatted dates would contain the delimiter
    """
    check_delimiter_compatible(storage, lending)

    common = dict(
        encoding=storage.encoding,
        write_attempts=storage.write_attempts,
        write_retry_wait_seconds=storage.write_retry_wait_seconds,
    )
    book_store = FlatFileStore(
        storage.books_path,
        BookCodec(storage.delimiter),
        name="books",
        **common,
    )
    user_store = FlatFileStore(
        storage.users_path,
        UserCodec(storage.delimiter),
        name="users",
        **common,
    )
    transaction_store = FlatFileStore(
        storage.transactions_path,
        TransactionCodec(storage.delimiter, lending.date_format),
        name="transactions",
        **common,
    )
    return book_store, user_store, transaction_store


def create_app_components(
    storage: Optional[StorageSettings] = None,
    lending: Optional[LendingSettings] = None,
    bootstrap: Optional[BootstrapSettings] = None,
    audit_sink: Optional[AuditSink] = None,
    clock: Clock = date.today,
    run_bootstrap: bool = True,
) -> tuple[InventoryLedger, AccountDirectory, AuditLogger]:
    """
    Factory function to create all application components.

    Any settings group left as None is read from the environment.

    Args:
        storage: Store locations and write policy
        lending: Loan period, fine rate and date format
        bootstrap: Default admin credentials
        audit_sink: Optional receiver for every audit event
        clock: Source of "today" for the ledger
        run_bootstrap: Create the default admin when no users exist

    Returns:
        (inventory_ledger, account_directory, audit_logger)
    """
    settings = get_settings()
    configure_logging(settings.app.log_level)

    storage = storage or settings.storage
    lending = lending or settings.lending
    bootstrap = bootstrap or settings.bootstrap

    book_store, user_store, transaction_store = create_stores(storage, lending)
    validator = InputValidator(storage.delimiter)
    audit_logger = AuditLogger(audit_sink)

    inventory = InventoryLedger(
        book_store=book_store,
        transaction_store=transaction_store,
        lending=lending,
        validator=validator,
        audit_logger=audit_logger,
        clock=clock,
    )
    accounts = AccountDirectory(
        user_store=user_store,
        bootstrap_settings=bootstrap,
        validator=validator,
        audit_logger=audit_logger,
    )

    if run_bootstrap:
        accounts.bootstrap()

    logger.info("app_components_created", data_dir=str(storage.data_dir))
    return inventory, accounts, audit_logger

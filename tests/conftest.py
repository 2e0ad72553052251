"""Shared fixtures for the Library Ledger tests."""

from datetime import date, timedelta
from pathlib import Path

import pytest

from library_ledger.audit import AuditLogger
from library_ledger.config import BootstrapSettings, LendingSettings, StorageSettings
from library_ledger.ledger import AccountDirectory, InventoryLedger
from library_ledger.models.audit import AuditEvent
from library_ledger.services.storage import (
    BookCodec,
    FlatFileStore,
    InMemoryStore,
    StorageWriteError,
    TransactionCodec,
    UserCodec,
)


class FakeClock:
    """Callable returning a settable 'today'."""

    def __init__(self, today: date):
        self.today = today

    def __call__(self) -> date:
        return self.today

    def advance(self, days: int) -> None:
        self.today += timedelta(days=days)


class FailingStore(InMemoryStore):
    """In-memory store whose saves can be switched to fail."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.fail_saves = False

    def save_all(self, records) -> None:
        if self.fail_saves:
            raise StorageWriteError(f"Failed to save {self.name}: disk full", key=self.name)
        super().save_all(records)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(date(2024, 3, 1))


@pytest.fixture
def audit_events() -> list[AuditEvent]:
    return []


@pytest.fixture
def audit_logger(audit_events) -> AuditLogger:
    return AuditLogger(sink=audit_events.append)


@pytest.fixture
def storage_settings(tmp_path: Path) -> StorageSettings:
    return StorageSettings(data_dir=tmp_path / "data", write_attempts=1, write_retry_wait_seconds=0)


@pytest.fixture
def lending_settings() -> LendingSettings:
    return LendingSettings()


@pytest.fixture
def book_store(storage_settings) -> FlatFileStore:
    return FlatFileStore(storage_settings.books_path, BookCodec(), name="books", write_retry_wait_seconds=0)


@pytest.fixture
def transaction_store(storage_settings) -> FlatFileStore:
    return FlatFileStore(
        storage_settings.transactions_path,
        TransactionCodec(),
        name="transactions",
        write_retry_wait_seconds=0,
    )


@pytest.fixture
def user_store(storage_settings) -> FlatFileStore:
    return FlatFileStore(storage_settings.users_path, UserCodec(), name="users", write_retry_wait_seconds=0)


@pytest.fixture
def ledger(book_store, transaction_store, clock, audit_logger) -> InventoryLedger:
    return InventoryLedger(
        book_store=book_store,
        transaction_store=transaction_store,
        audit_logger=audit_logger,
        clock=clock,
    )


@pytest.fixture
def directory(user_store, audit_logger) -> AccountDirectory:
    return AccountDirectory(
        user_store=user_store,
        bootstrap_settings=BootstrapSettings(admin_username="admin", admin_password="admin123"),
        audit_logger=audit_logger,
    )

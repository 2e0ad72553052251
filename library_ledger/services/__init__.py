"""Services package."""

from library_ledger.services import credential
from library_ledger.services.storage import (
    BookCodec,
    FlatFileStore,
    InMemoryStore,
    MalformedLine,
    MalformedRecordError,
    RecordCodec,
    RecordStore,
    StorageError,
    StorageReadError,
    StorageWriteError,
    TransactionCodec,
    UserCodec,
)

__all__ = [
    # Credentials
    "credential",
    # Storage services
    "BookCodec",
    "FlatFileStore",
    "InMemoryStore",
    "MalformedLine",
    "MalformedRecordError",
    "RecordCodec",
    "RecordStore",
    "StorageError",
    "StorageReadError",
    "StorageWriteError",
    "TransactionCodec",
    "UserCodec",
]

"""
Storage Services Package

Provides abstract interfaces and concrete implementations for record storage.
Currently implements delimited flat files as the backend, but designed to be swappable.
"""

from library_ledger.services.storage.interface import (
    MalformedLine,
    MalformedRecordError,
    RecordCodec,
    RecordStore,
    StorageError,
    StorageReadError,
    StorageWriteError,
)
from library_ledger.services.storage.codecs import (
    BookCodec,
    DelimitedRecordCodec,
    TransactionCodec,
    UserCodec,
)
from library_ledger.services.storage.flat_file import (
    FlatFileStore,
    InMemoryStore,
)

__all__ = [
    # Interfaces
    "RecordCodec",
    "RecordStore",
    "MalformedLine",
    # Exceptions
    "MalformedRecordError",
    "StorageError",
    "StorageReadError",
    "StorageWriteError",
    # Codecs
    "BookCodec",
    "DelimitedRecordCodec",
    "TransactionCodec",
    "UserCodec",
    # Implementations
    "FlatFileStore",
    "InMemoryStore",
]

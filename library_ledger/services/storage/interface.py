"""
Abstract Storage Interface

DESIGN DECISION: We define abstract interfaces for the two halves of
persistence:
1. RecordCodec - maps one typed record to one line of text and back
2. RecordStore - a durable collection of one record type

This allows us to:
1. Share one flat-file store between books, users and transactions
2. Use in-memory stores for testing
3. Swap the line format without touching business logic

The interface is intentionally simple - we're not building a database.
A store is loaded fully into memory and rewritten fully on every save.
"""

from abc import ABC, abstractmethod
from typing import Generic, Iterable, TypeVar

from pydantic import BaseModel, ConfigDict

from library_ledger.errors import LedgerError


T = TypeVar("T")


class RecordCodec(ABC, Generic[T]):
    """
    Bidirectional mapping between a record and a single line of text.

    Round-trip law: ``decode(encode(r)) == r`` for every valid record.
    """

    @abstractmethod
    def encode(self, record: T) -> str:
        """
        Render a record as one line (no trailing newline).

        Total and deterministic for every valid record.
        """
        pass

    @abstractmethod
    def decode(self, line: str) -> T:
        """
        Parse one line (without its newline).

        Raises:
            MalformedRecordError: If the line is not a valid record
        """
        pass


class RecordStore(ABC, Generic[T]):
    """
    Abstract interface for a durable collection of one record type.

    Any storage implementation must implement these methods.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Short name used in logs and audit events."""
        pass

    @abstractmethod
    def load(self) -> list[T]:
        """
        Read every record from storage.

        A missing backing store yields an empty list. Malformed entries
        are skipped and reported, never fatal.

        Returns:
            Records in storage order
        """
        pass

    @abstractmethod
    def save_all(self, records: Iterable[T]) -> None:
        """
        Replace the whole stored collection with ``records``.

        Raises:
            StorageWriteError: If the write fails
        """
        pass

    @property
    @abstractmethod
    def skipped(self) -> list["MalformedLine"]:
        """Entries dropped by the most recent load."""
        pass


class MalformedLine(BaseModel):
    """A line that could not be decoded during a load."""
    model_config = ConfigDict(frozen=True)

    line_number: int
    raw: str
    reason: str


class StorageError(LedgerError):
    """Base exception for storage operations."""

    code = "storage_error"


class StorageWriteError(StorageError):
    """A full rewrite of a store failed."""

    code = "storage_write_failure"


class StorageReadError(StorageError):
    """A store exists but could not be read at all."""

    code = "storage_read_failure"


class MalformedRecordError(StorageError):
    """
    A single line could not be decoded.

    Always handled inside the store's load; never reaches a caller.
    """

    code = "malformed_record"

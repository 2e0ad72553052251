"""
Flat-File Storage Implementation

DESIGN DECISION: Each record type lives in its own line-oriented text file:
1. Humans can read and fix the files with any editor
2. No database setup required
3. One bad line is dropped, the rest of the file still loads

TRADEOFFS:
- Every save rewrites the whole file
- No transactions across files (borrow/return write two files in turn)
- No locking; concurrent writers are last-writer-wins

A save writes a sibling temp file and renames it over the target, so
a failed write leaves the previous content in place.
"""

import os
from pathlib import Path
from typing import Iterable, Optional

import structlog
from tenacity import (
    Retrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_fixed,
)

from library_ledger.services.storage.interface import (
    MalformedLine,
    MalformedRecordError,
    RecordCodec,
    RecordStore,
    StorageReadError,
    StorageWriteError,
    T,
)


logger = structlog.get_logger(__name__)


class FlatFileStore(RecordStore[T]):
    """
    A durable collection of one record type backed by a single file.

    One record per line, encoded by the given codec.
    """

    def __init__(
        self,
        path: Path,
        codec: RecordCodec[T],
        encoding: str = "utf-8",
        write_attempts: int = 3,
        write_retry_wait_seconds: float = 0.2,
        name: Optional[str] = None,
    ):
        """
        Initialize a flat-file store.

        Args:
            path: Backing file. Its directory is created on first save.
            codec: Line codec for the record type
            encoding: Text encoding of the file
            write_attempts: Attempts per save before giving up
            write_retry_wait_seconds: Pause between attempts
            name: Name for logs; defaults to the file name
        """
        self._path = Path(path)
        self._codec = codec
        self._encoding = encoding
        self._write_attempts = write_attempts
        self._write_retry_wait_seconds = write_retry_wait_seconds
        self._name = name or self._path.name
        self._skipped: list[MalformedLine] = []

    @property
    def name(self) -> str:
        return self._name

    @property
    def path(self) -> Path:
        return self._path

    @property
    def skipped(self) -> list[MalformedLine]:
        return list(self._skipped)

    def load(self) -> list[T]:
        """Read and decode every line of the backing file."""
        self._skipped = []

        if not self._path.exists():
            logger.info("store_missing", store=self._name, path=str(self._path))
            return []

        records: list[T] = []
        try:
            # Decode line by line so a bad byte sequence only costs its own line
            with open(self._path, "rb") as f:
                for line_number, raw in enumerate(f, start=1):
                    record = self._decode_line(line_number, raw)
                    if record is not None:
                        records.append(record)
        except OSError as e:
            logger.error("store_read_failed", store=self._name, error=str(e))
            raise StorageReadError(f"Failed to read {self._name}: {e}", key=self._name) from e

        logger.info(
            "store_loaded",
            store=self._name,
            records=len(records),
            skipped=len(self._skipped),
        )
        return records

    def _decode_line(self, line_number: int, raw: bytes) -> Optional[T]:
        raw = raw.rstrip(b"\r\n")
        try:
            line = raw.decode(self._encoding)
        except UnicodeDecodeError as e:
            self._skip(line_number, raw.decode(self._encoding, errors="replace"), f"Undecodable bytes: {e.reason}")
            return None

        # Blank lines carry no record
        if not line.strip():
            return None

        try:
            return self._codec.decode(line)
        except MalformedRecordError as e:
            self._skip(line_number, line, e.message)
            return None

    def _skip(self, line_number: int, raw: str, reason: str) -> None:
        self._skipped.append(MalformedLine(line_number=line_number, raw=raw, reason=reason))
        logger.warning(
            "malformed_record_skipped",
            store=self._name,
            line_number=line_number,
            reason=reason,
        )

    def save_all(self, records: Iterable[T]) -> None:
        """Rewrite the backing file from ``records``."""
        content = "".join(self._codec.encode(record) + "\n" for record in records)

        try:
            for attempt in Retrying(
                stop=stop_after_attempt(self._write_attempts),
                wait=wait_fixed(self._write_retry_wait_seconds),
                retry=retry_if_exception_type(OSError),
                reraise=True,
            ):
                with attempt:
                    self._write(content)
        except OSError as e:
            logger.error(
                "store_write_failed",
                store=self._name,
                path=str(self._path),
                error=str(e),
            )
            raise StorageWriteError(f"Failed to save {self._name}: {e}", key=self._name) from e

        logger.debug("store_saved", store=self._name, bytes=len(content))

    def _write(self, content: str) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self._path.with_name(self._path.name + ".tmp")
        try:
            # Text mode turns "\n" into the platform newline
            with open(tmp_path, "w", encoding=self._encoding) as f:
                f.write(content)
            os.replace(tmp_path, self._path)
        except OSError:
            tmp_path.unlink(missing_ok=True)
            raise


class InMemoryStore(RecordStore[T]):
    """
    Store that keeps encoded lines in a list instead of a file.

    Goes through the codec on every load and save, so it behaves like
    the flat-file store without touching the disk. Useful for tests.
    """

    def __init__(self, codec: RecordCodec[T], lines: Optional[list[str]] = None, name: str = "memory"):
        self._codec = codec
        self.lines: list[str] = list(lines or [])
        self._name = name
        self._skipped: list[MalformedLine] = []

    @property
    def name(self) -> str:
        return self._name

    @property
    def skipped(self) -> list[MalformedLine]:
        return list(self._skipped)

    def load(self) -> list[T]:
        self._skipped = []
        records: list[T] = []
        for line_number, line in enumerate(self.lines, start=1):
            if not line.strip():
                continue
            try:
                records.append(self._codec.decode(line))
            except MalformedRecordError as e:
                self._skipped.append(MalformedLine(line_number=line_number, raw=line, reason=e.message))
        return records

    def save_all(self, records: Iterable[T]) -> None:
        self.lines = [self._codec.encode(record) for record in records]

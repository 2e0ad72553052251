"""
Delimited Line Codecs

One record per line, fields separated by a single reserved character.

Column layouts:
    books:        title, author, isbn, status
    users:        username, password_hash_hex, salt_base64, role
    transactions: username, isbn, issue_date, due_date, return_date, fine

DESIGN DECISION: No escaping. The delimiter and line breaks are
rejected at input validation, so encoded fields never contain them.
Anything that fails to parse is reported as malformed instead of being
guessed at.
"""

import base64
import binascii
from datetime import date, datetime
from typing import Optional

from pydantic import ValidationError

from library_ledger.models.book import Book, BookStatus
from library_ledger.models.transaction import Transaction
from library_ledger.models.user import Credential, Role, User
from library_ledger.services.storage.interface import (
    MalformedRecordError,
    RecordCodec,
    T,
)


# Column mappings
BOOK_COLUMNS = [
    "title",
    "author",
    "isbn",
    "status",
]

USER_COLUMNS = [
    "username",
    "password_hash_hex",
    "salt_base64",
    "role",
]

TRANSACTION_COLUMNS = [
    "username",
    "isbn",
    "issue_date",
    "due_date",
    "return_date",
    "fine",
]


class DelimitedRecordCodec(RecordCodec[T]):
    """
    Shared split/join logic for fixed-column delimited lines.

    Subclasses declare ``columns`` and implement the field mapping.
    """

    columns: list[str] = []

    def __init__(self, delimiter: str = ","):
        self._delimiter = delimiter

    @property
    def delimiter(self) -> str:
        return self._delimiter

    def encode(self, record: T) -> str:
        return self._delimiter.join(self._to_fields(record))

    def decode(self, line: str) -> T:
        fields = line.split(self._delimiter)
        if len(fields) != len(self.columns):
            raise MalformedRecordError(
                f"Expected {len(self.columns)} fields, found {len(fields)}"
            )
        try:
            return self._from_fields(fields)
        except MalformedRecordError:
            raise
        except ValidationError as e:
            raise MalformedRecordError(
                f"Invalid field values: {e.error_count()} errors"
            ) from e
        except (ValueError, binascii.Error) as e:
            raise MalformedRecordError(f"Unparsable field: {e}") from e

    def _to_fields(self, record: T) -> list[str]:
        raise NotImplementedError

    def _from_fields(self, fields: list[str]) -> T:
        raise NotImplementedError


class BookCodec(DelimitedRecordCodec[Book]):
    """Books store codec."""

    columns = BOOK_COLUMNS

    def _to_fields(self, record: Book) -> list[str]:
        return [
            record.title,
            record.author,
            record.isbn,
            record.status.value,
        ]

    def _from_fields(self, fields: list[str]) -> Book:
        title, author, isbn, status = fields
        return Book(
            title=title,
            author=author,
            isbn=isbn,
            status=BookStatus(status.strip()),
        )


class UserCodec(DelimitedRecordCodec[User]):
    """
    Users store codec.

    The salt is rendered as standard base64; the hash is already hex.
    """

    columns = USER_COLUMNS

    def _to_fields(self, record: User) -> list[str]:
        return [
            record.username,
            record.credential.password_hash,
            base64.b64encode(record.credential.salt).decode("ascii"),
            record.role.value,
        ]

    def _from_fields(self, fields: list[str]) -> User:
        username, password_hash, salt, role = fields
        return User(
            username=username,
            credential=Credential(
                password_hash=password_hash.strip(),
                salt=base64.b64decode(salt.strip(), validate=True),
            ),
            role=Role(role),
        )


class TransactionCodec(DelimitedRecordCodec[Transaction]):
    """
    Transactions store codec.

    Dates use a fixed day-month-year pattern. An open loan has an
    empty return_date column, which decodes back to None.
    """

    columns = TRANSACTION_COLUMNS

    def __init__(self, delimiter: str = ",", date_format: str = "%d-%m-%Y"):
        super().__init__(delimiter)
        self._date_format = date_format

    def format_date(self, value: date) -> str:
        return value.strftime(self._date_format)

    def parse_date(self, value: str) -> date:
        return datetime.strptime(value.strip(), self._date_format).date()

    def _to_fields(self, record: Transaction) -> list[str]:
        return [
            record.username,
            record.isbn,
            self.format_date(record.issue_date),
            self.format_date(record.due_date),
            self.format_date(record.return_date) if record.return_date else "",
            str(record.fine),
        ]

    def _from_fields(self, fields: list[str]) -> Transaction:
        username, isbn, issue_date, due_date, return_date, fine = fields
        return Transaction(
            username=username,
            isbn=isbn,
            issue_date=self.parse_date(issue_date),
            due_date=self.parse_date(due_date),
            return_date=self._parse_optional_date(return_date),
            fine=self._parse_fine(fine),
        )

    def _parse_optional_date(self, value: str) -> Optional[date]:
        if not value.strip():
            return None
        return self.parse_date(value)

    @staticmethod
    def _parse_fine(value: str) -> int:
        value = value.strip()
        # int() would also take "+5", "1_000" and non-ASCII digits
        if not (value.isascii() and value.isdigit()):
            raise MalformedRecordError(f"Fine is not a non-negative integer: {value!r}")
        return int(value)

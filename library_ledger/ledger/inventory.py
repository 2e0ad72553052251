"""
Inventory Ledger

Owns the book inventory and the loan history, and is the only place
where a book changes state:

    add      -> Available
    borrow   Available -> Issued    (opens a loan)
    return   Issued -> Available    (closes the loan, computes the fine)
    delete   removes the book, whatever its state

DESIGN DECISION: Every mutation is written to the store(s) before the
operation returns. Borrow and return write the books file first and
the transactions file second. There is no cross-file atomicity: a
failure between the two writes leaves the files disagreeing, and a
failed write does not roll back memory. Both cases raise
StorageWriteError and are audited.

Callers only ever receive copies; editing a returned Book or
Transaction does not change the ledger.
"""

from datetime import date, timedelta
from typing import Callable, Optional
from uuid import UUID

import structlog

from library_ledger.audit import AuditLogger, create_correlation_id
from library_ledger.config import LendingSettings
from library_ledger.errors import (
    DuplicateKeyError,
    NoOpenLoanError,
    NotAvailableError,
    NotFoundError,
    NotIssuedError,
)
from library_ledger.models.book import Book, BookStatus
from library_ledger.models.results import BorrowReceipt, LibraryReport, ReturnReceipt
from library_ledger.models.transaction import Transaction
from library_ledger.queries import ReportBuilder
from library_ledger.services.storage import RecordStore, StorageWriteError
from library_ledger.validation import InputValidator


logger = structlog.get_logger(__name__)

Clock = Callable[[], date]


class InventoryLedger:
    """
    Book inventory plus borrow/return engine.

    State is loaded from the two stores once, at construction.
    """

    def __init__(
        self,
        book_store: RecordStore[Book],
        transaction_store: RecordStore[Transaction],
        lending: Optional[LendingSettings] = None,
        validator: Optional[InputValidator] = None,
        audit_logger: Optional[AuditLogger] = None,
        clock: Clock = date.today,
        report_builder: Optional[ReportBuilder] = None,
    ):
        """
        Initialize the ledger and load both stores.

        Args:
            book_store: Store for Book records
            transaction_store: Store for Transaction records
            lending: Loan period and fine rate; defaults apply if None
            validator: Input validator; should share the stores' delimiter
            audit_logger: Audit trail. If None, a local-only logger is used.
            clock: Returns "today"; injectable for tests
            report_builder: Aggregator used by report()
        """
        self._book_store = book_store
        self._transaction_store = transaction_store
        self._lending = lending or LendingSettings()
        self._validator = validator or InputValidator()
        self._audit_logger = audit_logger or AuditLogger()
        self._clock = clock
        self._report_builder = report_builder or ReportBuilder()

        self._books: dict[str, Book] = {}
        self._transactions: list[Transaction] = []
        self.reload()

    # =========================================================================
    # LOADING & PERSISTENCE
    # =========================================================================

    def reload(self) -> None:
        """Replace in-memory state with the current store contents."""
        books: dict[str, Book] = {}
        for book in self._book_store.load():
            if book.isbn in books:
                # Keep the first record for an ISBN; a later one cannot be addressed
                logger.warning("duplicate_isbn_ignored", isbn=book.isbn, store=self._book_store.name)
                continue
            books[book.isbn] = book
        self._books = books
        self._transactions = self._transaction_store.load()

        for store in (self._book_store, self._transaction_store):
            skipped = store.skipped
            if skipped:
                self._audit_logger.log_malformed_records(
                    store=store.name,
                    line_numbers=[line.line_number for line in skipped],
                )

    def _persist(self, store: RecordStore, records: list, correlation_id: Optional[UUID]) -> None:
        try:
            store.save_all(records)
        except StorageWriteError as e:
            self._audit_logger.log_store_write_failed(
                store=store.name,
                error_message=e.message,
                correlation_id=correlation_id,
            )
            raise

    def _save_books(self, correlation_id: Optional[UUID] = None) -> None:
        self._persist(self._book_store, list(self._books.values()), correlation_id)

    def _save_transactions(self, correlation_id: Optional[UUID] = None) -> None:
        self._persist(self._transaction_store, self._transactions, correlation_id)

    # =========================================================================
    # INVENTORY
    # =========================================================================

    def add_book(self, title: str, author: str, isbn: str) -> Book:
        """
        Add a new book in the Available state.

        Raises:
            InvalidInputError: If a field is blank or not storable
            DuplicateKeyError: If the ISBN is already in the inventory
            StorageWriteError: If the books store could not be written
        """
        self._validator.validate_book(title, author, isbn)
        book = Book(title=title, author=author, isbn=isbn)

        if book.isbn in self._books:
            raise DuplicateKeyError(f"Book with ISBN {book.isbn} already exists", key=book.isbn)

        correlation_id = create_correlation_id()
        self._books[book.isbn] = book
        self._save_books(correlation_id)

        self._audit_logger.log_book_added(isbn=book.isbn, title=book.title, correlation_id=correlation_id)
        return book.model_copy()

    def delete_book(self, isbn: str) -> Book:
        """
        Remove a book from the inventory.

        An open loan on the book is left as it is.

        Returns:
            The removed book

        Raises:
            InvalidInputError: If the ISBN is blank or padded
            NotFoundError: If the ISBN is unknown
            StorageWriteError: If the books store could not be written
        """
        self._validator.validate_isbn(isbn)
        book = self._books.get(isbn)
        if book is None:
            raise NotFoundError(f"Book with ISBN {isbn} not found", key=isbn)

        correlation_id = create_correlation_id()
        del self._books[isbn]
        self._save_books(correlation_id)

        self._audit_logger.log_book_deleted(isbn=isbn, was_issued=book.is_issued, correlation_id=correlation_id)
        return book.model_copy()

    def list_books(self) -> list[Book]:
        """All books in insertion order."""
        return [b.model_copy() for b in self._books.values()]

    def find_book(self, isbn: str) -> Optional[Book]:
        book = self._books.get(isbn)
        return book.model_copy() if book else None

    def search_books(self, keyword: str) -> list[Book]:
        """
        Case-insensitive substring search on title and author,
        exact match on ISBN. No match is an empty list.
        """
        return [b.model_copy() for b in self._books.values() if b.matches(keyword)]

    # =========================================================================
    # LOANS
    # =========================================================================

    def borrow_book(self, isbn: str, username: str) -> BorrowReceipt:
        """
        Issue an available book to a user.

        The due date is today plus the loan period.

        Raises:
            InvalidInputError: If the ISBN or username is not storable
            NotFoundError: If the ISBN is unknown
            NotAvailableError: If the book is already issued
            StorageWriteError: If either store could not be written
        """
        self._validator.validate_loan(isbn, username)
        book = self._require_book(isbn)
        if not book.is_available:
            raise NotAvailableError(f"Book {isbn} is not available", key=isbn)

        issue_date = self._clock()
        due_date = issue_date + timedelta(days=self._lending.loan_period_days)

        correlation_id = create_correlation_id()
        book.status = BookStatus.ISSUED
        self._transactions.append(Transaction(
            username=username,
            isbn=isbn,
            issue_date=issue_date,
            due_date=due_date,
        ))
        self._save_books(correlation_id)
        self._save_transactions(correlation_id)

        self._audit_logger.log_book_borrowed(
            isbn=isbn,
            username=username,
            due_date=due_date.isoformat(),
            correlation_id=correlation_id,
        )
        return BorrowReceipt(
            isbn=isbn,
            username=username,
            title=book.title,
            issue_date=issue_date,
            due_date=due_date,
        )

    def return_book(self, isbn: str, username: str) -> ReturnReceipt:
        """
        Close the user's open loan on a book and compute the fine.

        late_days = max(0, today - due_date); fine = late_days * fine_per_day

        Raises:
            InvalidInputError: If the ISBN or username is blank or padded
            NotFoundError: If the ISBN is unknown
            NotIssuedError: If the book is not issued
            NoOpenLoanError: If this user holds no open loan on the book
            StorageWriteError: If either store could not be written
        """
        self._validator.validate_loan(isbn, username)
        book = self._require_book(isbn)
        if not book.is_issued:
            raise NotIssuedError(f"Book {isbn} is not issued", key=isbn)

        loan = self._find_open_loan(isbn, username)
        if loan is None:
            raise NoOpenLoanError(f"{username} holds no open loan on book {isbn}", key=isbn)

        today = self._clock()
        late_days = max(0, (today - loan.due_date).days)
        fine = late_days * self._lending.fine_per_day

        correlation_id = create_correlation_id()
        loan.return_date = today
        loan.fine = fine
        book.status = BookStatus.AVAILABLE
        self._save_books(correlation_id)
        self._save_transactions(correlation_id)

        self._audit_logger.log_book_returned(
            isbn=isbn,
            username=username,
            late_days=late_days,
            fine=fine,
            correlation_id=correlation_id,
        )
        return ReturnReceipt(
            isbn=isbn,
            username=username,
            title=book.title,
            return_date=today,
            late_days=late_days,
            fine=fine,
        )

    def history(self, username: str) -> list[Transaction]:
        """All transactions of a user, oldest first."""
        return [t.model_copy() for t in self._transactions if t.username == username]

    def describe_history(self, username: str) -> list[str]:
        """A user's transactions as display lines, dates in the store's format."""
        return [t.describe(self._lending.date_format) for t in self.history(username)]

    def open_loans(self, username: Optional[str] = None) -> list[Transaction]:
        """Loans not yet returned, optionally for one user only."""
        return [
            t.model_copy()
            for t in self._transactions
            if t.is_open and (username is None or t.username == username)
        ]

    def report(self) -> LibraryReport:
        return self._report_builder.build(list(self._books.values()), self._transactions)

    # =========================================================================
    # HELPERS
    # =========================================================================

    def _require_book(self, isbn: str) -> Book:
        book = self._books.get(isbn)
        if book is None:
            raise NotFoundError(f"Book with ISBN {isbn} not found", key=isbn)
        return book

    def _find_open_loan(self, isbn: str, username: str) -> Optional[Transaction]:
        # Borrow only succeeds on an Available book, so at most one loan can match
        return next((t for t in self._transactions if t.is_loan_of(isbn, username)), None)

"""
Report Aggregation

DESIGN DECISION: Reports are computed DETERMINISTICALLY from the
in-memory collections, never cached or stored.

Tie-break rule for both maxima: among keys sharing the highest value,
the key that first appears in transaction order wins.
"""

from typing import Iterable, Optional

from library_ledger.models.book import Book
from library_ledger.models.results import LibraryReport
from library_ledger.models.transaction import Transaction


def first_max(totals: dict[str, int]) -> Optional[tuple[str, int]]:
    """
    Highest-valued entry of an insertion-ordered mapping.

    Returns None for an empty mapping.
    """
    best: Optional[tuple[str, int]] = None
    for key, value in totals.items():
        # Strict comparison keeps the earliest key on ties
        if best is None or value > best[1]:
            best = (key, value)
    return best


def borrow_counts(transactions: Iterable[Transaction]) -> dict[str, int]:
    """Number of transactions per ISBN, in order of first appearance."""
    counts: dict[str, int] = {}
    for t in transactions:
        counts[t.isbn] = counts.get(t.isbn, 0) + 1
    return counts


def fine_totals(transactions: Iterable[Transaction]) -> dict[str, int]:
    """Cumulative fine per username, in order of first appearance."""
    totals: dict[str, int] = {}
    for t in transactions:
        totals[t.username] = totals.get(t.username, 0) + t.fine
    return totals


class ReportBuilder:
    """Builds a LibraryReport from books and transactions."""

    def build(
        self,
        books: list[Book],
        transactions: list[Transaction],
    ) -> LibraryReport:
        available = sum(1 for b in books if b.is_available)
        issued = sum(1 for b in books if b.is_issued)

        most_borrowed = first_max(borrow_counts(transactions))
        top_fine = first_max(fine_totals(transactions))

        most_borrowed_title = None
        if most_borrowed:
            book = next((b for b in books if b.isbn == most_borrowed[0]), None)
            most_borrowed_title = book.title if book else None

        return LibraryReport(
            total_books=len(books),
            available=available,
            issued=issued,
            most_borrowed_isbn=most_borrowed[0] if most_borrowed else None,
            most_borrowed_count=most_borrowed[1] if most_borrowed else 0,
            most_borrowed_title=most_borrowed_title,
            top_fine_username=top_fine[0] if top_fine else None,
            top_fine_amount=top_fine[1] if top_fine else 0,
        )

"""
Operation Result Models

What the ledger hands back to a host UI after a successful operation.
These are detached values; changing them does not touch ledger state.
"""

from datetime import date
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class BorrowReceipt(BaseModel):
    """Result of a successful borrow."""
    model_config = ConfigDict(frozen=True)

    isbn: str
    username: str
    title: str
    issue_date: date
    due_date: date


class ReturnReceipt(BaseModel):
    """Result of a successful return."""
    model_config = ConfigDict(frozen=True)

    isbn: str
    username: str
    title: str
    return_date: date
    late_days: int = Field(ge=0)
    fine: int = Field(ge=0)

    @property
    def on_time(self) -> bool:
        return self.late_days == 0


class LibraryReport(BaseModel):
    """
    Aggregate counts over the inventory and the loan history.

    The most-borrowed and top-fine fields are None when there are no
    transactions at all.
    """
    model_config = ConfigDict(frozen=True)

    total_books: int = Field(ge=0)
    available: int = Field(ge=0)
    issued: int = Field(ge=0)

    most_borrowed_isbn: Optional[str] = None
    most_borrowed_count: int = Field(default=0, ge=0)
    most_borrowed_title: Optional[str] = Field(
        default=None,
        description="Title of the most borrowed book, if it is still in the inventory"
    )

    top_fine_username: Optional[str] = None
    top_fine_amount: int = Field(default=0, ge=0)

"""
Loan Models

A Transaction records one loan. It is created open on borrow
(no return date, fine 0) and closed exactly once on return.
Transactions are never deleted.
"""

from datetime import date
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


DISPLAY_DATE_FORMAT = "%d-%m-%Y"


class Transaction(BaseModel):
    """A borrow/return record."""
    model_config = ConfigDict(str_strip_whitespace=True)

    username: str = Field(..., min_length=1)
    isbn: str = Field(..., min_length=1)
    issue_date: date
    due_date: date
    return_date: Optional[date] = Field(
        default=None,
        description="None while the loan is open"
    )
    fine: int = Field(
        default=0,
        ge=0,
        description="Late fine, set on return"
    )

    @model_validator(mode='after')
    def validate_dates(self) -> 'Transaction':
        if self.due_date < self.issue_date:
            raise ValueError("Due date cannot be before issue date")
        return self

    @property
    def is_open(self) -> bool:
        return self.return_date is None

    def is_loan_of(self, isbn: str, username: str) -> bool:
        """True when this is an open loan of ``isbn`` held by ``username``."""
        return self.is_open and self.isbn == isbn and self.username == username

    def describe(self, date_format: str = DISPLAY_DATE_FORMAT) -> str:
        """One-line summary with dates in ``date_format``."""
        returned = self.return_date.strftime(date_format) if self.return_date else "Not Returned"
        return (
            f"User: {self.username} | ISBN: {self.isbn} | "
            f"Issued: {self.issue_date.strftime(date_format)} | "
            f"Due: {self.due_date.strftime(date_format)} | "
            f"Returned: {returned} | Fine: {self.fine}"
        )

    def __str__(self) -> str:
        return self.describe()

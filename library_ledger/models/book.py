"""
Inventory Models

A Book is identified by its ISBN and moves between two states:

    Available --borrow--> Issued --return--> Available

DESIGN DECISION: Status is a closed enum. Nothing outside the ledger
changes it, and it only changes through borrow and return.
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class BookStatus(str, Enum):
    """Availability state of a book. Values are the on-disk labels."""
    AVAILABLE = "Available"
    ISSUED = "Issued"


class Book(BaseModel):
    """A single item in the library inventory."""
    model_config = ConfigDict(str_strip_whitespace=True)

    title: str = Field(
        ...,
        min_length=1,
        description="Book title"
    )
    author: str = Field(
        ...,
        min_length=1,
        description="Author name"
    )
    isbn: str = Field(
        ...,
        min_length=1,
        description="Identity key, unique within the inventory"
    )
    status: BookStatus = Field(
        default=BookStatus.AVAILABLE,
        description="Availability state"
    )

    @property
    def is_available(self) -> bool:
        return self.status == BookStatus.AVAILABLE

    @property
    def is_issued(self) -> bool:
        return self.status == BookStatus.ISSUED

    def matches(self, keyword: str) -> bool:
        """
        Search predicate.

        Case-insensitive substring match on title and author,
        exact match on ISBN.
        """
        needle = keyword.casefold()
        return (
            needle in self.title.casefold()
            or needle in self.author.casefold()
            or self.isbn == keyword
        )

    def __str__(self) -> str:
        return f"{self.title} | {self.author} | ISBN: {self.isbn} | {self.status.value}"

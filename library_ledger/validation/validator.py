"""
Input Validation

DESIGN DECISION: Validation happens before any state is touched.

The flat-file stores do not escape field values, so any text that is
going to be written to a store must not contain:
- the store's field delimiter
- a line break (which would split the record across lines)

Blank values are rejected too; every stored text field is required.

IMPORTANT: Validation NEVER silently fixes input.
A value with leading or trailing whitespace is rejected rather than
trimmed, so the key a caller passes is the key that gets stored.
"""

from typing import Optional

from library_ledger.errors import InvalidInputError


LINE_BREAKS = ("\n", "\r")


class InputValidator:
    """
    Rejects field values that cannot be stored safely.

    Each ``validate_*`` method raises InvalidInputError on the first
    offending field and returns None otherwise.
    """

    def __init__(self, delimiter: str = ","):
        self._delimiter = delimiter

    def check_field(self, field: str, value: Optional[str]) -> Optional[str]:
        """
        Check a single stored text field.

        Returns:
            A human-readable problem description, or None if the value is fine
        """
        if value is None or not value.strip():
            return f"{field} must not be empty"
        if value != value.strip():
            return f"{field} must not start or end with whitespace"
        if self._delimiter in value:
            return f"{field} must not contain '{self._delimiter}'"
        if any(brk in value for brk in LINE_BREAKS):
            return f"{field} must not contain line breaks"
        return None

    def _require(self, **fields: Optional[str]) -> None:
        for field, value in fields.items():
            problem = self.check_field(field, value)
            if problem:
                raise InvalidInputError(problem, field=field, key=value)

    def validate_book(self, title: str, author: str, isbn: str) -> None:
        self._require(title=title, author=author, isbn=isbn)

    def validate_isbn(self, isbn: str) -> None:
        self._require(isbn=isbn)

    def validate_username(self, username: str) -> None:
        self._require(username=username)

    def validate_loan(self, isbn: str, username: str) -> None:
        self._require(isbn=isbn, username=username)

    def validate_password(self, password: str) -> None:
        """Passwords are only stored hashed, so only emptiness matters."""
        if not password:
            raise InvalidInputError("password must not be empty", field="password")

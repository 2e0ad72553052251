"""Input validation package."""

from library_ledger.validation.validator import InputValidator

__all__ = ["InputValidator"]

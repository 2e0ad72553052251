"""
Library Ledger - Source Package

A small lending-library ledger: a book inventory with an
Available/Issued state machine, a borrow/return workflow with due dates
and late fines, and flat-file persistence for books, users and
transactions.

DESIGN PRINCIPLES:
1. Every mutation is persisted before success is reported
2. Fail early, fail with a typed error
3. A bad line in a store file never takes the whole store down
4. Every step must be auditable
5. State is constructed once and passed in, never hidden in globals
"""

__version__ = "1.0.0"
__author__ = "Library Ledger Team"

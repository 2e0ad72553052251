"""Ledger package: inventory, loans and accounts."""

from library_ledger.ledger.accounts import AccountDirectory
from library_ledger.ledger.inventory import InventoryLedger

__all__ = ["AccountDirectory", "InventoryLedger"]

"""Ledger store."""

from practice_ledger.store.ledger_store import LedgerStore, store_operation

__all__ = ["LedgerStore", "store_operation"]

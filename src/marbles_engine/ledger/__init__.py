"""Ledger access: world state, key history and the per-invocation stub."""

from marbles_engine.ledger.stub import HistoryEntry, LedgerStub

__all__ = ["HistoryEntry", "LedgerStub"]

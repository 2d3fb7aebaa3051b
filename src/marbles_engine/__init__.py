"""Marbles-Engine: supply-chain-finance approval workflow over a key-value ledger."""

from marbles_engine.client import ChaincodeClient, ChaincodeClientError

__all__ = ["ChaincodeClient", "ChaincodeClientError"]
__version__ = "0.1.0"

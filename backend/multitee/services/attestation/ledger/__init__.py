"""
Ledger Reporters

Submit per-cycle verification batches and read aggregate counts back.
"""

from .base import BaseLedgerReporter
from .memory import InMemoryLedgerReporter
from .web3_ledger import Web3LedgerReporter

__all__ = [
    "BaseLedgerReporter",
    "InMemoryLedgerReporter",
    "Web3LedgerReporter",
]

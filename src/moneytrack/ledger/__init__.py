"""
Ledger Package

Account balances and their append-only history.
"""

from .accounts import AccountLedger
from .history import HistoryLog

__all__ = [
    "AccountLedger",
    "HistoryLog",
]

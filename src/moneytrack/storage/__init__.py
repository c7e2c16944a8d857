"""
Storage Package

Collection store contract and its JSON file implementation.
"""

from .datastore import (
    ACCOUNTS,
    COLLECTIONS,
    HISTORY,
    INVESTMENT_EVENTS,
    INVESTMENT_POSITIONS,
    RECURRENTS,
    TRANSACTIONS,
    Collection,
    CollectionStore,
    Record,
)
from .json_store import JsonFileStore

__all__ = [
    "ACCOUNTS",
    "COLLECTIONS",
    "HISTORY",
    "INVESTMENT_EVENTS",
    "INVESTMENT_POSITIONS",
    "RECURRENTS",
    "TRANSACTIONS",
    "Collection",
    "CollectionStore",
    "JsonFileStore",
    "Record",
]

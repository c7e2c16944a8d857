#!/usr/bin/env python3
"""
CollectionStore Protocol - Standard interface for record persistence.

Every component talks to storage through this interface: a key-value store of
named collections supporting list/get/create/patch/delete. Separating the
storage contract from the balance rules lets the same engines run over the JSON
file store or any other backend.
"""

from __future__ import annotations

from typing import Any, Protocol

ACCOUNTS = "accounts"
TRANSACTIONS = "transactions"
RECURRENTS = "recurrents"
HISTORY = "history"
INVESTMENT_POSITIONS = "investment_positions"
INVESTMENT_EVENTS = "investment_events"
# Tag names are a vocabulary for transactions; not part of backups
TAGS = "tags"

COLLECTIONS = (
    ACCOUNTS,
    TRANSACTIONS,
    RECURRENTS,
    INVESTMENT_POSITIONS,
    INVESTMENT_EVENTS,
    HISTORY,
)

Record = dict[str, Any]


class CollectionStore(Protocol):
    """
    Protocol for collection-oriented record persistence.

    All methods are coroutines and may suspend; records are plain
    JSON-serializable dicts and are always copies of the stored data.
    """

    async def list(self, collection: str, filters: dict[str, Any] | None = None) -> list[Record]:
        """
        List records, optionally filtered by field equality.

        Returns:
            Matching records in insertion order
        """
        ...

    async def get(self, collection: str, record_id: Any) -> Record:
        """
        Fetch one record by id.

        Raises:
            RecordNotFoundError: If no record has this id
        """
        ...

    async def create(self, collection: str, record: Record) -> Record:
        """
        Insert a record.

        ``accounts`` receive an auto-incremented numeric id when none is given;
        every other collection requires a caller-supplied unique id.

        Raises:
            ValueError: If the id is missing or already used
        """
        ...

    async def patch(self, collection: str, record_id: Any, partial: Record) -> Record:
        """
        Merge ``partial`` into a record.

        Returns:
            The merged record

        Raises:
            RecordNotFoundError: If no record has this id
        """
        ...

    async def delete(self, collection: str, record_id: Any) -> Record | None:
        """
        Remove a record.

        Returns:
            The removed record, or None when it did not exist
        """
        ...


class Collection:
    """
    A store bound to one collection name.

    Components receive these handles instead of the whole store so each one
    only reaches the collections it owns.
    """

    def __init__(self, store: CollectionStore, name: str):
        self.store = store
        self.name = name

    async def list(self, filters: dict[str, Any] | None = None) -> list[Record]:
        return await self.store.list(self.name, filters)

    async def get(self, record_id: Any) -> Record:
        return await self.store.get(self.name, record_id)

    async def create(self, record: Record) -> Record:
        return await self.store.create(self.name, record)

    async def patch(self, record_id: Any, partial: Record) -> Record:
        return await self.store.patch(self.name, record_id, partial)

    async def delete(self, record_id: Any) -> Record | None:
        return await self.store.delete(self.name, record_id)

    def __repr__(self) -> str:
        return f"Collection({self.name!r})"

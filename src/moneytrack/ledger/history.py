#!/usr/bin/env python3
"""
Balance History

Append-only log of balance snapshots, one per Ledger mutation.
"""

import logging
import uuid

from ..core.dates import today_iso
from ..core.models import HistoryItem
from ..storage.datastore import Collection

logger = logging.getLogger(__name__)


class HistoryLog:
    """Owns the ``history`` collection and its in-memory cache."""

    def __init__(self, history: Collection):
        self._history = history
        self.items: list[HistoryItem] = []

    async def load_history(self) -> list[HistoryItem]:
        """Load every snapshot from storage into the cache."""
        self.items = [HistoryItem.from_dict(record) for record in await self._history.list()]
        return self.items

    async def append_history(self, account_id: int, balance_cents: int, note: str | None = None) -> HistoryItem:
        """
        Record the balance an account ended up with after a mutation.

        Args:
            account_id: Account whose balance changed
            balance_cents: Resulting balance
            note: Free-text description of the change

        Returns:
            The stored snapshot
        """
        item = HistoryItem(
            id=str(uuid.uuid4()),
            account_id=account_id,
            date=today_iso(),
            balance_cents=balance_cents,
            note=note or "",
        )
        created = HistoryItem.from_dict(await self._history.create(item.to_dict()))
        self.items.append(created)
        logger.debug(f"History snapshot for account {account_id}: {balance_cents}")
        return created

    def for_account(self, account_id: int) -> list[HistoryItem]:
        """Cached snapshots of one account, oldest first."""
        return [item for item in self.items if item.account_id == account_id]

#!/usr/bin/env python3
"""
Application Wiring

Builds every component over one collection store and passes the shared
Account Ledger to the engines that move cash. There is no module-level state:
each ``FinanceApp`` owns its components and their caches.
"""

import asyncio
import logging
from pathlib import Path

from .alerts.alerts import AlertService
from .backup.backup import BackupData, export_backup_json, replace_data_with_backup
from .core.config import Config, get_config
from .core.models import AccountDeletionSummary
from .investments.events import InvestmentEventEngine
from .investments.positions import PositionRepository
from .ledger.accounts import AccountLedger, ProgressCallback
from .ledger.history import HistoryLog
from .recurrents.repository import RecurrentRepository
from .search.search import GlobalSearch
from .storage.datastore import (
    HISTORY,
    INVESTMENT_EVENTS,
    INVESTMENT_POSITIONS,
    RECURRENTS,
    TAGS,
    TRANSACTIONS,
    Collection,
    CollectionStore,
)
from .storage.json_store import JsonFileStore
from .tags.repository import TagRepository
from .transactions.engine import TransactionEngine

logger = logging.getLogger(__name__)


class FinanceApp:
    """All moneytrack components wired over one store."""

    def __init__(self, store: CollectionStore):
        self.store = store

        self.history = HistoryLog(Collection(store, HISTORY))
        self.ledger = AccountLedger(store, self.history)
        self.transactions = TransactionEngine(Collection(store, TRANSACTIONS), self.ledger)
        self.recurrents = RecurrentRepository(Collection(store, RECURRENTS))
        self.tags = TagRepository(Collection(store, TAGS))
        self.positions = PositionRepository(Collection(store, INVESTMENT_POSITIONS))
        self.investments = InvestmentEventEngine(
            Collection(store, INVESTMENT_EVENTS), self.positions, self.ledger
        )
        self.alerts = AlertService(self.ledger, self.transactions, self.recurrents)
        self.search = GlobalSearch(self.ledger, self.transactions, self.recurrents, self.positions)

    @classmethod
    def from_config(cls, config: Config | None = None) -> "FinanceApp":
        """Open the JSON data file named by the configuration."""
        config = config or get_config()
        return cls(JsonFileStore(config.db_file))

    async def load_all(self) -> None:
        """Fill every component cache from storage."""
        await asyncio.gather(
            self.ledger.load_accounts(),
            self.history.load_history(),
            self.transactions.load_transactions(),
            self.recurrents.load_recurrents(),
            self.tags.load_tags(),
            self.positions.load_positions(),
            self.investments.load_events(),
        )
        logger.debug(
            f"Loaded {len(self.ledger.accounts)} accounts, {len(self.transactions.transactions)} transactions"
        )

    async def delete_account(
        self, account_id: int, on_progress: ProgressCallback | None = None
    ) -> AccountDeletionSummary:
        """Cascade-delete an account, then refresh the caches it touched."""
        summary = await self.ledger.delete_account(account_id, on_progress)
        await asyncio.gather(
            self.transactions.load_transactions(),
            self.recurrents.load_recurrents(),
            self.positions.load_positions(),
            self.investments.load_events(),
        )
        return summary

    async def export_backup(self, directory: str | Path) -> Path:
        return await export_backup_json(self.store, directory)

    async def restore_backup(self, data: BackupData) -> None:
        """Replace all stored data with a backup and reload every cache."""
        await replace_data_with_backup(self.store, data)
        await self.load_all()

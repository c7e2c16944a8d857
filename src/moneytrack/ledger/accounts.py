#!/usr/bin/env python3
"""
Account Ledger

Owns account records and is the only writer of ``balance_cents``. Every other
component computes a signed delta and calls ``adjust_balance``; each call
appends one history snapshot.

Balance updates are read-modify-write sequences against storage. They are
serialized per account with an asyncio lock, and the current balance is read
from storage inside the lock, so concurrent deltas on one account all land.
"""

import asyncio
import logging
from collections import defaultdict
from collections.abc import Callable
from typing import Any

from ..core.currency import format_cents
from ..core.errors import CascadeDeleteError, InvariantViolationError
from ..core.fanout import gather_outcomes, summarize_outcomes
from ..core.models import Account, AccountDeletionSummary
from ..storage.datastore import (
    ACCOUNTS,
    HISTORY,
    INVESTMENT_EVENTS,
    INVESTMENT_POSITIONS,
    RECURRENTS,
    TRANSACTIONS,
    Collection,
    CollectionStore,
    Record,
)
from .history import HistoryLog

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[str], None]

# Fields only the ledger itself may write after creation
PROTECTED_ACCOUNT_FIELDS = ("id", "balance_cents")


def _unique_by_id(*groups: list[Record]) -> list[Record]:
    seen: dict[str, Record] = {}
    for group in groups:
        for record in group:
            seen.setdefault(str(record["id"]), record)
    return list(seen.values())


class AccountLedger:
    """
    Account repository plus the single balance mutation primitive.

    Provides:
    - Account CRUD over the ``accounts`` collection
    - ``adjust_balance``: the only path that changes a balance
    - ``delete_account``: dependency-ordered cascade over every collection
    """

    def __init__(self, store: CollectionStore, history: HistoryLog):
        """
        Initialize the ledger.

        Args:
            store: Collection store holding every collection
            history: Snapshot log appended on each balance change
        """
        self.history = history
        self._accounts = Collection(store, ACCOUNTS)
        self._transactions = Collection(store, TRANSACTIONS)
        self._recurrents = Collection(store, RECURRENTS)
        self._history = Collection(store, HISTORY)
        self._positions = Collection(store, INVESTMENT_POSITIONS)
        self._events = Collection(store, INVESTMENT_EVENTS)

        self.accounts: list[Account] = []
        self._locks: defaultdict[int, asyncio.Lock] = defaultdict(asyncio.Lock)

    async def load_accounts(self) -> list[Account]:
        """Load every account from storage into the cache."""
        self.accounts = [Account.from_dict(record) for record in await self._accounts.list()]
        return self.accounts

    def find_cached(self, account_id: int) -> Account | None:
        for account in self.accounts:
            if account.id == account_id:
                return account
        return None

    async def get_account(self, account_id: int) -> Account:
        """
        Get an account, preferring the cache.

        Raises:
            RecordNotFoundError: If the account does not exist
        """
        cached = self.find_cached(account_id)
        if cached is not None:
            return cached
        return Account.from_dict(await self._accounts.get(account_id))

    async def add_account(
        self,
        label: str,
        balance_cents: int = 0,
        bank: str | None = None,
        closing_day: int | None = None,
        due_day: int | None = None,
    ) -> Account:
        """
        Create an account with its opening balance.

        Returns:
            The stored account with its assigned numeric id
        """
        account = Account(
            id=None,
            label=label,
            balance_cents=balance_cents,
            bank=bank,
            closing_day=closing_day,
            due_day=due_day,
        )
        created = Account.from_dict(await self._accounts.create(account.to_dict()))
        self.accounts.append(created)
        logger.info(f"Created account {created.id} ({created.label}) with {format_cents(balance_cents)}")
        return created

    async def update_account(self, account_id: int, patch: dict[str, Any]) -> Account:
        """
        Update descriptive account fields.

        Raises:
            InvariantViolationError: If the patch touches ``id`` or ``balance_cents``
            RecordNotFoundError: If the account does not exist
        """
        protected = [name for name in PROTECTED_ACCOUNT_FIELDS if name in patch]
        if protected:
            raise InvariantViolationError(
                f"accounts record {account_id}: {', '.join(protected)} cannot be edited directly"
            )

        updated = Account.from_dict(await self._accounts.patch(account_id, patch))
        self._store_cached(updated)
        return updated

    def _store_cached(self, account: Account) -> None:
        for index, cached in enumerate(self.accounts):
            if cached.id == account.id:
                self.accounts[index] = account
                return

    async def adjust_balance(self, account_id: int, delta_cents: int, note: str | None = None) -> Account:
        """
        Apply a signed delta to an account balance and snapshot the result.

        Args:
            account_id: Account to adjust
            delta_cents: Signed change in cents
            note: Description stored with the history snapshot

        Returns:
            The account with its new balance

        Raises:
            RecordNotFoundError: If the account does not exist
        """
        async with self._locks[account_id]:
            record = await self._accounts.get(account_id)
            new_balance = int(record.get("balance_cents", 0)) + delta_cents
            updated = Account.from_dict(await self._accounts.patch(account_id, {"balance_cents": new_balance}))

            cached = self.find_cached(account_id)
            if cached is not None:
                cached.balance_cents = new_balance

            await self.history.append_history(account_id, new_balance, note)

        logger.info(
            f"Account {account_id}: {format_cents(delta_cents)} -> {format_cents(new_balance)}"
            + (f" ({note})" if note else "")
        )
        return updated

    async def delete_account(
        self, account_id: int, on_progress: ProgressCallback | None = None
    ) -> AccountDeletionSummary:
        """
        Delete an account and everything that depends on it.

        Stages run in dependency order: investment events (of the account and
        of its positions), positions, transactions on either leg, recurrents,
        history, then the account. Deletes inside a stage run concurrently; if
        any of them fails, later stages are skipped and the account is kept.

        Args:
            account_id: Account to delete
            on_progress: Called once per stage with a status message

        Returns:
            Per-category deletion counts

        Raises:
            RecordNotFoundError: If the account does not exist
            CascadeDeleteError: If a dependent record could not be deleted
        """

        def notify(message: str) -> None:
            if on_progress is not None:
                on_progress(message)

        await self._accounts.get(account_id)

        key = {"accountId": account_id}
        tx_from, tx_to, recurrents, history_items, positions, account_events = await asyncio.gather(
            self._transactions.list(key),
            self._transactions.list({"destinationAccountId": account_id}),
            self._recurrents.list(key),
            self._history.list(key),
            self._positions.list(key),
            self._events.list(key),
        )
        position_events = await asyncio.gather(
            *(self._events.list({"positionId": position["id"]}) for position in positions)
        )

        stages = [
            ("Deleting investment events...", self._events,
             _unique_by_id(account_events, *position_events), "investment_events_deleted"),
            ("Deleting positions...", self._positions, positions, "investment_positions_deleted"),
            ("Deleting transactions...", self._transactions,
             _unique_by_id(tx_from, tx_to), "transactions_deleted"),
            ("Deleting recurrents...", self._recurrents, recurrents, "recurrents_deleted"),
            ("Deleting history...", self._history, history_items, "history_deleted"),
        ]

        summary = AccountDeletionSummary()
        for message, collection, records, counter in stages:
            notify(message)
            outcomes = await gather_outcomes(
                (f"{collection.name}/{record['id']}", collection.delete(record["id"])) for record in records
            )
            result = summarize_outcomes(outcomes)
            setattr(summary, counter, result.succeeded)
            if result.failed:
                summary.failed += result.failed
                logger.error(
                    f"Cascade delete of account {account_id} stopped at {collection.name}: "
                    f"{result.failed} of {result.total} failed"
                )
                raise CascadeDeleteError(account_id, summary)

        notify("Removing account...")
        await self._accounts.delete(account_id)
        self.accounts = [account for account in self.accounts if account.id != account_id]
        self.history.items = [item for item in self.history.items if item.account_id != account_id]
        self._locks.pop(account_id, None)

        notify("Done!")
        logger.info(f"Deleted account {account_id}: {summary}")
        return summary

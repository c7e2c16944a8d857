#!/usr/bin/env python3
"""
Global Search

Finds transactions (by description), recurrents (by name) and investment
positions (by asset code and name) matching every token of a query.
Matching ignores case and accents, so "cafe" finds "Café".

Each group returns at most ``MAX_RESULTS_PER_GROUP`` results:
- transactions newest first (creation time, falling back to date)
- recurrents active first, then by name
- positions by asset code
"""

import logging
import unicodedata
from dataclasses import dataclass
from enum import Enum

from ..core.errors import SourceLoadError
from ..core.fanout import gather_outcomes
from ..core.models import InvestmentBucket
from ..investments.positions import PositionRepository
from ..ledger.accounts import AccountLedger
from ..recurrents.repository import RecurrentRepository
from ..transactions.engine import TransactionEngine

logger = logging.getLogger(__name__)

MAX_RESULTS_PER_GROUP = 8

BUCKET_LABELS = {
    InvestmentBucket.VARIABLE: "Variable income",
    InvestmentBucket.FIXED: "Fixed income",
}


class SearchKind(Enum):
    TRANSACTION = "transaction"
    RECURRENT = "recurrent"
    INVESTMENT = "investment"


@dataclass
class SearchResult:
    id: str
    kind: SearchKind
    title: str
    subtitle: str


def normalize_search_text(value: str) -> str:
    """Lowercase, trimmed text with accents stripped."""
    decomposed = unicodedata.normalize("NFD", value)
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return stripped.lower().strip()


def matches_all_tokens(source: str, normalized_query: str) -> bool:
    """True when every whitespace-separated query token occurs in ``source``."""
    if not normalized_query:
        return False
    normalized_source = normalize_search_text(source)
    if not normalized_source:
        return False
    return all(token in normalized_source for token in normalized_query.split())


class GlobalSearch:
    """Search over the cached accounts, transactions, recurrents and positions."""

    def __init__(
        self,
        ledger: AccountLedger,
        engine: TransactionEngine,
        recurrents: RecurrentRepository,
        positions: PositionRepository,
    ):
        self.ledger = ledger
        self.engine = engine
        self.recurrents = recurrents
        self.positions = positions

    async def load_search_sources(self) -> list[str]:
        """
        Reload every searchable source concurrently.

        Returns:
            Names of the sources that failed to load

        Raises:
            SourceLoadError: If every source failed
        """
        outcomes = await gather_outcomes(
            [
                ("accounts", self.ledger.load_accounts()),
                ("transactions", self.engine.load_transactions()),
                ("recurrents", self.recurrents.load_recurrents()),
                ("investments", self.positions.load_positions()),
            ]
        )
        failed = [outcome.label for outcome in outcomes if not outcome.ok]
        if failed and len(failed) == len(outcomes):
            raise SourceLoadError(failed)
        if failed:
            logger.warning(f"Search sources failed to load: {', '.join(failed)}")
        return failed

    def _account_label(self, account_id: int) -> str:
        account = self.ledger.find_cached(account_id)
        return account.label if account else "Account"

    def transaction_results(self, query: str) -> list[SearchResult]:
        normalized = normalize_search_text(query)
        matches = [
            tx
            for tx in self.engine.transactions
            if tx.description and tx.description.strip() and matches_all_tokens(tx.description, normalized)
        ]
        matches.sort(key=lambda tx: tx.created_at or tx.date, reverse=True)
        return [
            SearchResult(
                id=tx.id,
                kind=SearchKind.TRANSACTION,
                title=tx.description.strip(),
                subtitle=f"{tx.date} - {self._account_label(tx.account_id)}",
            )
            for tx in matches[:MAX_RESULTS_PER_GROUP]
        ]

    def recurrent_results(self, query: str) -> list[SearchResult]:
        normalized = normalize_search_text(query)
        matches = [rec for rec in self.recurrents.recurrents if matches_all_tokens(rec.name, normalized)]
        matches.sort(key=lambda rec: (not rec.active, rec.name))
        return [
            SearchResult(
                id=rec.id,
                kind=SearchKind.RECURRENT,
                title=rec.name,
                subtitle=f"{'Active' if rec.active else 'Inactive'} - {self._account_label(rec.account_id)}",
            )
            for rec in matches[:MAX_RESULTS_PER_GROUP]
        ]

    def investment_results(self, query: str) -> list[SearchResult]:
        normalized = normalize_search_text(query)
        matches = [
            position
            for position in self.positions.positions
            if matches_all_tokens(f"{position.asset_code} {position.name or ''}", normalized)
        ]
        matches.sort(key=lambda position: position.asset_code)

        results = []
        for position in matches[:MAX_RESULTS_PER_GROUP]:
            name = (position.name or "").strip()
            results.append(
                SearchResult(
                    id=position.id,
                    kind=SearchKind.INVESTMENT,
                    title=f"{position.asset_code} - {name}" if name else position.asset_code,
                    subtitle=f"{BUCKET_LABELS[position.bucket]} - {self._account_label(position.account_id)}",
                )
            )
        return results

    def grouped_results(self, query: str) -> dict[SearchKind, list[SearchResult]]:
        return {
            SearchKind.TRANSACTION: self.transaction_results(query),
            SearchKind.RECURRENT: self.recurrent_results(query),
            SearchKind.INVESTMENT: self.investment_results(query),
        }

    def search(self, query: str) -> list[SearchResult]:
        """Flat results: transactions, then recurrents, then investments."""
        return [result for results in self.grouped_results(query).values() for result in results]

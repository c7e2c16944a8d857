#!/usr/bin/env python3
"""Tests for accent-insensitive global search."""

import pytest

from moneytrack.app import FinanceApp
from moneytrack.core.errors import SourceLoadError
from moneytrack.search.search import (
    MAX_RESULTS_PER_GROUP,
    SearchKind,
    matches_all_tokens,
    normalize_search_text,
)
from moneytrack.storage.datastore import INVESTMENT_POSITIONS
from moneytrack.storage.json_store import JsonFileStore
from tests.conftest import write_db


def _tx(tx_id, description, account_id=1, date="2026-03-01", created_at=None):
    record = {"id": tx_id, "accountId": account_id, "date": date, "type": "expense", "amount_cents": -1000}
    if description is not None:
        record["description"] = description
    if created_at:
        record["createdAt"] = created_at
    return record


@pytest.fixture
def search_app(db_file, sample_accounts):
    write_db(
        db_file,
        accounts=sample_accounts,
        transactions=[
            _tx("breakfast", "Café da manhã", created_at="2026-03-01T08:00:00"),
            _tx("espresso", "cafe expresso", account_id=2, date="2026-03-05", created_at="2026-03-05T09:00:00"),
            _tx("blank", None),
            _tx("market", "Mercado"),
        ],
        recurrents=[
            {"id": "gym-old", "accountId": 1, "kind": "expense", "name": "Academia", "amount_cents": -9000,
             "due_day": 5, "active": False},
            {"id": "gym", "accountId": 1, "kind": "expense", "name": "Academia Centro", "amount_cents": -12000,
             "due_day": 5, "active": True},
        ],
        investment_positions=[
            {"id": "petr", "accountId": 1, "bucket": "variable", "asset_code": "PETR4", "name": "Petrobras"},
            {"id": "cdb", "accountId": 9, "bucket": "fixed", "asset_code": "CDB"},
        ],
    )
    return FinanceApp(JsonFileStore(db_file))


class TestMatching:
    """Test text normalization and token matching."""

    def test_accents_and_case_removed(self):
        assert normalize_search_text("  Café da MANHÃ ") == "cafe da manha"

    def test_every_token_must_match(self):
        assert matches_all_tokens("Café da manhã", "cafe manha")
        assert not matches_all_tokens("Café da manhã", "cafe jantar")

    def test_empty_query_matches_nothing(self):
        assert not matches_all_tokens("anything", "")
        assert not matches_all_tokens("", "cafe")


class TestGlobalSearch:
    """Test grouped results over the loaded caches."""

    @pytest.mark.asyncio
    async def test_transactions_newest_first(self, search_app):
        await search_app.search.load_search_sources()

        results = search_app.search.transaction_results("CAFE")

        assert [r.id for r in results] == ["espresso", "breakfast"]
        assert results[0].title == "cafe expresso"
        assert results[0].subtitle == "2026-03-05 - Savings"

    @pytest.mark.asyncio
    async def test_all_tokens_narrow_results(self, search_app):
        await search_app.search.load_search_sources()

        assert [r.id for r in search_app.search.transaction_results("cafe manha")] == ["breakfast"]

    @pytest.mark.asyncio
    async def test_recurrents_active_first(self, search_app):
        await search_app.search.load_search_sources()

        results = search_app.search.recurrent_results("academia")

        assert [(r.title, r.subtitle) for r in results] == [
            ("Academia Centro", "Active - Checking"),
            ("Academia", "Inactive - Checking"),
        ]

    @pytest.mark.asyncio
    async def test_investments_labelled_with_bucket_and_account(self, search_app):
        await search_app.search.load_search_sources()

        petr = search_app.search.investment_results("petrobras")
        cdb = search_app.search.investment_results("cdb")

        assert [(r.title, r.subtitle) for r in petr] == [("PETR4 - Petrobras", "Variable income - Checking")]
        assert [(r.title, r.subtitle) for r in cdb] == [("CDB", "Fixed income - Account")]

    @pytest.mark.asyncio
    async def test_results_capped_per_group(self, db_file, sample_accounts):
        write_db(
            db_file,
            accounts=sample_accounts,
            transactions=[_tx(f"ride-{n}", f"Uber {n}", date=f"2026-03-{n + 10}") for n in range(10)],
        )
        app = FinanceApp(JsonFileStore(db_file))
        await app.search.load_search_sources()

        results = app.search.transaction_results("uber")

        assert len(results) == MAX_RESULTS_PER_GROUP
        assert results[0].id == "ride-9"

    @pytest.mark.asyncio
    async def test_flat_search_keeps_group_order(self, search_app):
        await search_app.search.load_search_sources()

        grouped = search_app.search.grouped_results("a")
        flat = search_app.search.search("a")

        assert [r.kind for r in flat] == (
            [SearchKind.TRANSACTION] * len(grouped[SearchKind.TRANSACTION])
            + [SearchKind.RECURRENT] * len(grouped[SearchKind.RECURRENT])
            + [SearchKind.INVESTMENT] * len(grouped[SearchKind.INVESTMENT])
        )
        assert search_app.search.search("   ") == []


class TestLoadSearchSources:
    """Test partial and total source failures."""

    @pytest.mark.asyncio
    async def test_partial_failure_keeps_other_sources(self, db_file, sample_accounts):
        write_db(db_file, accounts=sample_accounts, transactions=[_tx("market", "Mercado")])

        class BrokenPositions(JsonFileStore):
            async def list(self, collection, filters=None):
                if collection == INVESTMENT_POSITIONS:
                    raise OSError("unreadable")
                return await super().list(collection, filters)

        app = FinanceApp(BrokenPositions(db_file))

        failed = await app.search.load_search_sources()

        assert failed == ["investments"]
        assert [r.id for r in app.search.transaction_results("mercado")] == ["market"]

    @pytest.mark.asyncio
    async def test_total_failure_raises(self, db_file):
        class BrokenStore(JsonFileStore):
            async def list(self, collection, filters=None):
                raise OSError("unreadable")

        app = FinanceApp(BrokenStore(db_file))

        with pytest.raises(SourceLoadError) as exc_info:
            await app.search.load_search_sources()
        assert exc_info.value.failed_sources == ["accounts", "transactions", "recurrents", "investments"]

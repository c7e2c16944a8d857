#!/usr/bin/env python3
"""Tests for the JSON file collection store."""

import pytest

from moneytrack.core.errors import RecordNotFoundError
from moneytrack.core.json_utils import read_json
from moneytrack.storage.datastore import ACCOUNTS, COLLECTIONS, TRANSACTIONS, Collection
from moneytrack.storage.json_store import JsonFileStore


class TestJsonFileStore:
    """Test the collection store contract."""

    def test_creates_empty_file(self, db_file):
        JsonFileStore(db_file)
        assert read_json(db_file) == {name: [] for name in COLLECTIONS}

    @pytest.mark.asyncio
    async def test_accounts_get_incrementing_ids(self, store):
        first = await store.create(ACCOUNTS, {"label": "A", "balance_cents": 0})
        second = await store.create(ACCOUNTS, {"label": "B", "balance_cents": 0})
        assert (first["id"], second["id"]) == (1, 2)

    @pytest.mark.asyncio
    async def test_other_collections_require_id(self, store):
        with pytest.raises(ValueError):
            await store.create(TRANSACTIONS, {"accountId": 1})

    @pytest.mark.asyncio
    async def test_duplicate_id_rejected(self, store):
        await store.create(TRANSACTIONS, {"id": "t1", "accountId": 1})
        with pytest.raises(ValueError):
            await store.create(TRANSACTIONS, {"id": "t1", "accountId": 2})

    @pytest.mark.asyncio
    async def test_filters_compare_string_forms(self, store):
        await store.create(TRANSACTIONS, {"id": "t1", "accountId": 1})
        await store.create(TRANSACTIONS, {"id": "t2", "accountId": 2})

        matches = await store.list(TRANSACTIONS, {"accountId": "1"})
        assert [r["id"] for r in matches] == ["t1"]

    @pytest.mark.asyncio
    async def test_patch_merges_and_get_missing_raises(self, store):
        await store.create(ACCOUNTS, {"label": "A", "balance_cents": 0})
        patched = await store.patch(ACCOUNTS, 1, {"balance_cents": 500})

        assert patched == {"label": "A", "balance_cents": 500, "id": 1}
        with pytest.raises(RecordNotFoundError):
            await store.get(ACCOUNTS, 99)
        with pytest.raises(RecordNotFoundError):
            await store.patch(ACCOUNTS, 99, {"label": "X"})

    @pytest.mark.asyncio
    async def test_delete_returns_removed_or_none(self, store):
        await store.create(TRANSACTIONS, {"id": "t1", "accountId": 1})
        assert (await store.delete(TRANSACTIONS, "t1"))["id"] == "t1"
        assert await store.delete(TRANSACTIONS, "t1") is None

    @pytest.mark.asyncio
    async def test_returned_records_are_copies(self, store):
        created = await store.create(TRANSACTIONS, {"id": "t1", "accountId": 1, "tags": ["a"]})
        created["tags"].append("b")

        fetched = await store.get(TRANSACTIONS, "t1")
        assert fetched["tags"] == ["a"]

    @pytest.mark.asyncio
    async def test_bound_collection(self, store):
        accounts = Collection(store, ACCOUNTS)
        await accounts.create({"label": "A", "balance_cents": 0})
        assert [r["label"] for r in await accounts.list()] == ["A"]
        assert store.item_count() == 1
        assert "1 accounts" in store.summary_text()

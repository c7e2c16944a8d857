#!/usr/bin/env python3
"""Tests for tag normalization and the tag repository."""

import pytest

from moneytrack.app import FinanceApp
from moneytrack.core.errors import InvariantViolationError, RecordNotFoundError
from moneytrack.core.json_utils import read_json
from moneytrack.storage.json_store import JsonFileStore
from moneytrack.tags.repository import normalize_tag_name, normalize_tag_names
from tests.conftest import write_db


class TestNormalizeTags:
    """Test tag name normalization."""

    def test_trim_and_lowercase(self):
        assert normalize_tag_name("  Trip ") == "trip"

    def test_names_deduplicated_in_order(self):
        assert normalize_tag_names(["Food", "trip", " FOOD", "  ", "Trip"]) == ["food", "trip"]


class TestTagRepository:
    """Test tag creation, lookup and deletion."""

    @pytest.mark.asyncio
    async def test_ensure_tag_reuses_existing(self, db_file):
        write_db(db_file, tags=[{"id": "t1", "name": "food"}])
        app = FinanceApp(JsonFileStore(db_file))
        await app.load_all()

        tag = await app.tags.ensure_tag(" Food ")

        assert tag.id == "t1"
        assert read_json(db_file)["tags"] == [{"id": "t1", "name": "food"}]

    @pytest.mark.asyncio
    async def test_ensure_tag_creates_normalized(self, app):
        tag = await app.tags.ensure_tag("  Viagem ")

        assert tag.name == "viagem"
        assert [t["name"] for t in read_json(app.store.db_file)["tags"]] == ["viagem"]

    @pytest.mark.asyncio
    async def test_ensure_tags_creates_each_once(self, app):
        names = await app.tags.ensure_tags(["Trip", "food", "TRIP"])

        assert names == ["trip", "food"]
        assert sorted(t.name for t in app.tags.tags) == ["food", "trip"]

    @pytest.mark.asyncio
    async def test_create_rejects_duplicates_and_blanks(self, app):
        await app.tags.create_tag("Trip")

        with pytest.raises(InvariantViolationError):
            await app.tags.create_tag("trip ")
        with pytest.raises(ValueError):
            await app.tags.create_tag("   ")

    @pytest.mark.asyncio
    async def test_delete(self, app):
        await app.tags.ensure_tag("trip")

        deleted = await app.tags.delete_tag("TRIP")

        assert deleted.name == "trip"
        assert app.tags.tags == []
        assert read_json(app.store.db_file)["tags"] == []
        with pytest.raises(RecordNotFoundError):
            await app.tags.delete_tag("trip")

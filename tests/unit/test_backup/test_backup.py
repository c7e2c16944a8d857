#!/usr/bin/env python3
"""Tests for backup export, validation and restore."""

import json
from datetime import date

import pytest

from moneytrack.backup.backup import (
    BackupData,
    backup_filename,
    build_backup_envelope,
    parse_backup_content,
    parse_backup_file,
    prune_backups,
    replace_data_with_backup,
    resolve_backup_data,
    summarize_backup,
)
from moneytrack.core.errors import BackupValidationError
from moneytrack.core.json_utils import read_json
from moneytrack.storage.json_store import JsonFileStore
from tests.conftest import write_db


@pytest.fixture
def backup_collections(sample_accounts):
    return {
        "accounts": sample_accounts,
        "transactions": [
            {"id": "tx-1", "accountId": 1, "date": "2026-03-01", "type": "expense", "amount_cents": -100, "paid": True},
        ],
        "recurrents": [],
        "investment_positions": [{"id": "pos-1", "accountId": 2, "bucket": "fixed", "asset_code": "CDB"}],
        "investment_events": [
            {"id": "ev-1", "positionId": "pos-1", "accountId": 2, "date": "2026-03-01",
             "event_type": "contribution", "amount_cents": 1000},
        ],
        "history": [{"id": "h-1", "accountId": 1, "date": "2026-03-01", "balance_cents": 9900, "note": ""}],
    }


@pytest.mark.backup
class TestResolveBackupData:
    """Test the accepted backup shapes and structural checks."""

    def test_envelope_and_bare_shapes_agree(self, backup_collections):
        envelope = {"version": 1, "exported_at": "2026-03-01T10:00:00", "data": backup_collections}

        from_envelope = resolve_backup_data(envelope)
        from_data_key = resolve_backup_data({"data": backup_collections})
        from_bare = resolve_backup_data(backup_collections)

        assert from_envelope == from_data_key == from_bare
        assert summarize_backup(from_envelope) == {
            "accounts": 3,
            "transactions": 1,
            "recurrents": 0,
            "investmentPositions": 1,
            "investmentEvents": 1,
            "history": 1,
        }

    def test_investment_collections_are_optional(self, backup_collections):
        del backup_collections["investment_positions"]
        del backup_collections["investment_events"]
        data = resolve_backup_data(backup_collections)
        assert data.investment_positions == []

    def test_structural_errors_are_collected(self, backup_collections):
        del backup_collections["history"]
        backup_collections["transactions"].append({"id": "", "date": "2026-03-01"})
        backup_collections["accounts"].append({"id": "4", "label": "Text id"})

        with pytest.raises(BackupValidationError) as exc_info:
            resolve_backup_data({"version": 0, "data": backup_collections})

        errors = exc_info.value.errors
        assert "history: missing collection" in errors
        assert "accounts[3].id: expected an integer" in errors
        assert "transactions[1].id: expected a non-empty string" in errors
        assert "transactions[1].accountId: required" in errors
        assert any(error.startswith("version:") for error in errors)

    def test_non_object_rejected(self):
        with pytest.raises(BackupValidationError):
            resolve_backup_data([1, 2, 3])


@pytest.mark.backup
class TestValidateRelations:
    """Test cross-collection checks."""

    def test_duplicates_and_dangling_references(self, backup_collections):
        backup_collections["transactions"].append(
            {"id": "tx-1", "accountId": 9, "destinationAccountId": 8, "date": "2026-03-01", "type": "transfer"}
        )
        backup_collections["investment_events"][0]["positionId"] = "pos-x"

        with pytest.raises(BackupValidationError) as exc_info:
            parse_backup_content(json.dumps(backup_collections))

        errors = exc_info.value.errors
        assert "transactions[1] has a duplicate id (tx-1)." in errors
        assert "transactions[1] references a missing account (9)." in errors
        assert "transactions[1] references a missing destination account (8)." in errors
        assert "investment_events[0] references a missing position (pos-x)." in errors

    def test_invalid_json(self):
        with pytest.raises(BackupValidationError) as exc_info:
            parse_backup_content("{not json")
        assert "Could not read JSON" in str(exc_info.value)


class _RecordingStore(JsonFileStore):
    def __init__(self, db_file):
        super().__init__(db_file)
        self.calls = []

    async def delete(self, collection, record_id):
        self.calls.append(("delete", collection))
        return await super().delete(collection, record_id)

    async def create(self, collection, record):
        self.calls.append(("create", collection))
        return await super().create(collection, record)


@pytest.mark.backup
class TestReplaceData:
    """Test restoring a backup over existing data."""

    @pytest.mark.asyncio
    async def test_replaces_in_dependency_order(self, db_file, backup_collections):
        write_db(db_file, **backup_collections)
        store = _RecordingStore(db_file)
        replacement = BackupData(
            accounts=[{"id": 7, "label": "New", "type": "bank", "balance_cents": 1}],
            history=[{"id": "h-9", "accountId": 7, "date": "2026-04-01", "balance_cents": 1, "note": ""}],
        )

        await replace_data_with_backup(store, replacement)

        deletes = [name for kind, name in store.calls if kind == "delete"]
        assert deletes == [
            "investment_events",
            "investment_positions",
            "transactions",
            "history",
            "accounts",
            "accounts",
            "accounts",
        ]
        creates = [name for kind, name in store.calls if kind == "create"]
        assert creates == ["accounts", "history"]

        data = read_json(db_file)
        assert [a["id"] for a in data["accounts"]] == [7]
        assert data["transactions"] == []

    @pytest.mark.asyncio
    async def test_invalid_backup_leaves_store_untouched(self, db_file, backup_collections):
        write_db(db_file, **backup_collections)
        store = _RecordingStore(db_file)
        before = read_json(db_file)
        broken = BackupData(
            accounts=[{"id": 1, "label": "Only"}],
            transactions=[{"id": "t", "accountId": 2, "date": "2026-03-01", "type": "income"}],
        )

        with pytest.raises(BackupValidationError):
            await replace_data_with_backup(store, broken)

        assert store.calls == []
        assert read_json(db_file) == before

    @pytest.mark.asyncio
    async def test_export_then_restore(self, seeded_app, temp_dir):
        await seeded_app.load_all()
        await seeded_app.ledger.adjust_balance(1, -500, "Coffee")

        path = await seeded_app.export_backup(temp_dir / "backups")

        assert path.name == backup_filename()
        envelope = read_json(path)
        assert envelope["version"] == 1
        assert len(envelope["data"]["history"]) == 1

        await seeded_app.ledger.adjust_balance(1, -9500)
        await seeded_app.restore_backup(parse_backup_file(path))

        assert seeded_app.ledger.find_cached(1).balance_cents == 9500
        assert len(seeded_app.history.items) == 1


@pytest.mark.backup
class TestBackupFiles:
    """Test backup file naming and retention."""

    def test_filename(self):
        assert backup_filename("2026-03-01") == "moneytrack-backup-2026-03-01.json"

    def test_envelope_shape(self):
        envelope = build_backup_envelope(BackupData(), exported_at="2026-03-01T00:00:00")
        assert envelope["version"] == 1
        assert envelope["exported_at"] == "2026-03-01T00:00:00"
        assert set(envelope["data"]) == {
            "accounts",
            "transactions",
            "recurrents",
            "investment_positions",
            "investment_events",
            "history",
        }

    def test_prune_removes_only_old_backups(self, temp_dir):
        for name in (
            "moneytrack-backup-2026-01-01.json",
            "moneytrack-backup-2026-02-25.json",
            "notes.json",
        ):
            (temp_dir / name).write_text("{}")

        removed = prune_backups(temp_dir, retention_days=30, today=date(2026, 3, 1))

        assert [path.name for path in removed] == ["moneytrack-backup-2026-01-01.json"]
        assert sorted(path.name for path in temp_dir.iterdir()) == [
            "moneytrack-backup-2026-02-25.json",
            "notes.json",
        ]

    def test_prune_missing_directory(self, temp_dir):
        assert prune_backups(temp_dir / "absent", retention_days=7) == []

#!/usr/bin/env python3
"""
Backup and Restore

Snapshots all six collections into a versioned JSON envelope and restores a
snapshot by replacing the store's contents.

Restore validates everything first (structure, id uniqueness, references) and
raises a single ``BackupValidationError`` before touching the store. The
replacement itself is a plain ordered sequence of deletes and inserts: it is
not transactional, and a storage failure halfway leaves a partially replaced
store.
"""

import asyncio
import json
import logging
import re
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from pathlib import Path
from typing import Any

from ..core.dates import today_iso
from ..core.errors import BackupValidationError
from ..core.json_utils import write_json
from ..storage.datastore import (
    ACCOUNTS,
    COLLECTIONS,
    HISTORY,
    INVESTMENT_EVENTS,
    INVESTMENT_POSITIONS,
    RECURRENTS,
    TRANSACTIONS,
    CollectionStore,
    Record,
)

logger = logging.getLogger(__name__)

BACKUP_VERSION = 1
BACKUP_FILENAME_PREFIX = "moneytrack-backup-"
BACKUP_FILENAME_PATTERN = re.compile(r"^moneytrack-backup-(\d{4}-\d{2}-\d{2})\.json$")

# Collections that older backups may omit
OPTIONAL_COLLECTIONS = (INVESTMENT_POSITIONS, INVESTMENT_EVENTS)

DELETE_ORDER = (INVESTMENT_EVENTS, INVESTMENT_POSITIONS, TRANSACTIONS, RECURRENTS, HISTORY, ACCOUNTS)
INSERT_ORDER = (ACCOUNTS, TRANSACTIONS, RECURRENTS, INVESTMENT_POSITIONS, INVESTMENT_EVENTS, HISTORY)

# Reference fields every record of a collection must carry
REQUIRED_REFERENCES = {
    TRANSACTIONS: ("accountId",),
    RECURRENTS: ("accountId",),
    INVESTMENT_POSITIONS: ("accountId",),
    INVESTMENT_EVENTS: ("positionId", "accountId"),
    HISTORY: ("accountId",),
}


@dataclass
class BackupData:
    """Records of every collection, as stored."""

    accounts: list[Record] = field(default_factory=list)
    transactions: list[Record] = field(default_factory=list)
    recurrents: list[Record] = field(default_factory=list)
    investment_positions: list[Record] = field(default_factory=list)
    investment_events: list[Record] = field(default_factory=list)
    history: list[Record] = field(default_factory=list)

    def records(self, collection: str) -> list[Record]:
        return getattr(self, collection)

    def to_dict(self) -> dict[str, list[Record]]:
        return {name: self.records(name) for name in COLLECTIONS}


async def collect_backup_data(store: CollectionStore) -> BackupData:
    """Snapshot every collection, reading them concurrently."""
    results = await asyncio.gather(*(store.list(name) for name in COLLECTIONS))
    return BackupData(**dict(zip(COLLECTIONS, results)))


def _is_valid_id(collection: str, value: Any) -> bool:
    if collection == ACCOUNTS:
        return isinstance(value, int) and not isinstance(value, bool)
    return isinstance(value, str) and bool(value)


def _structural_errors(source: dict[str, Any]) -> list[str]:
    errors: list[str] = []
    for name in COLLECTIONS:
        if name not in source:
            if name not in OPTIONAL_COLLECTIONS:
                errors.append(f"{name}: missing collection")
            continue

        items = source[name]
        if not isinstance(items, list):
            errors.append(f"{name}: expected a list, got {type(items).__name__}")
            continue

        for index, item in enumerate(items):
            if not isinstance(item, dict):
                errors.append(f"{name}[{index}]: expected an object")
                continue
            if not _is_valid_id(name, item.get("id")):
                expected = "an integer" if name == ACCOUNTS else "a non-empty string"
                errors.append(f"{name}[{index}].id: expected {expected}")
            for ref in REQUIRED_REFERENCES.get(name, ()):
                if item.get(ref) is None:
                    errors.append(f"{name}[{index}].{ref}: required")
    return errors


def resolve_backup_data(raw: Any) -> BackupData:
    """
    Extract collections from a parsed backup file.

    Accepts the versioned envelope ``{version, exported_at, data}``, a bare
    ``{data: ...}`` object, or the collections object itself. Investment
    collections default to empty when absent.

    Raises:
        BackupValidationError: If the structure is invalid
    """
    if not isinstance(raw, dict):
        raise BackupValidationError(["Backup must be a JSON object"])

    errors: list[str] = []
    if "version" in raw:
        version = raw["version"]
        if not isinstance(version, int) or isinstance(version, bool) or version < 1:
            errors.append(f"version: expected a positive integer, got {version!r}")

    source = raw["data"] if isinstance(raw.get("data"), dict) else raw
    errors.extend(_structural_errors(source))
    if errors:
        raise BackupValidationError(errors)

    return BackupData(**{name: list(source.get(name, [])) for name in COLLECTIONS})


def _duplicate_id_errors(items: list[Record], label: str) -> list[str]:
    seen: set[str] = set()
    errors = []
    for index, item in enumerate(items):
        record_id = str(item.get("id"))
        if record_id in seen:
            errors.append(f"{label}[{index}] has a duplicate id ({record_id}).")
            continue
        seen.add(record_id)
    return errors


def validate_relations(data: BackupData) -> None:
    """
    Check id uniqueness per collection and that every reference resolves.

    Raises:
        BackupValidationError: Listing every violation found
    """
    errors: list[str] = []
    for name in COLLECTIONS:
        errors.extend(_duplicate_id_errors(data.records(name), name))

    account_ids = {account.get("id") for account in data.accounts}
    position_ids = {position.get("id") for position in data.investment_positions}

    def check_account(label: str, index: int, value: Any, what: str = "account") -> None:
        if value not in account_ids:
            errors.append(f"{label}[{index}] references a missing {what} ({value}).")

    for index, tx in enumerate(data.transactions):
        check_account(TRANSACTIONS, index, tx.get("accountId"))
        if tx.get("destinationAccountId") is not None:
            check_account(TRANSACTIONS, index, tx["destinationAccountId"], "destination account")

    for index, recurrent in enumerate(data.recurrents):
        check_account(RECURRENTS, index, recurrent.get("accountId"))

    for index, position in enumerate(data.investment_positions):
        check_account(INVESTMENT_POSITIONS, index, position.get("accountId"))

    for index, event in enumerate(data.investment_events):
        if event.get("positionId") not in position_ids:
            errors.append(f"{INVESTMENT_EVENTS}[{index}] references a missing position ({event.get('positionId')}).")
        check_account(INVESTMENT_EVENTS, index, event.get("accountId"))

    for index, item in enumerate(data.history):
        check_account(HISTORY, index, item.get("accountId"))

    if errors:
        raise BackupValidationError(errors)


def parse_backup_content(content: str) -> BackupData:
    """
    Parse and fully validate backup file content.

    Raises:
        BackupValidationError: If the content is not JSON or is invalid
    """
    try:
        raw = json.loads(content)
    except json.JSONDecodeError as e:
        raise BackupValidationError([f"Could not read JSON: {e}"]) from e

    data = resolve_backup_data(raw)
    validate_relations(data)
    return data


def parse_backup_file(path: str | Path) -> BackupData:
    """Read a backup file from disk and validate it."""
    with open(path, encoding="utf-8") as f:
        return parse_backup_content(f.read())


def build_backup_envelope(data: BackupData, exported_at: str | None = None) -> dict[str, Any]:
    return {
        "version": BACKUP_VERSION,
        "exported_at": exported_at or datetime.now().isoformat(timespec="seconds"),
        "data": data.to_dict(),
    }


def backup_filename(day: str | None = None) -> str:
    return f"{BACKUP_FILENAME_PREFIX}{day or today_iso()}.json"


async def export_backup_json(store: CollectionStore, directory: str | Path) -> Path:
    """
    Write a snapshot of the store to ``directory``.

    Returns:
        Path of the written ``moneytrack-backup-YYYY-MM-DD.json`` file
    """
    data = await collect_backup_data(store)
    path = Path(directory) / backup_filename()
    write_json(path, build_backup_envelope(data))
    logger.info(f"Exported backup to {path} ({summarize_backup(data)})")
    return path


def prune_backups(directory: str | Path, retention_days: int, today: date | None = None) -> list[Path]:
    """
    Delete exported backups older than ``retention_days``.

    Only files named like exported backups are considered.

    Returns:
        Paths that were removed
    """
    directory = Path(directory)
    if not directory.exists():
        return []

    cutoff = (today or date.today()) - timedelta(days=retention_days)
    removed = []
    for path in sorted(directory.iterdir()):
        match = BACKUP_FILENAME_PATTERN.match(path.name)
        if not match:
            continue
        try:
            exported_on = date.fromisoformat(match.group(1))
        except ValueError:
            logger.warning(f"Skipping backup with invalid date in name: {path.name}")
            continue
        if exported_on < cutoff:
            path.unlink()
            removed.append(path)

    if removed:
        logger.info(f"Pruned {len(removed)} backup(s) older than {retention_days} days")
    return removed


async def replace_data_with_backup(store: CollectionStore, data: BackupData) -> None:
    """
    Replace everything in the store with the backup's records.

    Validation runs first; an invalid backup leaves the store untouched.
    Current records are then deleted (events, positions, transactions,
    recurrents, history, accounts) and the backup inserted (accounts,
    transactions, recurrents, positions, events, history), one record at a
    time.

    Raises:
        BackupValidationError: If the backup is invalid
    """
    validate_relations(data)
    current = await collect_backup_data(store)

    for name in DELETE_ORDER:
        for record in current.records(name):
            await store.delete(name, record["id"])

    for name in INSERT_ORDER:
        for record in data.records(name):
            await store.create(name, record)

    logger.info(f"Restored backup ({summarize_backup(data)})")


def summarize_backup(data: BackupData) -> dict[str, int]:
    """Record counts per collection."""
    return {
        "accounts": len(data.accounts),
        "transactions": len(data.transactions),
        "recurrents": len(data.recurrents),
        "investmentPositions": len(data.investment_positions),
        "investmentEvents": len(data.investment_events),
        "history": len(data.history),
    }

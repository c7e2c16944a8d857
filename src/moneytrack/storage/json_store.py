#!/usr/bin/env python3
"""
JSON File Store

CollectionStore implementation keeping every collection in one pretty-printed
JSON document (``db.json``). Each operation reads the file, applies the change
and writes it back, mirroring a json-server style backend.
"""

from __future__ import annotations

import asyncio
import copy
import logging
from pathlib import Path
from typing import Any

from ..core.errors import RecordNotFoundError
from ..core.json_utils import read_json, write_json
from .datastore import ACCOUNTS, COLLECTIONS, Collection, Record

logger = logging.getLogger(__name__)


def _matches(record: Record, filters: dict[str, Any]) -> bool:
    # Equality on string forms, so "1" matches 1
    return all(str(record.get(key)) == str(value) for key, value in filters.items())


class JsonFileStore:
    """
    CollectionStore over a single JSON file.

    Records handed out are deep copies: mutating a returned dict never changes
    stored data.
    """

    def __init__(self, db_file: Path):
        """
        Initialize the store.

        Args:
            db_file: Path to the JSON document; created empty when missing
        """
        self.db_file = Path(db_file)
        if not self.db_file.exists():
            write_json(self.db_file, {name: [] for name in COLLECTIONS})
            logger.info(f"Created empty data file: {self.db_file}")

    def collection(self, name: str) -> Collection:
        """Get a handle bound to one collection."""
        return Collection(self, name)

    def _read(self) -> dict[str, list[Record]]:
        data = read_json(self.db_file)
        if not isinstance(data, dict):
            raise ValueError(f"Invalid data file format: expected object, got {type(data).__name__}")
        return data

    def _write(self, data: dict[str, list[Record]]) -> None:
        write_json(self.db_file, data)

    @staticmethod
    def _find_index(items: list[Record], record_id: Any) -> int:
        for index, item in enumerate(items):
            if str(item.get("id")) == str(record_id):
                return index
        return -1

    async def list(self, collection: str, filters: dict[str, Any] | None = None) -> list[Record]:
        await asyncio.sleep(0)
        items = self._read().get(collection, [])
        if filters:
            items = [item for item in items if _matches(item, filters)]
        return copy.deepcopy(items)

    async def get(self, collection: str, record_id: Any) -> Record:
        await asyncio.sleep(0)
        items = self._read().get(collection, [])
        index = self._find_index(items, record_id)
        if index == -1:
            raise RecordNotFoundError(collection, record_id)
        return copy.deepcopy(items[index])

    async def create(self, collection: str, record: Record) -> Record:
        await asyncio.sleep(0)
        data = self._read()
        items = data.setdefault(collection, [])
        record = copy.deepcopy(record)

        if record.get("id") is None:
            if collection != ACCOUNTS:
                raise ValueError(f"{collection} records require a caller-supplied id")
            max_id = max((item["id"] for item in items if isinstance(item.get("id"), int)), default=0)
            record["id"] = max_id + 1
        elif self._find_index(items, record["id"]) != -1:
            raise ValueError(f"{collection} record already exists: {record['id']}")

        items.append(record)
        self._write(data)
        return copy.deepcopy(record)

    async def patch(self, collection: str, record_id: Any, partial: Record) -> Record:
        await asyncio.sleep(0)
        data = self._read()
        items = data.get(collection, [])
        index = self._find_index(items, record_id)
        if index == -1:
            raise RecordNotFoundError(collection, record_id)

        items[index] = {**items[index], **copy.deepcopy(partial)}
        self._write(data)
        return copy.deepcopy(items[index])

    async def delete(self, collection: str, record_id: Any) -> Record | None:
        await asyncio.sleep(0)
        data = self._read()
        items = data.get(collection, [])
        index = self._find_index(items, record_id)
        if index == -1:
            return None

        removed = items.pop(index)
        self._write(data)
        return removed

    def item_count(self) -> int:
        """Total number of records across all collections."""
        return sum(len(items) for items in self._read().values() if isinstance(items, list))

    def summary_text(self) -> str:
        """Human-readable summary of the stored data."""
        data = self._read()
        counts = ", ".join(f"{len(data.get(name, []))} {name}" for name in COLLECTIONS)
        return f"{self.db_file}: {counts}"

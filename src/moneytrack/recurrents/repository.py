#!/usr/bin/env python3
"""
Recurrent Repository

CRUD over the ``recurrents`` collection with an in-memory cache.
"""

import logging
import uuid
from typing import Any

from ..core.errors import InvariantViolationError
from ..core.models import Recurrent, RecurrentKind
from ..storage.datastore import Collection

logger = logging.getLogger(__name__)


class RecurrentRepository:
    """Owns recurrent bills and incomes."""

    def __init__(self, recurrents: Collection):
        self._recurrents = recurrents
        self.recurrents: list[Recurrent] = []

    async def load_recurrents(self) -> list[Recurrent]:
        self.recurrents = [Recurrent.from_dict(record) for record in await self._recurrents.list()]
        return self.recurrents

    async def get_recurrent(self, recurrent_id: str) -> Recurrent:
        """
        Get a recurrent, preferring the cache.

        Raises:
            RecordNotFoundError: If the recurrent does not exist
        """
        for recurrent in self.recurrents:
            if recurrent.id == recurrent_id:
                return recurrent
        return Recurrent.from_dict(await self._recurrents.get(recurrent_id))

    async def add_recurrent(self, data: dict[str, Any]) -> Recurrent:
        """Create a recurrent from a stored-shape record, assigning its id."""
        recurrent = Recurrent.from_dict({**data, "id": str(uuid.uuid4())})
        if recurrent.reference_day is None:
            day_field = "due_day" if recurrent.kind is RecurrentKind.EXPENSE else "day_of_month"
            raise InvariantViolationError(f"recurrent {recurrent.name!r} needs a {day_field}")

        created = Recurrent.from_dict(await self._recurrents.create(recurrent.to_dict()))
        self.recurrents.append(created)
        logger.info(f"Created recurrent {created.id} ({created.name})")
        return created

    async def update_recurrent(self, recurrent_id: str, patch: dict[str, Any]) -> Recurrent:
        if "id" in patch:
            raise InvariantViolationError(f"recurrents record {recurrent_id}: id cannot be edited")

        updated = Recurrent.from_dict(await self._recurrents.patch(recurrent_id, patch))
        self.recurrents = [updated if r.id == recurrent_id else r for r in self.recurrents]
        return updated

    async def delete_recurrent(self, recurrent_id: str) -> None:
        await self._recurrents.delete(recurrent_id)
        self.recurrents = [r for r in self.recurrents if r.id != recurrent_id]

    def active(self) -> list[Recurrent]:
        return [r for r in self.recurrents if r.active]

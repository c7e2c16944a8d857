#!/usr/bin/env python3
"""
Investment Position Repository

CRUD over ``investment_positions``. Derived totals are rejected on the public
create/update paths and are written only through ``apply_derived``.
"""

import logging
import uuid
from typing import Any

from ..core.errors import InvariantViolationError
from ..core.models import ALL_DERIVED_FIELDS, InvestmentPosition, position_from_dict
from ..storage.datastore import Collection
from .recompute import FixedTotals, VariableTotals

logger = logging.getLogger(__name__)

IMMUTABLE_POSITION_FIELDS = ("id", "bucket")


class PositionRepository:
    """Owns investment positions and their in-memory cache."""

    def __init__(self, positions: Collection):
        self._positions = positions
        self.positions: list[InvestmentPosition] = []

    async def load_positions(self) -> list[InvestmentPosition]:
        self.positions = [position_from_dict(record) for record in await self._positions.list()]
        return self.positions

    def find_cached(self, position_id: str) -> InvestmentPosition | None:
        for position in self.positions:
            if position.id == position_id:
                return position
        return None

    def _store_cached(self, position: InvestmentPosition) -> None:
        for index, cached in enumerate(self.positions):
            if cached.id == position.id:
                self.positions[index] = position
                return
        self.positions.append(position)

    async def get_position(self, position_id: str) -> InvestmentPosition:
        """
        Current stored state of a position.

        Raises:
            RecordNotFoundError: If the position does not exist
        """
        return position_from_dict(await self._positions.get(position_id))

    async def add_position(self, data: dict[str, Any]) -> InvestmentPosition:
        """
        Create a position with zeroed totals.

        Raises:
            InvariantViolationError: If derived totals are supplied
            ValueError: If the bucket is missing or unknown
        """
        derived = sorted(ALL_DERIVED_FIELDS & data.keys())
        if derived:
            raise InvariantViolationError(f"Derived fields cannot be set directly: {', '.join(derived)}")

        position = position_from_dict({**data, "id": str(uuid.uuid4())})
        created = position_from_dict(await self._positions.create(position.to_dict()))
        self.positions.append(created)
        logger.info(f"Created {created.bucket.value} position {created.id} ({created.asset_code})")
        return created

    async def update_position(self, position_id: str, patch: dict[str, Any]) -> InvestmentPosition:
        """
        Update descriptive fields of a position.

        Raises:
            InvariantViolationError: If the patch touches derived totals, the id or the bucket
            RecordNotFoundError: If the position does not exist
        """
        rejected = sorted((ALL_DERIVED_FIELDS | set(IMMUTABLE_POSITION_FIELDS)) & patch.keys())
        if rejected:
            raise InvariantViolationError(
                f"investment_positions record {position_id}: cannot edit {', '.join(rejected)}"
            )

        updated = position_from_dict(await self._positions.patch(position_id, patch))
        self._store_cached(updated)
        return updated

    async def apply_derived(self, position_id: str, totals: VariableTotals | FixedTotals) -> InvestmentPosition:
        """Write recomputed totals onto a position."""
        updated = position_from_dict(await self._positions.patch(position_id, totals.to_patch()))
        self._store_cached(updated)
        logger.debug(f"Recomputed position {position_id}: {totals}")
        return updated

    async def delete_position(self, position_id: str) -> None:
        await self._positions.delete(position_id)
        self.positions = [p for p in self.positions if p.id != position_id]

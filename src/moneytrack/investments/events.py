#!/usr/bin/env python3
"""
Investment Event Engine

Adds, edits and deletes investment events. After every change the affected
positions are recomputed by full replay, then the event's cash effect is
mirrored into the Account Ledger.
"""

import copy
import logging
import uuid
from datetime import datetime
from typing import Any

from ..core.errors import InvariantViolationError
from ..core.fanout import gather_outcomes, summarize_outcomes
from ..core.models import BatchResult, InvestmentEvent, InvestmentPosition
from ..ledger.accounts import AccountLedger
from ..storage.datastore import Collection
from .positions import PositionRepository
from .recompute import cash_delta_for_event, cash_effect_label, replay_position, sort_events

logger = logging.getLogger(__name__)


class InvestmentEventEngine:
    """Owns ``investment_events`` and keeps positions and cash in step with them."""

    def __init__(self, events: Collection, positions: PositionRepository, ledger: AccountLedger):
        self._events = events
        self.positions = positions
        self.ledger = ledger
        self.events: list[InvestmentEvent] = []

    async def load_events(self) -> list[InvestmentEvent]:
        self.events = [InvestmentEvent.from_dict(record) for record in await self._events.list()]
        return self.events

    def list_by_position(self, position_id: str) -> list[InvestmentEvent]:
        """Cached events of one position in replay order."""
        return sort_events(event for event in self.events if event.position_id == position_id)

    def find_cached(self, event_id: str) -> InvestmentEvent | None:
        for event in self.events:
            if event.id == event_id:
                return event
        return None

    def _store_cached(self, event: InvestmentEvent) -> None:
        for index, cached in enumerate(self.events):
            if cached.id == event.id:
                self.events[index] = event
                return
        self.events.append(event)

    async def get_event(self, event_id: str) -> InvestmentEvent:
        """
        Current state of an event, fetched from storage when not cached.

        Raises:
            RecordNotFoundError: If the event does not exist
        """
        cached = self.find_cached(event_id)
        if cached is not None:
            return cached
        return InvestmentEvent.from_dict(await self._events.get(event_id))

    async def recompute_position(self, position_id: str) -> InvestmentPosition:
        """
        Replay every stored event of a position and write the derived totals.

        Raises:
            RecordNotFoundError: If the position does not exist
        """
        position = await self.positions.get_position(position_id)
        records = await self._events.list({"positionId": position_id})
        events = [InvestmentEvent.from_dict(record) for record in records]
        totals = replay_position(position.bucket, events)
        return await self.positions.apply_derived(position_id, totals)

    async def adjust_account_for_event(self, event: InvestmentEvent, reverse: bool = False) -> int:
        """
        Mirror an event's cash effect into its account.

        Args:
            event: Event whose effect is applied
            reverse: Apply the negated effect (deleting or replacing the event)

        Returns:
            The delta applied; 0 when the event moves no cash
        """
        delta = cash_delta_for_event(event)
        if reverse:
            delta = -delta
        if delta == 0:
            return 0

        await self.ledger.adjust_balance(event.account_id, delta, cash_effect_label(event.event_type))
        return delta

    async def add_event(self, data: dict[str, Any]) -> InvestmentEvent:
        """
        Record an event, recompute its position and apply its cash effect.

        ``accountId`` defaults to the position's account.

        Raises:
            RecordNotFoundError: If the position does not exist
        """
        position = await self.positions.get_position(data["positionId"])
        record = {"accountId": position.account_id, **data, "id": str(uuid.uuid4())}
        record.setdefault("createdAt", datetime.now().isoformat(timespec="seconds"))
        event = InvestmentEvent.from_dict(record)

        created = InvestmentEvent.from_dict(await self._events.create(event.to_dict()))
        self.events.append(created)

        await self.recompute_position(created.position_id)
        await self.adjust_account_for_event(created)
        logger.info(f"Added {created.event_type.value} event {created.id} on position {created.position_id}")
        return created

    async def update_event(self, event_id: str, patch: dict[str, Any]) -> InvestmentEvent:
        """
        Edit an event.

        The original cash effect is reversed before the new one is applied;
        when the event moves to another position both positions are
        recomputed.

        Raises:
            RecordNotFoundError: If the event or its new position does not exist
            InvariantViolationError: If the patch changes the id
        """
        if "id" in patch and patch["id"] != event_id:
            raise InvariantViolationError(f"investment_events record {event_id}: id cannot be edited")

        original = copy.deepcopy(await self.get_event(event_id))
        merged = InvestmentEvent.from_dict({**original.to_dict(), **patch})
        if merged.position_id != original.position_id:
            await self.positions.get_position(merged.position_id)

        updated = InvestmentEvent.from_dict(await self._events.patch(event_id, patch))
        self._store_cached(updated)

        for position_id in dict.fromkeys((original.position_id, updated.position_id)):
            await self.recompute_position(position_id)

        await self.adjust_account_for_event(original, reverse=True)
        await self.adjust_account_for_event(updated)
        return updated

    async def delete_event(self, event_id: str) -> InvestmentEvent:
        """
        Delete an event, recompute its position and reverse its cash effect.

        Raises:
            RecordNotFoundError: If the event does not exist
        """
        event = copy.deepcopy(await self.get_event(event_id))
        await self._events.delete(event_id)
        self.events = [e for e in self.events if e.id != event_id]

        await self.recompute_position(event.position_id)
        await self.adjust_account_for_event(event, reverse=True)
        logger.info(f"Deleted event {event_id} from position {event.position_id}")
        return event

    async def delete_position(self, position_id: str) -> int:
        """
        Delete a position after deleting (and reversing) each of its events.

        Returns:
            Number of events deleted
        """
        await self.positions.get_position(position_id)
        records = await self._events.list({"positionId": position_id})
        for event in sort_events(InvestmentEvent.from_dict(record) for record in records):
            await self.delete_event(event.id)

        await self.positions.delete_position(position_id)
        logger.info(f"Deleted position {position_id} with {len(records)} event(s)")
        return len(records)

    async def recompute_all_positions(self) -> BatchResult:
        """
        Recompute every stored position concurrently.

        A failing position is logged and counted; it never stops the others.
        """
        positions = await self.positions.load_positions()
        outcomes = await gather_outcomes(
            (f"investment_positions/{position.id}", self.recompute_position(position.id))
            for position in positions
        )
        result = summarize_outcomes(outcomes)
        if result.failed:
            logger.warning(f"Recomputed {result.succeeded}/{result.total} positions, {result.failed} failed")
        else:
            logger.info(f"Recomputed {result.total} positions")
        return result

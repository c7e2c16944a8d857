#!/usr/bin/env python3
"""
Recurrent Projector

Read-only predicates answering, per calendar month, whether a recurrent
bill/income has already been materialized into a transaction. Nothing here
creates transactions; materialization only happens through
``TransactionEngine.pay_recurrent``.
"""

import logging
from typing import Protocol

from ..core.dates import date_for_day, month_key, parse_month_key
from ..core.errors import InvariantViolationError
from ..core.models import Recurrent, Transaction

logger = logging.getLogger(__name__)


class TransactionSource(Protocol):
    """Anything exposing the current transaction cache."""

    transactions: list[Transaction]


def in_month(tx: Transaction, month: str) -> bool:
    """
    Whether a transaction falls in ``month``.

    Matches on the normalized month key first, then on the raw date's first
    seven characters so records stored with impossible days (``2026-02-30``)
    or otherwise malformed dates still count.
    """
    return month_key(tx.date) == month or tx.date[:7] == month


def resolve_recurrent_date(recurrent: Recurrent, month: str) -> str:
    """
    Calendar date a recurrent falls on in ``month``.

    The reference day (``due_day`` for expenses, ``day_of_month`` for income)
    is clamped to the month length.

    Raises:
        InvariantViolationError: If the recurrent has no reference day
        ValueError: If ``month`` is not a YYYY-MM key
    """
    year, month_number = parse_month_key(month)
    day = recurrent.reference_day
    if day is None:
        raise InvariantViolationError(f"recurrents record {recurrent.id} has no reference day")
    return date_for_day(year, month_number, day)


class RecurrentProjector:
    """Month-level materialization checks over a transaction cache."""

    def __init__(self, source: TransactionSource):
        self._source = source

    def find_recurrent_transaction(self, recurrent_id: str, month: str) -> Transaction | None:
        for tx in self._source.transactions:
            if tx.recurrent_id == recurrent_id and in_month(tx, month):
                return tx
        return None

    def has_recurrent_transaction(self, recurrent_id: str, month: str) -> bool:
        return self.find_recurrent_transaction(recurrent_id, month) is not None

    def is_resolved_in_month(self, recurrent_id: str, month: str) -> bool:
        """Whether a paid materialization exists for the month."""
        return any(
            tx.paid and tx.recurrent_id == recurrent_id and in_month(tx, month)
            for tx in self._source.transactions
        )

    def unpaid_for_month(self, month: str) -> list[Transaction]:
        return [tx for tx in self._source.transactions if not tx.paid and month_key(tx.date) == month]

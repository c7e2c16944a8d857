#!/usr/bin/env python3
"""
Investment Event Replay

Derives a position's totals by replaying its events in order. Replay is always
a full pass over every event; nothing is patched incrementally.

Variable bucket (quantity / average cost):
- buy: quantity += qty, cost += amount + fees
- sell: cost -= average cost (taken before the sale) * qty, floored at 0 and
  rounded to the cent; quantity -= qty, floored at 0
- avg_cost = cost / quantity when quantity > 0, unset otherwise (written as
  null so a previously stored average is cleared)

Fixed bucket (principal / current value):
- contribution adds to principal and value
- income adds to value only
- withdrawal and maturity subtract from both
- both floored at 0; invested mirrors value

Intermediate values are exact fractions; every rounding is half-up to the cent.
"""

import math
from collections.abc import Iterable
from dataclasses import dataclass
from fractions import Fraction
from typing import Any

from ..core.models import EventType, InvestmentBucket, InvestmentEvent

CASH_EFFECT_LABELS = {
    EventType.BUY: "Investment purchase",
    EventType.SELL: "Investment sale",
    EventType.CONTRIBUTION: "Investment contribution",
    EventType.WITHDRAWAL: "Investment withdrawal",
    EventType.MATURITY: "Investment maturity",
}

# Sign of the cash effect on the owning account
CASH_EFFECT_SIGNS = {
    EventType.BUY: -1,
    EventType.CONTRIBUTION: -1,
    EventType.SELL: 1,
    EventType.WITHDRAWAL: 1,
    EventType.MATURITY: 1,
    EventType.INCOME: 0,
}


def round_half_up(value: Fraction) -> int:
    """Round an exact value to the nearest integer, halves going up."""
    return math.floor(value + Fraction(1, 2))


def _exact(number: float | int | None) -> Fraction:
    if number is None:
        return Fraction(0)
    # str() keeps the decimal the user typed (0.1 stays 1/10)
    return Fraction(str(number))


def _plain_number(value: Fraction) -> int | float:
    if value.denominator == 1:
        return int(value)
    return float(value)


@dataclass
class VariableTotals:
    quantity_total: int | float
    avg_cost_cents: int | None
    invested_cents: int

    def to_patch(self) -> dict[str, Any]:
        # An unset average is sent as None; the store keeps it as null and
        # position_from_dict reads it back as unset.
        return {
            "quantity_total": self.quantity_total,
            "avg_cost_cents": self.avg_cost_cents,
            "invested_cents": self.invested_cents,
        }


@dataclass
class FixedTotals:
    principal_cents: int
    current_value_cents: int
    invested_cents: int

    def to_patch(self) -> dict[str, Any]:
        return {
            "principal_cents": self.principal_cents,
            "current_value_cents": self.current_value_cents,
            "invested_cents": self.invested_cents,
        }


def sort_events(events: Iterable[InvestmentEvent]) -> list[InvestmentEvent]:
    """Order events by date; same-day events keep their insertion order."""
    return sorted(events, key=lambda event: event.date)


def replay_variable(events: Iterable[InvestmentEvent]) -> VariableTotals:
    """
    Replay buy/sell events of a quantity-based position.

    Example:
        buy 10 for 10000 + 1000 fees, buy 10 for 20000, sell 5
        -> quantity 15, avg cost 1550, invested 23250
    """
    quantity = Fraction(0)
    cost = Fraction(0)

    for event in sort_events(events):
        qty = _exact(event.quantity)
        if event.event_type is EventType.BUY:
            quantity += qty
            cost += event.amount_cents + (event.fees_cents or 0)
        elif event.event_type is EventType.SELL:
            if qty > 0 and quantity > 0:
                avg_cost = cost / quantity
                cost = Fraction(max(0, round_half_up(cost - avg_cost * qty)))
            quantity = max(Fraction(0), quantity - qty)

    avg_cost_cents = round_half_up(cost / quantity) if quantity > 0 else 0
    return VariableTotals(
        quantity_total=_plain_number(quantity),
        avg_cost_cents=avg_cost_cents or None,
        invested_cents=max(0, round_half_up(cost)),
    )


def replay_fixed(events: Iterable[InvestmentEvent]) -> FixedTotals:
    """
    Replay the events of a principal-based position.

    Example:
        contribution 10000, income 1000, withdrawal 3000
        -> principal 7000, current value 8000, invested 8000
    """
    principal = 0
    value = 0

    for event in sort_events(events):
        if event.event_type is EventType.CONTRIBUTION:
            principal += event.amount_cents
            value += event.amount_cents
        elif event.event_type is EventType.INCOME:
            value += event.amount_cents
        elif event.event_type in (EventType.WITHDRAWAL, EventType.MATURITY):
            principal -= event.amount_cents
            value -= event.amount_cents

    current_value = max(0, value)
    return FixedTotals(
        principal_cents=max(0, principal),
        current_value_cents=current_value,
        invested_cents=current_value,
    )


def replay_position(bucket: InvestmentBucket, events: Iterable[InvestmentEvent]) -> VariableTotals | FixedTotals:
    if bucket is InvestmentBucket.VARIABLE:
        return replay_variable(events)
    return replay_fixed(events)


def cash_delta_for_event(event: InvestmentEvent) -> int:
    """
    Signed cash effect of an event on its account.

    Buys and contributions take cash out, sells, withdrawals and maturities
    bring it back. Income stays inside the position. Fees are not part of the
    cash effect.
    """
    return CASH_EFFECT_SIGNS[event.event_type] * event.amount_cents


def cash_effect_label(event_type: EventType) -> str:
    return CASH_EFFECT_LABELS.get(event_type, "Investment event")

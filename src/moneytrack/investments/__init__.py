"""
Investments Package

Positions, their events, and replay of events into derived totals.
"""

from .events import InvestmentEventEngine
from .positions import PositionRepository
from .recompute import (
    FixedTotals,
    VariableTotals,
    cash_delta_for_event,
    cash_effect_label,
    replay_fixed,
    replay_position,
    replay_variable,
    sort_events,
)

__all__ = [
    "FixedTotals",
    "InvestmentEventEngine",
    "PositionRepository",
    "VariableTotals",
    "cash_delta_for_event",
    "cash_effect_label",
    "replay_fixed",
    "replay_position",
    "replay_variable",
    "sort_events",
]

"""
Recurrents Package

Monthly bills and incomes, and the checks deciding whether a month has
already been materialized.
"""

from .projector import RecurrentProjector, in_month, resolve_recurrent_date
from .repository import RecurrentRepository

__all__ = [
    "RecurrentProjector",
    "RecurrentRepository",
    "in_month",
    "resolve_recurrent_date",
]

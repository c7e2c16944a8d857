#!/usr/bin/env python3
"""
Installment Planning

Pure helpers turning an installment purchase request into per-installment
amounts and dates. The engine persists the plan and applies the ledger effect.
"""

from dataclasses import dataclass, field

from ..core.currency import split_amount
from ..core.dates import add_months
from ..core.models import PaymentMethod, TransactionType


@dataclass
class InstallmentRequest:
    """
    A purchase to split into monthly installments.

    Give ``amount_cents`` (per installment), ``total_amount_cents``, or both.
    With both, the last installment absorbs the difference so the group sums
    to the total exactly.
    """

    account_id: int
    date: str
    product: str
    total_installments: int
    type: TransactionType = TransactionType.EXPENSE
    amount_cents: int | None = None
    total_amount_cents: int | None = None
    payment_method: PaymentMethod | None = None
    category: str | None = None
    description: str | None = None
    tags: list[str] = field(default_factory=list)
    paid: bool | None = None


def plan_installment_amounts(request: InstallmentRequest) -> list[int]:
    """
    Amount of each installment, in order.

    Raises:
        ValueError: If the count is below 1, no amount was given, or the total
            leaves the last installment with the opposite sign
    """
    count = request.total_installments
    if count < 1:
        raise ValueError(f"Installment count must be at least 1, got {count}")

    per_installment = request.amount_cents
    total = request.total_amount_cents

    if per_installment is not None and total is not None:
        remainder = total - per_installment * (count - 1)
        if remainder * total < 0:
            raise ValueError(
                f"Total {total} is smaller than {count - 1} installments of {per_installment}"
            )
        return [per_installment] * (count - 1) + [remainder]
    if total is not None:
        return split_amount(total, count)
    if per_installment is not None:
        return [per_installment] * count
    raise ValueError("Installment request needs amount_cents or total_amount_cents")


def plan_installment_dates(start_date: str, count: int) -> list[str]:
    """Monthly dates starting at ``start_date``, clamped to each month's length."""
    return [start_date] + [add_months(start_date, offset) for offset in range(1, count)]

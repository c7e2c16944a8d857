#!/usr/bin/env python3
"""
Credit Card Invoice Cycle

Pure date arithmetic mapping a purchase date and a card's closing/due days to
the invoice it is billed on.

Cycle rule:
- purchase on or after the closing day -> next month's invoice
- purchase before the closing day -> current month's invoice

Day values are truncated and clamped into the month (a closing day of 31 in
February closes on the 28th/29th); no value ever overflows into an adjacent
month.
"""

from ..core.dates import (
    LooseDate,
    clamp_day,
    date_for_day,
    month_from_parts,
    parse_iso_date_loose,
    shift_year_month,
)


def _closing_cycle(parsed: LooseDate, closing_day: int) -> tuple[int, int]:
    effective_closing_day = clamp_day(parsed.year, parsed.month, closing_day)
    if parsed.day >= effective_closing_day:
        return shift_year_month(parsed.year, parsed.month, 1)
    return parsed.year, parsed.month


def compute_credit_invoice_cycle_month(purchase_date: str, closing_day: int | None = None) -> str | None:
    """
    Month (YYYY-MM) of the invoice cycle a credit purchase belongs to.

    Args:
        purchase_date: Purchase date (YYYY-MM-DD)
        closing_day: Card closing day, or None when the card has none

    Returns:
        Cycle month key, or None for a malformed date

    Examples:
        compute_credit_invoice_cycle_month("2026-02-27", 28) -> "2026-02"
        compute_credit_invoice_cycle_month("2026-02-28", 28) -> "2026-03"
    """
    parsed = parse_iso_date_loose(purchase_date)
    if parsed is None:
        return None

    if not closing_day:
        return month_from_parts(parsed.year, parsed.month)

    year, month = _closing_cycle(parsed, closing_day)
    return month_from_parts(year, month)


def compute_credit_invoice_due_date(
    purchase_date: str,
    due_day: int,
    closing_day: int | None = None,
) -> str | None:
    """
    Due date of the invoice a credit purchase is billed on.

    Without a closing day the invoice is due on ``due_day`` of the month after
    the purchase. With one, the closing cycle is resolved first; the invoice is
    due inside the cycle month when ``due_day > closing_day``, otherwise in the
    month after it.

    Args:
        purchase_date: Purchase date (YYYY-MM-DD)
        due_day: Card due day
        closing_day: Card closing day, or None when the card has none

    Returns:
        Due date (YYYY-MM-DD), or None for a malformed date

    Examples:
        compute_credit_invoice_due_date("2026-02-27", 3, 28) -> "2026-03-03"
        compute_credit_invoice_due_date("2026-02-28", 3, 28) -> "2026-04-03"
    """
    parsed = parse_iso_date_loose(purchase_date)
    if parsed is None:
        return None

    if not closing_day:
        year, month = shift_year_month(parsed.year, parsed.month, 1)
        return date_for_day(year, month, due_day)

    cycle_year, cycle_month = _closing_cycle(parsed, closing_day)

    if due_day > closing_day:
        year, month = cycle_year, cycle_month
    else:
        year, month = shift_year_month(cycle_year, cycle_month, 1)

    return date_for_day(year, month, due_day)

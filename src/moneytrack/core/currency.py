#!/usr/bin/env python3
"""
Currency Formatting and Handling Utilities

All money in moneytrack is stored as integer cents. This module converts between
cents and the display form used by the application ("R$ 1.234,56"), and provides
remainder-safe splitting for installment plans.

Key Principles:
- Never use floating-point arithmetic for currency calculations
- Always use integer arithmetic (cents)
- When a total is split, the last item absorbs the remainder
"""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

CURRENCY_SYMBOL = "R$"


def cents_to_decimal_str(cents: int) -> str:
    """
    Convert cents to a plain decimal string using integer arithmetic.

    Example:
        cents_to_decimal_str(123456) -> "1234.56"
    """
    is_negative = cents < 0
    abs_cents = abs(int(cents))

    whole = abs_cents // 100
    remainder = abs_cents % 100

    if is_negative:
        return f"-{whole}.{remainder:02d}"
    return f"{whole}.{remainder:02d}"


def format_cents(cents: int) -> str:
    """
    Format cents for display with thousands separators.

    Examples:
        format_cents(123456) -> "R$ 1.234,56"
        format_cents(-500) -> "-R$ 5,00"
    """
    abs_cents = abs(int(cents))
    whole = abs_cents // 100
    remainder = abs_cents % 100

    grouped = f"{whole:,}".replace(",", ".")
    formatted = f"{CURRENCY_SYMBOL} {grouped},{remainder:02d}"
    return f"-{formatted}" if cents < 0 else formatted


def parse_amount_to_cents(text: str) -> int:
    """
    Parse a user-entered amount into cents.

    Accepts the comma-decimal form ("1.234,56", "1234,56") as well as the
    dot-decimal form ("1234.56"), with or without the currency symbol.
    Returns 0 for input that cannot be parsed.

    Examples:
        parse_amount_to_cents("R$ 1.234,56") -> 123456
        parse_amount_to_cents("1234.56") -> 123456
        parse_amount_to_cents("abc") -> 0
    """
    cleaned = str(text).replace(CURRENCY_SYMBOL, "").replace(" ", "").strip()
    if not cleaned:
        return 0

    if "," in cleaned:
        # Comma is the decimal separator, dots are thousands separators
        cleaned = cleaned.replace(".", "").replace(",", ".")

    try:
        value = Decimal(cleaned)
    except InvalidOperation:
        return 0
    if not value.is_finite():
        return 0

    cents = (value * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    return int(cents)


def split_amount(total_cents: int, count: int) -> list[int]:
    """
    Split a total into ``count`` parts; the last part absorbs the remainder.

    The division truncates toward zero so negative totals (expenses) split the
    same way as positive ones.

    Example:
        split_amount(10000, 3) -> [3333, 3333, 3334]
    """
    if count < 1:
        raise ValueError("count must be a positive integer")

    sign = -1 if total_cents < 0 else 1
    base = sign * (abs(total_cents) // count)
    return allocate_remainder([base] * count, total_cents)


def allocate_remainder(amounts: list[int], total: int) -> list[int]:
    """
    Adjust the last amount so the list sums exactly to ``total``.

    Args:
        amounts: Calculated amounts before remainder allocation
        total: Target total the amounts must sum to

    Returns:
        New list with the remainder allocated to the last item
    """
    if not amounts:
        return amounts

    amounts_copy = amounts.copy()
    amounts_copy[-1] = total - sum(amounts_copy[:-1])
    return amounts_copy


def validate_sum_equals_total(amounts: list[int], total: int) -> bool:
    """Check that split amounts sum exactly to the expected total."""
    return sum(amounts) == total

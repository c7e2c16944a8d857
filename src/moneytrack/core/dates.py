#!/usr/bin/env python3
"""
Date Helpers

All dates in moneytrack are ISO strings (YYYY-MM-DD) and months are month keys
(YYYY-MM). Arithmetic here is month-length safe: a day that does not exist in
the target month is clamped to the month's last day instead of overflowing
into the next month.
"""

import calendar
import re
from dataclasses import dataclass
from datetime import date

_ISO_DATE_RE = re.compile(r"^(\d{4})-(\d{2})-(\d{2})$")


@dataclass(frozen=True)
class LooseDate:
    """Year/month/day parsed from an ISO string with the day already clamped."""

    year: int
    month: int
    day: int

    def to_iso_string(self) -> str:
        return f"{self.year:04d}-{self.month:02d}-{self.day:02d}"


def days_in_month(year: int, month: int) -> int:
    """Number of days in the given month (1-based)."""
    return calendar.monthrange(year, month)[1]


def clamp_day(year: int, month: int, day: int | float) -> int:
    """Truncate ``day`` to an integer and clamp it into ``[1, days_in_month]``."""
    return min(max(int(day), 1), days_in_month(year, month))


def date_for_day(year: int, month: int, day: int | float) -> str:
    """Build an ISO date for ``day`` in the month, clamping the day."""
    safe_day = clamp_day(year, month, day)
    return f"{year:04d}-{month:02d}-{safe_day:02d}"


def month_from_parts(year: int, month: int) -> str:
    return f"{year:04d}-{month:02d}"


def shift_year_month(year: int, month: int, delta: int) -> tuple[int, int]:
    """
    Move a (year, month) pair by ``delta`` months.

    Example:
        shift_year_month(2026, 12, 1) -> (2027, 1)
    """
    index = year * 12 + (month - 1) + delta
    return index // 12, index % 12 + 1


def parse_iso_date_loose(iso_date: str) -> LooseDate | None:
    """
    Parse a YYYY-MM-DD string, tolerating days past the end of the month.

    Older records may carry calendar-invalid days (e.g. "2026-02-30"); those
    are clamped to the last valid day instead of being rejected.

    Returns:
        LooseDate, or None when the string is not YYYY-MM-DD or the month is
        outside 1-12
    """
    if not isinstance(iso_date, str):
        return None

    match = _ISO_DATE_RE.match(iso_date)
    if not match:
        return None

    year = int(match.group(1))
    month = int(match.group(2))
    raw_day = int(match.group(3))

    if month < 1 or month > 12:
        return None

    return LooseDate(year=year, month=month, day=clamp_day(year, month, raw_day))


def month_key(iso_date: str) -> str | None:
    """
    Month key for an ISO date.

    Example:
        month_key("2026-02-27") -> "2026-02"
    """
    parsed = parse_iso_date_loose(iso_date)
    if parsed is None:
        return None
    return month_from_parts(parsed.year, parsed.month)


def parse_month_key(key: str) -> tuple[int, int]:
    """
    Parse a YYYY-MM month key.

    Raises:
        ValueError: If the key is malformed
    """
    parts = key.split("-") if isinstance(key, str) else []
    if len(parts) != 2 or len(parts[0]) != 4 or len(parts[1]) != 2:
        raise ValueError(f"Invalid month key: {key!r} (expected YYYY-MM)")
    year, month = int(parts[0]), int(parts[1])
    if month < 1 or month > 12:
        raise ValueError(f"Invalid month key: {key!r} (month out of range)")
    return year, month


def add_months(iso_date: str, months: int) -> str:
    """
    Add calendar months to an ISO date, clamping the day to the target month.

    Example:
        add_months("2026-01-31", 1) -> "2026-02-28"

    Raises:
        ValueError: If ``iso_date`` is malformed
    """
    parsed = parse_iso_date_loose(iso_date)
    if parsed is None:
        raise ValueError(f"Invalid date: {iso_date!r} (expected YYYY-MM-DD)")

    year, month = shift_year_month(parsed.year, parsed.month, months)
    return date_for_day(year, month, parsed.day)


def today_iso() -> str:
    """Today's date as YYYY-MM-DD."""
    return date.today().isoformat()


def days_between(start_iso: str, end_iso: str) -> int:
    """Whole days from ``start_iso`` to ``end_iso`` (negative when end is earlier)."""
    start = date.fromisoformat(start_iso)
    end = date.fromisoformat(end_iso)
    return (end - start).days

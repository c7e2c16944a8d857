#!/usr/bin/env python3
"""
Shared helpers for CLI commands: running async actions against a loaded
application and validating date/month options.
"""

import asyncio
from collections.abc import Awaitable, Callable
from typing import TypeVar

import click

from ..app import FinanceApp
from ..core.config import get_config
from ..core.currency import parse_amount_to_cents
from ..core.dates import parse_iso_date_loose, parse_month_key
from ..core.errors import MoneyTrackError

T = TypeVar("T")


def run_app(ctx: click.Context, action: Callable[[FinanceApp], Awaitable[T]]) -> T:
    """
    Open the configured data file, load every cache and run ``action``.

    MoneyTrackError failures are reported as ClickException so the user sees
    the message without a traceback.
    """
    config = (ctx.obj or {}).get("config") or get_config()
    app = FinanceApp.from_config(config)

    async def _main() -> T:
        await app.load_all()
        return await action(app)

    try:
        return asyncio.run(_main())
    except MoneyTrackError as e:
        raise click.ClickException(str(e)) from e


def validate_month(ctx: click.Context, param: click.Parameter, value: str | None) -> str | None:
    if value is None:
        return None
    try:
        parse_month_key(value)
    except ValueError:
        raise click.BadParameter(f"{value!r} is not a YYYY-MM month")
    return value


def validate_date(ctx: click.Context, param: click.Parameter, value: str | None) -> str | None:
    if value is None:
        return None
    if parse_iso_date_loose(value) is None:
        raise click.BadParameter(f"{value!r} is not a YYYY-MM-DD date")
    return value


def validate_amount(ctx: click.Context, param: click.Parameter, value: str | None) -> int | None:
    """Parse an amount option ("1.234,56", "1234.56") into cents."""
    if value is None:
        return None
    cents = parse_amount_to_cents(value)
    if cents == 0 and not any(ch.isdigit() for ch in value):
        raise click.BadParameter(f"{value!r} is not an amount")
    return cents

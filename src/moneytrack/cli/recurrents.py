#!/usr/bin/env python3
"""
Recurrents CLI - Listing and paying recurring bills and incomes.
"""

import click

from ..app import FinanceApp
from ..core.currency import format_cents
from ..core.dates import month_key, today_iso
from .runner import run_app, validate_month


@click.group()
def recurrents() -> None:
    """Recurring bill and income commands."""
    pass


@recurrents.command("list")
@click.option("--month", callback=validate_month, help="Month to check (YYYY-MM, default: current)")
@click.pass_context
def list_recurrents(ctx: click.Context, month: str | None) -> None:
    """List active recurrents and whether they were paid in a month."""
    month = month or month_key(today_iso())

    async def action(app: FinanceApp):
        return [
            (recurrent, app.transactions.projector.is_resolved_in_month(recurrent.id, month))
            for recurrent in app.recurrents.active()
        ]

    rows = run_app(ctx, action)
    if not rows:
        click.echo("No active recurrents.")
        return

    for recurrent, resolved in rows:
        state = "paid" if resolved else "pending"
        click.echo(
            f"{recurrent.id}  {recurrent.name}: {format_cents(recurrent.amount_cents)} "
            f"day {recurrent.reference_day} [{state}]"
        )


@recurrents.command()
@click.argument("recurrent_id")
@click.option("--month", callback=validate_month, help="Month to pay (YYYY-MM, default: current)")
@click.pass_context
def pay(ctx: click.Context, recurrent_id: str, month: str | None) -> None:
    """
    Materialize a recurrent for a month. Running it again for the same month
    returns the existing transaction.

    Example:
      moneytrack recurrents pay 9a7d... --month 2026-03
    """
    month = month or month_key(today_iso())

    async def action(app: FinanceApp):
        recurrent = await app.recurrents.get_recurrent(recurrent_id)
        return await app.transactions.pay_recurrent(recurrent, month)

    created = run_app(ctx, action)
    status = "paid" if created.paid else "open"
    click.echo(f"{created.id}  {created.date}  {format_cents(created.amount_cents)}  [{status}]")

#!/usr/bin/env python3
"""
Investments CLI - Position listing and recomputation.
"""

import click

from ..app import FinanceApp
from ..core.currency import format_cents
from ..core.models import FixedPosition, VariablePosition
from .runner import run_app


@click.group()
def investments() -> None:
    """Investment position commands."""
    pass


@investments.command("list")
@click.pass_context
def list_positions(ctx: click.Context) -> None:
    """List investment positions with their derived totals and event counts."""

    async def action(app: FinanceApp):
        return [(position, len(app.investments.list_by_position(position.id))) for position in app.positions.positions]

    rows = run_app(ctx, action)
    if not rows:
        click.echo("No investment positions.")
        return

    for position, event_count in rows:
        name = position.name or position.asset_code
        if isinstance(position, VariablePosition):
            avg = format_cents(position.avg_cost_cents) if position.avg_cost_cents else "-"
            click.echo(
                f"{position.id}  {name}: qty {position.quantity_total}, avg {avg}, "
                f"invested {format_cents(position.invested_cents)} ({event_count} events)"
            )
        elif isinstance(position, FixedPosition):
            click.echo(
                f"{position.id}  {name}: principal {format_cents(position.principal_cents)}, "
                f"value {format_cents(position.current_value_cents)} ({event_count} events)"
            )


@investments.command()
@click.pass_context
def recompute(ctx: click.Context) -> None:
    """
    Recompute every position from its events.

    Positions that fail are reported and do not stop the others.
    """

    async def action(app: FinanceApp):
        return await app.investments.recompute_all_positions()

    result = run_app(ctx, action)
    click.echo(f"Recomputed {result.succeeded}/{result.total} positions")
    if result.failed:
        click.echo(f"Failed: {result.failed}")
        for error in result.errors:
            click.echo(f"  {error}")

#!/usr/bin/env python3
"""
Alerts CLI - Overdue and upcoming bills and invoices.
"""

import click

from ..alerts.alerts import AlertBucket
from ..app import FinanceApp
from ..core.currency import format_cents
from .runner import run_app

BUCKET_TITLES = {
    AlertBucket.OVERDUE: "Overdue",
    AlertBucket.TODAY: "Today",
    AlertBucket.NEXT: "Next days",
}


@click.command()
@click.pass_context
def alerts(ctx: click.Context) -> None:
    """Show overdue and upcoming recurrents and credit card invoices."""

    async def action(app: FinanceApp):
        return app.alerts.grouped_alerts()

    grouped = run_app(ctx, action)
    if not any(grouped.values()):
        click.echo("Nothing due.")
        return

    for bucket, items in grouped.items():
        if not items:
            continue
        click.echo(f"\n{BUCKET_TITLES[bucket]}:")
        for item in items:
            amount = f" {format_cents(item.amount_cents)}" if item.amount_cents else ""
            click.echo(f"  {item.target_date}  {item.title} ({item.account_label}){amount} - {item.subtitle}")

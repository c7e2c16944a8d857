#!/usr/bin/env python3
"""
Search CLI - Find transactions, recurrents and investment positions by text.
"""

import click

from ..app import FinanceApp
from ..search.search import SearchKind
from .runner import run_app

GROUP_TITLES = {
    SearchKind.TRANSACTION: "Transactions",
    SearchKind.RECURRENT: "Recurrents",
    SearchKind.INVESTMENT: "Investments",
}


@click.command()
@click.argument("query", nargs=-1, required=True)
@click.pass_context
def search(ctx: click.Context, query: tuple[str, ...]) -> None:
    """
    Search descriptions, recurrent names and asset codes.

    Every word must match; case and accents are ignored.

    Examples:
      moneytrack search cafe
      moneytrack search petr4
    """
    text = " ".join(query)

    async def action(app: FinanceApp):
        return app.search.grouped_results(text)

    grouped = run_app(ctx, action)
    if not any(grouped.values()):
        click.echo(f"No results for {text!r}.")
        return

    for kind, results in grouped.items():
        if not results:
            continue
        click.echo(f"\n{GROUP_TITLES[kind]}:")
        for result in results:
            click.echo(f"  {result.id}  {result.title} - {result.subtitle}")

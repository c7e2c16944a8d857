#!/usr/bin/env python3
"""
Tags CLI - Listing, creating and deleting tag names.
"""

import click

from ..app import FinanceApp
from .runner import run_app


@click.group()
def tags() -> None:
    """Tag commands."""
    pass


@tags.command("list")
@click.pass_context
def list_tags(ctx: click.Context) -> None:
    """List tags with the number of transactions using each."""

    async def action(app: FinanceApp):
        return [
            (tag.name, sum(1 for tx in app.transactions.transactions if tag.name in tx.tags))
            for tag in sorted(app.tags.tags, key=lambda t: t.name)
        ]

    rows = run_app(ctx, action)
    if not rows:
        click.echo("No tags.")
        return
    for name, usage in rows:
        click.echo(f"{name} ({usage} transactions)")


@tags.command()
@click.argument("name")
@click.pass_context
def add(ctx: click.Context, name: str) -> None:
    """Create a tag; names are stored trimmed and lowercased."""
    if not name.strip():
        raise click.BadParameter("tag name cannot be blank", param_hint="NAME")

    async def action(app: FinanceApp):
        return await app.tags.ensure_tag(name)

    click.echo(f"Tag: {run_app(ctx, action).name}")


@tags.command()
@click.argument("name")
@click.pass_context
def delete(ctx: click.Context, name: str) -> None:
    """Delete a tag. Transactions keep the name they were recorded with."""

    async def action(app: FinanceApp):
        return await app.tags.delete_tag(name)

    click.echo(f"Deleted tag {run_app(ctx, action).name}")

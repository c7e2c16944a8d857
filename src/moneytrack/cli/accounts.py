#!/usr/bin/env python3
"""
Accounts CLI - Account listing, creation, manual adjustments and deletion.
"""

import click

from ..app import FinanceApp
from ..core.currency import format_cents
from .runner import run_app, validate_amount


@click.group()
def accounts() -> None:
    """Account management commands."""
    pass


@accounts.command("list")
@click.pass_context
def list_accounts(ctx: click.Context) -> None:
    """
    List accounts with their balances.

    Example:
      moneytrack accounts list
    """

    async def action(app: FinanceApp):
        return list(app.ledger.accounts)

    items = run_app(ctx, action)
    if not items:
        click.echo("No accounts found.")
        return

    total = 0
    for account in items:
        card = ""
        if account.is_credit_card:
            card = f" (closes {account.closing_day or '-'}, due {account.due_day or '-'})"
        click.echo(f"[{account.id}] {account.label}: {format_cents(account.balance_cents)}{card}")
        total += account.balance_cents

    click.echo(f"\nTotal: {len(items)} accounts, {format_cents(total)}")


@accounts.command()
@click.option("--label", required=True, help="Account name")
@click.option("--balance", callback=validate_amount, default="0", help="Opening balance (e.g. 1.234,56)")
@click.option("--bank", help="Bank name")
@click.option("--closing-day", type=click.IntRange(1, 31), help="Credit card closing day")
@click.option("--due-day", type=click.IntRange(1, 31), help="Credit card due day")
@click.pass_context
def add(
    ctx: click.Context,
    label: str,
    balance: int,
    bank: str | None,
    closing_day: int | None,
    due_day: int | None,
) -> None:
    """
    Create an account.

    Examples:
      moneytrack accounts add --label Checking --balance 1.500,00
      moneytrack accounts add --label Card --closing-day 28 --due-day 3
    """

    async def action(app: FinanceApp):
        return await app.ledger.add_account(label, balance, bank, closing_day, due_day)

    account = run_app(ctx, action)
    click.echo(f"Created account [{account.id}] {account.label} with {format_cents(account.balance_cents)}")


@accounts.command()
@click.argument("account_id", type=int)
@click.argument("amount", callback=validate_amount)
@click.option("--note", help="Note stored in the balance history")
@click.pass_context
def adjust(ctx: click.Context, account_id: int, amount: int, note: str | None) -> None:
    """
    Apply a manual signed adjustment to an account balance.

    Example:
      moneytrack accounts adjust 1 -- -50,00 --note "Cash withdrawal"
    """

    async def action(app: FinanceApp):
        return await app.ledger.adjust_balance(account_id, amount, note or "Manual adjustment")

    account = run_app(ctx, action)
    click.echo(f"{account.label}: {format_cents(account.balance_cents)}")


@accounts.command()
@click.argument("account_id", type=int)
@click.confirmation_option(prompt="Delete the account and all of its records?")
@click.pass_context
def delete(ctx: click.Context, account_id: int) -> None:
    """
    Delete an account with its transactions, recurrents, history and investments.

    Example:
      moneytrack accounts delete 3 --yes
    """

    async def action(app: FinanceApp):
        return await app.delete_account(account_id, on_progress=click.echo)

    summary = run_app(ctx, action)
    click.echo(f"  Transactions: {summary.transactions_deleted}")
    click.echo(f"  Recurrents: {summary.recurrents_deleted}")
    click.echo(f"  History: {summary.history_deleted}")
    click.echo(f"  Investment positions: {summary.investment_positions_deleted}")
    click.echo(f"  Investment events: {summary.investment_events_deleted}")

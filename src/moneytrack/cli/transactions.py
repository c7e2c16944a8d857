#!/usr/bin/env python3
"""
Transactions CLI - Recording, paying and deleting transactions, installment
purchases and credit card invoices.
"""

import click

from ..app import FinanceApp
from ..core.currency import format_cents
from ..core.dates import month_key, today_iso
from ..core.models import InvoiceStatus, PaymentMethod, Transaction, TransactionType
from ..tags.repository import normalize_tag_names
from ..transactions.installments import InstallmentRequest
from .runner import run_app, validate_amount, validate_date, validate_month


def _describe(tx: Transaction) -> str:
    status = "paid" if tx.paid else "open"
    method = f" {tx.payment_method.value}" if tx.payment_method else ""
    return f"{tx.id}  {tx.date}  {format_cents(tx.amount_cents):>14}  [{status}{method}]  {tx.ledger_note()}"


def _signed(tx_type: TransactionType, cents: int) -> int:
    """Expenses and transfers leave the owning account."""
    if tx_type is TransactionType.INCOME:
        return abs(cents)
    return -abs(cents)


@click.group()
def tx() -> None:
    """Transaction commands."""
    pass


@tx.command()
@click.option("--account", "account_id", type=int, required=True, help="Owning account id")
@click.option(
    "--type", "tx_type", type=click.Choice([t.value for t in TransactionType]), default="expense", show_default=True
)
@click.option("--amount", callback=validate_amount, help="Amount (per installment when --installments is used)")
@click.option("--total", callback=validate_amount, help="Total amount split across installments")
@click.option("--date", "tx_date", callback=validate_date, help="Date (YYYY-MM-DD, default: today)")
@click.option("--method", type=click.Choice([m.value for m in PaymentMethod]), help="Payment method")
@click.option("--to", "destination_id", type=int, help="Destination account id (transfers)")
@click.option("--description", help="Description")
@click.option("--category", help="Category")
@click.option("--installments", type=click.IntRange(min=1), help="Split into N monthly installments")
@click.option("--product", help="Product name for installment purchases")
@click.option("--tag", "tags", multiple=True, help="Tag name (repeatable); unknown tags are created")
@click.pass_context
def add(
    ctx: click.Context,
    account_id: int,
    tx_type: str,
    amount: int | None,
    total: int | None,
    tx_date: str | None,
    method: str | None,
    destination_id: int | None,
    description: str | None,
    category: str | None,
    installments: int | None,
    product: str | None,
    tags: tuple[str, ...],
) -> None:
    """
    Record a transaction, or an installment purchase with --installments.

    Paid transactions update the account balance immediately.

    Examples:
      moneytrack tx add --account 1 --amount 45,90 --method debit --category Food
      moneytrack tx add --account 1 --amount 30,00 --tag Trip --tag food
      moneytrack tx add --account 2 --type income --amount 5.000,00
      moneytrack tx add --account 1 --type transfer --to 2 --amount 200,00
      moneytrack tx add --account 3 --total 1.200,00 --installments 3 --method credit --product Phone
    """
    kind = TransactionType(tx_type)
    payment_method = PaymentMethod(method) if method else None
    date = tx_date or today_iso()

    if installments:
        if amount is None and total is None:
            raise click.UsageError("--amount or --total is required")
        request = InstallmentRequest(
            account_id=account_id,
            date=date,
            product=product or description or "Purchase",
            total_installments=installments,
            type=kind,
            amount_cents=_signed(kind, amount) if amount is not None else None,
            total_amount_cents=_signed(kind, total) if total is not None else None,
            payment_method=payment_method,
            category=category,
            description=description,
            tags=normalize_tag_names(list(tags)),
        )

        async def action(app: FinanceApp):
            created = await app.transactions.generate_installments(request)
            await app.tags.ensure_tags(request.tags)
            return created

        for created in run_app(ctx, action):
            click.echo(_describe(created))
        return

    if amount is None:
        raise click.UsageError("--amount is required")
    if kind is TransactionType.TRANSFER and destination_id is None:
        raise click.UsageError("--to is required for transfers")

    data = {
        "accountId": account_id,
        "destinationAccountId": destination_id,
        "date": date,
        "type": kind.value,
        "payment_method": payment_method.value if payment_method else None,
        "amount_cents": _signed(kind, amount),
        "description": description,
        "category": category,
        "tags": normalize_tag_names(list(tags)),
    }

    async def action(app: FinanceApp):
        created = await app.transactions.add_transaction(data)
        await app.transactions.apply_contributions(created)
        await app.tags.ensure_tags(created.tags)
        return created

    click.echo(_describe(run_app(ctx, action)))


@tx.command()
@click.argument("tx_id")
@click.pass_context
def pay(ctx: click.Context, tx_id: str) -> None:
    """Mark a transaction paid."""

    async def action(app: FinanceApp):
        return await app.transactions.mark_paid(tx_id)

    updated = run_app(ctx, action)
    click.echo(_describe(updated) if updated else f"Transaction {tx_id} is already paid.")


@tx.command()
@click.argument("tx_id")
@click.pass_context
def unpay(ctx: click.Context, tx_id: str) -> None:
    """Mark a transaction unpaid."""

    async def action(app: FinanceApp):
        return await app.transactions.mark_unpaid(tx_id)

    updated = run_app(ctx, action)
    click.echo(_describe(updated) if updated else f"Transaction {tx_id} is already unpaid.")


@tx.command()
@click.argument("tx_id")
@click.option("--group", is_flag=True, help="TX_ID is an installment group id; delete every installment")
@click.pass_context
def delete(ctx: click.Context, tx_id: str, group: bool) -> None:
    """
    Delete a transaction (or installment group) and reverse its balance effect.

    Examples:
      moneytrack tx delete 6f1c...
      moneytrack tx delete 0b9e... --group
    """

    def progress(current: int, total: int) -> None:
        click.echo(f"  Deleted {current}/{total}")

    async def action(app: FinanceApp):
        if group:
            return await app.transactions.delete_installment_group(tx_id, on_progress=progress)
        return [await app.transactions.delete_transaction(tx_id)]

    deleted = run_app(ctx, action)
    click.echo(f"Deleted {len(deleted)} transaction(s).")


@tx.command()
@click.option("--month", callback=validate_month, help="Invoice cycle month (YYYY-MM, default: current)")
@click.option(
    "--status", type=click.Choice([s.value for s in InvoiceStatus]), default="all", show_default=True
)
@click.option("--pay", "pay_account", type=int, help="Pay every open line of this account's invoice")
@click.pass_context
def invoices(ctx: click.Context, month: str | None, status: str, pay_account: int | None) -> None:
    """
    Show credit card invoices for a cycle month.

    Examples:
      moneytrack tx invoices --month 2026-03
      moneytrack tx invoices --month 2026-03 --pay 3
    """
    month = month or month_key(today_iso())

    async def action(app: FinanceApp):
        if pay_account is not None:
            await app.transactions.pay_invoice(pay_account, month)
        return app.transactions.credit_invoices_by_account(month, status)

    results = run_app(ctx, action)
    if not results:
        click.echo(f"No credit invoices for {month}.")
        return

    for invoice in results:
        state = (
            "settled"
            if invoice.is_settled
            else f"open {format_cents(invoice.open_cents)}, paid {format_cents(invoice.paid_cents)}"
        )
        click.echo(f"\n{invoice.account_label} - {month} (due {invoice.due_date or '-'})")
        click.echo(f"  Total: {format_cents(invoice.total_cents)} ({state})")
        for line in invoice.transactions:
            click.echo(f"  {_describe(line)}")

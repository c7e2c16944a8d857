#!/usr/bin/env python3
"""
Transaction Engine

CRUD and derived state over transactions, driving Account Ledger deltas.

Balance rules:
- A paid transaction contributes ``amount_cents`` to its account and, for
  transfers, ``-amount_cents`` to the destination account.
- Unpaid transactions contribute nothing.
- Every change in contribution becomes one ledger delta per affected account;
  zero deltas are skipped.
- Paid credit transactions are settled invoice lines and cannot be deleted.
"""

import copy
import logging
import uuid
from collections.abc import Callable
from datetime import datetime
from typing import Any

from ..core.errors import InvariantViolationError, RecordNotFoundError
from ..core.models import (
    CreditInvoice,
    Installment,
    InvoiceStatus,
    PaymentMethod,
    Recurrent,
    Transaction,
    TransactionType,
)
from ..invoices.cycle import compute_credit_invoice_cycle_month, compute_credit_invoice_due_date
from ..ledger.accounts import AccountLedger
from ..recurrents.projector import RecurrentProjector, in_month, resolve_recurrent_date
from ..storage.datastore import Collection
from .installments import InstallmentRequest, plan_installment_amounts, plan_installment_dates

logger = logging.getLogger(__name__)

GroupProgressCallback = Callable[[int, int], None]


def derive_paid(tx_type: TransactionType, method: PaymentMethod | None = None) -> bool:
    """
    Default ``paid`` flag for a new transaction.

    Income is always paid, transfers unless made on credit, expenses only
    when paid by debit.
    """
    if tx_type is TransactionType.INCOME:
        return True
    if tx_type is TransactionType.TRANSFER:
        return method is not PaymentMethod.CREDIT
    return method is PaymentMethod.DEBIT


def _diff_contributions(before: dict[int, int], after: dict[int, int]) -> dict[int, int]:
    return {
        account_id: after.get(account_id, 0) - before.get(account_id, 0)
        for account_id in sorted(before.keys() | after.keys())
    }


def _negate(contributions: dict[int, int]) -> dict[int, int]:
    return {account_id: -amount for account_id, amount in contributions.items()}


class TransactionEngine:
    """
    Owns the ``transactions`` collection and its in-memory cache.

    All balance effects go through ``AccountLedger.adjust_balance``.
    """

    def __init__(self, transactions: Collection, ledger: AccountLedger):
        self._transactions = transactions
        self.ledger = ledger
        self.transactions: list[Transaction] = []
        self.projector = RecurrentProjector(self)

    async def load_transactions(self, filters: dict[str, Any] | None = None) -> list[Transaction]:
        """Replace the cache with the (optionally filtered) stored transactions."""
        records = await self._transactions.list(filters)
        self.transactions = [Transaction.from_dict(record) for record in records]
        logger.debug(f"Loaded {len(self.transactions)} transactions")
        return self.transactions

    def find_cached(self, tx_id: str) -> Transaction | None:
        for tx in self.transactions:
            if tx.id == tx_id:
                return tx
        return None

    def _store_cached(self, tx: Transaction) -> None:
        for index, cached in enumerate(self.transactions):
            if cached.id == tx.id:
                self.transactions[index] = tx
                return
        self.transactions.append(tx)

    def _drop_cached(self, tx_id: str) -> None:
        self.transactions = [tx for tx in self.transactions if tx.id != tx_id]

    async def get_transaction(self, tx_id: str) -> Transaction:
        """
        Current state of a transaction, fetched from storage when not cached.

        Raises:
            RecordNotFoundError: If the transaction does not exist
        """
        cached = self.find_cached(tx_id)
        if cached is not None:
            return cached
        return Transaction.from_dict(await self._transactions.get(tx_id))

    async def _check_accounts(self, tx: Transaction) -> None:
        """Raise RecordNotFoundError when a referenced account does not exist."""
        await self.ledger.get_account(tx.account_id)
        if tx.destination_account_id is not None:
            await self.ledger.get_account(tx.destination_account_id)

    async def _apply_deltas(self, deltas: dict[int, int], note: str) -> None:
        for account_id, delta in deltas.items():
            if delta == 0:
                continue
            await self.ledger.adjust_balance(account_id, delta, note)

    async def apply_contributions(self, tx: Transaction, reverse: bool = False) -> None:
        """Push a transaction's applied contributions (or their reversal) to the ledger."""
        contributions = tx.applied_contributions()
        if reverse:
            contributions = _negate(contributions)
        note = f"Reversal: {tx.ledger_note()}" if reverse else tx.ledger_note()
        await self._apply_deltas(contributions, note)

    async def add_transaction(self, data: dict[str, Any]) -> Transaction:
        """
        Persist a new transaction.

        Assigns the id and creation timestamp and derives ``paid`` when it is
        not supplied. Makes no ledger call: callers wanting an immediate cash
        effect call ``apply_contributions`` afterwards.

        Args:
            data: Stored-shape record (``accountId``, ``date``, ``type``...)

        Returns:
            The stored transaction

        Raises:
            InvariantViolationError: If a credit transaction is created paid
            RecordNotFoundError: If a referenced account does not exist
        """
        record = dict(data)
        record["id"] = str(uuid.uuid4())
        record.setdefault("createdAt", datetime.now().isoformat(timespec="seconds"))

        tx = Transaction.from_dict({**record, "paid": record.get("paid") or False})
        if record.get("paid") is None:
            tx.paid = derive_paid(tx.type, tx.payment_method)
        elif tx.is_settled_credit:
            raise InvariantViolationError("Credit transactions cannot be created as paid")
        await self._check_accounts(tx)

        created = Transaction.from_dict(await self._transactions.create(tx.to_dict()))
        self.transactions.append(created)
        logger.info(f"Created transaction {created.id} ({created.ledger_note()}), paid={created.paid}")
        return created

    async def generate_installments(self, request: InstallmentRequest) -> list[Transaction]:
        """
        Create one transaction per installment, sharing a parent id.

        Credit groups start fully unpaid. Debit groups have the first
        installment paid (one ledger delta) and the rest unpaid. Without a
        payment method the first installment follows the explicit ``paid``
        flag or ``derive_paid``.

        Returns:
            The created transactions, in installment order

        Raises:
            ValueError: If the request has no amount or a count below 1
            InvariantViolationError: If a credit group is requested as paid
        """
        amounts = plan_installment_amounts(request)
        dates = plan_installment_dates(request.date, request.total_installments)

        if request.payment_method is PaymentMethod.CREDIT:
            if request.paid:
                raise InvariantViolationError("Credit installments cannot be created as paid")
            first_paid = False
        elif request.payment_method is PaymentMethod.DEBIT:
            first_paid = True
        elif request.paid is not None:
            first_paid = request.paid
        else:
            first_paid = derive_paid(request.type)

        parent_id = str(uuid.uuid4())
        created: list[Transaction] = []
        for index, (amount, date) in enumerate(zip(amounts, dates), start=1):
            installment = Installment(
                parent_id=parent_id,
                total=request.total_installments,
                index=index,
                product=request.product,
            )
            data = {
                "accountId": request.account_id,
                "date": date,
                "type": request.type.value,
                "payment_method": request.payment_method.value if request.payment_method else None,
                "amount_cents": amount,
                "category": request.category,
                "description": request.description,
                "tags": list(request.tags),
                "paid": first_paid if index == 1 else False,
                "installment": installment.to_dict(),
            }
            created.append(await self.add_transaction(data))

        if created and created[0].paid:
            await self.apply_contributions(created[0])

        logger.info(f"Generated {len(created)} installments for {request.product!r} (group {parent_id})")
        return created

    async def mark_paid(self, tx_id: str) -> Transaction | None:
        """
        Mark a transaction paid and apply its contribution.

        Returns:
            The updated transaction, or None when it was already paid
        """
        tx = await self.get_transaction(tx_id)
        if tx.paid:
            logger.debug(f"Transaction {tx_id} already paid, skipping")
            return None

        updated = Transaction.from_dict(await self._transactions.patch(tx_id, {"paid": True}))
        self._store_cached(updated)
        await self.apply_contributions(updated)
        return updated

    async def mark_unpaid(self, tx_id: str) -> Transaction | None:
        """
        Mark a transaction unpaid and reverse its contribution.

        Returns:
            The updated transaction, or None when it was already unpaid
        """
        tx = await self.get_transaction(tx_id)
        if not tx.paid:
            logger.debug(f"Transaction {tx_id} already unpaid, skipping")
            return None

        before = copy.deepcopy(tx)
        updated = Transaction.from_dict(await self._transactions.patch(tx_id, {"paid": False}))
        self._store_cached(updated)
        await self.apply_contributions(before, reverse=True)
        return updated

    async def update_transaction(self, tx_id: str, patch: dict[str, Any]) -> Transaction:
        """
        Patch a transaction and reconcile the ledger with its new contribution.

        The previous state comes from the cache or, when the cache is cold,
        from storage before the patch is written, so reconciliation always
        runs. One ledger delta is emitted per account whose contribution
        changed.

        Raises:
            RecordNotFoundError: If the transaction or a referenced account does not exist
            InvariantViolationError: If the patch changes the id
        """
        if "id" in patch and patch["id"] != tx_id:
            raise InvariantViolationError(f"transactions record {tx_id}: id cannot be edited")

        before = copy.deepcopy(await self.get_transaction(tx_id))
        # Reject malformed patches and missing accounts before anything is written
        await self._check_accounts(Transaction.from_dict({**before.to_dict(), **patch}))

        after = Transaction.from_dict(await self._transactions.patch(tx_id, patch))
        self._store_cached(after)

        deltas = _diff_contributions(before.applied_contributions(), after.applied_contributions())
        await self._apply_deltas(deltas, f"Edit: {after.ledger_note()}")
        return after

    async def delete_transaction(self, tx_id: str) -> Transaction:
        """
        Delete a transaction and reverse whatever it had applied.

        Returns:
            The deleted transaction

        Raises:
            RecordNotFoundError: If the transaction does not exist
            InvariantViolationError: If it is a paid credit line
        """
        tx = copy.deepcopy(await self.get_transaction(tx_id))
        if tx.is_settled_credit:
            raise InvariantViolationError(f"transactions record {tx_id} is settled, cannot delete")

        await self._transactions.delete(tx_id)
        self._drop_cached(tx_id)
        await self.apply_contributions(tx, reverse=True)
        logger.info(f"Deleted transaction {tx_id}")
        return tx

    async def delete_installment_group(
        self, parent_id: str, on_progress: GroupProgressCallback | None = None
    ) -> list[Transaction]:
        """
        Delete every installment of a group.

        Members are deleted one at a time in installment order, then the
        reversal is applied as one ledger delta per account.

        Args:
            parent_id: Shared ``installment.parentId``
            on_progress: Called with (current, total) after each deletion

        Returns:
            The deleted transactions

        Raises:
            RecordNotFoundError: If the group has no members
            InvariantViolationError: If any member is a paid credit line
        """
        records = await self._transactions.list()
        members = [
            Transaction.from_dict(record)
            for record in records
            if (record.get("installment") or {}).get("parentId") == parent_id
        ]
        if not members:
            raise RecordNotFoundError("installment group", parent_id)
        members.sort(key=lambda tx: tx.installment.index)

        settled = [tx.id for tx in members if tx.is_settled_credit]
        if settled:
            raise InvariantViolationError(
                f"Installment group {parent_id} has settled credit installments, cannot delete: "
                + ", ".join(settled)
            )

        reversal: dict[int, int] = {}
        total = len(members)
        for current, tx in enumerate(members, start=1):
            await self._transactions.delete(tx.id)
            self._drop_cached(tx.id)
            for account_id, amount in tx.applied_contributions().items():
                reversal[account_id] = reversal.get(account_id, 0) - amount
            if on_progress is not None:
                on_progress(current, total)

        product = members[0].installment.product
        await self._apply_deltas(reversal, f"Reversal: {product} ({total} installments)")
        logger.info(f"Deleted installment group {parent_id} ({total} installments)")
        return members

    def credit_invoices_by_account(
        self, month: str, status: InvoiceStatus | str = InvoiceStatus.ALL
    ) -> list[CreditInvoice]:
        """
        Credit lines billed in ``month``, grouped by owning account.

        The billing cycle of each line uses its account's closing day; lines
        are filtered by ``status`` (all, open or paid).

        Returns:
            One invoice per account with at least one matching line, ordered
            by account label
        """
        status = InvoiceStatus(status)
        invoices: dict[int, CreditInvoice] = {}

        for tx in self.transactions:
            if not tx.is_credit:
                continue
            if status is InvoiceStatus.OPEN and tx.paid:
                continue
            if status is InvoiceStatus.PAID and not tx.paid:
                continue

            account = self.ledger.find_cached(tx.account_id)
            closing_day = account.closing_day if account else None
            if compute_credit_invoice_cycle_month(tx.date, closing_day) != month:
                continue

            invoice = invoices.get(tx.account_id)
            if invoice is None:
                due_date = None
                if account is not None and account.due_day:
                    due_date = compute_credit_invoice_due_date(tx.date, account.due_day, closing_day)
                invoice = CreditInvoice(
                    account_id=tx.account_id,
                    account_label=account.label if account else str(tx.account_id),
                    month=month,
                    due_date=due_date,
                )
                invoices[tx.account_id] = invoice
            invoice.transactions.append(tx)

        return sorted(invoices.values(), key=lambda inv: (inv.account_label, inv.account_id))

    async def pay_invoice(self, account_id: int, month: str) -> list[Transaction]:
        """Mark every open line of an account's invoice paid, one at a time."""
        paid: list[Transaction] = []
        for invoice in self.credit_invoices_by_account(month, InvoiceStatus.OPEN):
            if invoice.account_id != account_id:
                continue
            for tx in list(invoice.transactions):
                updated = await self.mark_paid(tx.id)
                if updated is not None:
                    paid.append(updated)

        logger.info(f"Paid {len(paid)} line(s) of account {account_id} invoice {month}")
        return paid

    async def pay_recurrent(self, recurrent: Recurrent, month: str) -> Transaction:
        """
        Materialize a recurrent for ``month``.

        Idempotent: an existing transaction for the recurrent and month is
        returned unchanged. Otherwise one is created on the recurrent's
        reference day (clamped to the month) with a derived ``paid`` flag,
        and a ledger delta is applied only when it is paid.

        Raises:
            InvariantViolationError: If the recurrent has no reference day
        """
        existing = self.projector.find_recurrent_transaction(recurrent.id, month)
        if existing is None:
            for record in await self._transactions.list({"recurrentId": recurrent.id}):
                candidate = Transaction.from_dict(record)
                if in_month(candidate, month):
                    existing = candidate
                    self._store_cached(existing)
                    break
        if existing is not None:
            logger.debug(f"Recurrent {recurrent.id} already materialized for {month}")
            return existing

        data = {
            "accountId": recurrent.account_id,
            "date": resolve_recurrent_date(recurrent, month),
            "type": recurrent.kind.value,
            "payment_method": recurrent.payment_method.value if recurrent.payment_method else None,
            "amount_cents": recurrent.amount_cents,
            "description": recurrent.name,
            "recurrentId": recurrent.id,
        }
        tx = await self.add_transaction(data)
        if tx.paid:
            await self.apply_contributions(tx)
        return tx

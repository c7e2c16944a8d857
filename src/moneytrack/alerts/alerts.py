#!/usr/bin/env python3
"""
Alerts

Reminders built from the cached accounts, transactions and recurrents:
- recurrent bills/incomes falling due this month and not yet resolved
- credit invoices overdue or due within two days
- credit invoices closing today or within two days

Alerts are bucketed by days until the target date: ``overdue`` (< 0),
``today`` (0) and ``next`` (1-2).
"""

import logging
from dataclasses import dataclass
from datetime import date
from enum import Enum

from ..core.dates import date_for_day, days_between, month_key
from ..core.errors import SourceLoadError
from ..core.fanout import gather_outcomes
from ..core.models import PaymentMethod, RecurrentKind
from ..invoices.cycle import compute_credit_invoice_due_date
from ..ledger.accounts import AccountLedger
from ..recurrents.repository import RecurrentRepository
from ..transactions.engine import TransactionEngine

logger = logging.getLogger(__name__)

UPCOMING_WINDOW_DAYS = 2


class AlertBucket(Enum):
    OVERDUE = "overdue"
    TODAY = "today"
    NEXT = "next"


class AlertKind(Enum):
    RECURRENT = "recurrent"
    INVOICE_DUE = "invoice_due"
    INVOICE_CLOSING = "invoice_closing"


@dataclass
class AlertItem:
    id: str
    kind: AlertKind
    bucket: AlertBucket
    account_id: int
    account_label: str
    title: str
    subtitle: str
    target_date: str
    days_until: int
    amount_cents: int | None = None

    def sort_key(self) -> tuple[int, str, str, str]:
        return (self.days_until, self.target_date, self.account_label, self.title)


def to_bucket(days_until: int) -> AlertBucket | None:
    if days_until < 0:
        return AlertBucket.OVERDUE
    if days_until == 0:
        return AlertBucket.TODAY
    if days_until <= UPCOMING_WINDOW_DAYS:
        return AlertBucket.NEXT
    return None


def to_closing_bucket(days_until: int) -> AlertBucket | None:
    """Closing reminders are never overdue."""
    if days_until < 0:
        return None
    return to_bucket(days_until)


class AlertService:
    """Computes alerts from the ledger, transaction engine and recurrent caches."""

    def __init__(
        self,
        ledger: AccountLedger,
        engine: TransactionEngine,
        recurrents: RecurrentRepository,
        today: date | None = None,
    ):
        self.ledger = ledger
        self.engine = engine
        self.recurrents = recurrents
        self._today = today

    @property
    def today(self) -> str:
        return (self._today or date.today()).isoformat()

    def _date_this_month(self, day: int) -> str:
        today = self._today or date.today()
        return date_for_day(today.year, today.month, day)

    def _days_until(self, target_date: str) -> int:
        return days_between(self.today, target_date)

    def _account_label(self, account_id: int) -> str:
        account = self.ledger.find_cached(account_id)
        return account.label if account else "Account"

    async def load_alert_sources(self) -> list[str]:
        """
        Reload accounts, transactions and recurrents concurrently.

        Returns:
            Names of the sources that failed to load

        Raises:
            SourceLoadError: If every source failed
        """
        outcomes = await gather_outcomes(
            [
                ("accounts", self.ledger.load_accounts()),
                ("transactions", self.engine.load_transactions()),
                ("recurrents", self.recurrents.load_recurrents()),
            ]
        )
        failed = [outcome.label for outcome in outcomes if not outcome.ok]
        if failed and len(failed) == len(outcomes):
            raise SourceLoadError(failed)
        if failed:
            logger.warning(f"Alert sources failed to load: {', '.join(failed)}")
        return failed

    def recurrent_alerts(self) -> list[AlertItem]:
        items = []
        for recurrent in self.recurrents.recurrents:
            if not recurrent.active or not recurrent.notify:
                continue
            method = recurrent.payment_method or PaymentMethod.DEBIT
            # Credit expenses surface through their invoice instead
            if recurrent.kind is RecurrentKind.EXPENSE and method is PaymentMethod.CREDIT:
                continue

            day = recurrent.reference_day
            if not day:
                continue

            target_date = self._date_this_month(day)
            days_until = self._days_until(target_date)
            bucket = to_bucket(days_until)
            if bucket is None:
                continue
            if self.engine.projector.is_resolved_in_month(recurrent.id, month_key(target_date)):
                continue

            items.append(
                AlertItem(
                    id=f"recurrent:{recurrent.id}:{target_date}",
                    kind=AlertKind.RECURRENT,
                    bucket=bucket,
                    account_id=recurrent.account_id,
                    account_label=self._account_label(recurrent.account_id),
                    title=recurrent.name,
                    subtitle="Recurring income" if recurrent.kind is RecurrentKind.INCOME else "Recurring expense",
                    target_date=target_date,
                    days_until=days_until,
                    amount_cents=abs(recurrent.amount_cents),
                )
            )
        return sorted(items, key=AlertItem.sort_key)

    def _unpaid_credit_by_due_date(self) -> dict[int, dict[str, int]]:
        grouped: dict[int, dict[str, int]] = {}
        for tx in self.engine.transactions:
            if tx.paid or not tx.is_credit:
                continue
            account = self.ledger.find_cached(tx.account_id)
            if account is None or not account.due_day:
                continue

            due_date = compute_credit_invoice_due_date(tx.date, account.due_day, account.closing_day)
            amount = abs(tx.amount_cents)
            if due_date is None or amount <= 0:
                continue

            by_date = grouped.setdefault(account.id, {})
            by_date[due_date] = by_date.get(due_date, 0) + amount
        return grouped

    def invoice_due_alerts(self) -> list[AlertItem]:
        """
        One alert per card with unpaid lines: the most recent overdue invoice
        if any, otherwise the nearest invoice due within the window.
        """
        grouped = self._unpaid_credit_by_due_date()
        items = []
        for account in self.ledger.accounts:
            if not account.due_day:
                continue

            best_overdue: tuple[int, str, int] | None = None
            best_upcoming: tuple[int, str, int] | None = None
            for target_date, amount in grouped.get(account.id, {}).items():
                days_until = self._days_until(target_date)
                if days_until < 0:
                    if best_overdue is None or days_until > best_overdue[0]:
                        best_overdue = (days_until, target_date, amount)
                elif days_until <= UPCOMING_WINDOW_DAYS:
                    if best_upcoming is None or days_until < best_upcoming[0]:
                        best_upcoming = (days_until, target_date, amount)

            candidate = best_overdue or best_upcoming
            if candidate is None:
                continue

            days_until, target_date, amount = candidate
            items.append(
                AlertItem(
                    id=f"invoice_due:{account.id}:{target_date}",
                    kind=AlertKind.INVOICE_DUE,
                    bucket=to_bucket(days_until),
                    account_id=account.id,
                    account_label=account.label,
                    title=f"Invoice {account.label}",
                    subtitle="Invoice due",
                    target_date=target_date,
                    days_until=days_until,
                    amount_cents=amount,
                )
            )
        return sorted(items, key=AlertItem.sort_key)

    def invoice_closing_alerts(self) -> list[AlertItem]:
        open_by_account: dict[int, int] = {}
        for tx in self.engine.transactions:
            if tx.paid or not tx.is_credit:
                continue
            open_by_account[tx.account_id] = open_by_account.get(tx.account_id, 0) + tx.amount_cents

        items = []
        for account in self.ledger.accounts:
            if not account.closing_day:
                continue

            target_date = self._date_this_month(account.closing_day)
            days_until = self._days_until(target_date)
            bucket = to_closing_bucket(days_until)
            if bucket is None:
                continue

            open_amount = abs(open_by_account.get(account.id, 0))
            items.append(
                AlertItem(
                    id=f"invoice_closing:{account.id}:{target_date}",
                    kind=AlertKind.INVOICE_CLOSING,
                    bucket=bucket,
                    account_id=account.id,
                    account_label=account.label,
                    title=f"Invoice {account.label}",
                    subtitle="Invoice closing (best day to buy)",
                    target_date=target_date,
                    days_until=days_until,
                    amount_cents=open_amount or None,
                )
            )
        return sorted(items, key=AlertItem.sort_key)

    def all_alerts(self) -> list[AlertItem]:
        alerts = self.recurrent_alerts() + self.invoice_due_alerts() + self.invoice_closing_alerts()
        return sorted(alerts, key=AlertItem.sort_key)

    def grouped_alerts(self) -> dict[AlertBucket, list[AlertItem]]:
        grouped: dict[AlertBucket, list[AlertItem]] = {bucket: [] for bucket in AlertBucket}
        for alert in self.all_alerts():
            grouped[alert.bucket].append(alert)
        return grouped

    def counts(self) -> dict[str, int]:
        grouped = self.grouped_alerts()
        counts = {bucket.value: len(items) for bucket, items in grouped.items()}
        counts["total"] = sum(counts.values())
        return counts

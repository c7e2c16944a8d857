#!/usr/bin/env python3
"""Tests for recurrent bills: materialization, month checks and the repository."""

import pytest

from moneytrack.core.errors import InvariantViolationError
from moneytrack.core.models import Recurrent, RecurrentKind, Transaction
from moneytrack.recurrents.projector import RecurrentProjector, in_month, resolve_recurrent_date
from tests.conftest import write_db


def _recurrent(**overrides) -> Recurrent:
    record = {
        "id": "rec-1",
        "accountId": 1,
        "kind": "expense",
        "name": "Rent",
        "amount_cents": -120000,
        "payment_method": "debit",
        "due_day": 31,
    }
    record.update(overrides)
    return Recurrent.from_dict(record)


def _tx(tx_id, date, paid=True, recurrent_id="rec-1") -> Transaction:
    return Transaction.from_dict(
        {
            "id": tx_id,
            "accountId": 1,
            "date": date,
            "type": "expense",
            "amount_cents": -100,
            "paid": paid,
            "recurrentId": recurrent_id,
        }
    )


class _Source:
    def __init__(self, transactions):
        self.transactions = transactions


class TestResolveDate:
    """Test reference day resolution."""

    def test_due_day_clamped_to_month(self):
        assert resolve_recurrent_date(_recurrent(), "2026-02") == "2026-02-28"
        assert resolve_recurrent_date(_recurrent(), "2024-02") == "2024-02-29"

    def test_income_uses_day_of_month(self):
        income = _recurrent(kind="income", due_day=None, day_of_month=5, amount_cents=500000)
        assert income.kind is RecurrentKind.INCOME
        assert resolve_recurrent_date(income, "2026-07") == "2026-07-05"

    def test_missing_reference_day_rejected(self):
        with pytest.raises(InvariantViolationError):
            resolve_recurrent_date(_recurrent(due_day=None, day_of_month=10), "2026-03")


class TestProjector:
    """Test month-level materialization checks."""

    def test_finds_by_month_key(self):
        projector = RecurrentProjector(_Source([_tx("t1", "2026-03-31")]))
        assert projector.has_recurrent_transaction("rec-1", "2026-03")
        assert not projector.has_recurrent_transaction("rec-1", "2026-04")
        assert not projector.has_recurrent_transaction("rec-2", "2026-03")

    def test_malformed_date_matches_by_prefix(self):
        """Test a legacy record with an unparseable day still counts for its month."""
        tx = _tx("t1", "2026-03-xx")
        assert in_month(tx, "2026-03")
        assert RecurrentProjector(_Source([tx])).has_recurrent_transaction("rec-1", "2026-03")

    def test_resolved_requires_paid(self):
        projector = RecurrentProjector(_Source([_tx("t1", "2026-03-05", paid=False)]))
        assert projector.has_recurrent_transaction("rec-1", "2026-03")
        assert not projector.is_resolved_in_month("rec-1", "2026-03")

    def test_unpaid_for_month(self):
        transactions = [
            _tx("t1", "2026-03-05", paid=False),
            _tx("t2", "2026-03-06"),
            _tx("t3", "2026-04-01", paid=False),
        ]
        unpaid = RecurrentProjector(_Source(transactions)).unpaid_for_month("2026-03")
        assert [tx.id for tx in unpaid] == ["t1"]


class TestPayRecurrent:
    """Test materializing recurrents into transactions."""

    @pytest.mark.asyncio
    async def test_pay_twice_creates_one_transaction(self, seeded_app):
        await seeded_app.load_all()
        recurrent = _recurrent()

        first = await seeded_app.transactions.pay_recurrent(recurrent, "2026-02")
        second = await seeded_app.transactions.pay_recurrent(recurrent, "2026-02")

        assert first.id == second.id
        assert first.date == "2026-02-28"
        assert first.paid
        assert len(seeded_app.transactions.transactions) == 1
        account = await seeded_app.store.get("accounts", 1)
        assert account["balance_cents"] == 10000 - 120000
        assert len(seeded_app.history.for_account(1)) == 1

    @pytest.mark.asyncio
    async def test_unpaid_materialization_has_no_delta(self, seeded_app):
        await seeded_app.load_all()
        recurrent = _recurrent(payment_method=None)

        tx = await seeded_app.transactions.pay_recurrent(recurrent, "2026-03")

        assert not tx.paid
        assert tx.recurrent_id == "rec-1"
        assert seeded_app.history.items == []

    @pytest.mark.asyncio
    async def test_existing_stored_transaction_found_with_cold_cache(self, db_file, sample_accounts):
        write_db(
            db_file,
            accounts=sample_accounts,
            transactions=[
                {
                    "id": "legacy",
                    "accountId": 1,
                    "date": "2026-02-30",
                    "type": "expense",
                    "amount_cents": -120000,
                    "paid": True,
                    "recurrentId": "rec-1",
                }
            ],
        )
        from moneytrack.app import FinanceApp
        from moneytrack.storage.json_store import JsonFileStore

        app = FinanceApp(JsonFileStore(db_file))

        tx = await app.transactions.pay_recurrent(_recurrent(), "2026-02")

        assert tx.id == "legacy"
        assert (await app.store.get("accounts", 1))["balance_cents"] == 10000


class TestRecurrentRepository:
    """Test recurrent CRUD."""

    @pytest.mark.asyncio
    async def test_add_requires_reference_day(self, seeded_app):
        with pytest.raises(InvariantViolationError) as exc_info:
            await seeded_app.recurrents.add_recurrent(
                {"accountId": 1, "kind": "income", "name": "Salary", "amount_cents": 500000}
            )
        assert "day_of_month" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_add_update_delete(self, seeded_app):
        await seeded_app.load_all()
        created = await seeded_app.recurrents.add_recurrent(
            {"accountId": 1, "kind": "expense", "name": "Gym", "amount_cents": -9000, "due_day": 10}
        )
        assert created.id
        assert seeded_app.recurrents.active() == [created]

        updated = await seeded_app.recurrents.update_recurrent(created.id, {"active": False})
        assert not updated.active
        assert seeded_app.recurrents.active() == []

        with pytest.raises(InvariantViolationError):
            await seeded_app.recurrents.update_recurrent(created.id, {"id": "x"})

        await seeded_app.recurrents.delete_recurrent(created.id)
        assert seeded_app.recurrents.recurrents == []

#!/usr/bin/env python3
"""
Core Data Models for moneytrack

Typed views over the JSON records kept in the collection store. Each model
round-trips through ``from_dict`` / ``to_dict`` using the stored key names
(``accountId``, ``amount_cents``...), so existing data files and backups stay
readable.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, ClassVar


class TransactionType(Enum):
    """Types of transactions."""

    EXPENSE = "expense"
    INCOME = "income"
    TRANSFER = "transfer"


class PaymentMethod(Enum):
    """How an expense or transfer is paid."""

    DEBIT = "debit"
    CREDIT = "credit"


class RecurrentKind(Enum):
    INCOME = "income"
    EXPENSE = "expense"


class InvestmentBucket(Enum):
    """Replay rules applied to a position's events."""

    VARIABLE = "variable"  # quantity / average cost
    FIXED = "fixed"  # principal / current value


class EventType(Enum):
    """Investment event types."""

    BUY = "buy"
    SELL = "sell"
    INCOME = "income"
    CONTRIBUTION = "contribution"
    WITHDRAWAL = "withdrawal"
    MATURITY = "maturity"


class InvoiceStatus(Enum):
    """Filter applied to credit invoice lines."""

    ALL = "all"
    OPEN = "open"
    PAID = "paid"


def _drop_none(data: dict[str, Any]) -> dict[str, Any]:
    return {key: value for key, value in data.items() if value is not None}


def _optional_enum(enum_cls: type[Enum], value: Any) -> Any:
    if value is None or value == "":
        return None
    return enum_cls(value)


@dataclass
class Account:
    """
    A cash account, optionally backing a credit card.

    ``closing_day`` / ``due_day`` are the card's invoice closing and due days;
    they are clamped to the month length wherever they are used.
    """

    id: int | None
    label: str
    balance_cents: int = 0

    # Optional fields
    bank: str | None = None
    type: str = "bank"
    closing_day: int | None = None
    due_day: int | None = None

    @property
    def is_credit_card(self) -> bool:
        return self.due_day is not None or self.closing_day is not None

    def to_dict(self) -> dict[str, Any]:
        """Convert to the stored record shape."""
        return _drop_none(
            {
                "id": self.id,
                "label": self.label,
                "bank": self.bank,
                "type": self.type,
                "balance_cents": self.balance_cents,
                "card_closing_day": self.closing_day,
                "card_due_day": self.due_day,
            }
        )

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Account":
        """Create Account from a stored record."""
        return cls(
            id=data.get("id"),
            label=data.get("label", ""),
            balance_cents=int(data.get("balance_cents", 0)),
            bank=data.get("bank"),
            type=data.get("type", "bank"),
            closing_day=data.get("card_closing_day"),
            due_day=data.get("card_due_day"),
        )


@dataclass
class Installment:
    """Position of a transaction inside an installment group."""

    parent_id: str
    total: int
    index: int
    product: str

    @property
    def label(self) -> str:
        return f"Installment {self.index}/{self.total} - {self.product}"

    def to_dict(self) -> dict[str, Any]:
        return {
            "parentId": self.parent_id,
            "total": self.total,
            "index": self.index,
            "product": self.product,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Installment":
        return cls(
            parent_id=data["parentId"],
            total=int(data["total"]),
            index=int(data["index"]),
            product=data.get("product", ""),
        )


@dataclass
class Transaction:
    """
    A single cash movement on an account.

    ``amount_cents`` is signed from the owning account's point of view
    (negative for money leaving it). For transfers the destination account
    receives the negated amount.
    """

    id: str
    account_id: int
    date: str
    type: TransactionType
    amount_cents: int
    paid: bool = False

    # Optional fields
    payment_method: PaymentMethod | None = None
    destination_account_id: int | None = None
    description: str | None = None
    category: str | None = None
    tags: list[str] = field(default_factory=list)
    installment: Installment | None = None
    recurrent_id: str | None = None
    created_at: str | None = None

    @property
    def is_credit(self) -> bool:
        return self.payment_method is PaymentMethod.CREDIT

    @property
    def is_settled_credit(self) -> bool:
        """Paid credit lines belong to a settled invoice."""
        return self.paid and self.is_credit

    def applied_contributions(self) -> dict[int, int]:
        """
        Signed balance contribution per account while this transaction is paid.

        Returns an empty mapping for unpaid transactions.
        """
        if not self.paid:
            return {}

        contributions = {self.account_id: self.amount_cents}
        if self.type is TransactionType.TRANSFER and self.destination_account_id is not None:
            dest = self.destination_account_id
            contributions[dest] = contributions.get(dest, 0) - self.amount_cents
        return contributions

    def ledger_note(self) -> str:
        """Human-readable note for history snapshots."""
        if self.installment is not None:
            return self.installment.label
        return self.description or self.category or self.type.value

    def to_dict(self) -> dict[str, Any]:
        """Convert to the stored record shape."""
        record = _drop_none(
            {
                "id": self.id,
                "accountId": self.account_id,
                "destinationAccountId": self.destination_account_id,
                "date": self.date,
                "type": self.type.value,
                "payment_method": self.payment_method.value if self.payment_method else None,
                "amount_cents": self.amount_cents,
                "description": self.description,
                "category": self.category,
                "paid": self.paid,
                "recurrentId": self.recurrent_id,
                "createdAt": self.created_at,
            }
        )
        if self.tags:
            record["tags"] = list(self.tags)
        record["installment"] = self.installment.to_dict() if self.installment else None
        return record

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Transaction":
        """Create Transaction from a stored record."""
        installment = data.get("installment")
        return cls(
            id=data["id"],
            account_id=data["accountId"],
            date=data["date"],
            type=TransactionType(data["type"]),
            amount_cents=int(data.get("amount_cents", 0)),
            paid=bool(data.get("paid", False)),
            payment_method=_optional_enum(PaymentMethod, data.get("payment_method")),
            destination_account_id=data.get("destinationAccountId"),
            description=data.get("description"),
            category=data.get("category"),
            tags=list(data.get("tags") or []),
            installment=Installment.from_dict(installment) if installment else None,
            recurrent_id=data.get("recurrentId"),
            created_at=data.get("createdAt"),
        )


@dataclass
class Recurrent:
    """A monthly bill or income that is materialized into transactions."""

    id: str
    account_id: int
    kind: RecurrentKind
    name: str
    amount_cents: int

    # Optional fields
    payment_method: PaymentMethod | None = None
    due_day: int | None = None
    day_of_month: int | None = None
    frequency: str = "monthly"
    description: str | None = None
    active: bool = True
    notify: bool = False

    @property
    def reference_day(self) -> int | None:
        """Day of month the recurrent falls on (due day for expenses)."""
        if self.kind is RecurrentKind.EXPENSE:
            return self.due_day
        return self.day_of_month

    def to_dict(self) -> dict[str, Any]:
        return _drop_none(
            {
                "id": self.id,
                "accountId": self.account_id,
                "kind": self.kind.value,
                "payment_method": self.payment_method.value if self.payment_method else None,
                "notify": self.notify,
                "name": self.name,
                "amount_cents": self.amount_cents,
                "frequency": self.frequency,
                "day_of_month": self.day_of_month,
                "due_day": self.due_day,
                "description": self.description,
                "active": self.active,
            }
        )

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Recurrent":
        return cls(
            id=data["id"],
            account_id=data["accountId"],
            kind=RecurrentKind(data["kind"]),
            name=data.get("name", ""),
            amount_cents=int(data.get("amount_cents", 0)),
            payment_method=_optional_enum(PaymentMethod, data.get("payment_method")),
            due_day=data.get("due_day"),
            day_of_month=data.get("day_of_month"),
            frequency=data.get("frequency", "monthly"),
            description=data.get("description"),
            active=bool(data.get("active", True)),
            notify=bool(data.get("notify", False)),
        )


@dataclass
class InvestmentPosition:
    """
    Common fields of an investment position.

    Concrete positions are ``VariablePosition`` or ``FixedPosition``; the
    ``bucket`` class attribute is the discriminator stored in the record.
    Derived fields are only written by event recomputation.
    """

    bucket: ClassVar[InvestmentBucket]
    DERIVED_FIELDS: ClassVar[tuple[str, ...]] = ()

    id: str
    account_id: int
    asset_code: str
    investment_type: str = "outro"
    name: str | None = None
    is_active: bool = True
    metadata: dict[str, Any] = field(default_factory=dict)

    def _common_dict(self) -> dict[str, Any]:
        record = _drop_none(
            {
                "id": self.id,
                "accountId": self.account_id,
                "bucket": self.bucket.value,
                "investment_type": self.investment_type,
                "asset_code": self.asset_code,
                "name": self.name,
                "is_active": self.is_active,
            }
        )
        if self.metadata:
            record["metadata"] = dict(self.metadata)
        return record

    def to_dict(self) -> dict[str, Any]:
        return self._common_dict()

    @staticmethod
    def _common_kwargs(data: dict[str, Any]) -> dict[str, Any]:
        return {
            "id": data["id"],
            "account_id": data["accountId"],
            "asset_code": data.get("asset_code", ""),
            "investment_type": data.get("investment_type", "outro"),
            "name": data.get("name"),
            "is_active": bool(data.get("is_active", True)),
            "metadata": dict(data.get("metadata") or {}),
        }


@dataclass
class VariablePosition(InvestmentPosition):
    """Quantity-based position (stocks, funds, crypto)."""

    bucket: ClassVar[InvestmentBucket] = InvestmentBucket.VARIABLE
    DERIVED_FIELDS: ClassVar[tuple[str, ...]] = ("quantity_total", "avg_cost_cents", "invested_cents")

    quantity_total: float = 0
    avg_cost_cents: int | None = None
    invested_cents: int = 0

    def __post_init__(self):
        if self.quantity_total < 0:
            raise ValueError(f"Position {self.id}: quantity_total must be non-negative")
        if self.avg_cost_cents is not None and self.avg_cost_cents < 0:
            raise ValueError(f"Position {self.id}: avg_cost_cents must be non-negative")

    def to_dict(self) -> dict[str, Any]:
        record = self._common_dict()
        record["quantity_total"] = self.quantity_total
        if self.avg_cost_cents is not None:
            record["avg_cost_cents"] = self.avg_cost_cents
        record["invested_cents"] = self.invested_cents
        return record

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "VariablePosition":
        return cls(
            **cls._common_kwargs(data),
            quantity_total=data.get("quantity_total") or 0,
            avg_cost_cents=data.get("avg_cost_cents") or None,
            invested_cents=int(data.get("invested_cents") or 0),
        )


@dataclass
class FixedPosition(InvestmentPosition):
    """Principal-based position (fixed income, savings boxes)."""

    bucket: ClassVar[InvestmentBucket] = InvestmentBucket.FIXED
    DERIVED_FIELDS: ClassVar[tuple[str, ...]] = ("principal_cents", "current_value_cents", "invested_cents")

    principal_cents: int = 0
    current_value_cents: int = 0
    invested_cents: int = 0

    def __post_init__(self):
        if self.principal_cents < 0 or self.current_value_cents < 0:
            raise ValueError(f"Position {self.id}: principal and current value must be non-negative")

    def to_dict(self) -> dict[str, Any]:
        record = self._common_dict()
        record["principal_cents"] = self.principal_cents
        record["current_value_cents"] = self.current_value_cents
        record["invested_cents"] = self.invested_cents
        return record

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "FixedPosition":
        return cls(
            **cls._common_kwargs(data),
            principal_cents=int(data.get("principal_cents") or 0),
            current_value_cents=int(data.get("current_value_cents") or 0),
            invested_cents=int(data.get("invested_cents") or 0),
        )


POSITION_TYPES: dict[InvestmentBucket, type[InvestmentPosition]] = {
    InvestmentBucket.VARIABLE: VariablePosition,
    InvestmentBucket.FIXED: FixedPosition,
}

ALL_DERIVED_FIELDS = frozenset(VariablePosition.DERIVED_FIELDS + FixedPosition.DERIVED_FIELDS)


def position_from_dict(data: dict[str, Any]) -> InvestmentPosition:
    """
    Build the position variant selected by the record's ``bucket``.

    Raises:
        ValueError: If the bucket is missing or unknown
    """
    bucket = InvestmentBucket(data.get("bucket"))
    return POSITION_TYPES[bucket].from_dict(data)  # type: ignore[attr-defined]


@dataclass
class InvestmentEvent:
    """A dated fact on an investment position (buy, sell, income...)."""

    id: str
    position_id: str
    account_id: int
    date: str
    event_type: EventType
    amount_cents: int

    # Optional fields
    quantity: float | None = None
    unit_price_cents: int | None = None
    fees_cents: int | None = None
    note: str | None = None
    created_at: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return _drop_none(
            {
                "id": self.id,
                "positionId": self.position_id,
                "accountId": self.account_id,
                "date": self.date,
                "event_type": self.event_type.value,
                "amount_cents": self.amount_cents,
                "quantity": self.quantity,
                "unit_price_cents": self.unit_price_cents,
                "fees_cents": self.fees_cents,
                "note": self.note,
                "createdAt": self.created_at,
            }
        )

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "InvestmentEvent":
        return cls(
            id=data["id"],
            position_id=data["positionId"],
            account_id=data["accountId"],
            date=data["date"],
            event_type=EventType(data["event_type"]),
            amount_cents=int(data.get("amount_cents", 0)),
            quantity=data.get("quantity"),
            unit_price_cents=data.get("unit_price_cents"),
            fees_cents=data.get("fees_cents"),
            note=data.get("note"),
            created_at=data.get("createdAt"),
        )


@dataclass
class HistoryItem:
    """Append-only snapshot of an account balance after a Ledger mutation."""

    id: str
    account_id: int
    date: str
    balance_cents: int
    note: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "accountId": self.account_id,
            "date": self.date,
            "balance_cents": self.balance_cents,
            "note": self.note,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "HistoryItem":
        return cls(
            id=data["id"],
            account_id=data["accountId"],
            date=data["date"],
            balance_cents=int(data["balance_cents"]),
            note=data.get("note") or "",
        )


@dataclass
class Tag:
    """A free-form label attached to transactions by name."""

    id: str
    name: str

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "name": self.name}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Tag":
        return cls(id=data["id"], name=data.get("name") or "")


@dataclass
class CreditInvoice:
    """Credit lines of one account billed in one cycle month."""

    account_id: int
    account_label: str
    month: str
    due_date: str | None
    transactions: list[Transaction] = field(default_factory=list)

    @property
    def total_cents(self) -> int:
        return sum(tx.amount_cents for tx in self.transactions)

    @property
    def open_cents(self) -> int:
        return sum(tx.amount_cents for tx in self.transactions if not tx.paid)

    @property
    def paid_cents(self) -> int:
        return sum(tx.amount_cents for tx in self.transactions if tx.paid)

    @property
    def is_settled(self) -> bool:
        return all(tx.paid for tx in self.transactions)


@dataclass
class AccountDeletionSummary:
    """Per-category counts of records removed by an account cascade."""

    transactions_deleted: int = 0
    recurrents_deleted: int = 0
    history_deleted: int = 0
    investment_positions_deleted: int = 0
    investment_events_deleted: int = 0
    failed: int = 0


@dataclass
class BatchResult:
    """
    Outcome of a best-effort batch operation.

    Failures are counted and described rather than raised.
    """

    total: int
    succeeded: int
    failed: int
    errors: list[str] = field(default_factory=list)

    @property
    def success_rate(self) -> float:
        """Success rate as a percentage."""
        if self.total == 0:
            return 0.0
        return (self.succeeded / self.total) * 100

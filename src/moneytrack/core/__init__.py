"""
Core Utilities Package

Shared building blocks used by every moneytrack component.

This package provides:
- Currency handling with integer cents
- Month-length safe date arithmetic
- Data models for the stored records
- Error types and best-effort fan-out helpers
- Configuration management
"""

from .config import Config, Environment, get_config, reload_config
from .currency import (
    allocate_remainder,
    cents_to_decimal_str,
    format_cents,
    parse_amount_to_cents,
    split_amount,
)
from .dates import add_months, clamp_day, days_in_month, month_key, today_iso
from .errors import (
    BackupValidationError,
    CascadeDeleteError,
    InvariantViolationError,
    MoneyTrackError,
    RecordNotFoundError,
    SourceLoadError,
)
from .models import (
    Account,
    AccountDeletionSummary,
    BatchResult,
    CreditInvoice,
    EventType,
    FixedPosition,
    HistoryItem,
    Installment,
    InvestmentBucket,
    InvestmentEvent,
    InvestmentPosition,
    InvoiceStatus,
    PaymentMethod,
    Recurrent,
    RecurrentKind,
    Transaction,
    TransactionType,
    VariablePosition,
    position_from_dict,
)

__all__ = [
    "Account",
    "AccountDeletionSummary",
    "BackupValidationError",
    "BatchResult",
    "CascadeDeleteError",
    # Configuration
    "Config",
    "CreditInvoice",
    "Environment",
    "EventType",
    "FixedPosition",
    "HistoryItem",
    "Installment",
    "InvariantViolationError",
    "InvestmentBucket",
    "InvestmentEvent",
    "InvestmentPosition",
    "InvoiceStatus",
    "MoneyTrackError",
    "PaymentMethod",
    "RecordNotFoundError",
    "Recurrent",
    "RecurrentKind",
    "SourceLoadError",
    # Data models
    "Transaction",
    "TransactionType",
    "VariablePosition",
    # Dates
    "add_months",
    # Currency utilities
    "allocate_remainder",
    "cents_to_decimal_str",
    "clamp_day",
    "days_in_month",
    "format_cents",
    "get_config",
    "month_key",
    "parse_amount_to_cents",
    "position_from_dict",
    "reload_config",
    "split_amount",
    "today_iso",
]

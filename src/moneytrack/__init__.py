"""
moneytrack - Personal Finance Tracker

Accounts, transactions (installments and credit card invoices included),
recurring bills and incomes, and investment positions kept in a flat JSON
store.

Key Features:
- Single balance writer with an append-only history of snapshots
- Paid/unpaid transaction reconciliation, transfers and installment groups
- Credit card invoice cycles from closing and due days
- Investment positions derived by replaying their events
- Validated backup export and restore

Domain Packages:
- core: Currency, dates, data models, errors, configuration
- storage: Collection store protocol and the JSON file store
- ledger: Account balances and balance history
- transactions: Transaction engine and installment planning
- invoices: Credit card invoice cycle arithmetic
- recurrents: Recurring entries and month materialization checks
- investments: Positions, events and replay
- backup: Export/restore of all collections
- alerts: Due-date and invoice reminders
- cli: Command-line interface

Example Usage:
    from moneytrack import FinanceApp
    from moneytrack.core.currency import format_cents
    from moneytrack.invoices import compute_credit_invoice_due_date
"""

__version__ = "0.1.0"
__author__ = "moneytrack developers"

from .app import FinanceApp
from .core.config import Environment, get_config
from .core.currency import format_cents, parse_amount_to_cents
from .core.models import Account, InvestmentEvent, Recurrent, Transaction

__all__ = [
    # Application
    "FinanceApp",
    # Core models
    "Account",
    "Transaction",
    "Recurrent",
    "InvestmentEvent",
    # Currency
    "format_cents",
    "parse_amount_to_cents",
    # Configuration
    "get_config",
    "Environment",
]

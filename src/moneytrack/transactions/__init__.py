"""
Transactions Package

Transaction engine, installment planning and credit invoices.
"""

from .engine import TransactionEngine, derive_paid
from .installments import InstallmentRequest, plan_installment_amounts, plan_installment_dates

__all__ = [
    "InstallmentRequest",
    "TransactionEngine",
    "derive_paid",
    "plan_installment_amounts",
    "plan_installment_dates",
]

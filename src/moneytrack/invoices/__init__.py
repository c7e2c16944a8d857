"""
Invoices Package

Credit card invoice cycle arithmetic.
"""

from .cycle import compute_credit_invoice_cycle_month, compute_credit_invoice_due_date

__all__ = [
    "compute_credit_invoice_cycle_month",
    "compute_credit_invoice_due_date",
]

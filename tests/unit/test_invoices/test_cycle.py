#!/usr/bin/env python3
"""Tests for credit card invoice cycle arithmetic."""

import pytest

from moneytrack.invoices.cycle import compute_credit_invoice_cycle_month, compute_credit_invoice_due_date


@pytest.mark.unit
class TestInvoiceCycleMonth:
    """Test which invoice a purchase is billed on."""

    def test_purchase_before_closing_day_stays_in_month(self):
        assert compute_credit_invoice_cycle_month("2026-02-27", 28) == "2026-02"

    def test_closing_day_itself_rolls_to_next_cycle(self):
        assert compute_credit_invoice_cycle_month("2026-02-28", 28) == "2026-03"

    def test_closing_day_clamped_to_short_month(self):
        """Test a day-31 closing day closes on the last day of February."""
        assert compute_credit_invoice_cycle_month("2026-02-27", 31) == "2026-02"
        assert compute_credit_invoice_cycle_month("2026-02-28", 31) == "2026-03"

    def test_without_closing_day_uses_purchase_month(self):
        assert compute_credit_invoice_cycle_month("2026-02-28") == "2026-02"
        assert compute_credit_invoice_cycle_month("2026-02-28", None) == "2026-02"

    def test_december_rolls_into_next_year(self):
        assert compute_credit_invoice_cycle_month("2026-12-20", 10) == "2027-01"

    @pytest.mark.parametrize("value", ["2026-13-01", "not-a-date", ""])
    def test_malformed_date_returns_none(self, value):
        assert compute_credit_invoice_cycle_month(value, 10) is None
        assert compute_credit_invoice_due_date(value, 5, 10) is None


@pytest.mark.unit
class TestInvoiceDueDate:
    """Test invoice due date resolution."""

    def test_due_day_before_closing_falls_in_following_month(self):
        assert compute_credit_invoice_due_date("2026-02-27", 3, 28) == "2026-03-03"
        assert compute_credit_invoice_due_date("2026-02-28", 3, 28) == "2026-04-03"

    def test_due_day_after_closing_falls_in_cycle_month(self):
        assert compute_credit_invoice_due_date("2026-03-02", 15, 5) == "2026-03-15"
        assert compute_credit_invoice_due_date("2026-03-06", 15, 5) == "2026-04-15"

    def test_without_closing_day_due_next_month(self):
        assert compute_credit_invoice_due_date("2026-01-20", 10) == "2026-02-10"

    def test_due_day_clamped_to_month_length(self):
        assert compute_credit_invoice_due_date("2026-01-20", 31) == "2026-02-28"

    def test_loosely_valid_purchase_date_is_clamped(self):
        """Test a stored impossible day is read as the month's last day."""
        assert compute_credit_invoice_cycle_month("2026-02-30", 28) == "2026-03"

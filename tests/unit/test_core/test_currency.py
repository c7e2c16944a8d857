#!/usr/bin/env python3
"""Tests for core currency utilities."""

import pytest

from moneytrack.core.currency import (
    allocate_remainder,
    cents_to_decimal_str,
    format_cents,
    parse_amount_to_cents,
    split_amount,
    validate_sum_equals_total,
)


class TestCurrencyFormatting:
    """Test cents to display conversions."""

    @pytest.mark.currency
    def test_cents_to_decimal_str(self):
        """Test formatting cents as plain decimal strings."""
        assert cents_to_decimal_str(123456) == "1234.56"
        assert cents_to_decimal_str(100) == "1.00"
        assert cents_to_decimal_str(5) == "0.05"
        assert cents_to_decimal_str(0) == "0.00"
        assert cents_to_decimal_str(-4599) == "-45.99"

    @pytest.mark.currency
    def test_format_cents(self):
        """Test display formatting with thousands separators."""
        assert format_cents(123456) == "R$ 1.234,56"
        assert format_cents(100) == "R$ 1,00"
        assert format_cents(0) == "R$ 0,00"
        assert format_cents(-500) == "-R$ 5,00"
        assert format_cents(123456789) == "R$ 1.234.567,89"


class TestAmountParsing:
    """Test user-entered amount parsing."""

    @pytest.mark.currency
    @pytest.mark.parametrize(
        "text,expected",
        [
            ("1.234,56", 123456),
            ("1234,56", 123456),
            ("1234.56", 123456),
            ("R$ 12,00", 1200),
            ("12", 1200),
            ("-12,34", -1234),
            ("0,005", 1),
        ],
    )
    def test_parse_amount_to_cents(self, text, expected):
        """Test comma-decimal and dot-decimal forms."""
        assert parse_amount_to_cents(text) == expected

    @pytest.mark.currency
    @pytest.mark.parametrize("text", ["", "abc", "R$", "NaN", "Infinity"])
    def test_unparseable_input_is_zero(self, text):
        """Test that garbage parses to zero cents."""
        assert parse_amount_to_cents(text) == 0


class TestSplitting:
    """Test remainder-safe splitting."""

    @pytest.mark.currency
    def test_split_amount_last_absorbs_remainder(self):
        """Test that the last part absorbs the remainder."""
        assert split_amount(10000, 3) == [3333, 3333, 3334]
        assert split_amount(9000, 3) == [3000, 3000, 3000]

    @pytest.mark.currency
    def test_split_negative_amount(self):
        """Test that expenses split like incomes."""
        parts = split_amount(-10000, 3)
        assert parts == [-3333, -3333, -3334]
        assert sum(parts) == -10000

    @pytest.mark.currency
    def test_split_amount_rejects_zero_count(self):
        with pytest.raises(ValueError):
            split_amount(10000, 0)

    @pytest.mark.currency
    def test_allocate_remainder(self):
        """Test remainder allocation for precise sums."""
        amounts = [3333, 3333, 3333]
        allocated = allocate_remainder(amounts, 10000)
        assert allocated == [3333, 3333, 3334]
        assert amounts == [3333, 3333, 3333]  # input untouched
        assert validate_sum_equals_total(allocated, 10000) is True
        assert validate_sum_equals_total(amounts, 10000) is False

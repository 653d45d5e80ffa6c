"""Tests for currency formatting."""

import pytest

from realty_crm.formatting import format_currency, group_indian


class TestGroupIndian:
    """Tests for en-IN digit grouping."""

    @pytest.mark.parametrize(
        "amount,expected",
        [
            (0, "0"),
            (999, "999"),
            (1000, "1,000"),
            (99999, "99,999"),
            (1234567, "12,34,567"),
            (123456789, "12,34,56,789"),
            (-45000, "-45,000"),
            (1234.6, "1,235"),
        ],
    )
    def test_grouping(self, amount, expected):
        assert group_indian(amount) == expected


class TestFormatCurrency:
    """Tests for crore / lakh rendering."""

    def test_lakh(self):
        assert format_currency(200000) == "2.00 L"

    def test_lakh_boundary(self):
        assert format_currency(100000) == "1.00 L"
        assert format_currency(99999) == "99,999"

    def test_amount_rounding_up_to_a_lakh_uses_lakh_units(self):
        assert format_currency(99999.6) == "1.00 L"
        assert format_currency(99999.4) == "99,999"

    def test_amount_rounding_up_to_a_crore_uses_crore_units(self):
        assert format_currency(9999999.6) == "1.00 Cr"

    def test_crore(self):
        assert format_currency(10000000) == "1.00 Cr"
        assert format_currency(123456789) == "12.35 Cr"

    def test_small_amounts_are_grouped_integers(self):
        assert format_currency(45250) == "45,250"
        assert format_currency(0) == "0"

    def test_symbol_prefix(self):
        assert format_currency(2500000, symbol="₹") == "₹25.00 L"
        assert format_currency(500, symbol="₹") == "₹500"

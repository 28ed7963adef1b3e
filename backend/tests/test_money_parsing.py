"""
Tests for money token parsing and the fixed locale interpretation.

A separator followed by exactly three digits is always a thousands separator;
a comma or dot followed by one or two digits is the decimal point.
"""

from decimal import Decimal

import pytest

from expense_ocr.utils.money import (
    find_first_currency,
    normalize_item_amount,
    normalize_money_token,
    to_decimal,
)


class TestFindFirstCurrency:
    """Currency-shaped number in a single line."""

    @pytest.mark.parametrize("line,expected", [
        ("Total $11.00", "11.00"),
        ("TOTAL 5", "5"),
        ("Total: €12.5", "12.5"),
        ("Grand total £1,234.56", "1234.56"),
        ("Total 1 234,56", "1234.56"),
        ("Summe 1.234,56 EUR", "1234.56"),
    ])
    def test_common_formats(self, line, expected):
        assert find_first_currency(line) == expected

    def test_ungrouped_integer_part_kept_whole(self):
        assert find_first_currency("TOTAL 1234.56") == "1234.56"

    def test_no_number(self):
        assert find_first_currency("Total due") is None
        assert find_first_currency("") is None

    def test_first_number_wins(self):
        assert find_first_currency("Total (2 items) $9.99") == "2"


class TestLocaleAmbiguity:
    """Inputs whose meaning depends on locale get one fixed reading."""

    def test_dot_then_three_digits_is_thousands(self):
        assert find_first_currency("Total 1.234") == "1234"

    def test_comma_then_three_digits_is_thousands(self):
        assert find_first_currency("Total 1,234") == "1234"

    def test_comma_then_two_digits_is_decimal(self):
        assert find_first_currency("Total 12,50") == "12.50"

    def test_dot_then_two_digits_is_decimal(self):
        assert find_first_currency("Total 12.50") == "12.50"

    def test_multiple_groups(self):
        assert find_first_currency("Total 1.234.567,8") == "1234567.8"


class TestNormalization:
    """Token clean-up helpers."""

    def test_money_token_strips_commas_and_space(self):
        assert normalize_money_token(" 2,500.00") == "2500.00"

    def test_item_amount(self):
        assert normalize_item_amount("$ 3.50") == "3.50"
        assert normalize_item_amount("€2,50") == "2.50"

    def test_to_decimal(self):
        assert to_decimal("11.00") == Decimal("11.00")
        assert to_decimal(None) is None
        assert to_decimal("") is None
        assert to_decimal("abc") is None
        assert to_decimal("NaN") is None

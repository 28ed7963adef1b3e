"""
Tests for extraction validation and the draft expense mapper.
"""

from datetime import date
from decimal import Decimal

import pytest

from expense_ocr.models.receipt import LineItem, ReceiptExtraction
from expense_ocr.services.expense import (
    MISSING,
    Found,
    parse_receipt_date,
    resolve_amount,
    resolve_date,
    to_expense_candidate,
)
from expense_ocr.services.parser import extract_date
from expense_ocr.services.validation import validate

TODAY = date(2026, 10, 18)


class TestValidate:
    """Advisory missing-field report."""

    def test_missing_merchant(self):
        result = validate(ReceiptExtraction(merchant=None, total="5"))
        assert result.is_valid is False
        assert result.errors == ["Merchant not found"]

    def test_missing_both_in_order(self):
        result = validate(ReceiptExtraction())
        assert result.errors == ["Merchant not found", "Total not found"]

    def test_valid(self):
        result = validate(ReceiptExtraction(merchant="Joe's Diner", total="11.00"))
        assert result.is_valid is True
        assert result.errors == []


class TestResolvers:
    """Tagged results instead of silent defaults."""

    def test_amount_found(self):
        assert resolve_amount(ReceiptExtraction(total="11.00")) == Found(Decimal("11.00"))

    def test_zero_total_is_found_not_missing(self):
        result = resolve_amount(ReceiptExtraction(total="0.00"))
        assert isinstance(result, Found)
        assert result.value == Decimal("0")

    def test_amount_missing(self):
        assert resolve_amount(ReceiptExtraction(total=None)) is MISSING

    def test_date_found(self):
        extraction = ReceiptExtraction(date="2024-03-15")
        assert resolve_date(extraction, today=TODAY) == Found(date(2024, 3, 15))

    def test_date_missing(self):
        assert resolve_date(ReceiptExtraction(), today=TODAY) is MISSING
        assert resolve_date(ReceiptExtraction(date="2024-13-45"), today=TODAY) is MISSING

    def test_missing_is_falsy_singleton(self):
        assert not MISSING
        assert repr(MISSING) == 'MISSING'


class TestParseReceiptDate:
    """Best-effort calendar parsing of every extractor date shape."""

    @pytest.mark.parametrize("text,expected", [
        ("2024-03-15", date(2024, 3, 15)),
        ("15/03/2024", date(2024, 3, 15)),
        ("03/15/2024", date(2024, 3, 15)),   # month-first fallback
        ("15.03.2024", date(2024, 3, 15)),
        ("Mar 15, 2024", date(2024, 3, 15)),
        ("March 15, 2024", date(2024, 3, 15)),
        ("Sept 15, 2024", date(2024, 9, 15)),
        ("Mar 15,2024", date(2024, 3, 15)),
        ("March 15 , 2024", date(2024, 3, 15)),
        ("15 Mar", date(2026, 3, 15)),
        ("5   March", date(2026, 3, 5)),
    ])
    def test_formats(self, text, expected):
        assert parse_receipt_date(text, today=TODAY) == expected

    def test_unparseable(self):
        assert parse_receipt_date("31.02.2024", today=TODAY) is None
        assert parse_receipt_date(None) is None


class TestToExpenseCandidate:
    """Mapping policy: amount 0 and today's date when missing."""

    def test_full_mapping(self):
        items = [LineItem(description="Coffee", amount="3.50")]
        extraction = ReceiptExtraction(
            merchant="Joe's Diner",
            date="2024-03-15",
            total="11.00",
            currency="EUR",
            items=items,
            raw_text="Joe's Diner\nTotal 11.00 EUR",
            confidence=0.9,
        )
        candidate = to_expense_candidate(extraction, today=TODAY)

        assert candidate.title == "Receipt - Joe's Diner"
        assert candidate.description == "Joe's Diner\nTotal 11.00 EUR"
        assert candidate.amount_original == Decimal("11.00")
        assert candidate.currency_original == "EUR"
        assert candidate.date_of_expense == date(2024, 3, 15)
        assert candidate.category == "misc"
        assert candidate.merchant == "Joe's Diner"
        assert candidate.items == items
        assert candidate.amount_found is True
        assert candidate.date_found is True

    def test_defaults_when_missing(self):
        candidate = to_expense_candidate(ReceiptExtraction(raw_text="???"), today=TODAY)

        assert candidate.title == "Receipt"
        assert candidate.amount_original == Decimal("0")
        assert candidate.currency_original == "USD"
        assert candidate.date_of_expense == TODAY
        assert candidate.merchant is None
        assert candidate.items == []
        assert candidate.amount_found is False
        assert candidate.date_found is False

    def test_unparseable_date_defaults_to_today(self):
        extraction = ReceiptExtraction(date="31/31/2024", total="4")
        candidate = to_expense_candidate(extraction, today=TODAY)
        assert candidate.date_of_expense == TODAY
        assert candidate.date_found is False
        assert candidate.amount_original == Decimal("4")

    def test_extracted_date_without_space_after_comma(self):
        extracted = extract_date("Visit: Mar 15,2024")
        candidate = to_expense_candidate(ReceiptExtraction(date=extracted), today=TODAY)
        assert candidate.date_of_expense == date(2024, 3, 15)
        assert candidate.date_found is True

    def test_today_defaults_to_current_date(self):
        candidate = to_expense_candidate(ReceiptExtraction())
        assert candidate.date_of_expense == date.today()

    def test_currency_lowercase_is_normalized(self):
        assert ReceiptExtraction(currency="eur").currency == "EUR"
        with pytest.raises(ValueError):
            ReceiptExtraction(currency="EURO")

"""
Minimum-viability checks for an extraction.
"""

from expense_ocr.models.receipt import ReceiptExtraction, ValidationResult


def validate(extraction: ReceiptExtraction) -> ValidationResult:
    """
    Report missing merchant/total. Advisory only: callers decide whether an
    invalid extraction still becomes a draft expense.
    """
    errors = []
    if not extraction.merchant:
        errors.append("Merchant not found")
    if not extraction.total:
        errors.append("Total not found")
    return ValidationResult(is_valid=not errors, errors=errors)

"""
Pydantic models for receipt extraction and draft expenses.
"""

from pydantic import BaseModel, Field, field_validator
from typing import Optional, List, Dict, Any
from datetime import date
from decimal import Decimal


DEFAULT_CURRENCY = "USD"


class LineItem(BaseModel):
    """A purchased entry as printed on the receipt."""
    description: str
    amount: str  # Decimal string, e.g. "3.50"

    model_config = {"frozen": True}


class ReceiptExtraction(BaseModel):
    """
    Fields recovered from one receipt's OCR text.

    None means "not found". The date and total are kept as the text matched on
    the receipt; turning them into a calendar date or a number is the expense
    mapper's job.
    """
    merchant: Optional[str] = None
    date: Optional[str] = None
    total: Optional[str] = None
    currency: str = DEFAULT_CURRENCY
    items: List[LineItem] = Field(default_factory=list)
    raw_text: str = ""
    confidence: Optional[float] = None

    model_config = {"frozen": True}

    @field_validator("currency")
    @classmethod
    def _currency_code(cls, value: str) -> str:
        if len(value) != 3 or not value.isalpha():
            raise ValueError(f"Currency must be a 3-letter code, got {value!r}")
        return value.upper()


class ValidationResult(BaseModel):
    """Advisory report of fields the extraction could not find."""
    is_valid: bool
    errors: List[str] = Field(default_factory=list)


class ExpenseCandidate(BaseModel):
    """Draft expense handed to the record store."""
    title: str
    description: str
    amount_original: Decimal
    currency_original: str = DEFAULT_CURRENCY
    date_of_expense: date
    category: str = "misc"
    merchant: Optional[str] = None
    items: List[LineItem] = Field(default_factory=list)

    # Provenance: False when the mapper fell back to a default
    amount_found: bool = True
    date_found: bool = True


class ProcessReceiptResponse(BaseModel):
    """Response model for the persisting upload endpoint."""
    success: bool = True
    expense: Dict[str, Any]
    receipt: Dict[str, Any]
    ocr: ReceiptExtraction
    validation: ValidationResult


class ExtractReceiptResponse(BaseModel):
    """Response model for the preview endpoint (nothing persisted)."""
    ocr: ReceiptExtraction
    validation: ValidationResult
    expense_candidate: ExpenseCandidate

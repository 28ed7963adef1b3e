"""
Map a receipt extraction onto a draft expense.

The resolvers return Found(value) or MISSING instead of a silently defaulted
value, so a caller can tell "the receipt says 0" from "no total was found".
to_expense_candidate is where the default policy (amount 0, date today) is
applied, and it records which fields were defaulted.
"""

import re
import logging
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Generic, Optional, TypeVar, Union

from expense_ocr.models.receipt import (
    DEFAULT_CURRENCY,
    ExpenseCandidate,
    ReceiptExtraction,
)
from expense_ocr.utils.money import to_decimal

logger = logging.getLogger(__name__)

T = TypeVar('T')

EXPENSE_CATEGORY = "misc"

# Tried in order; day-first before month-first for slash dates
DATE_FORMATS = (
    '%Y-%m-%d',
    '%d/%m/%Y', '%m/%d/%Y',
    '%d.%m.%Y',
    '%b %d, %Y', '%B %d, %Y',
)

# Day + month name, printed without a year
YEARLESS_DATE_FORMATS = ('%d %b %Y', '%d %B %Y')


@dataclass(frozen=True)
class Found(Generic[T]):
    value: T


class Missing:
    """Marker for a field that was absent or could not be parsed."""
    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self):
        return 'MISSING'

    def __bool__(self):
        return False


MISSING = Missing()

Resolved = Union[Found[T], Missing]


def resolve_amount(extraction: ReceiptExtraction) -> Resolved[Decimal]:
    """Parse the extracted total into a Decimal."""
    amount = to_decimal(extraction.total)
    if amount is None:
        return MISSING
    return Found(amount)


def _normalize_date_text(date_str: str) -> str:
    text = re.sub(r'\s+', ' ', date_str.strip())
    # "Mar 15,2024" is extracted as printed; '%d, %Y' needs the space
    text = re.sub(r'\s*,\s*', ', ', text)
    # strptime only knows the three-letter abbreviation
    return re.sub(r'\bSept\b', 'Sep', text, flags=re.IGNORECASE)


def parse_receipt_date(date_str: Optional[str], today: Optional[date] = None) -> Optional[date]:
    """
    Best-effort calendar parse of an extracted date string.

    Dates printed without a year ("15 Mar") take the year of ``today``.
    Returns None when no known format fits, including impossible dates such
    as month 13.
    """
    if not date_str:
        return None

    text = _normalize_date_text(date_str)

    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue

    year = (today or date.today()).year
    for fmt in YEARLESS_DATE_FORMATS:
        try:
            return datetime.strptime(f"{text} {year}", fmt).date()
        except ValueError:
            continue

    return None


def resolve_date(extraction: ReceiptExtraction, today: Optional[date] = None) -> Resolved[date]:
    """Parse the extracted date string into a calendar date."""
    parsed = parse_receipt_date(extraction.date, today=today)
    if parsed is None:
        return MISSING
    return Found(parsed)


def to_expense_candidate(
    extraction: ReceiptExtraction,
    today: Optional[date] = None
) -> ExpenseCandidate:
    """
    Build the draft expense for an extraction.

    Args:
        extraction: Aggregated receipt fields
        today: Date used when the receipt date is missing or unparseable
               (defaults to the current local date)

    Returns:
        ExpenseCandidate with ``amount_found``/``date_found`` set to False
        wherever a default was applied
    """
    today = today or date.today()

    amount = resolve_amount(extraction)
    expense_date = resolve_date(extraction, today=today)

    if amount is MISSING and extraction.total:
        logger.warning("Could not parse extracted total", extra={"total": extraction.total})
    if expense_date is MISSING and extraction.date:
        logger.warning("Could not parse extracted date", extra={"date": extraction.date})

    title = f"Receipt - {extraction.merchant}" if extraction.merchant else "Receipt"

    return ExpenseCandidate(
        title=title,
        description=extraction.raw_text,
        amount_original=amount.value if isinstance(amount, Found) else Decimal('0'),
        currency_original=extraction.currency or DEFAULT_CURRENCY,
        date_of_expense=expense_date.value if isinstance(expense_date, Found) else today,
        category=EXPENSE_CATEGORY,
        merchant=extraction.merchant,
        items=list(extraction.items),
        amount_found=isinstance(amount, Found),
        date_found=isinstance(expense_date, Found),
    )

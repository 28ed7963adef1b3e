"""
Receipt field extraction from OCR text.

Each extractor is a pure function of the text (or its line sequence). Where a
field has competing heuristics, they live in an ordered rule table and the
first rule that produces a value wins.
"""

import re
import logging
from dataclasses import dataclass, field
from typing import Optional, List, Callable, Tuple

from expense_ocr.models.document import RawDocument
from expense_ocr.models.receipt import ReceiptExtraction, LineItem, DEFAULT_CURRENCY
from expense_ocr.utils.confidence import compute_confidence
from expense_ocr.utils.money import (
    MONEY_TOKEN,
    TRAILING_AMOUNT,
    find_first_currency,
    normalize_item_amount,
    normalize_money_token,
)
from expense_ocr.utils.text import split_lines

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PatternSpec:
    """A named regex pattern with example and notes for documentation."""
    name: str
    pattern: str
    example: str
    notes: Optional[str] = None
    flags: int = re.IGNORECASE
    compiled: re.Pattern = field(default=None, init=False, compare=False, repr=False)

    def __post_init__(self):
        object.__setattr__(self, 'compiled', re.compile(self.pattern, self.flags))


# Merchant
MERCHANT_SCAN_LINES = 5
MERCHANT_HEADER = re.compile(r'receipt|invoice|tax|total', re.IGNORECASE)

# Total
TOTAL_LABEL = re.compile(r'grand total|total|amount due', re.IGNORECASE)

# Date rules in priority order. Priority beats position in the text.
_MONTH = r'(?:Jan|Feb|Mar|Apr|May|Jun|Jul|Aug|Sep|Sept|Oct|Nov|Dec)[a-z]*'

DATE_PATTERNS: Tuple[PatternSpec, ...] = (
    PatternSpec(
        name='iso_date',
        pattern=r'\b\d{4}-\d{2}-\d{2}\b',
        example='2024-03-15',
    ),
    PatternSpec(
        name='slash_date',
        pattern=r'\b\d{2}/\d{2}/\d{4}\b',
        example='15/03/2024',
        notes='Read as DD/MM/YYYY',
    ),
    PatternSpec(
        name='dotted_date',
        pattern=r'\b\d{2}\.\d{2}\.\d{4}\b',
        example='15.03.2024',
    ),
    PatternSpec(
        name='day_month_name',
        pattern=r'\b\d{1,2}\s+' + _MONTH + r'\b',
        example='15 Mar',
        notes='No year captured',
    ),
    PatternSpec(
        name='month_name_day_year',
        pattern=r'\b' + _MONTH + r'\s+\d{1,2},\s*\d{4}\b',
        example='March 15, 2024',
    ),
)

# Currency codes recognized as whole words
CURRENCY_CODE = re.compile(r'\b(USD|EUR|GBP|INR|AUD|CAD)\b', re.IGNORECASE)


def extract_merchant(lines: List[str]) -> Optional[str]:
    """
    Pick the merchant name from the receipt header.

    Merchant names are conventionally the first printed text, so only the
    first few lines are considered. Lines that look like section headers
    ("RECEIPT", "TAX INVOICE", "TOTAL") or are too short/long are skipped;
    if every header line is skipped the first line is used anyway.
    """
    if not lines:
        return None

    for line in lines[:MERCHANT_SCAN_LINES]:
        if MERCHANT_HEADER.search(line):
            continue
        if 2 < len(line) < 40:
            return line

    return lines[0]


def _total_from_labelled_lines(text: str) -> Optional[str]:
    # Later totals supersede subtotals printed above them
    for line in reversed(split_lines(text)):
        if TOTAL_LABEL.search(line.lower()):
            value = find_first_currency(line)
            if value:
                return value
    return None


def _total_from_last_amount(text: str) -> Optional[str]:
    matches = list(MONEY_TOKEN.finditer(text))
    if not matches:
        return None
    return normalize_money_token(matches[-1].group(1)) or None


TOTAL_RULES: Tuple[Tuple[str, Callable[[str], Optional[str]]], ...] = (
    ('labelled_total_line', _total_from_labelled_lines),
    ('last_money_token', _total_from_last_amount),
)


def extract_total(text: str) -> Optional[str]:
    """
    Extract the receipt total as a decimal string.

    Rules, first match wins:
    1. The last line labelled "total"/"grand total"/"amount due" that carries
       a number.
    2. The last money-looking token anywhere in the text.
    """
    for name, rule in TOTAL_RULES:
        value = rule(text)
        if value is not None:
            logger.debug("Total matched", extra={"rule": name, "total": value})
            return value
    return None


def extract_date(text: str) -> Optional[str]:
    """
    Return the first date found, trying DATE_PATTERNS in priority order.

    The matched text is returned as printed; it is not validated or
    normalized (e.g. "31/13/2024" is returned as-is).
    """
    if not text:
        return None

    for spec in DATE_PATTERNS:
        match = spec.compiled.search(text)
        if match:
            logger.debug("Date matched", extra={"pattern": spec.name, "date": match.group(0)})
            return match.group(0)
    return None


def extract_currency(text: str) -> Optional[str]:
    """Return the first ISO currency code in the text, uppercased, or None."""
    match = CURRENCY_CODE.search(text or '')
    return match.group(1).upper() if match else None


def extract_line_items(text: str) -> List[LineItem]:
    """
    Extract "description ... $amount" lines in the order they appear.

    Only lines ending in a symbol-prefixed amount count; everything else is
    skipped. Duplicate lines produce duplicate items.
    """
    items = []
    for line in split_lines(text):
        match = TRAILING_AMOUNT.search(line)
        if not match:
            continue
        items.append(LineItem(
            description=match.group(1).strip(),
            amount=normalize_item_amount(match.group(2)),
        ))
    return items


def extract_receipt(document: RawDocument) -> ReceiptExtraction:
    """
    Run every extractor over one OCR document and combine the results.

    The extractors share no state, so their order here does not matter.
    """
    text = document.text or ''
    lines = split_lines(text)

    extraction = ReceiptExtraction(
        merchant=extract_merchant(lines),
        date=extract_date(text),
        total=extract_total(text),
        currency=extract_currency(text) or DEFAULT_CURRENCY,
        items=extract_line_items(text),
        raw_text=text,
        confidence=compute_confidence(document),
    )

    logger.info("Receipt fields extracted", extra={
        "merchant_found": extraction.merchant is not None,
        "total_found": extraction.total is not None,
        "date_found": extraction.date is not None,
        "currency": extraction.currency,
        "item_count": len(extraction.items),
        "confidence": extraction.confidence,
    })
    return extraction

"""
Money token parsing for receipt lines.

Receipts print amounts in several locales:
- US: 1,234.56
- European: 1.234,56 or 1 234,56
- Bare: 12 or 12.5

One fixed interpretation is applied everywhere: a separator (comma, dot or
space) followed by exactly three digits is a thousands separator, and a comma
or dot followed by one or two trailing digits is the decimal point. So
"1.234" is one thousand two hundred thirty-four, and "12,50" is twelve fifty.
"""

from decimal import Decimal, InvalidOperation
from typing import Optional
import re

# Symbol, integer part (3-digit groups, or an ungrouped run so "1234.56"
# is not cut to "123"), optional 1-2 digit fraction
_CURRENCY_NUMBER = re.compile(
    r'([$€£]?)(\d{1,3}(?:[,.\s]\d{3})+|\d+)(?:[.,](\d{1,2}))?'
)

# Loose monetary token used when no labelled total exists
MONEY_TOKEN = re.compile(r'(?:\$|USD|\b)(\s*\d[\d,]*(?:\.\d{1,2})?)', re.IGNORECASE)

# Symbol-prefixed amount at the end of a line item
TRAILING_AMOUNT = re.compile(r'(.+)\s+([€£$]\s?\d+(?:[.,]\d{1,2})?)$')

_GROUP_SEPARATORS = re.compile(r'[,.\s]')


def find_first_currency(line: str) -> Optional[str]:
    """
    Return the first currency-shaped number in a line as a decimal string.

    Examples:
        >>> find_first_currency("Total $1,234.56")
        '1234.56'
        >>> find_first_currency("TOTAL 1.234,56 EUR")
        '1234.56'
        >>> find_first_currency("Total 1.234")
        '1234'
        >>> find_first_currency("Total due")
    """
    if not line:
        return None

    match = _CURRENCY_NUMBER.search(line)
    if not match:
        return None

    integer_part = _GROUP_SEPARATORS.sub('', match.group(2))
    fraction = match.group(3)
    return f"{integer_part}.{fraction}" if fraction else integer_part


def normalize_money_token(token: str) -> str:
    """
    Strip currency symbols, whitespace and thousands commas from a token.

    Used for the loose fallback token, which only ever carries a dot as its
    decimal point.
    """
    return re.sub(r'[$€£,\s]', '', token)


def normalize_item_amount(token: str) -> str:
    """
    Normalize a line-item amount token ("$ 3.50", "€2,50") to a decimal string.

    Line-item amounts carry no thousands groups, so a comma here is always the
    decimal point.
    """
    return re.sub(r'[$€£\s]', '', token).replace(',', '.')


def to_decimal(amount_str: Optional[str]) -> Optional[Decimal]:
    """Parse a decimal string produced by the extractors, or None."""
    if not amount_str:
        return None
    try:
        value = Decimal(amount_str)
    except (InvalidOperation, ValueError):
        return None
    if not value.is_finite():
        return None
    return value

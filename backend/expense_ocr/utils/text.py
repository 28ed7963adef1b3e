"""
Line splitting for OCR text.
"""

import re
from typing import List

_LINE_BREAK = re.compile(r'[\r\n]+')


def split_lines(text: str) -> List[str]:
    """
    Split OCR text into trimmed, non-empty lines, preserving order.

    Any run of CR/LF characters is a line break, so Windows, Unix and bare-CR
    output all tokenize the same way.

    Examples:
        >>> split_lines("  Joe's Diner \\r\\n\\r\\nTotal $5.00\\n")
        ["Joe's Diner", 'Total $5.00']
        >>> split_lines("")
        []
    """
    if not text:
        return []
    return [line.strip() for line in _LINE_BREAK.split(text) if line.strip()]

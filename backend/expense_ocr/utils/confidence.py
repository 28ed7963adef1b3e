"""
Document-level OCR confidence from provider paragraph scores.
"""

from typing import Optional

from expense_ocr.models.document import RawDocument


def compute_confidence(document: RawDocument) -> Optional[float]:
    """
    Average every paragraph confidence the provider reported.

    Paragraphs without a confidence are left out of both the sum and the count.
    Returns None when the document has no pages or no paragraph carried a
    score, so "no signal" stays distinct from a genuine 0.0.
    """
    if not document.pages:
        return None

    scores = [
        paragraph.confidence
        for page in document.pages
        for block in page.blocks
        for paragraph in block.paragraphs
        if paragraph.confidence is not None
    ]
    if not scores:
        return None

    return sum(scores) / len(scores)

"""
Receipt processing entry point: one OCR call, then field extraction.
"""

import logging

from expense_ocr.models.receipt import ReceiptExtraction
from expense_ocr.services.ocr import DocumentRecognizer
from expense_ocr.services.parser import extract_receipt

logger = logging.getLogger(__name__)


def process_receipt(
    file_data: bytes,
    recognizer: DocumentRecognizer,
    mime_type: str = "application/octet-stream",
    filename: str = ""
) -> ReceiptExtraction:
    """
    Recognize a receipt file and extract its fields.

    The recognizer is passed in by the caller, which owns its lifecycle.
    Provider errors (OCRProviderError) propagate unchanged; there is no retry.
    """
    logger.info("Processing receipt", extra={
        "file_name": filename,
        "mime_type": mime_type,
        "size_bytes": len(file_data)
    })

    document = recognizer.recognize(file_data, mime_type=mime_type, filename=filename)
    return extract_receipt(document)

"""
End-to-end pipeline tests: recognizer handle in, extraction out.
"""

import pytest

from expense_ocr.models.document import RawDocument
from expense_ocr.services.ocr import OCRProviderError
from expense_ocr.services.pipeline import process_receipt


class _Recognizer:
    def __init__(self, annotation=None, error=None):
        self.annotation = annotation
        self.error = error
        self.calls = 0

    def recognize(self, file_data, mime_type="", filename=""):
        self.calls += 1
        if self.error:
            raise self.error
        return RawDocument.from_vision_annotation(self.annotation)


GROCERY_ANNOTATION = {
    "text": (
        "TAX INVOICE\n"
        "Fresh Mart\n"
        "12.04.2024\n"
        "Apples €3,20\n"
        "Milk €1,15\n"
        "Subtotal 4,35\n"
        "VAT 0,35\n"
        "TOTAL EUR 4,70\n"
    ),
    "pages": [{"blocks": [{"paragraphs": [{"confidence": 0.98}, {"confidence": 0.88}]}]}],
}


class TestProcessReceipt:

    def test_european_receipt(self):
        result = process_receipt(b"img", _Recognizer(GROCERY_ANNOTATION), mime_type="image/jpeg")

        assert result.merchant == "Fresh Mart"
        assert result.date == "12.04.2024"
        assert result.total == "4.70"
        assert result.currency == "EUR"
        assert [(i.description, i.amount) for i in result.items] == [
            ("Apples", "3.20"),
            ("Milk", "1.15"),
        ]
        assert result.confidence == pytest.approx(0.93)

    def test_provider_failure_propagates_without_retry(self):
        recognizer = _Recognizer(error=OCRProviderError("timeout"))

        with pytest.raises(OCRProviderError, match="timeout"):
            process_receipt(b"img", recognizer)
        assert recognizer.calls == 1

    def test_identical_input_gives_identical_output(self):
        recognizer = _Recognizer(GROCERY_ANNOTATION)
        first = process_receipt(b"img", recognizer)
        second = process_receipt(b"img", recognizer)
        assert first.model_dump_json() == second.model_dump_json()

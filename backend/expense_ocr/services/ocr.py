"""
OCR adapters that turn an uploaded receipt file into a RawDocument.

The extraction pipeline only depends on the DocumentRecognizer protocol; the
Tesseract implementation here is the default provider and is constructed and
owned by the caller (see expense_ocr.main.create_app).
"""

import io
import logging
from collections import OrderedDict
from typing import Dict, List, Optional, Protocol, Tuple

import pytesseract
import PyPDF2
from PIL import Image, ImageEnhance
from pdf2image import convert_from_bytes

from expense_ocr.config import settings
from expense_ocr.models.document import Block, Page, Paragraph, RawDocument

logger = logging.getLogger(__name__)

PDF_MIME_TYPES = {'application/pdf'}
IMAGE_EXTENSIONS = ('.jpg', '.jpeg', '.png', '.gif', '.tif', '.tiff', '.bmp', '.webp')

# Text-layer PDFs with less text than this are treated as scanned images
MIN_PDF_TEXT_CHARS = 50


class OCRProviderError(Exception):
    """The OCR provider failed; no document could be produced."""


class DocumentRecognizer(Protocol):
    """Anything that can turn file bytes into a RawDocument."""

    def recognize(self, file_data: bytes, mime_type: str = "", filename: str = "") -> RawDocument:
        ...


def is_pdf(mime_type: str, filename: str = "") -> bool:
    return mime_type in PDF_MIME_TYPES or filename.lower().endswith('.pdf')


def is_image(mime_type: str, filename: str = "") -> bool:
    return mime_type.startswith('image/') or filename.lower().endswith(IMAGE_EXTENSIONS)


def build_page(ocr_data: Dict[str, List]) -> Page:
    """
    Group pytesseract ``image_to_data`` word rows into blocks and paragraphs.

    Paragraph confidence is the mean of its words' confidences scaled to
    [0, 1]. Tesseract reports -1 for non-word rows; those are ignored, and a
    paragraph with no scored words gets no confidence at all.
    """
    blocks: "OrderedDict[int, OrderedDict[int, List[float]]]" = OrderedDict()

    n_rows = len(ocr_data.get('text', []))
    for i in range(n_rows):
        text = str(ocr_data['text'][i] or '').strip()
        if not text:
            continue

        block_num = int(ocr_data['block_num'][i])
        par_num = int(ocr_data['par_num'][i])
        paragraphs = blocks.setdefault(block_num, OrderedDict())
        scores = paragraphs.setdefault(par_num, [])

        try:
            conf = float(ocr_data['conf'][i])
        except (TypeError, ValueError):
            continue
        if conf >= 0:
            scores.append(min(conf, 100.0) / 100.0)

    return Page(blocks=[
        Block(paragraphs=[
            Paragraph(confidence=sum(scores) / len(scores) if scores else None)
            for scores in paragraphs.values()
        ])
        for paragraphs in blocks.values()
    ])


class TesseractRecognizer:
    """Local Tesseract OCR provider for receipt images and PDFs."""

    def __init__(self, tesseract_cmd: Optional[str] = None, config: Optional[str] = None):
        """Initialize OCR service with Tesseract configuration."""
        self.tesseract_cmd = tesseract_cmd or settings.TESSERACT_CMD
        self.config = config or settings.TESSERACT_CONFIG
        pytesseract.pytesseract.tesseract_cmd = self.tesseract_cmd

    def recognize(self, file_data: bytes, mime_type: str = "", filename: str = "") -> RawDocument:
        """
        Run OCR on an uploaded file.

        Args:
            file_data: Raw file bytes
            mime_type: MIME type of the upload
            filename: Optional filename for extension detection

        Returns:
            RawDocument with full text and per-paragraph confidences

        Raises:
            OCRProviderError: unsupported file type or any provider failure
        """
        if not file_data:
            raise OCRProviderError("Empty file")

        try:
            if is_pdf(mime_type, filename):
                document = self._recognize_pdf(file_data)
            elif is_image(mime_type, filename):
                document = self._recognize_image(Image.open(io.BytesIO(file_data)))
            else:
                raise OCRProviderError(f"Unsupported file type: {mime_type or filename}")
        except OCRProviderError:
            raise
        except Exception as e:
            logger.error("OCR provider failed", extra={
                "file_name": filename,
                "mime_type": mime_type,
                "error": str(e)
            }, exc_info=True)
            raise OCRProviderError(f"OCR failed: {str(e)}") from e

        logger.info("OCR complete", extra={
            "file_name": filename,
            "pages": len(document.pages),
            "text_chars": len(document.text)
        })
        return document

    def _recognize_image(self, image: Image.Image) -> RawDocument:
        text, page = self._ocr_page(image)
        return RawDocument(text=text, pages=[page])

    def _recognize_pdf(self, pdf_data: bytes) -> RawDocument:
        # Text-based PDFs carry no OCR confidence: pages without paragraphs
        page_texts = self._extract_pdf_text_direct(pdf_data)
        if len("".join(page_texts).strip()) >= MIN_PDF_TEXT_CHARS:
            return RawDocument(
                text="\n".join(page_texts).strip(),
                pages=[Page() for _ in page_texts]
            )

        logger.debug("PDF appears to be image-based, using OCR")
        texts = []
        pages = []
        for image in convert_from_bytes(pdf_data):
            text, page = self._ocr_page(image)
            texts.append(text)
            pages.append(page)
        return RawDocument(text="\n".join(texts).strip(), pages=pages)

    def _extract_pdf_text_direct(self, pdf_data: bytes) -> List[str]:
        reader = PyPDF2.PdfReader(io.BytesIO(pdf_data))
        return [page.extract_text() or "" for page in reader.pages]

    def _ocr_page(self, image: Image.Image) -> Tuple[str, Page]:
        image = self._preprocess_image(image)
        text = pytesseract.image_to_string(image, config=self.config)
        data = pytesseract.image_to_data(
            image, config=self.config, output_type=pytesseract.Output.DICT
        )
        return text.strip(), build_page(data)

    def _preprocess_image(self, image: Image.Image) -> Image.Image:
        """Grayscale and boost contrast; helps with faded thermal receipts."""
        if image.mode != 'RGB':
            image = image.convert('RGB')
        image = image.convert('L')
        return ImageEnhance.Contrast(image).enhance(2.0)

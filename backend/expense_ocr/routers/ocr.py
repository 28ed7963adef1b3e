"""
Receipt OCR router: upload a receipt image and get a draft expense.
"""

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile
from fastapi.concurrency import run_in_threadpool
from typing import Optional, Tuple
import logging

from expense_ocr.config import settings
from expense_ocr.dependencies import get_expense_store, get_recognizer
from expense_ocr.models.receipt import (
    ExtractReceiptResponse,
    ProcessReceiptResponse,
    ReceiptExtraction,
)
from expense_ocr.services.expense import to_expense_candidate
from expense_ocr.services.ocr import DocumentRecognizer, OCRProviderError
from expense_ocr.services.pipeline import process_receipt
from expense_ocr.services.records import ExpenseStore, RecordStoreError
from expense_ocr.services.validation import validate

router = APIRouter(prefix="/ocr", tags=["ocr"])
logger = logging.getLogger(__name__)

ALLOWED_TYPES = ["application/pdf", "image/jpeg", "image/jpg", "image/png"]


def _raise_too_large(size_bytes: int) -> None:
    file_size_mb = size_bytes / (1024 * 1024)
    raise HTTPException(
        status_code=413,
        detail=f"File too large: {file_size_mb:.2f}MB. Maximum: {settings.MAX_UPLOAD_MB}MB"
    )


async def _read_upload(receipt: Optional[UploadFile]) -> Tuple[bytes, str, str]:
    """Check the uploaded file and return (data, mime_type, filename)."""
    if receipt is None:
        raise HTTPException(status_code=400, detail="No file uploaded")

    mime_type = receipt.content_type or "application/octet-stream"
    if mime_type not in ALLOWED_TYPES:
        raise HTTPException(
            status_code=400,
            detail=f"Invalid file type: {mime_type}. Allowed: PDF, JPG, PNG"
        )

    max_bytes = settings.MAX_UPLOAD_MB * 1024 * 1024
    if receipt.size is not None and receipt.size > max_bytes:
        _raise_too_large(receipt.size)

    # Never buffer more than one byte past the limit
    file_data = await receipt.read(max_bytes + 1)
    if len(file_data) > max_bytes:
        _raise_too_large(len(file_data))
    if not file_data:
        raise HTTPException(status_code=400, detail="Uploaded file is empty")

    return file_data, mime_type, receipt.filename or ""


async def _run_ocr(
    file_data: bytes,
    mime_type: str,
    filename: str,
    recognizer: DocumentRecognizer
) -> ReceiptExtraction:
    try:
        return await run_in_threadpool(
            process_receipt, file_data, recognizer, mime_type=mime_type, filename=filename
        )
    except OCRProviderError as e:
        raise HTTPException(status_code=500, detail=str(e) or "OCR failed")


@router.post("/process", response_model=ProcessReceiptResponse)
async def process_receipt_upload(
    receipt: Optional[UploadFile] = File(None),
    company_id: str = Form(...),
    created_by_id: str = Form(...),
    recognizer: DocumentRecognizer = Depends(get_recognizer),
    store: ExpenseStore = Depends(get_expense_store)
):
    """
    Upload a receipt and create a draft expense from it.

    This endpoint:
    1. Accepts a receipt file (PDF, JPG, PNG) in the ``receipt`` field
    2. Runs OCR and field extraction
    3. Validates the extraction (advisory; invalid receipts still create drafts)
    4. Creates a DRAFT expense and a receipt record holding the extraction

    Returns:
        Stored expense and receipt rows, the extraction and its validation
    """
    file_data, mime_type, filename = await _read_upload(receipt)
    extraction = await _run_ocr(file_data, mime_type, filename, recognizer)

    validation = validate(extraction)
    if not validation.is_valid:
        logger.warning("Receipt extraction incomplete", extra={
            "file_name": filename,
            "errors": validation.errors
        })

    candidate = to_expense_candidate(extraction)

    try:
        expense, receipt_row = await run_in_threadpool(
            store.save_draft, candidate, extraction, company_id, created_by_id
        )
    except RecordStoreError as e:
        raise HTTPException(status_code=500, detail=str(e))

    return ProcessReceiptResponse(
        success=True,
        expense=expense,
        receipt=receipt_row,
        ocr=extraction,
        validation=validation,
    )


@router.post("/extract", response_model=ExtractReceiptResponse)
async def extract_receipt_upload(
    receipt: Optional[UploadFile] = File(None),
    recognizer: DocumentRecognizer = Depends(get_recognizer)
):
    """
    Preview extraction for a receipt without saving anything.

    Returns:
        The extraction, its validation, and the draft expense it would create
    """
    file_data, mime_type, filename = await _read_upload(receipt)
    extraction = await _run_ocr(file_data, mime_type, filename, recognizer)

    return ExtractReceiptResponse(
        ocr=extraction,
        validation=validate(extraction),
        expense_candidate=to_expense_candidate(extraction),
    )

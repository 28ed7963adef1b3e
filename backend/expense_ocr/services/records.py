"""
Record store for draft expenses and their receipts.

The store receives the mapped ExpenseCandidate plus the full extraction, which
is kept on the receipt row as an opaque JSON blob for auditing.
"""

import logging
from decimal import Decimal
from typing import Any, Dict, Optional, Protocol, Tuple

from expense_ocr.config import settings
from expense_ocr.models.receipt import ExpenseCandidate, ReceiptExtraction
from expense_ocr.utils.supabase import get_supabase_client

logger = logging.getLogger(__name__)

DRAFT_STATUS = "DRAFT"

Row = Dict[str, Any]


class RecordStoreError(Exception):
    """The record store rejected or failed a write."""


class ExpenseStore(Protocol):
    def save_draft(
        self,
        candidate: ExpenseCandidate,
        extraction: ReceiptExtraction,
        company_id: str,
        created_by_id: str
    ) -> Tuple[Row, Row]:
        ...


def _decimal_to_str(value: Optional[Decimal]) -> Optional[str]:
    """Convert Decimal to string for database storage."""
    return str(value) if value is not None else None


def build_expense_row(candidate: ExpenseCandidate, company_id: str, created_by_id: str) -> Row:
    """Column values for a new draft expense."""
    return {
        "company_id": company_id,
        "created_by_id": created_by_id,
        "title": candidate.title,
        "description": candidate.description,
        "amount_original": _decimal_to_str(candidate.amount_original),
        "currency_original": candidate.currency_original,
        "date_of_expense": candidate.date_of_expense.isoformat(),
        "category": candidate.category,
        "merchant": candidate.merchant,
        "status": DRAFT_STATUS,
    }


def build_receipt_row(expense_id: Any, extraction: ReceiptExtraction) -> Row:
    """Column values for the receipt attached to a draft expense."""
    return {
        "expense_id": expense_id,
        "url": None,  # Files are not kept; only the extraction is stored
        "ocr_extract": extraction.model_dump(mode="json"),
    }


class SupabaseExpenseStore:
    """ExpenseStore backed by Supabase tables."""

    def __init__(self, client=None, expenses_table: Optional[str] = None,
                 receipts_table: Optional[str] = None):
        self._client = client
        self.expenses_table = expenses_table or settings.EXPENSES_TABLE
        self.receipts_table = receipts_table or settings.RECEIPTS_TABLE

    @property
    def supabase(self):
        # Connect lazily so the app can start without credentials
        if self._client is None:
            self._client = get_supabase_client()
        return self._client

    def _insert(self, table: str, row: Row) -> Row:
        response = self.supabase.table(table).insert(row).execute()
        if not response.data:
            raise RecordStoreError(f"Insert into {table} returned no data")
        return response.data[0]

    def _write(self, table: str, row: Row) -> Row:
        try:
            return self._insert(table, row)
        except RecordStoreError:
            raise
        except Exception as e:
            logger.error("Insert failed", extra={
                "table": table,
                "error": str(e)
            }, exc_info=True)
            raise RecordStoreError(f"Failed to save draft expense: {str(e)}") from e

    def _discard_expense(self, expense_id: Any) -> None:
        """Delete a draft expense whose receipt could not be stored."""
        try:
            self.supabase.table(self.expenses_table).delete().eq("id", expense_id).execute()
        except Exception as e:
            # The original insert error is what the caller sees
            logger.error("Failed to remove orphaned draft expense", extra={
                "expense_id": expense_id,
                "error": str(e)
            }, exc_info=True)
            return
        logger.warning("Removed draft expense after receipt insert failed", extra={
            "expense_id": expense_id
        })

    def save_draft(
        self,
        candidate: ExpenseCandidate,
        extraction: ReceiptExtraction,
        company_id: str,
        created_by_id: str
    ) -> Tuple[Row, Row]:
        """
        Create a DRAFT expense and the receipt record referencing it.

        If the receipt insert fails, the expense row is deleted again so a
        retried upload does not leave a duplicate draft behind.

        Returns:
            Tuple of (expense_row, receipt_row) as stored

        Raises:
            RecordStoreError: if either insert fails
        """
        expense = self._write(
            self.expenses_table,
            build_expense_row(candidate, company_id, created_by_id)
        )
        try:
            receipt = self._write(
                self.receipts_table,
                build_receipt_row(expense.get("id"), extraction)
            )
        except RecordStoreError:
            self._discard_expense(expense.get("id"))
            raise

        logger.info("Draft expense created", extra={
            "expense_id": expense.get("id"),
            "receipt_id": receipt.get("id"),
            "company_id": company_id,
            "created_by_id": created_by_id,
            "amount_found": candidate.amount_found,
            "date_found": candidate.date_found
        })
        return expense, receipt

"""
Request-scoped access to the collaborators owned by the application.

The OCR recognizer and the record store are built once by create_app and kept
on app.state; routes receive them through Depends so tests can swap them.
"""

from fastapi import Request

from expense_ocr.services.ocr import DocumentRecognizer
from expense_ocr.services.records import ExpenseStore


def get_recognizer(request: Request) -> DocumentRecognizer:
    return request.app.state.recognizer


def get_expense_store(request: Request) -> ExpenseStore:
    return request.app.state.expense_store

import logging
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from expense_ocr.config import settings
from expense_ocr.routers import ocr
from expense_ocr.services.ocr import DocumentRecognizer, TesseractRecognizer
from expense_ocr.services.records import ExpenseStore, SupabaseExpenseStore


def create_app(
    recognizer: Optional[DocumentRecognizer] = None,
    expense_store: Optional[ExpenseStore] = None
) -> FastAPI:
    """
    Build the API with its OCR recognizer and record store.

    Both collaborators are owned by the returned app; pass your own to use a
    different OCR provider or database.
    """
    logging.basicConfig(
        level=settings.LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )

    app = FastAPI(
        title="Expense OCR API",
        description="Receipt OCR to draft expenses",
        version="0.1.0"
    )

    app.state.recognizer = recognizer or TesseractRecognizer()
    app.state.expense_store = expense_store or SupabaseExpenseStore()

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/")
    async def root():
        return {
            "message": settings.APP_NAME,
            "version": "0.1.0",
            "status": "running"
        }

    @app.get("/health")
    async def health_check():
        return {"status": "healthy"}

    app.include_router(ocr.router)

    return app


app = create_app()

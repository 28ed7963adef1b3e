from pydantic_settings import BaseSettings
from typing import List


class Settings(BaseSettings):
    # App
    APP_NAME: str = "Expense OCR"
    LOG_LEVEL: str = "INFO"

    # CORS
    ALLOWED_ORIGINS: List[str] = ["http://localhost:3000"]

    # Supabase
    SUPABASE_URL: str = ""
    SUPABASE_SERVICE_KEY: str = ""
    EXPENSES_TABLE: str = "expenses"
    RECEIPTS_TABLE: str = "receipts"

    # OCR
    TESSERACT_CMD: str = "/usr/local/bin/tesseract"  # macOS default
    TESSERACT_CONFIG: str = "--oem 3 --psm 6"

    # Uploads
    MAX_UPLOAD_MB: int = 10

    class Config:
        env_file = ".env"
        case_sensitive = True


settings = Settings()

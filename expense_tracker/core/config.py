# expense_tracker/core/config.py

from pathlib import Path
from typing import List
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Get the project root directory (where .env should be located)
BASE_DIR = Path(__file__).resolve().parent.parent.parent

class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=str(BASE_DIR / ".env"),
        env_file_encoding='utf-8',
        case_sensitive=True,
        extra="ignore"
    )

    # App Configuration
    APP_NAME: str = "Household Expenses API"
    DEBUG: bool = False
    VERSION: str = "1.0.0"
    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"

    # Database Configuration
    DATABASE_URL: str
    DB_POOL_SIZE: int = 5
    DB_MAX_OVERFLOW: int = 5
    DB_POOL_TIMEOUT: int = 30
    DB_POOL_RECYCLE: int = 300

    # Token verification. HS256 with SECRET_KEY unless a JWKS endpoint is configured.
    SECRET_KEY: str
    ALGORITHM: str = "HS256"
    AUTH_JWKS_URL: str = ""
    AUTH_AUDIENCE: str = ""
    AUTH_ISSUER: str = ""

    # CORS Configuration
    FRONTEND_URL: str = "http://localhost:3000"
    CORS_ORIGINS: List[str] = ["http://localhost:3000", "http://localhost:3001"]

    # AI ingestion (OpenAI compatible API)
    OPENAI_API_KEY: str = ""
    OPENAI_BASE_URL: str = "https://api.openai.com/v1"
    OPENAI_MODEL: str = "gpt-4o-mini"
    OPENAI_TRANSCRIPTION_MODEL: str = "gpt-4o-mini-transcribe"
    OPENAI_TIMEOUT: float = 60.0
    MAX_UPLOAD_BYTES: int = 10 * 1024 * 1024

    @field_validator("LOG_LEVEL")
    @classmethod
    def normalize_log_level(cls, value: str) -> str:
        return value.upper()

    @property
    def is_sqlite(self) -> bool:
        """Check if we're running against SQLite (local runs and tests)"""
        return self.DATABASE_URL.startswith("sqlite")

    @property
    def uses_jwks(self) -> bool:
        return bool(self.AUTH_JWKS_URL)

# Create a global settings instance
settings = Settings()

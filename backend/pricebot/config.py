"""
Configuration settings for Price Bot.

Loads environment variables from .env file and provides typed configuration.
"""

from typing import List, Optional
from pydantic_settings import BaseSettings
from pydantic import Field


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # API Configuration
    API_PREFIX: str = "/api"
    CORS_ORIGINS: List[str] = Field(
        default=["http://localhost:5173", "http://localhost:3000"],
        description="Allowed CORS origins",
    )

    # Database Configuration
    DATABASE_URL: str = Field(
        default="sqlite:///./data/pricebot.db", description="SQLite database URL"
    )
    DATABASE_ECHO: bool = Field(
        default=False, description="Echo SQL queries (for debugging)"
    )

    # Prices
    DEFAULT_CURRENCY: str = Field(
        default="USD", description="Currency used when none is given"
    )

    # OCR Configuration
    TESSERACT_CMD: str = Field(
        default="tesseract", description="Path to tesseract executable"
    )
    OCR_LANGUAGES: str = Field(
        default="rus+eng", description="Tesseract language codes"
    )
    OCR_CONFIG: str = Field(
        default="--psm 6 --oem 1",
        description="Extra tesseract flags (uniform text block, LSTM engine)",
    )
    OCR_TIMEOUT: int = Field(
        default=60, description="Recognition timeout in seconds"
    )

    # File Upload Configuration
    MAX_UPLOAD_SIZE: int = Field(
        default=10 * 1024 * 1024,  # 10 MB
        description="Maximum file upload size in bytes",
    )
    UPLOAD_DIR: str = Field(
        default="./uploads/receipts", description="Directory for uploaded receipt images"
    )
    UPLOAD_RATE_LIMIT: str = Field(
        default="10/minute", description="Rate limit for receipt uploads"
    )

    # Telegram Configuration
    TELEGRAM_BOT_TOKEN: Optional[str] = Field(
        default=None, description="Bot token issued by @BotFather"
    )
    TELEGRAM_API_URL: str = Field(
        default="https://api.telegram.org", description="Telegram Bot API base URL"
    )
    TELEGRAM_POLL_TIMEOUT: int = Field(
        default=30, description="Long polling timeout in seconds"
    )

    # Logging Configuration
    LOG_LEVEL: str = Field(default="INFO", description="Logging level")
    ENABLE_FILE_LOGGING: bool = Field(
        default=False, description="Enable logging to file"
    )
    LOG_DIR: str = Field(default="./logs", description="Directory for log files")

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False


# Global settings instance
settings = Settings()

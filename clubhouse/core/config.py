"""
Configuration settings for the application
"""

import os
from typing import List
from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    """Application settings"""

    # Data service
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./club_reservations.db")
    USE_FIREBASE: bool = os.getenv("USE_FIREBASE", "false").lower() in ("1", "true", "yes")
    FIREBASE_CREDENTIALS_JSON: str | None = os.getenv("FIREBASE_CREDENTIALS_JSON")
    FIREBASE_CREDENTIALS_FILE: str | None = os.getenv("FIREBASE_CREDENTIALS_FILE")
    FIREBASE_CREDENTIALS_B64: str | None = os.getenv("FIREBASE_CREDENTIALS_B64")
    FIREBASE_STORAGE_BUCKET: str | None = os.getenv("FIREBASE_STORAGE_BUCKET")

    # Object storage
    UPLOAD_DIR: str = os.getenv("UPLOAD_DIR", "uploads")
    PHOTO_BUCKET: str = "member-photos"

    # Security
    ADMIN_TOKEN: str = os.getenv("ADMIN_TOKEN", "admin_token_123")
    SESSION_COOKIE_NAME: str = "club_session"

    # Application
    BASE_URL: str = os.getenv("BASE_URL", "http://localhost:8000")
    CLUB_NAME: str = os.getenv("CLUB_NAME", "Club de billar Paterna")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # Booking
    TIMEZONE: str = os.getenv("TIMEZONE", "Europe/Madrid")
    OPENING_HOUR: int = 9
    CLOSING_HOUR: int = 21
    BOOKING_DETAILS_STEP: bool = os.getenv("BOOKING_DETAILS_STEP", "false").lower() in ("1", "true", "yes")
    DEFAULT_COUNTRY_PREFIX: str = "34"

    # CORS
    ALLOW_ORIGINS: List[str] = [
        "http://localhost:3000",
        "http://localhost:5173",
        "http://localhost:8000",
    ]

    # File limits
    MAX_UPLOAD_SIZE: int = 5 * 1024 * 1024  # 5MB

    # Rate limiting
    RATE_LIMIT_PER_MINUTE: int = 10

    class Config:
        env_file = ".env"

settings = Settings()

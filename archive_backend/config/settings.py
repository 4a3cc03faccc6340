# archive_backend/config/settings.py

# Centralized application settings management using Pydantic Settings.

from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List, Optional


class Settings(BaseSettings):
    # --- Database ---
    MONGODB_URI: str
    DB_NAME: str

    # --- Session JWT ---
    SECRET_KEY: str = "change-me-chilahati-archive"  # Must be overridden in production
    ALGORITHM: str = "HS256"
    SESSION_COOKIE_NAME: str = "session-token"
    SESSION_EXPIRE_HOURS: int = 24
    COOKIE_SECURE: bool = False  # Set True behind HTTPS

    # --- Account tokens ---
    VERIFICATION_TOKEN_EXPIRE_MINUTES: int = 60  # Measured from the user's createdAt
    PASSWORD_RESET_TOKEN_EXPIRE_MINUTES: int = 60
    BCRYPT_ROUNDS: int = 12

    # --- Listing ---
    PAGE_SIZE: int = 10

    # --- Outbound email ---
    BASE_URL: Optional[str] = None  # Public URL used in email links
    EMAIL_USER: Optional[str] = None
    EMAIL_PASS: Optional[str] = None
    SMTP_HOST: str = "smtp.gmail.com"
    SMTP_PORT: int = 465
    MAIL_SENDER_NAME: str = "Chilahati Archive Admin"
    CONTRIBUTE_RECEIVER_EMAIL: Optional[str] = None

    # --- HTTP ---
    CORS_ORIGINS: List[str] = ["*"]

    model_config = SettingsConfigDict(
        env_file='.env',
        env_file_encoding='utf-8',
    )


# Create a settings instance that loads values on import
settings = Settings()

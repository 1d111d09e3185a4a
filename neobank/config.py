"""
Application configuration using Pydantic Settings.

All configuration is loaded from environment variables, with an optional .env file
as a fallback. This keeps secrets out of source code — the .env file is
gitignored, and .env.example provides a safe template for developers.

Pydantic Settings automatically:
  1. Reads from environment variables (highest priority)
  2. Falls back to .env file values
  3. Uses defaults defined here (lowest priority)

Usage:
    from neobank.config import settings
    print(settings.SECRET_KEY)
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Central configuration for the NeoBank API.

    Required fields (no defaults) MUST be set in .env or environment:
      - SECRET_KEY: Used to sign JWT tokens
      - SECURITY_CODE_ENCRYPTION_KEY: Fernet key for transfer security codes at rest
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # --- Application ---
    APP_NAME: str = "NeoBank API"
    APP_VERSION: str = "0.1.0"
    # Also controls whether 500 responses include the underlying error message
    DEBUG: bool = False

    # --- Database ---
    # SQLite for local use; swap to a postgresql+asyncpg URL for production
    DATABASE_URL: str = "sqlite+aiosqlite:///./data/neobank.db"

    # --- Authentication ---
    # REQUIRED: No default, must be set in the environment
    SECRET_KEY: str
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24

    # --- Transfer security codes ---
    # REQUIRED: Fernet key used to encrypt the optional per-transfer security code
    # Generate with: python -c "from cryptography.fernet import Fernet; print(Fernet.generate_key().decode())"
    SECURITY_CODE_ENCRYPTION_KEY: str

    # --- Logging ---
    LOG_LEVEL: str = "INFO"
    # Optional path; when set, logs are also written to a rotating file
    LOG_FILE: str | None = None

    # --- Presentation ---
    CURRENCY_SYMBOL: str = "₹"
    PUBLIC_PROFILE_BASE_URL: str = "https://neobank.com"

    # --- CORS ---
    ALLOWED_ORIGINS: list[str] = ["http://localhost:3000"]


# Singleton: import this instance everywhere instead of creating new Settings()
settings = Settings()

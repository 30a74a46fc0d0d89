"""
Application configuration using Pydantic Settings.

All configuration is loaded from environment variables, with an optional .env file
as a fallback. The .env file is gitignored; .env.example provides a safe template.

Precedence (highest first):
  1. Environment variables
  2. .env file values
  3. Defaults defined here

Usage:
    from ledger_api.config import settings
    print(settings.ACCESS_TOKEN_EXPIRE_MINUTES)
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Central configuration for the Ledger API.

    Required fields (no defaults) MUST be set in .env or environment:
      - SECRET_KEY: Used to sign session tokens
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # --- Application ---
    APP_NAME: str = "Ledger API"
    APP_VERSION: str = "0.1.0"
    DEBUG: bool = False

    # --- Database ---
    DATABASE_URL: str = "sqlite+aiosqlite:///./data/ledger.db"

    # --- Sessions ---
    # REQUIRED: No default — forces the operator to set a real secret
    SECRET_KEY: str
    ALGORITHM: str = "HS256"
    # Sessions are valid for 24 hours from issuance
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24

    # --- Ledger limits ---
    # Largest single deposit or withdrawal, in cents
    MAX_AMOUNT_CENTS: int = 100_000_000_000
    # Ceiling on a user's balance; SQLite and PostgreSQL BIGINT are signed 64-bit
    MAX_BALANCE_CENTS: int = 2**63 - 1

    # --- Logging ---
    LOG_LEVEL: str = "INFO"
    # JSON lines for production; set false for human-readable console output
    LOG_JSON: bool = True

    # --- CORS ---
    ALLOWED_ORIGINS: list[str] = ["http://localhost:3000"]


# Singleton: import this instance everywhere instead of creating new Settings()
settings = Settings()

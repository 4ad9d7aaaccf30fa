# src/exbook/config/settings.py
"""
Settings - Pydantic-based Configuration Management

Provides centralized configuration management using Pydantic Settings.
Values come from environment variables or a local .env file.

Files that USE this module:
- exbook.app (builds the store, ledger, admin feed and backup from settings)

Files that this module USES:
- exbook.shared.validators (validation functions for settings)
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from exbook.shared.validators import BACKUP_PREFERENCES, validate_backup_preference


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    # --- Storage ---
    ledger_file: Path = Field(default=Path("./data/ledger.json"), alias="LEDGER_FILE")
    backup_dir: Path = Field(default=Path("./data/backups"), alias="BACKUP_DIR")
    export_dir: Path = Field(default=Path("./data/exports"), alias="EXPORT_DIR")

    # --- Quota / Premium ---
    # Used until the admin settings feed pushes its own limit
    free_transaction_limit: int = Field(default=10, alias="FREE_TRANSACTION_LIMIT", ge=0)
    premium_warning_days: int = Field(default=3, alias="PREMIUM_WARNING_DAYS", ge=0, le=30)

    # --- Auto-backup ---
    backup_preference: str = Field(default="none", alias="BACKUP_PREFERENCE")

    # --- Logging ---
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    log_file: Optional[str] = Field(default=None, alias="LOG_FILE")
    log_dir: Optional[str] = Field(default=None, alias="LOG_DIR")
    log_stdout: bool = Field(default=True, alias="EXBOOK_LOG_STDOUT")
    log_max_bytes: int = Field(default=10 * 1024 * 1024, alias="LOG_MAX_BYTES")  # 10MB
    log_backup_count: int = Field(default=5, alias="LOG_BACKUP_COUNT")

    @field_validator("backup_preference")
    @classmethod
    def validate_backup_preference(cls, v: str) -> str:
        """Validate auto-backup preference."""
        v = v.lower()
        if not validate_backup_preference(v):
            raise ValueError(f"BACKUP_PREFERENCE must be one of {', '.join(BACKUP_PREFERENCES)}")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level name."""
        v = v.upper()
        if v not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError("LOG_LEVEL must be DEBUG, INFO, WARNING, ERROR or CRITICAL")
        return v


# Global settings instance
settings = Settings()

"""
Settings - Bridge configuration using Pydantic Settings.

Loads from environment variables and .env files. Settings are passed
explicitly to the objects that need them; nothing reads a global connection.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Bridge settings."""

    # Reference realtime index storage
    index_db_path: Path = Path("data/indexes.db")

    # Pagination
    pagination_enabled: bool = True
    default_per_page: int = Field(default=20, ge=1)
    default_page_param: str = "page"

    # Logging
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()

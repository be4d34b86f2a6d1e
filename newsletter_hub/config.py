"""
Configuration and settings for the Newsletter Hub service.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Optional

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Environment-backed settings for the FastAPI service."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="NEWSLETTER_HUB_",
        extra="ignore",
    )

    api_prefix: str = Field(default="/api")

    # Persistence: a JSON document on disk unless a database URL is given.
    data_path: str = Field(default="data/db.json")
    database_url: Optional[str] = Field(default=None)

    # Development toggles
    use_in_memory_backends: bool = Field(default=False)

    # Browser client (served from "/" when set)
    static_dir: Optional[str] = Field(default=None)

    # Server
    host: str = Field(default="0.0.0.0")
    port: int = Field(
        default=4000,
        validation_alias=AliasChoices("NEWSLETTER_HUB_PORT", "PORT"),
    )
    log_level: str = Field(default="INFO")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached settings instance."""
    return Settings()

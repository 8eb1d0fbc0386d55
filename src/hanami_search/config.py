"""Centralized configuration for hanami-search using Pydantic Settings."""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Strictly typed configuration loaded from ``HANAMI_SEARCH_*`` environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="HANAMI_SEARCH_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        validate_default=True,
        extra="ignore",
    )

    # Query settings
    default_limit: int = Field(default=10, ge=0, description="Result limit used when search() is called without one")
    max_transliteration_length: int = Field(
        default=50,
        ge=0,
        description="Longest query (in characters) that is also tried as romaji converted to hiragana",
    )

    # Logging
    log_level: str = Field(default="info", description="Logging level")
    log_json: bool = Field(default=True, description="Emit structured JSON log lines")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return the process-wide settings, read once from the environment."""
    return Settings()

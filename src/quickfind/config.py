"""
quickfind Configuration

Settings are loaded from:
1. Environment variables (prefixed with QUICKFIND_)
2. ~/.quickfind/.env file

Key settings:
- QUICKFIND_MAX_JSON_FILE_BYTES: JSON files larger than this are not content-searched
- QUICKFIND_LOG_LEVEL: Log level used by the CLI when --verbose is not given
"""

import logging
from functools import lru_cache
from pathlib import Path

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

DEFAULT_MAX_JSON_FILE_BYTES = 50 * 1024 * 1024


class Settings(BaseSettings):
    """quickfind configuration settings."""

    app_name: str = "quickfind"

    # Size guard for the JSON matcher
    max_json_file_bytes: int = DEFAULT_MAX_JSON_FILE_BYTES

    # Logging
    log_level: str = "WARNING"

    model_config = SettingsConfigDict(
        env_prefix="QUICKFIND_",
        env_file=Path.home() / ".quickfind" / ".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    @field_validator("max_json_file_bytes")
    @classmethod
    def _positive_size(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("QUICKFIND_MAX_JSON_FILE_BYTES must be positive")
        return value

    @field_validator("log_level", mode="before")
    @classmethod
    def _normalize_level(cls, value: str) -> str:
        level = str(value).strip().upper()
        if level not in logging.getLevelNamesMapping():
            raise ValueError(f"Unknown log level: {value}")
        return level


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Load and cache settings."""
    return Settings()


def reload_settings() -> Settings:
    """Clear the cache and reload settings from the environment."""
    get_settings.cache_clear()
    return get_settings()

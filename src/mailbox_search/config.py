"""Configuration management for Mailbox Search.

This module handles application configuration using Pydantic settings.
Configuration can be loaded from environment variables or .env files.
"""

from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings with environment variable support.

    All settings can be overridden via environment variables with
    the MAILBOX_SEARCH_ prefix (e.g., MAILBOX_SEARCH_DB_PATH).
    """

    model_config = SettingsConfigDict(
        env_prefix="MAILBOX_SEARCH_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Store Configuration
    db_path: Path = Field(
        default=Path("mailbox_search.sqlite3"),
        description="Path to the SQLite database holding mailboxes, conversations and messages",
    )

    # Search Configuration
    search_index_max_length: int = Field(
        default=5000,
        gt=0,
        description="Maximum length in characters of a message search index",
    )
    max_search_results: int = Field(
        default=1000,
        gt=0,
        description="Maximum number of rows fetched per keyword search",
    )
    hasher: str = Field(
        default="normalize",
        description=(
            "Semantic hasher used for exact-match tokens: 'normalize' keeps normalized "
            "words (prefix-preserving), 'digest' replaces them with keyed digests."
        ),
    )
    hasher_key: str = Field(
        default="mailbox-search",
        description="Secret key for the 'digest' hasher",
    )

    # Job Configuration
    max_retries: int = Field(
        default=3,
        ge=0,
        description="Maximum number of retries for transient job failures",
    )
    retry_delay: float = Field(
        default=1.0,
        ge=0.0,
        description="Initial delay between job retries in seconds",
    )
    retry_backoff: float = Field(
        default=2.0,
        ge=1.0,
        description="Multiplier applied to the retry delay after each attempt",
    )
    index_workers: int = Field(
        default=4,
        gt=0,
        description="Number of worker threads used to run indexing jobs",
    )

    # Application Configuration
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    )
    debug: bool = Field(
        default=False,
        description="Enable debug mode",
    )


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings.

    Returns:
        Settings: Application settings instance.
    """
    return Settings()

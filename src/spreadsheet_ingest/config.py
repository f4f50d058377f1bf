"""Configuration management for spreadsheet ingestion.

This module provides centralized configuration using pydantic-settings.
All configuration options can be set via environment variables with the
SPREADSHEET_INGEST_ prefix, or via a .env file in the project root.

The settings only affect the code around the parser (upload size bound,
text decoding of delimited files, logging); the ZIP, XML and record
building rules do not change with configuration.

Environment Variables:
    SPREADSHEET_INGEST_MAX_FILE_SIZE_MB: Maximum upload size in MB (default: 10)
    SPREADSHEET_INGEST_TEXT_ENCODING: Encoding tried first for CSV/TXT (default: utf-8)
    SPREADSHEET_INGEST_DETECT_ENCODING: Detect encoding with chardet when the
        first attempt fails (default: true)
    SPREADSHEET_INGEST_LOG_LEVEL: Logging level (default: INFO)
"""

import codecs
import logging
from typing import Any

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings loaded from environment variables.

    Example .env file:
        SPREADSHEET_INGEST_MAX_FILE_SIZE_MB=25
        SPREADSHEET_INGEST_LOG_LEVEL=DEBUG
    """

    model_config = SettingsConfigDict(
        env_prefix="SPREADSHEET_INGEST_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # =========================================================================
    # Upload Settings
    # =========================================================================

    max_file_size_mb: int = 10
    """Maximum decoded upload size in megabytes."""

    # =========================================================================
    # Text Decoding Settings
    # =========================================================================

    text_encoding: str = "utf-8"
    """Encoding tried first when decoding delimited text files."""

    detect_encoding: bool = True
    """Fall back to chardet detection when the first decode attempt fails."""

    # =========================================================================
    # Logging Settings
    # =========================================================================

    log_level: str = "INFO"
    """Logging level: DEBUG, INFO, WARNING, ERROR, or CRITICAL."""

    # =========================================================================
    # Validators
    # =========================================================================

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is a valid Python logging level."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper_v = v.upper()
        if upper_v not in valid_levels:
            raise ValueError(
                f"Invalid log level: {v}. Must be one of: {', '.join(valid_levels)}"
            )
        return upper_v

    @field_validator("max_file_size_mb")
    @classmethod
    def validate_file_size(cls, v: int) -> int:
        """Validate file size is positive and reasonable."""
        if not 1 <= v <= 500:
            raise ValueError(f"max_file_size_mb must be between 1 and 500, got {v}")
        return v

    @field_validator("text_encoding")
    @classmethod
    def validate_text_encoding(cls, v: str) -> str:
        """Validate the encoding is known to Python's codec registry."""
        try:
            codecs.lookup(v)
        except LookupError as e:
            raise ValueError(f"Unknown text encoding: {v}") from e
        return v.lower()

    # =========================================================================
    # Computed Properties
    # =========================================================================

    @property
    def max_file_size_bytes(self) -> int:
        """Get max file size in bytes."""
        return self.max_file_size_mb * 1024 * 1024

    @property
    def log_level_int(self) -> int:
        """Get log level as integer for logging module."""
        level: int = getattr(logging, self.log_level)
        return level

    def to_safe_dict(self) -> dict[str, Any]:
        """Convert settings to a dictionary suitable for logging."""
        return {
            "max_file_size_mb": self.max_file_size_mb,
            "text_encoding": self.text_encoding,
            "detect_encoding": self.detect_encoding,
            "log_level": self.log_level,
        }


def validate_settings_on_startup(s: Settings) -> None:
    """Log warnings for settings that are legal but risky.

    Args:
        s: Settings instance to validate.
    """
    logger = logging.getLogger(__name__)

    if not s.detect_encoding and s.text_encoding != "utf-8":
        logger.warning(
            "Encoding detection is disabled and text_encoding is not utf-8. "
            "UTF-8 uploads may fail to decode."
        )

    if s.max_file_size_mb > 100:
        logger.warning(
            "max_file_size_mb is above 100. Parsing runs in memory without a "
            "size limit of its own."
        )

    logger.info(
        f"Configuration loaded: log_level={s.log_level}, "
        f"max_file_size_mb={s.max_file_size_mb}, text_encoding={s.text_encoding}"
    )


# Create the global settings instance
settings = Settings()

"""Configuration management for sheetlink.

This module provides centralized configuration using pydantic-settings.
All configuration options can be set via environment variables with the
SHEETLINK_ prefix, or via a .env file in the project root.

Environment Variables:
    SHEETLINK_MAX_FILE_SIZE_MB: Maximum upload size in MB (default: 10, 1-100)
    SHEETLINK_MAX_HEADER_SEARCH_ROWS: Rows scanned for headers (default: 10, 1-50)
    SHEETLINK_MAX_URL_LENGTH: Maximum hyperlink length (default: 2000, 100-10000)
    SHEETLINK_TEMPLATE_CACHE_TTL_SECONDS: Template cache expiry (default: 7200)
    SHEETLINK_LOG_LEVEL: Logging level (default: INFO)
    SHEETLINK_DEBUG: Enable debug mode (default: false)
    SHEETLINK_CORS_ORIGINS: Comma-separated CORS origins (default: *)
    SHEETLINK_SERVER_HOST: Server bind host (default: 0.0.0.0)
    SHEETLINK_SERVER_PORT: Server bind port (default: 8000)
"""

import logging
from typing import Any

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Example .env file:
        SHEETLINK_MAX_FILE_SIZE_MB=25
        SHEETLINK_LOG_LEVEL=DEBUG
    """

    model_config = SettingsConfigDict(
        env_prefix="SHEETLINK_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # =========================================================================
    # Excel Processing Settings
    # =========================================================================

    max_file_size_mb: int = 10
    """Maximum file upload size in megabytes."""

    max_header_search_rows: int = 10
    """Number of leading rows scanned when locating a header cell."""

    max_url_length: int = 2000
    """Maximum accepted length of a hyperlink target."""

    # =========================================================================
    # Template Cache Settings
    # =========================================================================

    template_cache_ttl_seconds: int = 7200
    """Sliding expiry for cached template workbooks."""

    # =========================================================================
    # Logging Settings
    # =========================================================================

    log_level: str = "INFO"
    """Logging level: DEBUG, INFO, WARNING, ERROR, or CRITICAL."""

    debug: bool = False
    """Enable debug mode with additional error details."""

    # =========================================================================
    # Server Settings
    # =========================================================================

    cors_origins: str = "*"
    """Comma-separated list of allowed CORS origins, or * for all."""

    server_host: str = "0.0.0.0"
    """Host address for the server to bind to."""

    server_port: int = 8000
    """Port for the server to listen on."""

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
        """Validate file size is between 1 and 100 MB."""
        if not 1 <= v <= 100:
            raise ValueError(f"max_file_size_mb must be between 1 and 100, got {v}")
        return v

    @field_validator("max_header_search_rows")
    @classmethod
    def validate_header_search_rows(cls, v: int) -> int:
        """Validate header search budget is between 1 and 50 rows."""
        if not 1 <= v <= 50:
            raise ValueError(
                f"max_header_search_rows must be between 1 and 50, got {v}"
            )
        return v

    @field_validator("max_url_length")
    @classmethod
    def validate_url_length(cls, v: int) -> int:
        """Validate URL length limit is between 100 and 10000."""
        if not 100 <= v <= 10000:
            raise ValueError(f"max_url_length must be between 100 and 10000, got {v}")
        return v

    @field_validator("template_cache_ttl_seconds")
    @classmethod
    def validate_cache_ttl(cls, v: int) -> int:
        """Validate template cache TTL is positive."""
        if v < 1:
            raise ValueError(f"template_cache_ttl_seconds must be at least 1, got {v}")
        return v

    @field_validator("server_port")
    @classmethod
    def validate_port(cls, v: int) -> int:
        """Validate port is in valid range."""
        if not 1 <= v <= 65535:
            raise ValueError(f"server_port must be between 1 and 65535, got {v}")
        return v

    # =========================================================================
    # Computed Properties
    # =========================================================================

    @property
    def max_file_size_bytes(self) -> int:
        """Get max file size in bytes."""
        return self.max_file_size_mb * 1024 * 1024

    @property
    def cors_origins_list(self) -> list[str]:
        """Get CORS origins as a list."""
        if self.cors_origins == "*":
            return ["*"]
        return [origin.strip() for origin in self.cors_origins.split(",")]

    @property
    def log_level_int(self) -> int:
        """Get log level as integer for logging module."""
        level: int = getattr(logging, self.log_level)
        return level

    def to_safe_dict(self) -> dict[str, Any]:
        """Convert settings to a dictionary suitable for logging."""
        return {
            "max_file_size_mb": self.max_file_size_mb,
            "max_header_search_rows": self.max_header_search_rows,
            "max_url_length": self.max_url_length,
            "template_cache_ttl_seconds": self.template_cache_ttl_seconds,
            "log_level": self.log_level,
            "debug": self.debug,
            "cors_origins": self.cors_origins,
            "server_host": self.server_host,
            "server_port": self.server_port,
        }


def validate_settings_on_startup(s: Settings) -> None:
    """Validate settings on application startup.

    Args:
        s: Settings instance to validate.
    """
    logger = logging.getLogger(__name__)

    if s.cors_origins == "*" and not s.debug:
        logger.warning(
            "CORS is configured to allow all origins (*). "
            "Consider restricting this in production."
        )

    logger.info(
        f"Configuration loaded: log_level={s.log_level}, debug={s.debug}, "
        f"max_file_size_mb={s.max_file_size_mb}, "
        f"max_header_search_rows={s.max_header_search_rows}, "
        f"max_url_length={s.max_url_length}"
    )


settings = Settings()

"""
Configuration management using Pydantic Settings.

This module provides type-safe, validated configuration loading from environment
variables.

Architecture:
- Flat Settings structure (no nesting)
- All config loaded from environment variables
- Type validation via Pydantic

Usage:
    from stripro.core.config import get_settings

    settings = get_settings()
    client = ClientService(settings=settings)
"""

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from stripro.core.constants import (
    CACHE_SWEEP_THRESHOLD,
    CACHE_TTL_SECONDS_DEFAULT,
    RATE_LIMIT_MAX_REQUESTS_DEFAULT,
    RATE_LIMIT_WINDOW_MS_DEFAULT,
    REQUEST_TIMEOUT_MS_DEFAULT,
    RETRY_BACKOFF_BASE_MS,
)
from stripro.core.enums import Environment


class Settings(BaseSettings):
    """
    API client settings (flat structure).

    Configuration precedence:
        1. Environment variables
        2. Default values

    Returns:
        Settings: Client configuration loaded from environment.
    """

    # Environment detection
    environment: Environment = Field(
        default=Environment.DEVELOPMENT,
        description="Application environment (development, testing, ci, production)",
    )
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    )

    # Application metadata
    app_name: str = Field(
        default="Stripro",
        description="Application name",
    )
    app_version: str = Field(
        default="0.1.0",
        description="Application version",
    )

    # Endpoints
    api_base_url: str = Field(
        default="http://localhost:3000",
        description="REST API base URL",
    )
    graphql_url: str = Field(
        default="http://localhost:4000/graphql",
        description="GraphQL endpoint URL",
    )
    mcp_base_url: str = Field(
        default="http://localhost:8787",
        description="MCP tool server base URL (often an ngrok tunnel)",
    )

    # Request defaults
    request_timeout_ms: int = Field(
        default=REQUEST_TIMEOUT_MS_DEFAULT,
        description="Per-attempt request timeout in milliseconds",
    )
    request_retries: int = Field(
        default=0,
        description="Retries per call when the call site does not set one",
    )
    retry_backoff_base_ms: int = Field(
        default=RETRY_BACKOFF_BASE_MS,
        description="Backoff unit in milliseconds (attempt n waits 2**n units)",
    )

    # Cache
    cache_ttl_seconds: int = Field(
        default=CACHE_TTL_SECONDS_DEFAULT,
        description="TTL used by services for cached reads",
    )
    cache_sweep_threshold: int = Field(
        default=CACHE_SWEEP_THRESHOLD,
        description="Store size above which writes sweep expired entries",
    )

    # Rate limiting
    rate_limit_max_requests: int = Field(
        default=RATE_LIMIT_MAX_REQUESTS_DEFAULT,
        description="Requests allowed per window for rate-limited services",
    )
    rate_limit_window_ms: int = Field(
        default=RATE_LIMIT_WINDOW_MS_DEFAULT,
        description="Fixed window length in milliseconds",
    )

    model_config = SettingsConfigDict(
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("api_base_url", "graphql_url", "mcp_base_url")
    @classmethod
    def validate_url(cls, v: str) -> str:
        """
        Remove trailing slashes from URLs.

        Args:
            v: URL string.

        Returns:
            str: URL without trailing slash.
        """
        return v.rstrip("/")

    @field_validator("request_retries")
    @classmethod
    def validate_retries(cls, v: int) -> int:
        """
        Reject negative retry counts.

        Raises:
            ValueError: If retries is negative.
        """
        if v < 0:
            raise ValueError("request_retries must be >= 0")
        return v

    @field_validator(
        "request_timeout_ms",
        "retry_backoff_base_ms",
        "cache_ttl_seconds",
        "cache_sweep_threshold",
        "rate_limit_max_requests",
        "rate_limit_window_ms",
    )
    @classmethod
    def validate_positive(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("value must be positive")
        return v

    @property
    def is_development(self) -> bool:
        """
        Check if running in development environment.

        Returns:
            bool: True if environment is DEVELOPMENT, False otherwise.
        """
        return self.environment == Environment.DEVELOPMENT

    @property
    def is_testing(self) -> bool:
        """
        Check if running in testing or CI environment.

        Returns:
            bool: True if environment is TESTING or CI.
        """
        return self.environment in (Environment.TESTING, Environment.CI)


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are loaded only once per process.

    Returns:
        Settings: Cached settings instance.
    """
    return Settings()

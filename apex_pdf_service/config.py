"""
APEX PDF Service Configuration Module

Centralized configuration management with Pydantic validation.
All environment variables are validated at startup to catch misconfigurations early.
"""

import logging
from functools import lru_cache
from typing import List

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ServiceSettings(BaseSettings):
    """
    PDF service configuration with validation.

    All settings can be overridden via environment variables
    (PORT, MAX_CONCURRENT_RENDERS, IMAGE_FETCH_TIMEOUT, ...).
    """

    model_config = SettingsConfigDict(env_prefix="", case_sensitive=False)

    # === Server ===
    host: str = Field(default="0.0.0.0", description="Bind address")
    port: int = Field(default=8080, ge=1, le=65535, description="Listening port")
    log_level: str = Field(default="INFO", description="Root log level")

    # === Concurrency & Limits ===
    max_concurrent_renders: int = Field(
        default=5,
        ge=1,
        le=50,
        description="Maximum simultaneous report renders before rejecting (1-50)"
    )
    max_payload_bytes: int = Field(
        default=50 * 1024 * 1024,
        ge=1024,
        description="Maximum accepted request body size in bytes"
    )

    # === Timeouts ===
    image_fetch_timeout: float = Field(
        default=10.0,
        gt=0,
        le=120,
        description="Per-image fetch timeout in seconds"
    )
    browser_launch_timeout_ms: int = Field(
        default=60000,
        ge=1000,
        description="Chromium launch timeout in milliseconds"
    )
    content_timeout_ms: int = Field(
        default=60000,
        ge=1000,
        description="Timeout for loading report HTML until network idle (ms)"
    )

    # === Playwright ===
    playwright_headless: bool = Field(default=True, description="Run Chromium headless")
    validate_playwright_on_startup: bool = Field(
        default=True,
        description="Launch Chromium once at startup to verify PDF rendering works"
    )

    # === CORS ===
    cors_origins: str = Field(
        default="*",
        description="Comma-separated list of allowed CORS origins"
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is one the logging module knows."""
        allowed = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        v_upper = v.upper()
        if v_upper not in allowed:
            raise ValueError(f"log_level must be one of: {', '.join(sorted(allowed))}")
        return v_upper

    @property
    def cors_origins_list(self) -> List[str]:
        """Parse CORS origins into a list."""
        if not self.cors_origins:
            return []
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]


@lru_cache()
def get_settings() -> ServiceSettings:
    """
    Get cached settings instance.

    Settings are loaded once and cached for performance.
    Use this function to access configuration throughout the app.
    """
    return ServiceSettings()


def validate_config_on_startup() -> ServiceSettings:
    """
    Validate configuration at application startup.

    Raises ValueError with details if config is invalid.
    """
    logger = logging.getLogger(__name__)

    try:
        settings = get_settings()
    except Exception as e:
        raise ValueError(f"Configuration validation failed: {e}")

    logger.info(f"Configuration loaded: port={settings.port}")
    logger.info(f"  max_concurrent_renders={settings.max_concurrent_renders}")
    logger.info(f"  image_fetch_timeout={settings.image_fetch_timeout}s")
    logger.info(f"  browser_launch_timeout={settings.browser_launch_timeout_ms}ms")
    logger.info(f"  content_timeout={settings.content_timeout_ms}ms")
    logger.info(f"  cors_origins={settings.cors_origins_list}")
    return settings

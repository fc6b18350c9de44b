"""
Visitor Service Configuration Module

Centralized configuration management with Pydantic validation.
All environment variables are validated at startup to catch misconfigurations early.
"""

import logging
from functools import lru_cache
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings


logger = logging.getLogger(__name__)


class VisitorSettings(BaseSettings):
    """
    Visitor service configuration with validation.

    All settings can be overridden via environment variables
    (CRON_SECRET, TARGET_URL, STAY_MINUTES, ...).
    """

    # === Security ===
    cron_secret: Optional[str] = Field(
        default=None,
        description="Shared secret for /run. Unset means every trigger is rejected."
    )

    # === Visit ===
    target_url: Optional[str] = Field(
        default=None,
        description="Default target URL when ?url= is not provided"
    )
    stay_minutes: float = Field(
        default=14,
        ge=0,
        allow_inf_nan=False,
        description="How long to stay on the page after navigation"
    )

    # === Playwright ===
    launch_timeout_ms: int = Field(
        default=0,
        ge=0,
        description="Browser launch timeout in ms (0 = no timeout)"
    )
    navigation_timeout_ms: int = Field(
        default=120000,
        ge=0,
        description="Navigation timeout in ms"
    )
    playwright_headless: bool = Field(
        default=True,
        description="Run Chromium headless"
    )

    # === Server ===
    host: str = Field(default="0.0.0.0", description="Listen address")
    port: int = Field(default=8080, ge=1, le=65535, description="Listen port")
    log_level: str = Field(default="INFO", description="Root log level")

    # === Keep-alive ===
    keepalive_url: Optional[str] = Field(
        default=None,
        description="URL to ping during a run (defaults to <host>/healthz of the trigger request)"
    )
    keepalive_interval_ms: int = Field(
        default=45000,
        gt=0,
        description="Keep-alive ping interval in ms"
    )
    keepalive_timeout_ms: int = Field(
        default=5000,
        gt=0,
        description="Per-ping timeout in ms"
    )

    @field_validator("cron_secret", "target_url", "keepalive_url", mode="before")
    @classmethod
    def empty_as_none(cls, v: Optional[str]) -> Optional[str]:
        """Treat blank env values as unset."""
        if v is None:
            return None
        v = str(v).strip()
        return v or None

    @field_validator("target_url", "keepalive_url")
    @classmethod
    def validate_url_format(cls, v: Optional[str]) -> Optional[str]:
        """Basic URL format validation."""
        if v is not None and not v.startswith(("http://", "https://")):
            raise ValueError(f"Invalid URL format: {v}")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        v_upper = v.upper()
        if v_upper not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {v}")
        return v_upper

    @property
    def auth_configured(self) -> bool:
        return self.cron_secret is not None

    class Config:
        env_prefix = ""  # No prefix, use exact env var names
        case_sensitive = False  # CRON_SECRET = cron_secret
        env_file = ".env"
        extra = "ignore"


@lru_cache()
def get_settings() -> VisitorSettings:
    """
    Get cached settings instance.

    Settings are loaded once and cached for the life of the process.
    """
    return VisitorSettings()


def validate_config_on_startup(settings: VisitorSettings) -> None:
    """
    Log the loaded configuration (secrets redacted).

    A missing secret is not fatal: the service still answers /status and
    /healthz but rejects every trigger.
    """
    if not settings.auth_configured:
        logger.warning("CRON_SECRET not configured - all /run requests will be rejected")

    logger.info("Configuration loaded:")
    logger.info(f"  cron_secret={'*****' if settings.auth_configured else None}")
    logger.info(f"  target_url={settings.target_url}")
    logger.info(f"  stay_minutes={settings.stay_minutes}")
    logger.info(f"  launch_timeout_ms={settings.launch_timeout_ms} (0 = no timeout)")
    logger.info(f"  navigation_timeout_ms={settings.navigation_timeout_ms}")
    logger.info(f"  keepalive_url={settings.keepalive_url or '<derived from request>'}")
    logger.info(f"  keepalive_interval_ms={settings.keepalive_interval_ms}")

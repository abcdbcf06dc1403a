"""
Environment configuration for the navigation engine.

Read once per process through :func:`get_settings`; later changes to
the environment are not picked up mid-run.

Uses ``pydantic_settings.BaseSettings`` for environment variable
binding, type coercion and validation.
"""

from __future__ import annotations

import functools

import pydantic
import pydantic_settings

from adaptive_nav.browser import device_configs
from adaptive_nav.models.navigation import RetryConfig, ViewportCategory
from adaptive_nav.utils import logger

log = logger.create_logger("Config")

DEFAULT_BASE_URL = "http://localhost:3000"


class NavigationSettings(pydantic_settings.BaseSettings):
    """Navigation engine settings.

    Attributes:
        base_url: Application root used for direct URL navigation.
        default_viewport: Category used when the caller gives none.
        max_retries: Full click-through attempts before falling back.
        base_delay_ms: Backoff delay after the first failed attempt.
        max_delay_ms: Upper bound on any backoff delay.
        backoff_factor: Growth factor between consecutive delays.
        browser_device: Device profile the Playwright driver emulates.
        headless: Whether the browser runs without a window.
    """

    model_config = pydantic_settings.SettingsConfigDict(frozen=True, populate_by_name=True)

    base_url: str = pydantic.Field(default=DEFAULT_BASE_URL, validation_alias="BASE_URL")
    default_viewport: ViewportCategory = pydantic.Field(
        default=ViewportCategory.MOBILE, validation_alias="VIEWPORT_CATEGORY"
    )
    max_retries: int = pydantic.Field(default=3, ge=1, validation_alias="NAV_MAX_RETRIES")
    base_delay_ms: int = pydantic.Field(default=1000, ge=0, validation_alias="NAV_BASE_DELAY_MS")
    max_delay_ms: int = pydantic.Field(default=5000, ge=0, validation_alias="NAV_MAX_DELAY_MS")
    backoff_factor: float = pydantic.Field(default=2.0, ge=1.0, validation_alias="NAV_BACKOFF_FACTOR")
    browser_device: str = pydantic.Field(default=device_configs.DEFAULT_DEVICE, validation_alias="BROWSER_DEVICE")
    headless: bool = pydantic.Field(default=True, validation_alias="HEADLESS")

    @pydantic.field_validator("default_viewport", mode="before")
    @classmethod
    def _normalise_viewport(cls, value: object) -> object:
        if isinstance(value, str):
            value = value.strip().lower()
            if value not in {category.value for category in ViewportCategory}:
                log.warn("Unknown VIEWPORT_CATEGORY, using mobile", {"value": value})
                return ViewportCategory.MOBILE
        return value

    @pydantic.field_validator("base_url")
    @classmethod
    def _strip_base_url(cls, value: str) -> str:
        return value.strip().rstrip("/") or DEFAULT_BASE_URL

    @pydantic.model_validator(mode="after")
    def _check_delays(self) -> NavigationSettings:
        if self.max_delay_ms < self.base_delay_ms:
            raise ValueError("NAV_MAX_DELAY_MS must be >= NAV_BASE_DELAY_MS")
        return self

    def retry_config(self) -> RetryConfig:
        """Backoff policy built from these settings."""
        return RetryConfig(
            max_retries=self.max_retries,
            base_delay_ms=self.base_delay_ms,
            max_delay_ms=self.max_delay_ms,
            backoff_factor=self.backoff_factor,
        )


@functools.lru_cache(maxsize=1)
def get_settings() -> NavigationSettings:
    """Process-wide settings, read from the environment on first use."""
    settings = NavigationSettings()
    log.debug(
        "Loaded navigation settings",
        {"baseUrl": settings.base_url, "viewport": settings.default_viewport.value, "maxRetries": settings.max_retries},
    )
    return settings

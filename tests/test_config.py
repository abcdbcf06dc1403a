"""Tests for adaptive_nav.navigation.config - environment settings."""

from __future__ import annotations

from collections.abc import Iterator

import pydantic
import pytest

from adaptive_nav.models.navigation import RetryConfig, ViewportCategory
from adaptive_nav.navigation import config

ENV_VARS = (
    "BASE_URL",
    "VIEWPORT_CATEGORY",
    "NAV_MAX_RETRIES",
    "NAV_BASE_DELAY_MS",
    "NAV_MAX_DELAY_MS",
    "NAV_BACKOFF_FACTOR",
    "BROWSER_DEVICE",
    "HEADLESS",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    config.get_settings.cache_clear()
    yield
    config.get_settings.cache_clear()


class TestDefaults:
    def test_defaults(self) -> None:
        settings = config.NavigationSettings()
        assert settings.base_url == "http://localhost:3000"
        assert settings.default_viewport is ViewportCategory.MOBILE
        assert settings.max_retries == 3
        assert settings.base_delay_ms == 1000
        assert settings.max_delay_ms == 5000
        assert settings.backoff_factor == 2.0
        assert settings.browser_device == "iphone-se"
        assert settings.headless is True

    def test_retry_config(self) -> None:
        assert config.NavigationSettings().retry_config() == RetryConfig()


class TestEnvironment:
    def test_reads_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("BASE_URL", "https://staging.example.com/app/")
        monkeypatch.setenv("VIEWPORT_CATEGORY", "Desktop")
        monkeypatch.setenv("NAV_MAX_RETRIES", "5")
        monkeypatch.setenv("HEADLESS", "false")

        settings = config.NavigationSettings()

        assert settings.base_url == "https://staging.example.com/app"
        assert settings.default_viewport is ViewportCategory.DESKTOP
        assert settings.max_retries == 5
        assert settings.headless is False

    def test_unknown_viewport_falls_back_to_mobile(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("VIEWPORT_CATEGORY", "smartwatch")
        assert config.NavigationSettings().default_viewport is ViewportCategory.MOBILE

    def test_blank_base_url_uses_default(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("BASE_URL", "  ")
        assert config.NavigationSettings().base_url == config.DEFAULT_BASE_URL

    def test_zero_retries_rejected(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("NAV_MAX_RETRIES", "0")
        with pytest.raises(pydantic.ValidationError):
            config.NavigationSettings()

    def test_max_delay_below_base_rejected(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("NAV_BASE_DELAY_MS", "3000")
        monkeypatch.setenv("NAV_MAX_DELAY_MS", "1000")
        with pytest.raises(pydantic.ValidationError):
            config.NavigationSettings()

    def test_field_names_accepted(self) -> None:
        settings = config.NavigationSettings(max_retries=2, base_delay_ms=10, max_delay_ms=20)
        assert settings.retry_config() == RetryConfig(max_retries=2, base_delay_ms=10, max_delay_ms=20)


class TestGetSettings:
    def test_cached(self) -> None:
        assert config.get_settings() is config.get_settings()

    def test_read_once(self, monkeypatch: pytest.MonkeyPatch) -> None:
        first = config.get_settings()
        monkeypatch.setenv("NAV_MAX_RETRIES", "7")
        assert config.get_settings().max_retries == first.max_retries

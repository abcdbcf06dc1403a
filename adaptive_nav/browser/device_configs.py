"""
Device configuration profiles for browser emulation.
One representative device per viewport category, plus common extras.
"""

from __future__ import annotations

from adaptive_nav.models.browser import DeviceConfig, ViewportSize
from adaptive_nav.models.navigation import ViewportCategory

DEFAULT_DEVICE = "iphone-se"

DEVICE_CONFIGS: dict[str, DeviceConfig] = {
    "iphone-se": DeviceConfig(
        name="iPhone SE (2020)",
        user_agent="Mozilla/5.0 (iPhone; CPU iPhone OS 15_0 like Mac OS X) AppleWebKit/605.1.15 (KHTML, like Gecko) Version/15.0 Mobile/15E148 Safari/604.1",
        viewport=ViewportSize(width=375, height=667),
        device_scale_factor=2,
        is_mobile=True,
        has_touch=True,
    ),
    "iphone-14": DeviceConfig(
        name="iPhone 14",
        user_agent="Mozilla/5.0 (iPhone; CPU iPhone OS 17_0 like Mac OS X) AppleWebKit/605.1.15 (KHTML, like Gecko) Version/17.0 Mobile/15E148 Safari/604.1",
        viewport=ViewportSize(width=390, height=844),
        device_scale_factor=3,
        is_mobile=True,
        has_touch=True,
    ),
    "galaxy-s21": DeviceConfig(
        name="Samsung Galaxy S21",
        user_agent="Mozilla/5.0 (Linux; Android 12; SM-G991B) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/96.0.4664.104 Mobile Safari/537.36",
        viewport=ViewportSize(width=360, height=800),
        device_scale_factor=3,
        is_mobile=True,
        has_touch=True,
    ),
    "ipad": DeviceConfig(
        name="iPad",
        user_agent="Mozilla/5.0 (iPad; CPU OS 17_4 like Mac OS X) AppleWebKit/605.1.15 (KHTML, like Gecko) Version/17.4 Mobile/15E148 Safari/604.1",
        viewport=ViewportSize(width=768, height=1024),
        device_scale_factor=2,
        is_mobile=True,
        has_touch=True,
    ),
    "desktop-chrome": DeviceConfig(
        name="Desktop Chrome",
        user_agent="Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/122.0.0.0 Safari/537.36",
        viewport=ViewportSize(width=1920, height=1080),
        device_scale_factor=1,
        is_mobile=False,
        has_touch=False,
    ),
}

_CATEGORY_DEVICES: dict[ViewportCategory, str] = {
    ViewportCategory.MOBILE: "iphone-se",
    ViewportCategory.TABLET: "ipad",
    ViewportCategory.DESKTOP: "desktop-chrome",
}


def get_device_config(name: str | None) -> DeviceConfig:
    """Look up a device profile by name.

    Unknown or missing names return the default mobile device rather
    than raising, so a typo in the environment still yields a usable
    (and the most conservative) profile.
    """
    key = (name or "").strip().lower()
    return DEVICE_CONFIGS.get(key, DEVICE_CONFIGS[DEFAULT_DEVICE])


def device_for_category(category: ViewportCategory) -> DeviceConfig:
    """Representative device profile for a viewport category."""
    return DEVICE_CONFIGS[_CATEGORY_DEVICES[category]]

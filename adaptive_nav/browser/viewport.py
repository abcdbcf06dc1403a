"""
Viewport classification and per-category timeout profiles.

Mobile timeouts are the most generous of the three, so the mobile
profile doubles as the default for anything unrecognised.
"""

from __future__ import annotations

from adaptive_nav.models.browser import ViewportSize
from adaptive_nav.models.navigation import TimeoutOperation, TimeoutProfile, ViewportCategory

TABLET_MIN_WIDTH = 768
DESKTOP_MIN_WIDTH = 1024

# iOS and Android guidelines both use 44px as the smallest comfortable target.
MIN_TOUCH_TARGET_PX = 44

TIMEOUT_PROFILES: dict[ViewportCategory, TimeoutProfile] = {
    ViewportCategory.MOBILE: TimeoutProfile(page_load=20000, element_wait=15000, network_idle=8000),
    ViewportCategory.TABLET: TimeoutProfile(page_load=18000, element_wait=12000, network_idle=6000),
    ViewportCategory.DESKTOP: TimeoutProfile(page_load=15000, element_wait=10000, network_idle=5000),
}

VIEWPORT_PRESETS: dict[ViewportCategory, ViewportSize] = {
    ViewportCategory.MOBILE: ViewportSize(width=375, height=667),
    ViewportCategory.TABLET: ViewportSize(width=768, height=1024),
    ViewportCategory.DESKTOP: ViewportSize(width=1920, height=1080),
}


def classify(width: int | float) -> ViewportCategory:
    """Map a viewport width in pixels to its category."""
    if width < TABLET_MIN_WIDTH:
        return ViewportCategory.MOBILE
    if width < DESKTOP_MIN_WIDTH:
        return ViewportCategory.TABLET
    return ViewportCategory.DESKTOP


def to_category(value: ViewportCategory | str | None) -> ViewportCategory:
    """Coerce a category name, defaulting to mobile when unrecognised."""
    if isinstance(value, ViewportCategory):
        return value
    try:
        return ViewportCategory(str(value).strip().lower())
    except ValueError:
        return ViewportCategory.MOBILE


def timeout_profile(category: ViewportCategory | str | None) -> TimeoutProfile:
    """Timeout profile for *category*; mobile when unrecognised."""
    return TIMEOUT_PROFILES[to_category(category)]


def timeout_for(category: ViewportCategory | str | None, operation: TimeoutOperation) -> int:
    """Timeout in milliseconds for one waiting phase."""
    return getattr(timeout_profile(category), operation)


def viewport_for(category: ViewportCategory | str | None) -> ViewportSize:
    """Preset viewport size for *category*; mobile when unrecognised."""
    return VIEWPORT_PRESETS[to_category(category)]


def is_touch_target_adequate(width: float, height: float) -> bool:
    """Whether an element is large enough to tap reliably."""
    return width >= MIN_TOUCH_TARGET_PX and height >= MIN_TOUCH_TARGET_PX

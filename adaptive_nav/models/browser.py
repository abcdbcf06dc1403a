"""Pydantic models for the browser driver: viewports, devices and element snapshots."""

from __future__ import annotations

from typing import Any

import pydantic


class ViewportSize(pydantic.BaseModel):
    """Viewport dimensions in CSS pixels."""

    model_config = pydantic.ConfigDict(frozen=True)

    width: int
    height: int


class DeviceConfig(pydantic.BaseModel):
    """Device configuration for browser emulation."""

    model_config = pydantic.ConfigDict(frozen=True)

    name: str
    user_agent: str
    viewport: ViewportSize
    device_scale_factor: float
    is_mobile: bool
    has_touch: bool


class BoundingBox(pydantic.BaseModel):
    """Rendered box of an element, as reported by the driver."""

    x: float = 0
    y: float = 0
    width: float
    height: float

    @property
    def is_empty(self) -> bool:
        return self.width <= 0 or self.height <= 0


class ElementInfo(pydantic.BaseModel):
    """Snapshot of one element matched by a selector.

    ``handle`` is whatever the driver needs to act on the element
    later (a Playwright ``Locator`` for the real driver).
    """

    model_config = pydantic.ConfigDict(arbitrary_types_allowed=True)

    handle: Any = None
    visible: bool
    interactable: bool
    bounding_box: BoundingBox | None = None

    @property
    def is_usable(self) -> bool:
        """Visible, receives pointer events and has a non-zero box."""
        return (
            self.visible
            and self.interactable
            and self.bounding_box is not None
            and not self.bounding_box.is_empty
        )


class NavigationResult(pydantic.BaseModel):
    """Result of a direct URL navigation."""

    success: bool
    status_code: int | None = None
    status_text: str | None = None
    error_message: str | None = None

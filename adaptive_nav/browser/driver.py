"""
Capabilities the navigation engine needs from a browser driver.

``PlaywrightDriver`` in :mod:`adaptive_nav.browser.session` is the
production implementation; tests use an in-memory fake.
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

from adaptive_nav.models.browser import ElementInfo, NavigationResult, ViewportSize


@runtime_checkable
class BrowserDriver(Protocol):
    """Async browser operations used by resolution, navigation and validation."""

    async def navigate(self, url: str, timeout_ms: int | None = None) -> NavigationResult: ...

    async def reload(self, timeout_ms: int | None = None) -> None: ...

    async def get_current_url(self) -> str: ...

    async def get_current_title(self) -> str: ...

    async def query_elements(self, selector: str) -> list[ElementInfo]: ...

    async def click(self, handle: Any, timeout_ms: int | None = None) -> None: ...

    async def set_viewport_size(self, width: int, height: int) -> None: ...

    async def get_viewport_size(self) -> ViewportSize: ...

    async def wait_for_network_idle(self, timeout_ms: int) -> bool: ...

    async def wait_for_timeout(self, ms: int) -> None: ...

    async def get_body_text(self, max_chars: int = 2000) -> str: ...

"""
Playwright-backed browser driver.
Each PlaywrightDriver owns one browser, context and page, so a test
scenario never shares navigation state with another.
"""

from __future__ import annotations

import asyncio
from typing import Any

from playwright import async_api

from adaptive_nav.browser import device_configs
from adaptive_nav.models.browser import BoundingBox, DeviceConfig, ElementInfo, NavigationResult, ViewportSize
from adaptive_nav.utils import logger

log = logger.create_logger("Browser")

# Elements beyond this index are ignored when snapshotting a selector.
MAX_ELEMENTS_PER_QUERY = 25

DEFAULT_NAVIGATION_TIMEOUT_MS = 30000

# True when the element's centre point is hit-testable and not disabled.
_INTERACTABLE_JS = """
el => {
    const style = window.getComputedStyle(el);
    if (style.pointerEvents === 'none' || style.visibility === 'hidden') return false;
    if (el.disabled || el.getAttribute('aria-disabled') === 'true') return false;
    const rect = el.getBoundingClientRect();
    if (rect.width === 0 || rect.height === 0) return false;
    const x = rect.left + rect.width / 2;
    const y = rect.top + rect.height / 2;
    if (x < 0 || y < 0 || x > window.innerWidth || y > window.innerHeight) return true;
    const hit = document.elementFromPoint(x, y);
    return hit === null || el === hit || el.contains(hit) || hit.contains(el);
}
"""


class PlaywrightDriver:
    """
    Implements :class:`~adaptive_nav.browser.driver.BrowserDriver` on a Playwright page.
    """

    def __init__(self, *, headless: bool = True, device: DeviceConfig | str | None = None) -> None:
        self._headless = headless
        self._requested_device = device
        self._playwright: async_api.Playwright | None = None
        self._browser: async_api.Browser | None = None
        self._context: async_api.BrowserContext | None = None
        self._page: async_api.Page | None = None
        self._device: DeviceConfig | None = None

    async def __aenter__(self) -> PlaywrightDriver:
        if self._page is None:
            await self.launch(self._requested_device)
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    @property
    def page(self) -> async_api.Page:
        if not self._page:
            raise RuntimeError("No browser session active")
        return self._page

    @property
    def device(self) -> DeviceConfig | None:
        return self._device

    # ==========================================================================
    # Browser Lifecycle
    # ==========================================================================

    async def launch(self, device: DeviceConfig | str | None = None) -> None:
        """Launch Chromium emulating *device*, a profile or profile name (default: iPhone SE).

        A failure part way through releases whatever was already started.
        """
        if not isinstance(device, DeviceConfig):
            device = device_configs.get_device_config(device)
        log.info("Launching browser", {"device": device.name, "headless": self._headless})

        await self.close()

        try:
            self._playwright = await async_api.async_playwright().start()
            self._browser = await self._playwright.chromium.launch(
                headless=self._headless,
                args=["--no-first-run", "--no-default-browser-check", "--disable-extensions"],
            )
            self._context = await self._browser.new_context(
                viewport={"width": device.viewport.width, "height": device.viewport.height},
                user_agent=device.user_agent,
                device_scale_factor=device.device_scale_factor,
                is_mobile=device.is_mobile,
                has_touch=device.has_touch,
            )
            self._page = await self._context.new_page()
        except Exception:
            await self.close()
            raise
        self._device = device
        log.debug("Browser launched", {"viewport": f"{device.viewport.width}x{device.viewport.height}"})

    async def close(self) -> None:
        """Close the page, context, browser and Playwright, ignoring teardown errors."""
        self._page = None

        if self._context:
            try:
                await self._context.close()
            except Exception as exc:
                log.debug("Context close error (non-fatal)", {"error": str(exc)})
            self._context = None

        if self._browser:
            try:
                await self._browser.close()
            except Exception as exc:
                log.debug("Browser close error (non-fatal)", {"error": str(exc)})
            self._browser = None

        if self._playwright:
            try:
                await self._playwright.stop()
            except Exception as exc:
                log.debug("Playwright stop error (non-fatal)", {"error": str(exc)})
            self._playwright = None

    # ==========================================================================
    # Navigation
    # ==========================================================================

    async def navigate(self, url: str, timeout_ms: int | None = None) -> NavigationResult:
        """Go to *url* and wait for the load event."""
        timeout = timeout_ms or DEFAULT_NAVIGATION_TIMEOUT_MS
        log.debug("Navigating", {"url": url, "timeout": timeout})
        try:
            response = await self.page.goto(url, wait_until="load", timeout=timeout)
        except async_api.Error as error:
            log.warn("Navigation error", {"url": url, "error": str(error)})
            return NavigationResult(success=False, error_message=str(error))

        status_code = response.status if response else None
        status_text = response.status_text if response else None
        if status_code is not None and status_code >= 400:
            return NavigationResult(
                success=False,
                status_code=status_code,
                status_text=status_text,
                error_message=f"Server responded {status_code}: {status_text}",
            )
        if self.page.url != url:
            log.info("Redirected", {"from": url, "to": self.page.url})
        return NavigationResult(success=True, status_code=status_code, status_text=status_text)

    async def reload(self, timeout_ms: int | None = None) -> None:
        await self.page.reload(wait_until="load", timeout=timeout_ms or DEFAULT_NAVIGATION_TIMEOUT_MS)

    async def get_current_url(self) -> str:
        return self.page.url

    async def get_current_title(self) -> str:
        return await self.page.title()

    async def wait_for_network_idle(self, timeout_ms: int) -> bool:
        """Wait for network idle; ``False`` when the timeout expires first."""
        try:
            await self.page.wait_for_load_state("networkidle", timeout=timeout_ms)
            return True
        except async_api.TimeoutError:
            log.debug("Network idle timeout", {"timeoutMs": timeout_ms})
            return False

    async def wait_for_timeout(self, ms: int) -> None:
        """Sleep for *ms* milliseconds.

        Uses ``asyncio.sleep`` because Playwright's ``wait_for_timeout``
        is meant for debugging only.
        """
        await asyncio.sleep(ms / 1000)

    # ==========================================================================
    # Elements
    # ==========================================================================

    async def query_elements(self, selector: str) -> list[ElementInfo]:
        """Snapshot visibility, interactability and box of each match."""
        locator = self.page.locator(selector)
        count = min(await locator.count(), MAX_ELEMENTS_PER_QUERY)
        elements: list[ElementInfo] = []
        for index in range(count):
            item = locator.nth(index)
            visible = await item.is_visible()
            box = await item.bounding_box() if visible else None
            interactable = False
            if visible:
                try:
                    interactable = bool(await item.evaluate(_INTERACTABLE_JS, timeout=2000))
                except async_api.Error:
                    log.debug("Interactability check failed", {"selector": selector, "index": index})
            elements.append(
                ElementInfo(
                    handle=item,
                    visible=visible,
                    interactable=interactable,
                    bounding_box=BoundingBox(**box) if box else None,
                )
            )
        return elements

    async def click(self, handle: Any, timeout_ms: int | None = None) -> None:
        locator: async_api.Locator = handle
        await locator.click(timeout=timeout_ms)

    async def get_body_text(self, max_chars: int = 2000) -> str:
        return await self.page.evaluate(
            "max => { const b = document.body; return b ? b.innerText.substring(0, max) : ''; }",
            max_chars,
        )

    # ==========================================================================
    # Viewport
    # ==========================================================================

    async def set_viewport_size(self, width: int, height: int) -> None:
        log.debug("Resizing viewport", {"width": width, "height": height})
        await self.page.set_viewport_size({"width": width, "height": height})

    async def get_viewport_size(self) -> ViewportSize:
        size = self.page.viewport_size
        if size is None:
            # No fixed viewport: ask the page for its window size.
            size = await self.page.evaluate("() => ({ width: window.innerWidth, height: window.innerHeight })")
        return ViewportSize(width=size["width"], height=size["height"])

"""Shared fixtures for the test suite."""

from __future__ import annotations

import dataclasses
from collections.abc import Callable
from typing import Any

import pytest

from adaptive_nav.models.browser import BoundingBox, ElementInfo, NavigationResult, ViewportSize
from adaptive_nav.models.navigation import RetryConfig
from adaptive_nav.navigation.orchestrator import NavigationOrchestrator
from adaptive_nav.navigation.registry import SelectorStrategyRegistry

BASE_URL = "http://localhost:3000"

PAGE_TITLES = {
    "home": "Dashboard - Static Site API Testing",
    "dashboard": "Dashboard - Static Site API Testing",
    "customers": "Customers - Static Site API Testing",
    "tickets": "Tickets - Static Site API Testing",
    "routes": "Routes - Static Site API Testing",
    "reports": "Reports - Static Site API Testing",
}

PAGE_PATHS = {
    "home": "/",
    "dashboard": "/dashboard",
    "customers": "/customers",
    "tickets": "/tickets",
    "routes": "/routes",
    "reports": "/reports",
}


def make_element(
    handle: Any = None,
    *,
    width: float = 120,
    height: float = 48,
    visible: bool = True,
    interactable: bool = True,
) -> ElementInfo:
    """An element snapshot as the real driver would report it."""
    return ElementInfo(
        handle=handle,
        visible=visible,
        interactable=interactable,
        bounding_box=BoundingBox(x=0, y=0, width=width, height=height) if visible else None,
    )


# ── Fake Driver ─────────────────────────────────────────────────


@dataclasses.dataclass
class PageState:
    """What the fake browser shows at one URL."""

    title: str
    body: str = "Page content"
    elements: dict[str, list[ElementInfo]] = dataclasses.field(default_factory=dict)


class FakeDriver:
    """In-memory stand-in for a browser.

    URLs registered with :meth:`add_route` render their state on
    ``navigate`` and ``reload``; clicking a handle listed in
    ``link_targets`` navigates to its URL. Every interaction is recorded.
    """

    def __init__(self, width: int = 375, height: int = 667) -> None:
        self.viewport = ViewportSize(width=width, height=height)
        self.url = ""
        self.title = ""
        self.body = ""
        self.elements: dict[str, list[ElementInfo]] = {}
        self.routes: dict[str, PageState] = {}
        self.link_targets: dict[Any, str] = {}
        self.failing_selectors: set[str] = set()
        self.network_idle = True

        self.navigations: list[str] = []
        self.clicks: list[Any] = []
        self.reloads = 0
        self.waits: list[int] = []
        self.idle_waits: list[int] = []
        self.queries: list[str] = []
        self.resizes: list[tuple[int, int]] = []

    def add_route(self, url: str, state: PageState) -> None:
        self.routes[url] = state

    def show(self, url: str) -> None:
        """Render *url* without recording a navigation."""
        self.url = url
        state = self.routes.get(url)
        if state is None:
            self.title, self.body, self.elements = "", "", {}
            return
        self.title = state.title
        self.body = state.body
        self.elements = {selector: list(items) for selector, items in state.elements.items()}

    async def navigate(self, url: str, timeout_ms: int | None = None) -> NavigationResult:
        self.navigations.append(url)
        self.show(url)
        if url in self.routes:
            return NavigationResult(success=True, status_code=200, status_text="OK")
        return NavigationResult(success=False, status_code=404, status_text="Not Found")

    async def reload(self, timeout_ms: int | None = None) -> None:
        self.reloads += 1
        self.show(self.url)

    async def get_current_url(self) -> str:
        return self.url

    async def get_current_title(self) -> str:
        return self.title

    async def query_elements(self, selector: str) -> list[ElementInfo]:
        self.queries.append(selector)
        if selector in self.failing_selectors:
            raise RuntimeError(f"Selector engine failed on {selector}")
        return list(self.elements.get(selector, []))

    async def click(self, handle: Any, timeout_ms: int | None = None) -> None:
        self.clicks.append(handle)
        target = self.link_targets.get(handle)
        if target is not None:
            self.show(target)

    async def set_viewport_size(self, width: int, height: int) -> None:
        self.resizes.append((width, height))
        self.viewport = ViewportSize(width=width, height=height)

    async def get_viewport_size(self) -> ViewportSize:
        return self.viewport

    async def wait_for_network_idle(self, timeout_ms: int) -> bool:
        self.idle_waits.append(timeout_ms)
        return self.network_idle

    async def wait_for_timeout(self, ms: int) -> None:
        self.waits.append(ms)

    async def get_body_text(self, max_chars: int = 2000) -> str:
        return self.body[:max_chars]


def page_state(name: str, *, with_links: bool = True, **extra: list[ElementInfo]) -> PageState:
    """A healthy render of page *name*: content, main navigation and nav links."""
    elements: dict[str, list[ElementInfo]] = {
        f'[data-testid="{name}-page"]': [make_element(f"{name}-content", width=375, height=600)],
        '[data-testid="main-navigation"]': [make_element("main-nav", width=375, height=56)],
    }
    if with_links:
        for page in PAGE_PATHS:
            elements[f'[data-testid="nav-{page}"]'] = [make_element(f"nav-{page}")]
    elements.update(extra)
    return PageState(title=PAGE_TITLES[name], body=f"{name.title()} page content", elements=elements)


def build_app(driver: FakeDriver, *, with_links: bool = True) -> FakeDriver:
    """Register every default page on *driver* and open the home page."""
    for name, path in PAGE_PATHS.items():
        driver.add_route(BASE_URL + ("/" if path == "/" else path), page_state(name, with_links=with_links))
        driver.link_targets[f"nav-{name}"] = BASE_URL + ("/" if path == "/" else path)
    driver.show(BASE_URL + "/")
    return driver


# ── Fixtures ────────────────────────────────────────────────────


@pytest.fixture()
def driver() -> FakeDriver:
    """An empty fake browser at the mobile preset size."""
    return FakeDriver()


@pytest.fixture()
def app_driver() -> FakeDriver:
    """A fake browser serving every default page, opened on home."""
    return build_app(FakeDriver())


@pytest.fixture()
def registry() -> SelectorStrategyRegistry:
    return SelectorStrategyRegistry()


@pytest.fixture()
def fast_retry() -> RetryConfig:
    return RetryConfig(max_retries=3, base_delay_ms=100, max_delay_ms=400, backoff_factor=2.0)


@pytest.fixture()
def make_orchestrator(
    registry: SelectorStrategyRegistry,
    fast_retry: RetryConfig,
) -> Callable[[FakeDriver], NavigationOrchestrator]:
    """Factory wiring an orchestrator around a given fake driver."""

    def _make(fake: FakeDriver) -> NavigationOrchestrator:
        return NavigationOrchestrator(fake, registry, base_url=BASE_URL, retry_config=fast_retry)

    return _make

"""
Page-load validation.

Combines URL, title, required-element, search-interface, touch-target
and timing checks into a single :class:`PageValidation`. Every check
runs even when an earlier one failed, so one report carries all the
diagnostics. Only errors fail a page; warnings are informational.
"""

from __future__ import annotations

import time
from collections.abc import Awaitable, Iterable

from adaptive_nav.browser import viewport
from adaptive_nav.browser.driver import BrowserDriver
from adaptive_nav.models.navigation import PageConfig, PageValidation, Reliability, ViewportCategory
from adaptive_nav.navigation.errors import get_error_message
from adaptive_nav.navigation.registry import SelectorStrategyRegistry, order_strategies
from adaptive_nav.navigation.resolver import ElementMatch, ElementResolver
from adaptive_nav.utils import logger, url as url_mod

log = logger.create_logger("PageValidator")

_GUIDANCE = {
    "url": "Check that navigation completed and that the URL patterns are current",
    "title": "Check the title patterns and whether the title is set after render",
    "element": "Check the element selectors and whether the element renders late",
    "search": "Mark the search interface optional if this page has none",
    "timing": "The page took longer than the load limit for this viewport",
}


def _error_message(page_name: str, error_type: str, details: str, url: str, category: ViewportCategory) -> str:
    lines = [
        f"Page validation failed for {page_name}: {details}",
        f"   Error type: {error_type}",
        f"   Current URL: {url or '(none)'}",
        f"   Viewport: {category.value}",
    ]
    if error_type in _GUIDANCE:
        lines.append(f"   Suggested action: {_GUIDANCE[error_type]}")
    return "\n".join(lines)


def title_matches(title: str, patterns: tuple[str, ...]) -> str | None:
    """First pattern equal to or contained in *title* (case-insensitive)."""
    lowered = title.strip().lower()
    if not lowered:
        return None
    for pattern in patterns:
        if pattern and pattern.lower() in lowered:
            return pattern
    return None


async def find_touch_target_violations(driver: BrowserDriver, selectors: Iterable[str]) -> list[str]:
    """Describe every visible element under *selectors* smaller than 44x44.

    A selector the driver cannot query is logged and skipped.
    """
    violations: list[str] = []
    for selector in selectors:
        try:
            elements = await driver.query_elements(selector)
        except Exception as exc:
            log.warn("Touch target query failed", {"selector": selector, "error": get_error_message(exc)})
            continue
        for element in elements:
            box = element.bounding_box
            if not element.visible or box is None:
                continue
            if not viewport.is_touch_target_adequate(box.width, box.height):
                violations.append(
                    f"Touch target {selector!r} is {box.width:g}x{box.height:g}px, "
                    f"below {viewport.MIN_TOUCH_TARGET_PX}x{viewport.MIN_TOUCH_TARGET_PX}px"
                )
    return violations


class PageLoadValidator:
    """Certifies that the expected page is the one currently rendered."""

    def __init__(
        self,
        driver: BrowserDriver,
        registry: SelectorStrategyRegistry,
        resolver: ElementResolver | None = None,
    ) -> None:
        self._driver = driver
        self._registry = registry
        self._resolver = resolver or ElementResolver()

    async def validate(
        self,
        page_name: str,
        category: ViewportCategory,
        started_at: float | None = None,
    ) -> PageValidation:
        """Validate the current page against *page_name*'s configuration.

        Args:
            page_name: Logical page to check for.
            category: Viewport category of the current layout.
            started_at: ``time.monotonic()`` value when navigation
                began. Defaults to the start of this call.

        Raises:
            UnknownPageError: When *page_name* is not registered.
        """
        config = self._registry.page_config(page_name)
        start = time.monotonic() if started_at is None else started_at
        result = PageValidation(
            page_name=config.name,
            viewport=category,
            search_interface_required=config.search_interface_required,
        )
        required_visible: list[bool] = []

        await self._guard(self._check_url(config, category, result), "url", config, category, result)
        await self._guard(self._check_title(config, category, result), "title", config, category, result)
        await self._guard(
            self._check_required_elements(config, category, result, required_visible),
            "element",
            config,
            category,
            result,
        )
        await self._guard(
            self._check_search_interface(config, category, result),
            "search",
            config,
            category,
            result,
            optional=not config.search_interface_required,
        )
        if category in (ViewportCategory.MOBILE, ViewportCategory.TABLET):
            await self._guard(
                self._check_touch_targets(config, result), "touch", config, category, result, optional=True
            )

        result.is_responsive = bool(result.url) and bool(result.title) and any(required_visible)
        result.load_time_ms = int((time.monotonic() - start) * 1000)
        limit = viewport.timeout_for(category, "page_load")
        if result.load_time_ms > limit:
            result.errors.append(
                _error_message(
                    config.name,
                    "timing",
                    f"Load time {result.load_time_ms}ms exceeded {limit}ms",
                    result.url,
                    category,
                )
            )

        self._log_outcome(result)
        return result

    async def _guard(
        self,
        check: Awaitable[None],
        error_type: str,
        config: PageConfig,
        category: ViewportCategory,
        result: PageValidation,
        *,
        optional: bool = False,
    ) -> None:
        """Run one check; a driver failure becomes an error, not an exception.

        Failures of *optional* checks are recorded as warnings instead.
        """
        try:
            await check
        except Exception as exc:
            log.warn("Validation check raised", {"check": error_type, "error": get_error_message(exc)})
            if optional:
                result.warnings.append(f"Skipped {error_type} check after unexpected error: {get_error_message(exc)}")
                return
            result.errors.append(
                _error_message(
                    config.name,
                    error_type,
                    f"Unexpected error during {error_type} check: {get_error_message(exc)}",
                    result.url,
                    category,
                )
            )

    async def _check_url(self, config: PageConfig, category: ViewportCategory, result: PageValidation) -> None:
        result.url = await self._driver.get_current_url()
        if url_mod.matches_any_pattern(result.url, config.url_patterns) is None:
            result.errors.append(
                _error_message(
                    config.name,
                    "url",
                    f"URL does not match any of {list(config.url_patterns)}",
                    result.url,
                    category,
                )
            )

    async def _check_title(self, config: PageConfig, category: ViewportCategory, result: PageValidation) -> None:
        result.title = await self._driver.get_current_title()
        if title_matches(result.title, config.title_patterns) is None:
            result.errors.append(
                _error_message(
                    config.name,
                    "title",
                    f"Title {result.title!r} does not match any of {list(config.title_patterns)}",
                    result.url,
                    category,
                )
            )

    async def _check_required_elements(
        self,
        config: PageConfig,
        category: ViewportCategory,
        result: PageValidation,
        required_visible: list[bool],
    ) -> None:
        for element in config.required_elements:
            match = await self._resolver.resolve(order_strategies(element.strategies, category), self._driver)
            if not isinstance(match, ElementMatch):
                required_visible.append(False)
                result.errors.append(
                    _error_message(
                        config.name,
                        "element",
                        f"Required element not found: {element.name}. Tried: {', '.join(match.selectors) or '(no selectors)'}",
                        result.url,
                        category,
                    )
                )
                continue
            required_visible.append(True)
            if match.strategy.reliability is Reliability.LOW:
                result.warnings.append(
                    f"{element.name} on {config.name} only matched low-reliability selector {match.strategy.selector!r}"
                )

    async def _check_search_interface(
        self,
        config: PageConfig,
        category: ViewportCategory,
        result: PageValidation,
    ) -> None:
        selector = config.search_interface_selector

        if not config.search_interface_required:
            result.search_interface_validation_skipped = True
            if selector:
                result.search_interface_present = await self._any_visible(selector)
                if result.search_interface_present:
                    result.warnings.append(
                        f"Search interface present on {config.name} but not marked required ({selector})"
                    )
            return

        if not selector:
            result.errors.append(
                _error_message(config.name, "search", "Search interface required but no selector configured", result.url, category)
            )
            return

        result.search_interface_present = await self._any_visible(selector)
        if not result.search_interface_present:
            result.errors.append(
                _error_message(
                    config.name,
                    "search",
                    f"Required search interface not found. Expected selector: {selector}",
                    result.url,
                    category,
                )
            )

    async def _check_touch_targets(self, config: PageConfig, result: PageValidation) -> None:
        result.warnings.extend(await find_touch_target_violations(self._driver, config.touch_targets))

    async def _any_visible(self, selector: str) -> bool:
        return any(element.visible for element in await self._driver.query_elements(selector))

    def _log_outcome(self, result: PageValidation) -> None:
        data: dict[str, object] = {
            "page": result.page_name,
            "loadTimeMs": result.load_time_ms,
            "errors": len(result.errors),
            "warnings": len(result.warnings),
        }
        if result.is_loaded:
            log.success("Page verified", data)
        else:
            log.warn("Page verification failed", data)
            for error in result.errors:
                log.debug(error.splitlines()[0])
        for warning in result.warnings:
            log.debug(f"WARNING: {warning}")

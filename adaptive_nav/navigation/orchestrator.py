"""
Adaptive navigation between application pages.

Drives one page transition end to end: open the mobile menu when the
layout needs it, resolve and click the navigation link, wait for the
page to settle, validate it, and retry with backoff. A page found in an
error state goes through reload and direct-URL recovery before the next
retry. When every click-through attempt fails the page's primary URL is
visited directly as a last resort before :class:`NavigationFailedError`
is raised.
"""

from __future__ import annotations

import asyncio
import enum
import time
from collections.abc import Sequence

from adaptive_nav.browser import error_state, viewport
from adaptive_nav.browser.driver import BrowserDriver
from adaptive_nav.models.navigation import (
    AttemptedSelector,
    ErrorState,
    PageConfig,
    PageValidation,
    RetryConfig,
    SelectorStrategy,
    ViewportCategory,
)
from adaptive_nav.navigation import config as nav_config
from adaptive_nav.navigation.errors import (
    ElementResolutionError,
    ErrorStateDetected,
    NavigationFailedError,
    PageValidationError,
    get_error_message,
)
from adaptive_nav.navigation.recovery import RECOVERY_STEPS, ErrorRecovery
from adaptive_nav.navigation.registry import SelectorStrategyRegistry
from adaptive_nav.navigation.resolver import ElementResolver, NotFound
from adaptive_nav.navigation.validator import PageLoadValidator, find_touch_target_violations
from adaptive_nav.utils import logger, retry, url as url_mod

log = logger.create_logger("Navigator")

# Time the mobile menu needs to slide in or out after the toggle is clicked.
MENU_SLIDE_IN_MS = 300
MENU_SLIDE_OUT_MS = 250


class NavigationState(enum.StrEnum):
    """Phase of the current navigation, exposed for diagnostics."""

    IDLE = "idle"
    RESOLVING = "resolving"
    CLICKING = "clicking"
    AWAITING_SETTLE = "awaiting_settle"
    VALIDATING = "validating"
    RECOVERING = "recovering"
    SUCCEEDED = "succeeded"
    RETRYING = "retrying"
    FALLING_BACK = "falling_back"
    FAILED = "failed"


class NavigationOrchestrator:
    """Navigates to named pages on one browser driver.

    One orchestrator per driver. Components are injected so tests can
    substitute any of them; :meth:`from_settings` wires the defaults.
    """

    def __init__(
        self,
        driver: BrowserDriver,
        registry: SelectorStrategyRegistry,
        *,
        base_url: str = nav_config.DEFAULT_BASE_URL,
        retry_config: RetryConfig | None = None,
        resolver: ElementResolver | None = None,
        validator: PageLoadValidator | None = None,
        recovery: ErrorRecovery | None = None,
    ) -> None:
        self._driver = driver
        self._registry = registry
        self._base_url = base_url
        self._retry_config = retry_config or RetryConfig()
        self._resolver = resolver or ElementResolver()
        self._validator = validator or PageLoadValidator(driver, registry, self._resolver)
        self._recovery = recovery or ErrorRecovery(driver, registry, self._validator, base_url)
        self._state = NavigationState.IDLE
        self._history: list[NavigationState] = [NavigationState.IDLE]

    @classmethod
    def from_settings(
        cls,
        driver: BrowserDriver,
        settings: nav_config.NavigationSettings | None = None,
        registry: SelectorStrategyRegistry | None = None,
    ) -> NavigationOrchestrator:
        """Build an orchestrator from environment settings and the default page catalogue."""
        settings = settings or nav_config.get_settings()
        return cls(
            driver,
            registry or SelectorStrategyRegistry(),
            base_url=settings.base_url,
            retry_config=settings.retry_config(),
        )

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def state(self) -> NavigationState:
        return self._state

    @property
    def state_history(self) -> list[NavigationState]:
        """States visited by the most recent navigation, in order."""
        return list(self._history)

    def _transition(self, state: NavigationState) -> None:
        self._state = state
        self._history.append(state)

    # ------------------------------------------------------------------
    # Viewport
    # ------------------------------------------------------------------

    async def get_current_viewport_category(self) -> ViewportCategory:
        size = await self._driver.get_viewport_size()
        return viewport.classify(size.width)

    async def set_viewport(self, category: ViewportCategory | str) -> ViewportCategory:
        """Resize the driver to *category*'s preset and return the category."""
        resolved = viewport.to_category(category)
        preset = viewport.viewport_for(resolved)
        await self._driver.set_viewport_size(preset.width, preset.height)
        log.info("Viewport set", {"category": resolved.value, "width": preset.width, "height": preset.height})
        return resolved

    async def _category_for(self, override: ViewportCategory | str | None) -> ViewportCategory:
        current = await self.get_current_viewport_category()
        if override is None:
            return current
        category = viewport.to_category(override)
        if current is not category:
            await self.set_viewport(category)
        return category

    # ------------------------------------------------------------------
    # Navigation
    # ------------------------------------------------------------------

    async def navigate_to_page(
        self,
        page_name: str,
        viewport_override: ViewportCategory | str | None = None,
    ) -> PageValidation:
        """Navigate to *page_name* using the configured retry ceiling.

        Raises:
            UnknownPageError: When *page_name* is not registered.
            NavigationFailedError: When every attempt and the direct
                URL fallback failed.
        """
        return await self._navigate(page_name, self._retry_config.max_retries, viewport_override)

    async def retry_navigation(
        self,
        page_name: str,
        max_retries: int,
        viewport_override: ViewportCategory | str | None = None,
    ) -> PageValidation:
        """Same as :meth:`navigate_to_page` with an explicit attempt ceiling."""
        if max_retries < 1:
            raise ValueError("max_retries must be at least 1")
        return await self._navigate(page_name, max_retries, viewport_override)

    async def _navigate(
        self,
        page_name: str,
        max_attempts: int,
        viewport_override: ViewportCategory | str | None,
    ) -> PageValidation:
        self._state = NavigationState.IDLE
        self._history = [NavigationState.IDLE]

        # Raises UnknownPageError before any browser work.
        config = self._registry.page_config(page_name)
        category = await self._category_for(viewport_override)

        log.section(f"Navigate to {config.name} ({category.value})")
        timer = f"navigate-{config.name}"
        log.start_timer(timer)
        started = time.monotonic()

        attempted: dict[str, AttemptedSelector] = {}
        last_validation: PageValidation | None = None
        last_state: ErrorState | None = None
        last_error: str | None = None
        log.debug("Backoff schedule", {"delaysMs": retry.backoff_schedule(self._retry_config, max_attempts - 1)})

        # Validation passes spent; the last of max_attempts + 1 is kept for the fallback.
        passes = 0
        attempt = 0
        while attempt < max_attempts and passes < max_attempts:
            attempt += 1
            log.subsection(f"Attempt {attempt}/{max_attempts}")
            try:
                validation = await self._attempt(config, category, attempted)
            except ErrorStateDetected as exc:
                passes += 1
                last_error = str(exc)
                last_state = exc.error_state
                last_validation = exc.validation or last_validation
                log.warn("Page in error state", {"type": exc.error_state.error_type, "attempt": attempt})
                recovered = await self._recover(config, category, max_attempts - passes)
                passes += len(recovered)
                if recovered:
                    last_validation = recovered[-1]
                    if last_validation.is_loaded:
                        return self._succeed(timer, f"Recovered {config.name}", last_validation)
                    last_error = f"Recovery of {config.name} failed validation"
            except PageValidationError as exc:
                passes += 1
                last_error = str(exc)
                last_validation = exc.validation
                log.warn("Validation failed", {"attempt": attempt, "errors": len(exc.validation.errors)})
            except ElementResolutionError as exc:
                last_error = str(exc)
                log.warn("Navigation link not found", {"attempt": attempt, "selectors": len(exc.attempted)})
            except Exception as exc:
                last_error = get_error_message(exc)
                log.warn("Navigation attempt failed", {"attempt": attempt, "error": last_error})
            else:
                return self._succeed(timer, f"Navigated to {config.name}", validation)

            self._transition(NavigationState.RETRYING)
            if attempt < max_attempts and passes < max_attempts:
                delay = retry.backoff_delay_ms(attempt, self._retry_config)
                log.info("Retrying after backoff", {"attempt": attempt, "delayMs": delay})
                await self._driver.wait_for_timeout(delay)

        self._transition(NavigationState.FALLING_BACK)
        log.warn("Click-through exhausted, navigating directly", {"page": config.name, "url": config.primary_url})
        try:
            validation = await self._navigate_directly(config, category)
        except Exception as exc:
            last_error = get_error_message(exc)
            log.error("Direct navigation failed", {"error": last_error})
        else:
            if validation.is_loaded:
                return self._succeed(timer, f"Navigated to {config.name} by direct URL", validation)
            last_validation = validation
            last_error = f"Direct navigation to {config.primary_url} failed validation"

        final_state = await error_state.check_for_error_state(self._driver)
        if final_state.in_error or last_state is None:
            last_state = final_state

        self._transition(NavigationState.FAILED)
        elapsed_ms = int(log.end_timer(timer, f"Navigation to {config.name} failed"))
        failure = NavigationFailedError(
            config.name,
            viewport=category,
            attempts=attempt,
            elapsed_ms=elapsed_ms or int((time.monotonic() - started) * 1000),
            attempted_selectors=list(attempted.values()),
            last_validation=last_validation,
            error_state=last_state,
            last_error=last_error,
        )
        log.error(str(failure).splitlines()[0])
        raise failure

    def _succeed(self, timer: str, message: str, validation: PageValidation) -> PageValidation:
        self._transition(NavigationState.SUCCEEDED)
        log.end_timer(timer, message)
        return validation

    async def _recover(self, config: PageConfig, category: ViewportCategory, spare_passes: int) -> list[PageValidation]:
        """Reload, then direct URL, spending at most *spare_passes* validations."""
        steps = min(RECOVERY_STEPS, spare_passes)
        if steps < 1:
            log.debug("No validation passes left for recovery", {"page": config.name})
            return []
        self._transition(NavigationState.RECOVERING)
        return await self._recovery.run(config.name, category, steps)

    async def _attempt(
        self,
        config: PageConfig,
        category: ViewportCategory,
        attempted: dict[str, AttemptedSelector],
    ) -> PageValidation:
        """One click-through cycle. Raises a transient error on any failure."""
        started = time.monotonic()
        profile = viewport.timeout_profile(category)

        self._transition(NavigationState.RESOLVING)
        if category is ViewportCategory.MOBILE:
            await self._open_mobile_menu(category)

        match = await self._resolver.resolve(self._registry.navigation_candidates(config.name, category), self._driver)
        for item in match.attempted:
            attempted.setdefault(item.selector, item)
        if isinstance(match, NotFound):
            raise ElementResolutionError(config.name, "navigation link", match.attempted)

        self._transition(NavigationState.CLICKING)
        log.info(
            "Clicking navigation link",
            {"selector": match.strategy.selector, "reliability": match.strategy.reliability.value},
        )
        await self._click(match.element.handle, profile.element_wait)

        self._transition(NavigationState.AWAITING_SETTLE)
        await self._settle(profile.network_idle)

        self._transition(NavigationState.VALIDATING)
        validation = await self._validator.validate(config.name, category, started)
        if validation.is_loaded:
            return validation

        state = await error_state.check_for_error_state(self._driver)
        if state.in_error:
            raise ErrorStateDetected(config.name, state, validation)
        raise PageValidationError(config.name, validation)

    async def _open_mobile_menu(self, category: ViewportCategory) -> bool:
        """Open the mobile menu unless it is already open. True if it was opened here."""
        if await self._any_visible(self._registry.mobile_menu_container(category)):
            log.debug("Mobile menu already open")
            return False

        if not await self._toggle_menu(category, MENU_SLIDE_IN_MS):
            log.debug("No mobile menu toggle found, trying links directly")
            return False
        log.debug("Mobile menu opened")
        return True

    async def _toggle_menu(self, category: ViewportCategory, slide_ms: int) -> bool:
        toggle = await self._resolver.resolve(self._registry.mobile_menu_toggle(category), self._driver)
        if isinstance(toggle, NotFound):
            return False
        await self._click(toggle.element.handle, viewport.timeout_for(category, "element_wait"))
        await self._driver.wait_for_timeout(slide_ms)
        return True

    async def _any_visible(self, strategies: Sequence[SelectorStrategy]) -> bool:
        for strategy in strategies:
            try:
                elements = await self._driver.query_elements(strategy.selector)
            except Exception as exc:
                log.debug("Selector query failed", {"selector": strategy.selector, "error": get_error_message(exc)})
                continue
            if any(element.visible for element in elements):
                return True
        return False

    async def _click(self, handle: object, timeout_ms: int) -> None:
        await asyncio.wait_for(self._driver.click(handle, timeout_ms), timeout=timeout_ms / 1000)

    async def _settle(self, timeout_ms: int) -> None:
        if not await self._driver.wait_for_network_idle(timeout_ms):
            log.debug("Network did not go idle", {"timeoutMs": timeout_ms})

    async def _navigate_directly(self, config: PageConfig, category: ViewportCategory) -> PageValidation:
        profile = viewport.timeout_profile(category)
        target = url_mod.join_url(self._base_url, config.primary_url)
        started = time.monotonic()

        result = await self._driver.navigate(target, profile.page_load)
        if not result.success:
            log.warn("Direct navigation reported failure", {"url": target, "status": result.status_code})
        self._transition(NavigationState.AWAITING_SETTLE)
        await self._settle(profile.network_idle)

        self._transition(NavigationState.VALIDATING)
        return await self._validator.validate(config.name, category, started)

    # ------------------------------------------------------------------
    # Menu and links
    # ------------------------------------------------------------------

    async def is_mobile_menu_visible(self) -> bool:
        category = await self.get_current_viewport_category()
        return await self._any_visible(self._registry.mobile_menu_container(category))

    async def toggle_mobile_menu(self) -> bool:
        """Click the mobile menu toggle and return whether the menu is now visible."""
        category = await self.get_current_viewport_category()
        was_open = await self.is_mobile_menu_visible()
        if not await self._toggle_menu(category, MENU_SLIDE_OUT_MS if was_open else MENU_SLIDE_IN_MS):
            log.warn("No mobile menu toggle found", {"viewport": category.value})
            return was_open
        return await self.is_mobile_menu_visible()

    async def get_navigation_links(self) -> list[str]:
        """Names of registered pages whose navigation link is visible now.

        On mobile the menu is opened for the scan and closed again
        afterwards if it was opened here.
        """
        category = await self.get_current_viewport_category()
        opened = category is ViewportCategory.MOBILE and await self._open_mobile_menu(category)

        available: list[str] = []
        for page_name in self._registry.page_names():
            if await self._any_visible(self._registry.navigation_candidates(page_name, category)):
                available.append(page_name)

        if opened:
            await self._toggle_menu(category, MENU_SLIDE_OUT_MS)
        log.info("Navigation links available", {"viewport": category.value, "pages": ", ".join(available)})
        return available

    async def is_navigation_responsive(self) -> bool:
        """Check the navigation layout expected for the current viewport.

        On mobile the toggle must open the menu. Tablet and desktop need
        the main navigation, and desktop also its inline menu.
        """
        category = await self.get_current_viewport_category()
        try:
            if category is ViewportCategory.MOBILE:
                return await self._mobile_menu_works(category)
            main_nav = await self._any_visible(self._registry.main_navigation(category))
            if category is ViewportCategory.TABLET:
                return main_nav
            return main_nav and await self._any_visible(self._registry.navigation_menu(category))
        except Exception as exc:
            log.warn(
                "Navigation responsiveness check failed",
                {"viewport": category.value, "error": get_error_message(exc)},
            )
            return False

    async def _mobile_menu_works(self, category: ViewportCategory) -> bool:
        if await self._any_visible(self._registry.mobile_menu_container(category)):
            log.debug("Mobile menu already open")
            return True
        if not await self._toggle_menu(category, MENU_SLIDE_IN_MS):
            log.warn("No mobile menu toggle found")
            return False

        visible = await self._any_visible(self._registry.mobile_menu_container(category))
        if visible:
            await self._toggle_menu(category, MENU_SLIDE_OUT_MS)
        return visible

    # ------------------------------------------------------------------
    # Diagnostics
    # ------------------------------------------------------------------

    async def is_page_in_error_state(self) -> ErrorState:
        return await error_state.check_for_error_state(self._driver)

    async def attempt_error_recovery(self, page_name: str) -> bool:
        """Reload, then direct URL; ``True`` if the page validates afterwards."""
        category = await self.get_current_viewport_category()
        return await self._recovery.attempt(page_name, category)

    async def validate_touch_target_sizes(self) -> bool:
        """Check every interactive element against the 44px minimum.

        Only touch layouts are checked; desktop always passes.
        """
        category = await self.get_current_viewport_category()
        if category is ViewportCategory.DESKTOP:
            log.debug("Touch target check skipped on desktop")
            return True

        violations = await find_touch_target_violations(self._driver, self._registry.interactive_selectors)
        for violation in violations:
            log.warn(violation)
        if violations:
            log.warn("Touch targets below minimum size", {"count": len(violations), "viewport": category.value})
            return False
        log.success("All touch targets meet minimum size", {"viewport": category.value})
        return True

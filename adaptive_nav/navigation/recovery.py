"""
One-shot recovery for a page stuck in an error state.

Tries a reload first, then a direct visit to the page's primary URL.
Each step is followed by a settle wait and a full validation. There is
no looping here; repeated recovery is the orchestrator's decision.
"""

from __future__ import annotations

import time

from adaptive_nav.browser import viewport
from adaptive_nav.browser.driver import BrowserDriver
from adaptive_nav.models.navigation import PageValidation, ViewportCategory
from adaptive_nav.navigation.errors import get_error_message
from adaptive_nav.navigation.registry import SelectorStrategyRegistry
from adaptive_nav.navigation.validator import PageLoadValidator
from adaptive_nav.utils import logger, url as url_mod

log = logger.create_logger("Recovery")

RECOVERY_STEPS = 2


class ErrorRecovery:
    """Reload, then direct URL, validating after each."""

    def __init__(
        self,
        driver: BrowserDriver,
        registry: SelectorStrategyRegistry,
        validator: PageLoadValidator,
        base_url: str,
    ) -> None:
        self._driver = driver
        self._registry = registry
        self._validator = validator
        self._base_url = base_url

    async def attempt(self, page_name: str, category: ViewportCategory) -> bool:
        """Return ``True`` once *page_name* validates, ``False`` if both steps fail.

        Raises:
            UnknownPageError: When *page_name* is not registered.
        """
        validations = await self.run(page_name, category)
        return bool(validations) and validations[-1].is_loaded

    async def run(
        self,
        page_name: str,
        category: ViewportCategory,
        max_steps: int = RECOVERY_STEPS,
    ) -> list[PageValidation]:
        """Run up to *max_steps* recovery steps, stopping at the first that validates.

        Returns one validation per step that got as far as validating,
        so callers can count the passes spent. A step whose driver call
        raised contributes nothing.

        Raises:
            UnknownPageError: When *page_name* is not registered.
        """
        config = self._registry.page_config(page_name)
        profile = viewport.timeout_profile(category)
        log.info("Attempting error recovery", {"page": config.name, "viewport": category.value, "steps": max_steps})

        validations: list[PageValidation] = []
        if max_steps < 1:
            return validations

        started = time.monotonic()
        try:
            await self._driver.reload(profile.page_load)
            await self._settle(profile.network_idle)
            validations.append(await self._validator.validate(config.name, category, started))
        except Exception as exc:
            log.warn("Reload failed", {"error": get_error_message(exc)})
        if validations and validations[-1].is_loaded:
            log.success("Recovered by reload", {"page": config.name})
            return validations
        if max_steps < 2:
            return validations

        target = url_mod.join_url(self._base_url, config.primary_url)
        started = time.monotonic()
        try:
            result = await self._driver.navigate(target, profile.page_load)
            if not result.success:
                log.warn("Direct navigation reported failure", {"url": target, "status": result.status_code})
            await self._settle(profile.network_idle)
            validations.append(await self._validator.validate(config.name, category, started))
        except Exception as exc:
            log.warn("Direct navigation failed", {"url": target, "error": get_error_message(exc)})
        if validations and validations[-1].is_loaded:
            log.success("Recovered by direct navigation", {"page": config.name, "url": target})
            return validations

        log.error("Error recovery failed", {"page": config.name})
        return validations

    async def _settle(self, timeout_ms: int) -> None:
        if not await self._driver.wait_for_network_idle(timeout_ms):
            log.debug("Network did not go idle", {"timeoutMs": timeout_ms})

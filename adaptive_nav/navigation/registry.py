"""
Selector strategy registry.
Looks up page configurations by name and orders their selector
strategies for a given viewport category.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from types import MappingProxyType

from adaptive_nav.models.navigation import (
    PageConfig,
    Reliability,
    SelectorStrategy,
    ViewportCategory,
    ViewportScope,
)
from adaptive_nav.navigation import pages
from adaptive_nav.navigation.errors import UnknownPageError


def order_strategies(
    strategies: Iterable[SelectorStrategy],
    category: ViewportCategory,
) -> list[SelectorStrategy]:
    """Keep strategies scoped to *category* or ``all``, lowest priority first.

    ``sorted`` is stable, so equal priorities keep declaration order.
    """
    in_scope = [s for s in strategies if s.viewport.includes(category)]
    return sorted(in_scope, key=lambda s: s.priority)


class SelectorStrategyRegistry:
    """Immutable catalogue of pages and the selectors that find them.

    Built once at startup from a mapping of page configurations and
    injected wherever it is needed. Page names are matched
    case-insensitively.
    """

    def __init__(
        self,
        page_configs: Mapping[str, PageConfig] | Iterable[PageConfig] | None = None,
        *,
        mobile_menu_toggle: Iterable[SelectorStrategy] = pages.MOBILE_MENU_TOGGLE,
        mobile_menu_container: Iterable[SelectorStrategy] = pages.MOBILE_MENU_CONTAINER,
        main_navigation: Iterable[SelectorStrategy] = pages.MAIN_NAVIGATION,
        navigation_menu: Iterable[SelectorStrategy] = pages.NAVIGATION_MENU,
        interactive_selectors: Iterable[str] = pages.INTERACTIVE_SELECTORS,
    ) -> None:
        if page_configs is None:
            page_configs = pages.DEFAULT_PAGES
        configs = page_configs.values() if isinstance(page_configs, Mapping) else page_configs
        self._pages: Mapping[str, PageConfig] = MappingProxyType({c.name.strip().lower(): c for c in configs})
        self._mobile_menu_toggle = tuple(mobile_menu_toggle)
        self._mobile_menu_container = tuple(mobile_menu_container)
        self._main_navigation = tuple(main_navigation)
        self._navigation_menu = tuple(navigation_menu)
        self._interactive_selectors = tuple(interactive_selectors)

    def page_names(self) -> list[str]:
        return list(self._pages)

    def __contains__(self, page_name: object) -> bool:
        return isinstance(page_name, str) and page_name.strip().lower() in self._pages

    def page_config(self, page_name: str) -> PageConfig:
        """Configuration for *page_name*; raises :class:`UnknownPageError`."""
        config = self._pages.get(page_name.strip().lower())
        if config is None:
            raise UnknownPageError(page_name, self.page_names())
        return config

    def strategies_for(self, page_name: str, category: ViewportCategory) -> list[SelectorStrategy]:
        """Structured navigation-link strategies, filtered and ordered."""
        return order_strategies(self.page_config(page_name).nav_strategies, category)

    def fallback_selectors_for(self, page_name: str) -> list[SelectorStrategy]:
        """Text-based last-resort locators, tried after every structured strategy.

        Configured fallbacks come first, then generic ones derived from
        the page name so that unfamiliar layouts still have a chance.
        All are low reliability and rank after the structured entries.
        """
        config = self.page_config(page_name)
        label = config.name.replace("-", " ").replace("_", " ").title()
        generic = (
            f'a:has-text("{label}")',
            f'[role="button"]:has-text("{label}")',
            f'[role="link"]:has-text("{label}")',
            f'button:has-text("{label}")',
            f'a[href*="{config.name}"]',
        )
        start = max((s.priority for s in config.nav_strategies), default=0) + 1

        seen: set[str] = {s.selector for s in config.nav_strategies}
        fallbacks: list[SelectorStrategy] = []
        for selector in (*config.nav_fallback_text_selectors, *generic):
            if selector in seen:
                continue
            seen.add(selector)
            fallbacks.append(
                SelectorStrategy(
                    selector=selector,
                    priority=start + len(fallbacks),
                    reliability=Reliability.LOW,
                    viewport=ViewportScope.ALL,
                    description="Text fallback",
                )
            )
        return fallbacks

    def navigation_candidates(self, page_name: str, category: ViewportCategory) -> list[SelectorStrategy]:
        """Every locator for the page's nav link, in the order to try them."""
        return [*self.strategies_for(page_name, category), *self.fallback_selectors_for(page_name)]

    def mobile_menu_toggle(self, category: ViewportCategory = ViewportCategory.MOBILE) -> list[SelectorStrategy]:
        return order_strategies(self._mobile_menu_toggle, category)

    def mobile_menu_container(self, category: ViewportCategory = ViewportCategory.MOBILE) -> list[SelectorStrategy]:
        return order_strategies(self._mobile_menu_container, category)

    def main_navigation(self, category: ViewportCategory) -> list[SelectorStrategy]:
        return order_strategies(self._main_navigation, category)

    def navigation_menu(self, category: ViewportCategory) -> list[SelectorStrategy]:
        return order_strategies(self._navigation_menu, category)

    @property
    def interactive_selectors(self) -> tuple[str, ...]:
        return self._interactive_selectors

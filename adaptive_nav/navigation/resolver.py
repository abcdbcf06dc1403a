"""
Element resolution across selector strategies.
Walks strategies in order and returns the first visible, interactable
element. Retry policy belongs to the caller.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Sequence

from adaptive_nav.browser.driver import BrowserDriver
from adaptive_nav.models.browser import ElementInfo
from adaptive_nav.models.navigation import AttemptedSelector, SelectorStrategy
from adaptive_nav.utils import logger

log = logger.create_logger("Resolver")


@dataclasses.dataclass(frozen=True)
class ElementMatch:
    """A usable element and the strategy that located it."""

    element: ElementInfo
    strategy: SelectorStrategy
    attempted: tuple[AttemptedSelector, ...] = ()

    def __bool__(self) -> bool:
        return True


@dataclasses.dataclass(frozen=True)
class NotFound:
    """No strategy produced a usable element.

    ``attempted`` lists every selector tried, in order, with its
    reliability so the failure can be diagnosed from the report alone.
    """

    attempted: tuple[AttemptedSelector, ...] = ()

    def __bool__(self) -> bool:
        return False

    @property
    def selectors(self) -> list[str]:
        return [item.selector for item in self.attempted]


def _attempt(strategy: SelectorStrategy) -> AttemptedSelector:
    return AttemptedSelector(
        selector=strategy.selector,
        reliability=strategy.reliability,
        description=strategy.description,
    )


class ElementResolver:
    """Resolves the first usable element from an ordered strategy list."""

    async def resolve(
        self,
        strategies: Sequence[SelectorStrategy],
        driver: BrowserDriver,
    ) -> ElementMatch | NotFound:
        """Try *strategies* in the given order and stop at the first usable match.

        A driver error on one selector is logged and counts as no match
        for that selector.
        """
        attempted: list[AttemptedSelector] = []
        for strategy in strategies:
            attempted.append(_attempt(strategy))
            try:
                elements = await driver.query_elements(strategy.selector)
            except Exception as exc:
                log.debug("Selector query failed", {"selector": strategy.selector, "error": str(exc)[:120]})
                continue

            for element in elements:
                if element.is_usable:
                    log.debug(
                        "Element resolved",
                        {"selector": strategy.selector, "priority": strategy.priority, "reliability": strategy.reliability.value},
                    )
                    return ElementMatch(element=element, strategy=strategy, attempted=tuple(attempted))

            if elements:
                log.debug("Matches found but none usable", {"selector": strategy.selector, "count": len(elements)})

        log.debug("No strategy resolved", {"attempted": len(attempted)})
        return NotFound(attempted=tuple(attempted))

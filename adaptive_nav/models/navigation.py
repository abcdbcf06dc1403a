"""Pydantic models for page configuration, retry policy and validation results."""

from __future__ import annotations

import enum
from typing import Literal

import pydantic


class ViewportCategory(enum.StrEnum):
    """Coarse responsive bucket derived from the viewport width."""

    MOBILE = "mobile"
    TABLET = "tablet"
    DESKTOP = "desktop"


class ViewportScope(enum.StrEnum):
    """Viewport categories a selector strategy applies to."""

    MOBILE = "mobile"
    TABLET = "tablet"
    DESKTOP = "desktop"
    ALL = "all"

    def includes(self, category: ViewportCategory) -> bool:
        """Whether a strategy with this scope may be used for *category*."""
        return self is ViewportScope.ALL or self.value == category.value


class Reliability(enum.StrEnum):
    """Diagnostic confidence of a selector. Never affects ordering."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


TimeoutOperation = Literal["page_load", "element_wait", "network_idle"]

ErrorType = Literal[
    "page_error",
    "http_error",
    "blank_page",
    "script_crash",
    "load_error",
    "detection_error",
]


class TimeoutProfile(pydantic.BaseModel):
    """Upper bounds, in milliseconds, for each waiting phase."""

    model_config = pydantic.ConfigDict(frozen=True)

    page_load: int
    element_wait: int
    network_idle: int


class SelectorStrategy(pydantic.BaseModel):
    """One candidate way of locating an element."""

    model_config = pydantic.ConfigDict(frozen=True)

    selector: str
    priority: int = pydantic.Field(default=1, ge=1)
    reliability: Reliability = Reliability.HIGH
    viewport: ViewportScope = ViewportScope.ALL
    description: str = ""


class RequiredElement(pydantic.BaseModel):
    """A logical page element and the selector variants that locate it."""

    model_config = pydantic.ConfigDict(frozen=True)

    name: str
    strategies: tuple[SelectorStrategy, ...]


class PageConfig(pydantic.BaseModel):
    """Static description of a logical page.

    Attributes:
        name: Lower-case page key, e.g. ``"tickets"``.
        url_patterns: Acceptable URL substrings. The first entry is the
            primary path used for direct navigation.
        title_patterns: Acceptable title values (exact or substring).
        nav_strategies: Structured locators for the navigation link.
        nav_fallback_text_selectors: Text-based locators tried after
            every structured strategy.
        required_elements: Elements that must be present once loaded.
        search_interface_selector: Selector of the page's search UI.
        search_interface_required: Whether a missing search UI fails
            validation. Optional unless set explicitly.
        touch_targets: Interactive elements whose size is checked on
            mobile and tablet viewports.
    """

    model_config = pydantic.ConfigDict(frozen=True)

    name: str
    url_patterns: tuple[str, ...]
    title_patterns: tuple[str, ...]
    nav_strategies: tuple[SelectorStrategy, ...] = ()
    nav_fallback_text_selectors: tuple[str, ...] = ()
    required_elements: tuple[RequiredElement, ...] = ()
    search_interface_selector: str | None = None
    search_interface_required: bool = False
    touch_targets: tuple[str, ...] = ()

    @pydantic.field_validator("url_patterns", "title_patterns")
    @classmethod
    def _non_empty(cls, value: tuple[str, ...]) -> tuple[str, ...]:
        if not value:
            raise ValueError("at least one pattern is required")
        return value

    @property
    def primary_url(self) -> str:
        """Path used when falling back to direct URL navigation."""
        return self.url_patterns[0]


class RetryConfig(pydantic.BaseModel):
    """Bounded exponential backoff policy for navigation attempts."""

    model_config = pydantic.ConfigDict(frozen=True)

    max_retries: int = pydantic.Field(default=3, ge=1)
    base_delay_ms: int = pydantic.Field(default=1000, ge=0)
    max_delay_ms: int = pydantic.Field(default=5000, ge=0)
    backoff_factor: float = pydantic.Field(default=2.0, ge=1.0)

    @pydantic.model_validator(mode="after")
    def _max_not_below_base(self) -> RetryConfig:
        if self.max_delay_ms < self.base_delay_ms:
            raise ValueError("max_delay_ms must be >= base_delay_ms")
        return self


class PageValidation(pydantic.BaseModel):
    """Verdict produced after a navigation attempt settles.

    ``is_loaded`` is derived from ``errors`` so it can never disagree
    with them. Warnings do not affect it.
    """

    page_name: str = ""
    url: str = ""
    title: str = ""
    viewport: ViewportCategory | None = None
    load_time_ms: int = 0
    search_interface_present: bool = False
    search_interface_required: bool = False
    search_interface_validation_skipped: bool = False
    is_responsive: bool = False
    warnings: list[str] = pydantic.Field(default_factory=list)
    errors: list[str] = pydantic.Field(default_factory=list)

    @pydantic.computed_field  # type: ignore[prop-decorator]
    @property
    def is_loaded(self) -> bool:
        return not self.errors


class ErrorState(pydantic.BaseModel):
    """Result of a single error-state check. Never cached."""

    in_error: bool
    error_type: ErrorType | None = None
    details: str | None = None


class AttemptedSelector(pydantic.BaseModel):
    """A selector tried during resolution, kept for diagnostics."""

    model_config = pydantic.ConfigDict(frozen=True)

    selector: str
    reliability: Reliability
    description: str = ""

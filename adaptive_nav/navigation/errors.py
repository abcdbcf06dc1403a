"""
Navigation error taxonomy.

``UnknownPageError`` is a configuration mistake and is never retried.
``ElementResolutionError``, ``PageValidationError`` and
``ErrorStateDetected`` are transient and stay inside the orchestrator's
retry loop. ``NavigationFailedError`` is the only one callers normally
see.
"""

from __future__ import annotations

from collections.abc import Sequence

from adaptive_nav.models.navigation import AttemptedSelector, ErrorState, PageValidation, ViewportCategory


def get_error_message(error: BaseException | object) -> str:
    """Safely extract a message, falling back to the exception type name."""
    if isinstance(error, BaseException):
        return str(error) or type(error).__name__
    return "Unknown error"


class NavigationError(Exception):
    """Base class for every error raised by the navigation engine."""

    def __init__(self, page_name: str, message: str) -> None:
        super().__init__(message)
        self.page_name = page_name


class UnknownPageError(NavigationError):
    """The requested page is not in the registry."""

    def __init__(self, page_name: str, known_pages: Sequence[str] = ()) -> None:
        known = f" Known pages: {', '.join(known_pages)}" if known_pages else ""
        super().__init__(page_name, f"Unknown page {page_name!r}.{known}")
        self.known_pages = list(known_pages)


class ElementResolutionError(NavigationError):
    """Every selector strategy for a step was exhausted."""

    def __init__(self, page_name: str, step: str, attempted: Sequence[AttemptedSelector]) -> None:
        super().__init__(page_name, f"Could not resolve {step} for {page_name!r} after {len(attempted)} selectors")
        self.step = step
        self.attempted = list(attempted)


class PageValidationError(NavigationError):
    """The page settled but failed validation."""

    def __init__(self, page_name: str, validation: PageValidation) -> None:
        summary = "; ".join(error.splitlines()[0] for error in validation.errors) or "no details"
        super().__init__(page_name, f"Validation failed for {page_name!r}: {summary}")
        self.validation = validation


class ErrorStateDetected(NavigationError):
    """The page is actively broken (error banner, HTTP error, crash, blank)."""

    def __init__(self, page_name: str, error_state: ErrorState, validation: PageValidation | None = None) -> None:
        super().__init__(page_name, f"Page {page_name!r} is in error state {error_state.error_type}: {error_state.details}")
        self.error_state = error_state
        self.validation = validation


class NavigationFailedError(NavigationError):
    """Terminal failure after every retry and the direct-URL fallback.

    Carries enough context to debug the failure without re-running it.
    """

    def __init__(
        self,
        page_name: str,
        *,
        viewport: ViewportCategory,
        attempts: int,
        elapsed_ms: int,
        attempted_selectors: Sequence[AttemptedSelector] = (),
        last_validation: PageValidation | None = None,
        error_state: ErrorState | None = None,
        last_error: str | None = None,
    ) -> None:
        self.viewport = viewport
        self.attempts = attempts
        self.elapsed_ms = elapsed_ms
        self.attempted_selectors = list(attempted_selectors)
        self.last_validation = last_validation
        self.error_state = error_state
        self.last_error = last_error
        super().__init__(page_name, self._describe(page_name))

    def _describe(self, page_name: str) -> str:
        lines = [
            f"Navigation to {page_name!r} failed after {self.attempts} attempts and direct URL fallback",
            f"   Viewport: {self.viewport}",
            f"   Elapsed: {self.elapsed_ms}ms",
        ]
        if self.last_error:
            lines.append(f"   Last error: {self.last_error}")
        if self.last_validation is not None:
            lines.append(f"   Last URL: {self.last_validation.url}")
            lines.append(f"   Last title: {self.last_validation.title}")
            lines.extend(f"   Validation error: {error.splitlines()[0]}" for error in self.last_validation.errors)
        if self.error_state is not None and self.error_state.in_error:
            lines.append(f"   Error state: {self.error_state.error_type} ({self.error_state.details})")
        if self.attempted_selectors:
            lines.append("   Attempted selectors:")
            lines.extend(f"    - {item.selector} [{item.reliability}]" for item in self.attempted_selectors)
        return "\n".join(lines)

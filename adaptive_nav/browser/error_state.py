"""
Broken-page detection.
Checks the current page for error banners, HTTP error pages, script
crashes and blank renders. Read-only: nothing on the page is changed.
"""

from __future__ import annotations

from adaptive_nav.browser.driver import BrowserDriver
from adaptive_nav.models.navigation import ErrorState
from adaptive_nav.utils import logger

log = logger.create_logger("ErrorState")

# ============================================================================
# Detection Patterns
# ============================================================================

ERROR_ELEMENT_SELECTORS = [
    '[data-testid="error-message"]',
    ".error-container",
    ".alert-danger",
    '[role="alert"]',
]

HTTP_ERROR_TITLE_PATTERNS = [
    "404",
    "500",
    "502",
    "503",
    "not found",
    "page not found",
    "server error",
    "internal server error",
    "bad gateway",
    "service unavailable",
]

HTTP_ERROR_BODY_PATTERNS = [
    "404 not found",
    "404 - not found",
    "page not found",
    "500 internal server error",
    "internal server error",
    "502 bad gateway",
    "503 service unavailable",
    "cannot get /",
    "this page could not be found",
]

SCRIPT_CRASH_PATTERNS = [
    "application error: a client-side exception has occurred",
    "uncaught exception",
    "uncaught typeerror",
    "uncaught referenceerror",
    "chunkloaderror",
    "loading chunk",
    "something went wrong",
    "minified react error",
]

BLANK_URLS = ("", "about:blank")


def _first_match(text: str, patterns: list[str]) -> str | None:
    lowered = text.lower()
    for pattern in patterns:
        if pattern in lowered:
            return pattern
    return None


async def _visible_error_element(driver: BrowserDriver) -> str | None:
    for selector in ERROR_ELEMENT_SELECTORS:
        elements = await driver.query_elements(selector)
        if any(element.visible for element in elements):
            return selector
    return None


async def check_for_error_state(driver: BrowserDriver) -> ErrorState:
    """
    Classify whether the current page is broken.

    Signals are checked from most to least specific; the first hit
    wins. If the check itself fails the page is reported as
    ``detection_error`` so callers treat it as broken.
    """
    try:
        url = await driver.get_current_url()
        if url.strip().lower() in BLANK_URLS:
            return ErrorState(in_error=True, error_type="load_error", details="No page loaded (blank URL)")

        selector = await _visible_error_element(driver)
        if selector:
            log.warn("Error element visible", {"selector": selector})
            return ErrorState(in_error=True, error_type="page_error", details=f"Error element visible: {selector}")

        title = await driver.get_current_title()
        body = await driver.get_body_text(2000)

        if pattern := _first_match(body, SCRIPT_CRASH_PATTERNS):
            log.warn("Script crash detected", {"pattern": pattern})
            return ErrorState(in_error=True, error_type="script_crash", details=f'Page content indicates a crash: "{pattern}"')

        title_hit = _first_match(title, HTTP_ERROR_TITLE_PATTERNS)
        body_hit = _first_match(body, HTTP_ERROR_BODY_PATTERNS)
        if title_hit or body_hit:
            reason = f'title "{title}"' if title_hit else f'content "{body_hit}"'
            log.warn("HTTP error page detected", {"title": title, "pattern": body_hit or title_hit})
            return ErrorState(in_error=True, error_type="http_error", details=f"Page {reason} indicates an HTTP error")

        if not body.strip():
            return ErrorState(in_error=True, error_type="blank_page", details="Page body is empty after settle")

        if not title.strip() and "error" in url.lower():
            return ErrorState(in_error=True, error_type="load_error", details="Page failed to load properly")

        log.debug("No error state detected")
        return ErrorState(in_error=False)
    except Exception as exc:
        log.debug(f"Error state check failed: {exc}")
        return ErrorState(in_error=True, error_type="detection_error", details=f"Error detection failed: {exc}")

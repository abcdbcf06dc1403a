"""
Command-line entry point.

Opens the application's base URL in a Playwright browser, navigates to
one page and prints the resulting validation as JSON::

    python -m adaptive_nav.main tickets --viewport mobile --retries 3
"""

from __future__ import annotations

import argparse
import asyncio
import sys

import dotenv

from adaptive_nav.browser import device_configs, viewport
from adaptive_nav.browser.session import PlaywrightDriver
from adaptive_nav.models.browser import DeviceConfig
from adaptive_nav.models.navigation import ViewportCategory
from adaptive_nav.navigation import config as nav_config
from adaptive_nav.navigation.errors import NavigationFailedError, UnknownPageError
from adaptive_nav.navigation.orchestrator import NavigationOrchestrator
from adaptive_nav.navigation.registry import SelectorStrategyRegistry
from adaptive_nav.utils import logger

log = logger.create_logger("CLI")

EXIT_OK = 0
EXIT_NAVIGATION_FAILED = 1
EXIT_UNKNOWN_PAGE = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Navigate to a page and validate that it loaded")
    parser.add_argument("page", help="Logical page name, e.g. tickets")
    parser.add_argument(
        "--viewport",
        choices=[category.value for category in ViewportCategory],
        help="Viewport category (default: VIEWPORT_CATEGORY)",
    )
    parser.add_argument("--device", help="Device profile to emulate (default: BROWSER_DEVICE)")
    parser.add_argument("--retries", type=int, help="Click-through attempts before direct URL fallback")
    parser.add_argument(
        "--headless",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Run without a browser window (default: HEADLESS)",
    )
    return parser


def choose_device(
    args: argparse.Namespace,
    settings: nav_config.NavigationSettings,
    category: ViewportCategory,
) -> DeviceConfig | str:
    """An explicit --device wins; a bare --viewport emulates that category's device."""
    if args.device:
        return args.device
    if args.viewport:
        return device_configs.device_for_category(category)
    return settings.browser_device


async def run(args: argparse.Namespace, settings: nav_config.NavigationSettings) -> int:
    """Navigate once and print the validation. Returns the process exit code."""
    registry = SelectorStrategyRegistry()
    if args.page not in registry:
        log.error(f"Unknown page {args.page!r}", {"known": registry.page_names()})
        return EXIT_UNKNOWN_PAGE

    headless = settings.headless if args.headless is None else args.headless
    category = viewport.to_category(args.viewport or settings.default_viewport)

    logger.start_log_file(args.page)
    try:
        async with PlaywrightDriver(headless=headless, device=choose_device(args, settings, category)) as driver:
            await driver.navigate(settings.base_url, viewport.timeout_for(category, "page_load"))

            orchestrator = NavigationOrchestrator.from_settings(driver, settings, registry)
            if args.retries is None:
                validation = await orchestrator.navigate_to_page(args.page, category)
            else:
                validation = await orchestrator.retry_navigation(args.page, args.retries, category)
    except UnknownPageError as exc:
        log.error(str(exc))
        return EXIT_UNKNOWN_PAGE
    except NavigationFailedError as exc:
        log.error(str(exc))
        if exc.last_validation is not None:
            print(exc.last_validation.model_dump_json(indent=2))
        return EXIT_NAVIGATION_FAILED
    finally:
        logger.end_log_file()

    print(validation.model_dump_json(indent=2))
    return EXIT_OK


def main(argv: list[str] | None = None) -> int:
    dotenv.load_dotenv()
    args = build_parser().parse_args(argv)
    if args.retries is not None and args.retries < 1:
        log.error("--retries must be at least 1")
        return EXIT_NAVIGATION_FAILED
    return asyncio.run(run(args, nav_config.get_settings()))


if __name__ == "__main__":
    sys.exit(main())

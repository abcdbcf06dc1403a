"""
Default page catalogue for the application under test.

Each page lists its navigation-link strategies in priority order,
text fallbacks for unknown DOM shapes, and the elements that prove the
page rendered. Handed to :class:`~adaptive_nav.navigation.registry.SelectorStrategyRegistry`
at startup; nothing reads it as a global afterwards.
"""

from __future__ import annotations

from types import MappingProxyType

from adaptive_nav.models.navigation import (
    PageConfig,
    Reliability,
    RequiredElement,
    SelectorStrategy,
    ViewportScope,
)

HIGH = Reliability.HIGH
MEDIUM = Reliability.MEDIUM
LOW = Reliability.LOW


def _strategy(
    selector: str,
    priority: int,
    description: str,
    reliability: Reliability = HIGH,
    viewport: ViewportScope = ViewportScope.ALL,
) -> SelectorStrategy:
    return SelectorStrategy(
        selector=selector,
        priority=priority,
        description=description,
        reliability=reliability,
        viewport=viewport,
    )


# ============================================================================
# Shared Selectors
# ============================================================================

MOBILE_MENU_TOGGLE: tuple[SelectorStrategy, ...] = (
    _strategy('[data-testid="mobile-menu-toggle"]', 1, "Test ID menu toggle"),
    _strategy('[data-testid="mobile-nav-toggle"]', 2, "Test ID nav toggle"),
    _strategy(".mobile-menu-toggle", 3, "Menu toggle class", MEDIUM),
    _strategy(".navbar-toggler, .navbar-toggle", 4, "Bootstrap toggler", MEDIUM),
    _strategy(".hamburger, .menu-toggle", 5, "Hamburger button", LOW),
)

MOBILE_MENU_CONTAINER: tuple[SelectorStrategy, ...] = (
    _strategy('[data-testid="mobile-navigation"]', 1, "Test ID mobile navigation"),
    _strategy('[data-testid="mobile-menu-container"]', 2, "Test ID mobile menu"),
    _strategy(".mobile-menu, .nav-mobile", 3, "Mobile menu class", MEDIUM),
    _strategy(".navbar-collapse.show", 4, "Expanded Bootstrap collapse", MEDIUM),
)

# Scanned by the standalone touch-target check.
INTERACTIVE_SELECTORS: tuple[str, ...] = (
    "button",
    "a[href]",
    'input[type="button"]',
    'input[type="submit"]',
    '[role="button"]',
    ".btn",
)

MAIN_NAVIGATION: tuple[SelectorStrategy, ...] = (
    _strategy('[data-testid="main-navigation"]', 1, "Test ID navigation"),
    _strategy(".navigation", 2, "Navigation class"),
    _strategy(".main-nav, .navbar-nav", 3, "Nav bar", MEDIUM),
    _strategy(".nav-menu", 4, "Nav menu", MEDIUM),
    _strategy("nav", 5, "Any nav landmark", LOW),
)

# The link list inside the main navigation; desktop layouts show it inline.
NAVIGATION_MENU: tuple[SelectorStrategy, ...] = (
    _strategy('[data-testid="navigation-menu"]', 1, "Test ID navigation menu"),
    _strategy(".navigation-menu", 2, "Navigation menu class"),
    _strategy(".nav-menu, .navbar-nav", 3, "Nav list", MEDIUM),
)

_MAIN_NAVIGATION = RequiredElement(name="Main navigation", strategies=MAIN_NAVIGATION)

_NAV_TOUCH_TARGETS = (
    '[data-testid="main-navigation"] a',
    ".navigation a",
    '[data-testid="mobile-menu-toggle"]',
)

_SEARCH_BASE = '.search-container, .search-wrapper, [data-search], [data-testid="search-container"]'


def _main_content(page: str) -> RequiredElement:
    return RequiredElement(
        name="Main content container",
        strategies=(
            _strategy(f'[data-testid="{page}-page"]', 1, f"Test ID {page} page"),
            _strategy(f".{page}-page", 2, f"{page.title()} page class"),
            _strategy(".main-content", 3, "Generic main content", LOW),
        ),
    )


def _standard_nav(page: str, start: int = 1) -> list[SelectorStrategy]:
    """Link strategies shared by every list page (tickets, customers, ...)."""
    label = page.title()
    entries = [
        (f'[data-testid="nav-{page}"]', f"Test ID {page} navigation link", HIGH),
        (f'a[href="/{page}"]', f"Direct {page} link", HIGH),
        (f'a[href="#/{page}"]', f"SPA {page} route", HIGH),
        (f'[data-testid="{page}-link"]', f"Test ID {page} link", HIGH),
        (f'[data-nav="{page}"]', f"Data nav {page}", HIGH),
        (f".nav-{page}", f"CSS class {label} link", MEDIUM),
        (f'a[href*="{page}"]', f"Contains {page} in href", MEDIUM),
    ]
    return [_strategy(sel, start + i, desc, rel) for i, (sel, desc, rel) in enumerate(entries)]


def _title_patterns(label: str, extra: str) -> tuple[str, ...]:
    return (f"{label} - Static Site API Testing", label, extra)


# ============================================================================
# Pages
# ============================================================================

_PAGES: list[PageConfig] = [
    PageConfig(
        name="home",
        url_patterns=("/", "/home", "/index.html", "?page=home"),
        title_patterns=("Dashboard - Static Site API Testing", "Dashboard", "Home"),
        nav_strategies=(
            _strategy('[data-testid="nav-home"]', 1, "Test ID home navigation link"),
            _strategy('a[href="/"]', 2, "Direct home link"),
            _strategy('a[href="/home"]', 3, "Home page link"),
            _strategy('a[href="#/"]', 4, "SPA home route"),
            _strategy('[data-testid="home-link"]', 5, "Test ID home link"),
            _strategy(".nav-home", 6, "CSS class home link", MEDIUM),
        ),
        nav_fallback_text_selectors=('a:has-text("Home")', 'a:has-text("Dashboard")'),
        required_elements=(_main_content("home"), _MAIN_NAVIGATION),
        search_interface_selector=f'{_SEARCH_BASE}, [data-testid="search-interface"], .search-interface',
        touch_targets=_NAV_TOUCH_TARGETS,
    ),
    PageConfig(
        name="dashboard",
        url_patterns=("/dashboard", "/", "/home", "/dashboard.html", "?page=dashboard"),
        title_patterns=_title_patterns("Dashboard", "Home"),
        nav_strategies=(
            _strategy('[data-testid="nav-dashboard"]', 1, "Test ID dashboard navigation link"),
            _strategy('a[href="/dashboard"]', 2, "Direct dashboard link"),
            _strategy('a[href="/"]', 3, "Home/dashboard link"),
            _strategy('a[href="#/dashboard"]', 4, "SPA dashboard route"),
            _strategy('[data-testid="dashboard-link"]', 5, "Test ID dashboard link"),
            _strategy('[data-nav="dashboard"]', 6, "Data nav dashboard"),
            _strategy(".nav-dashboard", 7, "CSS class dashboard link", MEDIUM),
        ),
        nav_fallback_text_selectors=('a:has-text("Dashboard")', 'a:has-text("Home")'),
        required_elements=(_main_content("dashboard"), _MAIN_NAVIGATION),
        touch_targets=_NAV_TOUCH_TARGETS,
    ),
    PageConfig(
        name="customers",
        url_patterns=("/customers", "/customer", "/customers.html", "?page=customers"),
        title_patterns=_title_patterns("Customers", "Customer Management"),
        nav_strategies=tuple(_standard_nav("customers")),
        nav_fallback_text_selectors=('a:has-text("Customers")', 'a:has-text("Customer")'),
        required_elements=(_main_content("customers"), _MAIN_NAVIGATION),
        search_interface_selector=f'{_SEARCH_BASE}, [data-testid="customer-search"], .customer-search',
        search_interface_required=False,
        touch_targets=_NAV_TOUCH_TARGETS,
    ),
    PageConfig(
        name="tickets",
        url_patterns=("/tickets", "/ticket", "/tickets.html", "?page=tickets"),
        title_patterns=_title_patterns("Tickets", "Ticket Management"),
        nav_strategies=tuple(_standard_nav("tickets")),
        nav_fallback_text_selectors=('a:has-text("Tickets")', 'a:has-text("Ticket")'),
        required_elements=(_main_content("tickets"), _MAIN_NAVIGATION),
        search_interface_selector=f'{_SEARCH_BASE}, [data-testid="ticket-search"], .ticket-search',
        touch_targets=(*_NAV_TOUCH_TARGETS, '[data-testid="ticket-row"] button'),
    ),
    PageConfig(
        name="routes",
        url_patterns=("/routes", "/route", "/routes.html", "?page=routes"),
        title_patterns=_title_patterns("Routes", "Route Management"),
        nav_strategies=(
            _strategy('a[href="/routes"]', 1, "Direct routes link"),
            _strategy('[data-testid="routes-link"]', 2, "Test ID routes link"),
            _strategy('[data-nav="routes"]', 3, "Data nav routes"),
            _strategy(".nav-routes", 4, "CSS class routes link", MEDIUM),
            _strategy('a[href*="routes"]', 5, "Contains routes in href", MEDIUM),
            _strategy(".routes-link", 6, "Generic routes link class", MEDIUM),
            _strategy('.mobile-nav a[href*="routes"]', 7, "Mobile nav routes link", MEDIUM, ViewportScope.MOBILE),
        ),
        nav_fallback_text_selectors=('a:has-text("Routes")', 'a:has-text("Route")'),
        required_elements=(_main_content("routes"), _MAIN_NAVIGATION),
        search_interface_selector=f'{_SEARCH_BASE}, [data-testid="route-search"], .route-search',
        touch_targets=_NAV_TOUCH_TARGETS,
    ),
    PageConfig(
        name="reports",
        url_patterns=("/reports", "/report", "/reports.html", "?page=reports"),
        title_patterns=_title_patterns("Reports", "Report Management"),
        nav_strategies=tuple(_standard_nav("reports")),
        nav_fallback_text_selectors=('a:has-text("Reports")', 'a:has-text("Report")'),
        required_elements=(_main_content("reports"), _MAIN_NAVIGATION),
        touch_targets=_NAV_TOUCH_TARGETS,
    ),
]

DEFAULT_PAGES: MappingProxyType[str, PageConfig] = MappingProxyType({page.name: page for page in _PAGES})

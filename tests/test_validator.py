"""Tests for adaptive_nav.navigation.validator - page-load verdicts."""

from __future__ import annotations

import time

import pytest
from conftest import BASE_URL, FakeDriver, build_app, make_element, page_state

from adaptive_nav.models.navigation import ViewportCategory
from adaptive_nav.navigation.errors import UnknownPageError
from adaptive_nav.navigation.pages import DEFAULT_PAGES
from adaptive_nav.navigation.registry import SelectorStrategyRegistry
from adaptive_nav.navigation.validator import PageLoadValidator, find_touch_target_violations, title_matches

MOBILE = ViewportCategory.MOBILE
DESKTOP = ViewportCategory.DESKTOP


def open_page(driver: FakeDriver, path: str) -> FakeDriver:
    driver.show(BASE_URL + path)
    return driver


@pytest.fixture()
def validator(app_driver: FakeDriver, registry: SelectorStrategyRegistry) -> PageLoadValidator:
    return PageLoadValidator(app_driver, registry)


class TestTitleMatches:
    def test_exact(self) -> None:
        assert title_matches("Tickets", ("Tickets",)) == "Tickets"

    def test_substring(self) -> None:
        assert title_matches("Acme | Tickets", ("Tickets",)) == "Tickets"

    def test_case_insensitive(self) -> None:
        assert title_matches("TICKETS", ("Tickets",)) == "Tickets"

    def test_empty_title_never_matches(self) -> None:
        assert title_matches("", ("Tickets",)) is None

    def test_no_match(self) -> None:
        assert title_matches("Reports", ("Tickets", "Ticket Management")) is None


class TestLoadedPages:
    @pytest.mark.asyncio
    async def test_tickets_without_search_is_loaded(self, app_driver: FakeDriver, validator: PageLoadValidator) -> None:
        open_page(app_driver, "/tickets")

        result = await validator.validate("tickets", MOBILE)

        assert result.is_loaded is True
        assert result.errors == []
        assert result.search_interface_required is False
        assert result.search_interface_validation_skipped is True
        assert result.search_interface_present is False
        assert result.is_responsive is True

    @pytest.mark.asyncio
    async def test_records_url_title_and_viewport(self, app_driver: FakeDriver, validator: PageLoadValidator) -> None:
        open_page(app_driver, "/reports")

        result = await validator.validate("reports", DESKTOP)

        assert result.url == f"{BASE_URL}/reports"
        assert result.title == "Reports - Static Site API Testing"
        assert result.viewport is DESKTOP

    @pytest.mark.asyncio
    async def test_page_name_case_insensitive(self, app_driver: FakeDriver, validator: PageLoadValidator) -> None:
        open_page(app_driver, "/tickets")
        result = await validator.validate("Tickets", MOBILE)
        assert result.page_name == "tickets"
        assert result.is_loaded is True

    @pytest.mark.asyncio
    async def test_unknown_page_raises(self, validator: PageLoadValidator) -> None:
        with pytest.raises(UnknownPageError):
            await validator.validate("nonexistent", MOBILE)


class TestFailures:
    @pytest.mark.asyncio
    async def test_missing_main_content_single_error(
        self, app_driver: FakeDriver, validator: PageLoadValidator
    ) -> None:
        state = page_state("customers")
        del state.elements['[data-testid="customers-page"]']
        app_driver.add_route(f"{BASE_URL}/customers", state)
        open_page(app_driver, "/customers")

        result = await validator.validate("customers", MOBILE)

        assert result.is_loaded is False
        assert len(result.errors) == 1
        assert "Main content container" in result.errors[0]

    @pytest.mark.asyncio
    async def test_wrong_page_reports_every_problem(
        self, app_driver: FakeDriver, validator: PageLoadValidator
    ) -> None:
        result = await validator.validate("tickets", MOBILE)

        assert result.is_loaded is False
        assert len(result.errors) == 3
        joined = "\n".join(result.errors)
        assert "Error type: url" in joined
        assert "Error type: title" in joined
        assert "Main content container" in joined

    @pytest.mark.asyncio
    async def test_error_message_is_descriptive(self, app_driver: FakeDriver, validator: PageLoadValidator) -> None:
        result = await validator.validate("tickets", MOBILE)

        message = result.errors[0]
        assert message.startswith("Page validation failed for tickets")
        assert f"Current URL: {BASE_URL}/" in message
        assert "Viewport: mobile" in message

    @pytest.mark.asyncio
    async def test_blank_page_not_responsive(self, app_driver: FakeDriver, validator: PageLoadValidator) -> None:
        app_driver.show("about:blank")

        result = await validator.validate("tickets", MOBILE)

        assert result.is_loaded is False
        assert result.is_responsive is False

    @pytest.mark.asyncio
    async def test_slow_load_is_an_error(self, app_driver: FakeDriver, validator: PageLoadValidator) -> None:
        open_page(app_driver, "/tickets")

        result = await validator.validate("tickets", DESKTOP, started_at=time.monotonic() - 16)

        assert result.load_time_ms >= 16000
        assert result.is_loaded is False
        assert "exceeded 15000ms" in result.errors[0]

    @pytest.mark.asyncio
    async def test_driver_failure_becomes_error(self, app_driver: FakeDriver, validator: PageLoadValidator) -> None:
        open_page(app_driver, "/tickets")

        async def broken_title() -> str:
            raise RuntimeError("target closed")

        app_driver.get_current_title = broken_title  # type: ignore[method-assign]

        result = await validator.validate("tickets", MOBILE)

        assert len(result.errors) == 1
        assert "Unexpected error during title check: target closed" in result.errors[0]


class TestWarnings:
    @pytest.mark.asyncio
    async def test_low_reliability_match_warns(self, app_driver: FakeDriver, validator: PageLoadValidator) -> None:
        state = page_state("tickets")
        del state.elements['[data-testid="main-navigation"]']
        state.elements["nav"] = [make_element("nav", width=375, height=56)]
        app_driver.add_route(f"{BASE_URL}/tickets", state)
        open_page(app_driver, "/tickets")

        result = await validator.validate("tickets", MOBILE)

        assert result.is_loaded is True
        assert len(result.warnings) == 1
        assert "Main navigation" in result.warnings[0]

    @pytest.mark.asyncio
    async def test_small_touch_target_warns_on_mobile(
        self, app_driver: FakeDriver, validator: PageLoadValidator
    ) -> None:
        open_page(app_driver, "/tickets")
        app_driver.elements['[data-testid="main-navigation"] a'] = [make_element("link", width=30, height=30)]

        result = await validator.validate("tickets", MOBILE)

        assert result.is_loaded is True
        assert any("30x30px" in w for w in result.warnings)

    @pytest.mark.asyncio
    async def test_touch_targets_not_checked_on_desktop(
        self, app_driver: FakeDriver, validator: PageLoadValidator
    ) -> None:
        open_page(app_driver, "/tickets")
        app_driver.elements['[data-testid="main-navigation"] a'] = [make_element("link", width=30, height=30)]

        result = await validator.validate("tickets", DESKTOP)

        assert result.warnings == []

    @pytest.mark.asyncio
    async def test_search_present_but_optional_warns(
        self, app_driver: FakeDriver, validator: PageLoadValidator
    ) -> None:
        open_page(app_driver, "/customers")
        selector = DEFAULT_PAGES["customers"].search_interface_selector
        assert selector is not None
        app_driver.elements[selector] = [make_element("search", width=300)]

        result = await validator.validate("customers", MOBILE)

        assert result.is_loaded is True
        assert result.search_interface_present is True
        assert result.search_interface_validation_skipped is True
        assert any("not marked required" in w for w in result.warnings)

    @pytest.mark.asyncio
    async def test_failing_touch_selector_does_not_fail_page(
        self, app_driver: FakeDriver, validator: PageLoadValidator
    ) -> None:
        open_page(app_driver, "/tickets")
        app_driver.failing_selectors.add('[data-testid="main-navigation"] a')
        app_driver.elements[".navigation a"] = [make_element("link", width=30, height=30)]

        result = await validator.validate("tickets", MOBILE)

        assert result.is_loaded is True
        assert result.errors == []
        assert any("30x30px" in w for w in result.warnings)

    @pytest.mark.asyncio
    async def test_failing_optional_search_becomes_warning(
        self, app_driver: FakeDriver, validator: PageLoadValidator
    ) -> None:
        open_page(app_driver, "/tickets")
        selector = DEFAULT_PAGES["tickets"].search_interface_selector
        assert selector is not None
        app_driver.failing_selectors.add(selector)

        result = await validator.validate("tickets", MOBILE)

        assert result.is_loaded is True
        assert result.errors == []
        assert any("Skipped search check" in w for w in result.warnings)


class TestRequiredSearch:
    @pytest.fixture()
    def strict_registry(self) -> SelectorStrategyRegistry:
        tickets = DEFAULT_PAGES["tickets"].model_copy(update={"search_interface_required": True})
        return SelectorStrategyRegistry([tickets])

    @pytest.mark.asyncio
    async def test_missing_required_search_fails(
        self, app_driver: FakeDriver, strict_registry: SelectorStrategyRegistry
    ) -> None:
        open_page(app_driver, "/tickets")

        result = await PageLoadValidator(app_driver, strict_registry).validate("tickets", MOBILE)

        assert result.is_loaded is False
        assert result.search_interface_required is True
        assert result.search_interface_validation_skipped is False
        assert "Required search interface not found" in result.errors[0]

    @pytest.mark.asyncio
    async def test_failing_required_search_is_an_error(
        self, app_driver: FakeDriver, strict_registry: SelectorStrategyRegistry
    ) -> None:
        open_page(app_driver, "/tickets")
        selector = DEFAULT_PAGES["tickets"].search_interface_selector
        assert selector is not None
        app_driver.failing_selectors.add(selector)

        result = await PageLoadValidator(app_driver, strict_registry).validate("tickets", MOBILE)

        assert result.is_loaded is False
        assert "Unexpected error during search check" in result.errors[0]

    @pytest.mark.asyncio
    async def test_present_required_search_passes(
        self, app_driver: FakeDriver, strict_registry: SelectorStrategyRegistry
    ) -> None:
        open_page(app_driver, "/tickets")
        selector = DEFAULT_PAGES["tickets"].search_interface_selector
        assert selector is not None
        app_driver.elements[selector] = [make_element("search", width=300)]

        result = await PageLoadValidator(app_driver, strict_registry).validate("tickets", MOBILE)

        assert result.is_loaded is True
        assert result.search_interface_present is True
        assert result.warnings == []


class TestFindTouchTargetViolations:
    @pytest.mark.asyncio
    async def test_reports_only_small_visible_elements(self, driver: FakeDriver) -> None:
        driver.elements["button"] = [
            make_element("big", width=44, height=44),
            make_element("narrow", width=43, height=50),
            make_element("hidden", visible=False),
        ]

        violations = await find_touch_target_violations(driver, ["button", "a[href]"])

        assert len(violations) == 1
        assert "43x50px" in violations[0]

    @pytest.mark.asyncio
    async def test_empty_page(self) -> None:
        assert await find_touch_target_violations(build_app(FakeDriver()), ["button"]) == []

    @pytest.mark.asyncio
    async def test_failing_selector_is_skipped(self, driver: FakeDriver) -> None:
        driver.failing_selectors.add("button")
        driver.elements["a[href]"] = [make_element("link", width=20, height=20)]

        violations = await find_touch_target_violations(driver, ["button", "a[href]"])

        assert len(violations) == 1
        assert "'a[href]'" in violations[0]

"""Tests for the Playwright and Selenium adapters against mocked engines."""

from unittest.mock import AsyncMock, MagicMock

import pytest
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError
from selenium.common.exceptions import (
    ElementClickInterceptedException,
    ElementNotInteractableException,
    JavascriptException,
    MoveTargetOutOfBoundsException,
    StaleElementReferenceException,
    WebDriverException,
)

from unified_automation.adapters import PlaywrightAdapter, SeleniumAdapter, is_viewport_failure
from unified_automation.adapters import scripts, selenium_adapter
from unified_automation.errors import (
    ClipboardError,
    ElementInteractionError,
    ElementTimeoutError,
    EvaluationError,
    NavigationError,
)
from unified_automation.pages import DemoAppPage


def _scripts_run(mock_call) -> list:
    """Source of every script passed to a mocked evaluate/execute_script."""
    return [call.args[0] for call in mock_call.call_args_list]


def _ran(mock_call, script: str) -> bool:
    return any(script in source for source in _scripts_run(mock_call))


# ============================================================================
# Playwright
# ============================================================================


def make_page(evaluate=None):
    """Mock Playwright page whose locator(...).first is a single mock."""
    page = MagicMock()
    page.evaluate = AsyncMock(side_effect=evaluate)
    page.wait_for_function = AsyncMock()
    page.goto = AsyncMock()
    element = MagicMock()
    element.click = AsyncMock()
    element.fill = AsyncMock()
    page.locator.return_value.first = element
    return page, element


def editable_evaluate(expression, args):
    return True if scripts.IS_EDITABLE in expression else None


class TestViewportFailureDetection:
    """Tests for is_viewport_failure."""

    @pytest.mark.parametrize("message", [
        "Element is outside of the viewport",
        "move target out of bounds",
        "Element <button id=\"far\"> could not be scrolled into view",
    ])
    def test_position_failures(self, message):
        assert is_viewport_failure(Exception(message)) is True

    @pytest.mark.parametrize("message", [
        "Element is detached from the DOM",
        "element click intercepted: Element <button> is not clickable at point (50, 60). "
        "Other element would receive the click: <div class=\"overlay\">",
        "<div class=\"overlay\"> intercepts pointer events",
    ])
    def test_other_failures(self, message):
        assert is_viewport_failure(Exception(message)) is False


class TestPlaywrightClick:
    """Tests for PlaywrightAdapter.click."""

    @pytest.mark.asyncio
    async def test_click_waits_then_clicks_then_dispatches(self):
        page, element = make_page()
        adapter = PlaywrightAdapter(page)

        await adapter.click("#go")

        waited = [call.args[0] for call in page.wait_for_function.call_args_list]
        assert waited == [scripts.IS_VISIBLE, scripts.POINTER_EVENTS_ENABLED]
        element.click.assert_awaited_once()
        assert _ran(page.evaluate, scripts.DISPATCH_CLICK)
        assert not _ran(page.evaluate, scripts.SCROLL_INTO_VIEW)

    @pytest.mark.asyncio
    async def test_viewport_failure_scrolls_and_retries_once(self):
        page, element = make_page()
        element.click.side_effect = [PlaywrightError("Element is outside of the viewport"), None]
        adapter = PlaywrightAdapter(page)

        await adapter.click("#far-away")

        assert element.click.await_count == 2
        sources = _scripts_run(page.evaluate)
        scroll = next(i for i, s in enumerate(sources) if scripts.SCROLL_INTO_VIEW in s)
        dispatch = next(i for i, s in enumerate(sources) if scripts.DISPATCH_CLICK in s)
        assert scroll < dispatch

    @pytest.mark.asyncio
    async def test_other_failure_propagates_without_fallback(self):
        page, element = make_page()
        element.click.side_effect = PlaywrightError("Element is detached from the DOM")
        adapter = PlaywrightAdapter(page)

        with pytest.raises(ElementInteractionError, match="detached"):
            await adapter.click("#gone")

        element.click.assert_awaited_once()
        assert not _ran(page.evaluate, scripts.SCROLL_INTO_VIEW)

    @pytest.mark.asyncio
    async def test_covered_element_propagates_without_fallback(self):
        page, element = make_page()
        element.click.side_effect = PlaywrightError('<div class="overlay"></div> intercepts pointer events')
        adapter = PlaywrightAdapter(page)

        with pytest.raises(ElementInteractionError, match="intercepts pointer events"):
            await adapter.click("#covered")

        element.click.assert_awaited_once()
        assert not _ran(page.evaluate, scripts.SCROLL_INTO_VIEW)

    @pytest.mark.asyncio
    async def test_wait_timeout_is_translated(self):
        page, element = make_page()
        page.wait_for_function.side_effect = PlaywrightTimeoutError("Timeout 10000ms exceeded")
        adapter = PlaywrightAdapter(page)

        with pytest.raises(ElementTimeoutError) as exc_info:
            await adapter.click("#never")

        assert exc_info.value.selector == "#never"
        assert exc_info.value.timeout_ms == 10000
        element.click.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_synthetic_click_skipped_after_navigation(self):
        """A click that navigates away leaves no element to dispatch on."""

        def evaluate(expression, args):
            if scripts.DISPATCH_CLICK in expression:
                raise PlaywrightError("Execution context was destroyed, most likely because of a navigation")
            return None

        page, element = make_page(evaluate)
        adapter = PlaywrightAdapter(page)

        await adapter.click("a.next")

        element.click.assert_awaited_once()


class TestPlaywrightNavigation:
    """Tests for PlaywrightAdapter.navigate and click_and_wait_for_navigation."""

    @pytest.mark.asyncio
    async def test_navigate_waits_for_network_idle(self):
        page, _ = make_page()
        adapter = PlaywrightAdapter(page)

        await adapter.navigate("http://localhost:3002")

        page.goto.assert_awaited_once_with("http://localhost:3002", wait_until="networkidle", timeout=30000)

    @pytest.mark.asyncio
    async def test_navigate_failure_is_translated(self):
        page, _ = make_page()
        page.goto.side_effect = PlaywrightError("net::ERR_CONNECTION_REFUSED at http://localhost:3002/")
        adapter = PlaywrightAdapter(page)

        with pytest.raises(NavigationError, match="ERR_CONNECTION_REFUSED"):
            await adapter.navigate("http://localhost:3002")

    @pytest.mark.asyncio
    async def test_click_happens_inside_navigation_wait(self):
        page, element = make_page()
        order = []
        navigation = page.expect_navigation.return_value
        navigation.__aenter__ = AsyncMock(side_effect=lambda *a: order.append("enter"))
        navigation.__aexit__ = AsyncMock(side_effect=lambda *a: order.append("settled") or False)
        element.click.side_effect = lambda **kwargs: order.append("click")
        adapter = PlaywrightAdapter(page)

        await adapter.click_and_wait_for_navigation("a.next")

        assert order == ["enter", "click", "settled"]
        page.expect_navigation.assert_called_once_with(wait_until="networkidle", timeout=30000)

    @pytest.mark.asyncio
    async def test_navigation_timeout_is_translated(self):
        page, _ = make_page()
        navigation = page.expect_navigation.return_value
        navigation.__aexit__ = AsyncMock(side_effect=PlaywrightTimeoutError("Timeout 30000ms exceeded."))
        adapter = PlaywrightAdapter(page)

        with pytest.raises(NavigationError, match="Timeout 30000ms exceeded"):
            await adapter.click_and_wait_for_navigation("a.next")


class TestPlaywrightReadsAndFill:
    """Tests for PlaywrightAdapter reads and fill."""

    @pytest.mark.asyncio
    async def test_get_text_empty_for_absent_text(self):
        page, _ = make_page(lambda expression, args: None)
        adapter = PlaywrightAdapter(page)

        assert await adapter.get_text("#empty") == ""
        assert await adapter.get_input_value("#empty") == ""
        assert await adapter.get_attribute("#empty", "href") is None
        assert await adapter.is_visible("#empty") is False

    @pytest.mark.asyncio
    async def test_reads_pass_selector_to_shared_script(self):
        page, _ = make_page(lambda expression, args: "Confirmation")
        adapter = PlaywrightAdapter(page)

        assert await adapter.get_text(".modal h3") == "Confirmation"
        expression, args = page.evaluate.call_args.args
        assert scripts.TEXT_CONTENT in expression
        assert args == [".modal h3"]

    @pytest.mark.asyncio
    async def test_fill_sets_value_and_notifies(self):
        page, element = make_page(editable_evaluate)
        adapter = PlaywrightAdapter(page)

        await adapter.fill("#username", "automation-user")

        element.fill.assert_awaited_once_with("automation-user", timeout=10000)
        assert _ran(page.evaluate, scripts.NOTIFY_VALUE_CHANGED)

    @pytest.mark.asyncio
    async def test_fill_rejects_non_editable(self):
        page, element = make_page(lambda expression, args: False)
        adapter = PlaywrightAdapter(page)

        with pytest.raises(ElementInteractionError, match="not an editable input"):
            await adapter.fill("button#submit", "text")

        element.fill.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_evaluate_error(self):
        page, _ = make_page()
        page.evaluate.side_effect = PlaywrightError("ReferenceError: foo is not defined")
        adapter = PlaywrightAdapter(page)

        with pytest.raises(EvaluationError, match="foo is not defined"):
            await adapter.evaluate("() => foo()")

    @pytest.mark.asyncio
    async def test_clipboard_denied(self):
        page, _ = make_page()
        page.evaluate.side_effect = PlaywrightError("NotAllowedError: Read permission denied.")
        adapter = PlaywrightAdapter(page)

        with pytest.raises(ClipboardError):
            await adapter.read_clipboard()


# ============================================================================
# Selenium
# ============================================================================


def make_driver(results=None):
    """
    Mock WebDriver whose execute_script answers by script content.

    results maps a shared script to the value it returns; visibility and
    pointer-events checks pass unless overridden.
    """
    answers = {
        scripts.IS_VISIBLE: True,
        scripts.POINTER_EVENTS_ENABLED: True,
        scripts.IS_EDITABLE: True,
    }
    answers.update(results or {})

    def execute_script(source, *args):
        # IS_HIDDEN embeds IS_VISIBLE; match the most specific script first
        for script in sorted(answers, key=len, reverse=True):
            if script in source:
                return answers[script]
        return None

    driver = MagicMock()
    driver.execute_script.side_effect = execute_script
    element = MagicMock()
    driver.find_element.return_value = element
    return driver, element


class TestSeleniumClick:
    """Tests for SeleniumAdapter.click."""

    def test_constructor_applies_shared_timeouts(self):
        driver, _ = make_driver()
        SeleniumAdapter(driver)
        driver.set_page_load_timeout.assert_called_once_with(30.0)
        driver.set_script_timeout.assert_called_once_with(10.0)

    @pytest.mark.asyncio
    async def test_click_then_dispatch(self):
        driver, element = make_driver()
        adapter = SeleniumAdapter(driver)

        await adapter.click("#go")

        element.click.assert_called_once()
        assert _ran(driver.execute_script, scripts.DISPATCH_CLICK)
        assert not _ran(driver.execute_script, scripts.SCROLL_INTO_VIEW)

    @pytest.mark.asyncio
    async def test_viewport_failure_scrolls_and_retries_once(self):
        driver, element = make_driver()
        element.click.side_effect = [MoveTargetOutOfBoundsException("move target out of bounds"), None]
        adapter = SeleniumAdapter(driver)

        await adapter.click("#far-away")

        assert element.click.call_count == 2
        sources = _scripts_run(driver.execute_script)
        scroll = next(i for i, s in enumerate(sources) if scripts.SCROLL_INTO_VIEW in s)
        dispatch = next(i for i, s in enumerate(sources) if scripts.DISPATCH_CLICK in s)
        assert scroll < dispatch

    @pytest.mark.asyncio
    async def test_other_failure_propagates_without_fallback(self):
        driver, element = make_driver()
        element.click.side_effect = ElementNotInteractableException("element not interactable")
        adapter = SeleniumAdapter(driver)

        with pytest.raises(ElementInteractionError, match="not interactable"):
            await adapter.click("#covered")

        element.click.assert_called_once()
        assert not _ran(driver.execute_script, scripts.SCROLL_INTO_VIEW)

    @pytest.mark.asyncio
    async def test_covered_element_propagates_without_fallback(self):
        driver, element = make_driver()
        element.click.side_effect = ElementClickInterceptedException(
            "element click intercepted: Element <button> is not clickable at point (50, 60). "
            "Other element would receive the click: <div class=\"overlay\">"
        )
        adapter = SeleniumAdapter(driver)

        with pytest.raises(ElementInteractionError, match="element click intercepted"):
            await adapter.click("#covered")

        element.click.assert_called_once()
        assert not _ran(driver.execute_script, scripts.SCROLL_INTO_VIEW)

    def test_wait_timeout_is_translated(self):
        driver, _ = make_driver({scripts.IS_VISIBLE: False})
        adapter = SeleniumAdapter(driver)

        with pytest.raises(ElementTimeoutError, match="#never"):
            adapter._until(lambda d: False, "#never", "visible", timeout_ms=100)


class TestSeleniumNavigation:
    """Tests for SeleniumAdapter.navigate and click_and_wait_for_navigation."""

    @pytest.fixture(autouse=True)
    def short_navigation_timeout(self, monkeypatch):
        monkeypatch.setattr(selenium_adapter, "NAVIGATION_TIMEOUT_MS", 200)

    @pytest.mark.asyncio
    async def test_navigate_waits_for_document_ready(self):
        driver, _ = make_driver({scripts.DOCUMENT_READY: True})
        adapter = SeleniumAdapter(driver)

        await adapter.navigate("http://localhost:3002")

        driver.get.assert_called_once_with("http://localhost:3002")
        assert _ran(driver.execute_script, scripts.DOCUMENT_READY)

    @pytest.mark.asyncio
    async def test_navigate_failure_is_translated(self):
        driver, _ = make_driver({scripts.DOCUMENT_READY: True})
        driver.get.side_effect = WebDriverException("unknown error: net::ERR_NAME_NOT_RESOLVED")
        adapter = SeleniumAdapter(driver)

        with pytest.raises(NavigationError, match="ERR_NAME_NOT_RESOLVED"):
            await adapter.navigate("http://nowhere.invalid")

    @pytest.mark.asyncio
    async def test_navigate_never_ready(self):
        driver, _ = make_driver({scripts.DOCUMENT_READY: False})
        adapter = SeleniumAdapter(driver)

        with pytest.raises(NavigationError, match="did not finish loading"):
            await adapter.navigate("http://localhost:3002")

    @pytest.mark.asyncio
    async def test_click_waits_for_old_page_to_go_stale(self):
        driver, element = make_driver({scripts.DOCUMENT_READY: True})
        old_root = MagicMock()
        old_root.is_enabled.side_effect = StaleElementReferenceException("stale element reference")
        driver.find_element.side_effect = lambda by, value: old_root if value == "html" else element
        adapter = SeleniumAdapter(driver)

        await adapter.click_and_wait_for_navigation("a.next")

        element.click.assert_called_once()
        old_root.is_enabled.assert_called()
        assert _ran(driver.execute_script, scripts.DOCUMENT_READY)

    @pytest.mark.asyncio
    async def test_click_without_navigation(self):
        driver, element = make_driver({scripts.DOCUMENT_READY: True})
        old_root = MagicMock()
        old_root.is_enabled.return_value = True
        driver.find_element.side_effect = lambda by, value: old_root if value == "html" else element
        adapter = SeleniumAdapter(driver)

        with pytest.raises(NavigationError, match="did not trigger a navigation"):
            await adapter.click_and_wait_for_navigation("a.same-page")

        element.click.assert_called_once()


class TestSeleniumReadsAndFill:
    """Tests for SeleniumAdapter reads, fill and scripts."""

    @pytest.mark.asyncio
    async def test_get_text_empty_for_absent_text(self):
        driver, _ = make_driver({scripts.TEXT_CONTENT: None, scripts.INPUT_VALUE: None})
        adapter = SeleniumAdapter(driver)

        assert await adapter.get_text("#empty") == ""
        assert await adapter.get_input_value("#empty") == ""

    @pytest.mark.asyncio
    async def test_fill_clears_types_and_notifies(self):
        driver, element = make_driver()
        adapter = SeleniumAdapter(driver)

        await adapter.fill("#username", "automation-user")

        element.clear.assert_called_once()
        element.send_keys.assert_called_once_with("automation-user")
        assert _ran(driver.execute_script, scripts.NOTIFY_VALUE_CHANGED)

    @pytest.mark.asyncio
    async def test_fill_rejects_non_editable(self):
        driver, element = make_driver({scripts.IS_EDITABLE: False})
        adapter = SeleniumAdapter(driver)

        with pytest.raises(ElementInteractionError, match="not an editable input"):
            await adapter.fill("button#submit", "text")

        element.send_keys.assert_not_called()

    @pytest.mark.asyncio
    async def test_evaluate_returns_settled_value(self):
        driver, _ = make_driver()
        driver.execute_async_script.return_value = {"ok": True, "value": 42}
        adapter = SeleniumAdapter(driver)

        assert await adapter.evaluate("(a, b) => a * b", 6, 7) == 42
        source, *args = driver.execute_async_script.call_args.args
        assert "(a, b) => a * b" in source
        assert args == [6, 7]

    @pytest.mark.asyncio
    async def test_evaluate_in_page_error(self):
        driver, _ = make_driver()
        driver.execute_async_script.return_value = {"ok": False, "error": "boom"}
        adapter = SeleniumAdapter(driver)

        with pytest.raises(EvaluationError, match="boom"):
            await adapter.evaluate("() => { throw new Error('boom'); }")

    @pytest.mark.asyncio
    async def test_script_error_translated(self):
        driver, _ = make_driver()
        driver.execute_script.side_effect = JavascriptException("javascript error: bad selector")
        adapter = SeleniumAdapter(driver)

        with pytest.raises(EvaluationError, match="bad selector"):
            await adapter.count_elements("::invalid")

    @pytest.mark.asyncio
    async def test_clipboard_denied(self):
        driver, _ = make_driver()
        driver.execute_async_script.return_value = {"ok": False, "error": "Read permission denied."}
        adapter = SeleniumAdapter(driver)

        with pytest.raises(ClipboardError, match="permission denied"):
            await adapter.read_clipboard()


# ============================================================================
# Backend transparency
# ============================================================================


def _playwright_adapter(text: str):
    page, _ = make_page(lambda expression, args: text if scripts.TEXT_CONTENT in expression else True)
    return PlaywrightAdapter(page)


def _selenium_adapter(text: str):
    driver, _ = make_driver({scripts.TEXT_CONTENT: text})
    return SeleniumAdapter(driver)


class TestBackendTransparency:
    """The same page object logic gives the same result on both backends."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("build", [_playwright_adapter, _selenium_adapter])
    async def test_modal_title_passes(self, build):
        page = DemoAppPage(build("Confirmation"))
        await page.verify_modal_title("Confirmation")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("build", [_playwright_adapter, _selenium_adapter])
    async def test_modal_title_mismatch_fails_identically(self, build):
        page = DemoAppPage(build("confirmation"))
        with pytest.raises(AssertionError, match="Modal title verification failed"):
            await page.verify_modal_title("Confirmation")

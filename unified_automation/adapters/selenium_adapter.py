"""
Selenium WebDriver backend for the unified capability contract.

WebDriver is a blocking API. Each operation is written as a synchronous
method and awaited through asyncio.to_thread, so callers see the same
suspending surface as the Playwright adapter. Calls are still issued one at a
time; the driver is never used from two threads at once.
"""
import asyncio
import logging
from typing import Any, Callable, Optional

from selenium.common.exceptions import (
    ElementClickInterceptedException,
    ElementNotInteractableException,
    JavascriptException,
    MoveTargetOutOfBoundsException,
    StaleElementReferenceException,
    TimeoutException,
    WebDriverException,
)
from selenium.webdriver.common.by import By
from selenium.webdriver.remote.webdriver import WebDriver
from selenium.webdriver.support import expected_conditions as EC
from selenium.webdriver.support.ui import WebDriverWait

from unified_automation.adapters import scripts
from unified_automation.adapters.base import (
    ELEMENT_TIMEOUT_MS,
    NAVIGATION_TIMEOUT_MS,
    UnifiedAdapter,
    is_viewport_failure,
)
from unified_automation.errors import (
    ClipboardError,
    ElementInteractionError,
    ElementTimeoutError,
    EvaluationError,
    NavigationError,
)

logger = logging.getLogger(__name__)

_SYNC_CALL = "return ({script}).apply(null, arguments);"

# Promise-aware wrapper: the last argument is WebDriver's completion callback
_ASYNC_CALL = """
const done = arguments[arguments.length - 1];
const args = Array.prototype.slice.call(arguments, 0, -1);
Promise.resolve()
    .then(() => ({script}).apply(null, args))
    .then(
        (value) => done({{ ok: true, value: value === undefined ? null : value }}),
        (error) => done({{ ok: false, error: String((error && error.message) || error) }})
    );
"""

_CLICK_FAILURES = (
    ElementClickInterceptedException,
    ElementNotInteractableException,
    MoveTargetOutOfBoundsException,
)


def _message(error: WebDriverException) -> str:
    text = (error.msg or str(error)).strip()
    return text.splitlines()[0] if text else type(error).__name__


def call_script(driver: WebDriver, script: str, *args: Any) -> Any:
    """Run a shared synchronous in-page script with positional arguments."""
    try:
        return driver.execute_script(_SYNC_CALL.format(script=script), *args)
    except JavascriptException as e:
        raise EvaluationError(_message(e)) from e


def call_async_script(driver: WebDriver, script: str, *args: Any) -> Any:
    """Run a script whose result may be a Promise and return its settled value."""
    try:
        outcome = driver.execute_async_script(_ASYNC_CALL.format(script=script), *args)
    except (JavascriptException, TimeoutException) as e:
        raise EvaluationError(_message(e)) from e
    if not outcome or not outcome.get("ok"):
        raise EvaluationError((outcome or {}).get("error", "script returned no result"))
    return outcome.get("value")


class SeleniumAdapter(UnifiedAdapter):
    """Adapter bound to one Selenium WebDriver session."""

    name = "selenium"

    def __init__(self, driver: WebDriver) -> None:
        self.driver = driver
        self.driver.set_page_load_timeout(NAVIGATION_TIMEOUT_MS / 1000)
        self.driver.set_script_timeout(ELEMENT_TIMEOUT_MS / 1000)

    # ------------------------------------------------------------------
    # Synchronous helpers (run in a worker thread)
    # ------------------------------------------------------------------

    def _until(
        self,
        predicate: Callable[[WebDriver], Any],
        selector: str,
        condition: str,
        timeout_ms: int = ELEMENT_TIMEOUT_MS,
    ) -> Any:
        wait = WebDriverWait(
            self.driver,
            timeout_ms / 1000,
            ignored_exceptions=(StaleElementReferenceException,),
        )
        try:
            return wait.until(predicate)
        except TimeoutException as e:
            raise ElementTimeoutError(selector, condition, timeout_ms) from e

    def _wait_script(self, script: str, selector: str, condition: str) -> None:
        self._until(lambda d: call_script(d, script, selector), selector, condition)

    def _wait_clickable_sync(self, selector: str) -> None:
        self._wait_script(scripts.IS_VISIBLE, selector, "visible")
        self._wait_script(scripts.POINTER_EVENTS_ENABLED, selector, "clickable")

    def _native_click(self, selector: str) -> None:
        try:
            self.driver.find_element(By.CSS_SELECTOR, selector).click()
        except WebDriverException as e:
            raise ElementInteractionError(selector, _message(e)) from e

    def _click_sync(self, selector: str) -> None:
        self._wait_clickable_sync(selector)
        try:
            self.driver.find_element(By.CSS_SELECTOR, selector).click()
        except _CLICK_FAILURES as e:
            if not (isinstance(e, MoveTargetOutOfBoundsException) or is_viewport_failure(e)):
                raise ElementInteractionError(selector, _message(e)) from e
            logger.info(f"Element '{selector}' outside viewport, scrolling into view")
            self._scroll_into_view_and_click_sync(selector)
        except WebDriverException as e:
            raise ElementInteractionError(selector, _message(e)) from e
        call_script(self.driver, scripts.DISPATCH_CLICK, selector)

    def _scroll_into_view_and_click_sync(self, selector: str) -> None:
        call_script(self.driver, scripts.SCROLL_INTO_VIEW, selector)
        self._native_click(selector)

    def _fill_sync(self, selector: str, value: str) -> None:
        self._wait_script(scripts.IS_VISIBLE, selector, "visible")
        if not call_script(self.driver, scripts.IS_EDITABLE, selector):
            raise ElementInteractionError(selector, "element is not an editable input")
        try:
            element = self.driver.find_element(By.CSS_SELECTOR, selector)
            element.clear()
            element.send_keys(value)
        except WebDriverException as e:
            raise ElementInteractionError(selector, _message(e)) from e
        call_script(self.driver, scripts.NOTIFY_VALUE_CHANGED, selector)

    def _wait_document_ready(self, target: str) -> None:
        try:
            WebDriverWait(self.driver, NAVIGATION_TIMEOUT_MS / 1000).until(
                lambda d: call_script(d, scripts.DOCUMENT_READY)
            )
        except TimeoutException as e:
            raise NavigationError(target, "document did not finish loading") from e

    def _navigate_sync(self, url: str) -> None:
        try:
            self.driver.get(url)
        except WebDriverException as e:
            raise NavigationError(url, _message(e)) from e
        self._wait_document_ready(url)

    def _click_and_wait_for_navigation_sync(self, selector: str) -> None:
        old_root = self.driver.find_element(By.TAG_NAME, "html")
        self._wait_clickable_sync(selector)
        self._native_click(selector)
        try:
            WebDriverWait(self.driver, NAVIGATION_TIMEOUT_MS / 1000).until(
                EC.staleness_of(old_root)
            )
        except TimeoutException as e:
            raise NavigationError(selector, "click did not trigger a navigation") from e
        self._wait_document_ready(selector)

    # ------------------------------------------------------------------
    # Capability contract
    # ------------------------------------------------------------------

    async def navigate(self, url: str) -> None:
        await asyncio.to_thread(self._navigate_sync, url)

    async def click(self, selector: str) -> None:
        await asyncio.to_thread(self._click_sync, selector)

    async def _scroll_into_view_and_click(self, selector: str) -> None:
        await asyncio.to_thread(self._scroll_into_view_and_click_sync, selector)

    async def fill(self, selector: str, value: str) -> None:
        await asyncio.to_thread(self._fill_sync, selector, value)

    async def wait_for_selector(self, selector: str) -> None:
        await asyncio.to_thread(self._wait_script, scripts.IS_VISIBLE, selector, "visible")

    async def wait_for_hidden(self, selector: str) -> None:
        await asyncio.to_thread(self._wait_script, scripts.IS_HIDDEN, selector, "hidden")

    async def is_visible(self, selector: str) -> bool:
        return bool(await asyncio.to_thread(call_script, self.driver, scripts.IS_VISIBLE, selector))

    async def is_disabled(self, selector: str) -> bool:
        return bool(await asyncio.to_thread(call_script, self.driver, scripts.IS_DISABLED, selector))

    async def get_text(self, selector: str) -> str:
        return await asyncio.to_thread(call_script, self.driver, scripts.TEXT_CONTENT, selector) or ""

    async def get_input_value(self, selector: str) -> str:
        return await asyncio.to_thread(call_script, self.driver, scripts.INPUT_VALUE, selector) or ""

    async def get_attribute(self, selector: str, name: str) -> Optional[str]:
        return await asyncio.to_thread(call_script, self.driver, scripts.GET_ATTRIBUTE, selector, name)

    async def count_elements(self, selector: str) -> int:
        return int(await asyncio.to_thread(call_script, self.driver, scripts.COUNT_ELEMENTS, selector))

    async def click_and_wait_for_navigation(self, selector: str) -> None:
        await asyncio.to_thread(self._click_and_wait_for_navigation_sync, selector)

    async def evaluate(self, script: str, *args: Any) -> Any:
        return await asyncio.to_thread(call_async_script, self.driver, script, *args)

    async def read_clipboard(self) -> str:
        try:
            text = await asyncio.to_thread(call_async_script, self.driver, scripts.READ_CLIPBOARD)
        except EvaluationError as e:
            raise ClipboardError(str(e)) from e
        return text or ""

    async def get_current_url(self) -> str:
        return await asyncio.to_thread(lambda: self.driver.current_url)

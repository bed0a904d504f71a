"""
Playwright backend for the unified capability contract.

Playwright is natively async; every operation maps onto Page/Locator calls.
Locators are narrowed with .first so strict-mode never rejects selectors that
match several elements, giving the same first-match semantics as Selenium.
"""
import logging
from typing import Any, Optional

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Locator, Page
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from unified_automation.adapters import scripts
from unified_automation.adapters.base import (
    ELEMENT_TIMEOUT_MS,
    NAVIGATION_TIMEOUT_MS,
    UnifiedAdapter,
    is_viewport_failure,
)
from unified_automation.errors import (
    AutomationError,
    ClipboardError,
    ElementInteractionError,
    ElementTimeoutError,
    EvaluationError,
    NavigationError,
)

logger = logging.getLogger(__name__)

_CONTEXT_DESTROYED = "Execution context was destroyed"


def _first_line(error: BaseException) -> str:
    return str(error).strip().splitlines()[0] if str(error).strip() else type(error).__name__


class PlaywrightAdapter(UnifiedAdapter):
    """Adapter bound to one Playwright page."""

    name = "playwright"

    def __init__(self, page: Page) -> None:
        self.page = page

    def _first(self, selector: str) -> Locator:
        return self.page.locator(selector).first

    def _translate(self, error: PlaywrightError, selector: str, condition: str) -> AutomationError:
        if isinstance(error, PlaywrightTimeoutError):
            return ElementTimeoutError(selector, condition, ELEMENT_TIMEOUT_MS)
        return ElementInteractionError(selector, _first_line(error))

    async def _call(self, script: str, *args: Any) -> Any:
        """Run a shared in-page script with positional arguments."""
        try:
            return await self.page.evaluate(f"(args) => ({script})(...args)", list(args))
        except PlaywrightError as e:
            raise EvaluationError(_first_line(e)) from e

    async def _wait_for(self, script: str, selector: str, condition: str) -> None:
        try:
            await self.page.wait_for_function(script, arg=selector, timeout=ELEMENT_TIMEOUT_MS)
        except PlaywrightError as e:
            raise self._translate(e, selector, condition) from e

    async def _wait_clickable(self, selector: str) -> None:
        await self.wait_for_selector(selector)
        await self._wait_for(scripts.POINTER_EVENTS_ENABLED, selector, "clickable")

    async def _dispatch_synthetic_click(self, selector: str) -> None:
        try:
            await self._call(scripts.DISPATCH_CLICK, selector)
        except EvaluationError as e:
            # The native click navigated away; the element is gone
            if _CONTEXT_DESTROYED not in str(e):
                raise
            logger.debug(f"Skipped synthetic click on '{selector}': page navigated")

    async def navigate(self, url: str) -> None:
        try:
            await self.page.goto(url, wait_until="networkidle", timeout=NAVIGATION_TIMEOUT_MS)
        except PlaywrightError as e:
            raise NavigationError(url, _first_line(e)) from e

    async def click(self, selector: str) -> None:
        await self._wait_clickable(selector)
        try:
            await self._first(selector).click(timeout=ELEMENT_TIMEOUT_MS)
        except PlaywrightError as e:
            if not is_viewport_failure(e):
                raise self._translate(e, selector, "clickable") from e
            logger.info(f"Element '{selector}' outside viewport, scrolling into view")
            await self._scroll_into_view_and_click(selector)
        await self._dispatch_synthetic_click(selector)

    async def _scroll_into_view_and_click(self, selector: str) -> None:
        await self._call(scripts.SCROLL_INTO_VIEW, selector)
        try:
            await self._first(selector).click(timeout=ELEMENT_TIMEOUT_MS)
        except PlaywrightError as e:
            raise self._translate(e, selector, "clickable") from e

    async def fill(self, selector: str, value: str) -> None:
        await self.wait_for_selector(selector)
        if not await self._call(scripts.IS_EDITABLE, selector):
            raise ElementInteractionError(selector, "element is not an editable input")
        try:
            await self._first(selector).fill(value, timeout=ELEMENT_TIMEOUT_MS)
        except PlaywrightError as e:
            raise self._translate(e, selector, "editable") from e
        await self._call(scripts.NOTIFY_VALUE_CHANGED, selector)

    async def wait_for_selector(self, selector: str) -> None:
        await self._wait_for(scripts.IS_VISIBLE, selector, "visible")

    async def wait_for_hidden(self, selector: str) -> None:
        await self._wait_for(scripts.IS_HIDDEN, selector, "hidden")

    async def is_visible(self, selector: str) -> bool:
        return bool(await self._call(scripts.IS_VISIBLE, selector))

    async def is_disabled(self, selector: str) -> bool:
        return bool(await self._call(scripts.IS_DISABLED, selector))

    async def get_text(self, selector: str) -> str:
        return await self._call(scripts.TEXT_CONTENT, selector) or ""

    async def get_input_value(self, selector: str) -> str:
        return await self._call(scripts.INPUT_VALUE, selector) or ""

    async def get_attribute(self, selector: str, name: str) -> Optional[str]:
        return await self._call(scripts.GET_ATTRIBUTE, selector, name)

    async def count_elements(self, selector: str) -> int:
        return int(await self._call(scripts.COUNT_ELEMENTS, selector))

    async def click_and_wait_for_navigation(self, selector: str) -> None:
        await self._wait_clickable(selector)
        try:
            async with self.page.expect_navigation(
                wait_until="networkidle", timeout=NAVIGATION_TIMEOUT_MS
            ):
                try:
                    await self._first(selector).click(timeout=ELEMENT_TIMEOUT_MS)
                except PlaywrightError as e:
                    raise self._translate(e, selector, "clickable") from e
        except PlaywrightError as e:
            raise NavigationError(selector, _first_line(e)) from e

    async def evaluate(self, script: str, *args: Any) -> Any:
        return await self._call(script, *args)

    async def read_clipboard(self) -> str:
        try:
            text = await self._call(scripts.READ_CLIPBOARD)
        except EvaluationError as e:
            raise ClipboardError(str(e)) from e
        return text or ""

    async def get_current_url(self) -> str:
        return self.page.url

    async def wait_for_timeout(self, ms: int) -> None:
        await self.page.wait_for_timeout(max(ms, 0))

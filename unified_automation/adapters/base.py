"""
Capability contract shared by every browser backend.

CONTRACT:
=========

Journeys and page objects only talk to UnifiedAdapter. Each backend adapter
must give observably identical results for every operation on the same page:

- Selector operations act on the first match of a CSS selector.
- Every selector wait uses ELEMENT_TIMEOUT_MS; journeys cannot override it.
- Absence is a valid result for reads (is_visible/is_disabled -> False,
  get_text/get_input_value -> "", get_attribute -> None).
- click() waits for visibility and pointer-events, clicks natively, then
  dispatches a synthetic click. A click that fails because the element is
  outside the viewport is retried once through _scroll_into_view_and_click().
- fill() sets the value natively, then dispatches input and change events.
- A navigation-triggering click returns only after navigation settles.

Engine exceptions are translated into unified_automation.errors at the
adapter boundary.
"""

import asyncio
import re
from abc import ABC, abstractmethod
from typing import Any, Optional

# Harmonized across backends for comparable behavior
ELEMENT_TIMEOUT_MS = 10000
NAVIGATION_TIMEOUT_MS = 30000

_VIEWPORT_FAILURE = re.compile(
    r"outside of the viewport|out of bounds|could not be scrolled into view",
    re.IGNORECASE,
)

# Chrome reports covered elements as "not clickable at point"; that is not a position problem
_COVERED_FAILURE = re.compile(r"other element would receive the click|intercepts pointer events", re.IGNORECASE)


def is_viewport_failure(error: BaseException) -> bool:
    """Return True if a native click failed because of the element's position."""
    message = str(error)
    if _COVERED_FAILURE.search(message):
        return False
    return bool(_VIEWPORT_FAILURE.search(message))


class UnifiedAdapter(ABC):
    """Base class for backend adapters."""

    #: Backend identifier, set by subclasses
    name: str = "unknown"

    @abstractmethod
    async def navigate(self, url: str) -> None:
        """Navigate to an absolute URL and wait for the network to settle."""

    @abstractmethod
    async def click(self, selector: str) -> None:
        """Framework-safe click with viewport fallback."""

    @abstractmethod
    async def fill(self, selector: str, value: str) -> None:
        """Set an input's value and notify reactive form listeners."""

    @abstractmethod
    async def wait_for_selector(self, selector: str) -> None:
        """Wait until the element is visible."""

    @abstractmethod
    async def wait_for_hidden(self, selector: str) -> None:
        """Wait until the element is hidden or detached."""

    @abstractmethod
    async def is_visible(self, selector: str) -> bool:
        """Visibility check; absence is False."""

    @abstractmethod
    async def is_disabled(self, selector: str) -> bool:
        """Disabled check; absence is False."""

    @abstractmethod
    async def get_text(self, selector: str) -> str:
        """Text content; empty string when the element or its text is absent."""

    @abstractmethod
    async def get_input_value(self, selector: str) -> str:
        """Current form value; empty string when absent."""

    @abstractmethod
    async def get_attribute(self, selector: str, name: str) -> Optional[str]:
        """Attribute value, or None when the element or attribute is absent."""

    @abstractmethod
    async def count_elements(self, selector: str) -> int:
        """Number of matching elements."""

    @abstractmethod
    async def click_and_wait_for_navigation(self, selector: str) -> None:
        """Click an element that triggers navigation and wait for it to settle."""

    @abstractmethod
    async def evaluate(self, script: str, *args: Any) -> Any:
        """Run a JavaScript function source in the page.

        Args:
            script: Function source, e.g. "(a, b) => a + b". Promises are awaited.
            *args: JSON-serializable arguments passed positionally.

        Returns:
            The JSON-serializable result.
        """

    @abstractmethod
    async def read_clipboard(self) -> str:
        """Read text from the system clipboard via the page."""

    @abstractmethod
    async def get_current_url(self) -> str:
        """Current page URL."""

    async def wait_for_timeout(self, ms: int) -> None:
        """Pure delay."""
        await asyncio.sleep(max(ms, 0) / 1000)

    @abstractmethod
    async def _scroll_into_view_and_click(self, selector: str) -> None:
        """Fallback for clicks on elements outside the current viewport."""

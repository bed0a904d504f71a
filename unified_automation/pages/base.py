"""
BasePage provides a foundation for all Page Objects.

A page object holds a reference to the journey's adapter (shared, not owned)
and an immutable selector map. Verification helpers raise
VerificationError; they never return booleans.
"""
from types import MappingProxyType
from typing import Any, Mapping

from unified_automation.adapters.base import UnifiedAdapter
from unified_automation.errors import VerificationError


class BasePage:
    """Base class for page objects."""

    #: Selector map for the page; frozen per instance
    SELECTORS: Mapping[str, str] = {}

    def __init__(self, adapter: UnifiedAdapter) -> None:
        self.adapter = adapter
        self.selectors: Mapping[str, str] = MappingProxyType(dict(self.SELECTORS))

    async def navigate(self, url: str) -> None:
        await self.adapter.navigate(url)

    async def wait_for_selector(self, selector: str) -> None:
        await self.adapter.wait_for_selector(selector)

    async def wait_for_hidden(self, selector: str) -> None:
        await self.adapter.wait_for_hidden(selector)

    @staticmethod
    def verify(label: str, condition: bool, expected: Any, actual: Any) -> None:
        """Raise a labelled VerificationError unless condition holds."""
        if not condition:
            raise VerificationError(label, expected, actual)

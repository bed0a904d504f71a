"""Playwright browser session backed by a persistent Chromium context."""
import logging
from typing import Any, Dict, Optional

from playwright.async_api import BrowserContext, Playwright, async_playwright
from playwright.async_api import Error as PlaywrightError

from unified_automation.adapters.playwright_adapter import PlaywrightAdapter
from unified_automation.browser.session import BrowserSession, build_launch_args

logger = logging.getLogger(__name__)


class PlaywrightSession(BrowserSession):
    """Launches Chromium through Playwright with the configured profile."""

    def __init__(self, settings) -> None:
        super().__init__(settings)
        self._playwright: Optional[Playwright] = None
        self._context: Optional[BrowserContext] = None

    def _launch_options(self) -> Dict[str, Any]:
        options: Dict[str, Any] = {
            "user_data_dir": self.settings.user_data_dir,
            "headless": self.settings.headless,
            "args": build_launch_args(self.settings),
            "no_viewport": True,
            "permissions": ["clipboard-read", "clipboard-write"],
        }
        if self.settings.executable_path:
            options["executable_path"] = self.settings.executable_path
        if self.settings.extension_enabled:
            options["ignore_default_args"] = ["--disable-extensions"]
        return options

    async def acquire(self) -> PlaywrightAdapter:
        self._playwright = await async_playwright().start()
        self._context = await self._playwright.chromium.launch_persistent_context(
            **self._launch_options()
        )
        page = self._context.pages[0] if self._context.pages else await self._context.new_page()
        logger.debug(f"Playwright browser started (headless={self.settings.headless})")
        self.adapter = PlaywrightAdapter(page)
        return self.adapter

    async def release(self) -> None:
        if self._context:
            try:
                if self.keep_open:
                    logger.info("Keeping browser open; close the window to finish")
                    await self._context.wait_for_event("close", timeout=0)
                else:
                    await self._context.close()
            except PlaywrightError as e:
                logger.error(f"Error closing browser: {e}")
            self._context = None
        if self._playwright:
            await self._playwright.stop()
            self._playwright = None
        self.adapter = None

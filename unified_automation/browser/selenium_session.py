"""Selenium browser session driving Chrome through WebDriver."""
import asyncio
import logging
import time
from typing import Optional

from selenium import webdriver
from selenium.common.exceptions import WebDriverException
from selenium.webdriver.chrome.options import Options

from unified_automation.adapters.selenium_adapter import SeleniumAdapter
from unified_automation.browser.session import BrowserSession, build_launch_args

logger = logging.getLogger(__name__)

# Seconds between checks for a user-closed browser window
KEEP_OPEN_POLL_INTERVAL = 1.0


class SeleniumSession(BrowserSession):
    """Launches Chrome through Selenium Manager with the configured profile."""

    def __init__(self, settings) -> None:
        super().__init__(settings)
        self._driver: Optional[webdriver.Chrome] = None

    def build_options(self) -> Options:
        options = Options()
        for arg in build_launch_args(self.settings):
            options.add_argument(arg)
        options.add_argument(f"--user-data-dir={self.settings.user_data_dir}")
        options.add_argument("--start-maximized")
        if self.settings.headless:
            options.add_argument("--headless=new")
        if self.settings.executable_path:
            options.binary_location = self.settings.executable_path
        return options

    def _wait_until_closed(self) -> None:
        while True:
            try:
                if not self._driver.window_handles:
                    return
            except WebDriverException:
                # Session is gone once the last window closes
                return
            time.sleep(KEEP_OPEN_POLL_INTERVAL)

    async def acquire(self) -> SeleniumAdapter:
        self._driver = await asyncio.to_thread(webdriver.Chrome, options=self.build_options())
        logger.debug(f"Selenium browser started (headless={self.settings.headless})")
        self.adapter = SeleniumAdapter(self._driver)
        return self.adapter

    async def release(self) -> None:
        if self._driver:
            if self.keep_open:
                logger.info("Keeping browser open; close the window to finish")
                await asyncio.to_thread(self._wait_until_closed)
            try:
                await asyncio.to_thread(self._driver.quit)
            except WebDriverException as e:
                logger.error(f"Error closing browser: {e}")
            self._driver = None
        self.adapter = None

"""
Browser launch as an explicit resource.

A BrowserSession owns one launched browser for the lifetime of a runner
process: acquire() launches it and returns the bound adapter, release()
tears it down. Used as an async context manager so release always runs,
including when acquire fails halfway.
"""
import logging
from abc import ABC, abstractmethod
from typing import List, Optional

from unified_automation.adapters.base import UnifiedAdapter
from unified_automation.config import AutomationSettings

logger = logging.getLogger(__name__)

# Chromium flags shared by both backends
BASE_LAUNCH_ARGS = [
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-infobars",
    "--disable-session-crashed-bubble",
    "--hide-crash-restore-bubble",
    "--no-first-run",
    "--no-default-browser-check",
    "--disable-popup-blocking",
    "--disable-prompt-on-repost",
]


def build_launch_args(settings: AutomationSettings) -> List[str]:
    """Chromium command-line flags for the given settings."""
    args = list(BASE_LAUNCH_ARGS)
    if settings.extension_enabled:
        args.extend([
            f"--disable-extensions-except={settings.extension_path}",
            f"--load-extension={settings.extension_path}",
        ])
    elif settings.load_extensions and settings.extension_path:
        logger.warning(f"Extension path not found, skipping: {settings.extension_path}")
    return args


class BrowserSession(ABC):
    """One launched browser bound to one adapter."""

    def __init__(self, settings: AutomationSettings) -> None:
        self.settings = settings
        self.adapter: Optional[UnifiedAdapter] = None

    @property
    def keep_open(self) -> bool:
        """Leave a headed browser open for inspection until the user closes it."""
        return not self.settings.close_browser and not self.settings.headless

    @abstractmethod
    async def acquire(self) -> UnifiedAdapter:
        """Launch the browser and return an adapter bound to its page."""

    @abstractmethod
    async def release(self) -> None:
        """Tear the browser down; safe to call after a partial acquire."""

    async def __aenter__(self) -> UnifiedAdapter:
        try:
            return await self.acquire()
        except BaseException:
            await self.release()
            raise

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.release()

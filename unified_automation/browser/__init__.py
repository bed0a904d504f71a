"""Browser sessions: launch/teardown of one browser per runner process."""

from typing import Dict, Type

from unified_automation.config import AutomationSettings
from unified_automation.types import Backend

from .playwright_session import PlaywrightSession
from .selenium_session import SeleniumSession
from .session import BASE_LAUNCH_ARGS, BrowserSession, build_launch_args

SESSIONS: Dict[Backend, Type[BrowserSession]] = {
    Backend.PLAYWRIGHT: PlaywrightSession,
    Backend.SELENIUM: SeleniumSession,
}


def create_session(backend: Backend, settings: AutomationSettings) -> BrowserSession:
    """Create the browser session for a backend; resolved once per process."""
    return SESSIONS[Backend(backend)](settings)


__all__ = [
    "BASE_LAUNCH_ARGS",
    "BrowserSession",
    "PlaywrightSession",
    "SeleniumSession",
    "build_launch_args",
    "create_session",
]

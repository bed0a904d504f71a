"""Backend adapters implementing the unified capability contract."""

from .base import ELEMENT_TIMEOUT_MS, NAVIGATION_TIMEOUT_MS, UnifiedAdapter, is_viewport_failure
from .playwright_adapter import PlaywrightAdapter
from .selenium_adapter import SeleniumAdapter

__all__ = [
    # Contract
    "UnifiedAdapter",
    "ELEMENT_TIMEOUT_MS",
    "NAVIGATION_TIMEOUT_MS",
    "is_viewport_failure",
    # Backends
    "PlaywrightAdapter",
    "SeleniumAdapter",
]

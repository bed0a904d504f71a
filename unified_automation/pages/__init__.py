"""Page objects built on the unified capability contract."""

from .base import BasePage
from .demo_app import DemoAppPage

__all__ = ["BasePage", "DemoAppPage"]

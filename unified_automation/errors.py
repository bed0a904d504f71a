"""
Error taxonomy for the harness.

Adapters translate engine-native exceptions (Playwright, Selenium) into these
types at their boundary, so journeys and page objects only ever see harness
errors regardless of backend.
"""
from typing import Any, Optional


class AutomationError(Exception):
    """Base class for all harness errors."""


class ElementTimeoutError(AutomationError, TimeoutError):
    """A selector-based wait did not hold within the shared timeout window."""

    def __init__(self, selector: str, condition: str, timeout_ms: int) -> None:
        self.selector = selector
        self.condition = condition
        self.timeout_ms = timeout_ms
        super().__init__(
            f"Timed out after {timeout_ms}ms waiting for '{selector}' to be {condition}"
        )


class ElementInteractionError(AutomationError):
    """Element exists but the requested interaction is not possible."""

    def __init__(self, selector: str, reason: str) -> None:
        self.selector = selector
        self.reason = reason
        super().__init__(f"Cannot interact with '{selector}': {reason}")


class NavigationError(AutomationError):
    """Navigation failed or did not settle in time."""

    def __init__(self, target: str, reason: str) -> None:
        self.target = target
        self.reason = reason
        super().__init__(f"Navigation via '{target}' failed: {reason}")


class EvaluationError(AutomationError):
    """In-page logic threw inside the page context."""


class ClipboardError(AutomationError):
    """Clipboard could not be read (permission denied or unavailable)."""


class VerificationError(AutomationError, AssertionError):
    """A page-object verification failed.

    The message always names the verification and carries expected vs actual.
    """

    def __init__(self, label: str, expected: Any, actual: Any, detail: Optional[str] = None) -> None:
        self.label = label
        self.expected = expected
        self.actual = actual
        message = f"{label} verification failed. Expected {expected!r} but got {actual!r}"
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message)


class JourneyNotFoundError(AutomationError, KeyError):
    """No journey is registered under the requested identifier."""

    def __init__(self, journey_id: str, available: Optional[list] = None) -> None:
        self.journey_id = journey_id
        self.available = available or []
        message = f"Journey '{journey_id}' not found"
        if self.available:
            message += f". Available: {', '.join(self.available)}"
        super().__init__(message)

    def __str__(self) -> str:
        # KeyError would otherwise repr() the message
        return self.args[0]


class DiscoveryError(AutomationError):
    """Journey definitions are missing or a journey module registers nothing."""


class RunAlreadyActiveError(AutomationError):
    """A run was requested while another run is still in flight."""

    def __init__(self) -> None:
        super().__init__("Tests already running")

"""
Shared type definitions for Unified Automation.

This module contains core types used across adapters, runners and the
orchestrator to avoid circular dependencies.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional


class Backend(str, Enum):
    """Browser-automation engine a journey runs against."""
    PLAYWRIGHT = "playwright"
    SELENIUM = "selenium"


class DisplayMode(str, Enum):
    """Browser visibility mode."""
    HEADED = "headed"
    HEADLESS = "headless"


class Outcome(str, Enum):
    """Binary journey verdict, derived strictly from the runner exit code."""
    PASSED = "passed"
    FAILED = "failed"

    @classmethod
    def from_exit_code(cls, exit_code: Optional[int]) -> "Outcome":
        return cls.PASSED if exit_code == 0 else cls.FAILED


def utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


# ============================================================================
# Run Request
# ============================================================================


@dataclass
class RunRequest:
    """
    One request to run an ordered list of journeys.

    Usage:
        request = RunRequest(
            journeys=["login", "modal", "login"],
            backend=Backend.SELENIUM,
            mode=DisplayMode.HEADLESS,
            config={"APP_URL": "http://localhost:3002"},
        )
    """

    journeys: List[str]
    """Journey identifiers; order is execution order, duplicates allowed."""

    backend: Backend = Backend.PLAYWRIGHT
    """Engine used for every journey in the run."""

    mode: DisplayMode = DisplayMode.HEADLESS
    """Headed or headless browser."""

    config: Dict[str, str] = field(default_factory=dict)
    """Environment overrides passed to every runner process."""

    keep_browser_open: bool = False
    """Leave the browser open after a single-journey run."""

    def __post_init__(self) -> None:
        """Validate and normalize the request."""
        self.backend = Backend(self.backend)
        self.mode = DisplayMode(self.mode)
        self.journeys = [j.strip() for j in self.journeys]
        # Empty override values mean "not set" and never mask a configured value
        self.config = {key: value for key, value in self.config.items() if value}
        if not self.journeys:
            raise ValueError("A run request needs at least one journey")
        if any(not j for j in self.journeys):
            raise ValueError("Journey identifiers must be non-empty")

    @property
    def headless(self) -> bool:
        return self.mode == DisplayMode.HEADLESS


# ============================================================================
# Results
# ============================================================================


@dataclass
class JourneyResult:
    """Result of one journey runner process."""

    journey: str
    exit_code: Optional[int]
    duration_seconds: float

    @property
    def outcome(self) -> Outcome:
        return Outcome.from_exit_code(self.exit_code)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "journey": self.journey,
            "outcome": self.outcome.value,
            "exit_code": self.exit_code,
            "duration_seconds": round(self.duration_seconds, 2),
        }


@dataclass
class RunSummary:
    """Results of a whole run, in execution order."""

    backend: Backend
    results: List[JourneyResult] = field(default_factory=list)
    stopped: bool = False
    duration_seconds: float = 0.0
    timestamp: str = field(default_factory=utc_timestamp)

    @property
    def passed(self) -> int:
        return sum(1 for r in self.results if r.outcome == Outcome.PASSED)

    @property
    def failed(self) -> int:
        return sum(1 for r in self.results if r.outcome == Outcome.FAILED)

    @property
    def all_passed(self) -> bool:
        """True only for a complete run where every journey passed."""
        return bool(self.results) and not self.stopped and self.failed == 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "backend": self.backend.value,
            "stopped": self.stopped,
            "passed": self.passed,
            "failed": self.failed,
            "duration_seconds": round(self.duration_seconds, 2),
            "timestamp": self.timestamp,
            "results": [r.to_dict() for r in self.results],
        }

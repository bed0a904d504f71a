"""Execution orchestrator: runner processes, live events, single-flight runs."""

from .commands import RUNNER_MODULES, CommandBuilder, build_journey_env, build_runner_command
from .events import (
    EventBroadcaster,
    JourneyError,
    JourneyFinished,
    JourneyLog,
    JourneyStarted,
    RunEvent,
)
from .executor import JourneyExecutor
from .manager import RunManager

__all__ = [
    # Process invocation
    "RUNNER_MODULES",
    "CommandBuilder",
    "build_runner_command",
    "build_journey_env",
    # Events
    "RunEvent",
    "JourneyStarted",
    "JourneyLog",
    "JourneyError",
    "JourneyFinished",
    "EventBroadcaster",
    # Execution
    "JourneyExecutor",
    "RunManager",
]

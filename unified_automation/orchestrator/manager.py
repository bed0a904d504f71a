"""
RunManager: the single-flight boundary in front of JourneyExecutor.

start() returns as soon as the run is scheduled; progress and results are
only observable through the event broadcaster. A second start() while a run is
in flight is rejected rather than queued.
"""
import asyncio
import logging
from typing import Dict, Optional

from unified_automation.errors import RunAlreadyActiveError
from unified_automation.types import RunRequest, RunSummary

from .commands import CommandBuilder, build_runner_command
from .events import EventBroadcaster, JourneyError
from .executor import JourneyExecutor

logger = logging.getLogger(__name__)


class RunManager:
    """Owns at most one executor and its background task."""

    def __init__(
        self,
        broadcaster: Optional[EventBroadcaster] = None,
        base_env: Optional[Dict[str, str]] = None,
        command_builder: CommandBuilder = build_runner_command,
    ) -> None:
        self.broadcaster = broadcaster or EventBroadcaster()
        self.base_env = dict(base_env or {})
        self.command_builder = command_builder
        self.last_summary: Optional[RunSummary] = None

        self._executor: Optional[JourneyExecutor] = None
        self._task: Optional[asyncio.Task] = None
        self._stop_requested = False

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self, request: RunRequest) -> asyncio.Task:
        """
        Schedule a run on the current event loop.

        Raises:
            RunAlreadyActiveError: If a run is in flight
        """
        if self.is_running:
            raise RunAlreadyActiveError()

        executor = JourneyExecutor(
            backend=request.backend,
            mode=request.mode,
            broadcaster=self.broadcaster,
            config={**self.base_env, **request.config},
            keep_browser_open=request.keep_browser_open,
            command_builder=self.command_builder,
        )
        self._executor = executor
        self._stop_requested = False
        self._task = asyncio.create_task(self._run(executor, request))
        return self._task

    async def _run(self, executor: JourneyExecutor, request: RunRequest) -> Optional[RunSummary]:
        try:
            if self._stop_requested:
                logger.info("Run stopped before its first journey")
                summary = RunSummary(backend=executor.backend, stopped=True)
            else:
                summary = await executor.run(request.journeys)
        except Exception as e:
            # Nobody awaits this task; surface the failure to subscribers
            logger.exception("Run crashed")
            self.broadcaster.publish(JourneyError(text=f"Run crashed: {e}"))
            return None
        finally:
            if self._executor is executor:
                self._executor = None
        self.last_summary = summary
        return summary

    def stop(self) -> bool:
        """Stop the active run; False when nothing is running."""
        if not self.is_running or self._executor is None:
            return False
        if not self._executor.is_running:
            # Scheduled but not started yet: no journey will be started
            self._stop_requested = True
            return True
        return self._executor.stop()

    async def wait(self) -> Optional[RunSummary]:
        """Wait for the active run, if any, and return its summary."""
        if self._task is None:
            return None
        return await self._task

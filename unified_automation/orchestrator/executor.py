"""
Journey executor: runs journeys one after another as runner processes.

For each journey in order:

1. publish JourneyStarted
2. spawn the backend's runner process (explicit argv and environment)
3. relay stdout lines as JourneyLog and stderr lines as JourneyError
4. after the process exits and both streams are drained, publish
   JourneyFinished with the verdict derived from the exit code

A failing journey never aborts the list. stop() terminates the active process
and no further journey is started.
"""
import asyncio
import logging
import time
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Type, Union

from unified_automation.errors import RunAlreadyActiveError
from unified_automation.types import Backend, DisplayMode, JourneyResult, RunSummary

from .commands import CommandBuilder, build_journey_env, build_runner_command
from .events import (
    EventBroadcaster,
    JourneyError,
    JourneyFinished,
    JourneyLog,
    JourneyStarted,
    RunEvent,
)

logger = logging.getLogger(__name__)

# Seconds a terminated runner gets to release its browser before SIGKILL
STOP_GRACE_SECONDS = 10.0

# Longest single output line relayed from a runner
STREAM_LINE_LIMIT = 1024 * 1024


class JourneyExecutor:
    """
    Sequential, cancellable executor for one run at a time.

    Usage:
        broadcaster = EventBroadcaster()
        executor = JourneyExecutor(Backend.SELENIUM, DisplayMode.HEADLESS, broadcaster)
        summary = await executor.run(["login", "modal"])
    """

    def __init__(
        self,
        backend: Backend,
        mode: DisplayMode,
        broadcaster: Optional[EventBroadcaster] = None,
        config: Optional[Dict[str, str]] = None,
        keep_browser_open: bool = False,
        command_builder: CommandBuilder = build_runner_command,
        working_dir: Optional[Union[str, Path]] = None,
        stop_grace_seconds: float = STOP_GRACE_SECONDS,
    ) -> None:
        self.backend = Backend(backend)
        self.mode = DisplayMode(mode)
        self.broadcaster = broadcaster or EventBroadcaster()
        self.config = dict(config or {})
        self.keep_browser_open = keep_browser_open
        self.command_builder = command_builder
        self.working_dir = str(working_dir) if working_dir else None
        self.stop_grace_seconds = stop_grace_seconds

        self._running = False
        self._stopped = False
        self._process: Optional[asyncio.subprocess.Process] = None

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def stopped(self) -> bool:
        return self._stopped

    async def run(self, journeys: Sequence[str]) -> RunSummary:
        """
        Run journeys in order.

        Raises:
            RunAlreadyActiveError: If this executor is already running
            ValueError: If journeys is empty
        """
        if self._running:
            raise RunAlreadyActiveError()
        if not journeys:
            raise ValueError("A run needs at least one journey")

        self._running = True
        self._stopped = False
        summary = RunSummary(backend=self.backend)
        start = time.monotonic()
        logger.info(f"Starting run of {len(journeys)} journeys with {self.backend.value} ({self.mode.value})")

        try:
            for journey in journeys:
                if self._stopped:
                    break
                summary.results.append(await self._run_single(journey, len(journeys)))
        finally:
            self._running = False
            self._process = None
            summary.stopped = self._stopped
            summary.duration_seconds = time.monotonic() - start

        logger.info(
            f"Run finished: {summary.passed} passed, {summary.failed} failed"
            + (" (stopped)" if summary.stopped else "")
        )
        return summary

    def stop(self) -> bool:
        """
        Terminate the active runner process and end the run.

        Returns:
            False if no run is active
        """
        if not self._running:
            return False

        self._stopped = True
        process = self._process
        if process is not None and process.returncode is None:
            logger.info(f"Stopping runner process {process.pid}")
            self._terminate(process)
        return True

    def _terminate(self, process: asyncio.subprocess.Process) -> None:
        try:
            process.terminate()
        except ProcessLookupError:
            logger.debug(f"Runner process {process.pid} already exited")
            return
        loop = asyncio.get_running_loop()
        loop.call_later(self.stop_grace_seconds, self._kill_if_alive, process)

    @staticmethod
    def _kill_if_alive(process: asyncio.subprocess.Process) -> None:
        if process.returncode is not None:
            return
        logger.warning(f"Runner process {process.pid} ignored SIGTERM, killing")
        try:
            process.kill()
        except ProcessLookupError:
            logger.debug(f"Runner process {process.pid} already exited")

    def _publish(self, event: RunEvent) -> None:
        self.broadcaster.publish(event)

    @staticmethod
    async def _read_line(stream: asyncio.StreamReader) -> bytes:
        try:
            return await stream.readuntil(b"\n")
        except asyncio.IncompleteReadError as e:
            # EOF: whatever followed the last newline
            return e.partial
        except asyncio.LimitOverrunError as e:
            # No newline within STREAM_LINE_LIMIT: relay the buffered part as one line
            return await stream.read(e.consumed)

    async def _pump(self, stream: Optional[asyncio.StreamReader], event_type: Type[RunEvent]) -> None:
        """
        Relay each line of a stream as an event.

        Blank and whitespace-only lines are not relayed. A line longer than
        STREAM_LINE_LIMIT is relayed in several chunks.
        """
        if stream is None:
            return
        while True:
            line = await self._read_line(stream)
            if not line:
                break
            text = line.decode("utf-8", errors="replace").rstrip("\r\n")
            if text.strip():
                self._publish(event_type(text=text))

    async def _run_single(self, journey: str, total_journeys: int) -> JourneyResult:
        started = time.monotonic()
        self._publish(JourneyStarted(journey=journey, backend=self.backend.value))

        argv = self.command_builder(self.backend, journey)
        env = build_journey_env(
            self.backend,
            self.mode,
            total_journeys,
            keep_browser_open=self.keep_browser_open,
            overrides=self.config,
        )
        logger.debug(f"Spawning runner: {argv}")

        exit_code: Optional[int] = None
        try:
            exit_code = await self._spawn_and_relay(journey, argv, env)
        finally:
            # Every started journey gets exactly one finished event
            result = JourneyResult(journey=journey, exit_code=exit_code, duration_seconds=time.monotonic() - started)
            self._publish(JourneyFinished(
                journey=journey,
                outcome=result.outcome,
                duration_seconds=result.duration_seconds,
                exit_code=exit_code,
            ))
        return result

    async def _spawn_and_relay(self, journey: str, argv: List[str], env: Dict[str, str]) -> Optional[int]:
        """Run one runner process to completion; None when it never ran or its output was lost."""
        try:
            process = await asyncio.create_subprocess_exec(
                *argv,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                env=env,
                cwd=self.working_dir,
                limit=STREAM_LINE_LIMIT,
            )
        except OSError as e:
            logger.error(f"Failed to start runner for '{journey}': {e}")
            self._publish(JourneyError(text=f"Failed to start runner: {e}"))
            return None

        self._process = process
        # stop() may have arrived while the process was being spawned
        if self._stopped:
            self._terminate(process)

        exit_code: Optional[int] = None
        try:
            await asyncio.gather(
                self._pump(process.stdout, JourneyLog),
                self._pump(process.stderr, JourneyError),
            )
            exit_code = await process.wait()
        except Exception as e:
            logger.exception(f"Lost output of runner for '{journey}'")
            self._publish(JourneyError(text=f"Runner output failed: {e}"))
        finally:
            if process.returncode is None:
                process.kill()
                await process.wait()
            self._process = None

        logger.debug(f"Runner for '{journey}' exited with {process.returncode}")
        return exit_code

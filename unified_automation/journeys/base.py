"""
BaseJourney defines the fixed lifecycle of an automation journey.

    setup()   -> navigate to the application URL, start the clock
    execute() -> author-defined steps; failure is signalled only by raising
    finish()  -> log and store the execution time

run() drives the three steps in order. An exception from setup() or
execute() propagates unmodified and finish() is not reached. A journey
instance owns its adapter for one run; create a new instance per run.
"""
import logging
import time
from abc import ABC, abstractmethod
from typing import Optional

from unified_automation.adapters.base import UnifiedAdapter
from unified_automation.config import AutomationSettings

logger = logging.getLogger(__name__)


class BaseJourney(ABC):
    """Base class for all automation journeys."""

    #: Registry identifier, assigned by @register_journey
    journey_id: str = ""
    #: Display name, assigned by @register_journey
    journey_name: str = ""

    def __init__(self, adapter: UnifiedAdapter, settings: Optional[AutomationSettings] = None) -> None:
        self.adapter = adapter
        self.settings = settings or AutomationSettings.from_env()
        self._start_time: Optional[float] = None
        self.duration_seconds: Optional[float] = None

    async def setup(self) -> None:
        """Start timing and open the application under test."""
        self._start_time = time.monotonic()
        await self.adapter.navigate(self.settings.app_url)

    @abstractmethod
    async def execute(self) -> None:
        """Journey steps. Raise to fail the journey."""

    async def finish(self) -> None:
        started = self._start_time if self._start_time is not None else time.monotonic()
        self.duration_seconds = time.monotonic() - started
        logger.info("Journey execution time: %.2f seconds", self.duration_seconds)

    async def run(self) -> None:
        await self.setup()
        await self.execute()
        await self.finish()

"""
Journey runner process.

One process runs exactly one journey against one backend:

    python -m unified_automation.runners.playwright_runner <journey-id>
    python -m unified_automation.runners.selenium_runner <journey-id>

Configuration comes only from environment variables (see
AutomationSettings.from_env). Logs go to stdout and failures to stderr, so the
orchestrator can relay them as log and error events.

Exit codes:
    0 - journey passed
    1 - journey failed (setup/execute raised, browser failed to launch)
    2 - usage error, unknown journey or broken journey module
    143 - terminated by SIGTERM
"""
import asyncio
import logging
import os
import signal
import sys
from typing import Optional

import click

from unified_automation.browser import create_session
from unified_automation.config import AutomationSettings
from unified_automation.errors import DiscoveryError, JourneyNotFoundError
from unified_automation.journeys import load_journey
from unified_automation.types import Backend

logger = logging.getLogger(__name__)

EXIT_SUCCESS = 0
EXIT_FAILURE = 1
EXIT_USAGE = 2
EXIT_TERMINATED = 128 + signal.SIGTERM

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging() -> None:
    """Log to stdout at LOG_LEVEL (default INFO)."""
    level_name = os.environ.get("LOG_LEVEL", "INFO").upper()
    level = getattr(logging, level_name, logging.INFO)
    if not isinstance(level, int):
        level = logging.INFO
    logging.basicConfig(stream=sys.stdout, level=level, format=LOG_FORMAT, force=True)


async def run_journey(
    journey_id: str,
    backend: Backend,
    settings: Optional[AutomationSettings] = None,
) -> int:
    """
    Load a journey, open a browser session and run the journey lifecycle.

    Returns:
        Process exit code
    """
    settings = settings or AutomationSettings.from_env()

    try:
        journey_class = load_journey(journey_id, settings.journeys_package)
    except (JourneyNotFoundError, DiscoveryError) as e:
        click.echo(f"Error: {e}", err=True)
        return EXIT_USAGE

    logger.info(f"Running journey '{journey_id}' with {backend.value} (headless={settings.headless})")

    try:
        async with create_session(backend, settings) as adapter:
            journey = journey_class(adapter, settings)
            await journey.run()
    except asyncio.CancelledError:
        click.echo("Journey failed: terminated", err=True)
        return EXIT_TERMINATED
    except Exception as e:
        logger.debug("Journey traceback", exc_info=True)
        click.echo(f"Journey failed: {e}", err=True)
        return EXIT_FAILURE

    logger.info(f"Journey '{journey_id}' passed")
    return EXIT_SUCCESS


async def _main(journey_id: str, backend: Backend) -> int:
    # SIGTERM cancels the journey so the browser session is still released
    task = asyncio.current_task()
    loop = asyncio.get_running_loop()
    try:
        loop.add_signal_handler(signal.SIGTERM, task.cancel)
    except NotImplementedError:
        logger.debug("SIGTERM handler not supported on this platform")
    return await run_journey(journey_id, backend)


def make_runner(backend: Backend) -> click.Command:
    """Build the console entry point of one backend's runner."""

    @click.command(name=f"ua-{backend.value}-runner")
    @click.argument("journey_id")
    def main(journey_id: str) -> None:
        journey_id = journey_id.strip()
        if not journey_id:
            raise click.UsageError("JOURNEY_ID must be non-empty")
        configure_logging()
        sys.exit(asyncio.run(_main(journey_id, backend)))

    main.help = f"Run one journey with the {backend.value} backend."
    return main

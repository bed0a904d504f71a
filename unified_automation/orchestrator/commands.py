"""
Command and environment building for journey runner processes.

Runners are always started with an explicit argv (never through a shell) and
an explicit environment map computed fresh for each journey.
"""
import os
import sys
from typing import Callable, Dict, List, Mapping, Optional

from unified_automation.types import Backend, DisplayMode

RUNNER_MODULES: Dict[Backend, str] = {
    Backend.PLAYWRIGHT: "unified_automation.runners.playwright_runner",
    Backend.SELENIUM: "unified_automation.runners.selenium_runner",
}

#: (backend, journey_id) -> argv
CommandBuilder = Callable[[Backend, str], List[str]]


def build_runner_command(backend: Backend, journey_id: str) -> List[str]:
    """
    Build the argv that runs one journey in a fresh interpreter.

    Args:
        backend: Engine the runner drives
        journey_id: Journey identifier, passed as the only runner argument

    Returns:
        [python, "-m", <runner module>, journey_id]
    """
    return [sys.executable, "-m", RUNNER_MODULES[Backend(backend)], journey_id]


def build_journey_env(
    backend: Backend,
    mode: DisplayMode,
    total_journeys: int,
    keep_browser_open: bool = False,
    overrides: Optional[Mapping[str, str]] = None,
    base_env: Optional[Mapping[str, str]] = None,
) -> Dict[str, str]:
    """
    Environment for one runner process.

    The browser is only left open when the caller asked for it and the run
    holds exactly one journey. Empty override values are ignored so that
    blank form fields never clobber inherited settings.
    """
    env = dict(os.environ if base_env is None else base_env)
    # Runner stdout is a pipe; keep it line-buffered for live streaming
    env["PYTHONUNBUFFERED"] = "1"
    env["HEADLESS"] = "true" if DisplayMode(mode) == DisplayMode.HEADLESS else "false"
    env["CLOSE_BROWSER"] = "false" if keep_browser_open and total_journeys == 1 else "true"
    env["AUTOMATION_BACKEND"] = Backend(backend).value

    for key, value in (overrides or {}).items():
        if value:
            env[str(key)] = str(value)

    return env

"""Pytest configuration and fixtures for unified-automation tests."""

import importlib
import sys
import textwrap
import uuid
from pathlib import Path
from typing import Any, Dict, List, Optional

import pytest

from unified_automation.adapters.base import ELEMENT_TIMEOUT_MS, UnifiedAdapter
from unified_automation.config import AutomationSettings
from unified_automation.errors import ElementTimeoutError
from unified_automation.journeys import unregister_journey

# Stand-in runner: behavior is chosen by the journey id prefix
#   ok_*   - log a line, exit 0
#   fail_* - log, write a failure to stderr, exit 1
#   slow_* - log, then sleep until terminated
#   env_*  - print selected environment variables, exit 0
#   big_*  - write 2 MiB with no newline, exit 0
#   blank_* - write blank and whitespace-only lines around one real line, exit 0
FAKE_RUNNER_SCRIPT = textwrap.dedent("""
    import os
    import sys
    import time

    journey = sys.argv[1]
    print(f"running {journey}", flush=True)
    if journey.startswith("fail"):
        print(f"Journey failed: {journey} broke", file=sys.stderr, flush=True)
        sys.exit(1)
    if journey.startswith("slow"):
        time.sleep(60)
    if journey.startswith("env"):
        for key in ("HEADLESS", "CLOSE_BROWSER", "AUTOMATION_BACKEND", "APP_URL", "CUSTOM_FLAG"):
            print(f"{key}={os.environ.get(key, '')}", flush=True)
    if journey.startswith("big"):
        sys.stdout.write("x" * (2 * 1024 * 1024))
        sys.stdout.flush()
    if journey.startswith("blank"):
        print("", flush=True)
        print("   \t", flush=True)
        print("done", flush=True)
        print("", flush=True)
""")


def fake_runner_command(backend, journey_id: str) -> List[str]:
    """Command builder that runs FAKE_RUNNER_SCRIPT instead of a browser."""
    return [sys.executable, "-c", FAKE_RUNNER_SCRIPT, journey_id]


class FakeAdapter(UnifiedAdapter):
    """
    In-memory adapter recording every call.

    elements maps a selector to a dict with optional keys: text, value,
    visible, disabled, attrs. Selectors in `missing` time out on waits.
    """

    name = "fake"

    def __init__(self, elements: Optional[Dict[str, Dict[str, Any]]] = None) -> None:
        self.elements: Dict[str, Dict[str, Any]] = elements or {}
        self.missing: set = set()
        self.calls: List[tuple] = []
        self.url = "about:blank"
        self.counts: Dict[str, int] = {}

    def _record(self, *call: Any) -> None:
        self.calls.append(call)

    def _wait(self, selector: str, condition: str) -> None:
        if selector in self.missing:
            raise ElementTimeoutError(selector, condition, ELEMENT_TIMEOUT_MS)

    async def navigate(self, url: str) -> None:
        self._record("navigate", url)
        self.url = url

    async def click(self, selector: str) -> None:
        self._record("click", selector)
        self._wait(selector, "clickable")

    async def _scroll_into_view_and_click(self, selector: str) -> None:
        self._record("scroll_click", selector)

    async def fill(self, selector: str, value: str) -> None:
        self._record("fill", selector, value)
        self._wait(selector, "visible")
        self.elements.setdefault(selector, {})["value"] = value

    async def wait_for_selector(self, selector: str) -> None:
        self._record("wait_for_selector", selector)
        self._wait(selector, "visible")

    async def wait_for_hidden(self, selector: str) -> None:
        self._record("wait_for_hidden", selector)
        self._wait(selector, "hidden")

    async def is_visible(self, selector: str) -> bool:
        return bool(self.elements.get(selector, {}).get("visible", False))

    async def is_disabled(self, selector: str) -> bool:
        return bool(self.elements.get(selector, {}).get("disabled", False))

    async def get_text(self, selector: str) -> str:
        return self.elements.get(selector, {}).get("text", "")

    async def get_input_value(self, selector: str) -> str:
        return self.elements.get(selector, {}).get("value", "")

    async def get_attribute(self, selector: str, name: str) -> Optional[str]:
        return self.elements.get(selector, {}).get("attrs", {}).get(name)

    async def count_elements(self, selector: str) -> int:
        return self.counts.get(selector, 0)

    async def click_and_wait_for_navigation(self, selector: str) -> None:
        self._record("click_and_wait_for_navigation", selector)

    async def evaluate(self, script: str, *args: Any) -> Any:
        self._record("evaluate", script, args)
        return None

    async def read_clipboard(self) -> str:
        return ""

    async def get_current_url(self) -> str:
        return self.url

    async def wait_for_timeout(self, ms: int) -> None:
        self._record("wait_for_timeout", ms)


@pytest.fixture
def fake_adapter():
    """Empty FakeAdapter."""
    return FakeAdapter()


@pytest.fixture
def settings(tmp_path: Path):
    """Settings pointing at a throwaway profile directory."""
    return AutomationSettings(
        app_url="http://localhost:3002",
        headless=True,
        user_data_dir=str(tmp_path / "profile"),
    )


@pytest.fixture
def journey_package(tmp_path: Path, monkeypatch):
    """
    Factory for an importable, uniquely named journeys package.

    Usage:
        package = journey_package({"demo_journey.py": "..."})

    Registered journeys and imported modules are cleaned up afterwards.
    """
    created: List[str] = []
    registered: List[str] = []
    monkeypatch.syspath_prepend(str(tmp_path))

    def factory(files: Dict[str, str], journey_ids: Optional[List[str]] = None) -> str:
        name = f"journeys_{uuid.uuid4().hex[:8]}"
        package_dir = tmp_path / name
        package_dir.mkdir()
        (package_dir / "__init__.py").write_text("")
        for filename, source in files.items():
            (package_dir / filename).write_text(textwrap.dedent(source))
        created.append(name)
        importlib.invalidate_caches()
        registered.extend(journey_ids or [])
        return name

    yield factory

    for journey_id in registered:
        unregister_journey(journey_id)
    for name in created:
        for module in [m for m in sys.modules if m == name or m.startswith(f"{name}.")]:
            del sys.modules[module]


@pytest.fixture
def runner_command():
    """Command builder spawning the stand-in runner script."""
    return fake_runner_command


@pytest.fixture
def adapter_factory():
    """The FakeAdapter class, for tests that need preloaded elements."""
    return FakeAdapter

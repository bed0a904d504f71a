"""
Journey discovery.

A journey lives in a module named <id>_journey.py inside the journeys package
(DEFAULT_JOURNEYS_PACKAGE unless overridden). Importing the module must
register the journey under <id> through @register_journey.
"""
import importlib
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Type

from unified_automation.config import DEFAULT_JOURNEYS_PACKAGE
from unified_automation.errors import DiscoveryError, JourneyNotFoundError

from .base import BaseJourney
from .registry import get_journey, is_registered, journey_display_name

logger = logging.getLogger(__name__)

JOURNEY_SUFFIX = "_journey.py"


@dataclass(frozen=True)
class JourneyInfo:
    """A discovered journey."""

    id: str
    name: str
    path: str

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "name": self.name, "path": self.path}


def _package_dir(package: str) -> Path:
    try:
        module = importlib.import_module(package)
    except ImportError as e:
        raise DiscoveryError(f"Journeys package '{package}' cannot be imported: {e}") from e
    paths = list(getattr(module, "__path__", []))
    if not paths:
        raise DiscoveryError(f"'{package}' is a module, not a package")
    return Path(paths[0])


def load_journey(journey_id: str, package: str = DEFAULT_JOURNEYS_PACKAGE) -> Type[BaseJourney]:
    """
    Import <package>.<journey_id>_journey and return the class it registered.

    Raises:
        JourneyNotFoundError: If no such module exists
        DiscoveryError: If the module fails to import, or registers no journey
            under journey_id
    """
    module_name = f"{package}.{journey_id}{JOURNEY_SUFFIX[:-3]}"
    try:
        importlib.import_module(module_name)
    except ModuleNotFoundError as e:
        if e.name != module_name:
            raise DiscoveryError(f"Journey module '{module_name}' failed to import: {e}") from e
        available = [info.id for info in discover_journeys(package, require=False)]
        raise JourneyNotFoundError(journey_id, available) from e
    except Exception as e:
        # SyntaxError, NameError and anything else raised at import time
        raise DiscoveryError(
            f"Journey module '{module_name}' failed to import: {type(e).__name__}: {e}"
        ) from e

    if not is_registered(journey_id):
        raise DiscoveryError(
            f"Module '{module_name}' does not register a journey named '{journey_id}'"
        )
    return get_journey(journey_id)


def discover_journeys(package: str = DEFAULT_JOURNEYS_PACKAGE, require: bool = True) -> List[JourneyInfo]:
    """
    Scan a journeys package for *_journey.py modules.

    Args:
        package: Dotted name of the journeys package
        require: Raise DiscoveryError when nothing is found

    Returns:
        JourneyInfo list sorted by identifier
    """
    journeys_dir = _package_dir(package)
    journeys: List[JourneyInfo] = []

    for path in sorted(journeys_dir.glob(f"*{JOURNEY_SUFFIX}")):
        journey_id = path.name[: -len(JOURNEY_SUFFIX)]
        if not journey_id:
            continue
        journey_class = load_journey(journey_id, package)
        journeys.append(JourneyInfo(
            id=journey_id,
            name=journey_class.journey_name or journey_display_name(journey_id),
            path=str(path),
        ))

    logger.debug(f"Discovered {len(journeys)} journeys in {journeys_dir}")

    if require and not journeys:
        raise DiscoveryError(f"No journeys found in {journeys_dir}")
    return journeys

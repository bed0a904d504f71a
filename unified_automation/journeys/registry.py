"""Journey registry: identifier -> journey class."""

import re
from typing import Callable, Dict, List, Optional, Type, TypeVar

from unified_automation.errors import JourneyNotFoundError

from .base import BaseJourney

J = TypeVar("J", bound=Type[BaseJourney])

_JOURNEYS: Dict[str, Type[BaseJourney]] = {}


def journey_display_name(journey_id: str) -> str:
    """'checkout_flow' -> 'Checkout Flow'."""
    return " ".join(part.capitalize() for part in re.split(r"[_-]+", journey_id) if part)


def register_journey(journey_id: str, name: Optional[str] = None) -> Callable[[J], J]:
    """
    Class decorator registering a journey under an identifier.

    Usage:
        @register_journey("login")
        class LoginJourney(BaseJourney):
            async def execute(self) -> None:
                ...

    Raises:
        ValueError: If the identifier is empty or already bound to another class
    """
    if not journey_id:
        raise ValueError("Journey identifier must be non-empty")

    def decorator(journey_class: J) -> J:
        if not issubclass(journey_class, BaseJourney):
            raise ValueError(f"{journey_class.__name__} must subclass BaseJourney")
        existing = _JOURNEYS.get(journey_id)
        # Re-importing the same module re-registers the same qualified class
        if existing is not None and (
            existing.__module__, existing.__qualname__
        ) != (journey_class.__module__, journey_class.__qualname__):
            raise ValueError(
                f"Journey '{journey_id}' already registered by {existing.__qualname__}"
            )
        journey_class.journey_id = journey_id
        journey_class.journey_name = name or journey_display_name(journey_id)
        _JOURNEYS[journey_id] = journey_class
        return journey_class

    return decorator


def get_journey(journey_id: str) -> Type[BaseJourney]:
    if journey_id not in _JOURNEYS:
        raise JourneyNotFoundError(journey_id, list_journeys())
    return _JOURNEYS[journey_id]


def list_journeys() -> List[str]:
    return sorted(_JOURNEYS)


def is_registered(journey_id: str) -> bool:
    return journey_id in _JOURNEYS


def unregister_journey(journey_id: str) -> None:
    """Remove a registration (used by tests that define throwaway journeys)."""
    _JOURNEYS.pop(journey_id, None)

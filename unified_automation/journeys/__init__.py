"""Journeys: BaseJourney lifecycle, registry and discovery.

Built-in journeys live in this package as *_journey.py modules and are
imported lazily by discovery, never from here.
"""

from .base import BaseJourney
from .discovery import JOURNEY_SUFFIX, JourneyInfo, discover_journeys, load_journey
from .registry import (
    get_journey,
    is_registered,
    journey_display_name,
    list_journeys,
    register_journey,
    unregister_journey,
)

__all__ = [
    "BaseJourney",
    "JOURNEY_SUFFIX",
    "JourneyInfo",
    "discover_journeys",
    "load_journey",
    "register_journey",
    "get_journey",
    "list_journeys",
    "is_registered",
    "journey_display_name",
    "unregister_journey",
]

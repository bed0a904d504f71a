"""Per-backend journey runner processes."""

from .journey_runner import (
    EXIT_FAILURE,
    EXIT_SUCCESS,
    EXIT_TERMINATED,
    EXIT_USAGE,
    configure_logging,
    make_runner,
    run_journey,
)

__all__ = [
    "EXIT_SUCCESS",
    "EXIT_FAILURE",
    "EXIT_USAGE",
    "EXIT_TERMINATED",
    "configure_logging",
    "make_runner",
    "run_journey",
]

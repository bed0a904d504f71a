"""Polling utilities for UI state that settles asynchronously.

Instead of arbitrary sleeps, poll the actual value until a condition holds or
the timeout elapses.
"""

import asyncio
import logging
import math
from typing import Awaitable, Callable, Optional, TypeVar

T = TypeVar("T")

logger = logging.getLogger(__name__)


class WaitConfig:
    """Configuration for polling behavior."""

    def __init__(
        self,
        timeout_ms: int = 5000,
        interval_ms: int = 250,
        error_message: str = "Condition not met within timeout",
    ):
        """Initialize polling configuration.

        Args:
            timeout_ms: Maximum time to wait in milliseconds (default: 5000)
            interval_ms: Time between polling attempts in milliseconds (default: 250)
            error_message: Message of the TimeoutError raised on expiry
        """
        if interval_ms <= 0:
            raise ValueError("interval_ms must be positive")
        self.timeout_ms = timeout_ms
        self.interval_ms = interval_ms
        self.error_message = error_message

    @property
    def max_attempts(self) -> int:
        return max(1, math.ceil(self.timeout_ms / self.interval_ms))


async def wait_for_condition(
    get_value: Callable[[], Awaitable[T]],
    condition: Callable[[T], bool],
    timeout_ms: int = 5000,
    interval_ms: int = 250,
    error_message: str = "Condition not met within timeout",
    logger_instance: Optional[logging.Logger] = None,
) -> T:
    """Poll get_value() until condition(value) is true.

    Args:
        get_value: Coroutine function returning the current value
        condition: Predicate that returns True when the value is acceptable
        timeout_ms: Maximum time to wait in milliseconds (default: 5000)
        interval_ms: Time between attempts in milliseconds (default: 250)
        error_message: Message for the TimeoutError raised on expiry
        logger_instance: Optional logger for polling progress

    Returns:
        The first value satisfying the condition

    Raises:
        TimeoutError: If the condition never holds, including one final check

    Example:
        text = await wait_for_condition(
            lambda: adapter.get_text("#status"),
            lambda value: "done" in value,
            timeout_ms=3000,
        )
    """
    config = WaitConfig(timeout_ms=timeout_ms, interval_ms=interval_ms, error_message=error_message)
    log = logger_instance or logger

    for attempt in range(config.max_attempts):
        value = await get_value()
        if condition(value):
            return value
        log.debug(f"Condition not met (attempt {attempt + 1}/{config.max_attempts}): {value!r}")
        await asyncio.sleep(config.interval_ms / 1000)

    final_value = await get_value()
    if condition(final_value):
        return final_value

    raise TimeoutError(config.error_message)

"""
Run events and their fan-out to live subscribers.

Every journey produces, in order: one JourneyStarted, any number of JourneyLog
(runner stdout) and JourneyError (runner stderr) lines in emission order, then
one JourneyFinished. Events are ephemeral: a subscriber only sees what is
published after it subscribed, and nothing is stored for replay.
"""
import asyncio
import logging
from dataclasses import asdict, dataclass, field
from typing import Any, ClassVar, Dict, List, Optional

from unified_automation.types import Outcome, utc_timestamp

logger = logging.getLogger(__name__)

DEFAULT_QUEUE_SIZE = 1000


class RunEvent:
    """Base class for events; subclasses are dataclasses."""

    type: ClassVar[str] = "event"

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)  # type: ignore[call-overload]
        return {"type": self.type, **data}


@dataclass
class JourneyStarted(RunEvent):
    type: ClassVar[str] = "started"

    journey: str
    backend: str
    timestamp: str = field(default_factory=utc_timestamp)


@dataclass
class JourneyLog(RunEvent):
    """One line of runner stdout."""

    type: ClassVar[str] = "log"

    text: str
    timestamp: str = field(default_factory=utc_timestamp)


@dataclass
class JourneyError(RunEvent):
    """One line of runner stderr."""

    type: ClassVar[str] = "error"

    text: str
    timestamp: str = field(default_factory=utc_timestamp)


@dataclass
class JourneyFinished(RunEvent):
    type: ClassVar[str] = "finished"

    journey: str
    outcome: Outcome
    duration_seconds: float
    exit_code: Optional[int] = None
    timestamp: str = field(default_factory=utc_timestamp)

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["outcome"] = self.outcome.value
        data["duration_seconds"] = round(self.duration_seconds, 2)
        return data


class EventBroadcaster:
    """
    Fan-out of run events to subscriber queues.

    publish() never blocks and never fails: a full subscriber queue loses that
    event (with a warning) and publishing with no subscribers is a no-op.
    """

    def __init__(self) -> None:
        self._subscribers: List[asyncio.Queue] = []

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def subscribe(self, maxsize: int = DEFAULT_QUEUE_SIZE) -> asyncio.Queue:
        queue: asyncio.Queue = asyncio.Queue(maxsize=maxsize)
        self._subscribers.append(queue)
        return queue

    def unsubscribe(self, queue: asyncio.Queue) -> None:
        if queue in self._subscribers:
            self._subscribers.remove(queue)

    def publish(self, event: RunEvent) -> int:
        """
        Deliver an event to every current subscriber.

        Returns:
            Number of subscribers the event was queued for
        """
        delivered = 0
        for queue in list(self._subscribers):
            try:
                queue.put_nowait(event)
            except asyncio.QueueFull:
                logger.warning(f"Subscriber queue full, dropping {event.type} event")
                continue
            delivered += 1
        return delivered

"""
Event Streaming - In-memory pub/sub for reconciliation events.

Every reconciliation cycle publishes what it did per instance; the status
API streams these as Server-Sent Events.
"""

import asyncio
import json
import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, AsyncIterator, Dict, FrozenSet, Iterable, Optional, Tuple

logger = logging.getLogger(__name__)


def _json_default(obj: Any) -> str:
    """JSON serializer for objects not handled by default json encoder."""
    if isinstance(obj, datetime):
        return obj.isoformat()
    raise TypeError(f"Object of type {type(obj).__name__} is not JSON serializable")


class EventType(Enum):
    """Types of reconciliation events."""

    RECONCILING = "RECONCILING"
    SYNCED = "SYNCED"
    IN_SYNC = "IN_SYNC"
    PARTIALLY_APPLIED = "PARTIALLY_APPLIED"
    FAILED = "FAILED"
    DRIFT = "DRIFT"


@dataclass
class ReconcileEvent:
    """Event emitted for one instance during a reconciliation cycle."""

    event_type: EventType
    instance: str
    app: str
    message: str = ""
    data: Dict[str, Any] = field(default_factory=dict)
    timestamp: str = ""

    def __post_init__(self):
        if not self.timestamp:
            self.timestamp = datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")

    def to_sse(self) -> str:
        """
        Format the event as an SSE message.

        Returns:
            SSE-formatted string with event type and JSON data lines.
        """
        data = {
            "event_type": self.event_type.value,
            "instance": self.instance,
            "app": self.app,
            "message": self.message,
            "data": self.data,
            "timestamp": self.timestamp,
        }
        json_data = json.dumps(data, default=_json_default)
        return f"event: {self.event_type.value}\ndata: {json_data}\n\n"


class EventSubscription:
    """
    One consumer of the event stream, usually an SSE client.

    ``instance`` and ``event_types`` narrow what is delivered; the bus
    checks them before queueing, so a stream watching one instance is
    not crowded out by the others. Iteration ends on ``close``.
    """

    def __init__(
        self,
        subscriber_id: str,
        queue_size: int,
        instance: Optional[str] = None,
        event_types: Optional[Iterable[EventType]] = None,
    ):
        self.id = subscriber_id
        self.instance = instance
        self.event_types: Optional[FrozenSet[EventType]] = (
            frozenset(event_types) if event_types else None
        )
        self._queue: asyncio.Queue = asyncio.Queue(maxsize=queue_size)

    def matches(self, event: ReconcileEvent) -> bool:
        if self.instance is not None and event.instance != self.instance:
            return False
        return self.event_types is None or event.event_type in self.event_types

    def deliver(self, event: ReconcileEvent) -> bool:
        """Queue ``event``; False when this consumer is too far behind."""
        try:
            self._queue.put_nowait(event)
        except asyncio.QueueFull:
            return False
        return True

    def close(self) -> None:
        try:
            self._queue.put_nowait(None)
        except asyncio.QueueFull:
            # Drain one stale event so the end marker fits
            self._queue.get_nowait()
            self._queue.put_nowait(None)

    def __aiter__(self) -> AsyncIterator[ReconcileEvent]:
        return self

    async def __anext__(self) -> ReconcileEvent:
        event = await self._queue.get()
        if event is None:
            raise StopAsyncIteration
        return event


class EventBus:
    """
    Fan-out of reconcile events to every open subscription.

    Publishing never waits on a consumer. A subscription whose queue is
    full misses that event (logged); a later cycle publishes fresh status
    for the same instance anyway.
    """

    def __init__(self, queue_size: int = 256):
        self._queue_size = queue_size
        self._subscriptions: Dict[str, EventSubscription] = {}
        self._lock = asyncio.Lock()

    async def publish(self, event: ReconcileEvent) -> None:
        async with self._lock:
            subscriptions = list(self._subscriptions.values())

        for subscription in subscriptions:
            if subscription.matches(event) and not subscription.deliver(event):
                logger.warning(
                    f"Event stream {subscription.id} is behind, dropped "
                    f"{event.event_type.value} for {event.instance}"
                )

    async def subscribe(
        self,
        instance: Optional[str] = None,
        event_types: Optional[Iterable[EventType]] = None,
    ) -> Tuple[str, EventSubscription]:
        """
        Open a subscription.

        Args:
            instance: Only deliver events for this instance
            event_types: Only deliver these event types

        Returns:
            ``(subscriber_id, subscription)``
        """
        subscription = EventSubscription(
            str(uuid.uuid4()), self._queue_size, instance=instance, event_types=event_types
        )
        async with self._lock:
            self._subscriptions[subscription.id] = subscription

        logger.info(f"Event stream {subscription.id} opened (instance={instance or 'all'})")
        return subscription.id, subscription

    async def unsubscribe(self, subscriber_id: str) -> None:
        async with self._lock:
            subscription = self._subscriptions.pop(subscriber_id, None)

        if subscription is not None:
            subscription.close()
            logger.info(f"Event stream {subscriber_id} closed")

    def subscriber_count(self) -> int:
        return len(self._subscriptions)

from __future__ import annotations

import logging
import queue
import threading
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Iterator, Optional, Protocol

from ..common.datetime_utils import now_local
from ..core.constants import DEFAULT_EVENT_QUEUE_SIZE
from ..core.enums import EventName

logger = logging.getLogger(__name__)


def channel_for_session(session_id: int) -> str:
    return str(int(session_id))


@dataclass(frozen=True)
class Event:
    channel_id: str
    name: EventName
    payload: dict
    published_at: datetime = field(default_factory=now_local)


Observer = Callable[[Event], None]


class Subscription:
    """One observer attached to one channel.

    Without a callback, events are buffered in a bounded queue and read through
    ``stream()``. Closing detaches the observer; nothing is replayed afterwards.
    """

    def __init__(
        self,
        broadcaster: "InMemoryEventBroadcaster",
        channel_id: str,
        observer: Optional[Observer] = None,
        *,
        max_queue: int = DEFAULT_EVENT_QUEUE_SIZE,
    ):
        self._broadcaster = broadcaster
        self.channel_id = channel_id
        self._observer = observer
        self._queue: "queue.Queue[Event]" = queue.Queue(maxsize=max_queue)
        self.closed = False

    def deliver(self, event: Event) -> bool:
        if self._observer is not None:
            self._observer(event)
            return True
        try:
            self._queue.put_nowait(event)
            return True
        except queue.Full:
            logger.warning("Subscriber queue full on channel %s; dropping %s", self.channel_id, event.name.value)
            return False

    def get(self, timeout: Optional[float] = None) -> Optional[Event]:
        try:
            return self._queue.get(timeout=timeout)
        except queue.Empty:
            return None

    def stream(self, timeout: Optional[float] = None) -> Iterator[Optional[Event]]:
        """Yield buffered events until closed; yields None when ``timeout`` elapses idle."""
        while not self.closed:
            yield self.get(timeout=timeout)

    def close(self) -> None:
        if not self.closed:
            self.closed = True
            self._broadcaster.unsubscribe(self)

    def __enter__(self) -> "Subscription":
        return self

    def __exit__(self, *exc) -> None:
        self.close()


class EventBroadcaster(Protocol):
    def publish(self, channel_id: str, event_name: EventName, payload: dict) -> int:
        """Fire-and-forget to currently subscribed observers. Returns how many were reached."""

        raise NotImplementedError

    def subscribe(self, channel_id: str, observer: Optional[Observer] = None) -> Subscription:
        raise NotImplementedError


class InMemoryEventBroadcaster(EventBroadcaster):
    """In-process channel fan-out.

    At-most-once delivery to observers connected at publish time; no log, no replay.
    """

    def __init__(self, *, max_queue: int = DEFAULT_EVENT_QUEUE_SIZE):
        self._max_queue = int(max_queue)
        self._lock = threading.Lock()
        self._channels: dict[str, list[Subscription]] = {}

    def subscribe(self, channel_id: str, observer: Optional[Observer] = None) -> Subscription:
        sub = Subscription(self, str(channel_id), observer, max_queue=self._max_queue)
        with self._lock:
            self._channels.setdefault(sub.channel_id, []).append(sub)
        logger.debug("Observer joined channel %s", sub.channel_id)
        return sub

    def unsubscribe(self, sub: Subscription) -> None:
        with self._lock:
            subs = self._channels.get(sub.channel_id)
            if not subs or sub not in subs:
                return
            subs.remove(sub)
            if not subs:
                del self._channels[sub.channel_id]
        logger.debug("Observer left channel %s", sub.channel_id)

    def subscriber_count(self, channel_id: str) -> int:
        with self._lock:
            return len(self._channels.get(str(channel_id), ()))

    def publish(self, channel_id: str, event_name: EventName, payload: dict) -> int:
        event = Event(channel_id=str(channel_id), name=EventName(event_name), payload=dict(payload))

        # Deliver outside the lock so a slow observer cannot block subscribe/unsubscribe.
        with self._lock:
            targets = list(self._channels.get(event.channel_id, ()))

        delivered = 0
        for sub in targets:
            try:
                if sub.deliver(event):
                    delivered += 1
            except Exception:
                logger.exception("Observer on channel %s failed; detaching it", event.channel_id)
                sub.close()

        logger.debug("Published %s to %d observer(s) on channel %s", event.name.value, delivered, event.channel_id)
        return delivered

"""Data manager lifecycle events."""

import logging
import threading
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable, List

logger = logging.getLogger(__name__)


class DataManagerEventTypes:
    """Data manager event types."""
    INITIALIZED = "initialized"
    CLOSED = "closed"


@dataclass
class DataManagerEvent:
    """A lifecycle event emitted by a data manager."""
    type: str
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def __str__(self) -> str:
        return f"DataManagerEvent - type: {self.type}"


EventListener = Callable[[DataManagerEvent], None]


class EventBroadcaster:
    """Delivers each event to every listener subscribed at emit time.

    Events are not buffered: a listener that subscribes late never sees
    earlier events.
    """

    def __init__(self):
        self._listeners: List[EventListener] = []
        self._lock = threading.Lock()

    def listen(self, listener: EventListener) -> Callable[[], None]:
        """Subscribe ``listener``. Returns a function that unsubscribes it."""
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe():
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    def emit(self, event: DataManagerEvent):
        with self._lock:
            listeners = list(self._listeners)
        for listener in listeners:
            try:
                listener(event)
            except Exception as e:
                logger.warning(f"Event listener error for {event.type}: {e}")

    @property
    def listener_count(self) -> int:
        with self._lock:
            return len(self._listeners)

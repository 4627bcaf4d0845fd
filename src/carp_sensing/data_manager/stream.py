"""Broadcast stream of data units.

A ``DatumStream`` connects a data source to any number of listeners. The
source pushes data with ``add``, errors with ``add_error`` and finishes with
``close``. Listeners are called synchronously, at the pace of the source.

A stream cannot be restarted once closed. Listener exceptions are logged and
never propagate back to the source.
"""

import logging
import threading
from typing import Any, Callable, List, Optional

from ..domain.datum import Datum

logger = logging.getLogger(__name__)

DataCallback = Callable[[Datum], None]
ErrorCallback = Callable[[Any], None]
DoneCallback = Callable[[], None]


class Subscription:
    """A listener's subscription to a ``DatumStream``."""

    def __init__(
        self,
        stream: "DatumStream",
        on_data: DataCallback,
        on_error: Optional[ErrorCallback] = None,
        on_done: Optional[DoneCallback] = None,
    ):
        self._stream = stream
        self._on_data = on_data
        self._on_error = on_error
        self._on_done = on_done
        self._active = True

    @property
    def active(self) -> bool:
        return self._active

    def cancel(self):
        """Stop receiving events. Safe to call more than once."""
        if self._active:
            self._active = False
            self._stream._remove(self)

    def _call(self, callback: Optional[Callable], *args):
        if callback is None or not self._active:
            return
        try:
            callback(*args)
        except Exception as e:
            logger.warning(f"Stream listener error on '{self._stream.name}': {e}")

    def _deliver_data(self, datum: Datum):
        self._call(self._on_data, datum)

    def _deliver_error(self, error: Any):
        if self._on_error is None:
            logger.warning(f"Unhandled error on stream '{self._stream.name}': {error}")
            return
        self._call(self._on_error, error)

    def _deliver_done(self):
        self._call(self._on_done)
        self._active = False


class DatumStream:
    """A non-restartable broadcast stream of ``Datum`` objects."""

    def __init__(self, name: str = "data"):
        self.name = name
        self._subscriptions: List[Subscription] = []
        self._lock = threading.Lock()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def listener_count(self) -> int:
        with self._lock:
            return len(self._subscriptions)

    def listen(
        self,
        on_data: DataCallback,
        on_error: Optional[ErrorCallback] = None,
        on_done: Optional[DoneCallback] = None,
    ) -> Subscription:
        """Subscribe to the stream.

        Listening to a closed stream delivers only the done event.
        """
        subscription = Subscription(self, on_data, on_error, on_done)
        with self._lock:
            closed = self._closed
            if not closed:
                self._subscriptions.append(subscription)
        if closed:
            subscription._deliver_done()
        return subscription

    def add(self, datum: Datum):
        """Send a data unit to all current listeners."""
        for subscription in self._snapshot("add"):
            subscription._deliver_data(datum)

    def add_error(self, error: Any):
        """Send an error to all current listeners."""
        for subscription in self._snapshot("add_error"):
            subscription._deliver_error(error)

    def close(self):
        """Finish the stream. Later calls do nothing."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
            subscriptions = list(self._subscriptions)
            self._subscriptions.clear()
        for subscription in subscriptions:
            subscription._deliver_done()
        logger.debug(f"Stream '{self.name}' closed")

    def map(self, transform: Callable[[Datum], Datum], name: Optional[str] = None) -> "DatumStream":
        """Derive a stream carrying ``transform(datum)`` for every datum."""
        derived = DatumStream(name or f"{self.name}.map")

        def forward(datum: Datum):
            if not derived.closed:
                derived.add(transform(datum))

        self.listen(forward, on_error=derived.add_error, on_done=derived.close)
        return derived

    def _snapshot(self, operation: str) -> List[Subscription]:
        with self._lock:
            if self._closed:
                raise RuntimeError(f"Cannot {operation} on closed stream '{self.name}'")
            return list(self._subscriptions)

    def _remove(self, subscription: Subscription):
        with self._lock:
            if subscription in self._subscriptions:
                self._subscriptions.remove(subscription)

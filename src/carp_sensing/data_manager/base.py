"""Base classes for data managers.

A data manager consumes the stream of collected data units for a running
study and sends them somewhere: the console, local files, a web service.
Each manager has a ``type`` matching a ``DataEndPointType`` and is resolved
through a ``DataManagerRegistry``.

Lifecycle:
    UNINITIALIZED --initialize()--> INITIALIZED --close()--> CLOSED

To implement a new data manager:
1. Inherit from AbstractDataManager
2. Set ``type`` and implement ``on_datum``, ``on_error`` and ``on_done``
3. Register an instance with a DataManagerRegistry

Example:
    class ListDataManager(AbstractDataManager):
        type = "LIST"

        def __init__(self):
            super().__init__()
            self.data = []

        def on_datum(self, datum):
            self.data.append(datum)

        def on_error(self, error):
            pass

        def on_done(self):
            pass
"""

import logging
import threading
from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Optional

from ..domain.datum import Datum
from ..domain.study import Study
from .events import DataManagerEvent, DataManagerEventTypes, EventBroadcaster
from .stream import DatumStream, Subscription

logger = logging.getLogger(__name__)


class DataManagerState(str, Enum):
    """Data manager lifecycle state."""
    UNINITIALIZED = "uninitialized"
    INITIALIZED = "initialized"
    CLOSED = "closed"


class DataManager(ABC):
    """Interface of all data managers."""

    # Matches a DataEndPointType (override in subclasses)
    type: str = "UNKNOWN"

    @abstractmethod
    def initialize(self, study: Study, data: DatumStream):
        """Start consuming ``data`` for ``study``. Returns immediately."""
        pass

    @abstractmethod
    def close(self):
        """Stop consuming data and release resources."""
        pass

    @property
    @abstractmethod
    def events(self) -> EventBroadcaster:
        """Lifecycle events of this manager."""
        pass

    @abstractmethod
    def on_datum(self, datum: Datum):
        """Called for each data unit on the stream."""
        pass

    @abstractmethod
    def on_error(self, error: Any):
        """Called when an error is sent on the stream."""
        pass

    @abstractmethod
    def on_done(self):
        """Called when the stream is finished."""
        pass


class AbstractDataManager(DataManager):
    """Data manager with the lifecycle, subscription and event plumbing.

    After ``close()`` no further ``on_datum`` calls are made, even for data
    that was already in flight when the manager was closed.
    """

    def __init__(self):
        self.study: Optional[Study] = None
        self.state = DataManagerState.UNINITIALIZED
        self._events = EventBroadcaster()
        self._subscription: Optional[Subscription] = None
        self._lock = threading.RLock()

    @property
    def events(self) -> EventBroadcaster:
        return self._events

    @property
    def is_initialized(self) -> bool:
        return self.state == DataManagerState.INITIALIZED

    def initialize(self, study: Study, data: DatumStream):
        if self.state != DataManagerState.UNINITIALIZED:
            raise RuntimeError(f"Data manager {self.type} is {self.state.value}, cannot initialize")

        with self._lock:
            self.study = study
            self.state = DataManagerState.INITIALIZED
        self._subscription = data.listen(
            self._handle_datum,
            on_error=self._handle_error,
            on_done=self._handle_done,
        )

        logger.info(f"Data manager {self.type} initialized for study {study.id}")
        self._events.emit(DataManagerEvent(DataManagerEventTypes.INITIALIZED))

    def close(self):
        with self._lock:
            was_initialized = self.state == DataManagerState.INITIALIZED
            self.state = DataManagerState.CLOSED
            if self._subscription is not None:
                self._subscription.cancel()
                self._subscription = None
            if was_initialized:
                try:
                    self.on_close()
                except Exception as e:
                    logger.error(f"Data manager {self.type} close error: {e}")

        if was_initialized:
            logger.info(f"Data manager {self.type} closed")
        self._events.emit(DataManagerEvent(DataManagerEventTypes.CLOSED))

    def on_close(self):
        """Hook for releasing resources, called once on the first close."""
        pass

    def _handle_datum(self, datum: Datum):
        with self._lock:
            if self.state != DataManagerState.INITIALIZED:
                return
            self.on_datum(datum)

    def _handle_error(self, error: Any):
        with self._lock:
            if self.state != DataManagerState.INITIALIZED:
                return
            self.on_error(error)

    def _handle_done(self):
        with self._lock:
            if self.state != DataManagerState.INITIALIZED:
                return
            self.on_done()

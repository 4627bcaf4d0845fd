"""Data Management Module.

Data managers consume the stream of data units collected for a running
study. A study's ``data_end_point.type`` selects the manager through a
``DataManagerRegistry``.

Usage:
    from carp_sensing.data_manager import create_default_registry, DatumStream

    registry = create_default_registry(data_dir="/tmp/carp")
    manager = registry.require(study.data_end_point.type)

    stream = DatumStream()
    manager.initialize(study, stream)
    stream.add(datum)
    manager.close()
"""

from .stream import DatumStream, Subscription
from .events import DataManagerEvent, DataManagerEventTypes, EventBroadcaster
from .base import DataManager, AbstractDataManager, DataManagerState
from .registry import DataManagerRegistry
from .managers import ConsoleDataManager, FileDataManager, create_default_registry

__all__ = [
    "DatumStream",
    "Subscription",
    "DataManagerEvent",
    "DataManagerEventTypes",
    "EventBroadcaster",
    "DataManager",
    "AbstractDataManager",
    "DataManagerState",
    "DataManagerRegistry",
    "ConsoleDataManager",
    "FileDataManager",
    "create_default_registry",
]

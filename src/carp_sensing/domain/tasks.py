"""Tasks and triggers.

A ``Task`` is a named group of measures run together. A ``Trigger`` decides
when its tasks run. Both own their children exclusively; removing a child
is done by identity and removing one that is not present does nothing.
"""

import itertools
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, ClassVar, Dict, List, Optional

from ..errors import MalformedFieldError
from .measures import Measure
from .serialization import (
    Entity,
    SerializationRegistry,
    decode_entity_list,
    encoded_field,
    optional_field,
    require_datetime,
    require_field,
)

logger = logging.getLogger(__name__)

_task_counter = itertools.count()


def _remove_by_identity(items: list, item: Any) -> bool:
    for index, candidate in enumerate(items):
        if candidate is item:
            del items[index]
            return True
    return False


@dataclass
class Task(Entity):
    """A named aggregation of measures, unique by name within a study."""

    KIND: ClassVar[str] = "Task"
    POLYMORPHIC: ClassVar[bool] = False

    name: Optional[str] = None
    measures: List[Measure] = field(default_factory=list)

    def __post_init__(self):
        if self.name is None:
            self.name = f"Task #{next(_task_counter)}"

    @classmethod
    def _fields_from_dict(cls, data: Dict[str, Any], registry: SerializationRegistry) -> Dict[str, Any]:
        return {
            "name": optional_field(data, "name", str),
            "measures": decode_entity_list(data, "measures", registry, Measure),
        }

    def add_measure(self, measure: Measure) -> "Task":
        self.measures.append(measure)
        return self

    def remove_measure(self, measure: Measure):
        _remove_by_identity(self.measures, measure)

    def __str__(self) -> str:
        return self.name


@dataclass
class Trigger(Entity):
    """Base class of all triggers. Use one of the concrete variants."""

    KIND: ClassVar[str] = "Trigger"

    tasks: List[Task] = field(default_factory=list)

    @classmethod
    def _fields_from_dict(cls, data: Dict[str, Any], registry: SerializationRegistry) -> Dict[str, Any]:
        return {"tasks": decode_entity_list(data, "tasks", registry, Task)}

    def add_task(self, task: Task) -> "Trigger":
        self.tasks.append(task)
        return self

    def remove_task(self, task: Task):
        _remove_by_identity(self.tasks, task)


@dataclass
class ImmediateTrigger(Trigger):
    """Starts its tasks as soon as the study starts."""

    KIND = "Immediate"


@dataclass
class DelayedTrigger(Trigger):
    """Starts its tasks ``delay`` ms after the study starts."""

    KIND = "Delayed"

    delay: int = 0

    @classmethod
    def _fields_from_dict(cls, data: Dict[str, Any], registry: SerializationRegistry) -> Dict[str, Any]:
        values = super()._fields_from_dict(data, registry)
        values["delay"] = optional_field(data, "delay", int, 0)
        return values


@dataclass
class PeriodicTrigger(Trigger):
    """Runs its tasks every ``period`` ms, each time for ``duration`` ms."""

    KIND = "Periodic"

    period: Optional[int] = encoded_field()
    duration: Optional[int] = None

    def __post_init__(self):
        if self.period is None or self.period <= 0:
            raise ValueError(f"PeriodicTrigger requires a positive period, got {self.period}")

    @classmethod
    def _fields_from_dict(cls, data: Dict[str, Any], registry: SerializationRegistry) -> Dict[str, Any]:
        values = super()._fields_from_dict(data, registry)
        period = require_field(data, "period", int)
        if period <= 0:
            raise MalformedFieldError("period", "positive integer", period)
        values.update(
            period=period,
            duration=optional_field(data, "duration", int),
        )
        return values


@dataclass
class ScheduledTrigger(Trigger):
    """Runs its tasks once at ``schedule``, optionally for ``duration`` ms."""

    KIND = "Scheduled"

    schedule: Optional[datetime] = encoded_field()
    duration: Optional[int] = None

    def __post_init__(self):
        if self.schedule is None:
            raise ValueError("ScheduledTrigger requires a schedule")

    @classmethod
    def _fields_from_dict(cls, data: Dict[str, Any], registry: SerializationRegistry) -> Dict[str, Any]:
        values = super()._fields_from_dict(data, registry)
        values.update(
            schedule=require_datetime(data, "schedule"),
            duration=optional_field(data, "duration", int),
        )
        return values


TRIGGER_TYPES = (
    ImmediateTrigger,
    DelayedTrigger,
    PeriodicTrigger,
    ScheduledTrigger,
)

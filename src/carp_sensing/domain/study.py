"""Study definition and data end points.

A ``Study`` is the root aggregate: it owns the whole
Trigger -> Task -> Measure tree and names the ``DataEndPoint`` collected
data is sent to.
"""

import uuid
import logging
from dataclasses import dataclass, field
from typing import Any, ClassVar, Dict, Iterator, List, Optional

from ..config import Config
from ..errors import MalformedFieldError
from .measures import Measure
from .serialization import (
    Entity,
    SerializationRegistry,
    decode_entity_list,
    encoded_field,
    optional_field,
)
from .tasks import Task, Trigger

logger = logging.getLogger(__name__)


class DataEndPointType:
    """Known data end point types; each maps to a registered data manager."""
    PRINT = "PRINT"
    FILE = "FILE"
    CARP = "CARP"


class UploadMethod:
    """Ways of uploading to a CARP backend."""
    DATA_POINT = "DATA_POINT"
    FILE = "FILE"
    BATCH_DATA_POINT = "BATCH_DATA_POINT"


@dataclass
class DataEndPoint(Entity):
    """Where collected data is sent, identified by ``type``."""

    KIND: ClassVar[str] = "DataEndPoint"

    type: str = encoded_field(DataEndPointType.PRINT)

    @classmethod
    def _fields_from_dict(cls, data: Dict[str, Any], registry: SerializationRegistry) -> Dict[str, Any]:
        # variants imply their type, the base end point must name one
        default = None if cls is DataEndPoint else cls.__dataclass_fields__["type"].default
        end_point_type = optional_field(data, "type", str, default)
        if end_point_type is None:
            raise MalformedFieldError("type", "string", None)
        return {"type": end_point_type}


@dataclass
class FileDataEndPoint(DataEndPoint):
    """Store data in local files.

    Attributes:
        buffer_size: Size in bytes a file may grow to before a new one is started
        zip: Compress finished files
        encrypt: Encrypt finished files with ``public_key``
    """

    KIND = "FileDataEndPoint"

    type: str = encoded_field(DataEndPointType.FILE)
    buffer_size: int = field(default_factory=lambda: Config.FILE_BUFFER_SIZE)
    zip: bool = True
    encrypt: bool = False
    public_key: Optional[str] = None

    @classmethod
    def _fields_from_dict(cls, data: Dict[str, Any], registry: SerializationRegistry) -> Dict[str, Any]:
        values = super()._fields_from_dict(data, registry)
        values.update(
            buffer_size=optional_field(data, "buffer_size", int, Config.FILE_BUFFER_SIZE),
            zip=optional_field(data, "zip", bool, True),
            encrypt=optional_field(data, "encrypt", bool, False),
            public_key=optional_field(data, "public_key", str),
        )
        return values


@dataclass
class CarpDataEndPoint(FileDataEndPoint):
    """Upload data to a CARP web service."""

    KIND = "CarpDataEndPoint"

    type: str = encoded_field(DataEndPointType.CARP)
    upload_method: str = UploadMethod.DATA_POINT
    name: Optional[str] = None
    uri: Optional[str] = None
    client_id: Optional[str] = None
    client_secret: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None
    collection: Optional[str] = None
    delete_when_uploaded: bool = True

    @classmethod
    def _fields_from_dict(cls, data: Dict[str, Any], registry: SerializationRegistry) -> Dict[str, Any]:
        values = super()._fields_from_dict(data, registry)
        values.update(
            upload_method=optional_field(data, "upload_method", str, UploadMethod.DATA_POINT),
            delete_when_uploaded=optional_field(data, "delete_when_uploaded", bool, True),
        )
        for key in ("name", "uri", "client_id", "client_secret", "email", "password", "collection"):
            values[key] = optional_field(data, key, str)
        return values


def _new_study_id() -> str:
    return str(uuid.uuid4())


@dataclass
class Study(Entity):
    """The full configuration of a study.

    ``id`` is fixed for the lifetime of the study. The measure tree below
    ``triggers`` is the only part changed by sampling schema adaptation.
    """

    KIND: ClassVar[str] = "Study"
    POLYMORPHIC: ClassVar[bool] = False
    IMMUTABLE_FIELDS = ("id",)

    id: str = field(default_factory=_new_study_id)
    user_id: Optional[str] = None
    name: Optional[str] = None
    description: Optional[str] = None
    sampling_strategy: str = "NORMAL"
    data_end_point: Optional[DataEndPoint] = None
    data_format: str = field(default_factory=lambda: Config.DEFAULT_DATA_FORMAT)
    triggers: List[Trigger] = field(default_factory=list)

    @classmethod
    def _fields_from_dict(cls, data: Dict[str, Any], registry: SerializationRegistry) -> Dict[str, Any]:
        end_point = optional_field(data, "data_end_point", dict)
        return {
            "id": optional_field(data, "id", str, _new_study_id()),
            "user_id": optional_field(data, "user_id", str),
            "name": optional_field(data, "name", str),
            "description": optional_field(data, "description", str),
            "sampling_strategy": optional_field(data, "sampling_strategy", str, "NORMAL"),
            "data_end_point": registry.decode(end_point, DataEndPoint) if end_point is not None else None,
            "data_format": optional_field(data, "data_format", str, Config.DEFAULT_DATA_FORMAT),
            "triggers": decode_entity_list(data, "triggers", registry, Trigger),
        }

    def add_trigger(self, trigger: Trigger) -> "Study":
        self.triggers.append(trigger)
        return self

    def remove_trigger(self, trigger: Trigger):
        for index, candidate in enumerate(self.triggers):
            if candidate is trigger:
                del self.triggers[index]
                return

    def add_trigger_task(self, trigger: Trigger, task: Task) -> "Study":
        """Add ``task`` to ``trigger``, adding the trigger if it is new."""
        if not any(candidate is trigger for candidate in self.triggers):
            self.add_trigger(trigger)
        trigger.add_task(task)
        return self

    @property
    def tasks(self) -> List[Task]:
        """All tasks of all triggers, in trigger order."""
        return [task for trigger in self.triggers for task in trigger.tasks]

    @property
    def measures(self) -> List[Measure]:
        return list(self.iter_measures())

    def iter_measures(self) -> Iterator[Measure]:
        for task in self.tasks:
            yield from task.measures

    def __str__(self) -> str:
        return f"Study {self.id} - {self.name}"


END_POINT_TYPES = (DataEndPoint, FileDataEndPoint, CarpDataEndPoint)

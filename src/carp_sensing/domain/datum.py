"""Data units produced by measures and consumed by data managers.

Each datum carries a unique ``id`` and a UTC ``timestamp``. ``format``
identifies the kind of data as ``namespace.name``, e.g.
``carp.accelerometer``. Unset fields are left out of the encoded form.
"""

import uuid
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, ClassVar, Dict, Optional, Sequence
import numpy as np

from .measures import DataType, NameSpace
from .serialization import (
    Entity,
    SerializationRegistry,
    optional_datetime,
    optional_field,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DataFormat:
    """Format of a datum, e.g. ``carp.light``."""
    namespace: str
    name: str

    def __str__(self) -> str:
        return f"{self.namespace}.{self.name}"


def _new_datum_id() -> str:
    return str(uuid.uuid4())


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class Datum(Entity):
    """Base data unit."""

    KIND: ClassVar[str] = "Datum"
    FORMAT: ClassVar[DataFormat] = DataFormat(NameSpace.UNKNOWN, "datum")

    id: str = field(default_factory=_new_datum_id)
    timestamp: datetime = field(default_factory=_utc_now)

    @property
    def format(self) -> DataFormat:
        return self.FORMAT

    @classmethod
    def _fields_from_dict(cls, data: Dict[str, Any], registry: SerializationRegistry) -> Dict[str, Any]:
        values = {"id": optional_field(data, "id", str, _new_datum_id())}
        timestamp = optional_datetime(data, "timestamp")
        values["timestamp"] = timestamp if timestamp is not None else _utc_now()
        return values


@dataclass
class CARPDatum(Datum):
    """A datum in the CARP namespace."""

    KIND = "CARPDatum"
    FORMAT = DataFormat(NameSpace.CARP, "datum")


@dataclass
class _XYZDatum(CARPDatum):
    x: Optional[float] = None
    y: Optional[float] = None
    z: Optional[float] = None

    @classmethod
    def _fields_from_dict(cls, data: Dict[str, Any], registry: SerializationRegistry) -> Dict[str, Any]:
        values = super()._fields_from_dict(data, registry)
        for axis in ("x", "y", "z"):
            values[axis] = optional_field(data, axis, float)
        return values


@dataclass
class AccelerometerDatum(_XYZDatum):
    """Acceleration in m/s^2 along each axis, including gravity."""

    KIND = "AccelerometerDatum"
    FORMAT = DataFormat(NameSpace.CARP, DataType.ACCELEROMETER)


@dataclass
class GyroscopeDatum(_XYZDatum):
    """Rotation rate in rad/s around each axis."""

    KIND = "GyroscopeDatum"
    FORMAT = DataFormat(NameSpace.CARP, DataType.GYROSCOPE)


@dataclass
class LightDatum(CARPDatum):
    """Summary of ambient light (lux) over one sampling window."""

    KIND = "LightDatum"
    FORMAT = DataFormat(NameSpace.CARP, DataType.LIGHT)

    mean_lux: Optional[float] = None
    std_lux: Optional[float] = None
    min_lux: Optional[float] = None
    max_lux: Optional[float] = None

    @classmethod
    def from_samples(cls, lux_values: Sequence[float]) -> "LightDatum":
        """Summarise the lux readings collected in one sampling window.

        Args:
            lux_values: Raw readings; an empty window gives an empty datum

        Returns:
            LightDatum with mean, standard deviation, min and max
        """
        samples = np.asarray(lux_values, dtype=np.float64)
        if samples.size == 0:
            return cls()
        return cls(
            mean_lux=float(np.mean(samples)),
            std_lux=float(np.std(samples)),
            min_lux=float(np.min(samples)),
            max_lux=float(np.max(samples)),
        )

    @classmethod
    def _fields_from_dict(cls, data: Dict[str, Any], registry: SerializationRegistry) -> Dict[str, Any]:
        values = super()._fields_from_dict(data, registry)
        for key in ("mean_lux", "std_lux", "min_lux", "max_lux"):
            values[key] = optional_field(data, key, float)
        return values


@dataclass
class PedometerDatum(CARPDatum):
    """Steps counted between ``start_time`` and ``end_time``."""

    KIND = "PedometerDatum"
    FORMAT = DataFormat(NameSpace.CARP, DataType.PEDOMETER)

    step_count: Optional[int] = None
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None

    @classmethod
    def _fields_from_dict(cls, data: Dict[str, Any], registry: SerializationRegistry) -> Dict[str, Any]:
        values = super()._fields_from_dict(data, registry)
        values.update(
            step_count=optional_field(data, "step_count", int),
            start_time=optional_datetime(data, "start_time"),
            end_time=optional_datetime(data, "end_time"),
        )
        return values


DATUM_TYPES = (
    Datum,
    CARPDatum,
    AccelerometerDatum,
    GyroscopeDatum,
    LightDatum,
    PedometerDatum,
)

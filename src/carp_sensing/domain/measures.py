"""Measure definitions.

A ``Measure`` describes one kind of data to collect: what (its
``MeasureType``), whether it is enabled, and how often and for how long it
samples. Measure variants add type-specific settings.

Only ``enabled`` and the timing fields listed in ``ADAPTABLE_FIELDS`` are
changed after construction, either by a sampling schema or by the user. The
state before the first adaptation is kept as a baseline so that ``restore()``
can undo any number of adaptations.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, ClassVar, Dict, List, Optional, Tuple

from .serialization import (
    Entity,
    SerializationRegistry,
    optional_field,
    optional_string_map,
    require_field,
)

logger = logging.getLogger(__name__)

MeasureListener = Callable[["Measure"], None]


class NameSpace:
    """Known measure namespaces."""
    CARP = "carp"
    UNKNOWN = "unknown"


class DataType:
    """Names of the data types known to the default sampling schemas."""
    DEVICE = "device"
    ACCELEROMETER = "accelerometer"
    GYROSCOPE = "gyroscope"
    PEDOMETER = "pedometer"
    LIGHT = "light"
    BATTERY = "battery"
    SCREEN = "screen"
    MEMORY = "memory"
    LOCATION = "location"
    CONNECTIVITY = "connectivity"
    BLUETOOTH = "bluetooth"
    APPS = "apps"
    APP_USAGE = "app_usage"
    AUDIO = "audio"
    NOISE = "noise"
    ACTIVITY = "activity"
    PHONE_LOG = "phone_log"
    TEXT_MESSAGE_LOG = "text-message-log"
    TEXT_MESSAGE = "text-message"
    WEATHER = "weather"

    ALL = (
        DEVICE, ACCELEROMETER, GYROSCOPE, PEDOMETER, LIGHT, BATTERY, SCREEN,
        MEMORY, LOCATION, CONNECTIVITY, BLUETOOTH, APPS, APP_USAGE, AUDIO,
        NOISE, ACTIVITY, PHONE_LOG, TEXT_MESSAGE_LOG, TEXT_MESSAGE, WEATHER,
    )


@dataclass(frozen=True)
class MeasureType(Entity):
    """Two-part measure identifier, e.g. ``carp.accelerometer``."""

    KIND: ClassVar[str] = "MeasureType"
    POLYMORPHIC: ClassVar[bool] = False

    namespace: str
    name: str

    @classmethod
    def _fields_from_dict(cls, data: Dict[str, Any], registry: SerializationRegistry) -> Dict[str, Any]:
        return {
            "namespace": optional_field(data, "namespace", str, NameSpace.UNKNOWN),
            "name": require_field(data, "name", str),
        }

    def __str__(self) -> str:
        return f"{self.namespace}.{self.name}"


@dataclass
class Measure(Entity):
    """An event-driven measure, and the base of all measure variants."""

    KIND: ClassVar[str] = "Measure"
    IMMUTABLE_FIELDS = ("type",)
    ADAPTABLE_FIELDS: ClassVar[Tuple[str, ...]] = ("enabled",)

    type: MeasureType
    name: Optional[str] = None
    enabled: bool = True
    configuration: Dict[str, str] = field(default_factory=dict)

    _baseline: Optional["Measure"] = field(default=None, init=False, repr=False, compare=False)
    _listeners: List[MeasureListener] = field(default_factory=list, init=False, repr=False, compare=False)

    @classmethod
    def _fields_from_dict(cls, data: Dict[str, Any], registry: SerializationRegistry) -> Dict[str, Any]:
        return {
            "type": MeasureType.from_dict(require_field(data, "type", dict), registry),
            "name": optional_field(data, "name", str),
            "enabled": optional_field(data, "enabled", bool, True),
            "configuration": optional_string_map(data, "configuration"),
        }

    def snapshot(self) -> "Measure":
        """Return an independent copy of this measure's current state."""
        return self.clone()

    def restore(self, snapshot: Optional["Measure"] = None):
        """Reset the adaptable fields.

        Args:
            snapshot: State to restore from. Defaults to the baseline taken
                before the first adaptation; without one this is a no-op.
        """
        if snapshot is None:
            snapshot = self._baseline
        if snapshot is None:
            return
        for name in self.ADAPTABLE_FIELDS:
            if name in snapshot.ADAPTABLE_FIELDS:
                setattr(self, name, getattr(snapshot, name))

    def adapt(self, measure: "Measure"):
        """Overwrite the adaptable fields that ``measure`` defines.

        Only fields declared adaptable by both variants are copied, and
        unset (None) values in ``measure`` leave this measure untouched.
        """
        if self._baseline is None:
            self._baseline = self.snapshot()
        for name in self.ADAPTABLE_FIELDS:
            if name not in measure.ADAPTABLE_FIELDS:
                continue
            value = getattr(measure, name)
            if value is not None:
                setattr(self, name, value)

    @property
    def baseline(self) -> Optional["Measure"]:
        return self._baseline

    def add_listener(self, listener: MeasureListener):
        self._listeners.append(listener)

    def remove_listener(self, listener: MeasureListener):
        if listener in self._listeners:
            self._listeners.remove(listener)

    def has_changed(self):
        """Notify listeners that this measure has (possibly) changed."""
        for listener in list(self._listeners):
            try:
                listener(self)
            except Exception as e:
                logger.warning(f"Measure listener error for {self.type}: {e}")


@dataclass
class PeriodicMeasure(Measure):
    """A measure sampled for ``duration`` ms every ``frequency`` ms."""

    KIND = "PeriodicMeasure"
    ADAPTABLE_FIELDS = ("enabled", "frequency", "duration")

    frequency: Optional[int] = None
    duration: Optional[int] = None

    @classmethod
    def _fields_from_dict(cls, data: Dict[str, Any], registry: SerializationRegistry) -> Dict[str, Any]:
        values = super()._fields_from_dict(data, registry)
        values.update(
            frequency=optional_field(data, "frequency", int),
            duration=optional_field(data, "duration", int),
        )
        return values


@dataclass
class AppUsageMeasure(PeriodicMeasure):
    """Periodic collection of application usage statistics."""

    KIND = "AppUsageMeasure"


@dataclass
class AudioMeasure(PeriodicMeasure):
    """Periodic audio recording; files are stored per study."""

    KIND = "AudioMeasure"

    study_id: Optional[str] = None

    @classmethod
    def _fields_from_dict(cls, data: Dict[str, Any], registry: SerializationRegistry) -> Dict[str, Any]:
        values = super()._fields_from_dict(data, registry)
        values["study_id"] = optional_field(data, "study_id", str)
        return values


@dataclass
class NoiseMeasure(PeriodicMeasure):
    """Periodic ambient noise level, sampled at ``sampling_rate``."""

    KIND = "NoiseMeasure"
    ADAPTABLE_FIELDS = ("enabled", "frequency", "duration", "sampling_rate")

    sampling_rate: int = 500

    @classmethod
    def _fields_from_dict(cls, data: Dict[str, Any], registry: SerializationRegistry) -> Dict[str, Any]:
        values = super()._fields_from_dict(data, registry)
        values["sampling_rate"] = optional_field(data, "sampling_rate", int, 500)
        return values


@dataclass
class PhoneLogMeasure(Measure):
    """Collects the phone log for the last ``days`` days."""

    KIND = "PhoneLogMeasure"

    days: int = 1

    @classmethod
    def _fields_from_dict(cls, data: Dict[str, Any], registry: SerializationRegistry) -> Dict[str, Any]:
        values = super()._fields_from_dict(data, registry)
        values["days"] = optional_field(data, "days", int, 1)
        return values


@dataclass
class WeatherMeasure(PeriodicMeasure):
    KIND = "WeatherMeasure"

    api_key: Optional[str] = None

    @classmethod
    def _fields_from_dict(cls, data: Dict[str, Any], registry: SerializationRegistry) -> Dict[str, Any]:
        values = super()._fields_from_dict(data, registry)
        values["api_key"] = optional_field(data, "api_key", str)
        return values


MEASURE_TYPES = (
    Measure,
    PeriodicMeasure,
    AppUsageMeasure,
    AudioMeasure,
    NoiseMeasure,
    PhoneLogMeasure,
    WeatherMeasure,
)

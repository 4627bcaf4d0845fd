"""Study configuration domain model.

The model is a tree: a ``Study`` owns ``Trigger``s, which own ``Task``s,
which own ``Measure``s. Every node is a tagged ``Entity`` that round-trips
through JSON via a ``SerializationRegistry``.

Usage:
    from carp_sensing.domain import create_registry, Study

    registry = create_registry()
    study = Study.from_dict(json.load(f), registry)
"""

from .serialization import Entity, SerializationRegistry
from .measures import (
    NameSpace,
    DataType,
    MeasureType,
    Measure,
    PeriodicMeasure,
    AppUsageMeasure,
    AudioMeasure,
    NoiseMeasure,
    PhoneLogMeasure,
    WeatherMeasure,
)
from .tasks import (
    Task,
    Trigger,
    ImmediateTrigger,
    DelayedTrigger,
    PeriodicTrigger,
    ScheduledTrigger,
)
from .study import (
    DataEndPointType,
    UploadMethod,
    DataEndPoint,
    FileDataEndPoint,
    CarpDataEndPoint,
    Study,
)
from .datum import (
    DataFormat,
    Datum,
    CARPDatum,
    AccelerometerDatum,
    GyroscopeDatum,
    LightDatum,
    PedometerDatum,
)
from .registry import register_domain_types, create_registry

__all__ = [
    "Entity",
    "SerializationRegistry",
    "NameSpace",
    "DataType",
    "MeasureType",
    "Measure",
    "PeriodicMeasure",
    "AppUsageMeasure",
    "AudioMeasure",
    "NoiseMeasure",
    "PhoneLogMeasure",
    "WeatherMeasure",
    "Task",
    "Trigger",
    "ImmediateTrigger",
    "DelayedTrigger",
    "PeriodicTrigger",
    "ScheduledTrigger",
    "DataEndPointType",
    "UploadMethod",
    "DataEndPoint",
    "FileDataEndPoint",
    "CarpDataEndPoint",
    "Study",
    "DataFormat",
    "Datum",
    "CARPDatum",
    "AccelerometerDatum",
    "GyroscopeDatum",
    "LightDatum",
    "PedometerDatum",
    "register_domain_types",
    "create_registry",
]

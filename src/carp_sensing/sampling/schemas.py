"""Sampling schemas.

A ``SamplingSchema`` is a named preset of default measure configurations,
keyed by data type name. Applying a schema to a study adapts every measure
whose type name appears in the schema: its ``enabled`` flag and timing
fields are overwritten with the schema's values.

Presets:
- ``common``: best-effort defaults for daily sampling with one recharge a day
- ``maximum``: ``common`` with every measure enabled
- ``light``: ``common`` without low-value background measures
- ``minimum``: ``light`` without location, activity, steps and noise
- ``none``: every known measure disabled
- ``normal``: no measures at all, so adapting changes nothing

Schemas are templates. Adapting a study never changes a schema, and each
derived schema owns its own copy of every measure.

Note that measures are matched by type name only, not by namespace. A
schema built for one namespace therefore also adapts same-named measures
declared under another namespace.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Tuple

from ..domain.measures import (
    AudioMeasure,
    DataType,
    Measure,
    MeasureType,
    NameSpace,
    NoiseMeasure,
    PeriodicMeasure,
    PhoneLogMeasure,
    WeatherMeasure,
)
from ..domain.study import Study

logger = logging.getLogger(__name__)

Override = Tuple[str, Dict[str, Any]]

SECOND = 1000
MINUTE = 60 * SECOND
HOUR = 60 * MINUTE
DAY = 24 * HOUR

# Data types switched off when going from common to light sampling
LIGHT_DISABLED_TYPES = (
    DataType.LIGHT,
    DataType.MEMORY,
    DataType.CONNECTIVITY,
    DataType.BLUETOOTH,
    DataType.PHONE_LOG,
    DataType.TEXT_MESSAGE_LOG,
    DataType.TEXT_MESSAGE,
    DataType.WEATHER,
)

# Data types additionally switched off when going from light to minimum sampling
MINIMUM_DISABLED_TYPES = (
    DataType.PEDOMETER,
    DataType.LOCATION,
    DataType.NOISE,
    DataType.ACTIVITY,
)


class SamplingSchemaType(str, Enum):
    """Known sampling schema types."""
    NONE = "NONE"
    MINIMUM = "MINIMUM"
    LIGHT = "LIGHT"
    COMMON = "COMMON"
    MAXIMUM = "MAXIMUM"
    NORMAL = "NORMAL"


@dataclass
class SamplingSchema:
    """A named set of default measures used to adapt a study."""

    schema_type: SamplingSchemaType
    name: str
    power_aware: bool = False
    measures: Dict[str, Measure] = field(default_factory=dict)

    def __post_init__(self):
        self.schema_type = SamplingSchemaType(self.schema_type)

    # ------------------------------------------------------------------
    # Preset constructors
    # ------------------------------------------------------------------

    @classmethod
    def common(cls, namespace: Optional[str] = None) -> "SamplingSchema":
        """Default configuration of all known measures. Power-aware."""
        ns = namespace or NameSpace.UNKNOWN

        def t(name: str) -> MeasureType:
            return MeasureType(ns, name)

        measures = [
            Measure(t(DataType.DEVICE), name='Basic Device Info', enabled=True),
            PeriodicMeasure(t(DataType.ACCELEROMETER), name='Accelerometer',
                            enabled=False, frequency=1000, duration=10),
            PeriodicMeasure(t(DataType.GYROSCOPE), name='Gyroscope',
                            enabled=False, frequency=1000, duration=10),
            PeriodicMeasure(t(DataType.PEDOMETER), name='Pedometer (Step Count)',
                            enabled=True, frequency=HOUR),
            PeriodicMeasure(t(DataType.LIGHT), name='Ambient Light',
                            enabled=True, frequency=MINUTE, duration=SECOND),
            Measure(t(DataType.BATTERY), name='Battery', enabled=True),
            Measure(t(DataType.SCREEN), name='Screen Activity (lock/on/off)', enabled=True),
            PeriodicMeasure(t(DataType.MEMORY), name='Memory Usage',
                            enabled=True, frequency=MINUTE),
            Measure(t(DataType.LOCATION), name='Location', enabled=True),
            Measure(t(DataType.CONNECTIVITY), name='Connectivity (wifi/3G/...)', enabled=True),
            PeriodicMeasure(t(DataType.BLUETOOTH), name='Nearby Devices (Bluetooth Scan)',
                            enabled=True, frequency=HOUR, duration=2 * SECOND),
            PeriodicMeasure(t(DataType.APPS), name='Installed Apps',
                            enabled=True, frequency=DAY),
            PeriodicMeasure(t(DataType.APP_USAGE), name='Apps Usage',
                            enabled=True, frequency=HOUR, duration=HOUR),
            AudioMeasure(t(DataType.AUDIO), name='Audio Recording',
                         enabled=False, frequency=MINUTE, duration=2 * SECOND),
            NoiseMeasure(t(DataType.NOISE), name='Ambient Noise',
                         enabled=True, frequency=MINUTE, duration=2 * SECOND),
            Measure(t(DataType.ACTIVITY), name='Activity Recognition', enabled=True),
            PhoneLogMeasure(t(DataType.PHONE_LOG), name='Phone Log', enabled=False, days=30),
            Measure(t(DataType.TEXT_MESSAGE_LOG), name='Text Message (SMS) Log', enabled=False),
            Measure(t(DataType.TEXT_MESSAGE), name='Text Message (SMS)', enabled=True),
            WeatherMeasure(t(DataType.WEATHER), name='Local Weather',
                           enabled=True, frequency=HOUR),
        ]

        return cls(
            schema_type=SamplingSchemaType.COMMON,
            name='Common (default) sampling',
            power_aware=True,
            measures={measure.type.name: measure for measure in measures},
        )

    @classmethod
    def maximum(cls, namespace: Optional[str] = None) -> "SamplingSchema":
        """The ``common`` settings with every measure enabled."""
        common = cls.common(namespace)
        return common.derive(
            SamplingSchemaType.MAXIMUM,
            'Default ALL sampling',
            [(type_name, {"enabled": True}) for type_name in common.measures],
            power_aware=True,
        )

    @classmethod
    def light(cls, namespace: Optional[str] = None) -> "SamplingSchema":
        """Low-frequency sampling with good coverage. Power-aware."""
        return cls.common(namespace).derive(
            SamplingSchemaType.LIGHT,
            'Light sampling',
            [(type_name, {"enabled": False}) for type_name in LIGHT_DISABLED_TYPES],
            power_aware=True,
        )

    @classmethod
    def minimum(cls, namespace: Optional[str] = None) -> "SamplingSchema":
        """A minimum set of measures. Power-aware."""
        return cls.light(namespace).derive(
            SamplingSchemaType.MINIMUM,
            'Minimum sampling',
            [(type_name, {"enabled": False}) for type_name in MINIMUM_DISABLED_TYPES],
            power_aware=True,
        )

    @classmethod
    def none(cls, namespace: Optional[str] = None) -> "SamplingSchema":
        """Stops all sampling by disabling every known measure."""
        ns = namespace or NameSpace.UNKNOWN
        return cls(
            schema_type=SamplingSchemaType.NONE,
            name='No sampling',
            power_aware=True,
            measures={key: Measure(MeasureType(ns, key), enabled=False) for key in DataType.ALL},
        )

    @classmethod
    def normal(cls, namespace: Optional[str] = None, power_aware: bool = False) -> "SamplingSchema":
        """An empty schema; adapting with it leaves every measure as it is."""
        return cls(
            schema_type=SamplingSchemaType.NORMAL,
            name='Default sampling',
            power_aware=power_aware,
        )

    @classmethod
    def from_type(cls, schema_type, namespace: Optional[str] = None) -> "SamplingSchema":
        """Build the preset for a schema type (or its name)."""
        factories = {
            SamplingSchemaType.NONE: cls.none,
            SamplingSchemaType.MINIMUM: cls.minimum,
            SamplingSchemaType.LIGHT: cls.light,
            SamplingSchemaType.COMMON: cls.common,
            SamplingSchemaType.MAXIMUM: cls.maximum,
            SamplingSchemaType.NORMAL: cls.normal,
        }
        return factories[SamplingSchemaType(schema_type)](namespace=namespace)

    # ------------------------------------------------------------------
    # Derivation and adaptation
    # ------------------------------------------------------------------

    def derive(
        self,
        schema_type: SamplingSchemaType,
        name: str,
        overrides: Iterable[Override] = (),
        power_aware: Optional[bool] = None,
    ) -> "SamplingSchema":
        """Create a new schema from a copy of this one.

        Args:
            schema_type: Type of the new schema
            name: Name of the new schema
            overrides: (type name, {field: value}) pairs applied to the copies
            power_aware: Defaults to this schema's setting

        Returns:
            A new schema that shares no measure with this one
        """
        measures = {key: measure.clone() for key, measure in self.measures.items()}
        for type_name, changes in overrides:
            if type_name not in measures:
                raise KeyError(f"No measure {type_name!r} in schema {self.name!r}")
            measure = measures[type_name]
            for field_name, value in changes.items():
                if not hasattr(measure, field_name):
                    raise ValueError(f"{type(measure).__name__} has no field {field_name!r}")
                setattr(measure, field_name, value)

        return SamplingSchema(
            schema_type=schema_type,
            name=name,
            power_aware=self.power_aware if power_aware is None else power_aware,
            measures=measures,
        )

    def adapt(self, study: Study, restore: bool = True):
        """Adapt all measures in ``study`` to this schema.

        Args:
            study: Study whose measures are changed in place
            restore: Reset each measure to its baseline before adapting,
                which makes repeated calls independent of each other. With
                ``restore=False`` adaptations compose.
        """
        adapted = 0
        total = 0
        for task in study.tasks:
            for measure in task.measures:
                total += 1
                if restore:
                    measure.restore()
                schema_measure = self.measures.get(measure.type.name)
                if schema_measure is not None:
                    measure.adapt(schema_measure)
                    adapted += 1
                measure.has_changed()

        logger.info(
            f"Adapted study {study.id} to '{self.name}' ({self.schema_type.value}): "
            f"{adapted}/{total} measures matched, restore={restore}"
        )

    def get_measure_list(self, types: Iterable[str], namespace: Optional[str] = None) -> List[Measure]:
        """Copies of this schema's measures for the given type names.

        Unknown type names are skipped. The copies' measure types are placed
        in ``namespace``, or the unknown namespace if none is given.
        """
        ns = namespace or NameSpace.UNKNOWN
        result = []
        for type_name in types:
            measure = self.measures.get(type_name)
            if measure is not None:
                result.append(measure.clone(type=MeasureType(ns, measure.type.name)))
        return result

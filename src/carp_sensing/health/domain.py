"""Health data measure and datum.

Collects data points from the platform health store (Apple HealthKit /
Google Fit). The store itself is an external collaborator; this module only
describes what to collect and how a collected data point is encoded.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional

from ..domain.datum import CARPDatum, DataFormat
from ..domain.measures import Measure, NameSpace
from ..domain.serialization import (
    SerializationRegistry,
    encoded_field,
    optional_datetime,
    optional_field,
    require_field,
)

logger = logging.getLogger(__name__)

HEALTH = "health"


class HealthDataType:
    """A subset of the health data types offered by the health store."""
    BODY_FAT_PERCENTAGE = "BODY_FAT_PERCENTAGE"
    HEIGHT = "HEIGHT"
    WEIGHT = "WEIGHT"
    BODY_MASS_INDEX = "BODY_MASS_INDEX"
    WAIST_CIRCUMFERENCE = "WAIST_CIRCUMFERENCE"
    STEPS = "STEPS"
    BASAL_ENERGY_BURNED = "BASAL_ENERGY_BURNED"
    ACTIVE_ENERGY_BURNED = "ACTIVE_ENERGY_BURNED"
    HEART_RATE = "HEART_RATE"
    BODY_TEMPERATURE = "BODY_TEMPERATURE"
    BLOOD_PRESSURE_SYSTOLIC = "BLOOD_PRESSURE_SYSTOLIC"
    BLOOD_PRESSURE_DIASTOLIC = "BLOOD_PRESSURE_DIASTOLIC"
    RESTING_HEART_RATE = "RESTING_HEART_RATE"
    BLOOD_OXYGEN = "BLOOD_OXYGEN"
    BLOOD_GLUCOSE = "BLOOD_GLUCOSE"


@dataclass
class HealthMeasure(Measure):
    """Which health data type to collect, and how far back in time.

    Attributes:
        health_data_type: One of ``HealthDataType``
        duration: Look-back window in ms, e.g. one day
    """

    KIND = "HealthMeasure"

    health_data_type: Optional[str] = encoded_field()
    duration: Optional[int] = encoded_field()

    def __post_init__(self):
        if self.health_data_type is None or self.duration is None:
            raise ValueError("HealthMeasure requires health_data_type and duration")

    @classmethod
    def _fields_from_dict(cls, data: Dict[str, Any], registry: SerializationRegistry) -> Dict[str, Any]:
        values = super()._fields_from_dict(data, registry)
        values.update(
            health_data_type=require_field(data, "health_data_type", str),
            duration=require_field(data, "duration", int),
        )
        return values


@dataclass
class HealthDatum(CARPDatum):
    """One health data point.

    The format is ``carp.health.<data_type>`` with the data type in lower
    case, e.g. ``carp.health.steps``.
    """

    KIND = "HealthDatum"
    FORMAT = DataFormat(NameSpace.CARP, HEALTH)

    value: Optional[float] = None
    unit: Optional[str] = None
    date_from: Optional[datetime] = None
    date_to: Optional[datetime] = None
    data_type: Optional[str] = None
    platform: Optional[str] = None

    @property
    def format(self) -> DataFormat:
        if self.data_type is None:
            return self.FORMAT
        return DataFormat(NameSpace.CARP, f"{HEALTH}.{self.data_type.lower()}")

    @classmethod
    def _fields_from_dict(cls, data: Dict[str, Any], registry: SerializationRegistry) -> Dict[str, Any]:
        values = super()._fields_from_dict(data, registry)
        values.update(
            value=optional_field(data, "value", float),
            unit=optional_field(data, "unit", str),
            date_from=optional_datetime(data, "date_from"),
            date_to=optional_datetime(data, "date_to"),
            data_type=optional_field(data, "data_type", str),
            platform=optional_field(data, "platform", str),
        )
        return values


def register_health_types(registry: SerializationRegistry):
    """Install the health measure and datum into ``registry``."""
    registry.register_type(HealthMeasure)
    registry.register_type(HealthDatum)

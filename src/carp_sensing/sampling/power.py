"""Power-aware sampling.

The battery level is reported by the host (an external signal). As it drops
below configured thresholds the study is adapted to lighter sampling
schemas, and restored when the device is recharged:

    level >= LIGHT_SAMPLING_LEVEL     -> normal (study as authored)
    level >= MINIMUM_SAMPLING_LEVEL   -> light
    level >= NO_SAMPLING_LEVEL        -> minimum
    below                             -> none
"""

import logging
from typing import Optional

from ..config import Config
from ..domain.study import Study
from .schemas import SamplingSchema, SamplingSchemaType

logger = logging.getLogger(__name__)


class PowerAwarenessState:
    """Battery thresholds for switching sampling schema."""

    def __init__(
        self,
        light_level: int = Config.LIGHT_SAMPLING_LEVEL,
        minimum_level: int = Config.MINIMUM_SAMPLING_LEVEL,
        no_sampling_level: int = Config.NO_SAMPLING_LEVEL,
    ):
        if not (light_level >= minimum_level >= no_sampling_level >= 0):
            raise ValueError(
                f"Invalid sampling levels: light={light_level}, "
                f"minimum={minimum_level}, none={no_sampling_level}"
            )
        self.light_level = light_level
        self.minimum_level = minimum_level
        self.no_sampling_level = no_sampling_level

    def schema_type_for(self, battery_level: float) -> SamplingSchemaType:
        """Map a battery percentage to a sampling schema type."""
        if battery_level >= self.light_level:
            return SamplingSchemaType.NORMAL
        if battery_level >= self.minimum_level:
            return SamplingSchemaType.LIGHT
        if battery_level >= self.no_sampling_level:
            return SamplingSchemaType.MINIMUM
        return SamplingSchemaType.NONE


class PowerAwareAdapter:
    """Adapts a study to the battery level.

    The study is only adapted when the battery level crosses into another
    state, and always from its authored baseline (``restore=True``). With a
    full battery the study runs with ``full_schema_type``, normally the
    study's own sampling strategy.
    """

    def __init__(
        self,
        study: Study,
        namespace: Optional[str] = None,
        state: Optional[PowerAwarenessState] = None,
        full_schema_type=SamplingSchemaType.NORMAL,
    ):
        self.study = study
        self.namespace = namespace or Config.DEFAULT_NAMESPACE
        self.state = state or PowerAwarenessState()
        self.full_schema_type = SamplingSchemaType(full_schema_type)
        self.current: SamplingSchemaType = self.full_schema_type

    def on_battery_level(self, battery_level: float) -> SamplingSchemaType:
        """Handle a battery level update.

        Args:
            battery_level: Battery percentage (0-100)

        Returns:
            The schema type in effect after the update
        """
        if not 0 <= battery_level <= 100:
            raise ValueError(f"Battery level must be within 0-100, got {battery_level}")

        schema_type = self.state.schema_type_for(battery_level)
        if schema_type == SamplingSchemaType.NORMAL:
            schema_type = self.full_schema_type
        if schema_type == self.current:
            return self.current

        logger.info(
            f"Battery at {battery_level}%: switching sampling from "
            f"{self.current.value} to {schema_type.value}"
        )
        SamplingSchema.from_type(schema_type, namespace=self.namespace).adapt(self.study, restore=True)
        self.current = schema_type
        return self.current

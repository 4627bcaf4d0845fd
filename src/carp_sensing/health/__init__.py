"""Health data sampling extension.

Usage:
    from carp_sensing.domain import create_registry
    from carp_sensing.health import register_health_types

    registry = create_registry(register_health_types)
"""

from .domain import (
    HEALTH,
    HealthDataType,
    HealthMeasure,
    HealthDatum,
    register_health_types,
)

__all__ = [
    "HEALTH",
    "HealthDataType",
    "HealthMeasure",
    "HealthDatum",
    "register_health_types",
]

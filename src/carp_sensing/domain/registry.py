"""Registration of the built-in domain types."""

import logging
from typing import Callable

from .datum import DATUM_TYPES
from .measures import MEASURE_TYPES, MeasureType
from .serialization import SerializationRegistry
from .study import END_POINT_TYPES, Study
from .tasks import TRIGGER_TYPES, Task

logger = logging.getLogger(__name__)

Installer = Callable[[SerializationRegistry], None]


def register_domain_types(registry: SerializationRegistry):
    """Register every built-in entity type with ``registry``."""
    for entity_class in (MeasureType, Task, Study) + MEASURE_TYPES + TRIGGER_TYPES + END_POINT_TYPES + DATUM_TYPES:
        registry.register_type(entity_class)


def create_registry(*installers: Installer) -> SerializationRegistry:
    """Build and seal a registry with the built-in types.

    Args:
        installers: Extra registration functions, run after the built-in
            types so they may override them (e.g. ``register_health_types``)

    Returns:
        A sealed SerializationRegistry
    """
    registry = SerializationRegistry()
    register_domain_types(registry)
    for install in installers:
        install(registry)
    registry.seal()
    logger.debug(f"Serialization registry sealed with {len(registry.kinds)} kinds")
    return registry

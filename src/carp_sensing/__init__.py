"""Study configuration and sampling for mobile sensing.

A study describes what to measure (measures), when (triggers and tasks),
at which intensity (sampling schemas) and where the collected data goes
(data managers). Studies round-trip through a tagged JSON format.

Usage:
    from carp_sensing.domain import create_registry, Study
    from carp_sensing.sampling import SamplingSchema

    registry = create_registry()
    study = registry.decode_json(text, Study)
    SamplingSchema.light().adapt(study)
"""

from .errors import (
    CarpSensingError,
    UnknownVariantError,
    MalformedFieldError,
    RegistryError,
    ManagerNotFoundError,
)

__version__ = "0.1.0"

__all__ = [
    "CarpSensingError",
    "UnknownVariantError",
    "MalformedFieldError",
    "RegistryError",
    "ManagerNotFoundError",
]

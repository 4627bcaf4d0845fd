"""Sampling schemas, power awareness and privacy schemas."""

from .schemas import SamplingSchema, SamplingSchemaType
from .power import PowerAwarenessState, PowerAwareAdapter
from .privacy import PrivacySchema

__all__ = [
    "SamplingSchema",
    "SamplingSchemaType",
    "PowerAwarenessState",
    "PowerAwareAdapter",
    "PrivacySchema",
]

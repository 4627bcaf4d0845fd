"""Tagged entity base class and the serialization registry.

Every serializable domain object derives from ``Entity`` and carries a
``kind`` discriminator. Decoding a JSON object tree dispatches on that
discriminator through a ``SerializationRegistry`` which maps each kind to a
decoder function.

JSON conventions:
- Keys are lower snake case and match the dataclass field names.
- ``kind`` is always written first.
- Optional fields that are ``None`` or equal to their default are omitted on
  encode and defaulted on decode; an explicitly present default is accepted.
"""

import copy
import json
import logging
from dataclasses import field, fields, MISSING
from datetime import datetime
from typing import Any, Callable, ClassVar, Dict, List, Optional, Tuple, Type

from ..errors import MalformedFieldError, RegistryError, UnknownVariantError

logger = logging.getLogger(__name__)

KIND_KEY = "kind"

Decoder = Callable[[Dict[str, Any], "SerializationRegistry"], "Entity"]

_TYPE_NAMES = {
    int: "integer",
    float: "number",
    str: "string",
    bool: "boolean",
    dict: "object",
    list: "array",
}


def _describe(expected: type) -> str:
    return _TYPE_NAMES.get(expected, expected.__name__)


def _matches(value: Any, expected: type) -> bool:
    # bool is a subclass of int but never accepted as a number
    if expected is float:
        return isinstance(value, (int, float)) and not isinstance(value, bool)
    if expected is int:
        return isinstance(value, int) and not isinstance(value, bool)
    return isinstance(value, expected)


def check_field(key: str, value: Any, expected: type) -> Any:
    """Validate a single decoded value, widening int to float where asked."""
    if not _matches(value, expected):
        raise MalformedFieldError(key, _describe(expected), value)
    if expected is float:
        return float(value)
    return value


def require_field(data: Dict[str, Any], key: str, expected: type) -> Any:
    """Return a required field or raise MalformedFieldError."""
    if data.get(key) is None:
        raise MalformedFieldError(key, _describe(expected), data.get(key))
    return check_field(key, data[key], expected)


def optional_field(data: Dict[str, Any], key: str, expected: type, default: Any = None) -> Any:
    """Return an optional field, or ``default`` when absent or null."""
    value = data.get(key)
    if value is None:
        return default
    return check_field(key, value, expected)


def optional_datetime(data: Dict[str, Any], key: str) -> Optional[datetime]:
    """Parse an optional ISO 8601 timestamp."""
    value = optional_field(data, key, str)
    if value is None:
        return None
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        raise MalformedFieldError(key, "ISO 8601 datetime", value) from None


def require_datetime(data: Dict[str, Any], key: str) -> datetime:
    """Parse a required ISO 8601 timestamp."""
    value = optional_datetime(data, key)
    if value is None:
        raise MalformedFieldError(key, "ISO 8601 datetime", None)
    return value


def encoded_field(default: Any = None):
    """A field with a default that is still always written when set.

    Used for fields that are required on decode but need a default to keep
    dataclass field ordering valid.
    """
    return field(default=default, metadata={"always_encode": True})


def optional_string_map(data: Dict[str, Any], key: str) -> Dict[str, str]:
    """Parse an optional mapping of string to string."""
    value = optional_field(data, key, dict, default={})
    for name, item in value.items():
        if not isinstance(item, str):
            raise MalformedFieldError(f"{key}.{name}", "string", item)
    return dict(value)


def decode_entity_list(
    data: Dict[str, Any],
    key: str,
    registry: "SerializationRegistry",
    expected: Type["Entity"],
) -> list:
    """Decode an optional array of polymorphic entities."""
    items = optional_field(data, key, list, default=[])
    return [registry.decode(item, expected) for item in items]


def encode_value(value: Any) -> Any:
    """Convert a field value to its JSON-compatible representation."""
    if isinstance(value, Entity):
        return value.to_dict()
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, (list, tuple)):
        return [encode_value(item) for item in value]
    if isinstance(value, dict):
        return {key: encode_value(item) for key, item in value.items()}
    return value


def _is_default(field, value: Any) -> bool:
    if value is None:
        return True
    if field.metadata.get("always_encode"):
        return False
    if field.default is not MISSING:
        return value == field.default
    if field.default_factory is not MISSING:
        return value == field.default_factory()
    return False


class Entity:
    """Base class of all polymorphic, serializable domain objects.

    Concrete subclasses are dataclasses. Set ``KIND`` to the discriminator
    used in JSON and extend ``_fields_from_dict`` to decode the fields a
    subclass adds. ``POLYMORPHIC`` is False for entity types that have no
    variants, which lets their ``kind`` be omitted in JSON input.
    """

    KIND: ClassVar[str] = "Entity"
    POLYMORPHIC: ClassVar[bool] = True
    IMMUTABLE_FIELDS: ClassVar[Tuple[str, ...]] = ()

    def __setattr__(self, name: str, value: Any):
        if name in self.IMMUTABLE_FIELDS and name in self.__dict__:
            raise AttributeError(f"{type(self).__name__}.{name} is immutable")
        super().__setattr__(name, value)

    def to_dict(self) -> Dict[str, Any]:
        """Encode to a JSON-compatible dictionary."""
        result = {KIND_KEY: self.KIND}
        for field in fields(self):
            if not field.init:
                continue
            value = getattr(self, field.name)
            if _is_default(field, value):
                continue
            result[field.name] = encode_value(value)
        return result

    @classmethod
    def from_dict(cls, data: Dict[str, Any], registry: "SerializationRegistry") -> "Entity":
        """Decode an instance of this class or one of its variants."""
        return registry.decode(data, expected=cls)

    @classmethod
    def _construct(cls, data: Dict[str, Any], registry: "SerializationRegistry") -> "Entity":
        return cls(**cls._fields_from_dict(data, registry))

    @classmethod
    def _fields_from_dict(cls, data: Dict[str, Any], registry: "SerializationRegistry") -> Dict[str, Any]:
        return {}

    def clone(self, **changes) -> "Entity":
        """Return a deep value copy, optionally replacing some fields."""
        values = {
            field.name: copy.deepcopy(getattr(self, field.name))
            for field in fields(self)
            if field.init and field.name not in changes
        }
        values.update(changes)
        return type(self)(**values)

    def __deepcopy__(self, memo):
        return self.clone()


class SerializationRegistry:
    """Maps discriminator strings to decoder functions.

    Usage:
        registry = SerializationRegistry()
        registry.register_type(PeriodicMeasure)
        registry.seal()
        measure = registry.decode(json_object)

    All registrations happen before ``seal()``; decoding is only allowed
    afterwards.
    """

    def __init__(self):
        self._decoders: Dict[str, Decoder] = {}
        self._sealed = False

    @property
    def sealed(self) -> bool:
        return self._sealed

    @property
    def kinds(self) -> List[str]:
        return sorted(self._decoders)

    def register(self, kind: str, decoder: Decoder):
        """Register a decoder for a discriminator. Last registration wins."""
        if self._sealed:
            raise RegistryError(f"Cannot register {kind!r}: registry is sealed")
        if kind in self._decoders:
            logger.debug(f"Overwriting decoder for kind {kind}")
        self._decoders[kind] = decoder

    def register_type(self, entity_class: Type[Entity]) -> Type[Entity]:
        """Register an Entity subclass under its own KIND."""
        self.register(entity_class.KIND, entity_class._construct)
        logger.debug(f"Registered entity type: {entity_class.__name__} ({entity_class.KIND})")
        return entity_class

    def seal(self) -> "SerializationRegistry":
        """End the registration phase."""
        self._sealed = True
        return self

    def decode(self, data: Any, expected: Optional[Type[Entity]] = None) -> Entity:
        """Decode a JSON object tree into a typed entity.

        Raises:
            RegistryError: if the registry is not sealed yet
            UnknownVariantError: if the discriminator is absent or unknown
            MalformedFieldError: if a field is missing or malformed
        """
        if not self._sealed:
            raise RegistryError("Registry must be sealed before decoding")

        if not isinstance(data, dict):
            name = expected.__name__ if expected else "entity"
            raise MalformedFieldError(name, "object", data)

        kind = data.get(KIND_KEY)
        if kind is None and expected is not None and not expected.POLYMORPHIC:
            kind = expected.KIND
        if kind is None or kind not in self._decoders:
            raise UnknownVariantError(kind)

        entity = self._decoders[kind](data, self)

        if expected is not None and not isinstance(entity, expected):
            raise MalformedFieldError(KIND_KEY, expected.__name__, kind)
        return entity

    def decode_json(self, text: str, expected: Optional[Type[Entity]] = None) -> Entity:
        """Decode an entity from a JSON string."""
        return self.decode(json.loads(text), expected)

    @staticmethod
    def encode_json(entity: Entity, indent: Optional[int] = 2) -> str:
        """Encode an entity to a JSON string."""
        return json.dumps(entity.to_dict(), indent=indent)

"""Exception hierarchy for study configuration and runtime."""

from typing import Any, Optional


class CarpSensingError(Exception):
    """Base class for all errors raised by this package."""


class UnknownVariantError(CarpSensingError):
    """Discriminator absent or not registered during decode."""

    def __init__(self, kind: Optional[str]):
        self.kind = kind
        if kind is None:
            message = "Missing 'kind' discriminator"
        else:
            message = f"Unknown variant: {kind!r}"
        super().__init__(message)


class MalformedFieldError(CarpSensingError):
    """A field is missing or has the wrong shape."""

    def __init__(self, field: str, expected: str, actual: Any):
        self.field = field
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Malformed field {field!r}: expected {expected}, got {actual!r}"
        )


class RegistryError(CarpSensingError):
    """Registry used outside of its registration phase."""


class ManagerNotFoundError(CarpSensingError):
    """No data manager registered for a data end point type."""

    def __init__(self, manager_type: Optional[str]):
        self.manager_type = manager_type
        super().__init__(f"No data manager registered for type {manager_type!r}")

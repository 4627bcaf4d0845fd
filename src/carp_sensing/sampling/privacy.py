"""Privacy schemas.

A ``PrivacySchema`` holds one transformer per data format name. Data units
of a format with a transformer are replaced by the transformer's output
before they reach a data manager; all other data units pass unchanged.
"""

import logging
from typing import Callable, Dict

from ..data_manager.stream import DatumStream
from ..domain.datum import Datum

logger = logging.getLogger(__name__)

DatumTransformer = Callable[[Datum], Datum]


class PrivacySchema:
    """Maps a data format name (e.g. ``carp.location``) to a transformer."""

    def __init__(self):
        self.transformers: Dict[str, DatumTransformer] = {}

    @classmethod
    def none(cls) -> "PrivacySchema":
        """A schema with no protection."""
        return cls()

    @classmethod
    def full(cls) -> "PrivacySchema":
        """Starting point for full protection.

        No protectors ship with the package; hosts register theirs with
        ``add_protector``.
        """
        return cls()

    def add_protector(self, format_name: str, protector: DatumTransformer) -> "PrivacySchema":
        self.transformers[format_name] = protector
        return self

    def protect(self, datum: Datum) -> Datum:
        transformer = self.transformers.get(str(datum.format))
        return transformer(datum) if transformer is not None else datum

    def protect_stream(self, stream: DatumStream) -> DatumStream:
        """A stream carrying the protected version of every data unit."""
        if not self.transformers:
            return stream
        logger.debug(f"Protecting stream '{stream.name}' with {len(self.transformers)} transformers")
        return stream.map(self.protect, name=f"{stream.name}.protected")

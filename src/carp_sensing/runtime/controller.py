"""Study Controller for running a study.

This module ties a study to its runtime collaborators: the sampling schema
named by the study, the data manager resolved from its data end point, a
privacy schema and power-aware adaptation.
"""

import logging
from typing import Optional

from ..config import Config
from ..data_manager import DataManager, DataManagerRegistry, DatumStream
from ..domain.datum import Datum
from ..domain.study import Study
from ..sampling import (
    PowerAwareAdapter,
    PowerAwarenessState,
    PrivacySchema,
    SamplingSchema,
    SamplingSchemaType,
)

logger = logging.getLogger(__name__)


class StudyController:
    """Runs one study.

    Provides:
    - Initial adaptation to the study's sampling strategy
    - Resolution and lifecycle of the study's data manager
    - A data stream that sensor sources push data units into
    - Power-aware re-adaptation on battery level updates
    """

    def __init__(
        self,
        study: Study,
        managers: DataManagerRegistry,
        privacy_schema: Optional[PrivacySchema] = None,
        power_state: Optional[PowerAwarenessState] = None,
        namespace: Optional[str] = None,
    ):
        """Initialize the controller.

        Args:
            study: Study to run
            managers: Registry used to resolve the study's data manager
            privacy_schema: Applied to every data unit (defaults to none)
            power_state: Battery thresholds for power-aware sampling
            namespace: Namespace of schema measures (defaults to Config.DEFAULT_NAMESPACE)
        """
        self.study = study
        self.managers = managers
        self.privacy_schema = privacy_schema or PrivacySchema.none()
        self.power_state = power_state or PowerAwarenessState()
        self.namespace = namespace or Config.DEFAULT_NAMESPACE
        self.data = DatumStream(name=f"study-{study.id}")
        self.data_manager: Optional[DataManager] = None
        self.power_adapter: Optional[PowerAwareAdapter] = None
        self._initialized = False

    @property
    def is_initialized(self) -> bool:
        return self._initialized

    def initialize(self):
        """Adapt the study and start its data manager.

        Raises:
            ValueError: if the study's sampling strategy is unknown
            ManagerNotFoundError: if no data manager handles the study's end point
        """
        if self._initialized:
            raise RuntimeError(f"Study {self.study.id} already initialized")

        schema_type = SamplingSchemaType(self.study.sampling_strategy)
        end_point = self.study.data_end_point
        manager = self.managers.require(end_point.type if end_point is not None else None)

        self.adapt(SamplingSchema.from_type(schema_type, namespace=self.namespace))
        self.power_adapter = PowerAwareAdapter(
            self.study,
            namespace=self.namespace,
            state=self.power_state,
            full_schema_type=schema_type,
        )

        manager.initialize(self.study, self.privacy_schema.protect_stream(self.data))
        self.data_manager = manager
        self._initialized = True
        logger.info(f"Study {self.study.id} initialized with data manager {manager.type}")

    def adapt(self, schema: SamplingSchema, restore: bool = True):
        """Adapt the study's measures to ``schema``."""
        schema.adapt(self.study, restore=restore)

    def on_battery_level(self, battery_level: float) -> SamplingSchemaType:
        """Forward a battery level update to power-aware adaptation."""
        if self.power_adapter is None:
            raise RuntimeError("Study controller not initialized")
        return self.power_adapter.on_battery_level(battery_level)

    def add_datum(self, datum: Datum):
        """Push a collected data unit into the study's data stream."""
        self.data.add(datum)

    def dispose(self):
        """Finish the data stream and close the data manager."""
        self.data.close()
        if self.data_manager is not None:
            self.data_manager.close()
        self._initialized = False
        logger.info(f"Study {self.study.id} disposed")

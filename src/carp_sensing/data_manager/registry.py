"""Registry of data managers, keyed by data end point type."""

import logging
from typing import Dict, List, Optional

from ..errors import ManagerNotFoundError
from .base import DataManager

logger = logging.getLogger(__name__)


class DataManagerRegistry:
    """Maps a data end point type to the data manager handling it."""

    def __init__(self):
        self._managers: Dict[str, DataManager] = {}

    def register(self, manager: DataManager) -> DataManager:
        """Register ``manager`` under its type, replacing any earlier one."""
        if manager.type in self._managers:
            logger.debug(f"Replacing data manager for type {manager.type}")
        self._managers[manager.type] = manager
        logger.debug(f"Registered data manager: {type(manager).__name__} ({manager.type})")
        return manager

    def lookup(self, manager_type: Optional[str]) -> Optional[DataManager]:
        """Get the manager for a type, or None if none is registered."""
        return self._managers.get(manager_type)

    def require(self, manager_type: Optional[str]) -> DataManager:
        """Get the manager for a type.

        Raises:
            ManagerNotFoundError: if no manager is registered for the type
        """
        manager = self.lookup(manager_type)
        if manager is None:
            raise ManagerNotFoundError(manager_type)
        return manager

    def list_types(self) -> List[str]:
        return sorted(self._managers)

    def __contains__(self, manager_type: str) -> bool:
        return manager_type in self._managers

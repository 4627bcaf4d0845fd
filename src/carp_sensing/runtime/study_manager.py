"""Study managers retrieve study definitions by id."""

import json
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import List, Optional

from ..config import Config
from ..domain import SerializationRegistry, Study, create_registry

logger = logging.getLogger(__name__)


class StudyManager(ABC):
    """Interface for getting a Study."""

    @abstractmethod
    def initialize(self):
        """Prepare the manager for use."""
        pass

    @abstractmethod
    def get_study(self, study_id: str) -> Study:
        """Get a study by its id."""
        pass


class FileStudyManager(StudyManager):
    """Loads studies from ``{study_dir}/{study_id}.json``."""

    def __init__(self, study_dir: Optional[str] = None, registry: Optional[SerializationRegistry] = None):
        self.study_dir = Path(study_dir or Config.STUDY_DIR)
        self.registry = registry

    def initialize(self):
        self.study_dir.mkdir(parents=True, exist_ok=True)
        if self.registry is None:
            self.registry = create_registry()
        logger.info(f"FileStudyManager initialized: study_dir={self.study_dir}")

    def get_study(self, study_id: str) -> Study:
        """Load and decode a study.

        Raises:
            FileNotFoundError: if there is no file for the study
            UnknownVariantError, MalformedFieldError: if the file is invalid
        """
        path = self.study_dir / f"{study_id}.json"
        with open(path, 'r') as f:
            data = json.load(f)
        study = Study.from_dict(data, self.registry)
        logger.debug(f"Loaded study {study.id} from {path}")
        return study

    def save_study(self, study: Study) -> bool:
        """Save a study as JSON.

        Returns:
            True if successful
        """
        path = self.study_dir / f"{study.id}.json"
        try:
            with open(path, 'w') as f:
                json.dump(study.to_dict(), f, indent=2)
            logger.debug(f"Saved study to {path}")
            return True
        except OSError as e:
            logger.error(f"Failed to save study to {path}: {e}")
            return False

    def list_studies(self) -> List[str]:
        """Ids of all stored studies."""
        return sorted(path.stem for path in self.study_dir.glob("*.json"))

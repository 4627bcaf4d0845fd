"""Study runtime: controller and study managers."""

from .controller import StudyController
from .study_manager import StudyManager, FileStudyManager

__all__ = [
    "StudyController",
    "StudyManager",
    "FileStudyManager",
]

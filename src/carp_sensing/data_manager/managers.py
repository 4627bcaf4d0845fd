"""Built-in data managers.

- ``ConsoleDataManager`` (PRINT): prints every data unit as JSON.
- ``FileDataManager`` (FILE): stores data units in JSON files.

File Storage Protocol:
======================
Files are written to ``{data_dir}/{study_id}/``. Each file holds a JSON
array of encoded data units and is named ``carp-data-{timestamp}.json``,
e.g. ``carp-data-2025-01-23T10-30-00-123456.json``.

A file is finished when it grows beyond the end point's ``buffer_size``,
when the data stream ends, or when the manager is closed. Finished files
are zipped to ``.json.zip`` if the end point asks for it. An MD5 checksum
is recorded for every finished file in ``finished_files``.
"""

import json
import hashlib
import logging
import zipfile
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, TextIO

from ..config import Config
from ..domain.datum import Datum
from ..domain.study import DataEndPointType, FileDataEndPoint, Study
from .base import AbstractDataManager
from .registry import DataManagerRegistry
from .stream import DatumStream

logger = logging.getLogger(__name__)


class ConsoleDataManager(AbstractDataManager):
    """Prints data units to the console."""

    type = DataEndPointType.PRINT

    def __init__(self, output: Callable[[str], None] = print):
        super().__init__()
        self._output = output
        self.count = 0

    def on_datum(self, datum: Datum):
        self.count += 1
        self._output(json.dumps(datum.to_dict(), indent=1))

    def on_error(self, error: Any):
        logger.error(f"Data stream error: {error}")

    def on_done(self):
        logger.info(f"Data stream done after {self.count} data units")


def generate_filename(timestamp: Optional[datetime] = None) -> str:
    """Generate a data filename following the naming convention."""
    if timestamp is None:
        timestamp = datetime.now(timezone.utc)
    return f"carp-data-{timestamp.strftime('%Y-%m-%dT%H-%M-%S-%f')}.json"


class FileDataManager(AbstractDataManager):
    """Stores data units as JSON arrays in local files."""

    type = DataEndPointType.FILE

    def __init__(self, data_dir: Optional[str] = None):
        """Initialize the file data manager.

        Args:
            data_dir: Base directory for data files (defaults to Config.DATA_DIR)
        """
        super().__init__()
        self.data_dir = Path(data_dir or Config.DATA_DIR)
        self.end_point = FileDataEndPoint()
        self.finished_files: List[Dict[str, Any]] = []
        self._file: Optional[TextIO] = None
        self._path: Optional[Path] = None
        self._count_in_file = 0

    @property
    def study_dir(self) -> Path:
        return self.data_dir / self.study.id

    @property
    def current_path(self) -> Optional[Path]:
        return self._path

    def initialize(self, study: Study, data: DatumStream):
        if isinstance(study.data_end_point, FileDataEndPoint):
            self.end_point = study.data_end_point
        if self.end_point.encrypt:
            logger.warning("Encryption of data files is not supported; files are stored unencrypted")

        super().initialize(study, data)
        logger.info(f"FileDataManager writing to {self.study_dir} (buffer_size={self.end_point.buffer_size})")

    def on_datum(self, datum: Datum):
        try:
            self._write(datum)
            if self._path.stat().st_size > self.end_point.buffer_size:
                self._finish_file()
        except OSError as e:
            logger.error(f"Failed to write data unit {datum.id}: {e}")

    def on_error(self, error: Any):
        logger.error(f"Data stream error: {error}")

    def on_done(self):
        self._finish_file()

    def on_close(self):
        self._finish_file()

    def _open_file(self):
        self.study_dir.mkdir(parents=True, exist_ok=True)
        self._path = self.study_dir / generate_filename()
        self._file = open(self._path, 'w')
        self._file.write("[\n")
        self._count_in_file = 0
        logger.debug(f"Opened data file {self._path.name}")

    def _write(self, datum: Datum):
        if self._file is None:
            self._open_file()
        if self._count_in_file > 0:
            self._file.write(",\n")
        self._file.write(json.dumps(datum.to_dict()))
        self._file.flush()
        self._count_in_file += 1

    def _finish_file(self):
        if self._file is None:
            return

        self._file.write("\n]\n")
        self._file.close()
        path = self._path
        num_samples = self._count_in_file
        self._file = None
        self._path = None

        if self.end_point.zip:
            path = self._zip(path)

        info = {
            "filename": path.name,
            "num_samples": num_samples,
            "file_size_bytes": path.stat().st_size,
            "checksum": self._compute_checksum(path),
        }
        self.finished_files.append(info)
        logger.info(f"Finished data file {path.name} ({num_samples} data units)")

    def _zip(self, path: Path) -> Path:
        zip_path = path.with_name(path.name + ".zip")
        with zipfile.ZipFile(zip_path, 'w', zipfile.ZIP_DEFLATED) as archive:
            archive.write(path, arcname=path.name)
        path.unlink()
        return zip_path

    def _compute_checksum(self, path: Path) -> str:
        """Compute MD5 checksum of a file."""
        hash_md5 = hashlib.md5()
        with open(path, "rb") as f:
            for chunk in iter(lambda: f.read(4096), b""):
                hash_md5.update(chunk)
        return hash_md5.hexdigest()


def create_default_registry(data_dir: Optional[str] = None) -> DataManagerRegistry:
    """A registry with the console and file data managers."""
    registry = DataManagerRegistry()
    registry.register(ConsoleDataManager())
    registry.register(FileDataManager(data_dir=data_dir))
    return registry

"""Tests for data streams, data managers and the data manager registry."""

import hashlib
import json
import logging
import zipfile

import pytest

from carp_sensing.data_manager import (
    AbstractDataManager,
    ConsoleDataManager,
    DataManagerEventTypes,
    DataManagerRegistry,
    DataManagerState,
    DatumStream,
    FileDataManager,
    create_default_registry,
)
from carp_sensing.domain import AccelerometerDatum, FileDataEndPoint, Study
from carp_sensing.errors import ManagerNotFoundError


class ListDataManager(AbstractDataManager):
    """Keeps everything it receives in memory."""

    type = "LIST"

    def __init__(self):
        super().__init__()
        self.data = []
        self.errors = []
        self.done = 0

    def on_datum(self, datum):
        self.data.append(datum)

    def on_error(self, error):
        self.errors.append(error)

    def on_done(self):
        self.done += 1


@pytest.fixture
def manager():
    return ListDataManager()


@pytest.fixture
def stream():
    return DatumStream()


def record_events(manager):
    events = []
    manager.events.listen(lambda event: events.append(event.type))
    return events


class TestDatumStream:

    def test_broadcast_to_all_listeners(self, stream):
        first, second = [], []
        stream.listen(first.append)
        stream.listen(second.append)
        datum = AccelerometerDatum()

        stream.add(datum)

        assert first == [datum]
        assert second == [datum]
        assert stream.listener_count == 2

    def test_cancel(self, stream):
        received = []
        subscription = stream.listen(received.append)
        subscription.cancel()
        subscription.cancel()

        stream.add(AccelerometerDatum())
        assert received == []
        assert not subscription.active
        assert stream.listener_count == 0

    def test_close_is_idempotent(self, stream):
        done = []
        stream.listen(lambda datum: None, on_done=lambda: done.append(True))

        stream.close()
        stream.close()

        assert done == [True]
        assert stream.closed

    def test_cannot_add_after_close(self, stream):
        stream.close()

        with pytest.raises(RuntimeError):
            stream.add(AccelerometerDatum())
        with pytest.raises(RuntimeError):
            stream.add_error(ValueError("late"))

    def test_listen_after_close_only_gets_done(self, stream):
        stream.close()
        done = []
        subscription = stream.listen(lambda datum: None, on_done=lambda: done.append(True))

        assert done == [True]
        assert not subscription.active

    def test_listener_error_does_not_reach_source(self, stream, caplog):
        received = []

        def failing(datum):
            raise RuntimeError("listener failed")

        stream.listen(failing)
        stream.listen(received.append)

        with caplog.at_level(logging.WARNING):
            stream.add(AccelerometerDatum())

        assert len(received) == 1
        assert "listener failed" in caplog.text

    def test_map(self, stream):
        mapped = stream.map(lambda datum: AccelerometerDatum(x=(datum.x or 0.0) * 2))
        received = []
        mapped.listen(received.append)

        stream.add(AccelerometerDatum(x=1.5))
        stream.close()

        assert received[0].x == 3.0
        assert mapped.closed


class TestDataManagerRegistry:

    def test_register_and_require(self, manager):
        registry = DataManagerRegistry()
        registry.register(manager)

        assert registry.require("LIST") is manager
        assert registry.lookup("LIST") is manager
        assert "LIST" in registry
        assert registry.list_types() == ["LIST"]

    def test_last_registration_wins(self):
        registry = DataManagerRegistry()
        first, second = ListDataManager(), ListDataManager()
        registry.register(first)
        registry.register(second)

        assert registry.require("LIST") is second

    def test_unknown_type(self):
        registry = DataManagerRegistry()

        assert registry.lookup("CARP") is None
        with pytest.raises(ManagerNotFoundError) as exc_info:
            registry.require("CARP")
        assert exc_info.value.manager_type == "CARP"

        with pytest.raises(ManagerNotFoundError):
            registry.require(None)

    def test_default_registry(self, tmp_path):
        registry = create_default_registry(data_dir=str(tmp_path))

        assert registry.list_types() == ["FILE", "PRINT"]
        assert isinstance(registry.require("PRINT"), ConsoleDataManager)
        assert isinstance(registry.require("FILE"), FileDataManager)


class TestDataManagerLifecycle:

    def test_initialize(self, manager, stream, study):
        events = record_events(manager)
        manager.initialize(study, stream)

        datum = AccelerometerDatum()
        stream.add(datum)

        assert manager.state == DataManagerState.INITIALIZED
        assert manager.is_initialized
        assert manager.study is study
        assert manager.data == [datum]
        assert events == [DataManagerEventTypes.INITIALIZED]

    def test_initialize_twice_fails(self, manager, stream, study):
        manager.initialize(study, stream)

        with pytest.raises(RuntimeError):
            manager.initialize(study, stream)

    def test_close_is_idempotent(self, manager, stream, study):
        events = record_events(manager)
        manager.initialize(study, stream)

        manager.close()
        manager.close()

        assert manager.state == DataManagerState.CLOSED
        assert events == [
            DataManagerEventTypes.INITIALIZED,
            DataManagerEventTypes.CLOSED,
            DataManagerEventTypes.CLOSED,
        ]

    def test_close_before_initialize(self, manager):
        events = record_events(manager)
        manager.close()

        assert manager.state == DataManagerState.CLOSED
        assert events == [DataManagerEventTypes.CLOSED]

    def test_cannot_initialize_after_close(self, manager, stream, study):
        manager.close()

        with pytest.raises(RuntimeError):
            manager.initialize(study, stream)

    def test_no_data_after_close(self, manager, stream, study):
        manager.initialize(study, stream)
        manager.close()

        stream.add(AccelerometerDatum())

        assert manager.data == []
        assert stream.listener_count == 0

    def test_no_data_when_closed_during_delivery(self, manager, stream, study):
        # the first listener closes the manager before it sees the datum
        stream.listen(lambda datum: manager.close())
        manager.initialize(study, stream)

        stream.add(AccelerometerDatum())

        assert manager.data == []
        assert manager.state == DataManagerState.CLOSED

    def test_late_listener_misses_earlier_events(self, manager, stream, study):
        manager.initialize(study, stream)
        events = record_events(manager)
        manager.close()

        assert events == [DataManagerEventTypes.CLOSED]

    def test_unsubscribe(self, manager, stream, study):
        events = []
        unsubscribe = manager.events.listen(lambda event: events.append(event.type))
        unsubscribe()

        manager.initialize(study, stream)
        assert events == []
        assert manager.events.listener_count == 0

    def test_event_listener_error_is_isolated(self, manager, stream, study):
        events = []

        def failing(event):
            raise RuntimeError("listener failed")

        manager.events.listen(failing)
        manager.events.listen(lambda event: events.append(event.type))

        manager.initialize(study, stream)
        assert events == [DataManagerEventTypes.INITIALIZED]

    def test_stream_error_goes_to_on_error(self, manager, stream, study):
        manager.initialize(study, stream)
        error = ValueError("sensor failed")

        stream.add_error(error)

        assert manager.errors == [error]
        assert manager.state == DataManagerState.INITIALIZED

    def test_stream_done_goes_to_on_done(self, manager, stream, study):
        manager.initialize(study, stream)
        stream.close()

        assert manager.done == 1

    def test_manager_error_does_not_reach_source(self, stream, study):
        class FailingDataManager(ListDataManager):
            def on_datum(self, datum):
                raise RuntimeError("disk full")

        manager = FailingDataManager()
        manager.initialize(study, stream)

        stream.add(AccelerometerDatum())
        assert manager.is_initialized


class TestConsoleDataManager:

    def test_prints_json(self, stream, study):
        lines = []
        manager = ConsoleDataManager(output=lines.append)
        manager.initialize(study, stream)

        stream.add(AccelerometerDatum(x=1.0, y=2.0, z=3.0))
        manager.close()

        assert manager.count == 1
        printed = json.loads(lines[0])
        assert printed["kind"] == "AccelerometerDatum"
        assert printed["x"] == 1.0


class TestFileDataManager:

    @pytest.fixture
    def file_study(self):
        return Study(id="file-study", data_end_point=FileDataEndPoint(zip=False))

    def test_writes_json_array(self, tmp_path, stream, file_study):
        manager = FileDataManager(data_dir=str(tmp_path))
        manager.initialize(file_study, stream)

        for x in (1.0, 2.0, 3.0):
            stream.add(AccelerometerDatum(x=x))
        manager.close()

        assert len(manager.finished_files) == 1
        info = manager.finished_files[0]
        path = tmp_path / "file-study" / info["filename"]
        assert info["filename"].startswith("carp-data-")
        assert info["filename"].endswith(".json")
        assert info["num_samples"] == 3
        assert info["file_size_bytes"] == path.stat().st_size
        assert info["checksum"] == hashlib.md5(path.read_bytes()).hexdigest()

        with open(path) as f:
            data = json.load(f)
        assert [item["x"] for item in data] == [1.0, 2.0, 3.0]
        assert all(item["kind"] == "AccelerometerDatum" for item in data)

    def test_zips_finished_files(self, tmp_path, stream):
        study = Study(id="zipped", data_end_point=FileDataEndPoint(zip=True))
        manager = FileDataManager(data_dir=str(tmp_path))
        manager.initialize(study, stream)

        stream.add(AccelerometerDatum(x=1.0))
        manager.close()

        info = manager.finished_files[0]
        assert info["filename"].endswith(".json.zip")
        with zipfile.ZipFile(tmp_path / "zipped" / info["filename"]) as archive:
            names = archive.namelist()
            assert len(names) == 1
            assert len(json.loads(archive.read(names[0]))) == 1
        assert list((tmp_path / "zipped").glob("*.json")) == []

    def test_rolls_over_when_buffer_full(self, tmp_path, stream):
        study = Study(id="small", data_end_point=FileDataEndPoint(buffer_size=10, zip=False))
        manager = FileDataManager(data_dir=str(tmp_path))
        manager.initialize(study, stream)

        for _ in range(3):
            stream.add(AccelerometerDatum(x=1.0))
        manager.close()

        assert [info["num_samples"] for info in manager.finished_files] == [1, 1, 1]

    def test_stream_done_finishes_file(self, tmp_path, stream, file_study):
        manager = FileDataManager(data_dir=str(tmp_path))
        manager.initialize(file_study, stream)

        stream.add(AccelerometerDatum())
        stream.close()

        assert len(manager.finished_files) == 1
        assert manager.current_path is None

        manager.close()
        assert len(manager.finished_files) == 1

    def test_no_file_without_data(self, tmp_path, stream, file_study):
        manager = FileDataManager(data_dir=str(tmp_path))
        manager.initialize(file_study, stream)
        manager.close()

        assert manager.finished_files == []
        assert not (tmp_path / "file-study").exists()

    def test_default_end_point(self, tmp_path, stream, study):
        manager = FileDataManager(data_dir=str(tmp_path))
        manager.initialize(study, stream)

        assert manager.end_point == FileDataEndPoint()
        assert manager.study_dir == tmp_path / study.id

"""Pytest fixtures for carp_sensing tests."""

import pytest

from carp_sensing.domain import (
    DataEndPoint,
    DataEndPointType,
    ImmediateTrigger,
    Measure,
    MeasureType,
    NameSpace,
    PeriodicMeasure,
    PeriodicTrigger,
    Study,
    Task,
    create_registry,
)
from carp_sensing.health import register_health_types


EXAMPLE_STUDY = {
    "triggers": [
        {
            "kind": "Immediate",
            "tasks": [
                {
                    "name": "T1",
                    "measures": [
                        {
                            "kind": "Measure",
                            "type": {"namespace": "carp", "name": "battery"},
                            "enabled": True,
                        },
                        {
                            "kind": "PeriodicMeasure",
                            "type": {"namespace": "carp", "name": "accelerometer"},
                            "enabled": False,
                            "frequency": 200,
                            "duration": 1,
                        },
                    ],
                }
            ],
        }
    ]
}


@pytest.fixture
def registry():
    """Sealed registry with built-in and health types."""
    return create_registry(register_health_types)


@pytest.fixture
def example_study_json():
    return EXAMPLE_STUDY


def make_study() -> Study:
    """A study touching several measure types across two triggers."""
    carp = NameSpace.CARP
    study = Study(
        id="study-1",
        name="Test study",
        data_end_point=DataEndPoint(type=DataEndPointType.PRINT),
    )
    study.add_trigger_task(
        ImmediateTrigger(),
        Task(name="sensing", measures=[
            PeriodicMeasure(MeasureType(carp, "accelerometer"), enabled=True, frequency=200, duration=5),
            PeriodicMeasure(MeasureType(carp, "light"), enabled=True, frequency=30000, duration=500),
            Measure(MeasureType(carp, "location"), enabled=True),
            Measure(MeasureType(carp, "battery"), enabled=False),
        ]),
    )
    study.add_trigger_task(
        PeriodicTrigger(period=60000),
        Task(name="custom", measures=[
            Measure(MeasureType("custom", "mood"), enabled=True),
        ]),
    )
    return study


@pytest.fixture
def study():
    return make_study()


@pytest.fixture
def baseline_study():
    """A second, identical study to compare against."""
    return make_study()

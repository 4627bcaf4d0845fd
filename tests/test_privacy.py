"""Tests for privacy schemas."""

from carp_sensing.data_manager import DatumStream
from carp_sensing.domain import AccelerometerDatum, LightDatum
from carp_sensing.sampling import PrivacySchema


def blur(datum):
    return AccelerometerDatum(id=datum.id, timestamp=datum.timestamp, x=0.0, y=0.0, z=0.0)


class TestPrivacySchema:

    def test_none_passes_data_through(self):
        schema = PrivacySchema.none()
        datum = AccelerometerDatum(x=1.0)
        stream = DatumStream()

        assert schema.protect(datum) is datum
        assert schema.protect_stream(stream) is stream

    def test_protect_by_format(self):
        schema = PrivacySchema().add_protector("carp.accelerometer", blur)
        accelerometer = AccelerometerDatum(x=1.0, y=2.0, z=3.0)
        light = LightDatum(mean_lux=10.0)

        protected = schema.protect(accelerometer)
        assert (protected.x, protected.y, protected.z) == (0.0, 0.0, 0.0)
        assert protected.id == accelerometer.id
        assert schema.protect(light) is light

    def test_protect_stream(self):
        schema = PrivacySchema().add_protector("carp.accelerometer", blur)
        source = DatumStream("sensors")
        protected = schema.protect_stream(source)
        received = []
        protected.listen(received.append)

        source.add(AccelerometerDatum(x=5.0))
        source.add(LightDatum(mean_lux=1.0))
        source.close()

        assert received[0].x == 0.0
        assert isinstance(received[1], LightDatum)
        assert protected.name == "sensors.protected"
        assert protected.closed

# Tests for ray sensors

import pytest
import numpy as np

from evoracer.env import Sensor, cast_all


class TestSensorCast:

    @pytest.mark.parametrize("distance", [1.0, 37.5, 75.0, 149.0])
    def test_output_is_normalized_distance(self, distance):
        """A wall at distance d reads d / length."""
        sensor = Sensor(0.0, 150.0)
        walls = np.array([[distance, -20.0, distance, 20.0]])
        output = sensor.cast(np.zeros(2), 0.0, walls)
        assert output == pytest.approx(distance / 150.0)
        assert np.allclose(sensor.endpoint, (distance, 0.0))

    def test_no_wall_in_range(self):
        sensor = Sensor(0.0, 150.0)
        walls = np.array([[200.0, -20.0, 200.0, 20.0]])
        assert sensor.cast(np.zeros(2), 0.0, walls) == 1.0
        assert np.allclose(sensor.endpoint, (150.0, 0.0))

    def test_no_walls(self):
        sensor = Sensor(0.0)
        assert sensor.cast(np.zeros(2), 0.0, np.zeros((0, 4))) == 1.0

    def test_nearest_wall_wins(self):
        sensor = Sensor(0.0, 100.0)
        walls = np.array([
            [80.0, -5.0, 80.0, 5.0],
            [30.0, -5.0, 30.0, 5.0],
        ])
        assert sensor.cast(np.zeros(2), 0.0, walls) == pytest.approx(0.3)

    def test_relative_angle(self):
        """Sensor angle is added to the facing angle."""
        sensor = Sensor(np.pi / 2, 100.0)
        walls = np.array([[-10.0, 40.0, 10.0, 40.0]])
        assert sensor.cast(np.zeros(2), 0.0, walls) == pytest.approx(0.4)
        assert sensor.cast(np.zeros(2), np.pi, walls) == 1.0


class TestCastAll:

    def test_matches_individual_casts(self, walls_box):
        angles = np.linspace(-1.0, 1.0, 7)
        batched = [Sensor(a, 150.0) for a in angles]
        single = [Sensor(a, 150.0) for a in angles]
        origin = np.array([40.0, 10.0])

        outputs = cast_all(batched, origin, 0.3, walls_box)
        expected = [s.cast(origin, 0.3, walls_box) for s in single]

        assert np.allclose(outputs, expected)
        for a, b in zip(batched, single):
            assert np.allclose(a.endpoint, b.endpoint)

    def test_outputs_in_unit_range(self, walls_box, rng):
        sensors = [Sensor(a) for a in np.linspace(-np.pi, np.pi, 9)]
        for _ in range(10):
            outputs = cast_all(sensors, rng.uniform(-90, 90, 2), rng.uniform(-np.pi, np.pi), walls_box)
            assert np.all((outputs >= 0.0) & (outputs <= 1.0))

from __future__ import annotations

from dataclasses import dataclass, field
import math
from typing import List

import pytest

from road_sim.geometry_utils import Point
from road_sim.sensors import Sensor, SensorConfig


@dataclass
class StubCarrier:
    x: float = 0.0
    y: float = 0.0
    angle: float = 0.0
    polygon: List[Point] = field(default_factory=list)


def _square(cx: float, cy: float, half: float) -> List[Point]:
    return [
        Point(cx - half, cy - half),
        Point(cx + half, cy - half),
        Point(cx + half, cy + half),
        Point(cx - half, cy + half),
    ]


def test_single_ray_hits_wall_at_half_length() -> None:
    carrier = StubCarrier()
    sensor = Sensor(carrier, SensorConfig(ray_count=1, ray_length=200.0, ray_spread=0.0))
    wall = (Point(-50.0, -100.0), Point(50.0, -100.0))

    sensor.update([wall], [])

    assert len(sensor.readings) == 1
    reading = sensor.readings[0]
    assert reading is not None
    assert reading.offset == 0.5
    assert sensor.normalized_readings() == [0.5]


def test_no_obstacle_reads_zero() -> None:
    sensor = Sensor(StubCarrier())
    sensor.update([], [])
    assert sensor.readings == [None] * 8
    assert sensor.normalized_readings() == [0.0] * 8


def test_obstacle_near_ray_start_reads_close_to_one() -> None:
    sensor = Sensor(StubCarrier(), SensorConfig(ray_count=1, ray_spread=0.0))
    sensor.update([(Point(-10.0, -0.2), Point(10.0, -0.2))], [])
    value = sensor.normalized_readings()[0]
    assert value <= 1.0
    assert math.isclose(value, 1.0, abs_tol=1e-2)


def test_default_fan_is_symmetric_around_heading() -> None:
    sensor = Sensor(StubCarrier(x=10.0, y=20.0))
    rays = sensor.cast_rays()
    assert len(rays) == 8
    for start, _ in rays:
        assert start == Point(10.0, 20.0)
    first_end = rays[0][1]
    last_end = rays[-1][1]
    # Outer rays sit at +/-45 degrees; the first one leans toward -x.
    assert first_end.x < 10.0 < last_end.x
    assert math.isclose(first_end.x - 10.0, -(last_end.x - 10.0))
    assert math.isclose(first_end.y, last_end.y)
    assert math.isclose(math.hypot(first_end.x - 10.0, first_end.y - 20.0), 200.0)


def test_rays_follow_carrier_heading() -> None:
    carrier = StubCarrier(angle=math.pi / 2.0)
    sensor = Sensor(carrier, SensorConfig(ray_count=1, ray_length=100.0, ray_spread=0.0))
    end = sensor.cast_rays()[0][1]
    assert math.isclose(end.x, -100.0)
    assert math.isclose(end.y, 0.0, abs_tol=1e-9)


def test_nearest_of_border_and_obstacle_wins() -> None:
    sensor = Sensor(StubCarrier(), SensorConfig(ray_count=1, ray_spread=0.0))
    far_wall = (Point(-50.0, -180.0), Point(50.0, -180.0))
    obstacle = _square(0.0, -150.0, 10.0)  # near edge at y=-140

    sensor.update([far_wall], [obstacle])

    reading = sensor.readings[0]
    assert reading is not None
    assert math.isclose(reading.offset, 0.7)
    assert math.isclose(reading.y, -140.0)
    assert math.isclose(sensor.normalized_readings()[0], 0.3)


def test_own_polygon_is_ignored() -> None:
    own = _square(0.0, 0.0, 20.0)
    carrier = StubCarrier(polygon=own)
    sensor = Sensor(carrier, SensorConfig(ray_count=3))
    sensor.update([], [own])
    assert sensor.readings == [None, None, None]


def test_normalized_readings_bounded_and_sized() -> None:
    carrier = StubCarrier(x=100.0, y=100.0, angle=0.3)
    sensor = Sensor(carrier, SensorConfig(ray_count=5, ray_length=150.0, ray_spread=math.pi))
    borders = [
        (Point(10.0, -1e6), Point(10.0, 1e6)),
        (Point(190.0, -1e6), Point(190.0, 1e6)),
    ]
    obstacles = [_square(100.0, 0.0, 15.0), _square(60.0, 40.0, 10.0)]

    sensor.update(borders, obstacles)
    values = sensor.normalized_readings()

    assert len(values) == 5
    assert all(0.0 <= v <= 1.0 for v in values)
    assert any(v > 0.0 for v in values)


def test_normalized_readings_before_update() -> None:
    sensor = Sensor(StubCarrier(), SensorConfig(ray_count=4))
    assert sensor.normalized_readings() == [0.0] * 4


def test_invalid_config_rejected() -> None:
    with pytest.raises(ValueError):
        SensorConfig(ray_count=0)
    with pytest.raises(ValueError):
        SensorConfig(ray_length=0.0)


def test_compute_readings_casts_rays_when_needed() -> None:
    sensor = Sensor(StubCarrier(), SensorConfig(ray_count=1, ray_spread=0.0))
    readings = sensor.compute_readings([(Point(-50.0, -100.0), Point(50.0, -100.0))], [])
    assert len(readings) == 1
    assert readings[0] is not None
    assert readings[0].offset == 0.5


def test_config_rejects_fractional_count_and_non_finite_values() -> None:
    with pytest.raises(ValueError):
        SensorConfig(ray_count=2.7)
    with pytest.raises(ValueError):
        SensorConfig(ray_count=float("inf"))
    with pytest.raises(ValueError):
        SensorConfig(ray_length=float("nan"))
    with pytest.raises(ValueError):
        SensorConfig(ray_length=float("inf"))
    with pytest.raises(ValueError):
        SensorConfig(ray_spread=float("nan"))
    assert SensorConfig(ray_count=3.0).ray_count == 3

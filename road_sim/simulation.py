from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional
import math

import numpy as np

from .car import Car, CarConfig, DRIVER_AI, DRIVER_DUMMY
from .geometry_utils import Polygon
from .road import Road
from .sensors import SensorConfig
from telemetry.logger import TelemetryLogger


@dataclass
class TrafficSpec:
    """One dummy car placed on a lane at a given y."""

    lane: int
    y: float
    max_speed: float = 2.0


@dataclass
class SimConfig:
    road_x: float = 100.0
    road_width: float = 180.0
    lane_count: int = 3
    car_width: float = 30.0
    car_height: float = 50.0
    start_lane: int = 1
    start_y: float = 100.0
    num_cars: int = 1
    max_steps: int = 1000
    seed: int = 0
    car: CarConfig = field(default_factory=CarConfig)
    traffic: List[TrafficSpec] = field(default_factory=list)

    def __post_init__(self) -> None:
        if self.num_cars <= 0:
            raise ValueError(f"num_cars must be > 0, got {self.num_cars}")
        if self.max_steps <= 0:
            raise ValueError(f"max_steps must be > 0, got {self.max_steps}")

    @classmethod
    def from_dict(cls, cfg: Dict[str, Any]) -> "SimConfig":
        """Build from the parsed ``configs/sim.yaml`` mapping."""
        sim_cfg = cfg["sim"]
        road_cfg = cfg["road"]
        car_cfg = cfg["car"]
        sensor_cfg = cfg["sensor"]
        network_cfg = cfg["network"]

        sensor = SensorConfig(
            ray_count=int(sensor_cfg["ray_count"]),
            ray_length=float(sensor_cfg["ray_length"]),
            ray_spread=math.radians(float(sensor_cfg["ray_spread_deg"])),
        )
        car = CarConfig(
            max_speed=float(car_cfg["max_speed"]),
            acceleration=float(car_cfg["acceleration"]),
            friction=float(car_cfg["friction"]),
            turn_rate=float(car_cfg["turn_rate"]),
            hidden_layers=[int(n) for n in network_cfg["hidden_layers"]],
            sensor=sensor,
        )
        traffic = [
            TrafficSpec(
                lane=int(t["lane"]),
                y=float(t["y"]),
                max_speed=float(t.get("max_speed", 2.0)),
            )
            for t in cfg.get("traffic", [])
        ]
        return cls(
            road_x=float(road_cfg["x"]),
            road_width=float(road_cfg["width"]),
            lane_count=int(road_cfg.get("lane_count", 3)),
            car_width=float(car_cfg["width"]),
            car_height=float(car_cfg["height"]),
            start_lane=int(sim_cfg.get("start_lane", 1)),
            start_y=float(sim_cfg.get("start_y", 100.0)),
            num_cars=int(sim_cfg["num_cars"]),
            max_steps=int(sim_cfg["max_steps"]),
            seed=int(cfg.get("seed", 0)),
            car=car,
            traffic=traffic,
        )


class Simulation:
    """AI cars and dummy traffic on a single road, advanced tick by tick."""

    def __init__(
        self,
        config: SimConfig,
        telemetry: Optional[TelemetryLogger] = None,
    ) -> None:
        self.cfg = config
        self.telemetry = telemetry
        self.rng = np.random.default_rng(config.seed)

        self.road = Road(config.road_x, config.road_width, config.lane_count)
        start_x = self.road.lane_center(config.start_lane)
        self.cars: List[Car] = [
            Car(
                start_x,
                config.start_y,
                config.car_width,
                config.car_height,
                DRIVER_AI,
                config=config.car,
                rng=self.rng,
            )
            for _ in range(config.num_cars)
        ]
        self.traffic: List[Car] = [
            Car(
                self.road.lane_center(t.lane),
                t.y,
                config.car_width,
                config.car_height,
                DRIVER_DUMMY,
                config=CarConfig(
                    max_speed=t.max_speed,
                    acceleration=config.car.acceleration,
                    friction=config.car.friction,
                    turn_rate=config.car.turn_rate,
                ),
            )
            for t in config.traffic
        ]
        self._step_count = 0

    @property
    def step_count(self) -> int:
        return self._step_count

    def step(self) -> Dict[str, Any]:
        """Advance every car by one tick.

        Traffic moves first against the borders only. Its outlines are then
        snapshotted so every AI car senses the same obstacles this tick.
        """
        self._step_count += 1
        borders = self.road.borders

        for dummy in self.traffic:
            dummy.update(borders, [])

        snapshot: List[Polygon] = [list(dummy.polygon) for dummy in self.traffic]
        for car in self.cars:
            car.update(borders, snapshot)

        damaged = sum(1 for car in self.cars if car.damaged)
        info: Dict[str, Any] = {
            "step": self._step_count,
            "damaged": damaged,
            "alive": len(self.cars) - damaged,
            "best_y": self.best_car().y,
        }

        if self.telemetry is not None:
            self.telemetry.log_many(
                {"step": self._step_count, "car": idx, **car.to_dict()}
                for idx, car in enumerate(self.cars)
            )

        return info

    def done(self) -> bool:
        if self._step_count >= self.cfg.max_steps:
            return True
        return all(car.damaged for car in self.cars)

    def run(self) -> Dict[str, Any]:
        """Step until every AI car is damaged or max_steps is reached."""
        info: Dict[str, Any] = {"step": 0}
        while not self.done():
            info = self.step()
        return info

    def best_car(self) -> Car:
        """The AI car that travelled furthest up the road (smallest y)."""
        if not self.cars:
            raise ValueError("simulation has no AI cars")
        return min(self.cars, key=lambda car: car.y)

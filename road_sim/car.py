from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence
import math

import numpy as np

from .geometry_utils import Point, Polygon, Segment, clamp, polys_intersect
from .network import CONTROL_OUTPUTS, NeuralNetwork, evaluate
from .sensors import Sensor, SensorConfig


DRIVER_AI = "AI"
DRIVER_KEYS = "KEYS"
DRIVER_DUMMY = "DUMMY"
DRIVER_TYPES = (DRIVER_AI, DRIVER_KEYS, DRIVER_DUMMY)


@dataclass
class Controls:
    """Current driving commands of a car."""

    forward: bool = False
    left: bool = False
    right: bool = False
    reverse: bool = False

    @classmethod
    def for_driver(cls, driver: str) -> "Controls":
        """Dummy traffic always drives forward; other drivers start idle."""
        if driver not in DRIVER_TYPES:
            raise KeyError(f"Unknown driver: {driver}. Available: {list(DRIVER_TYPES)}")
        return cls(forward=driver == DRIVER_DUMMY)


@dataclass
class CarConfig:
    """Body dynamics and brain layout shared by a population of cars."""

    max_speed: float = 3.0
    acceleration: float = 0.2
    friction: float = 0.05
    turn_rate: float = 0.03
    hidden_layers: List[int] = field(default_factory=lambda: [6])
    sensor: SensorConfig = field(default_factory=SensorConfig)


class Car:
    """Rectangular car driving on a road.

    Position (x, y) is the body centre. ``angle`` is the heading in radians;
    0 points up (-y) and positive values swing the nose toward -x.
    Non-dummy cars carry a :class:`Sensor` and a :class:`NeuralNetwork`;
    only ``AI`` cars let the network drive.
    """

    def __init__(
        self,
        x: float,
        y: float,
        width: float,
        height: float,
        driver: str = DRIVER_AI,
        config: Optional[CarConfig] = None,
        rng: Optional[np.random.Generator] = None,
    ) -> None:
        self.config = config if config is not None else CarConfig()
        self.x = float(x)
        self.y = float(y)
        self.width = float(width)
        self.height = float(height)
        self.driver = driver

        self.speed = 0.0
        self.angle = 0.0
        self.damaged = False

        self.controls = Controls.for_driver(driver)
        self.polygon: Polygon = self.create_polygon()

        self.sensor: Optional[Sensor] = None
        self.brain: Optional[NeuralNetwork] = None
        if driver != DRIVER_DUMMY:
            self.sensor = Sensor(self, self.config.sensor)
            self.brain = NeuralNetwork(
                [self.sensor.ray_count, *self.config.hidden_layers, CONTROL_OUTPUTS],
                rng=rng,
            )

    @property
    def use_brain(self) -> bool:
        return self.driver == DRIVER_AI

    # ------------------------------------------------------------------
    # Tick
    # ------------------------------------------------------------------
    def update(self, borders: Sequence[Segment], traffic: Sequence[Sequence[Point]]) -> None:
        """Advance one tick.

        ``traffic`` is a snapshot of the other cars' outlines taken before
        the tick started.
        """
        if not self.damaged:
            self._move()
            self.polygon = self.create_polygon()
            self.damaged = self.assess_damage(borders, traffic)

        if self.sensor is not None and self.brain is not None:
            self.sensor.update(borders, traffic)
            controls = evaluate(self.brain, self.sensor.normalized_readings())
            if self.use_brain:
                self.controls.forward = controls.forward > 0.0
                self.controls.left = controls.left > 0.0
                self.controls.right = controls.right > 0.0
                self.controls.reverse = controls.reverse > 0.0

    # ------------------------------------------------------------------
    # Dynamics
    # ------------------------------------------------------------------
    def _move(self) -> None:
        cfg = self.config
        if self.controls.forward:
            self.speed += cfg.acceleration
        if self.controls.reverse:
            self.speed -= cfg.acceleration

        self.speed = clamp(self.speed, -cfg.max_speed / 1.5, cfg.max_speed)

        if self.speed > 0.0:
            self.speed -= cfg.friction
        elif self.speed < 0.0:
            self.speed += cfg.friction
        if abs(self.speed) < cfg.friction:
            self.speed = 0.0

        # Steering only has an effect while rolling; reversing flips it.
        if self.speed != 0.0:
            flip = 1.0 if self.speed > 0.0 else -1.0
            if self.controls.left:
                self.angle += cfg.turn_rate * flip
            if self.controls.right:
                self.angle -= cfg.turn_rate * flip

        # Both axes use the heading after this tick's turn.
        self.x -= math.sin(self.angle) * self.speed
        self.y -= math.cos(self.angle) * self.speed

    # ------------------------------------------------------------------
    # Outline and collisions
    # ------------------------------------------------------------------
    def create_polygon(self) -> Polygon:
        """Corners of the rotated body rectangle: front pair, then rear pair."""
        radius = math.hypot(self.width, self.height) / 2.0
        alpha = math.atan2(self.width, self.height)
        corners = (
            self.angle - alpha,
            self.angle + alpha,
            math.pi + self.angle - alpha,
            math.pi + self.angle + alpha,
        )
        return [
            Point(self.x - math.sin(a) * radius, self.y - math.cos(a) * radius)
            for a in corners
        ]

    def assess_damage(
        self,
        borders: Sequence[Segment],
        traffic: Sequence[Sequence[Point]],
    ) -> bool:
        """True if the outline touches a road border or another car."""
        for border in borders:
            if polys_intersect(self.polygon, border):
                return True
        for poly in traffic:
            if poly is self.polygon:
                continue
            if polys_intersect(self.polygon, poly):
                return True
        return False

    # ------------------------------------------------------------------
    # Utility
    # ------------------------------------------------------------------
    def to_dict(self) -> Dict[str, Any]:
        """Serialize current car state to a dict for logging/telemetry."""
        record: Dict[str, Any] = {
            "driver": self.driver,
            "x": self.x,
            "y": self.y,
            "angle": self.angle,
            "speed": self.speed,
            "damaged": self.damaged,
        }
        if self.sensor is not None:
            record["readings"] = self.sensor.normalized_readings()
        return record

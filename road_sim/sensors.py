from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Protocol, Sequence
import math
import numbers

from .geometry_utils import (
    Intersection,
    Point,
    Polygon,
    Segment,
    get_intersection,
    lerp,
    polygon_edges,
)


Reading = Optional[Intersection]


class Carrier(Protocol):
    """Vehicle the sensor is mounted on.

    ``angle`` is in radians; the heading direction is
    ``(-sin(angle), -cos(angle))``, so 0 points "up" (-y).
    """

    x: float
    y: float
    angle: float
    polygon: Polygon


@dataclass
class SensorConfig:
    """Configuration for the ray fan sensor."""

    ray_count: int = 8
    ray_length: float = 200.0
    ray_spread: float = math.pi / 2.0

    def __post_init__(self) -> None:
        count = self.ray_count
        integral = isinstance(count, numbers.Integral) or (
            isinstance(count, float) and count.is_integer()
        )
        if isinstance(count, bool) or not integral:
            raise ValueError(f"ray_count must be an integer, got {self.ray_count}")
        if self.ray_count <= 0:
            raise ValueError(f"ray_count must be > 0, got {self.ray_count}")
        if not math.isfinite(self.ray_length) or self.ray_length <= 0.0:
            raise ValueError(f"ray_length must be finite and > 0, got {self.ray_length}")
        if not math.isfinite(self.ray_spread):
            raise ValueError(f"ray_spread must be finite, got {self.ray_spread}")
        self.ray_count = int(self.ray_count)
        self.ray_length = float(self.ray_length)
        self.ray_spread = float(self.ray_spread)


class Sensor:
    """Fan of range-finding rays centred on the carrier's heading.

    Each carrier owns one instance; ``rays`` and ``readings`` are rebuilt on
    every :meth:`update`.
    """

    def __init__(self, carrier: Carrier, config: Optional[SensorConfig] = None) -> None:
        self.carrier = carrier
        self.config = config if config is not None else SensorConfig()
        self.rays: List[Segment] = []
        self.readings: List[Reading] = []

    @property
    def ray_count(self) -> int:
        return self.config.ray_count

    def update(self, borders: Sequence[Segment], obstacles: Sequence[Sequence[Point]]) -> None:
        """Cast rays from the carrier's current pose and refresh readings."""
        self.cast_rays()
        self.readings = self.compute_readings(borders, obstacles)

    # ------------------------------------------------------------------
    # Ray casting
    # ------------------------------------------------------------------
    def cast_rays(self) -> List[Segment]:
        cfg = self.config
        x = self.carrier.x
        y = self.carrier.y
        heading = self.carrier.angle

        self.rays = []
        for i in range(cfg.ray_count):
            t = 0.5 if cfg.ray_count == 1 else i / (cfg.ray_count - 1)
            ray_angle = lerp(cfg.ray_spread / 2.0, -cfg.ray_spread / 2.0, t) + heading

            start = Point(x, y)
            end = Point(
                x - math.sin(ray_angle) * cfg.ray_length,
                y - math.cos(ray_angle) * cfg.ray_length,
            )
            self.rays.append((start, end))
        return self.rays

    def compute_readings(
        self,
        borders: Sequence[Segment],
        obstacles: Sequence[Sequence[Point]],
    ) -> List[Reading]:
        """Nearest hit per ray against borders and obstacle outlines.

        Rays are cast first if none have been cast yet.
        """
        if not self.rays:
            self.cast_rays()
        own = self.carrier.polygon
        edges: List[Segment] = [(b[0], b[1]) for b in borders]
        for poly in obstacles:
            if poly is own:
                continue
            edges.extend(polygon_edges(poly))

        return [self._nearest_hit(ray, edges) for ray in self.rays]

    @staticmethod
    def _nearest_hit(ray: Segment, edges: Sequence[Segment]) -> Reading:
        """Minimum-offset intersection; on equal offsets the first edge scanned wins."""
        start, end = ray
        best: Reading = None
        for a, b in edges:
            touch = get_intersection(start, end, a, b)
            if touch is None:
                continue
            if best is None or touch.offset < best.offset:
                best = touch
        return best

    # ------------------------------------------------------------------
    # Network input
    # ------------------------------------------------------------------
    def normalized_readings(self) -> List[float]:
        """0.0 for no hit, otherwise 1 - offset (closer obstacles read higher).

        Before the first update every ray reads 0.0.
        """
        if not self.readings:
            return [0.0] * self.ray_count
        return [0.0 if r is None else 1.0 - r.offset for r in self.readings]

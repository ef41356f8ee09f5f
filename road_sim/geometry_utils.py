"""
Geometry utilities for the road simulation.

Provides points, segment intersection and polygon overlap tests used by
the ray sensor and by collision (damage) checks.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple


# Denominators below this magnitude are treated as parallel / degenerate.
EPSILON = 1e-10


@dataclass(frozen=True)
class Point:
    """Immutable 2D point in world coordinates (y grows downward)."""

    x: float
    y: float


Segment = Tuple[Point, Point]
Polygon = List[Point]


@dataclass(frozen=True)
class Intersection:
    """Result of a segment-segment intersection test."""

    point: Point
    offset: float  # parameter along the first (ray) segment, [0,1]

    @property
    def x(self) -> float:
        return self.point.x

    @property
    def y(self) -> float:
        return self.point.y


# ---------------------------------------------------------------------------
# Scalar helpers
# ---------------------------------------------------------------------------


def lerp(a: float, b: float, t: float) -> float:
    """Linear interpolation: a + t*(b - a), t typically in [0,1]."""
    return a + t * (b - a)


def clamp(value: float, vmin: float, vmax: float) -> float:
    """Clamp value to [vmin, vmax]."""
    return max(vmin, min(vmax, value))


# ---------------------------------------------------------------------------
# Segment intersection
# ---------------------------------------------------------------------------


def get_intersection(
    p1: Point,
    p2: Point,
    p3: Point,
    p4: Point,
) -> Optional[Intersection]:
    """
    Find intersection of segment p1-p2 (the ray) with segment p3-p4.

    Returns an Intersection whose offset is the parameter along p1-p2,
    or None when the segments are parallel, degenerate or do not touch.
    """
    den = (p1.x - p2.x) * (p3.y - p4.y) - (p1.y - p2.y) * (p3.x - p4.x)
    if abs(den) < EPSILON:
        return None

    t_num = (p1.x - p3.x) * (p3.y - p4.y) - (p1.y - p3.y) * (p3.x - p4.x)
    u_num = (p1.x - p3.x) * (p1.y - p2.y) - (p1.y - p3.y) * (p1.x - p2.x)
    t = t_num / den
    u = u_num / den

    if 0.0 <= t <= 1.0 and 0.0 <= u <= 1.0:
        point = Point(lerp(p1.x, p2.x, t), lerp(p1.y, p2.y, t))
        return Intersection(point=point, offset=t)
    return None


# ---------------------------------------------------------------------------
# Polygon helpers
# ---------------------------------------------------------------------------


def polygon_edges(poly: Sequence[Point]) -> List[Segment]:
    """Consecutive edges of a polygon, wrapping the last vertex to the first."""
    n = len(poly)
    return [(poly[i], poly[(i + 1) % n]) for i in range(n)]


def polys_intersect(poly_a: Sequence[Point], poly_b: Sequence[Point]) -> bool:
    """True if any edge of poly_a touches any edge of poly_b.

    A two-point "polygon" is a single segment traversed both ways, so road
    borders can be passed directly.
    """
    edges_b = polygon_edges(poly_b)
    for a1, a2 in polygon_edges(poly_a):
        for b1, b2 in edges_b:
            if get_intersection(a1, a2, b1, b2) is not None:
                return True
    return False
